"""Elasticsearch adapter – ElasticsearchScrollCursor."""
from __future__ import annotations

from typing import Any, Mapping, Sequence

import httpx

from sheet_export.application.pagination import ScrollPage
from sheet_export.config.settings import ExportSettings
from sheet_export.kernel.errors import ExternalServiceError, TimeoutError as InfraTimeoutError
from sheet_export.observability.logging import get_logger

__all__ = ["ElasticsearchScrollCursor"]


class ElasticsearchScrollCursor:
    """Scroll cursor talking to Elasticsearch over HTTP.

    Usage::

        settings = SettingsFactory.create(ExportSettings, [ParamsSettingsLoader(params)])
        async with ElasticsearchScrollCursor.from_settings(settings, "http://localhost:9200") as cursor:
            await cursor.start("logs-*", {"match": {"level": "error"}}, size=500)
            result = await ExportService().export(cursor, FileDestination("errors.xlsx"), settings)

    Each page exposes the hits' ``_source`` documents as records.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        scroll: str = "1m",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        **client_kwargs: Any,
    ) -> None:
        self._scroll = scroll
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout, **client_kwargs)
        self._page: ScrollPage | None = None
        self._log = get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: ExportSettings,
        base_url: str = "",
        **kwargs: Any,
    ) -> "ElasticsearchScrollCursor":
        """Build a cursor whose keep-alive is the export's ``scroll`` setting.

        Pass the same *settings* to :meth:`ExportService.export` so a
        request's ``?scroll=`` reaches every search and scroll call.
        """
        return cls(base_url, scroll=settings.scroll, **kwargs)

    @property
    def scroll(self) -> str:
        return self._scroll

    async def __aenter__(self) -> "ElasticsearchScrollCursor":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def start(
        self,
        index: str,
        query: Mapping[str, Any] | None = None,
        *,
        size: int = 100,
        sort: Sequence[Any] = ("_doc",),
        source: Sequence[str] | None = None,
    ) -> ScrollPage:
        """Open a scroll context on *index* and position at its first page."""
        body: dict[str, Any] = {
            "size": size,
            "query": dict(query) if query is not None else {"match_all": {}},
            "sort": list(sort),
        }
        if source is not None:
            body["_source"] = list(source)
        data = await self._request("POST", f"/{index}/_search", params={"scroll": self._scroll}, json=body)
        self._page = self._to_page(data)
        return self._page

    def current(self) -> ScrollPage:
        if self._page is None:
            raise RuntimeError("Scroll has not been started; call start() first.")
        return self._page

    async def advance(self, scroll_id: str) -> ScrollPage:
        data = await self._request(
            "POST",
            "/_search/scroll",
            json={"scroll": self._scroll, "scroll_id": scroll_id},
        )
        self._page = self._to_page(data)
        return self._page

    async def clear(self) -> None:
        """Release the server-side scroll context, if any."""
        if self._page is None or self._page.scroll_id is None:
            return
        scroll_id = self._page.scroll_id
        await self._request("DELETE", "/_search/scroll", json={"scroll_id": [scroll_id]})
        self._page = ScrollPage(total_hits=self._page.total_hits)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _to_page(data: Mapping[str, Any]) -> ScrollPage:
        hits = data.get("hits") or {}
        total = hits.get("total")
        if isinstance(total, Mapping):
            total = total.get("value")
        return ScrollPage(
            records=[hit.get("_source") or {} for hit in hits.get("hits") or []],
            scroll_id=data.get("_scroll_id"),
            total_hits=total,
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise InfraTimeoutError(f"Elasticsearch request timed out: {method} {url}") from exc
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceError(
                service="elasticsearch",
                message=f"HTTP {exc.response.status_code} from {method} {url}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceError(service="elasticsearch", message=str(exc)) from exc
        self._log.debug("elasticsearch.response", method=method, url=url, status=response.status_code)
        return response.json()
