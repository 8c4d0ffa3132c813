"""Application pagination – ScrollPage, Cursor."""
from __future__ import annotations

import dataclasses
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

Record = Mapping[str, Any]


@dataclasses.dataclass(frozen=True)
class ScrollPage:
    """One batch returned by a scroll request.

    ``scroll_id`` is the opaque continuation token; ``None`` means the scroll
    is exhausted.  ``total_hits`` is informational and may be unknown.
    """

    records: Sequence[Record] = ()
    scroll_id: str | None = None
    total_hits: int | None = None

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return len(self.records) == 0

    @property
    def has_more(self) -> bool:
        """Whether advancing could yield further records."""
        return self.scroll_id is not None and not self.is_empty


@runtime_checkable
class Cursor(Protocol):
    """Port over a scroll-style pagination protocol.

    The cursor is handed to the pipeline already positioned at its first
    page; ``advance`` fetches the page following *scroll_id* and makes it
    the new :meth:`current` page.  An empty page with no ``scroll_id``
    marks the definitive end.
    """

    def current(self) -> ScrollPage: ...

    async def advance(self, scroll_id: str) -> ScrollPage: ...


__all__ = ["Cursor", "Record", "ScrollPage"]
