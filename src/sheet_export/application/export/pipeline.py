"""Application export – ExportPipeline.

Drives a scroll cursor to exhaustion and streams every record into a
:class:`~sheet_export.application.export.ports.SheetWriter`::

    START → AWAITING_BATCH → PROCESSING → ADVANCING → AWAITING_BATCH → …
                                     ↘ FINALIZING → DONE
    (any non-terminal state) → FAILED

The loop is a plain ``while`` over awaited batches, so stack depth does not
grow with the size of the result set.  :meth:`ExportPipeline.run` either
returns an :class:`ExportResult` or raises an
:class:`~sheet_export.kernel.errors.ExportError`, exactly once.
"""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Mapping, Sequence

from sheet_export.application.export.flat_map import flatten
from sheet_export.application.export.header import HeaderSet
from sheet_export.application.export.ports import Destination, SheetWriter
from sheet_export.application.export.row_encoder import RowEncoder
from sheet_export.application.pagination import Cursor, ScrollPage
from sheet_export.kernel.errors import (
    DisconnectError,
    EncodingError,
    ExportError,
    PipelineStateError,
    RetrievalError,
    SerializationError,
)
from sheet_export.observability.logging import get_logger

__all__ = ["COMPACT_EVERY", "ExportPipeline", "ExportResult", "ExportState", "PipelineState"]

#: Data rows between two ``writer.compact()`` calls.
COMPACT_EVERY = 1000


class PipelineState(str, Enum):
    START = "start"
    AWAITING_BATCH = "awaiting_batch"
    PROCESSING = "processing"
    ADVANCING = "advancing"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.FAILED)


@dataclasses.dataclass
class ExportState:
    """Mutable progress of one export; owned by a single pipeline."""

    phase: PipelineState = PipelineState.START
    row_count: int = 0
    header_written: bool = False
    scroll_id: str | None = None
    batches: int = 0
    retrieval_steps: int = 0

    @property
    def terminal(self) -> bool:
        return self.phase.is_terminal

    @property
    def next_row_index(self) -> int:
        return self.row_count + (1 if self.header_written else 0)


@dataclasses.dataclass(frozen=True)
class ExportResult:
    """Summary handed back once an export has been finalized."""

    rows: int
    batches: int
    retrieval_steps: int
    columns: tuple[str, ...]
    header_written: bool


class ExportPipeline:
    """Streams a scrolled result set into a spreadsheet.

    Parameters
    ----------
    cursor:
        Scroll cursor already positioned at the first batch.
    header:
        Fixed or discovered :class:`HeaderSet`.
    writer:
        Output codec; released on every exit path.
    destination:
        Liveness probe and target stream for the finished artifact.
    append_header:
        Emit a header row before the first data row.
    first_scan:
        The first batch is a scan-priming response: skip it and advance
        straight away with its scroll id.
    encoder:
        Row encoder; defaults to one using the ``-`` placeholder.
    """

    def __init__(
        self,
        cursor: Cursor,
        header: HeaderSet,
        writer: SheetWriter,
        destination: Destination,
        *,
        append_header: bool = True,
        first_scan: bool = False,
        encoder: RowEncoder | None = None,
    ) -> None:
        self._cursor = cursor
        self._header = header
        self._writer = writer
        self._destination = destination
        self._append_header = append_header
        self._first_scan = first_scan
        self._encoder = encoder or RowEncoder()
        self._state = ExportState()
        self._log = get_logger(__name__)

    @property
    def state(self) -> ExportState:
        return self._state

    @property
    def header(self) -> HeaderSet:
        return self._header

    async def run(self) -> ExportResult:
        if self._state.phase is not PipelineState.START:
            raise PipelineStateError(
                f"Export pipeline cannot run from state {self._state.phase.value!r}."
            )
        self._log.debug(
            "export.started",
            append_header=self._append_header,
            fixed_columns=list(self._header.columns()) if self._header.is_fixed else None,
            writer=type(self._writer).__name__,
        )
        try:
            page = await self._first_page()
            while True:
                self._await_batch()
                self._process(page)
                if page.is_empty or page.scroll_id is None:
                    break
                page = await self._advance(page.scroll_id)
            self._finalize()
        except ExportError as exc:
            self._state.phase = PipelineState.FAILED
            self._log.warning(
                "export.failed",
                code=exc.code,
                cause=repr(exc.cause) if exc.cause is not None else None,
                rows=self._state.row_count,
                batches=self._state.batches,
            )
            raise
        finally:
            if self._state.phase is not PipelineState.DONE:
                self._state.phase = PipelineState.FAILED
                self._writer.release()

        return ExportResult(
            rows=self._state.row_count,
            batches=self._state.batches,
            retrieval_steps=self._state.retrieval_steps,
            columns=self._header.columns(),
            header_written=self._state.header_written,
        )

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    async def _first_page(self) -> ScrollPage:
        try:
            page = self._cursor.current()
        except Exception as exc:
            raise RetrievalError("Failed to read the first batch.", cause=exc) from exc
        self._state.retrieval_steps += 1
        self._state.scroll_id = page.scroll_id

        if not self._first_scan:
            return page
        self._await_batch()
        if page.scroll_id is None:
            raise RetrievalError("Scan response carried no scroll id.")
        return await self._advance(page.scroll_id)

    def _await_batch(self) -> None:
        self._state.phase = PipelineState.AWAITING_BATCH
        try:
            live = self._destination.is_live()
        except Exception as exc:
            raise DisconnectError(cause=exc) from exc
        if not live:
            raise DisconnectError(
                detail={"rows": self._state.row_count, "batches": self._state.batches}
            )

    def _process(self, page: ScrollPage) -> None:
        self._state.phase = PipelineState.PROCESSING
        self._state.batches += 1
        self._log.info(
            "export.batch",
            scroll_id=page.scroll_id,
            total_hits=page.total_hits,
            hits=len(page),
            current=self._state.row_count + len(page),
        )
        for record in page.records:
            try:
                self._write_record(record)
            except ExportError:
                raise
            except Exception as exc:
                raise EncodingError(
                    f"Failed to write record {self._state.row_count + 1}.",
                    cause=exc,
                    detail={"batch": self._state.batches},
                ) from exc

    async def _advance(self, scroll_id: str) -> ScrollPage:
        self._state.phase = PipelineState.ADVANCING
        try:
            page = await self._cursor.advance(scroll_id)
        except Exception as exc:
            raise RetrievalError(
                "Failed to retrieve the next batch.",
                cause=exc,
                detail={"scroll_id": scroll_id},
            ) from exc
        self._state.retrieval_steps += 1
        self._state.scroll_id = page.scroll_id
        return page

    def _finalize(self) -> None:
        self._state.phase = PipelineState.FINALIZING
        if self._append_header and not self._state.header_written and self._header.freeze():
            try:
                self._write_header()
            except Exception as exc:
                raise EncodingError("Failed to write the header row.", cause=exc) from exc

        try:
            stream = self._destination.open()
            try:
                self._writer.serialize(stream)
                stream.flush()
            finally:
                stream.close()
        except Exception as exc:
            raise SerializationError("Failed to write data.", cause=exc) from exc
        finally:
            self._writer.release()

        self._state.phase = PipelineState.DONE
        dropped = len(self._header.observed()) - len(self._header)
        self._log.info(
            "export.finalized",
            rows=self._state.row_count,
            batches=self._state.batches,
            columns=len(self._header),
            dropped_keys=dropped,
        )

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def _write_record(self, record: Mapping[str, Any]) -> None:
        flat = flatten(record)
        self._header.observe_all(flat)
        self._header.freeze()

        if self._append_header and not self._state.header_written:
            self._write_header()

        index = self._state.next_row_index
        self._state.row_count += 1
        self._append_row(index, self._encoder.encode(flat, self._header))

        if self._state.row_count % COMPACT_EVERY == 0:
            self._writer.compact()
            self._log.debug("export.compacted", rows=self._state.row_count)

    def _write_header(self) -> None:
        self._append_row(self._state.next_row_index, self._header.columns())
        self._state.header_written = True

    def _append_row(self, index: int, cells: Sequence[str]) -> None:
        row = self._writer.create_row(index)
        for position, value in enumerate(cells):
            row.set_cell(position, value)
