"""Application export – XlsxSheetWriter (openpyxl, write-only workbook)."""
from __future__ import annotations

import os
from typing import BinaryIO

import openpyxl
from openpyxl.cell import WriteOnlyCell
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils.exceptions import IllegalCharacterError

from sheet_export.application.export.ports import BufferedRow

__all__ = ["XlsxSheetWriter"]


class _XlsxRow(BufferedRow):
    __slots__ = ()

    def set_cell(self, index: int, value: str) -> None:
        if ILLEGAL_CHARACTERS_RE.search(value):
            raise IllegalCharacterError(f"{value!r} cannot be used in worksheets.")
        super().set_cell(index, value)


class XlsxSheetWriter:
    """Streams rows into a single-sheet ``.xlsx`` workbook.

    Rows stay buffered in memory until :meth:`compact` hands them to the
    write-only worksheet, which spools them to disk.  Rows must be created
    in increasing index order once streamed; skipped indices become empty
    rows.

    Every cell is written as a literal string: ``"=1+1"`` stays text and
    ``"#N/A"`` is not turned into an error cell.
    """

    def __init__(self, title: str | None = None) -> None:
        self._workbook = openpyxl.Workbook(write_only=True)
        # sheet name limit
        self._sheet = self._workbook.create_sheet(title[:31] if title else None)
        self._pending: dict[int, _XlsxRow] = {}
        self._streamed = 0
        self._saved = False
        self._released = False

    @property
    def buffered_rows(self) -> int:
        return len(self._pending)

    @property
    def streamed_rows(self) -> int:
        return self._streamed

    @property
    def spool_path(self) -> str | None:
        """Temp file backing the streamed rows, once the sheet has one."""
        writer = getattr(self._sheet, "_writer", None)
        out = getattr(writer, "out", None)
        return out if isinstance(out, str) else None

    def create_row(self, index: int) -> _XlsxRow:
        self._ensure_open()
        if index < self._streamed or index in self._pending:
            raise ValueError(f"row {index} has already been created")
        row = _XlsxRow()
        self._pending[index] = row
        return row

    def compact(self) -> None:
        self._ensure_open()
        for index in sorted(self._pending):
            while self._streamed < index:
                self._sheet.append([])
                self._streamed += 1
            self._sheet.append([self._text_cell(value) for value in self._pending[index].values()])
            self._streamed += 1
        self._pending.clear()

    def serialize(self, stream: BinaryIO) -> None:
        self.compact()
        self._workbook.save(stream)
        self._saved = True

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._pending.clear()
        if not self._saved:
            self._discard_spool()
        self._workbook.close()

    def _text_cell(self, value: str) -> WriteOnlyCell:
        cell = WriteOnlyCell(self._sheet, value)
        cell.data_type = "s"
        return cell

    def _discard_spool(self) -> None:
        # save() removes the spool itself; an unsaved sheet keeps it open
        rows = getattr(self._sheet, "_rows", None)
        if rows is not None:
            rows.close()
        writer = getattr(self._sheet, "_writer", None)
        if writer is None:
            return
        path = self.spool_path
        writer.close()
        if path is not None and os.path.exists(path):
            writer.cleanup()

    def _ensure_open(self) -> None:
        if self._released:
            raise ValueError("writer has been released")
