"""Application export – CsvSheetWriter."""
from __future__ import annotations

import csv
import tempfile
from typing import BinaryIO

from sheet_export.application.export.ports import BufferedRow

__all__ = ["CsvSheetWriter"]

_SPOOL_MAX_SIZE = 8 * 1024 * 1024


class CsvSheetWriter:
    """Streams rows into CSV text (UTF-8, optional BOM).

    Buffered rows are written to a spooled temporary file on :meth:`compact`,
    which keeps small exports in memory and moves large ones to disk.
    """

    def __init__(
        self,
        delimiter: str = ",",
        quoting: int = csv.QUOTE_MINIMAL,
        *,
        bom: bool = False,
        encoding: str = "utf-8",
    ) -> None:
        self._encoding = encoding
        self._spool = tempfile.SpooledTemporaryFile(
            max_size=_SPOOL_MAX_SIZE, mode="w+", encoding=encoding, newline=""
        )
        if bom:
            self._spool.write("\ufeff")  # BOM for Excel compatibility
        self._writer = csv.writer(self._spool, delimiter=delimiter, quoting=quoting)
        self._pending: dict[int, BufferedRow] = {}
        self._written = 0
        self._released = False

    def create_row(self, index: int) -> BufferedRow:
        self._ensure_open()
        if index < self._written or index in self._pending:
            raise ValueError(f"row {index} has already been created")
        row = BufferedRow()
        self._pending[index] = row
        return row

    def compact(self) -> None:
        self._ensure_open()
        for index in sorted(self._pending):
            while self._written < index:
                self._writer.writerow([])
                self._written += 1
            self._writer.writerow(self._pending[index].values())
            self._written += 1
        self._pending.clear()

    def serialize(self, stream: BinaryIO) -> None:
        self.compact()
        self._spool.flush()
        self._spool.seek(0)
        # chunked so a disk-backed spool is never read whole
        while chunk := self._spool.read(64 * 1024):
            stream.write(chunk.encode(self._encoding))

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._pending.clear()
        self._spool.close()

    def _ensure_open(self) -> None:
        if self._released:
            raise ValueError("writer has been released")
