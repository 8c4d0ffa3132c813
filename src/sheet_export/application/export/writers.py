"""Application export – writer factory."""
from __future__ import annotations

from typing import Any

from sheet_export.application.export.csv_writer import CsvSheetWriter
from sheet_export.application.export.ports import SheetWriter
from sheet_export.application.export.xlsx_writer import XlsxSheetWriter
from sheet_export.config.settings.export import SUPPORTED_FORMATS
from sheet_export.config.validation import UnsupportedFormatError

__all__ = ["create_writer"]


def create_writer(format: str, **kwargs: Any) -> SheetWriter:  # noqa: A002
    """Return a fresh writer for *format* (``"xlsx"`` or ``"csv"``)."""
    if format == "xlsx":
        return XlsxSheetWriter(**kwargs)
    if format == "csv":
        return CsvSheetWriter(**kwargs)
    raise UnsupportedFormatError(format, SUPPORTED_FORMATS)
