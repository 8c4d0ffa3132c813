"""Application export – stream scrolled search results into spreadsheets."""
from sheet_export.application.export.csv_writer import CsvSheetWriter
from sheet_export.application.export.destinations import BufferDestination, FileDestination
from sheet_export.application.export.flat_map import FlatRecord, flatten
from sheet_export.application.export.header import HeaderSet
from sheet_export.application.export.pipeline import (
    COMPACT_EVERY,
    ExportPipeline,
    ExportResult,
    ExportState,
    PipelineState,
)
from sheet_export.application.export.ports import BufferedRow, Destination, RowHandle, SheetWriter
from sheet_export.application.export.row_encoder import PLACEHOLDER, RowEncoder
from sheet_export.application.export.service import ExportService
from sheet_export.application.export.writers import create_writer
from sheet_export.application.export.xlsx_writer import XlsxSheetWriter

__all__ = [
    "BufferDestination",
    "BufferedRow",
    "COMPACT_EVERY",
    "CsvSheetWriter",
    "Destination",
    "ExportPipeline",
    "ExportResult",
    "ExportService",
    "ExportState",
    "FileDestination",
    "FlatRecord",
    "HeaderSet",
    "PLACEHOLDER",
    "PipelineState",
    "RowEncoder",
    "RowHandle",
    "SheetWriter",
    "XlsxSheetWriter",
    "create_writer",
    "flatten",
]
