"""Application – export use case and its ports (framework-agnostic)."""

from sheet_export.application.export import (
    ExportPipeline,
    ExportResult,
    ExportService,
    HeaderSet,
    RowEncoder,
    flatten,
)
from sheet_export.application.pagination import Cursor, ScrollPage

__all__ = [
    "Cursor",
    "ExportPipeline",
    "ExportResult",
    "ExportService",
    "HeaderSet",
    "RowEncoder",
    "ScrollPage",
    "flatten",
]
