"""Application export – ExportService wires settings into a pipeline."""
from __future__ import annotations

import time
from typing import Any, Callable

from sheet_export.application.export.header import HeaderSet
from sheet_export.application.export.pipeline import ExportPipeline, ExportResult
from sheet_export.application.export.ports import Destination, SheetWriter
from sheet_export.application.export.writers import create_writer
from sheet_export.application.pagination import Cursor
from sheet_export.config.settings import ExportSettings
from sheet_export.observability.logging import get_logger

__all__ = ["ExportService"]


class ExportService:
    """Builds and runs one :class:`ExportPipeline` per call."""

    def __init__(self, writer_factory: Callable[..., SheetWriter] = create_writer) -> None:
        self._writer_factory = writer_factory
        self._log = get_logger(__name__)

    def build(
        self,
        cursor: Cursor,
        destination: Destination,
        settings: ExportSettings | None = None,
        **writer_options: Any,
    ) -> ExportPipeline:
        settings = settings or ExportSettings()
        return ExportPipeline(
            cursor,
            HeaderSet(settings.fields),
            self._writer_factory(settings.format, **writer_options),
            destination,
            append_header=settings.append_header,
            first_scan=settings.first_scan,
        )

    async def export(
        self,
        cursor: Cursor,
        destination: Destination,
        settings: ExportSettings | None = None,
        **writer_options: Any,
    ) -> ExportResult:
        start = time.monotonic()
        pipeline = self.build(cursor, destination, settings, **writer_options)
        result = await pipeline.run()
        self._log.info(
            "export.completed",
            rows=result.rows,
            batches=result.batches,
            duration_ms=round((time.monotonic() - start) * 1000, 3),
        )
        return result
