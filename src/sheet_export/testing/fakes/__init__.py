"""Testing fakes – in-memory doubles for export ports."""
from sheet_export.testing.fakes.cursor import InMemoryCursor
from sheet_export.testing.fakes.writer import RecordingSheetWriter

__all__ = ["InMemoryCursor", "RecordingSheetWriter"]
