"""Testing – in-memory doubles for the export ports."""
from sheet_export.testing.fakes import InMemoryCursor, RecordingSheetWriter

__all__ = ["InMemoryCursor", "RecordingSheetWriter"]
