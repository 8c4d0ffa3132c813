"""Config settings – ExportSettings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from sheet_export.config.settings.base import Settings
from sheet_export.config.validation import InvalidSettingValueError, UnsupportedFormatError

SUPPORTED_FORMATS = ("xlsx", "csv")


@dataclasses.dataclass
class ExportSettings(Settings):
    """Caller-facing knobs of one export.

    ``fields`` selects fixed-column mode when non-empty; otherwise columns are
    discovered from the records.  The compaction threshold is deliberately not
    configurable here.
    """

    _prefix: ClassVar[str] = "SHEET_EXPORT"

    append_header: bool = True
    fields: list[str] = dataclasses.field(default_factory=list)
    scroll: str = "1m"
    format: str = "xlsx"
    first_scan: bool = False

    def _validate(self) -> None:
        if self.format not in SUPPORTED_FORMATS:
            raise UnsupportedFormatError(self.format, SUPPORTED_FORMATS)
        if not self.scroll.strip():
            raise InvalidSettingValueError("scroll", self.scroll, "keep-alive must not be blank")


__all__ = ["ExportSettings", "SUPPORTED_FORMATS"]
