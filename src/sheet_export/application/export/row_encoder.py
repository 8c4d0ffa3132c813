"""Application export – RowEncoder."""
from __future__ import annotations

from typing import Any, Mapping

from sheet_export.application.export.header import HeaderSet

__all__ = ["PLACEHOLDER", "RowEncoder"]

PLACEHOLDER = "-"


class RowEncoder:
    """Aligns a flattened record to the header columns.

    Missing values, ``None`` and values whose string form is blank are
    rendered as :data:`PLACEHOLDER`.
    """

    def __init__(self, placeholder: str = PLACEHOLDER) -> None:
        self._placeholder = placeholder

    @property
    def placeholder(self) -> str:
        return self._placeholder

    def encode(self, flat_record: Mapping[str, Any], header: HeaderSet) -> list[str]:
        return [self.cell(flat_record.get(name)) for name in header.columns()]

    def cell(self, value: Any) -> str:
        if value is None:
            return self._placeholder
        text = str(value)
        return text if text.strip() else self._placeholder
