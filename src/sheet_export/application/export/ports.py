"""Application export – SheetWriter and Destination ports."""
from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable

__all__ = ["BufferedRow", "Destination", "RowHandle", "SheetWriter"]


@runtime_checkable
class RowHandle(Protocol):
    def set_cell(self, index: int, value: str) -> None: ...


@runtime_checkable
class SheetWriter(Protocol):
    """Port over a tabular output codec.

    Every writer exposes the same ``compact``/``release`` capabilities, so
    callers never need to know which format they are driving.
    """

    def create_row(self, index: int) -> RowHandle: ...

    def compact(self) -> None:
        """Hint: move buffered rows out of memory.  Never changes output."""
        ...

    def serialize(self, stream: BinaryIO) -> None: ...

    def release(self) -> None:
        """Free held resources.  Idempotent; safe before any row exists."""
        ...


@runtime_checkable
class Destination(Protocol):
    """Where the finished artifact goes, and whether anyone still wants it."""

    def is_live(self) -> bool: ...

    def open(self) -> BinaryIO: ...


class BufferedRow:
    """In-memory :class:`RowHandle` shared by the bundled writers."""

    __slots__ = ("_cells",)

    def __init__(self) -> None:
        self._cells: dict[int, str] = {}

    def set_cell(self, index: int, value: str) -> None:
        if index < 0:
            raise IndexError(f"cell index must be >= 0, got {index}")
        self._cells[index] = value

    def values(self, fill: str = "") -> list[str]:
        """Cells in column order; gaps are filled with *fill*."""
        if not self._cells:
            return []
        width = max(self._cells) + 1
        return [self._cells.get(i, fill) for i in range(width)]

    def __len__(self) -> int:
        return len(self._cells)
