"""Application export – FileDestination, BufferDestination."""
from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO, Callable

__all__ = ["BufferDestination", "FileDestination"]


class FileDestination:
    """Writes the artifact to *path*.

    *is_live* is an optional probe (e.g. "is the requesting client still
    connected?"); without one the destination is always live.
    """

    def __init__(self, path: str | Path, is_live: Callable[[], bool] | None = None) -> None:
        self.path = Path(path)
        self._probe = is_live

    def is_live(self) -> bool:
        return self._probe is None or bool(self._probe())

    def open(self) -> BinaryIO:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return self.path.open("wb")


class _CapturingBuffer(io.BytesIO):
    def __init__(self, owner: BufferDestination) -> None:
        super().__init__()
        self._owner = owner

    def close(self) -> None:
        if not self.closed:
            self._owner._value = self.getvalue()
        super().close()


class BufferDestination:
    """In-memory destination; the artifact is available via :meth:`getvalue`."""

    def __init__(self, live: bool = True) -> None:
        self.live = live
        self.opened = 0
        self._value: bytes | None = None

    def is_live(self) -> bool:
        return self.live

    def open(self) -> BinaryIO:
        self.opened += 1
        return _CapturingBuffer(self)

    @property
    def written(self) -> bool:
        return self._value is not None

    def getvalue(self) -> bytes:
        if self._value is None:
            raise ValueError("nothing has been written to this destination")
        return self._value
