"""Application export – HeaderSet."""
from __future__ import annotations

from typing import Iterable, Iterator

__all__ = ["HeaderSet"]


class HeaderSet:
    """Ordered, de-duplicated set of column names.

    Runs in one of two modes:

    * **fixed** – built from a non-empty column list; membership and order
      never change.
    * **discovered** – starts empty and appends each key the first time it
      is :meth:`observe`-d.

    :meth:`freeze` takes the snapshot that :meth:`columns` returns from then
    on.  Keys observed afterwards are still recorded (see :meth:`observed`)
    but never become columns, so rows already written stay aligned.
    """

    def __init__(self, fixed_columns: Iterable[str] = ()) -> None:
        fixed = tuple(dict.fromkeys(fixed_columns))
        self._fixed = bool(fixed)
        self._observed: dict[str, None] = dict.fromkeys(fixed)
        self._snapshot: tuple[str, ...] | None = fixed if self._fixed else None

    @property
    def is_fixed(self) -> bool:
        return self._fixed

    @property
    def is_frozen(self) -> bool:
        return self._snapshot is not None

    def observe(self, key: str) -> None:
        """Record *key*; a no-op in fixed mode or when already present."""
        if self._fixed:
            return
        if key not in self._observed:
            self._observed[key] = None

    def observe_all(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.observe(key)

    def freeze(self) -> tuple[str, ...]:
        """Pin the current columns and return them.  Idempotent."""
        if self._snapshot is None:
            self._snapshot = tuple(self._observed)
        return self._snapshot

    def columns(self) -> tuple[str, ...]:
        if self._snapshot is not None:
            return self._snapshot
        return tuple(self._observed)

    def observed(self) -> tuple[str, ...]:
        """Every key seen so far, including ones observed after freezing."""
        return tuple(self._observed)

    def __len__(self) -> int:
        return len(self.columns())

    def __iter__(self) -> Iterator[str]:
        return iter(self.columns())

    def __contains__(self, key: object) -> bool:
        return key in self.columns()

    def __repr__(self) -> str:
        mode = "fixed" if self._fixed else "discovered"
        return f"HeaderSet(mode={mode!r}, columns={list(self.columns())!r})"
