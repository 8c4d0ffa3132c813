"""Application export – flatten nested records into dot-joined paths."""
from __future__ import annotations

from typing import Any, Mapping

__all__ = ["FlatRecord", "flatten"]

FlatRecord = dict[str, Any]


def flatten(record: Mapping[str, Any], prefix: str = "") -> FlatRecord:
    """Flatten *record* into a single-level mapping of ``a.b.c`` paths.

    Nested mappings are walked depth-first in key order.  Sequences are
    expanded without indices: every element is walked under the sequence's
    own path, so a later scalar element replaces an earlier one.  Colliding
    paths keep the position of their first occurrence and the value of
    their last.  Empty mappings and sequences contribute nothing.

    >>> flatten({"a": "1", "b": {"c": "2"}})
    {'a': '1', 'b.c': '2'}
    """
    if not isinstance(record, Mapping):
        raise TypeError(f"record must be a mapping, got {type(record).__name__}")
    out: FlatRecord = {}
    for key, value in record.items():
        _walk(_join(prefix, key), value, out)
    return out


def _join(prefix: str, key: Any) -> str:
    return f"{prefix}.{key}" if prefix else str(key)


def _walk(path: str, value: Any, out: FlatRecord) -> None:
    if isinstance(value, Mapping):
        for key, child in value.items():
            _walk(_join(path, key), child, out)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _walk(path, item, out)
    else:
        out[path] = value
