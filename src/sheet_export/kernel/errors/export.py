"""Export errors – the failure kinds an export pipeline can surface.

Every kind is fatal to the export.  Kinds raised before finalization mean
nothing was written; :class:`SerializationError` means the output may be
incomplete because rows were already buffered in the writer.
"""

from __future__ import annotations

from typing import Any

from sheet_export.kernel.errors.base import BaseError


class ExportError(BaseError):
    """Pipeline-level failure wrapping the underlying cause."""

    default_code = "export_failed"

    #: ``True`` when a (possibly truncated) artifact may have been written.
    output_may_be_incomplete: bool = False


class DisconnectError(ExportError):
    """The destination was no longer live at a batch boundary."""

    default_code = "disconnected"

    def __init__(self, message: str = "Disconnected.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class RetrievalError(ExportError):
    """The cursor failed to deliver the next batch."""

    default_code = "retrieval_failed"


class EncodingError(ExportError):
    """A record could not be flattened, encoded or appended to the sheet."""

    default_code = "encoding_failed"


class SerializationError(ExportError):
    """Finalization failed while writing the output artifact."""

    default_code = "serialization_failed"
    output_may_be_incomplete = True


__all__ = [
    "DisconnectError",
    "EncodingError",
    "ExportError",
    "RetrievalError",
    "SerializationError",
]
