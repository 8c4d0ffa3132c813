"""Kernel – framework-agnostic building blocks (error hierarchy)."""

from sheet_export.kernel.errors import (
    ApplicationError,
    BaseError,
    DisconnectError,
    EncodingError,
    ExportError,
    ExternalServiceError,
    InfrastructureError,
    PipelineStateError,
    RetrievalError,
    SerializationError,
    TimeoutError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "DisconnectError",
    "EncodingError",
    "ExportError",
    "ExternalServiceError",
    "InfrastructureError",
    "PipelineStateError",
    "RetrievalError",
    "SerializationError",
    "TimeoutError",
]
