"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── ApplicationError       (application.py)
    │   └── PipelineStateError
    ├── InfrastructureError    (infrastructure.py)
    │   ├── TimeoutError
    │   └── ExternalServiceError
    └── ExportError            (export.py)
        ├── DisconnectError
        ├── RetrievalError
        ├── EncodingError
        └── SerializationError
"""

from sheet_export.kernel.errors.application import ApplicationError, PipelineStateError
from sheet_export.kernel.errors.base import BaseError
from sheet_export.kernel.errors.export import (
    DisconnectError,
    EncodingError,
    ExportError,
    RetrievalError,
    SerializationError,
)
from sheet_export.kernel.errors.infrastructure import (
    ExternalServiceError,
    InfrastructureError,
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
