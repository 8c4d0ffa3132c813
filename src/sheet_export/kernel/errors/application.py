"""Application-layer errors – misuse of use-case objects."""

from __future__ import annotations

from sheet_export.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class PipelineStateError(ApplicationError):
    """An operation was attempted in a state that does not allow it.

    Raised when an :class:`~sheet_export.application.export.ExportPipeline`
    is run a second time.
    """

    default_code = "invalid_pipeline_state"


__all__ = ["ApplicationError", "PipelineStateError"]
