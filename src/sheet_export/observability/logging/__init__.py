"""Observability – structured logging helpers."""
from sheet_export.observability.logging.factory import JsonLoggerFactory
from sheet_export.observability.logging.processors import get_logger

__all__ = ["JsonLoggerFactory", "get_logger"]
