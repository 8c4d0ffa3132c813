"""Application pagination – scroll cursor port and page container."""
from sheet_export.application.pagination.scroll import Cursor, Record, ScrollPage

__all__ = ["Cursor", "Record", "ScrollPage"]
