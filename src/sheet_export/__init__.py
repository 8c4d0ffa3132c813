"""
sheet_export – stream paginated search results into spreadsheet files.

Import path convention::

    from sheet_export.application.export import ExportPipeline, HeaderSet
    from sheet_export.application.export import XlsxSheetWriter
    from sheet_export.adapters.elasticsearch import ElasticsearchScrollCursor
    from sheet_export.kernel.errors import ExportError
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
