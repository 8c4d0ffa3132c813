"""Elasticsearch adapter – scroll cursor over the REST API."""
from sheet_export.adapters.elasticsearch.cursor import ElasticsearchScrollCursor

__all__ = ["ElasticsearchScrollCursor"]
