"""Adapters – concrete implementations of the export ports."""
