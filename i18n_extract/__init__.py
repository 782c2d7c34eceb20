"""Extraction of translatable string literals into translation catalogs."""

__version__ = "0.1.0"
