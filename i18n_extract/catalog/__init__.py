"""Catalog model, merge and persistence."""

from .merger import CatalogMerger, MergeResult
from .model import CATALOG_VERSION, Catalog
from .store import CatalogStore

__all__ = ["CATALOG_VERSION", "Catalog", "CatalogMerger", "CatalogStore", "MergeResult"]
