"""Ports consumed by the sync core."""

from __future__ import annotations

from .catalog import CatalogReader, CatalogService, CatalogWriter

__all__ = ["CatalogReader", "CatalogService", "CatalogWriter"]
