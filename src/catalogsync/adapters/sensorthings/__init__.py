"""SensorThings API adapter."""

from __future__ import annotations

from .client import SensorThingsCatalog

__all__ = ["SensorThingsCatalog"]
