"""Shared fixtures for SensorThings adapter tests."""

from __future__ import annotations

import pytest

from catalogsync.config import CatalogConfig, ResilienceConfig

BASE_URL = "http://catalog.test/v1.1/"


@pytest.fixture
def catalog_config() -> CatalogConfig:
    return CatalogConfig(
        base_url=BASE_URL,
        resilience=ResilienceConfig(name="catalog", base_url=BASE_URL),
    )
