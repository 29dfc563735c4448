from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from catalogsync.domain.context import SyncContext
from tests.helpers.catalog import FakeCatalog

if TYPE_CHECKING:
    from collections.abc import Iterator

CATALOG_ENV_VARS = (
    "CATALOG_URL",
    "CATALOG_USERNAME",
    "CATALOG_PASSWORD",
    "CATALOG_DRY_RUN",
    "CATALOG_MAX_BATCH",
    "CATALOG_PAGE_SIZE",
    "CATALOG_USE_BULK_WRITES",
    "CATALOG_DELETE_PARALLELISM",
)


@pytest.fixture(autouse=True)
def clean_catalog_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in CATALOG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def context(catalog: FakeCatalog) -> SyncContext:
    return SyncContext(catalog=catalog)


@pytest.fixture
def dry_run_context(catalog: FakeCatalog) -> SyncContext:
    return SyncContext(catalog=catalog, dry_run=True)
