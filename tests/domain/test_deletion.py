from __future__ import annotations

import logging

import pytest

from catalogsync.domain.context import SyncCounters
from catalogsync.domain.deletion import BulkDeleter
from catalogsync.domain.model import Sensor
from tests.helpers.catalog import FakeCatalog


def _sensors(count: int) -> list[Sensor]:
    return [Sensor(id=index, name=f"sensor-{index}") for index in range(1, count + 1)]


def test_parallel_delete_completes_every_item(catalog: FakeCatalog) -> None:
    counters = SyncCounters()
    sensors = _sensors(10)

    deleted = BulkDeleter(catalog, counters=counters).delete(sensors, parallelism=4)

    assert deleted == 10
    assert len(catalog.deleted) == 10
    assert {item.id for item in catalog.deleted} == {sensor.id for sensor in sensors}
    assert counters.deleted == 10


def test_sequential_delete_keeps_order(catalog: FakeCatalog) -> None:
    sensors = _sensors(3)

    BulkDeleter(catalog).delete(sensors)

    assert catalog.deleted == sensors


def test_failures_are_logged_and_do_not_stop_others(
    catalog: FakeCatalog, caplog: pytest.LogCaptureFixture
) -> None:
    catalog.failing_deletes = {2, 5}

    with caplog.at_level(logging.INFO, logger="catalogsync.domain.deletion"):
        deleted = BulkDeleter(catalog).delete(_sensors(6), parallelism=3)

    assert deleted == 4
    assert len(catalog.deleted) == 4
    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert len(errors) == 2
    assert "Deleted 4 of 6 items; 2 failed" in caplog.text


class _ExplodingCatalog(FakeCatalog):
    def delete(self, item: Sensor) -> None:  # type: ignore[override]
        if item.id == 1:
            raise ValueError("malformed id")
        super().delete(item)


@pytest.mark.parametrize("parallelism", [1, 3])
def test_unexpected_errors_do_not_stop_others(
    parallelism: int, caplog: pytest.LogCaptureFixture
) -> None:
    catalog = _ExplodingCatalog()
    counters = SyncCounters()

    with caplog.at_level(logging.INFO, logger="catalogsync.domain.deletion"):
        deleted = BulkDeleter(catalog, counters=counters).delete(
            _sensors(3), parallelism=parallelism
        )

    assert deleted == 2
    assert sorted(item.id for item in catalog.deleted) == [2, 3]
    assert counters.deleted == 2
    assert "malformed id" in caplog.text
    assert "Deleted 2 of 3 items; 1 failed" in caplog.text


def test_empty_input_makes_no_calls(catalog: FakeCatalog) -> None:
    assert BulkDeleter(catalog).delete([], parallelism=4) == 0
    assert catalog.deleted == []
