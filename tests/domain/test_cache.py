from __future__ import annotations

import pytest

from catalogsync.domain.cache import DEFAULT_PAGE_SIZE, EntityCache, property_key
from catalogsync.domain.model import Asset, CatalogEntity, EntityKind, Sensor
from tests.helpers.catalog import FakeCatalog


def _asset(local_id: str, name: str | None = None) -> Asset:
    return Asset(name=name or f"asset-{local_id}", properties={"localId": local_id})


def _asset_cache() -> EntityCache[Asset]:
    return EntityCache(EntityKind.ASSET, local_key=property_key("localId"))


def test_load_indexes_by_local_key_without_further_queries(catalog: FakeCatalog) -> None:
    catalog.seed(_asset("A"), _asset("B"), _asset("C"))
    cache = _asset_cache()

    loaded = cache.load(catalog)

    assert loaded == 3
    assert {cache.key_for(entity) for entity in cache.values_with_local_key()} == {"A", "B", "C"}
    queries_after_load = len(catalog.queries)

    cached = cache.get("B")

    assert cached is not None
    assert cached.name == "asset-B"
    assert len(catalog.queries) == queries_after_load == 1


def test_load_pages_in_id_order(catalog: FakeCatalog) -> None:
    cache = _asset_cache()

    cache.load(catalog, "properties/type eq 'station'", expand=("Locations",))

    query = catalog.queries[0]
    assert query.kind is EntityKind.ASSET
    assert query.filter == "properties/type eq 'station'"
    assert query.expand == ("Locations",)
    assert query.top == DEFAULT_PAGE_SIZE
    assert query.order_by == "id asc"


def test_duplicate_local_keys_keep_last(catalog: FakeCatalog) -> None:
    first = _asset("A", "first")
    second = _asset("A", "second")
    catalog.seed(first, second)
    cache = _asset_cache()

    cache.load(catalog)

    assert cache.get("A") is second
    assert len(cache) == 1


def test_entities_without_local_key_are_indexed_by_name() -> None:
    cache = _asset_cache()
    entity = Asset(name="no key")

    assert cache.add(entity) is False
    assert cache.get_by_name("no key") is entity
    assert cache.is_empty


def test_register_null_records_tombstone() -> None:
    cache = _asset_cache()
    entity = _asset("A")
    cache.add(entity)

    previous = cache.register_null("A")

    assert previous is entity
    assert cache.contains_id("A")
    assert cache.get("A") is None
    assert cache.values_with_local_key() == []


def test_unknown_key_is_not_contained() -> None:
    cache = _asset_cache()

    assert not cache.contains_id("missing")
    assert cache.get("missing") is None


def test_property_key_reads_nested_paths() -> None:
    extract = property_key("source", "id")
    entity = Sensor(properties={"source": {"id": 7}})

    assert extract(entity) == 7
    assert extract(Sensor(properties={"source": "flat"})) is None
    assert extract(Sensor()) is None


def test_property_key_requires_path() -> None:
    with pytest.raises(ValueError, match="at least one path element"):
        property_key()


def test_failing_key_extractor_yields_no_key() -> None:
    def broken(entity: CatalogEntity) -> str:
        raise KeyError(entity.name)

    cache: EntityCache[CatalogEntity] = EntityCache(EntityKind.SENSOR, local_key=broken)

    assert cache.key_for(Sensor(name="x")) is None
