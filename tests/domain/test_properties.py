from __future__ import annotations

import copy
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from catalogsync.domain.model import PropertyBag
from catalogsync.domain.properties import is_empty, merge_properties, values_equivalent


@pytest.mark.parametrize(
    ("one", "two"),
    [
        (2, 2.0),
        (Decimal("2.00"), 2),
        ("2024-01-01T00:00:00Z", "2024-01-01T00:00:00+00:00"),
        ("2024-01-01T01:00:00+01:00", "2024-01-01T00:00:00Z"),
        (
            "2024-01-01T00:00:00Z/2024-01-02T00:00:00Z",
            "2024-01-01T00:00:00+00:00/2024-01-02T00:00:00+00:00",
        ),
        (datetime(2024, 1, 1, tzinfo=UTC), "2024-01-01T00:00:00Z"),
        ((1, 2), [1.0, 2]),
        (
            {"type": "Point", "coordinates": (8.5, 47.1)},
            {"type": "Point", "coordinates": [8.5, 47.1]},
        ),
        ({"a": {"b": Decimal("1.50")}}, {"a": {"b": 1.5}}),
        (None, None),
        (True, True),
    ],
)
def test_values_equivalent_tolerates_representation(one: object, two: object) -> None:
    assert values_equivalent(one, two)
    assert values_equivalent(two, one)


@pytest.mark.parametrize(
    ("one", "two"),
    [
        (1, "1"),
        (True, 1),
        (False, 0),
        (None, ""),
        ("2024-01-01T00:00:00Z", "2024-01-01T00:00:01Z"),
        ("not a date", "also not"),
        ([1, 2], [1, 2, 3]),
        ({"a": 1}, {"a": 2}),
        ({"a": 1}, {"a": 1, "b": 2}),
        ({"a": [1]}, {"a": (1, 2)}),
    ],
)
def test_values_equivalent_detects_differences(one: object, two: object) -> None:
    assert not values_equivalent(one, two)


def test_values_equivalent_reads_naive_timestamps_as_utc() -> None:
    assert values_equivalent("2024-01-01T00:00:00", "2024-01-01T00:00:00Z")


def test_merge_adds_new_keys_and_ignores_empty_values() -> None:
    target: PropertyBag = {"a": 1}

    changed = merge_properties(target, {"b": "x", "c": None, "d": "", "e": []})

    assert changed
    assert target == {"a": 1, "b": "x"}


def test_merge_never_removes_keys() -> None:
    target: PropertyBag = {"a": 1, "b": 2}

    changed = merge_properties(target, {"a": 1})

    assert not changed
    assert target == {"a": 1, "b": 2}


def test_merge_overwrites_changed_values() -> None:
    target: PropertyBag = {"unit": "m"}

    assert merge_properties(target, {"unit": "km"})
    assert target == {"unit": "km"}


def test_merge_is_idempotent() -> None:
    source: PropertyBag = {"a": {"b": {"c": [1, 2]}}, "when": "2024-01-01T00:00:00Z"}
    target: PropertyBag = {}

    assert merge_properties(target, source)
    assert not merge_properties(target, source)


def test_merge_treats_equivalent_representations_as_unchanged() -> None:
    target: PropertyBag = {"value": 2.0, "when": "2024-01-01T00:00:00+00:00"}

    assert not merge_properties(target, {"value": 2, "when": "2024-01-01T00:00:00Z"})
    assert target == {"value": 2.0, "when": "2024-01-01T00:00:00+00:00"}


def test_merge_recurses_into_nested_mappings() -> None:
    target: PropertyBag = {"meta": {"keep": 1, "change": "old"}}

    assert merge_properties(target, {"meta": {"change": "new", "add": True}})
    assert target == {"meta": {"keep": 1, "change": "new", "add": True}}


def test_merge_replaces_whole_mapping_beyond_depth() -> None:
    target: PropertyBag = {"meta": {"keep": 1, "change": "old"}}

    assert merge_properties(target, {"meta": {"change": "new"}}, max_depth=0)
    assert target == {"meta": {"change": "new"}}


def test_merge_copies_source_values() -> None:
    nested: PropertyBag = {"inner": [1]}
    target: PropertyBag = {}

    merge_properties(target, {"nested": nested})
    nested["inner"] = [2]

    assert target == {"nested": {"inner": [1]}}


def _assert_keys_kept(before: PropertyBag, after: PropertyBag, depth: int) -> None:
    assert set(before) <= set(after)
    if depth <= 0:
        return
    for key, value in before.items():
        nested = after[key]
        if isinstance(value, dict) and isinstance(nested, dict):
            _assert_keys_kept(value, nested, depth - 1)


@pytest.mark.parametrize(
    ("target", "source", "max_depth"),
    [
        ({"a": {"b": {"c": 1}}}, {"a": {"b": {"d": 2}}, "e": [1]}, 5),
        ({"a": 1}, {}, 5),
        ({"a": 1}, None, 5),
        ({"a": 1, "b": ""}, {"a": None, "b": None, "c": {}}, 5),
        ({"a": {"x": 1}, "b": 2}, {"a": "flat", "b": {"nested": True}}, 5),
        ({"m": {"k": 1}, "n": 1}, {"m": {"j": 2}}, 0),
        ({"a": {"b": {"keep": 1}}}, {"a": {"b": {"new": 2}}}, 1),
    ],
)
def test_merge_is_monotonic(
    target: PropertyBag, source: PropertyBag | None, max_depth: int
) -> None:
    before = copy.deepcopy(target)

    merge_properties(target, source, max_depth=max_depth)

    _assert_keys_kept(before, target, max_depth)
    for key, value in (source or {}).items():
        if not is_empty(value):
            assert key in target
    assert not merge_properties(target, source, max_depth=max_depth)


def test_is_empty() -> None:
    assert is_empty(None)
    assert is_empty("")
    assert is_empty({})
    assert not is_empty(0)
    assert not is_empty(False)
