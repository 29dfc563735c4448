from __future__ import annotations

import pytest
from pydantic import BaseModel, Field

from catalogsync.domain.records import (
    MappingRecord,
    ModelRecord,
    SequenceRecord,
    StringType,
    fill_template,
    get_field,
)


class StationRow(BaseModel):
    station: str
    height: float | None = None
    region_code: str = Field(default="", alias="regionCode")


def test_mapping_record_fields() -> None:
    record = MappingRecord({"station": "S1", "active": True, "empty": None})

    assert get_field(record, "station") == "S1"
    assert get_field(record, "active") == "true"
    assert get_field(record, "empty") is None
    assert get_field(record, "missing") is None


def test_sequence_record_by_index_and_header() -> None:
    record = SequenceRecord(["S1", 12.5], header={"station": 0})

    assert get_field(record, "0") == "S1"
    assert get_field(record, "1") == "12.5"
    assert get_field(record, "station") == "S1"
    assert get_field(record, "5") is None
    assert get_field(record, "unknown") is None


def test_model_record_uses_field_or_alias_names() -> None:
    row = StationRow(station="S1", regionCode="NW")

    assert get_field(ModelRecord(row), "region_code") == "NW"
    assert get_field(ModelRecord(row, by_alias=True), "regionCode") == "NW"
    assert get_field(ModelRecord(row), "height") is None


def test_fill_template_replaces_placeholders_and_defaults() -> None:
    record = MappingRecord({"station": "S1", "sensor": ""})

    result = fill_template("{station}-{sensor|unknown}-{depth|0}", record)

    assert result == "S1-unknown-0"


def test_fill_template_missing_field_without_default_raises() -> None:
    with pytest.raises(KeyError, match="station"):
        fill_template("{station}", MappingRecord({}))


def test_fill_template_direct_field_name() -> None:
    record = MappingRecord({"name": "Station {1}"})

    assert fill_template("name", record) == "Station {1}"


def test_fill_template_escapes_for_filters() -> None:
    record = MappingRecord({"name": "O'Hare"})

    assert fill_template("name eq '{name}'", record, StringType.URL) == "name eq 'O''Hare'"


def test_fill_template_escapes_for_json() -> None:
    record = SequenceRecord(["line1\nline2", "C:\\data"])

    result = fill_template('{"a": "{0}", "b": "{1}"}', record, StringType.JSON)

    assert result == '{"a": "line1\\nline2", "b": "C:\\\\data"}'


def test_fill_template_can_drop_template_newlines() -> None:
    record = MappingRecord({"station": "S1"})

    assert fill_template("{station}\n-x", record, remove_newlines=True) == "S1-x"
