"""Uniform field access over the record shapes connectors hand to the core.

Connectors describe desired entities with templates such as
``"{station}-{3|unknown}"`` that must be resolved against whatever record
shape their source produced. Each supported shape implements ``get_field``;
the ``Record`` union is dispatched explicitly instead of inspecting arbitrary
objects at runtime.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel

from catalogsync.domain.filters import escape_string_constant

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

PLACEHOLDER_PATTERN = re.compile(r"\{([0-9a-zA-Z_]+)(\|([^}]*))?\}")


class FieldSource(Protocol):
    def get_field(self, name: str) -> str | None:
        """Return the field's value as text, or ``None`` when the record lacks it."""
        ...


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True, slots=True)
class MappingRecord:
    """Record keyed by field name (JSON objects, DB rows as dicts)."""

    values: Mapping[str, object]

    def get_field(self, name: str) -> str | None:
        return _as_text(self.values.get(name))


@dataclass(frozen=True, slots=True)
class SequenceRecord:
    """Positional record (CSV rows). Numeric names index; a header maps names to positions."""

    values: Sequence[object]
    header: Mapping[str, int] = field(default_factory=dict[str, int])

    def get_field(self, name: str) -> str | None:
        if name.isdigit():
            index = int(name)
        elif name in self.header:
            index = self.header[name]
        else:
            return None
        if index >= len(self.values):
            return None
        return _as_text(self.values[index])


@dataclass(frozen=True, slots=True)
class ModelRecord:
    """Structured record validated by a pydantic model."""

    model: BaseModel
    by_alias: bool = False

    def get_field(self, name: str) -> str | None:
        dumped = self.model.model_dump(by_alias=self.by_alias)
        return _as_text(dumped.get(name))


type Record = MappingRecord | SequenceRecord | ModelRecord


def get_field(record: Record, name: str) -> str | None:
    match record:
        case MappingRecord() | SequenceRecord() | ModelRecord():
            return record.get_field(name)


class StringType(StrEnum):
    """Target syntax of a filled template, deciding how values are escaped."""

    PLAIN = "plain"
    URL = "url"
    JSON = "json"


def fill_template(
    template: str,
    record: Record,
    target: StringType = StringType.PLAIN,
    *,
    remove_newlines: bool = False,
) -> str:
    """Replace ``{name}`` and ``{name|default}`` placeholders with record fields.

    A template that is itself a field name resolves to that field. Defaults
    apply when a field is missing or empty; a missing field without a default
    raises ``KeyError``.
    """

    if remove_newlines:
        template = template.replace("\n", "")

    direct = get_field(record, template)
    if direct is not None:
        return direct

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        default = match.group(3)
        value = get_field(record, name)
        if not value and default is not None:
            value = default
        if value is None:
            raise KeyError(f"Record has no field {name!r}")
        return _escape(value, target)

    return PLACEHOLDER_PATTERN.sub(replace, template)


def _escape(value: str, target: StringType) -> str:
    match target:
        case StringType.JSON:
            return value.replace("\\", "\\\\").replace("\n", "\\n")
        case StringType.URL:
            return escape_string_constant(value)
        case StringType.PLAIN:
            return value
