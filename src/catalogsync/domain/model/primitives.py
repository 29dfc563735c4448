"""Domain primitives: scalar aliases + small value objects."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

type EntityId = int | str
type LocalKey = Hashable

type PropertyValue = (
    None
    | bool
    | int
    | float
    | Decimal
    | str
    | list[PropertyValue]
    | dict[str, PropertyValue]
)
type PropertyBag = dict[str, PropertyValue]

type GeoJson = dict[str, PropertyValue]


@dataclass(frozen=True)
class UnitOfMeasurement:
    name: str | None = None
    symbol: str | None = None
    definition: str | None = None


NULL_UNIT = UnitOfMeasurement()


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("Interval end must not precede its start")

    def isoformat(self) -> str:
        return f"{self.start.isoformat()}/{self.end.isoformat()}"


type TimeValue = datetime | TimeInterval


def format_time(value: TimeValue) -> str:
    return value.isoformat()
