"""Public domain model surface."""

from __future__ import annotations

from catalogsync.domain.model.entity import (
    ENCODING_GEOJSON,
    OM_MEASUREMENT,
    Asset,
    CatalogEntity,
    Channel,
    Destination,
    EntityRef,
    FeatureOfInterest,
    Location,
    MultiChannel,
    ObservedProperty,
    Sensor,
)
from catalogsync.domain.model.enums import EntityKind, ObservationField, Outcome
from catalogsync.domain.model.observation import Observation
from catalogsync.domain.model.primitives import (
    NULL_UNIT,
    EntityId,
    GeoJson,
    LocalKey,
    PropertyBag,
    PropertyValue,
    TimeInterval,
    TimeValue,
    UnitOfMeasurement,
    format_time,
)

type StoredItem = CatalogEntity | Observation

__all__ = [  # noqa: RUF022
    # entities
    "CatalogEntity",
    "Asset",
    "Sensor",
    "ObservedProperty",
    "FeatureOfInterest",
    "Location",
    "Channel",
    "MultiChannel",
    "Destination",
    "EntityRef",
    "Observation",
    "StoredItem",
    # enums
    "EntityKind",
    "ObservationField",
    "Outcome",
    # primitives
    "EntityId",
    "LocalKey",
    "GeoJson",
    "PropertyBag",
    "PropertyValue",
    "TimeInterval",
    "TimeValue",
    "UnitOfMeasurement",
    "NULL_UNIT",
    "ENCODING_GEOJSON",
    "OM_MEASUREMENT",
    "format_time",
]
