"""Kind-specific diff rules.

Each rule copies the desired state onto the current (remote) entity where
they differ and returns the names of the fields it changed. An empty result
means the remote entity is already up to date.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from catalogsync.domain.model import (
    Asset,
    CatalogEntity,
    Channel,
    EntityKind,
    FeatureOfInterest,
    Location,
    MultiChannel,
    ObservedProperty,
    Sensor,
)
from catalogsync.domain.properties import (
    DEFAULT_MERGE_DEPTH,
    LOCATION_MERGE_DEPTH,
    merge_properties,
    values_equivalent,
)

if TYPE_CHECKING:
    from catalogsync.domain.model import EntityId, PropertyBag

type DiffRule = Callable[[Any, Any], set[str]]


def diff_entity(current: CatalogEntity, desired: CatalogEntity) -> set[str]:
    """Apply ``desired`` onto ``current`` in place and return the changed field names."""

    if current.kind is not desired.kind:
        raise TypeError(f"Cannot reconcile {current.kind} against {desired.kind}")
    if current is desired:
        return set()
    return _RULES[current.kind](current, desired)


def _diff_common(current: CatalogEntity, desired: CatalogEntity, *, depth: int) -> set[str]:
    changed: set[str] = set()
    if current.name != desired.name:
        current.name = desired.name
        changed.add("name")
    if current.description != desired.description:
        current.description = desired.description
        changed.add("description")
    if _merge_bag(current, desired.properties, depth):
        changed.add("properties")
    return changed


def _merge_bag(current: CatalogEntity, properties: PropertyBag | None, depth: int) -> bool:
    if not properties:
        return False
    if current.properties is None:
        current.properties = {}
    return merge_properties(current.properties, properties, depth)


def _ids(entities: list[Any]) -> list[EntityId | None]:
    return [entity.id for entity in entities]


def _diff_asset(current: Asset, desired: Asset) -> set[str]:
    changed = _diff_common(current, desired, depth=DEFAULT_MERGE_DEPTH)
    # Location links are attached or replaced, never cleared implicitly.
    if desired.locations:
        if not current.locations or set(_ids(current.locations)) != set(_ids(desired.locations)):
            current.locations = list(desired.locations)
            changed.add("locations")
    return changed


def _diff_sensor(current: Sensor, desired: Sensor) -> set[str]:
    changed = _diff_common(current, desired, depth=DEFAULT_MERGE_DEPTH)
    if current.encoding_type != desired.encoding_type:
        current.encoding_type = desired.encoding_type
        changed.add("encoding_type")
    if current.metadata != desired.metadata:
        current.metadata = desired.metadata
        changed.add("metadata")
    return changed


def _diff_observed_property(current: ObservedProperty, desired: ObservedProperty) -> set[str]:
    changed = _diff_common(current, desired, depth=DEFAULT_MERGE_DEPTH)
    if desired.definition and current.definition != desired.definition:
        current.definition = desired.definition
        changed.add("definition")
    return changed


def _diff_feature(current: FeatureOfInterest, desired: FeatureOfInterest) -> set[str]:
    changed = _diff_common(current, desired, depth=DEFAULT_MERGE_DEPTH)
    if desired.feature is not None and not values_equivalent(current.feature, desired.feature):
        current.feature = desired.feature
        changed.add("feature")
    return changed


def _diff_location(current: Location, desired: Location) -> set[str]:
    changed = _diff_common(current, desired, depth=LOCATION_MERGE_DEPTH)
    if desired.location is not None and not values_equivalent(
        current.location, desired.location
    ):
        current.location = desired.location
        changed.add("location")
    return changed


def _diff_channel(current: Channel, desired: Channel) -> set[str]:
    changed = _diff_common(current, desired, depth=DEFAULT_MERGE_DEPTH)
    if current.unit_of_measurement != desired.unit_of_measurement:
        current.unit_of_measurement = desired.unit_of_measurement
        changed.add("unit_of_measurement")
    wanted = desired.observed_property
    if wanted is not None and (
        current.observed_property is None or current.observed_property.id != wanted.id
    ):
        current.observed_property = wanted
        changed.add("observed_property")
    return changed


def _diff_multi_channel(current: MultiChannel, desired: MultiChannel) -> set[str]:
    changed = _diff_common(current, desired, depth=DEFAULT_MERGE_DEPTH)
    if desired.units_of_measurement and (
        current.units_of_measurement != desired.units_of_measurement
    ):
        current.units_of_measurement = list(desired.units_of_measurement)
        changed.add("units_of_measurement")
    if desired.observed_properties and (
        _ids(current.observed_properties) != _ids(desired.observed_properties)
    ):
        current.observed_properties = list(desired.observed_properties)
        changed.add("observed_properties")
    return changed


_RULES: dict[EntityKind, DiffRule] = {
    EntityKind.ASSET: _diff_asset,
    EntityKind.SENSOR: _diff_sensor,
    EntityKind.OBSERVED_PROPERTY: _diff_observed_property,
    EntityKind.FEATURE_OF_INTEREST: _diff_feature,
    EntityKind.LOCATION: _diff_location,
    EntityKind.CHANNEL: _diff_channel,
    EntityKind.MULTI_CHANNEL: _diff_multi_channel,
}
