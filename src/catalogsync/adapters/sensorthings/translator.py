"""Translate between SensorThings payloads and catalog domain objects."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from catalogsync.domain.model import (
    Asset,
    CatalogEntity,
    Channel,
    EntityKind,
    FeatureOfInterest,
    Location,
    MultiChannel,
    Observation,
    ObservedProperty,
    Sensor,
    TimeInterval,
    UnitOfMeasurement,
    format_time,
)

from .schema import (
    DatastreamPayload,
    FeatureOfInterestPayload,
    LocationPayload,
    MultiDatastreamPayload,
    ObservationPayload,
    ObservedPropertyPayload,
    SensorPayload,
    ThingPayload,
    UnitOfMeasurementPayload,
)

if TYPE_CHECKING:
    from collections.abc import Collection

    from catalogsync.domain.batching import Batch
    from catalogsync.domain.model import EntityId, StoredItem, TimeValue

    from .schema import EntityLink, JsonObject

log = getLogger(__name__)

IOT_ID = "@iot.id"

COLLECTIONS: dict[EntityKind, str] = {
    EntityKind.ASSET: "Things",
    EntityKind.SENSOR: "Sensors",
    EntityKind.OBSERVED_PROPERTY: "ObservedProperties",
    EntityKind.FEATURE_OF_INTEREST: "FeaturesOfInterest",
    EntityKind.LOCATION: "Locations",
    EntityKind.CHANNEL: "Datastreams",
    EntityKind.MULTI_CHANNEL: "MultiDatastreams",
    EntityKind.OBSERVATION: "Observations",
}

# Domain attribute name -> payload key.
WIRE_NAMES: dict[str, str] = {
    "name": "name",
    "description": "description",
    "properties": "properties",
    "encoding_type": "encodingType",
    "metadata": "metadata",
    "definition": "definition",
    "feature": "feature",
    "location": "location",
    "locations": "Locations",
    "unit_of_measurement": "unitOfMeasurement",
    "units_of_measurement": "unitOfMeasurements",
    "observation_type": "observationType",
    "observation_types": "multiObservationDataTypes",
    "observed_property": "ObservedProperty",
    "observed_properties": "ObservedProperties",
    "asset": "Thing",
    "sensor": "Sensor",
    "phenomenon_time": "phenomenonTime",
    "result": "result",
    "result_time": "resultTime",
    "result_quality": "resultQuality",
    "valid_time": "validTime",
    "parameters": "parameters",
    "channel": "Datastream",
    "multi_channel": "MultiDatastream",
    "feature_of_interest": "FeatureOfInterest",
}

_LOCATION_ID_PATTERN = re.compile(r"\((?:'((?:[^']|'')*)'|([^)]*))\)\s*$")


def collection_for(kind: EntityKind) -> str:
    return COLLECTIONS[kind]


def format_id(entity_id: EntityId) -> str:
    if isinstance(entity_id, int):
        return str(entity_id)
    return "'" + entity_id.replace("'", "''") + "'"


def entity_path(kind: EntityKind, entity_id: EntityId) -> str:
    """Relative path of one entity, e.g. ``Things(42)`` or ``Things('a-b')``."""

    return f"{collection_for(kind)}({format_id(entity_id)})"


def parse_id(raw: str) -> EntityId:
    try:
        return int(raw)
    except ValueError:
        return raw


def id_from_location(location: str) -> EntityId:
    """Extract the entity id from a ``Location`` header such as ``.../Things(42)``."""

    match = _LOCATION_ID_PATTERN.search(location)
    if match is None:
        raise ValueError(f"No entity id in location {location!r}")
    quoted, bare = match.groups()
    if quoted is not None:
        return quoted.replace("''", "'")
    return parse_id(bare)


def parse_time(value: str) -> TimeValue:
    """Parse an ISO 8601 instant or ``start/end`` interval."""

    if "/" in value:
        start, end = value.split("/", 1)
        return TimeInterval(start=_parse_instant(start), end=_parse_instant(end))
    return _parse_instant(value)


def _parse_instant(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def json_value(value: object) -> object:
    """Convert domain values into JSON-serialisable ones.

    Decimals are kept as they are; the client encodes them as exact JSON numbers.
    """

    if isinstance(value, datetime | TimeInterval):
        return format_time(value)
    if isinstance(value, UnitOfMeasurement):
        return {"name": value.name, "symbol": value.symbol, "definition": value.definition}
    if isinstance(value, dict):
        return {key: json_value(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [json_value(item) for item in value]
    return value


# --- payload -> domain -------------------------------------------------------


def _unit(payload: UnitOfMeasurementPayload | None) -> UnitOfMeasurement:
    if payload is None:
        return UnitOfMeasurement()
    return UnitOfMeasurement(
        name=payload.name, symbol=payload.symbol, definition=payload.definition
    )


def _link_id(link: EntityLink | None) -> EntityId | None:
    return None if link is None else link.id


def _location(payload: LocationPayload) -> Location:
    location = Location(
        id=payload.id,
        name=payload.name,
        description=payload.description,
        properties=payload.properties,
        location=payload.location,
    )
    if payload.encoding_type is not None:
        location.encoding_type = payload.encoding_type
    return location


def to_entity(kind: EntityKind, data: JsonObject) -> CatalogEntity:
    """Build the domain entity of ``kind`` from one collection element."""

    match kind:
        case EntityKind.ASSET:
            thing = ThingPayload.model_validate(data)
            return Asset(
                id=thing.id,
                name=thing.name,
                description=thing.description,
                properties=thing.properties,
                locations=[_location(location) for location in thing.locations],
            )
        case EntityKind.SENSOR:
            sensor = SensorPayload.model_validate(data)
            entity = Sensor(
                id=sensor.id,
                name=sensor.name,
                description=sensor.description,
                properties=sensor.properties,
                metadata=sensor.metadata,
            )
            if sensor.encoding_type is not None:
                entity.encoding_type = sensor.encoding_type
            return entity
        case EntityKind.OBSERVED_PROPERTY:
            observed = ObservedPropertyPayload.model_validate(data)
            return ObservedProperty(
                id=observed.id,
                name=observed.name,
                description=observed.description,
                properties=observed.properties,
                definition=observed.definition,
            )
        case EntityKind.FEATURE_OF_INTEREST:
            foi = FeatureOfInterestPayload.model_validate(data)
            feature = FeatureOfInterest(
                id=foi.id,
                name=foi.name,
                description=foi.description,
                properties=foi.properties,
                feature=foi.feature,
            )
            if foi.encoding_type is not None:
                feature.encoding_type = foi.encoding_type
            return feature
        case EntityKind.LOCATION:
            return _location(LocationPayload.model_validate(data))
        case EntityKind.CHANNEL:
            return _channel(DatastreamPayload.model_validate(data))
        case EntityKind.MULTI_CHANNEL:
            return _multi_channel(MultiDatastreamPayload.model_validate(data))
        case EntityKind.OBSERVATION:
            raise ValueError("Observations are not catalog entities; use to_observation")


def _channel(payload: DatastreamPayload) -> Channel:
    channel = Channel(
        id=payload.id,
        name=payload.name,
        description=payload.description,
        properties=payload.properties,
        unit_of_measurement=_unit(payload.unit_of_measurement),
    )
    if payload.observation_type is not None:
        channel.observation_type = payload.observation_type
    if (thing_id := _link_id(payload.thing)) is not None:
        channel.asset = Asset(id=thing_id)
    if (sensor_id := _link_id(payload.sensor)) is not None:
        channel.sensor = Sensor(id=sensor_id)
    if (observed_id := _link_id(payload.observed_property)) is not None:
        channel.observed_property = ObservedProperty(id=observed_id)
    return channel


def _multi_channel(payload: MultiDatastreamPayload) -> MultiChannel:
    channel = MultiChannel(
        id=payload.id,
        name=payload.name,
        description=payload.description,
        properties=payload.properties,
        units_of_measurement=[_unit(unit) for unit in payload.units_of_measurement],
        observation_types=list(payload.observation_types),
        observed_properties=[ObservedProperty(id=link.id) for link in payload.observed_properties],
    )
    if (thing_id := _link_id(payload.thing)) is not None:
        channel.asset = Asset(id=thing_id)
    if (sensor_id := _link_id(payload.sensor)) is not None:
        channel.sensor = Sensor(id=sensor_id)
    return channel


def to_observation(data: JsonObject) -> Observation:
    payload = ObservationPayload.model_validate(data)
    observation = Observation(
        id=payload.id,
        phenomenon_time=parse_time(payload.phenomenon_time) if payload.phenomenon_time else None,
        result=payload.result,
        result_time=_parse_instant(payload.result_time) if payload.result_time else None,
        result_quality=payload.result_quality,
        parameters=payload.parameters,
    )
    if payload.valid_time:
        valid_time = parse_time(payload.valid_time)
        if isinstance(valid_time, TimeInterval):
            observation.valid_time = valid_time
    if (datastream_id := _link_id(payload.datastream)) is not None:
        observation.channel = Channel(id=datastream_id)
    elif (multi_id := _link_id(payload.multi_datastream)) is not None:
        observation.multi_channel = MultiChannel(id=multi_id)
    return observation


# --- domain -> payload -------------------------------------------------------


def _link(entity: CatalogEntity) -> JsonObject:
    """Reference a persisted entity by id, or inline an unsaved one (deep insert)."""

    if entity.is_persisted:
        return {IOT_ID: entity.id}
    return to_payload(entity)


def _common(entity: CatalogEntity) -> JsonObject:
    payload: JsonObject = {"name": entity.name, "description": entity.description}
    if entity.properties is not None:
        payload["properties"] = json_value(entity.properties)
    return payload


def to_payload(item: StoredItem) -> JsonObject:
    """Full JSON body used to create ``item``."""

    if isinstance(item, Observation):
        return _observation_payload(item)

    payload = _common(item)
    match item:
        case Asset():
            if item.locations:
                payload["Locations"] = [_link(location) for location in item.locations]
        case Sensor():
            payload["encodingType"] = item.encoding_type
            payload["metadata"] = json_value(item.metadata)
        case ObservedProperty():
            payload["definition"] = item.definition
        case FeatureOfInterest():
            payload["encodingType"] = item.encoding_type
            payload["feature"] = json_value(item.feature)
        case Location():
            payload["encodingType"] = item.encoding_type
            payload["location"] = json_value(item.location)
        case Channel():
            payload["unitOfMeasurement"] = json_value(item.unit_of_measurement)
            payload["observationType"] = item.observation_type
            _add_links(payload, asset=item.asset, sensor=item.sensor)
            if item.observed_property is not None:
                payload["ObservedProperty"] = _link(item.observed_property)
        case MultiChannel():
            payload["unitOfMeasurements"] = json_value(item.units_of_measurement)
            payload["multiObservationDataTypes"] = list(item.observation_types)
            _add_links(payload, asset=item.asset, sensor=item.sensor)
            payload["ObservedProperties"] = [_link(op) for op in item.observed_properties]
        case _:
            raise TypeError(f"Unsupported catalog entity {type(item).__name__}")
    return payload


def _add_links(payload: JsonObject, *, asset: Asset | None, sensor: Sensor | None) -> None:
    if asset is not None:
        payload["Thing"] = _link(asset)
    if sensor is not None:
        payload["Sensor"] = _link(sensor)


def _observation_payload(observation: Observation) -> JsonObject:
    payload: JsonObject = {"result": json_value(observation.result)}
    if observation.phenomenon_time is not None:
        payload["phenomenonTime"] = json_value(observation.phenomenon_time)
    if observation.result_time is not None:
        payload["resultTime"] = json_value(observation.result_time)
    if observation.result_quality is not None:
        payload["resultQuality"] = json_value(observation.result_quality)
    if observation.valid_time is not None:
        payload["validTime"] = json_value(observation.valid_time)
    if observation.parameters is not None:
        payload["parameters"] = json_value(observation.parameters)
    if observation.channel is not None:
        payload["Datastream"] = _link(observation.channel)
    elif observation.multi_channel is not None:
        payload["MultiDatastream"] = _link(observation.multi_channel)
    if observation.feature_of_interest is not None:
        payload["FeatureOfInterest"] = _link(observation.feature_of_interest)
    return payload


def changed_payload(item: StoredItem, changed: Collection[str]) -> JsonObject:
    """PATCH body holding only the fields named in ``changed``."""

    full = to_payload(item)
    payload: JsonObject = {}
    for name in changed:
        wire_name = WIRE_NAMES.get(name)
        if wire_name is None:
            log.warning("Ignoring unknown changed field %r on %s", name, item)
            continue
        # Fields cleared locally are sent as null.
        payload[wire_name] = full.get(wire_name)
    return payload


def batch_payload(batch: Batch) -> JsonObject:
    """One ``CreateObservations`` element in dataArray format."""

    destination = batch.destination
    if destination.id is None:
        raise ValueError(f"Cannot bulk write to unsaved {destination}")
    link_key = "Datastream" if isinstance(destination, Channel) else "MultiDatastream"
    rows = batch.rows()
    return {
        link_key: {IOT_ID: destination.id},
        "components": [str(component) for component in batch.components],
        "dataArray@iot.count": len(rows),
        "dataArray": json_value(rows),
    }


def outcome_tokens(data: list[Any]) -> list[str]:
    """Normalise a ``CreateObservations`` response into outcome tokens."""

    return [str(token) for token in data]
