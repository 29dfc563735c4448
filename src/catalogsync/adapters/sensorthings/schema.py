"""SensorThings API payload schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

type JsonObject = dict[str, Any]
type WireId = int | str


class SensorThingsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EntityLink(SensorThingsModel):
    """Expanded navigation link reduced to its id (``$select=id``)."""

    id: WireId = Field(alias="@iot.id")


class EntityPage(SensorThingsModel):
    """One page of a collection response."""

    value: list[JsonObject] = Field(default_factory=list)
    count: int | None = Field(default=None, alias="@iot.count")
    next_link: str | None = Field(default=None, alias="@iot.nextLink")


class UnitOfMeasurementPayload(SensorThingsModel):
    name: str | None = None
    symbol: str | None = None
    definition: str | None = None


class EntityPayload(SensorThingsModel):
    id: WireId | None = Field(default=None, alias="@iot.id")
    name: str = ""
    description: str = ""
    properties: JsonObject | None = None


class LocationPayload(EntityPayload):
    encoding_type: str | None = Field(default=None, alias="encodingType")
    location: JsonObject | None = None


class ThingPayload(EntityPayload):
    locations: list[LocationPayload] = Field(default_factory=list, alias="Locations")


class SensorPayload(EntityPayload):
    encoding_type: str | None = Field(default=None, alias="encodingType")
    metadata: Any = None


class ObservedPropertyPayload(EntityPayload):
    definition: str = ""


class FeatureOfInterestPayload(EntityPayload):
    encoding_type: str | None = Field(default=None, alias="encodingType")
    feature: JsonObject | None = None


class DatastreamPayload(EntityPayload):
    unit_of_measurement: UnitOfMeasurementPayload | None = Field(
        default=None, alias="unitOfMeasurement"
    )
    observation_type: str | None = Field(default=None, alias="observationType")
    thing: EntityLink | None = Field(default=None, alias="Thing")
    sensor: EntityLink | None = Field(default=None, alias="Sensor")
    observed_property: EntityLink | None = Field(default=None, alias="ObservedProperty")


class MultiDatastreamPayload(EntityPayload):
    units_of_measurement: list[UnitOfMeasurementPayload] = Field(
        default_factory=list, alias="unitOfMeasurements"
    )
    observation_types: list[str] = Field(
        default_factory=list, alias="multiObservationDataTypes"
    )
    thing: EntityLink | None = Field(default=None, alias="Thing")
    sensor: EntityLink | None = Field(default=None, alias="Sensor")
    observed_properties: list[EntityLink] = Field(
        default_factory=list, alias="ObservedProperties"
    )


class ObservationPayload(SensorThingsModel):
    id: WireId | None = Field(default=None, alias="@iot.id")
    phenomenon_time: str | None = Field(default=None, alias="phenomenonTime")
    result: Any = None
    result_time: str | None = Field(default=None, alias="resultTime")
    result_quality: Any = Field(default=None, alias="resultQuality")
    valid_time: str | None = Field(default=None, alias="validTime")
    parameters: JsonObject | None = None
    datastream: EntityLink | None = Field(default=None, alias="Datastream")
    multi_datastream: EntityLink | None = Field(default=None, alias="MultiDatastream")
