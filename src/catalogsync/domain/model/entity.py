"""
Catalog entities:
the typed metadata hierarchy kept in sync with the remote catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, NamedTuple

from catalogsync.domain.model.enums import EntityKind
from catalogsync.domain.model.primitives import NULL_UNIT, UnitOfMeasurement

if TYPE_CHECKING:
    from catalogsync.domain.model.primitives import EntityId, GeoJson, PropertyBag

ENCODING_GEOJSON = "application/geo+json"
OM_MEASUREMENT = "http://www.opengis.net/def/observationType/OGC-OM/2.0/OM_Measurement"


class EntityRef(NamedTuple):
    """Reference to a persisted entity by kind and catalog id."""

    kind: EntityKind
    id: EntityId


@dataclass(eq=False, kw_only=True)
class CatalogEntity:
    """Identity is assigned by the catalog; ``id`` stays ``None`` until persisted."""

    id: EntityId | None = None
    name: str = ""
    description: str = ""
    properties: PropertyBag | None = None

    # class-level discriminator; subclasses must override
    KIND: ClassVar[EntityKind]

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @property
    def ref(self) -> EntityRef | None:
        if self.id is None:
            return None
        return EntityRef(self.KIND, self.id)

    def __str__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, name={self.name!r})"


@dataclass(eq=False, kw_only=True)
class Location(CatalogEntity):
    KIND: ClassVar[EntityKind] = EntityKind.LOCATION

    encoding_type: str = ENCODING_GEOJSON
    location: GeoJson | None = None


@dataclass(eq=False, kw_only=True)
class Asset(CatalogEntity):
    """A physical thing carrying sensors (``Thing`` on the wire)."""

    KIND: ClassVar[EntityKind] = EntityKind.ASSET

    locations: list[Location] = field(default_factory=list["Location"])


@dataclass(eq=False, kw_only=True)
class Sensor(CatalogEntity):
    KIND: ClassVar[EntityKind] = EntityKind.SENSOR

    encoding_type: str = "text/plain"
    metadata: object = None


@dataclass(eq=False, kw_only=True)
class ObservedProperty(CatalogEntity):
    KIND: ClassVar[EntityKind] = EntityKind.OBSERVED_PROPERTY

    definition: str = ""


@dataclass(eq=False, kw_only=True)
class FeatureOfInterest(CatalogEntity):
    KIND: ClassVar[EntityKind] = EntityKind.FEATURE_OF_INTEREST

    encoding_type: str = ENCODING_GEOJSON
    feature: GeoJson | None = None


@dataclass(eq=False, kw_only=True)
class Channel(CatalogEntity):
    """Scalar timeseries destination (``Datastream`` on the wire)."""

    KIND: ClassVar[EntityKind] = EntityKind.CHANNEL

    unit_of_measurement: UnitOfMeasurement = NULL_UNIT
    observation_type: str = OM_MEASUREMENT
    asset: Asset | None = field(default=None, repr=False)
    sensor: Sensor | None = field(default=None, repr=False)
    observed_property: ObservedProperty | None = field(default=None, repr=False)


@dataclass(eq=False, kw_only=True)
class MultiChannel(CatalogEntity):
    """Tuple-valued timeseries destination (``MultiDatastream`` on the wire)."""

    KIND: ClassVar[EntityKind] = EntityKind.MULTI_CHANNEL

    units_of_measurement: list[UnitOfMeasurement] = field(
        default_factory=list[UnitOfMeasurement]
    )
    observation_types: list[str] = field(default_factory=list[str])
    asset: Asset | None = field(default=None, repr=False)
    sensor: Sensor | None = field(default=None, repr=False)
    observed_properties: list[ObservedProperty] = field(
        default_factory=list[ObservedProperty], repr=False
    )

    def __post_init__(self) -> None:
        if not self.observation_types and self.observed_properties:
            self.observation_types = [OM_MEASUREMENT] * len(self.observed_properties)


type Destination = Channel | MultiChannel
