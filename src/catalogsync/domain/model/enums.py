"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Discriminator for the entity kinds stored by the remote catalog."""

    ASSET = "asset"
    SENSOR = "sensor"
    OBSERVED_PROPERTY = "observed_property"
    FEATURE_OF_INTEREST = "feature_of_interest"
    LOCATION = "location"
    CHANNEL = "channel"
    MULTI_CHANNEL = "multi_channel"

    # Only used for deletion and bulk writes:
    OBSERVATION = "observation"


class ObservationField(StrEnum):
    """Observation attributes that can be carried by a bulk-write batch.

    Declaration order is the column order of a batch.
    """

    PHENOMENON_TIME = "phenomenonTime"
    RESULT = "result"
    RESULT_TIME = "resultTime"
    RESULT_QUALITY = "resultQuality"
    VALID_TIME = "validTime"
    PARAMETERS = "parameters"


class Outcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
