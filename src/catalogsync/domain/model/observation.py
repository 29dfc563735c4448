"""Observations: timestamped results attached to a channel."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from catalogsync.domain.model.enums import EntityKind

if TYPE_CHECKING:
    from datetime import datetime

    from catalogsync.domain.model.entity import (
        Channel,
        Destination,
        FeatureOfInterest,
        MultiChannel,
    )
    from catalogsync.domain.model.primitives import (
        EntityId,
        PropertyBag,
        PropertyValue,
        TimeInterval,
        TimeValue,
    )


@dataclass(eq=False, kw_only=True)
class Observation:
    """One data point (or tuple, for multi-channels).

    XOR:
      - either channel is set (scalar result)
      - or multi_channel is set (fixed-size result tuple)
    """

    KIND: ClassVar[EntityKind] = EntityKind.OBSERVATION

    phenomenon_time: TimeValue | None
    result: PropertyValue
    id: EntityId | None = None
    result_time: datetime | None = None
    valid_time: TimeInterval | None = None
    result_quality: PropertyValue = None
    parameters: PropertyBag | None = None

    channel: Channel | None = field(default=None, repr=False)
    multi_channel: MultiChannel | None = field(default=None, repr=False)
    feature_of_interest: FeatureOfInterest | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.channel is not None and self.multi_channel is not None:
            raise ValueError("Observation cannot belong to both a Channel and a MultiChannel")

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    @property
    def destination(self) -> Destination | None:
        if self.channel is not None:
            return self.channel
        return self.multi_channel
