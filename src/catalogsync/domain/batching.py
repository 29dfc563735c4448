"""Accumulation of observations per destination channel for bulk writes.

Each destination gets one ``Batch`` whose column set is fixed by the first
observation added to it: ``result`` always, every other optional field only
when that first observation carries it. Later observations never widen the
column set; their extra fields are not sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import PartialBatchFailure
from catalogsync.domain.model import EntityKind, Observation, ObservationField

if TYPE_CHECKING:
    from catalogsync.domain.context import SyncContext
    from catalogsync.domain.model import Destination

log = getLogger(__name__)

ERROR_TOKEN_PREFIX = "error"

type DestinationKey = tuple[EntityKind, object]


def destination_key(destination: Destination) -> DestinationKey:
    # Destinations created during a dry run have no id; fall back to object identity.
    ref = destination.ref
    if ref is None:
        return (destination.kind, id(destination))
    return ref


def defined_fields(observation: Observation) -> frozenset[ObservationField]:
    fields = {ObservationField.RESULT}
    if observation.phenomenon_time is not None:
        fields.add(ObservationField.PHENOMENON_TIME)
    if observation.result_time is not None:
        fields.add(ObservationField.RESULT_TIME)
    if observation.result_quality is not None:
        fields.add(ObservationField.RESULT_QUALITY)
    if observation.valid_time is not None:
        fields.add(ObservationField.VALID_TIME)
    if observation.parameters is not None:
        fields.add(ObservationField.PARAMETERS)
    return frozenset(fields)


@dataclass(slots=True)
class Batch:
    destination: Destination
    fields: frozenset[ObservationField]
    observations: list[Observation] = field(default_factory=list[Observation])

    def __len__(self) -> int:
        return len(self.observations)

    @property
    def components(self) -> tuple[ObservationField, ...]:
        """Defined fields in column order."""

        return tuple(member for member in ObservationField if member in self.fields)

    def add(self, observation: Observation) -> None:
        self.observations.append(observation)

    def rows(self) -> list[list[object]]:
        components = self.components
        return [
            [_field_value(observation, component) for component in components]
            for observation in self.observations
        ]


def _field_value(observation: Observation, component: ObservationField) -> object:
    value: object
    match component:
        case ObservationField.PHENOMENON_TIME:
            value = observation.phenomenon_time
        case ObservationField.RESULT:
            value = observation.result
        case ObservationField.RESULT_TIME:
            value = observation.result_time
        case ObservationField.RESULT_QUALITY:
            value = observation.result_quality
        case ObservationField.VALID_TIME:
            value = observation.valid_time
        case ObservationField.PARAMETERS:
            value = observation.parameters
    return value


class ObservationBatcher:
    """Queue observations per destination and submit them in one bulk write.

    ``max_batch`` triggers an automatic flush once that many observations are
    queued. With ``use_bulk_writes=False`` observations are written one by
    one as they arrive. Observations that already carry an id are updated
    immediately in either mode; bulk writes only ever create.
    """

    def __init__(
        self,
        context: SyncContext,
        *,
        max_batch: int | None = None,
        use_bulk_writes: bool = True,
    ) -> None:
        if max_batch is not None and max_batch < 1:
            raise ValueError("max_batch must be positive")
        self._context = context
        self.max_batch = max_batch
        self.use_bulk_writes = use_bulk_writes
        self._batches: dict[DestinationKey, Batch] = {}
        self._last_key: DestinationKey | None = None
        self._last_batch: Batch | None = None
        self._queued = 0

    @property
    def pending(self) -> int:
        return self._queued

    def is_active(self, destination: Destination) -> bool:
        """Whether observations for ``destination`` are queued but not yet sent."""

        return destination_key(destination) in self._batches

    def add_observation(self, observation: Observation) -> None:
        destination = observation.destination
        if destination is None:
            raise ValueError("Observation must have a Channel or MultiChannel")

        if observation.id is not None or not self.use_bulk_writes:
            self._write_directly(observation)
            return

        self._batch_for(destination, observation).add(observation)
        self._queued += 1
        if self.max_batch is not None and self._queued >= self.max_batch:
            self.flush()

    def flush(self) -> int:
        """Submit all queued observations; returns how many the catalog accepted."""

        if not self._batches:
            return 0

        batches = list(self._batches.values())
        submitted = sum(len(batch) for batch in batches)
        try:
            tokens = self._context.governor.bulk_write(batches)
        finally:
            self._clear()

        errors = [token for token in tokens if token.startswith(ERROR_TOKEN_PREFIX)]
        inserted = submitted - len(errors)
        if errors:
            failure = PartialBatchFailure(
                submitted=submitted, failed=len(errors), first_error=errors[0]
            )
            log.warning("%s", failure)
            self._context.counters.failed += failure.failed
        self._context.counters.inserted += inserted
        log.debug("Flushed %s observations for %s channels", submitted, len(batches))
        return inserted

    def _batch_for(self, destination: Destination, observation: Observation) -> Batch:
        key = destination_key(destination)
        if key == self._last_key and self._last_batch is not None:
            return self._last_batch
        batch = self._batches.get(key)
        if batch is None:
            batch = Batch(destination=destination, fields=defined_fields(observation))
            self._batches[key] = batch
        self._last_key = key
        self._last_batch = batch
        return batch

    def _write_directly(self, observation: Observation) -> None:
        if observation.id is not None:
            self._context.governor.update(observation, _changed_fields(observation))
            self._context.counters.updated += 1
        else:
            self._context.governor.create(observation)
            self._context.counters.inserted += 1

    def _clear(self) -> None:
        self._batches.clear()
        self._last_key = None
        self._last_batch = None
        self._queued = 0


def _changed_fields(observation: Observation) -> frozenset[str]:
    values: dict[str, object] = {
        "phenomenon_time": observation.phenomenon_time,
        "result": observation.result,
        "result_time": observation.result_time,
        "result_quality": observation.result_quality,
        "valid_time": observation.valid_time,
        "parameters": observation.parameters,
    }
    return frozenset(name for name, value in values.items() if value is not None)
