"""In-memory catalog fake used across domain and app tests."""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from catalogsync.domain.errors import RemoteCallFailure
from catalogsync.domain.filters import name_filter
from catalogsync.domain.model import CatalogEntity, Channel, EntityKind, Observation

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from catalogsync.domain.batching import Batch
    from catalogsync.domain.model import Destination, EntityId, StoredItem


START = datetime(2024, 1, 1, tzinfo=UTC)


@dataclass(frozen=True)
class QueryCall:
    kind: EntityKind
    filter: str
    select: tuple[str, ...] = ()
    expand: tuple[str, ...] = ()
    top: int | None = None
    order_by: str | None = None


@dataclass
class FakeCatalog:
    """Records every call and serves seeded entities.

    Name filters (``name eq '...'``) and the empty filter are answered from the
    seeded entities; any other filter must be registered with ``respond``.
    """

    entities: dict[EntityKind, list[CatalogEntity]] = field(
        default_factory=lambda: defaultdict(list)
    )
    observations: list[Observation] = field(default_factory=list)
    responses: dict[tuple[EntityKind, str], list[CatalogEntity]] = field(default_factory=dict)
    queries: list[QueryCall] = field(default_factory=list)
    created: list[StoredItem] = field(default_factory=list)
    updated: list[tuple[StoredItem, frozenset[str]]] = field(default_factory=list)
    deleted: list[StoredItem] = field(default_factory=list)
    bulk_writes: list[list[Batch]] = field(default_factory=list)
    bulk_errors: dict[int, str] = field(default_factory=dict)
    failing_deletes: set[EntityId] = field(default_factory=set)
    next_id: int = 1
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def seed(self, *entities: CatalogEntity) -> None:
        for entity in entities:
            if entity.id is None:
                entity.id = self._allocate_id()
            self.entities[entity.kind].append(entity)

    def respond(self, kind: EntityKind, filter_expr: str, entities: list[CatalogEntity]) -> None:
        self.responses[(kind, filter_expr)] = entities

    @property
    def write_calls(self) -> int:
        return len(self.created) + len(self.updated) + len(self.bulk_writes)

    def query(
        self,
        kind: EntityKind,
        *,
        filter: str = "",  # noqa: A002
        select: Sequence[str] = (),
        expand: Sequence[str] = (),
        top: int | None = None,
        order_by: str | None = None,
    ) -> list[CatalogEntity]:
        self.queries.append(
            QueryCall(kind, filter, tuple(select), tuple(expand), top, order_by)
        )
        if (kind, filter) in self.responses:
            return list(self.responses[(kind, filter)])
        seeded = self.entities[kind]
        if not filter:
            return list(seeded)
        return [entity for entity in seeded if name_filter(entity.name) == filter]

    def query_observations(
        self,
        *,
        filter: str = "",  # noqa: A002
        select: Sequence[str] = (),
        expand: Sequence[str] = (),
        top: int | None = None,
        order_by: str | None = None,
    ) -> list[Observation]:
        self.queries.append(
            QueryCall(EntityKind.OBSERVATION, filter, tuple(select), tuple(expand), top, order_by)
        )
        return list(self.observations)

    def create(self, item: StoredItem) -> None:
        item.id = self._allocate_id()
        self.created.append(item)
        if isinstance(item, CatalogEntity):
            self.entities[item.kind].append(item)

    def update(self, item: StoredItem, changed: Collection[str]) -> None:
        self.updated.append((item, frozenset(changed)))

    def bulk_write(self, batches: Sequence[Batch]) -> list[str]:
        self.bulk_writes.append(list(batches))
        total = sum(len(batch) for batch in batches)
        tokens: list[str] = []
        for index in range(total):
            if index in self.bulk_errors:
                tokens.append(self.bulk_errors[index])
            else:
                tokens.append(f"http://catalog.test/Observations({self._allocate_id()})")
        return tokens

    def delete(self, item: StoredItem) -> None:
        if item.id in self.failing_deletes:
            raise RemoteCallFailure(f"cannot delete {item}", status_code=500)
        with self._lock:
            self.deleted.append(item)

    def _allocate_id(self) -> int:
        with self._lock:
            allocated = self.next_id
            self.next_id += 1
        return allocated


def observations_for(destination: Destination, count: int) -> list[Observation]:
    """Build ``count`` observations for ``destination``, one minute apart."""

    observations: list[Observation] = []
    for index in range(count):
        observation = Observation(phenomenon_time=START + timedelta(minutes=index), result=index)
        if isinstance(destination, Channel):
            observation.channel = destination
        else:
            observation.multi_channel = destination
        observations.append(observation)
    return observations
