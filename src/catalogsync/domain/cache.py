"""Run-scoped cache of catalog entities keyed by their source-system local key."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from catalogsync.domain.model import CatalogEntity, EntityKind, LocalKey
    from catalogsync.domain.ports import CatalogReader

log = getLogger(__name__)

DEFAULT_PAGE_SIZE = 10_000

type KeyExtractor[TEntity] = Callable[[TEntity], LocalKey | None]


def property_key(*path: str) -> KeyExtractor[CatalogEntity]:
    """Build an extractor reading a (nested) property, e.g. ``property_key("localId")``."""

    if not path:
        raise ValueError("property_key requires at least one path element")

    def extract(entity: CatalogEntity) -> LocalKey | None:
        value: object = entity.properties
        for part in path:
            if not isinstance(value, dict):
                return None
            value = value.get(part)
        if value is None or isinstance(value, dict | list):
            return None
        return value

    return extract


def _entity_name(entity: CatalogEntity) -> str:
    return entity.name


class EntityCache[TEntity: CatalogEntity]:
    """Local-key and name index over entities of one kind.

    A local key registered with ``register_null`` is a tombstone: the entity
    is known to be absent remotely, and ``contains_id`` reports it so callers
    can skip the lookup. There is no eviction; the cache lives for one run.
    """

    def __init__(
        self,
        kind: EntityKind,
        *,
        local_key: KeyExtractor[TEntity],
        name_key: Callable[[TEntity], str] | None = _entity_name,
    ) -> None:
        self.kind = kind
        self._local_key = local_key
        self._name_key = name_key
        self._by_local_key: dict[LocalKey, TEntity | None] = {}
        self._by_name: dict[str, TEntity] = {}

    def __len__(self) -> int:
        return len(self._by_local_key)

    @property
    def is_empty(self) -> bool:
        return not self._by_local_key

    def get(self, local_key: LocalKey) -> TEntity | None:
        return self._by_local_key.get(local_key)

    def get_by_name(self, name: str) -> TEntity | None:
        return self._by_name.get(name)

    def contains_id(self, local_key: LocalKey) -> bool:
        """True once ``local_key`` was resolved, to an entity or to a tombstone."""

        return local_key in self._by_local_key

    def register_null(self, local_key: LocalKey) -> TEntity | None:
        """Record that ``local_key`` has no remote entity; returns the previous value."""

        previous = self._by_local_key.get(local_key)
        self._by_local_key[local_key] = None
        return previous

    def key_for(self, entity: TEntity) -> LocalKey | None:
        try:
            return self._local_key(entity)
        except (AttributeError, KeyError, TypeError, ValueError):
            # Entity without a usable local key; it can still be indexed by name.
            return None

    def add(self, entity: TEntity) -> bool:
        """Index ``entity``; returns whether it carried a local key."""

        has_local_key = False
        local_key = self.key_for(entity)
        if local_key is not None:
            if self._by_local_key.get(local_key) is not None:
                log.debug("Duplicate local key %r for %s; keeping %s", local_key, self.kind, entity)
            self._by_local_key[local_key] = entity
            has_local_key = True
        if self._name_key is not None:
            self._by_name[self._name_key(entity)] = entity
        return has_local_key

    def add_all(self, entities: Iterable[TEntity]) -> int:
        return sum(1 for entity in entities if self.add(entity))

    def load(
        self,
        catalog: CatalogReader,
        filter_expr: str = "",
        *,
        select: Sequence[str] = (),
        expand: Sequence[str] = (),
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> int:
        """Bulk-load matching entities, returning how many had a local key.

        Duplicate local keys within a load keep the entity loaded last.
        """

        entities = catalog.query(
            self.kind,
            filter=filter_expr,
            select=select,
            expand=expand,
            top=page_size,
            order_by="id asc",
        )
        count = self.add_all(entities)  # pyright: ignore[reportArgumentType]
        log.info("Loaded %s %s entities (%s with local key)", len(entities), self.kind, count)
        return count

    def values_with_local_key(self) -> list[TEntity]:
        return [entity for entity in self._by_local_key.values() if entity is not None]

    def values_with_name(self) -> list[TEntity]:
        return list(self._by_name.values())
