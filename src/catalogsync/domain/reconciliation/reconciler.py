"""Find-or-create-or-update for catalog entities.

For one desired entity the reconciler walks these states:

- CACHED: an entity resolved earlier in the run is reused without a query
- QUERY: the catalog is searched with the caller's filter (default: by name)
  - no match -> CREATE
  - one match -> RECONCILE
  - several matches -> ``ConsistencyError``
- CREATE: the desired entity is persisted and cached
- RECONCILE: kind-specific diff; an update is sent only when a field changed

Transport failures propagate unchanged; nothing is retried here.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from catalogsync.domain.errors import ConsistencyError
from catalogsync.domain.filters import name_filter
from catalogsync.domain.model import CatalogEntity, EntityKind, Outcome

from .diff import diff_entity

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.cache import EntityCache
    from catalogsync.domain.context import SyncContext

log = getLogger(__name__)

DEFAULT_EXPAND: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.ASSET: ("Locations($select=id)",),
    EntityKind.CHANNEL: ("ObservedProperty($select=id)",),
    EntityKind.MULTI_CHANNEL: ("ObservedProperties($select=id)",),
}


@dataclass(slots=True, frozen=True)
class Reconciliation[TEntity: CatalogEntity]:
    """Authoritative entity after reconciliation and what it took to get there."""

    entity: TEntity
    outcome: Outcome
    changed: frozenset[str] = frozenset()


class Reconciler:
    def __init__(self, context: SyncContext) -> None:
        self._context = context

    def reconcile[TEntity: CatalogEntity](
        self,
        desired: TEntity,
        *,
        filter_expr: str | None = None,
        cached: TEntity | None = None,
        expand: Sequence[str] | None = None,
    ) -> Reconciliation[TEntity]:
        """Make the catalog hold ``desired``; returns the entity connectors should use.

        ``cached`` is an entity this run already resolved for the same filter.
        Without it, the run's cache for the entity kind is consulted, then the
        entities this run already resolved for the same filter; only then is
        the catalog queried. A cached tombstone goes straight to creation.
        """

        cache: EntityCache[Any] | None = self._context.cache_for(desired.kind)
        effective_filter = filter_expr or name_filter(desired.name)
        known_absent = False
        if cached is None and cache is not None:
            local_key = cache.key_for(desired)
            if local_key is not None and cache.contains_id(local_key):
                cached = cache.get(local_key)
                known_absent = cached is None

        if cached is None and not known_absent:
            cached = cast("TEntity | None", self._context.recall(desired.kind, effective_filter))

        current: TEntity | None
        if cached is not None:
            current = cached
        elif known_absent:
            current = None
        else:
            current = self._find(desired, effective_filter, expand)

        if current is None:
            result = self._create(desired, cache)
            self._context.remember(desired.kind, effective_filter, result.entity)
            return result

        self._context.remember(desired.kind, effective_filter, current)
        if cache is not None and current is not cached:
            cache.add(current)
        return self._update(current, desired)

    def _find[TEntity: CatalogEntity](
        self,
        desired: TEntity,
        effective_filter: str,
        expand: Sequence[str] | None,
    ) -> TEntity | None:
        matches = self._context.catalog.query(
            desired.kind,
            filter=effective_filter,
            expand=expand if expand is not None else DEFAULT_EXPAND.get(desired.kind, ()),
        )
        if len(matches) > 1:
            raise ConsistencyError(desired.kind, effective_filter, len(matches))
        if not matches:
            return None
        return cast("TEntity", matches[0])

    def _create[TEntity: CatalogEntity](
        self,
        desired: TEntity,
        cache: EntityCache[Any] | None,
    ) -> Reconciliation[TEntity]:
        log.info("Creating %s %s.", desired.kind, desired.name)
        self._context.governor.create(desired)
        self._context.counters.created += 1
        if cache is not None:
            cache.add(desired)
        return Reconciliation(entity=desired, outcome=Outcome.CREATED)

    def _update[TEntity: CatalogEntity](
        self,
        current: TEntity,
        desired: TEntity,
    ) -> Reconciliation[TEntity]:
        changed = diff_entity(current, desired)
        if not changed:
            self._context.counters.unchanged += 1
            log.debug("%s is up to date", current)
            return Reconciliation(entity=current, outcome=Outcome.UNCHANGED)

        log.info("Updating %s: %s", current, ", ".join(sorted(changed)))
        self._context.governor.update(current, changed)
        self._context.counters.updated += 1
        return Reconciliation(entity=current, outcome=Outcome.UPDATED, changed=frozenset(changed))
