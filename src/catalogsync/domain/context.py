"""Per-run state shared by the sync components.

One ``SyncContext`` is created at the start of a run and discarded at its
end. It owns everything that would otherwise be process-wide: the entity
caches, the write governor and the counters. Not safe for concurrent use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from catalogsync.domain.cache import DEFAULT_PAGE_SIZE
from catalogsync.domain.dry_run import DryRunGovernor

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.cache import EntityCache
    from catalogsync.domain.model import CatalogEntity, EntityKind
    from catalogsync.domain.ports import CatalogService


@dataclass(slots=True)
class SyncCounters:
    """Running tally of remote writes (intended writes, in a dry run)."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    inserted: int = 0
    failed: int = 0
    deleted: int = 0

    def summary(self) -> str:
        return (
            f"created={self.created}, updated={self.updated}, unchanged={self.unchanged}, "
            f"inserted={self.inserted}, failed={self.failed}, deleted={self.deleted}"
        )


@dataclass(slots=True)
class SyncContext:
    catalog: CatalogService
    dry_run: bool = False
    counters: SyncCounters = field(default_factory=SyncCounters)
    caches: dict[EntityKind, EntityCache[Any]] = field(default_factory=dict)
    page_size: int = DEFAULT_PAGE_SIZE
    resolved: dict[tuple[EntityKind, str], CatalogEntity] = field(default_factory=dict)
    governor: DryRunGovernor = field(init=False)

    def __post_init__(self) -> None:
        self.governor = DryRunGovernor(self.catalog, active=self.dry_run)

    def register_cache(self, cache: EntityCache[Any]) -> None:
        if cache.kind in self.caches:
            raise ValueError(f"A cache for {cache.kind} is already registered")
        self.caches[cache.kind] = cache

    def cache_for(self, kind: EntityKind) -> EntityCache[Any] | None:
        return self.caches.get(kind)

    def load_cache(
        self,
        cache: EntityCache[Any],
        filter_expr: str = "",
        *,
        select: Sequence[str] = (),
        expand: Sequence[str] = (),
    ) -> int:
        """Register ``cache`` and fill it from the catalog in pages of ``page_size``."""

        self.register_cache(cache)
        return cache.load(
            self.catalog, filter_expr, select=select, expand=expand, page_size=self.page_size
        )

    def recall(self, kind: EntityKind, filter_expr: str) -> CatalogEntity | None:
        """Entity this run already resolved for ``filter_expr``, if any."""

        return self.resolved.get((kind, filter_expr))

    def remember(self, kind: EntityKind, filter_expr: str, entity: CatalogEntity) -> None:
        self.resolved[(kind, filter_expr)] = entity
