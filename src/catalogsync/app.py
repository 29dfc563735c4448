"""Application entry points for connectors."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Self

from catalogsync.adapters.sensorthings import SensorThingsCatalog
from catalogsync.config import get_catalog_config
from catalogsync.domain.batching import ObservationBatcher
from catalogsync.domain.context import SyncContext
from catalogsync.domain.deletion import BulkDeleter
from catalogsync.domain.model import EntityKind
from catalogsync.domain.reconciliation import Reconciler

if TYPE_CHECKING:
    from types import TracebackType

    from catalogsync.config import CatalogConfig
    from catalogsync.domain.model import StoredItem
    from catalogsync.domain.ports import CatalogService

log = getLogger(__name__)


@dataclass(slots=True)
class SyncRun:
    """Components of one synchronisation run, sharing a single ``SyncContext``.

    Used as a context manager: pending observations are flushed and the
    counters are logged when the block exits without an exception.
    """

    context: SyncContext
    reconciler: Reconciler
    batcher: ObservationBatcher
    deleter: BulkDeleter
    delete_parallelism: int = 1

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            log.warning(
                "Sync run aborted with %s pending observations: %s",
                self.batcher.pending,
                self.context.counters.summary(),
            )
            return
        self.batcher.flush()
        log.info(
            "Finished sync run%s: %s",
            " (dry run)" if self.context.dry_run else "",
            self.context.counters.summary(),
        )


def open_sync_run(
    config: CatalogConfig | None = None,
    *,
    catalog: CatalogService | None = None,
) -> SyncRun:
    """Wire a run against the configured catalog (or the given one)."""

    effective_config = config or get_catalog_config()
    effective_catalog = catalog or SensorThingsCatalog(config=effective_config)
    context = SyncContext(
        catalog=effective_catalog,
        dry_run=effective_config.dry_run,
        page_size=effective_config.page_size,
    )
    log.info(
        "Starting sync run against %s: dry_run=%s, max_batch=%s",
        effective_config.base_url,
        effective_config.dry_run,
        effective_config.max_batch,
    )
    return SyncRun(
        context=context,
        reconciler=Reconciler(context),
        batcher=ObservationBatcher(
            context,
            max_batch=effective_config.max_batch,
            use_bulk_writes=effective_config.use_bulk_writes,
        ),
        deleter=BulkDeleter(effective_catalog, counters=context.counters),
        delete_parallelism=effective_config.delete_parallelism,
    )


@dataclass(slots=True, frozen=True)
class PurgeResult:
    matched: int
    deleted: int
    dry_run: bool = False


def purge_items(
    kind: EntityKind,
    filter_expr: str = "",
    *,
    config: CatalogConfig | None = None,
    catalog: SensorThingsCatalog | None = None,
    parallelism: int | None = None,
    dry_run: bool | None = None,
) -> PurgeResult:
    """Delete every item of ``kind`` matching ``filter_expr``.

    In a dry run the matching items are only counted.
    """

    effective_config = config or get_catalog_config()
    effective_catalog = catalog or SensorThingsCatalog(config=effective_config)
    effective_dry_run = effective_config.dry_run if dry_run is None else dry_run
    effective_parallelism = parallelism or effective_config.delete_parallelism

    items: list[StoredItem]
    if kind is EntityKind.OBSERVATION:
        items = list(effective_catalog.query_observations(filter=filter_expr, select=("id",)))
    else:
        items = list(effective_catalog.query(kind, filter=filter_expr, select=("id",)))
    log.info("Found %s %s items matching %r", len(items), kind, filter_expr)

    if effective_dry_run:
        log.info("Dry run: not deleting %s %s items", len(items), kind)
        return PurgeResult(matched=len(items), deleted=0, dry_run=True)

    deleted = BulkDeleter(effective_catalog).delete(items, parallelism=effective_parallelism)
    return PurgeResult(matched=len(items), deleted=deleted)
