"""Best-effort bulk deletion of catalog items."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.context import SyncCounters
    from catalogsync.domain.model import StoredItem
    from catalogsync.domain.ports import CatalogService

log = getLogger(__name__)


class BulkDeleter:
    """Delete many items, optionally on a bounded worker pool.

    Any failed delete is logged and does not stop the others; nothing is
    rolled back. ``delete`` returns only once every item was deleted or failed.
    """

    def __init__(self, catalog: CatalogService, *, counters: SyncCounters | None = None) -> None:
        self._catalog = catalog
        self._counters = counters

    def delete(self, items: Sequence[StoredItem], parallelism: int = 1) -> int:
        """Delete ``items`` and return how many deletes succeeded."""

        if not items:
            return 0
        if parallelism <= 1:
            deleted = sum(1 for item in items if self._delete_one(item))
        else:
            deleted = self._delete_parallel(items, parallelism)

        failed = len(items) - deleted
        if failed:
            log.warning("Deleted %s of %s items; %s failed", deleted, len(items), failed)
        else:
            log.info("Deleted %s items", deleted)
        if self._counters is not None:
            self._counters.deleted += deleted
        return deleted

    def _delete_one(self, item: StoredItem) -> bool:
        try:
            self._catalog.delete(item)
        except Exception:  # noqa: BLE001
            log.exception("Failed to delete %s", item)
            return False
        return True

    def _delete_parallel(self, items: Sequence[StoredItem], parallelism: int) -> int:
        deleted = 0
        with ThreadPoolExecutor(max_workers=parallelism, thread_name_prefix="delete") as pool:
            futures = [pool.submit(self._delete_one, item) for item in items]
            for future in as_completed(futures):
                if future.result():
                    deleted += 1
        return deleted
