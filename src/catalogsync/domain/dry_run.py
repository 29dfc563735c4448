"""Write suppression for dry runs.

Every write issued by the reconciler and the observation batcher goes
through ``DryRunGovernor``. When active, writes become logged no-ops that
report success, so counters and summaries show what a real run would do.
Reads are never routed through the governor.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from catalogsync.domain.batching import Batch
    from catalogsync.domain.model import StoredItem
    from catalogsync.domain.ports import CatalogWriter

log = getLogger(__name__)

DRY_RUN_TOKEN = "dry-run"


class DryRunGovernor:
    def __init__(self, writer: CatalogWriter, *, active: bool = False) -> None:
        self._writer = writer
        self.active = active

    def create(self, item: StoredItem) -> None:
        if self.active:
            log.info("Dry run: not creating %s", item)
            return
        self._writer.create(item)

    def update(self, item: StoredItem, changed: Collection[str]) -> None:
        if self.active:
            log.info("Dry run: not updating %s (%s)", item, ", ".join(sorted(changed)))
            return
        self._writer.update(item, changed)

    def bulk_write(self, batches: Sequence[Batch]) -> list[str]:
        if self.active:
            total = sum(len(batch) for batch in batches)
            log.info("Dry run: not writing %s observations to %s channels", total, len(batches))
            return [DRY_RUN_TOKEN] * total
        return self._writer.bulk_write(batches)
