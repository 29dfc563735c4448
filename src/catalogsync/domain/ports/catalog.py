"""Port describing the remote catalog service consumed by the sync core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from catalogsync.domain.batching import Batch
    from catalogsync.domain.model import CatalogEntity, EntityKind, StoredItem


@runtime_checkable
class CatalogReader(Protocol):
    """Read side of the catalog."""

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
        """Return every entity of ``kind`` matching ``filter``, across all pages."""
        ...


@runtime_checkable
class CatalogWriter(Protocol):
    """Write side of the catalog; the part the dry-run governor suppresses."""

    def create(self, item: StoredItem) -> None:
        """Persist ``item`` and assign its catalog id."""
        ...

    def update(self, item: StoredItem, changed: Collection[str]) -> None:
        """Send the fields named in ``changed`` for an already persisted item."""
        ...

    def bulk_write(self, batches: Sequence[Batch]) -> list[str]:
        """Write all batches at once; one outcome token per observation, in order.

        Tokens starting with ``"error"`` denote per-item failures.
        """
        ...


@runtime_checkable
class CatalogService(CatalogReader, CatalogWriter, Protocol):
    """Full catalog contract."""

    def delete(self, item: StoredItem) -> None: ...


__all__ = ["CatalogReader", "CatalogService", "CatalogWriter"]
