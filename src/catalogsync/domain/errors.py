"""Error types raised (or reported) by the sync core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogsync.domain.model import EntityKind


class CatalogSyncError(RuntimeError):
    """Base class for errors surfaced to connectors."""


class ConsistencyError(CatalogSyncError):
    """A filter expected to identify one entity matched several.

    Fatal: the core never picks one of the candidates.
    """

    def __init__(self, kind: EntityKind, filter_expr: str, count: int) -> None:
        super().__init__(f"More than one {kind} ({count}) matches filter: {filter_expr}")
        self.kind = kind
        self.filter = filter_expr
        self.count = count


class RemoteCallFailure(CatalogSyncError):
    """Raised when a call to the remote catalog fails at transport or protocol level."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class PartialBatchFailure:
    """Summary of a bulk write in which some items were rejected.

    Reported through logging only; processing continues.
    """

    submitted: int
    failed: int
    first_error: str

    @property
    def succeeded(self) -> int:
        return self.submitted - self.failed

    def __str__(self) -> str:
        return (
            f"Failed to insert {self.failed} of {self.submitted} observations. "
            f"First error: {self.first_error}"
        )
