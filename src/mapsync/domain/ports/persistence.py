"""Ports for persisting the reconciliation audit log."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from mapsync.domain.model import ReconciliationAudit


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class AuditRepository(Repository[ReconciliationAudit], Protocol):
    """Persistence contract for reconciliation audit entries."""

    def list_recent(
        self, *, limit: int = 20, map_set_code: str | None = None
    ) -> list[ReconciliationAudit]: ...


@runtime_checkable
class AuditRecorder(Protocol):
    """Callable port the engine uses to record the outcome of one reconciliation."""

    def __call__(self, audit: ReconciliationAudit) -> None: ...


__all__ = ["AuditRecorder", "AuditRepository", "Repository"]
