"""SQLAlchemy adapter package for mapsync."""

from __future__ import annotations

from .mappings import (
    mapper_registry,
    reconciliation_audit_table,
    start_mappers,
)
from .repositories import SqlAlchemyAuditRepository
from .unit_of_work import (
    SqlAlchemyAuditUnitOfWork,
    StartupError,
    record_audit,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAuditRepository",
    "SqlAlchemyAuditUnitOfWork",
    "StartupError",
    "mapper_registry",
    "reconciliation_audit_table",
    "record_audit",
    "shutdown",
    "start_mappers",
    "startup",
]
