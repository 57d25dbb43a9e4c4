"""SQLAlchemy mapping metadata for the reconciliation audit log."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from mapsync.domain.model import ReconciliationAudit, ReconciliationStatus

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

reconciliation_audit_table = Table(
    "reconciliation_audit",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("map_set_code", String, nullable=False),
    Column("source_code", String, nullable=False),
    Column("branch", String, nullable=False),
    Column(
        "status",
        Enum(ReconciliationStatus, native_enum=False, length=16),
        nullable=False,
    ),
    Column("created", Integer, nullable=False, default=0),
    Column("deleted", Integer, nullable=False, default=0),
    Column("inactivated", Integer, nullable=False, default=0),
    Column("reactivated", Integer, nullable=False, default=0),
    Column("updated", Integer, nullable=False, default=0),
    Column("message", Text, nullable=True),
    Column("recorded_at", UTCDateTime(), nullable=False),
    Index("ix_reconciliation_audit_map_set_code_source_code", "map_set_code", "source_code"),
    Index("ix_reconciliation_audit_recorded_at", "recorded_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the audit model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        ReconciliationAudit,
        reconciliation_audit_table,
    )

    configure_mappers()
    return mapper_registry
