"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from mapsync.adapters.sqlalchemy.mappings import reconciliation_audit_table
from mapsync.domain.model import ReconciliationAudit

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyAuditRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ReconciliationAudit) -> None:
        self.session.add(entity)

    def list_recent(
        self, *, limit: int = 20, map_set_code: str | None = None
    ) -> list[ReconciliationAudit]:
        stmt = select(ReconciliationAudit)
        if map_set_code is not None:
            stmt = stmt.where(reconciliation_audit_table.c.map_set_code == map_set_code)
        stmt = stmt.order_by(reconciliation_audit_table.c.recorded_at.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())
