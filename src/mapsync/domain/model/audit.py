"""Audit records for mapping reconciliations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID, uuid4


class ReconciliationStatus(StrEnum):
    SUCCESS = "success"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass(eq=False, kw_only=True)
class ReconciliationAudit:
    """One reconciliation attempt for a single source code."""

    map_set_code: str
    source_code: str
    branch: str
    status: ReconciliationStatus
    created: int = 0
    deleted: int = 0
    inactivated: int = 0
    reactivated: int = 0
    updated: int = 0
    message: str | None = None
    recorded_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    id: UUID = field(default_factory=uuid4)
