"""Public domain model surface."""

from __future__ import annotations

from mapsync.domain.model.audit import ReconciliationAudit, ReconciliationStatus
from mapsync.domain.model.mapping import (
    ALWAYS_ADVICE_PREFIX,
    INTERNATIONAL_MODULE_ID,
    MAP_CORRELATION_ID,
    Concept,
    MapEntry,
    MapProject,
    MapRelation,
    MapSet,
    Mapping,
    MemberId,
    ModuleId,
)

__all__ = [
    "ALWAYS_ADVICE_PREFIX",
    "INTERNATIONAL_MODULE_ID",
    "MAP_CORRELATION_ID",
    "Concept",
    "MapEntry",
    "MapProject",
    "MapRelation",
    "MapSet",
    "Mapping",
    "MemberId",
    "ModuleId",
    "ReconciliationAudit",
    "ReconciliationStatus",
]
