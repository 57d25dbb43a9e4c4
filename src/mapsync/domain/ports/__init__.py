"""Domain port definitions for adapters."""

from __future__ import annotations

from .locking import RefsetLocks
from .persistence import AuditRecorder, AuditRepository, Repository
from .terminology import (
    CacheInvalidator,
    ConceptResolver,
    MappingSnapshotFetcher,
    MemberMutator,
    MutationContext,
)
from .unit_of_work import (
    AuditRepositories,
    AuditUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AuditRecorder",
    "AuditRepositories",
    "AuditRepository",
    "AuditUnitOfWork",
    "CacheInvalidator",
    "ConceptResolver",
    "MappingSnapshotFetcher",
    "MemberMutator",
    "MutationContext",
    "RefsetLocks",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
]
