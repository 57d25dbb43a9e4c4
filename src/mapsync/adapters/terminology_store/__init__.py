"""Terminology Store adapter."""

from __future__ import annotations

from .cache import MemberCache, MemberQuery
from .client import TerminologyStoreClient
from .errors import (
    BulkJobFailed,
    JobTimeout,
    MissingJobHandle,
    RemoteCallFailed,
    TerminologyStoreError,
)
from .fetcher import TerminologyStoreConceptResolver, TerminologyStoreFetcher
from .jobs import JobStatus, wait_for_job

__all__ = [
    "BulkJobFailed",
    "JobStatus",
    "JobTimeout",
    "MemberCache",
    "MemberQuery",
    "MissingJobHandle",
    "RemoteCallFailed",
    "TerminologyStoreClient",
    "TerminologyStoreConceptResolver",
    "TerminologyStoreError",
    "TerminologyStoreFetcher",
    "wait_for_job",
]
