"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from mapsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAuditUnitOfWork,
    is_started,
    record_audit,
    startup,
)
from mapsync.adapters.terminology_store import (
    TerminologyStoreClient,
    TerminologyStoreConceptResolver,
    TerminologyStoreFetcher,
)
from mapsync.common import InProcessRefsetLocks
from mapsync.config import get_terminology_store_config
from mapsync.domain.model import ReconciliationStatus
from mapsync.domain.reconciliation import MappingReconciler

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mapsync.config import TerminologyStoreConfig
    from mapsync.domain.model import MapProject, Mapping, ReconciliationAudit
    from mapsync.domain.ports import AuditRecorder, AuditUnitOfWork, RefsetLocks
    from mapsync.domain.reconciliation import ReconciliationReport

AuditUnitOfWorkFactory = Callable[[], "AuditUnitOfWork"]

log = getLogger(__name__)

# Shared by every reconciler of this process so concurrent runs on one refset queue up.
REFSET_LOCKS = InProcessRefsetLocks()


def build_reconciler(
    *,
    config: TerminologyStoreConfig | None = None,
    client: TerminologyStoreClient | None = None,
    locks: RefsetLocks | None = None,
    record: AuditRecorder | None = None,
) -> MappingReconciler:
    """Wire a reconciler to the Terminology Store adapters."""

    effective_client = client or TerminologyStoreClient(
        config=config or get_terminology_store_config()
    )
    concepts = TerminologyStoreConceptResolver(effective_client)
    fetcher = TerminologyStoreFetcher(effective_client, concepts=concepts)
    return MappingReconciler(
        fetcher=fetcher,
        mutator=effective_client,
        locks=locks or REFSET_LOCKS,
        invalidator=fetcher,
        concepts=concepts,
        record_audit=record,
    )


def reconcile_mappings(
    project: MapProject,
    mappings: Iterable[Mapping],
    *,
    reconciler: MappingReconciler | None = None,
) -> ReconciliationReport:
    """Reconcile submitted mappings and record each outcome in the audit log."""

    if reconciler is None:
        if not is_started():
            startup()
        reconciler = build_reconciler(record=record_audit)
    log.info(
        "Starting reconciliation of refset %s on %s for module %s",
        project.map_set.code,
        project.branch,
        project.module_id,
    )
    report = reconciler.reconcile_many(project, mappings)
    totals = report.by_status()
    log.info(
        "Finished reconciliation: success=%d, unchanged=%d, failed=%d",
        totals[ReconciliationStatus.SUCCESS],
        totals[ReconciliationStatus.UNCHANGED],
        totals[ReconciliationStatus.FAILED],
    )
    return report


def list_history(
    *,
    limit: int = 20,
    map_set_code: str | None = None,
    unit_of_work_factory: AuditUnitOfWorkFactory | None = None,
) -> list[ReconciliationAudit]:
    """Return the most recent audit entries, newest first."""

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyAuditUnitOfWork
    with unit_of_work_factory() as uow:
        return uow.repositories.audits.list_recent(limit=limit, map_set_code=map_set_code)
