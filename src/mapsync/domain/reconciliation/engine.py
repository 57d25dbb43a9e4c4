"""Orchestrator for reconciling submitted mappings with the Terminology Store.

One reconciliation of a source code runs under the refset lock of its map set:

1) normalize the submission against the project;
2) fetch the active and International snapshots and plan the changes;
3) stop early when nothing changed;
4) otherwise fetch inactive local entries, materialize and execute the plan;
5) fold the store's canonical records back into the returned mapping;
6) record the outcome in the audit log.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from mapsync.domain.model import (
    INTERNATIONAL_MODULE_ID,
    ReconciliationAudit,
    ReconciliationStatus,
)
from mapsync.domain.ports import MutationContext

from .execute import execute_plan
from .identity import entries_equivalent, sort_entries
from .normalize import prepare_submission, relation_name_for
from .plan import EXECUTION_ORDER, ChangeCase, MutationKind
from .planner import materialize, plan_changes
from .report import ReconciliationOutcome, ReconciliationReport

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mapsync.domain.model import MapEntry, MapProject, Mapping
    from mapsync.domain.ports import (
        AuditRecorder,
        CacheInvalidator,
        ConceptResolver,
        MappingSnapshotFetcher,
        MemberMutator,
        RefsetLocks,
    )

log = getLogger(__name__)


@dataclass(slots=True)
class MappingReconciler:
    """Bring the remote members of a map set in line with submitted mappings."""

    fetcher: MappingSnapshotFetcher
    mutator: MemberMutator
    locks: RefsetLocks
    invalidator: CacheInvalidator | None = None
    concepts: ConceptResolver | None = None
    record_audit: AuditRecorder | None = None
    international_module_id: str = INTERNATIONAL_MODULE_ID

    def reconcile(self, project: MapProject, submitted: Mapping) -> Mapping:
        """Reconcile one mapping and return it as now held by the store."""

        mapping, _ = self._run(project, submitted)
        return mapping

    def reconcile_outcome(self, project: MapProject, submitted: Mapping) -> ReconciliationOutcome:
        _, outcome = self._run(project, submitted)
        return outcome

    def _run(
        self, project: MapProject, submitted: Mapping
    ) -> tuple[Mapping, ReconciliationOutcome]:
        with self.locks.hold(project.map_set.code):
            try:
                mapping, outcome = self._reconcile_locked(project, submitted)
            except Exception as exc:
                self._record(
                    project,
                    ReconciliationOutcome(
                        code=submitted.code,
                        status=ReconciliationStatus.FAILED,
                        message=str(exc),
                    ),
                )
                raise
            self._record(project, outcome)
        return mapping, outcome

    def reconcile_many(
        self, project: MapProject, mappings: Iterable[Mapping]
    ) -> ReconciliationReport:
        """Reconcile each mapping in turn; one failure does not stop the others."""

        report = ReconciliationReport()
        for mapping in mappings:
            try:
                outcome = self.reconcile_outcome(project, mapping)
            except Exception as exc:  # noqa: BLE001
                log.exception("Reconciliation of %s failed", mapping.code)
                outcome = ReconciliationOutcome(
                    code=mapping.code,
                    status=ReconciliationStatus.FAILED,
                    message=str(exc),
                )
            report.add(outcome)
        return report

    def _reconcile_locked(
        self, project: MapProject, submitted: Mapping
    ) -> tuple[Mapping, ReconciliationOutcome]:
        prepared = prepare_submission(project, submitted)
        map_set = project.map_set

        existing_active = self.fetcher.fetch_active_mapping(
            project.branch, map_set, prepared.code
        )
        existing_international = self.fetcher.fetch_active_mapping(
            project.branch,
            map_set,
            prepared.code,
            module_id=self.international_module_id,
        )
        changes = plan_changes(
            prepared,
            existing_active,
            existing_international,
            international_module_id=self.international_module_id,
        )
        if changes.case is ChangeCase.UNCHANGED:
            mapping = self._fold(project, prepared, [*existing_active.entries])
            return mapping, ReconciliationOutcome(
                code=prepared.code,
                status=ReconciliationStatus.UNCHANGED,
                mapping=mapping,
            )

        existing_inactive = self.fetcher.fetch_inactive_local_mapping(
            project.branch, map_set, prepared.code, project.module_id
        )
        plan = materialize(changes, existing_inactive)
        context = MutationContext(project=project, source_code=prepared.code)
        result = execute_plan(plan, self.mutator, context, self.invalidator)
        log.info(
            "Reconciled %s in refset %s (%s): %s",
            prepared.code,
            map_set.code,
            changes.case,
            ", ".join(f"{kind}={count}" for kind, count in plan.counts().items()),
        )

        touched = {
            entry.member_id
            for kind in EXECUTION_ORDER
            for entry in plan.entries_for(kind)
            if entry.member_id
        }
        untouched = [
            entry
            for entry in (*existing_active.entries, *existing_international.entries)
            if entry.member_id not in touched
        ]
        mapping = self._fold(project, prepared, [*result.written, *untouched])
        return mapping, ReconciliationOutcome(
            code=prepared.code,
            status=ReconciliationStatus.SUCCESS,
            counts=result.counts,
            mapping=mapping,
        )

    def _fold(
        self, project: MapProject, submitted: Mapping, candidates: list[MapEntry]
    ) -> Mapping:
        # Prefer the store's record for each submitted entry so member ids and
        # release state are reported as written.
        active = [entry for entry in candidates if entry.active]
        entries: list[MapEntry] = []
        for entry in submitted.entries:
            remote = next((other for other in active if entries_equivalent(other, entry)), entry)
            entries.append(self._with_names(project, remote))
        name = submitted.name or self._concept_name(
            project.map_set.from_terminology, project.map_set.from_version, submitted.code
        )
        return replace(submitted, name=name or "", entries=sort_entries(entries))

    def _with_names(self, project: MapProject, entry: MapEntry) -> MapEntry:
        relation = entry.relation or relation_name_for(project, entry.relation_code)
        to_name = entry.to_name
        if entry.to_code and not to_name:
            to_name = self._concept_name(
                project.map_set.to_terminology, project.map_set.to_version, entry.to_code
            ) or ""
        return replace(entry, relation=relation, to_name=to_name)

    def _concept_name(self, terminology: str, version: str, code: str) -> str | None:
        if self.concepts is None or not terminology:
            return None
        concept = self.concepts.resolve_concept(terminology, version, code)
        return concept.name if concept is not None else None

    def _record(self, project: MapProject, outcome: ReconciliationOutcome) -> None:
        if self.record_audit is None:
            return
        self.record_audit(
            ReconciliationAudit(
                map_set_code=project.map_set.code,
                source_code=outcome.code,
                branch=project.branch,
                status=outcome.status,
                created=outcome.count(MutationKind.CREATE),
                deleted=outcome.count(MutationKind.DELETE),
                inactivated=outcome.count(MutationKind.INACTIVATE),
                reactivated=outcome.count(MutationKind.REACTIVATE),
                updated=outcome.count(MutationKind.UPDATE),
                message=outcome.message,
            )
        )
