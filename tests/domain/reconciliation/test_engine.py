from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from mapsync.domain.model import (
    INTERNATIONAL_MODULE_ID,
    Concept,
    ReconciliationStatus,
)
from mapsync.domain.reconciliation import (
    AmbiguousSubmission,
    MappingReconciler,
    MutationKind,
)
from tests.helpers.mappings import (
    BRANCH,
    MAP_SET_CODE,
    SOURCE_CODE,
    AuditCollector,
    FakeTerminologyStore,
    RecordingLocks,
    make_entry,
    make_mapping,
    make_project,
)


@dataclass
class _Concepts:
    names: dict[str, str] = field(default_factory=dict)
    lookups: list[tuple[str, str, str]] = field(default_factory=list)

    def resolve_concept(self, terminology: str, version: str, code: str) -> Concept | None:
        self.lookups.append((terminology, version, code))
        name = self.names.get(code)
        if name is None:
            return None
        return Concept(code=code, name=name, terminology=terminology, version=version)


@dataclass
class _Harness:
    store: FakeTerminologyStore = field(default_factory=FakeTerminologyStore)
    locks: RecordingLocks = field(default_factory=RecordingLocks)
    audits: AuditCollector = field(default_factory=AuditCollector)
    concepts: _Concepts | None = None

    def reconciler(self) -> MappingReconciler:
        return MappingReconciler(
            fetcher=self.store,
            mutator=self.store,
            locks=self.locks,
            invalidator=self.store,
            concepts=self.concepts,
            record_audit=self.audits,
        )


@pytest.fixture
def harness() -> _Harness:
    return _Harness()


def test_new_mapping_is_created_and_returned_with_member_ids(harness: _Harness) -> None:
    result = harness.reconciler().reconcile(make_project(), make_mapping(make_entry("X40")))

    assert [entry.member_id for entry in result.entries] == ["member-1"]
    assert result.entries[0].advices == frozenset({"ALWAYS X40"})
    assert result.entries[0].relation == "MAP SOURCE CONCEPT IS PROPERLY CLASSIFIED"
    assert harness.store.mutation_calls() == [("create_single", ("member-1",))]
    assert harness.store.invalidated == [BRANCH]


def test_lock_is_held_for_the_map_set_and_released(harness: _Harness) -> None:
    harness.reconciler().reconcile(make_project(), make_mapping(make_entry("X40")))

    assert harness.locks.acquired == [MAP_SET_CODE]
    assert harness.locks.released == [MAP_SET_CODE]
    assert not harness.locks.is_held(MAP_SET_CODE)


def test_successful_reconciliation_is_audited(harness: _Harness) -> None:
    harness.reconciler().reconcile(make_project(), make_mapping(make_entry("X40")))

    [audit] = harness.audits.audits
    assert audit.status is ReconciliationStatus.SUCCESS
    assert audit.map_set_code == MAP_SET_CODE
    assert audit.source_code == SOURCE_CODE
    assert audit.branch == BRANCH
    assert audit.created == 1
    assert audit.deleted == 0


def test_outcome_carries_the_reconciled_mapping(harness: _Harness) -> None:
    outcome = harness.reconciler().reconcile_outcome(
        make_project(), make_mapping(make_entry("X40"))
    )

    assert outcome.status is ReconciliationStatus.SUCCESS
    assert outcome.count(MutationKind.CREATE) == 1
    assert outcome.mapping is not None
    assert [entry.member_id for entry in outcome.mapping.entries] == ["member-1"]


def test_second_identical_submission_makes_no_mutation(harness: _Harness) -> None:
    reconciler = harness.reconciler()
    submitted = make_mapping(make_entry("X40"), make_entry("Y10", group=2))

    first = reconciler.reconcile(make_project(), submitted)
    harness.store.calls.clear()
    outcome = reconciler.reconcile_outcome(make_project(), submitted)

    assert outcome.status is ReconciliationStatus.UNCHANGED
    assert harness.store.mutation_calls() == []
    assert ("fetch_inactive", ("51000202101",)) not in harness.store.calls
    assert outcome.mapping is not None
    assert [entry.member_id for entry in outcome.mapping.entries] == [
        entry.member_id for entry in first.entries
    ]


def test_changed_target_on_released_entry_inactivates_and_creates(harness: _Harness) -> None:
    harness.store.seed(
        SOURCE_CODE,
        make_entry("X40", advices=["ALWAYS X40"], member_id="m1", released=True),
    )

    outcome = harness.reconciler().reconcile_outcome(
        make_project(), make_mapping(make_entry("X41"))
    )

    assert outcome.count(MutationKind.CREATE) == 1
    assert outcome.count(MutationKind.INACTIVATE) == 1
    assert harness.store.members["m1"][1].active is False
    assert outcome.mapping is not None
    assert [entry.to_code for entry in outcome.mapping.entries] == ["X41"]
    assert outcome.mapping.entries[0].member_id != "m1"


def test_changed_advice_on_released_entry_keeps_member_id(harness: _Harness) -> None:
    harness.store.seed(
        SOURCE_CODE,
        make_entry(
            "X40",
            advices=["ALWAYS X40"],
            member_id="m1",
            released=True,
            relation_code="447639009",
        ),
    )

    result = harness.reconciler().reconcile(make_project(), make_mapping(make_entry("X40")))

    assert harness.store.mutation_calls() == [("update_single", ("m1",))]
    assert [entry.member_id for entry in result.entries] == ["m1"]
    assert result.entries[0].relation_code == "447637006"


def test_submission_matching_international_removes_local_override(harness: _Harness) -> None:
    harness.store.seed(
        SOURCE_CODE,
        make_entry(
            "X40",
            advices=["ALWAYS X40"],
            module_id=INTERNATIONAL_MODULE_ID,
            member_id="intl-1",
            released=True,
        ),
        make_entry("X41", advices=["ALWAYS X41"], member_id="local-1", released=True),
    )

    result = harness.reconciler().reconcile(make_project(), make_mapping(make_entry("X40")))

    assert harness.store.mutation_calls() == [("update_single", ("local-1",))]
    assert harness.store.members["local-1"][1].active is False
    assert [entry.member_id for entry in result.entries] == ["intl-1"]


def test_override_of_international_adds_local_entries(harness: _Harness) -> None:
    harness.store.seed(
        SOURCE_CODE,
        make_entry(
            "X40",
            advices=["ALWAYS X40"],
            module_id=INTERNATIONAL_MODULE_ID,
            member_id="intl-1",
            released=True,
        ),
    )

    result = harness.reconciler().reconcile(
        make_project(), make_mapping(make_entry("X40", relation_code="447639009"))
    )

    assert harness.store.mutation_calls() == [("create_single", ("member-1",))]
    assert [entry.member_id for entry in result.entries] == ["member-1"]
    assert harness.store.members["intl-1"][1].active is True


def test_reactivates_inactive_local_record_instead_of_creating(harness: _Harness) -> None:
    harness.store.seed(
        SOURCE_CODE,
        make_entry(
            "X40", advices=["ALWAYS X40"], member_id="old-1", released=True, active=False
        ),
    )

    result = harness.reconciler().reconcile(make_project(), make_mapping(make_entry("X40")))

    assert harness.store.mutation_calls() == [("update_single", ("old-1",))]
    assert [entry.member_id for entry in result.entries] == ["old-1"]
    assert result.entries[0].active is True


def test_failure_is_audited_reraised_and_releases_the_lock(harness: _Harness) -> None:
    harness.store.fail_on = "create_single"

    with pytest.raises(RuntimeError, match="rejected"):
        harness.reconciler().reconcile(make_project(), make_mapping(make_entry("X40")))

    [audit] = harness.audits.audits
    assert audit.status is ReconciliationStatus.FAILED
    assert audit.message == "create_single rejected by the store"
    assert harness.locks.released == [MAP_SET_CODE]


def test_reconcile_many_continues_after_a_failure(harness: _Harness) -> None:
    ambiguous = make_mapping(make_entry("X40"), make_entry("X41"), code="1001")
    valid = make_mapping(make_entry("Y10"), code="1002")

    report = harness.reconciler().reconcile_many(make_project(), [ambiguous, valid])

    assert [outcome.status for outcome in report] == [
        ReconciliationStatus.FAILED,
        ReconciliationStatus.SUCCESS,
    ]
    assert not report.ok
    assert [outcome.code for outcome in report.failed] == ["1001"]
    assert report.by_status()[ReconciliationStatus.SUCCESS] == 1
    assert [audit.status for audit in harness.audits.audits] == [
        ReconciliationStatus.FAILED,
        ReconciliationStatus.SUCCESS,
    ]


def test_ambiguous_submission_is_rejected_before_fetching(harness: _Harness) -> None:
    with pytest.raises(AmbiguousSubmission):
        harness.reconciler().reconcile(
            make_project(), make_mapping(make_entry("X40"), make_entry("X41"))
        )

    assert harness.store.calls == []


def test_names_are_resolved_through_the_concept_resolver() -> None:
    harness = _Harness(
        concepts=_Concepts(names={"X40": "Accidental poisoning", SOURCE_CODE: "Cholera"})
    )

    result = harness.reconciler().reconcile(make_project(), make_mapping(make_entry("X40")))

    assert result.name == "Cholera"
    assert result.entries[0].to_name == "Accidental poisoning"
    assert ("ICD10", "2016", "X40") in harness.concepts.lookups  # type: ignore[union-attr]
