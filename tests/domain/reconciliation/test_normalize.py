from __future__ import annotations

import pytest

from mapsync.domain.reconciliation import (
    AmbiguousSubmission,
    fix_always_advice,
    prepare_submission,
    relation_code_for,
)
from mapsync.domain.reconciliation.normalize import relation_name_for
from tests.helpers.mappings import (
    LOCAL_MODULE_ID,
    MAP_SET_CODE,
    make_entry,
    make_mapping,
    make_project,
)


def test_always_advice_added_for_target() -> None:
    entry = make_entry("X40", advices=["MAPPED FOLLOWING WHO GUIDANCE"])

    assert fix_always_advice(entry) == frozenset({"MAPPED FOLLOWING WHO GUIDANCE", "ALWAYS X40"})


def test_always_advice_rewritten_for_other_target() -> None:
    entry = make_entry("X41", advices=["ALWAYS X40"])

    assert fix_always_advice(entry) == frozenset({"ALWAYS X41"})


def test_always_advice_naming_the_target_is_kept() -> None:
    entry = make_entry("X40", advices=["ALWAYS X40", "ALWAYS W88.9 OR X40"])

    assert fix_always_advice(entry) == frozenset({"ALWAYS X40", "ALWAYS W88.9 OR X40"})


def test_stale_always_advice_is_replaced_next_to_a_kept_one() -> None:
    entry = make_entry("X40", advices=["ALWAYS W88.9 OR X40", "ALWAYS Y10"])

    assert fix_always_advice(entry) == frozenset({"ALWAYS W88.9 OR X40", "ALWAYS X40"})


def test_always_advice_removed_without_target() -> None:
    entry = make_entry("", advices=["ALWAYS X40", "FIFTH CHARACTER REQUIRED"])

    assert fix_always_advice(entry) == frozenset({"FIFTH CHARACTER REQUIRED"})


def test_relation_code_lookup_is_case_insensitive() -> None:
    project = make_project()
    entry = make_entry(relation_code=None)
    entry.relation = "map source concept is properly classified"

    assert relation_code_for(project, entry) == "447637006"
    entry.relation = "unknown relation"
    assert relation_code_for(project, entry) == ""
    assert relation_name_for(project, "447639009") == "MAP OF SOURCE CONCEPT IS CONTEXT DEPENDENT"
    assert relation_name_for(project, None) is None


def test_prepare_submission_normalizes_copy() -> None:
    project = make_project()
    second = make_entry("Y10", group=2, module_id="elsewhere", relation_code=None)
    second.relation = "Map of source concept is context dependent"
    first = make_entry("X40", group=1, module_id="elsewhere")
    submitted = make_mapping(second, first)
    submitted.map_set_code = ""

    prepared = prepare_submission(project, submitted)

    assert [entry.to_code for entry in prepared.entries] == ["X40", "Y10"]
    assert {entry.module_id for entry in prepared.entries} == {LOCAL_MODULE_ID}
    assert prepared.entries[1].relation_code == "447639009"
    assert prepared.entries[0].advices == frozenset({"ALWAYS X40"})
    assert prepared.map_set_code == MAP_SET_CODE
    assert submitted.entries[0].module_id == "elsewhere"


def test_prepare_submission_rejects_duplicate_slots() -> None:
    submitted = make_mapping(make_entry("X40"), make_entry("X41"))

    with pytest.raises(AmbiguousSubmission) as excinfo:
        prepare_submission(make_project(), submitted)

    assert excinfo.value.slots == [(1, 1)]
    assert "1/1" in str(excinfo.value)
