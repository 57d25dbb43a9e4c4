"""Cleanup applied to a submitted mapping before it is compared or written."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from mapsync.domain.model import ALWAYS_ADVICE_PREFIX

from .errors import AmbiguousSubmission
from .identity import slot_key, sort_entries

if TYPE_CHECKING:
    from mapsync.domain.model import MapEntry, MapProject, Mapping


def fix_always_advice(entry: MapEntry) -> frozenset[str]:
    """Keep the ``ALWAYS <target>`` advice in line with the entry's target code."""

    target = entry.to_code.strip()
    advices: set[str] = set()
    found = stale = False
    for advice in entry.advices:
        if not advice.startswith(ALWAYS_ADVICE_PREFIX):
            advices.add(advice)
            continue
        found = True
        # An ALWAYS advice already naming the target is kept as written.
        if target and advice.endswith(target):
            advices.add(advice)
        else:
            stale = True
    if target and (stale or not found):
        advices.add(f"{ALWAYS_ADVICE_PREFIX}{target}")
    return frozenset(advices)


def relation_code_for(project: MapProject, entry: MapEntry) -> str:
    if entry.relation is None:
        return ""
    wanted = entry.relation.upper()
    for relation in project.relations:
        if relation.name.upper() == wanted:
            return relation.code
    return ""


def ensure_unique_slots(mapping: Mapping) -> None:
    seen: set[tuple[int, int]] = set()
    duplicates: list[tuple[int, int]] = []
    for entry in mapping.entries:
        key = slot_key(entry)
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    if duplicates:
        raise AmbiguousSubmission(mapping.code, sorted(duplicates))


def prepare_submission(project: MapProject, mapping: Mapping) -> Mapping:
    """Return a normalized copy of ``mapping`` owned by the project's module."""

    ensure_unique_slots(mapping)
    entries = [
        replace(
            entry,
            advices=fix_always_advice(entry),
            relation_code=relation_code_for(project, entry) or entry.relation_code or "",
            module_id=project.module_id,
        )
        for entry in mapping.entries
    ]
    return replace(
        mapping,
        map_set_code=mapping.map_set_code or project.map_set.code,
        entries=sort_entries(entries),
    )


def relation_name_for(project: MapProject, relation_code: str | None) -> str | None:
    if not relation_code:
        return None
    for relation in project.relations:
        if relation.code == relation_code:
            return relation.name
    return None
