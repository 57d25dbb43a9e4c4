"""Diff planner: from a submitted mapping and remote snapshots to remote operations.

Planning happens in two pure passes:

1) ``plan_changes`` classifies the submission against the mapping currently in
   effect (and the International mapping) into add/remove/modify sets;
2) ``materialize`` turns those sets into create/delete/inactivate/reactivate/update
   operations, honouring release immutability and reusing inactive local records.

Neither pass performs I/O or mutates its inputs.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from mapsync.domain.model import INTERNATIONAL_MODULE_ID

from .identity import (
    apply_submitted_content,
    entries_equivalent,
    entries_share_identity,
    mappings_equivalent,
    slot_key,
    sort_entries,
)
from .plan import ChangeCase, ChangeSet, MutationPlan
from .precedence import active_entries

if TYPE_CHECKING:
    from mapsync.domain.model import MapEntry, Mapping

log = getLogger(__name__)


def plan_changes(
    submitted: Mapping,
    existing_active: Mapping,
    existing_active_international: Mapping,
    *,
    international_module_id: str = INTERNATIONAL_MODULE_ID,
) -> ChangeSet:
    """Classify ``submitted`` against the remote mapping in effect.

    The first matching case wins:

    1. content equal to the active mapping: nothing to do;
    2. no active entries: every submitted entry is added;
    3. active entries owned by International: every submitted entry is added as
       a local override;
    4. content equal to the International mapping: the local override is
       removed so International takes over again;
    5. otherwise entries are reconciled slot by slot on ``(group, priority)``.
    """

    if mappings_equivalent(submitted, existing_active):
        log.info("No update required for mapping %s: content unchanged", submitted.code)
        return ChangeSet(case=ChangeCase.UNCHANGED)

    existing = sort_entries(
        active_entries(existing_active.entries, international_module_id=international_module_id)
    )
    submitted_entries = sort_entries(submitted.entries)

    if not existing:
        log.info("Mapping %s is new: adding %d entries", submitted.code, len(submitted_entries))
        changes = ChangeSet(case=ChangeCase.NEW_MAPPING)
        for entry in submitted_entries:
            changes.add.add(entry)
        return changes

    if existing[0].module_id == international_module_id:
        log.info(
            "Mapping %s overrides International: adding %d local entries",
            submitted.code,
            len(submitted_entries),
        )
        changes = ChangeSet(case=ChangeCase.OVERRIDE_INTERNATIONAL)
        for entry in submitted_entries:
            changes.add.add(entry)
        return changes

    if mappings_equivalent(submitted, existing_active_international):
        log.info(
            "Mapping %s matches International again: removing %d local entries",
            submitted.code,
            len(existing),
        )
        changes = ChangeSet(case=ChangeCase.REVERT_TO_INTERNATIONAL)
        for entry in existing:
            changes.remove.add(entry)
        return changes

    return _reconcile_entries(submitted_entries, existing)


def _reconcile_entries(submitted: list[MapEntry], existing: list[MapEntry]) -> ChangeSet:
    changes = ChangeSet(case=ChangeCase.ENTRY_BY_ENTRY)
    submitted_by_slot: dict[tuple[int, int], MapEntry] = {}
    for entry in submitted:
        submitted_by_slot.setdefault(slot_key(entry), entry)
    existing_slots = {slot_key(entry) for entry in existing}

    for existing_entry in existing:
        candidate = submitted_by_slot.get(slot_key(existing_entry))
        if candidate is None:
            changes.remove.add(existing_entry)
        elif entries_equivalent(existing_entry, candidate):
            continue
        elif entries_share_identity(existing_entry, candidate):
            changes.add_modification(existing_entry, candidate)
        else:
            changes.remove.add(existing_entry)
            changes.add.add(candidate)

    for entry in submitted:
        if slot_key(entry) not in existing_slots:
            changes.add.add(entry)

    log.debug(
        "Entry reconciliation: add=%d remove=%d modify=%d",
        len(changes.add),
        len(changes.remove),
        len(changes.modify),
    )
    return changes


def materialize(changes: ChangeSet, existing_inactive_local: Mapping) -> MutationPlan:
    """Turn a change set into concrete remote operations.

    - added entries reactivate an identity-sharing inactive local record when one
      exists (taking the submitted content), otherwise they are created;
    - removed entries are inactivated when released, deleted otherwise;
    - modified entries are updated in place when the remote record was released,
      otherwise the record is deleted and the submitted entry created.
    """

    plan = MutationPlan()
    inactive = [entry for entry in existing_inactive_local.entries if not entry.active]

    for submitted in changes.add:
        match = next(
            (entry for entry in inactive if entries_share_identity(entry, submitted)),
            None,
        )
        if match is None:
            plan.create.add(_as_new(submitted))
        elif entries_equivalent(match, submitted):
            plan.reactivate.add(match)
        else:
            plan.reactivate.add(apply_submitted_content(match, submitted))

    for existing in changes.remove:
        if existing.released:
            plan.inactivate.add(existing)
        else:
            plan.delete.add(existing)

    for existing, submitted in changes.modify.values():
        if existing.released:
            plan.update.add(apply_submitted_content(existing, submitted))
        else:
            plan.delete.add(existing)
            plan.create.add(_as_new(submitted))

    return plan


def _as_new(entry: MapEntry) -> MapEntry:
    return replace(entry, member_id=None, released=False, active=True, effective_time=None)
