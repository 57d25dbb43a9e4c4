"""Run a mutation plan against the Terminology Store in a fixed order."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING

from .plan import EXECUTION_ORDER, MutationKind

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from mapsync.domain.model import MapEntry
    from mapsync.domain.ports import CacheInvalidator, MemberMutator, MutationContext

    from .plan import MutationPlan

log = getLogger(__name__)


@dataclass(slots=True)
class ExecutionResult:
    """Canonical records returned by the store, and how many were touched per kind."""

    written: list[MapEntry] = field(default_factory=list["MapEntry"])
    counts: dict[MutationKind, int] = field(default_factory=dict[MutationKind, int])

    def count(self, kind: MutationKind) -> int:
        return self.counts.get(kind, 0)


def execute_plan(
    plan: MutationPlan,
    mutator: MemberMutator,
    context: MutationContext,
    invalidator: CacheInvalidator | None = None,
) -> ExecutionResult:
    """Apply ``plan`` batch by batch: delete, create, inactivate, reactivate, update.

    One entry goes through the single-item call, two or more through the bulk
    call. Deletes are always one bulk call. The branch cache is invalidated after
    every batch that succeeded; the first failing batch aborts the rest.
    """

    result = ExecutionResult()
    for kind in EXECUTION_ORDER:
        entries = plan.entries_for(kind).sorted()
        if not entries:
            continue
        log.info(
            "Running %s of %d member(s) for %s in refset %s on %s",
            kind,
            len(entries),
            context.source_code,
            context.map_set.code,
            context.branch,
        )
        match kind:
            case MutationKind.DELETE:
                mutator.delete_bulk(context, entries)
            case MutationKind.CREATE:
                result.written.extend(
                    _write(mutator.create_single, mutator.create_bulk, context, entries)
                )
            case MutationKind.INACTIVATE:
                flagged = [replace(entry, active=False) for entry in entries]
                result.written.extend(
                    _write(mutator.update_single, mutator.update_bulk, context, flagged)
                )
            case MutationKind.REACTIVATE:
                flagged = [replace(entry, active=True) for entry in entries]
                result.written.extend(
                    _write(mutator.update_single, mutator.update_bulk, context, flagged)
                )
            case MutationKind.UPDATE:
                result.written.extend(
                    _write(mutator.update_single, mutator.update_bulk, context, entries)
                )
        result.counts[kind] = len(entries)
        if invalidator is not None:
            invalidator.invalidate(context.branch)
    return result


def _write(
    single: Callable[[MutationContext, MapEntry], MapEntry],
    bulk: Callable[[MutationContext, Sequence[MapEntry]], list[MapEntry]],
    context: MutationContext,
    entries: list[MapEntry],
) -> list[MapEntry]:
    if len(entries) == 1:
        return [single(context, entries[0])]
    return bulk(context, entries)
