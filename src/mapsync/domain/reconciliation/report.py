"""Per-source-code outcomes of a reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mapsync.domain.model import ReconciliationStatus

from .plan import MutationKind

if TYPE_CHECKING:
    from collections.abc import Iterator

    from mapsync.domain.model import Mapping


@dataclass(slots=True, kw_only=True)
class ReconciliationOutcome:
    code: str
    status: ReconciliationStatus
    message: str | None = None
    counts: dict[MutationKind, int] = field(default_factory=dict[MutationKind, int])
    mapping: Mapping | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is not ReconciliationStatus.FAILED

    def count(self, kind: MutationKind) -> int:
        return self.counts.get(kind, 0)


@dataclass(slots=True)
class ReconciliationReport:
    """Pass/fail report of one batch of submitted mappings."""

    outcomes: list[ReconciliationOutcome] = field(default_factory=list[ReconciliationOutcome])

    def add(self, outcome: ReconciliationOutcome) -> None:
        self.outcomes.append(outcome)

    def __iter__(self) -> Iterator[ReconciliationOutcome]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> list[ReconciliationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def ok(self) -> bool:
        return not self.failed

    def by_status(self) -> dict[ReconciliationStatus, int]:
        totals = dict.fromkeys(ReconciliationStatus, 0)
        for outcome in self.outcomes:
            totals[outcome.status] += 1
        return totals
