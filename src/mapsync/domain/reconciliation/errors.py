"""Errors raised by mapping reconciliation."""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for reconciliation contract failures."""


class IdentityViolation(ReconciliationError):
    """Raised when content is copied between entries that do not share identity."""


class AmbiguousSubmission(ReconciliationError):
    """Raised when a submitted mapping holds two entries for one group/priority slot."""

    def __init__(self, code: str, slots: list[tuple[int, int]]) -> None:
        rendered = ", ".join(f"{group}/{priority}" for group, priority in slots)
        super().__init__(f"Mapping {code} has duplicate group/priority slots: {rendered}")
        self.code = code
        self.slots = slots
