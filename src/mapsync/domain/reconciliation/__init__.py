"""Reconciliation of submitted mappings with the Terminology Store.

Layered flow:
1) normalize the submission (advices, relation codes, ownership)
2) resolve edition precedence on the remote snapshot
3) plan add/remove/modify changes
4) materialize them into create/delete/inactivate/reactivate/update operations
5) execute the operations in a fixed order
"""

from __future__ import annotations

from .engine import MappingReconciler
from .errors import AmbiguousSubmission, IdentityViolation, ReconciliationError
from .execute import ExecutionResult, execute_plan
from .identity import (
    apply_submitted_content,
    content_key,
    entries_equivalent,
    entries_share_identity,
    identity_key,
    mappings_equivalent,
    slot_key,
    sort_entries,
)
from .normalize import fix_always_advice, prepare_submission, relation_code_for
from .plan import (
    EXECUTION_ORDER,
    ChangeCase,
    ChangeSet,
    EntrySet,
    MutationKind,
    MutationPlan,
    entry_key,
)
from .planner import materialize, plan_changes
from .precedence import active_entries, resolve_active_mapping, split_by_owner
from .report import ReconciliationOutcome, ReconciliationReport

__all__ = [
    "EXECUTION_ORDER",
    "AmbiguousSubmission",
    "ChangeCase",
    "ChangeSet",
    "EntrySet",
    "ExecutionResult",
    "IdentityViolation",
    "MappingReconciler",
    "MutationKind",
    "MutationPlan",
    "ReconciliationError",
    "ReconciliationOutcome",
    "ReconciliationReport",
    "active_entries",
    "apply_submitted_content",
    "content_key",
    "entries_equivalent",
    "entries_share_identity",
    "entry_key",
    "execute_plan",
    "fix_always_advice",
    "identity_key",
    "mappings_equivalent",
    "materialize",
    "plan_changes",
    "prepare_submission",
    "relation_code_for",
    "resolve_active_mapping",
    "slot_key",
    "sort_entries",
    "split_by_owner",
]
