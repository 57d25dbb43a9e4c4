"""Plan types shared by the diff planner and the mutation executor.

A reconciliation pass produces two artefacts:

- a ``ChangeSet``: which entries are added, removed, or modified in place,
  expressed against the remote snapshot;
- a ``MutationPlan``: the concrete remote operations (create, delete,
  inactivate, reactivate, update) that realise the change set.

Both are keyed explicitly by member id or identity key, so a remote record is
touched at most once per pass regardless of how the entries were produced.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from .identity import identity_key, sort_entries

if TYPE_CHECKING:
    from mapsync.domain.model import MapEntry

type EntryKey = tuple[Hashable, ...]


def entry_key(entry: MapEntry) -> EntryKey:
    """Key a remote record by member id, or by identity before one is assigned."""

    if entry.member_id:
        return ("member", entry.member_id)
    return ("identity", *identity_key(entry))


class ChangeCase(StrEnum):
    """Which branch of the planner produced a change set."""

    UNCHANGED = "unchanged"
    NEW_MAPPING = "new_mapping"
    OVERRIDE_INTERNATIONAL = "override_international"
    REVERT_TO_INTERNATIONAL = "revert_to_international"
    ENTRY_BY_ENTRY = "entry_by_entry"


class MutationKind(StrEnum):
    DELETE = "delete"
    CREATE = "create"
    INACTIVATE = "inactivate"
    REACTIVATE = "reactivate"
    UPDATE = "update"


EXECUTION_ORDER: tuple[MutationKind, ...] = (
    MutationKind.DELETE,
    MutationKind.CREATE,
    MutationKind.INACTIVATE,
    MutationKind.REACTIVATE,
    MutationKind.UPDATE,
)


class EntrySet:
    """Insertion-ordered set of map entries keyed by ``entry_key``.

    The first entry added under a key wins; later duplicates are ignored.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: list[MapEntry] | None = None) -> None:
        self._entries: dict[EntryKey, MapEntry] = {}
        for entry in entries or ():
            self.add(entry)

    def add(self, entry: MapEntry) -> bool:
        key = entry_key(entry)
        if key in self._entries:
            return False
        self._entries[key] = entry
        return True

    def __contains__(self, entry: object) -> bool:
        return entry_key(entry) in self._entries  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[MapEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"EntrySet({list(self._entries.values())!r})"

    def sorted(self) -> list[MapEntry]:
        return sort_entries(self._entries.values())


@dataclass(slots=True)
class ChangeSet:
    """Entry-level differences between a submission and the remote snapshot."""

    case: ChangeCase
    add: EntrySet = field(default_factory=EntrySet)
    remove: EntrySet = field(default_factory=EntrySet)
    # existing entry key -> (existing, submitted)
    modify: dict[EntryKey, tuple[MapEntry, MapEntry]] = field(
        default_factory=dict["EntryKey", "tuple[MapEntry, MapEntry]"]
    )

    def add_modification(self, existing: MapEntry, submitted: MapEntry) -> None:
        self.modify.setdefault(entry_key(existing), (existing, submitted))

    @property
    def is_empty(self) -> bool:
        return not (self.add or self.remove or self.modify)


@dataclass(slots=True)
class MutationPlan:
    """Remote operations for one source code, deduplicated per kind."""

    create: EntrySet = field(default_factory=EntrySet)
    delete: EntrySet = field(default_factory=EntrySet)
    inactivate: EntrySet = field(default_factory=EntrySet)
    reactivate: EntrySet = field(default_factory=EntrySet)
    update: EntrySet = field(default_factory=EntrySet)

    def entries_for(self, kind: MutationKind) -> EntrySet:
        match kind:
            case MutationKind.CREATE:
                return self.create
            case MutationKind.DELETE:
                return self.delete
            case MutationKind.INACTIVATE:
                return self.inactivate
            case MutationKind.REACTIVATE:
                return self.reactivate
            case MutationKind.UPDATE:
                return self.update

    def counts(self) -> dict[MutationKind, int]:
        return {kind: len(self.entries_for(kind)) for kind in EXECUTION_ORDER}

    @property
    def is_empty(self) -> bool:
        return not any(self.entries_for(kind) for kind in EXECUTION_ORDER)
