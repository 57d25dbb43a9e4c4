"""Identity and equivalence relations between map entries.

These relations are the only admissible notion of "same" inside the
reconciliation engine:

- *equivalence* compares observable content and ignores ownership and release
  metadata (module, member id, released/active flags, names);
- *identity* is equivalence minus advices and relation code. Two entries that
  share identity occupy the same remote record slot and can be updated in place.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import replace
from typing import TYPE_CHECKING

from .errors import IdentityViolation

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mapsync.domain.model import MapEntry, Mapping

type IdentityKey = tuple[Hashable, ...]
type ContentKey = tuple[Hashable, ...]


def slot_key(entry: MapEntry) -> tuple[int, int]:
    """Canonical ordering key: group first, then priority."""

    return (entry.group, entry.priority)


def sort_entries(entries: Iterable[MapEntry]) -> list[MapEntry]:
    return sorted(entries, key=slot_key)


def identity_key(entry: MapEntry) -> IdentityKey:
    return (entry.group, entry.priority, entry.block, entry.rule, entry.to_code)


def content_key(entry: MapEntry) -> ContentKey:
    return (*identity_key(entry), frozenset(entry.advices), entry.relation_code or "")


def entries_equivalent(first: MapEntry | None, second: MapEntry | None) -> bool:
    if first is None or second is None:
        return first is second
    return content_key(first) == content_key(second)


def entries_share_identity(first: MapEntry | None, second: MapEntry | None) -> bool:
    if first is None or second is None:
        return first is second
    return identity_key(first) == identity_key(second)


def mappings_equivalent(first: Mapping | None, second: Mapping | None) -> bool:
    """Return whether two mappings carry the same content.

    Entries are paired positionally after canonical ordering, so the order in
    which either side lists them does not matter. Neither mapping is modified.
    """

    if first is None or second is None:
        return first is second
    if first.code != second.code:
        return False
    if len(first.entries) != len(second.entries):
        return False
    return all(
        entries_equivalent(left, right)
        for left, right in zip(
            sort_entries(first.entries), sort_entries(second.entries), strict=True
        )
    )


def apply_submitted_content(existing: MapEntry, submitted: MapEntry) -> MapEntry:
    """Return ``existing`` carrying the non-identity content of ``submitted``.

    The remote record keeps its member id, module and release state; only
    advices and the relation change.
    """

    if not entries_share_identity(existing, submitted):
        raise IdentityViolation(
            "Cannot update an existing map entry with an entry that does not share its identity: "
            f"{identity_key(existing)} vs {identity_key(submitted)}"
        )
    return replace(
        existing,
        advices=frozenset(submitted.advices),
        relation=submitted.relation,
        relation_code=submitted.relation_code,
    )
