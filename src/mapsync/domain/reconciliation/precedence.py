"""Edition precedence between International and local map entries.

When a local edition holds any active entries for a source code they replace
the International entries entirely; otherwise the International entries apply.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from mapsync.domain.model import INTERNATIONAL_MODULE_ID

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mapsync.domain.model import MapEntry, Mapping


def split_by_owner(
    entries: Iterable[MapEntry],
    *,
    international_module_id: str = INTERNATIONAL_MODULE_ID,
) -> tuple[list[MapEntry], list[MapEntry]]:
    """Partition entries into ``(local, international)`` by owning module."""

    local: list[MapEntry] = []
    international: list[MapEntry] = []
    for entry in entries:
        if entry.module_id == international_module_id:
            international.append(entry)
        else:
            local.append(entry)
    return local, international


def active_entries(
    entries: Iterable[MapEntry],
    *,
    international_module_id: str = INTERNATIONAL_MODULE_ID,
) -> list[MapEntry]:
    local, international = split_by_owner(
        entries, international_module_id=international_module_id
    )
    return local if local else international


def resolve_active_mapping(
    mapping: Mapping,
    *,
    international_module_id: str = INTERNATIONAL_MODULE_ID,
) -> Mapping:
    return replace(
        mapping,
        entries=active_entries(mapping.entries, international_module_id=international_module_id),
    )
