from __future__ import annotations

from mapsync.domain.model import INTERNATIONAL_MODULE_ID
from mapsync.domain.reconciliation import (
    active_entries,
    resolve_active_mapping,
    split_by_owner,
)
from tests.helpers.mappings import LOCAL_MODULE_ID, make_entry, make_mapping


def test_local_entries_replace_international_entirely() -> None:
    international = make_entry("X40", module_id=INTERNATIONAL_MODULE_ID)
    local = make_entry("X41", group=2, module_id=LOCAL_MODULE_ID)

    assert active_entries([international, local]) == [local]


def test_international_entries_apply_without_local_override() -> None:
    international = make_entry("X40", module_id=INTERNATIONAL_MODULE_ID)

    assert active_entries([international]) == [international]
    assert active_entries([]) == []


def test_split_by_owner_partitions_on_module() -> None:
    international = make_entry("X40", module_id=INTERNATIONAL_MODULE_ID)
    local = make_entry("X41", module_id=LOCAL_MODULE_ID)

    assert split_by_owner([local, international]) == ([local], [international])


def test_custom_international_module_id() -> None:
    core = make_entry("X40", module_id="core")
    extension = make_entry("X41", module_id="extension")

    assert active_entries([core, extension], international_module_id="extension") == [core]


def test_resolve_active_mapping_returns_new_mapping() -> None:
    international = make_entry("X40", module_id=INTERNATIONAL_MODULE_ID)
    local = make_entry("X41", module_id=LOCAL_MODULE_ID)
    mapping = make_mapping(international, local)

    resolved = resolve_active_mapping(mapping)

    assert resolved.entries == [local]
    assert mapping.entries == [international, local]
