from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from mapsync.adapters.mapping_file import load_mappings, parse_mappings

if TYPE_CHECKING:
    from pathlib import Path

SUBMISSION = [
    {
        "code": "70273001",
        "name": "Radiation sickness",
        "entries": [
            {
                "group": 2,
                "priority": 1,
                "rule": "TRUE",
                "advices": ["ALWAYS W88.9", "  "],
                "relation": "MAP SOURCE CONCEPT IS PROPERLY CLASSIFIED",
                "toCode": " W88.9 ",
            },
            {
                "memberId": "",
                "group": 1,
                "priority": 1,
                "advices": ["ALWAYS T66.X"],
                "relationCode": "447637006",
                "toCode": "T66.X",
                "toName": "Radiation sickness, unspecified",
            },
        ],
    },
    {"code": "74400008"},
]


def test_parse_mappings_builds_domain_mappings() -> None:
    [first, second] = parse_mappings(json.dumps(SUBMISSION), map_set_code="447562003")

    assert first.code == "70273001"
    assert first.name == "Radiation sickness"
    assert first.map_set_code == "447562003"
    assert [entry.to_code for entry in first.entries] == ["W88.9", "T66.X"]
    assert first.entries[0].advices == frozenset({"ALWAYS W88.9"})
    assert first.entries[0].relation == "MAP SOURCE CONCEPT IS PROPERLY CLASSIFIED"
    assert first.entries[1].member_id is None
    assert first.entries[1].relation_code == "447637006"
    assert first.entries[1].to_name == "Radiation sickness, unspecified"
    assert second.entries == []


def test_load_mappings_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "mappings.json"
    path.write_text(json.dumps(SUBMISSION))

    mappings = load_mappings(path)

    assert [mapping.code for mapping in mappings] == ["70273001", "74400008"]
    assert mappings[0].map_set_code == ""


def test_invalid_submission_is_rejected() -> None:
    with pytest.raises(ValidationError):
        parse_mappings(json.dumps([{"entries": []}]))

    with pytest.raises(ValidationError):
        parse_mappings(json.dumps([{"code": "1", "entries": [{"group": "first"}]}]))
