"""JSON submission files: a list of mappings with their entries."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from mapsync.domain.model import MapEntry, Mapping

log = logging.getLogger(__name__)


class SubmissionBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "Submission %s: ignored keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class SubmittedEntry(SubmissionBaseModel):
    member_id: str | None = Field(default=None, alias="memberId")
    group: int = 1
    priority: int = 1
    block: int = 0
    rule: str = "TRUE"
    advices: list[str] = Field(default_factory=list)
    relation: str | None = None
    relation_code: str | None = Field(default=None, alias="relationCode")
    to_code: str = Field(default="", alias="toCode")
    to_name: str = Field(default="", alias="toName")

    def to_domain(self) -> MapEntry:
        return MapEntry(
            member_id=self.member_id or None,
            group=self.group,
            priority=self.priority,
            block=self.block,
            rule=self.rule,
            advices=frozenset(advice.strip() for advice in self.advices if advice.strip()),
            relation=self.relation,
            relation_code=self.relation_code,
            to_code=self.to_code.strip(),
            to_name=self.to_name,
        )


class SubmittedMapping(SubmissionBaseModel):
    code: str
    name: str = ""
    entries: list[SubmittedEntry] = Field(default_factory=list)

    def to_domain(self, map_set_code: str = "") -> Mapping:
        return Mapping(
            code=self.code,
            name=self.name,
            map_set_code=map_set_code,
            entries=[entry.to_domain() for entry in self.entries],
        )


_SUBMISSION_ADAPTER = TypeAdapter(list[SubmittedMapping])


def parse_mappings(raw: str | bytes, *, map_set_code: str = "") -> list[Mapping]:
    return [
        mapping.to_domain(map_set_code) for mapping in _SUBMISSION_ADAPTER.validate_json(raw)
    ]


def load_mappings(path: Path | str, *, map_set_code: str = "") -> list[Mapping]:
    """Read submitted mappings from a JSON file."""

    return parse_mappings(Path(path).read_bytes(), map_set_code=map_set_code)
