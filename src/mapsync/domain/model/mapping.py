"""Map sets, mappings and their entries as held by the Terminology Store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

INTERNATIONAL_MODULE_ID: Final[str] = "449080006"
MAP_CORRELATION_ID: Final[str] = "447561005"
ALWAYS_ADVICE_PREFIX: Final[str] = "ALWAYS "

type MemberId = str
type ModuleId = str


@dataclass(slots=True, frozen=True, kw_only=True)
class MapSet:
    """Correspondence table between a source and a target code system.

    ``code`` is the refset id under which the map members are stored.
    """

    code: str
    module_id: ModuleId
    name: str = ""
    branch_path: str = ""
    from_terminology: str = "SNOMEDCT"
    from_version: str = ""
    to_terminology: str = ""
    to_version: str = ""

    @property
    def is_international(self) -> bool:
        return self.module_id == INTERNATIONAL_MODULE_ID


@dataclass(slots=True, frozen=True)
class MapRelation:
    code: str
    name: str


@dataclass(slots=True, frozen=True, kw_only=True)
class MapProject:
    """Context of a submitter: the local module and its relation vocabulary."""

    module_id: ModuleId
    map_set: MapSet
    branch: str
    relations: tuple[MapRelation, ...] = ()


@dataclass(slots=True, kw_only=True)
class MapEntry:
    """One correspondence row of a mapping."""

    member_id: MemberId | None = None
    active: bool = True
    released: bool = False
    module_id: ModuleId = ""
    group: int = 1
    priority: int = 1
    block: int = 0
    rule: str = "TRUE"
    advices: frozenset[str] = frozenset()
    relation: str | None = None
    relation_code: str | None = None
    to_code: str = ""
    to_name: str = ""
    effective_time: str | None = None

    @property
    def slot(self) -> tuple[int, int]:
        return (self.group, self.priority)

    @property
    def is_international(self) -> bool:
        return self.module_id == INTERNATIONAL_MODULE_ID


@dataclass(slots=True, kw_only=True)
class Mapping:
    """A source code and its ordered map entries within one map set."""

    code: str
    name: str = ""
    map_set_code: str = ""
    entries: list[MapEntry] = field(default_factory=list["MapEntry"])
    descriptions: list[str] = field(default_factory=list[str])

    @property
    def is_empty(self) -> bool:
        return not self.entries


@dataclass(slots=True, frozen=True, kw_only=True)
class Concept:
    code: str
    name: str
    active: bool = True
    terminology: str = ""
    version: str = ""
