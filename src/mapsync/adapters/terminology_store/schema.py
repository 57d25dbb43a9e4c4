"""Terminology Store payload schemas for refset members, concepts and jobs."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

type SctId = str


class TerminologyStoreBaseModel(BaseModel):
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
            "Terminology Store %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class TermValue(TerminologyStoreBaseModel):
    term: str
    lang: str | None = None


class ConceptItem(TerminologyStoreBaseModel):
    concept_id: SctId = Field(alias="conceptId")
    active: bool = True
    module_id: SctId | None = Field(default=None, alias="moduleId")
    effective_time: str | None = Field(default=None, alias="effectiveTime")
    definition_status: str | None = Field(default=None, alias="definitionStatus")
    fsn: TermValue | None = None
    pt: TermValue | None = None
    id: SctId | None = None

    @property
    def preferred_name(self) -> str | None:
        if self.pt is not None:
            return self.pt.term
        if self.fsn is not None:
            return self.fsn.term
        return None


class ConceptPage(TerminologyStoreBaseModel):
    items: list[ConceptItem] = Field(default_factory=list)
    total: int | None = None
    limit: int | None = None
    offset: int | None = None
    search_after: str | None = Field(default=None, alias="searchAfter")
    search_after_array: list[object] | None = Field(default=None, alias="searchAfterArray")


class MapMemberFields(TerminologyStoreBaseModel):
    """``additionalFields`` of an extended map refset member.

    Group and priority arrive as strings on reads and are sent as numbers.
    """

    map_category_id: SctId = Field(default="", alias="mapCategoryId")
    map_rule: str = Field(default="TRUE", alias="mapRule")
    map_advice: str = Field(default="", alias="mapAdvice")
    map_priority: int = Field(default=1, alias="mapPriority")
    map_group: int = Field(default=1, alias="mapGroup")
    correlation_id: SctId | None = Field(default=None, alias="correlationId")
    map_target: str = Field(default="", alias="mapTarget")
    map_block: int | None = Field(default=None, alias="mapBlock")


class RefsetMember(TerminologyStoreBaseModel):
    member_id: str = Field(alias="memberId")
    active: bool = True
    module_id: SctId = Field(alias="moduleId")
    released: bool = False
    released_effective_time: int | None = Field(default=None, alias="releasedEffectiveTime")
    refset_id: SctId = Field(alias="refsetId")
    referenced_component_id: SctId = Field(alias="referencedComponentId")
    additional_fields: MapMemberFields = Field(
        default_factory=MapMemberFields, alias="additionalFields"
    )
    referenced_component: ConceptItem | None = Field(default=None, alias="referencedComponent")
    effective_time: str | None = Field(default=None, alias="effectiveTime")


class MemberPage(TerminologyStoreBaseModel):
    items: list[RefsetMember] = Field(default_factory=list)
    total: int | None = None
    limit: int | None = None
    offset: int | None = None
    search_after: str | None = Field(default=None, alias="searchAfter")
    search_after_array: list[object] | None = Field(default=None, alias="searchAfterArray")


class JobStatusPayload(TerminologyStoreBaseModel):
    id: str | None = None
    status: str
    message: str | None = None
    start_time: str | None = Field(default=None, alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")
    seconds_duration: float | None = Field(default=None, alias="secondsDuration")
    member_ids: list[str] | None = Field(default=None, alias="memberIds")
