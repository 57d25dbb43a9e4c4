"""Translate Terminology Store members and concepts into domain objects and back."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final
from uuid import uuid4

from mapsync.domain.model import MAP_CORRELATION_ID, Concept, MapEntry

from .schema import MapMemberFields, RefsetMember

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mapsync.domain.ports import MutationContext

    from .schema import ConceptItem

ADVICE_SEPARATOR: Final[str] = " | "
CONCEPT_NOT_FOUND: Final[str] = "CONCEPT NOT FOUND"


def not_found_name(code: str) -> str:
    return f"{code} {CONCEPT_NOT_FOUND}"


def parse_advices(value: str) -> frozenset[str]:
    """Split a pipe-delimited ``mapAdvice`` string into trimmed advices."""

    return frozenset(part.strip() for part in value.split("|") if part.strip())


def format_advices(advices: Iterable[str]) -> str:
    return ADVICE_SEPARATOR.join(sorted(advices))


def translate_member(
    member: RefsetMember,
    *,
    relation_name: str | None = None,
    to_name: str | None = None,
) -> MapEntry:
    fields = member.additional_fields
    return MapEntry(
        member_id=member.member_id,
        active=member.active,
        released=member.released,
        module_id=member.module_id,
        group=fields.map_group,
        priority=fields.map_priority,
        block=fields.map_block or 0,
        rule=fields.map_rule,
        advices=parse_advices(fields.map_advice),
        relation=relation_name,
        relation_code=fields.map_category_id,
        to_code=fields.map_target,
        to_name=to_name or "",
        effective_time=member.effective_time or None,
    )


def member_payload(context: MutationContext, entry: MapEntry) -> RefsetMember:
    """Build the outgoing member for ``entry``, owned by the project module.

    Outgoing members are never released and carry no effective time; the store
    assigns both at release. ``mapBlock`` is only sent for a non-zero block.
    A blank member id is replaced by a new UUID so the record can be read back
    once a bulk job finishes.
    """

    return RefsetMember(
        member_id=entry.member_id or str(uuid4()),
        active=entry.active,
        module_id=context.project.module_id,
        released=False,
        refset_id=context.map_set.code,
        referenced_component_id=context.source_code,
        additional_fields=MapMemberFields(
            map_category_id=entry.relation_code or "",
            map_rule=entry.rule,
            map_advice=format_advices(entry.advices),
            map_priority=entry.priority,
            map_group=entry.group,
            correlation_id=MAP_CORRELATION_ID,
            map_target=entry.to_code,
            map_block=entry.block or None,
        ),
        effective_time="",
    )


def serialize_member(member: RefsetMember) -> dict[str, object]:
    return member.model_dump(by_alias=True, exclude_none=True)


def translate_concept(item: ConceptItem, *, terminology: str, version: str) -> Concept:
    return Concept(
        code=item.concept_id,
        name=item.preferred_name or not_found_name(item.concept_id),
        active=item.active,
        terminology=terminology,
        version=version,
    )
