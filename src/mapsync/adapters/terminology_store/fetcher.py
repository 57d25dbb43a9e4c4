"""Read mappings of one source code from the Terminology Store."""

from __future__ import annotations

import threading
from logging import getLogger
from typing import TYPE_CHECKING

from mapsync.domain.model import Mapping
from mapsync.domain.reconciliation import active_entries, sort_entries

from .cache import MemberCache, MemberQuery
from .translator import not_found_name, translate_concept, translate_member

if TYPE_CHECKING:
    from mapsync.domain.model import Concept, MapEntry, MapSet

    from .client import TerminologyStoreClient
    from .schema import RefsetMember

log = getLogger(__name__)


class TerminologyStoreConceptResolver:
    """Concept lookups memoised per ``(terminology, version, code)``."""

    def __init__(self, client: TerminologyStoreClient) -> None:
        self._client = client
        self._lock = threading.Lock()
        self._concepts: dict[tuple[str, str, str], Concept | None] = {}

    def resolve_concept(self, terminology: str, version: str, code: str) -> Concept | None:
        key = (terminology, version, code)
        with self._lock:
            if key in self._concepts:
                return self._concepts[key]
        item = self._client.fetch_concept(terminology, version, code)
        concept = (
            translate_concept(item, terminology=terminology, version=version)
            if item is not None
            else None
        )
        with self._lock:
            self._concepts[key] = concept
        return concept


class TerminologyStoreFetcher:
    """Snapshot reads of map members, with a per-branch cache and name resolution."""

    def __init__(
        self,
        client: TerminologyStoreClient,
        *,
        cache: MemberCache | None = None,
        concepts: TerminologyStoreConceptResolver | None = None,
    ) -> None:
        self._client = client
        self._cache = cache if cache is not None else MemberCache()
        self._concepts = concepts

    def fetch_active_mapping(
        self,
        branch: str,
        map_set: MapSet,
        code: str,
        *,
        module_id: str | None = None,
        active_only: bool = True,
    ) -> Mapping:
        """Return the entries of ``code`` in ``map_set``.

        Without ``module_id`` every owner is read and edition precedence picks
        the entries in effect; with it only that module's entries are returned.
        """

        members = self._members(
            MemberQuery(
                branch=branch,
                refset_id=map_set.code,
                referenced_component_id=code,
                module_id=module_id,
                active_only=active_only,
            )
        )
        entries = [self._translate(map_set, member) for member in members]
        if module_id is None:
            entries = active_entries(entries)
        return self._mapping(map_set, code, members, entries)

    def fetch_inactive_local_mapping(
        self,
        branch: str,
        map_set: MapSet,
        code: str,
        module_id: str,
    ) -> Mapping:
        members = self._members(
            MemberQuery(
                branch=branch,
                refset_id=map_set.code,
                referenced_component_id=code,
                module_id=module_id,
                active_only=False,
            )
        )
        entries = [self._translate(map_set, member) for member in members if not member.active]
        return self._mapping(map_set, code, members, entries)

    def invalidate(self, branch: str) -> None:
        self._cache.invalidate(branch)

    def _members(self, query: MemberQuery) -> list[RefsetMember]:
        cached = self._cache.get(query)
        if cached is not None:
            return cached

        members: list[RefsetMember] = []
        search_after: str | None = None
        while True:
            page = self._client.fetch_members(
                query.branch,
                refset_id=query.refset_id,
                referenced_component_id=query.referenced_component_id,
                module_id=query.module_id,
                active_only=query.active_only,
                search_after=search_after,
            )
            members.extend(page.items)
            if not page.items or not page.search_after:
                break
            if page.total is not None and len(members) >= page.total:
                break
            search_after = page.search_after

        log.debug(
            "Fetched %d member(s) of %s for %s on %s",
            len(members),
            query.refset_id,
            query.referenced_component_id,
            query.branch,
        )
        self._cache.put(query, members)
        return members

    def _translate(self, map_set: MapSet, member: RefsetMember) -> MapEntry:
        fields = member.additional_fields
        return translate_member(
            member,
            relation_name=self._name(
                map_set.from_terminology, map_set.from_version, fields.map_category_id
            ),
            to_name=self._name(map_set.to_terminology, map_set.to_version, fields.map_target),
        )

    def _name(self, terminology: str, version: str, code: str) -> str | None:
        if self._concepts is None or not terminology or not code:
            return None
        concept = self._concepts.resolve_concept(terminology, version, code)
        return concept.name if concept is not None else not_found_name(code)

    def _mapping(
        self,
        map_set: MapSet,
        code: str,
        members: list[RefsetMember],
        entries: list[MapEntry],
    ) -> Mapping:
        name = next(
            (
                member.referenced_component.preferred_name
                for member in members
                if member.referenced_component is not None
                and member.referenced_component.preferred_name
            ),
            None,
        )
        return Mapping(
            code=code,
            name=name or "",
            map_set_code=map_set.code,
            entries=sort_entries(entries),
        )
