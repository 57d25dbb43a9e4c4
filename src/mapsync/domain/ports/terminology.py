"""Ports for reading and mutating map members held by the Terminology Store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mapsync.domain.model import Concept, MapEntry, MapProject, MapSet, Mapping


@dataclass(slots=True, frozen=True)
class MutationContext:
    """Where a batch of member mutations is written and on whose behalf."""

    project: MapProject
    source_code: str

    @property
    def branch(self) -> str:
        return self.project.branch

    @property
    def map_set(self) -> MapSet:
        return self.project.map_set


@runtime_checkable
class MemberMutator(Protocol):
    """Remote create/update/delete of map members.

    Every successful create or update returns the store's canonical form of the
    written records.
    """

    def create_single(self, context: MutationContext, entry: MapEntry) -> MapEntry: ...

    def create_bulk(
        self, context: MutationContext, entries: Sequence[MapEntry]
    ) -> list[MapEntry]: ...

    def update_single(self, context: MutationContext, entry: MapEntry) -> MapEntry: ...

    def update_bulk(
        self, context: MutationContext, entries: Sequence[MapEntry]
    ) -> list[MapEntry]: ...

    def delete_bulk(self, context: MutationContext, entries: Sequence[MapEntry]) -> None: ...


@runtime_checkable
class CacheInvalidator(Protocol):
    def invalidate(self, branch: str) -> None: ...


@runtime_checkable
class MappingSnapshotFetcher(Protocol):
    """Reads the remote entries of one source code."""

    def fetch_active_mapping(
        self,
        branch: str,
        map_set: MapSet,
        code: str,
        *,
        module_id: str | None = None,
        active_only: bool = True,
    ) -> Mapping: ...

    def fetch_inactive_local_mapping(
        self,
        branch: str,
        map_set: MapSet,
        code: str,
        module_id: str,
    ) -> Mapping: ...


@runtime_checkable
class ConceptResolver(Protocol):
    def resolve_concept(self, terminology: str, version: str, code: str) -> Concept | None: ...


__all__ = [
    "CacheInvalidator",
    "ConceptResolver",
    "MappingSnapshotFetcher",
    "MemberMutator",
    "MutationContext",
]
