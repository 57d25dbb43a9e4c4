"""Per-branch cache of fetched refset members."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schema import RefsetMember

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MemberQuery:
    branch: str
    refset_id: str
    referenced_component_id: str
    module_id: str | None
    active_only: bool


class MemberCache:
    """Member query results, dropped branch by branch after every write."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[MemberQuery, list[RefsetMember]] = {}

    def get(self, query: MemberQuery) -> list[RefsetMember] | None:
        with self._lock:
            members = self._entries.get(query)
        return list(members) if members is not None else None

    def put(self, query: MemberQuery, members: list[RefsetMember]) -> None:
        with self._lock:
            self._entries[query] = list(members)

    def invalidate(self, branch: str) -> None:
        with self._lock:
            stale = [query for query in self._entries if query.branch == branch]
            for query in stale:
                del self._entries[query]
        if stale:
            log.debug("Dropped %d cached member queries for %s", len(stale), branch)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
