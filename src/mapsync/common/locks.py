"""In-process refset locks."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

log = getLogger(__name__)


class InProcessRefsetLocks:
    """One exclusive lock per refset id, shared by every thread of the process.

    A second reconciliation of the same refset waits until the first one
    releases it; different refsets proceed concurrently. A refset's lock is
    dropped once no thread holds or waits for it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}
        self._held: set[str] = set()

    def _checkout(self, refset_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(refset_id)
            if lock is None:
                lock = self._locks[refset_id] = threading.Lock()
            self._users[refset_id] = self._users.get(refset_id, 0) + 1
            return lock

    def _checkin(self, refset_id: str) -> None:
        with self._guard:
            remaining = self._users[refset_id] - 1
            if remaining:
                self._users[refset_id] = remaining
            else:
                del self._users[refset_id]
                del self._locks[refset_id]

    @contextmanager
    def hold(self, refset_id: str) -> Iterator[None]:
        lock = self._checkout(refset_id)
        try:
            if lock.locked():
                log.info("Waiting for refset %s to be released", refset_id)
            with lock:
                with self._guard:
                    self._held.add(refset_id)
                try:
                    yield
                finally:
                    with self._guard:
                        self._held.discard(refset_id)
        finally:
            self._checkin(refset_id)

    def is_held(self, refset_id: str) -> bool:
        with self._guard:
            return refset_id in self._held

    def held(self) -> frozenset[str]:
        with self._guard:
            return frozenset(self._held)

    def tracked(self) -> frozenset[str]:
        """Refsets that currently have a lock allocated."""

        with self._guard:
            return frozenset(self._locks)
