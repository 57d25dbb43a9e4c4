"""Port for serialising reconciliations per map set."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager


@runtime_checkable
class RefsetLocks(Protocol):
    """Scoped, exclusive access to the members of one refset.

    The returned context manager releases the lock on every exit path.
    """

    def hold(self, refset_id: str) -> AbstractContextManager[None]: ...

    def is_held(self, refset_id: str) -> bool: ...


__all__ = ["RefsetLocks"]
