from __future__ import annotations

from .locks import InProcessRefsetLocks

__all__ = ["InProcessRefsetLocks"]
