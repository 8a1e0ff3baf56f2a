# prefixstore/DB/memory_store.py
from __future__ import annotations
import copy
from typing import Any, Dict, Optional
from .api import SnapshotStore

class MemoryStore(SnapshotStore):
    """Keeps a deep copy of the last snapshot (useful for tests or ephemeral runs)."""
    def __init__(self) -> None:
        self._snap: Optional[Dict[str, Any]] = None

    def load(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._snap)

    def save(self, snap: Dict[str, Any]) -> None:
        self._snap = copy.deepcopy(snap)

    def clear(self) -> None:
        self._snap = None

    def close(self) -> None:
        self._snap = None
