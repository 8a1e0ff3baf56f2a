# prefixstore/DB/api.py
from __future__ import annotations
from typing import Any, Dict, Optional, Protocol


class SnapshotStore(Protocol):
    """A medium that holds exactly one RecordStore snapshot."""
    # Read (None when nothing was saved yet)
    def load(self) -> Optional[Dict[str, Any]]: ...
    # Write (replaces the previous snapshot)
    def save(self, snap: Dict[str, Any]) -> None: ...
    # Delete
    def clear(self) -> None: ...
    # lifecycle
    def close(self) -> None: ...


def make_store(dsn: str) -> SnapshotStore:
    """
    Factory:
      - json:///path   -> JsonFileStore (one JSON document)
      - sqlite:///path -> SQLiteStore (key-value table, localStorage style)
      - memory://      -> MemoryStore
    """
    # Lazy imports: the concrete stores import SnapshotStore from here
    if dsn.startswith("json:///"):
        from .json_store import JsonFileStore
        return JsonFileStore(dsn.removeprefix("json:///"))

    if dsn.startswith("sqlite:///"):
        from .sqlite_store import SQLiteStore
        return SQLiteStore(dsn.removeprefix("sqlite:///"))

    if dsn.startswith("memory://"):
        from .memory_store import MemoryStore
        return MemoryStore()

    raise ValueError(f"Unsupported store DSN: {dsn}")
