# prefixstore/DB/sqlite_store.py
from __future__ import annotations
import json
import logging
import os
import sqlite3
from typing import Any, Dict, Optional
from .api import SnapshotStore
from ..config import KV_PREFIX, SQLITE_TABLE
from ..errors import StorageError

log = logging.getLogger(__name__)

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {SQLITE_TABLE} (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL
);
"""

# snapshot part -> kv key (same three slots the browser build kept in localStorage)
_KEYS = {
    "buckets": f"{KV_PREFIX}.data",
    "allocator": f"{KV_PREFIX}.allocator",
    "meta": f"{KV_PREFIX}.meta",
}


class SQLiteStore(SnapshotStore):
    """Key-value table in SQLite; one row per snapshot part, JSON-encoded values."""
    def __init__(self, db_path: str) -> None:
        self.db_path = os.path.abspath(db_path)
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
        self.conn: sqlite3.Connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.executescript(_SCHEMA)

    # ---- raw kv ----
    def get_item(self, key: str) -> Optional[str]:
        row = self.conn.execute(
            f"SELECT value FROM {SQLITE_TABLE} WHERE key=?", (key,)
        ).fetchone()
        return None if row is None else row[0]

    # ---- Read ----
    def load(self) -> Optional[Dict[str, Any]]:
        raw = {part: self.get_item(key) for part, key in _KEYS.items()}
        if all(v is None for v in raw.values()):
            return None
        if any(v is None for v in raw.values()):
            missing = [k for k, v in raw.items() if v is None]
            raise StorageError(f"{self.db_path}: incomplete snapshot, missing {missing}")
        try:
            meta = json.loads(raw["meta"])
            snap = {
                "version": meta.get("version"),
                "strategy": meta.get("strategy"),
                "buckets": json.loads(raw["buckets"]),
                "allocator": json.loads(raw["allocator"]),
            }
        except (json.JSONDecodeError, AttributeError) as exc:
            raise StorageError(f"{self.db_path}: unreadable snapshot ({exc})") from exc
        log.info("Loaded snapshot from %s", self.db_path)
        return snap

    # ---- Write ----
    def save(self, snap: Dict[str, Any]) -> None:
        rows = [
            (_KEYS["buckets"], json.dumps(snap["buckets"], ensure_ascii=False)),
            (_KEYS["allocator"], json.dumps(snap["allocator"], ensure_ascii=False)),
            (_KEYS["meta"], json.dumps({"version": snap["version"], "strategy": snap["strategy"]})),
        ]
        with self.conn:   # one transaction: all three parts or none
            self.conn.executemany(
                f"INSERT OR REPLACE INTO {SQLITE_TABLE}(key, value) VALUES (?,?)", rows
            )
        log.info("Saved snapshot to %s", self.db_path)

    # ---- Delete ----
    def clear(self) -> None:
        with self.conn:
            self.conn.executemany(
                f"DELETE FROM {SQLITE_TABLE} WHERE key=?", [(k,) for k in _KEYS.values()]
            )

    # ---- lifecycle ----
    def close(self) -> None:
        self.conn.close()
