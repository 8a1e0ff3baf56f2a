# prefixstore/DB/json_store.py
from __future__ import annotations
import json
import logging
import os
from typing import Any, Dict, Optional
from .api import SnapshotStore
from ..errors import StorageError

log = logging.getLogger(__name__)

class JsonFileStore(SnapshotStore):
    """Snapshot as one pretty-printed JSON file; writes go through ``<path>.tmp`` + os.replace."""
    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StorageError(f"{self.path}: not a valid JSON snapshot ({exc})") from exc
        log.info("Loaded snapshot from %s", self.path)
        return data

    def save(self, snap: Dict[str, Any]) -> None:
        tmp = f"{self.path}.tmp"
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(snap, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)
        log.info("Saved snapshot to %s", self.path)

    def clear(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass

    def close(self) -> None:
        pass
