# prefixstore/DB/storage.py
from __future__ import annotations
import logging
from typing import Optional
from .api import SnapshotStore
from ..engine import RecordStore

log = logging.getLogger(__name__)

def save_store(store: RecordStore, backend: SnapshotStore) -> None:
    backend.save(store.snapshot())

def load_store(backend: SnapshotStore, strategy: Optional[str] = None, *,
               width: Optional[int] = None) -> RecordStore:
    """
    Restore a RecordStore from ``backend``.
    Empty backend -> fresh store with ``strategy``. A saved snapshot keeps its own
    strategy unless one is requested explicitly, in which case they must match.
    """
    snap = backend.load()
    if snap is None:
        log.info("Backend empty; starting a fresh %s store", strategy or "default")
        return RecordStore(strategy, width=width)
    if strategy is None:
        return RecordStore.from_snapshot(snap)
    store = RecordStore(strategy, width=width)
    store.restore(snap)
    return store
