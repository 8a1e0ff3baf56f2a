"""Front-end glue: one RecordStore bound to one persistence backend."""
from __future__ import annotations
import logging
from typing import Optional
from prefixstore import RecordStore
from prefixstore.config import DEFAULT_DSN
from prefixstore.DB.api import SnapshotStore, make_store
from prefixstore.DB.storage import load_store, save_store

log = logging.getLogger(__name__)


class Session:
    """
    Used by the CLI, the Flask app and the GUI:
      * open(db, strategy): make backend from DSN, restore the saved snapshot (if any)
      * save() / reload(): push or pull the snapshot
      * close(): release the backend
    """

    def __init__(self, store: RecordStore, backend: SnapshotStore, dsn: str) -> None:
        self.store = store
        self.backend = backend
        self.dsn = dsn

    @classmethod
    def open(cls, db: Optional[str] = None, *, strategy: Optional[str] = None,
             width: Optional[int] = None) -> "Session":
        dsn = db or DEFAULT_DSN
        backend = make_store(dsn)
        try:
            store = load_store(backend, strategy, width=width)
        except Exception:
            backend.close()
            raise
        log.info("Session opened on %s (%s, %d records)", dsn, store.strategy, len(store))
        return cls(store, backend, dsn)

    def save(self) -> None:
        save_store(self.store, self.backend)

    def reload(self) -> None:
        snap = self.backend.load()
        if snap is not None:
            self.store.restore(snap)

    def close(self) -> None:
        self.backend.close()
