"""
prefixstore: prefix-indexed record store.

Text values are kept in buckets keyed by a prefix of the text and are
addressed by ``<bucket key>_<id>`` handles. The id is tied to the text that
was first inserted and survives later edits, so an address handed out by
``insert`` keeps pointing at the same record until it is deleted.

Example Usage:
    from prefixstore import RecordStore

    store = RecordStore("flat:2")
    a1 = store.insert("bat")          # "ba_1"
    store.update(a1, "batman")        # still "ba_1"
    store.get(a1)                     # "batman"
    store.delete(a1)                  # True

Persistence lives in prefixstore.DB (JSON file, SQLite key-value, memory).
"""

# src/prefixstore/__init__.py
from .engine import RecordStore
from .errors import (
    CorruptSnapshot,
    InvalidInput,
    InvalidKey,
    MalformedAddress,
    NotFound,
    PrefixStoreError,
    StorageError,
)

__version__ = "1.0.0"
__all__ = [
    "RecordStore",
    "PrefixStoreError",
    "InvalidInput",
    "InvalidKey",
    "MalformedAddress",
    "NotFound",
    "CorruptSnapshot",
    "StorageError",
]
