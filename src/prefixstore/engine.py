# prefixstore/engine.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from . import config as CFG
from .address import AddressCodec
from .allocator import IdAllocator
from .errors import CorruptSnapshot, InvalidInput, InvalidKey, MalformedAddress, NotFound
from .models import Bucket, Record
from .snapshot import build_snapshot, parse_snapshot
from .DB.index import BucketIndex, TrieIndex, make_index

log = logging.getLogger(__name__)


def _find_pos(bucket: Bucket, sid: int) -> int:
    for i, rec in enumerate(bucket):
        if rec.id == sid:
            return i
    return -1


class RecordStore:
    """
    Prefix-indexed record store.

    Glues together:
      - a BucketIndex (flat prefix map or character trie),
      - an IdAllocator (one id per distinct text, never recycled),
      - an AddressCodec (``<bucket key>_<id>`` handles).

    Public API (used by CLI/Flask/GUI):
      * insert(text)            -> address
      * get(address)            -> text
      * update(address, text)   -> same address, text replaced in place
      * delete(address)         -> bool
      * snapshot() / restore()  -> plain dict for persistence adapters

    Not thread-safe: callers sharing a store must serialize access.
    """

    # ------------- lifecycle -------------

    def __init__(
        self,
        strategy: Optional[str] = None,         # "flat", "flat:<n>" or "trie"
        *,
        width: Optional[int] = None,            # prefix width for a bare "flat"
        sep: str = CFG.ADDRESS_SEPARATOR,
        first_id: int = CFG.FIRST_ID,
    ) -> None:
        self.index: BucketIndex = make_index(strategy, width=width)
        self.allocator = IdAllocator(first_id)
        self.codec = AddressCodec(sep)

    @classmethod
    def from_snapshot(cls, snap: Mapping[str, Any], **kwargs: Any) -> "RecordStore":
        """Build a store that adopts the snapshot's own bucketing strategy."""
        if not isinstance(snap, Mapping) or not isinstance(snap.get("strategy"), str):
            raise CorruptSnapshot("snapshot has no strategy descriptor")
        store = cls(snap["strategy"], **kwargs)
        store.restore(snap)
        return store

    @property
    def strategy(self) -> str:
        return self.index.descriptor

    # ------------- CRUD -------------

    # /* ~~~ Insert text; identical text in the same bucket is a no-op ~~~ */
    def insert(self, text: str) -> str:
        self._check_text(text)
        key = self.index.key_of(text)
        bucket = self.index.locate(key)     # may raise InvalidKey; allocator untouched so far
        sid = self.allocator.allocate(text)
        address = self.codec.encode(key, sid)
        if _find_pos(bucket, sid) >= 0:
            log.debug("insert %r: already present at %s", text, address)
            return address
        bucket.append(Record(id=sid, text=text))
        log.debug("insert %r -> %s", text, address)
        return address

    def get(self, address: str) -> str:
        bucket, pos = self._resolve(address)
        if pos < 0:
            raise NotFound(address)
        return bucket[pos].text

    # /* ~~~ Replace text in place: id and bucket are kept, so the address is too ~~~ */
    def update(self, address: str, text: str) -> str:
        self._check_text(text)
        bucket, pos = self._resolve(address)
        if pos < 0:
            raise NotFound(address)
        old = bucket[pos].text
        bucket[pos].text = text
        log.debug("update %s: %r -> %r", address, old, text)
        return address

    def delete(self, address: str) -> bool:
        bucket, pos = self._resolve(address)
        if pos < 0:
            return False
        del bucket[pos]             # keeps sibling order
        log.debug("delete %s", address)
        return True

    # ------------- read helpers -------------

    def contains(self, address: str) -> bool:
        return self._resolve(address)[1] >= 0

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        try:
            return self.contains(address)
        except (MalformedAddress, InvalidKey):
            return False

    def __len__(self) -> int:
        return sum(len(b) for _, b in self.index.buckets())

    def records(self) -> Iterator[Tuple[str, str]]:
        for key, bucket in self.index.buckets():
            for rec in bucket:
                yield self.codec.encode(key, rec.id), rec.text

    def addresses(self) -> List[str]:
        return [addr for addr, _ in self.records()]

    def dump(self) -> Dict[str, List[Dict[str, Any]]]:
        """Stored words grouped by bucket key (JSON-ready)."""
        return {key: [r.to_dict() for r in bucket] for key, bucket in self.index.buckets()}

    def stats(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "strategy": self.strategy,
            "records": 0,
            "buckets": 0,
            "next_id": self.allocator.next_id,
            "known_texts": len(self.allocator),
        }
        for _, bucket in self.index.buckets():
            out["buckets"] += 1
            out["records"] += len(bucket)
        if isinstance(self.index, TrieIndex):
            out["nodes"] = self.index.node_count()
        return out

    # ------------- snapshot -------------

    def snapshot(self) -> Dict[str, Any]:
        snap = build_snapshot(self.index, self.allocator.state())
        log.info("snapshot: %d buckets, next_id=%d", len(snap["buckets"]), snap["allocator"]["next_id"])
        return snap

    def restore(self, snap: Mapping[str, Any]) -> None:
        """Replace all state with ``snap``; on CorruptSnapshot nothing changes."""
        try:
            index, next_id, text_to_id = parse_snapshot(snap, expect_strategy=self.strategy)
        except CorruptSnapshot as exc:
            log.warning("restore rejected: %s", exc)
            raise
        allocator = IdAllocator(self.allocator.first_id)
        allocator.load_state(next_id, text_to_id)
        self.index, self.allocator = index, allocator
        log.info("restore complete: records=%d next_id=%d", len(self), next_id)

    # ------------- internals -------------

    @staticmethod
    def _check_text(text: Any) -> None:
        if not isinstance(text, str) or not text:
            raise InvalidInput("text must be a non-empty string")

    def _resolve(self, address: str) -> Tuple[Bucket, int]:
        key, sid = self.codec.decode(address)
        bucket = self.index.find(key)
        if bucket is None:
            return [], -1
        return bucket, _find_pos(bucket, sid)
