from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Tuple

from .config import SNAPSHOT_VERSION
from .errors import CorruptSnapshot, InvalidKey
from .models import Record
from .DB.index import BucketIndex, make_index

# Snapshot layout (JSON-ready, plain dict/list/str/int):
#
#   {"version": 1,
#    "strategy": "flat:2" | "trie",
#    "buckets": {key: [{"id": 1, "text": "bat"}, ...]},
#    "allocator": {"next_id": 3, "text_to_id": {"bat": 1, "bath": 2}}}


def _is_id(v: Any) -> bool:
    # bool is an int subclass; True/False are not identifiers
    return isinstance(v, int) and not isinstance(v, bool) and v >= 0


def build_snapshot(index: BucketIndex, allocator_state: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "strategy": index.descriptor,
        "buckets": {
            key: [r.to_dict() for r in bucket] for key, bucket in index.buckets()
        },
        "allocator": {
            "next_id": int(allocator_state["next_id"]),
            "text_to_id": dict(allocator_state["text_to_id"]),
        },
    }


def parse_snapshot(
    snap: Any, *, expect_strategy: Optional[str] = None
) -> Tuple[BucketIndex, int, Dict[str, int]]:
    """
    Validate a snapshot and materialize it into a FRESH index.

    Returns (index, next_id, text_to_id). Raises CorruptSnapshot on the first
    structural problem; nothing outside the returned objects is touched.
    """
    if not isinstance(snap, Mapping):
        raise CorruptSnapshot(f"snapshot must be a mapping, got {type(snap).__name__}")

    version = snap.get("version")
    if type(version) is not int or version != SNAPSHOT_VERSION:
        raise CorruptSnapshot(f"unsupported snapshot version: {version!r}")

    strategy = snap.get("strategy")
    if not isinstance(strategy, str):
        raise CorruptSnapshot("missing strategy descriptor")
    try:
        index = make_index(strategy)
    except ValueError as exc:
        raise CorruptSnapshot(str(exc)) from None
    if expect_strategy is not None and index.descriptor != expect_strategy:
        raise CorruptSnapshot(
            f"snapshot strategy {index.descriptor!r} does not match store strategy {expect_strategy!r}"
        )

    # ---- allocator ----
    alloc = snap.get("allocator")
    if not isinstance(alloc, Mapping):
        raise CorruptSnapshot("missing allocator state")
    next_id = alloc.get("next_id")
    if not _is_id(next_id):
        raise CorruptSnapshot(f"next_id must be a non-negative integer, got {next_id!r}")
    mapping = alloc.get("text_to_id")
    if not isinstance(mapping, Mapping):
        raise CorruptSnapshot("text_to_id must be a mapping")
    text_to_id: Dict[str, int] = {}
    id_to_text: Dict[int, str] = {}
    for text, sid in mapping.items():
        if not isinstance(text, str):
            raise CorruptSnapshot(f"text_to_id key must be a string, got {text!r}")
        if not _is_id(sid) or sid >= next_id:
            raise CorruptSnapshot(f"text_to_id[{text!r}] = {sid!r} is not a valid issued id")
        if sid in id_to_text:
            raise CorruptSnapshot(f"id {sid} is mapped to both {id_to_text[sid]!r} and {text!r}")
        text_to_id[text] = sid
        id_to_text[sid] = text

    # ---- buckets ----
    buckets = snap.get("buckets")
    if not isinstance(buckets, Mapping):
        raise CorruptSnapshot("buckets must be a mapping")
    owner: Dict[int, str] = {}      # id -> bucket key holding it
    for key, entries in buckets.items():
        if not isinstance(key, str):
            raise CorruptSnapshot(f"bucket key must be a string, got {key!r}")
        if not isinstance(entries, list):
            raise CorruptSnapshot(f"bucket {key!r} must be a list")
        if not entries:
            continue
        try:
            bucket = index.locate(key)
        except InvalidKey as exc:
            raise CorruptSnapshot(f"bucket {key!r}: {exc}") from None
        for entry in entries:
            if not isinstance(entry, Mapping) or "id" not in entry or "text" not in entry:
                raise CorruptSnapshot(f"bucket {key!r}: entry {entry!r} needs id and text")
            sid, text = entry["id"], entry["text"]
            if not _is_id(sid) or sid >= next_id:
                raise CorruptSnapshot(f"bucket {key!r}: bad id {sid!r}")
            if not isinstance(text, str) or not text:
                raise CorruptSnapshot(f"bucket {key!r}: bad text for id {sid}")
            if sid in owner:
                if owner[sid] == key:
                    raise CorruptSnapshot(f"bucket {key!r}: duplicate id {sid}")
                raise CorruptSnapshot(f"id {sid} appears in buckets {owner[sid]!r} and {key!r}")
            owner[sid] = key
            bucket.append(Record(id=sid, text=text))

    # a record keeps the bucket of the text its id was issued for, even after edits
    for sid, key in owner.items():
        text = id_to_text.get(sid)
        if text is not None and index.key_of(text) != key:
            raise CorruptSnapshot(
                f"id {sid} is issued to {text!r} but stored under bucket {key!r}"
            )

    return index, next_id, text_to_id
