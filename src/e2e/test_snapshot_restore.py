# src/e2e/test_snapshot_restore.py

import copy
import json

import pytest

from prefixstore import RecordStore
from prefixstore.errors import CorruptSnapshot


def _populated(strategy: str) -> RecordStore:
    store = RecordStore(strategy)
    for w in ("bat", "bath", "dog", "door", "b"):
        store.insert(w)
    store.update(store.insert("cat"), "category")
    store.delete(store.insert("gone"))
    return store


@pytest.mark.parametrize("strategy", ["flat:2", "flat:0", "trie"])
def test_restore_of_snapshot_is_observably_identical(strategy):
    src = _populated(strategy)
    snap = json.loads(json.dumps(src.snapshot()))   # survives a JSON medium

    dst = RecordStore(strategy)
    dst.restore(snap)
    assert list(dst.records()) == list(src.records())
    for addr, text in src.records():
        assert dst.get(addr) == text
    assert dst.allocator.next_id == src.allocator.next_id


def test_restored_store_keeps_issuing_fresh_ids():
    src = _populated("flat:2")
    dst = RecordStore.from_snapshot(src.snapshot())
    before = set(src.addresses())
    fresh = dst.insert("brand new")
    assert fresh not in before
    assert dst.get(fresh) == "brand new"
    # memoized texts keep their old ids
    assert dst.insert("bat") == "ba_1"


def test_restore_into_itself():
    store = _populated("trie")
    expected = list(store.records())
    store.restore(store.snapshot())
    assert list(store.records()) == expected


def test_from_snapshot_adopts_strategy():
    snap = _populated("trie").snapshot()
    assert RecordStore.from_snapshot(snap).strategy == "trie"


def test_snapshot_layout():
    store = RecordStore("flat:2")
    a = store.insert("bat")
    store.insert("bath")
    store.delete(a)
    assert store.snapshot() == {
        "version": 1,
        "strategy": "flat:2",
        "buckets": {"ba": [{"id": 2, "text": "bath"}]},
        "allocator": {"next_id": 3, "text_to_id": {"bat": 1, "bath": 2}},
    }


def test_empty_bucket_lists_are_accepted():
    snap = RecordStore("flat:2").snapshot()
    snap["buckets"]["zz"] = []
    store = RecordStore("flat:2")
    store.restore(snap)
    assert len(store) == 0


def _base() -> dict:
    store = RecordStore("flat:2")
    store.insert("bat"); store.insert("bath")
    return store.snapshot()


def _mutate(path, value):
    def apply(snap):
        node = snap
        for p in path[:-1]:
            node = node[p]
        if value is _DROP:
            del node[path[-1]]
        else:
            node[path[-1]] = value
        return snap
    return apply


_DROP = object()

CORRUPT = {
    "version": _mutate(["version"], 2),
    "no strategy": _mutate(["strategy"], _DROP),
    "strategy mismatch": _mutate(["strategy"], "trie"),
    "unknown strategy": _mutate(["strategy"], "radix"),
    "buckets not mapping": _mutate(["buckets"], [["ba", []]]),
    "bucket not list": _mutate(["buckets", "ba"], {"id": 1, "text": "bat"}),
    "entry missing id": _mutate(["buckets", "ba", 0, "id"], _DROP),
    "entry missing text": _mutate(["buckets", "ba", 0, "text"], _DROP),
    "entry not mapping": _mutate(["buckets", "ba", 0], "1_bat"),
    "negative id": _mutate(["buckets", "ba", 0, "id"], -1),
    "bool id": _mutate(["buckets", "ba", 0, "id"], True),
    "string id": _mutate(["buckets", "ba", 0, "id"], "1"),
    "id not yet issued": _mutate(["buckets", "ba", 0, "id"], 3),
    "empty text": _mutate(["buckets", "ba", 0, "text"], ""),
    "duplicate id": _mutate(["buckets", "ba", 1, "id"], 1),
    "no allocator": _mutate(["allocator"], _DROP),
    "negative next_id": _mutate(["allocator", "next_id"], -1),
    "float next_id": _mutate(["allocator", "next_id"], 2.5),
    "string next_id": _mutate(["allocator", "next_id"], "3"),
    "mapping not dict": _mutate(["allocator", "text_to_id"], [["bat", 1]]),
    "mapping bad id": _mutate(["allocator", "text_to_id", "bat"], 7),
    "bool version": _mutate(["version"], True),
    "float version": _mutate(["version"], 1.0),
    "id mapped to two texts": _mutate(["allocator", "text_to_id", "cat"], 1),
    "id in two buckets": _mutate(["buckets", "do"], [{"id": 1, "text": "dog"}]),
    "mapped text in wrong bucket": _mutate(
        ["buckets"], {"do": [{"id": 1, "text": "dog"}], "ba": [{"id": 2, "text": "bath"}]}
    ),
}


@pytest.mark.parametrize("case", sorted(CORRUPT))
def test_corrupt_snapshot_rejected_without_side_effects(case):
    store = RecordStore("flat:2")
    a = store.insert("dog")
    bad = CORRUPT[case](copy.deepcopy(_base()))

    with pytest.raises(CorruptSnapshot):
        store.restore(bad)

    assert store.get(a) == "dog"
    assert store.addresses() == [a]
    assert store.insert("cat") == "ca_2"


@pytest.mark.parametrize("bad", [None, [], "snapshot", 3])
def test_non_mapping_snapshot_rejected(bad):
    with pytest.raises(CorruptSnapshot):
        RecordStore("trie").restore(bad)
    with pytest.raises(CorruptSnapshot):
        RecordStore.from_snapshot(bad)


def test_trie_snapshot_with_empty_key_rejected():
    snap = RecordStore("trie").snapshot()
    snap["allocator"]["next_id"] = 2
    snap["buckets"][""] = [{"id": 1, "text": "x"}]
    with pytest.raises(CorruptSnapshot):
        RecordStore("trie").restore(snap)


def test_injected_text_mapping_cannot_share_a_live_id():
    src = RecordStore("flat:2")
    src.insert("dog")
    snap = src.snapshot()
    snap["allocator"]["text_to_id"]["bat"] = 1

    dst = RecordStore("flat:2")
    with pytest.raises(CorruptSnapshot):
        dst.restore(snap)
    assert dst.insert("bat") == "ba_1"
    assert len(dst) == 1


def test_edited_record_stays_restorable():
    src = RecordStore("flat:2")
    addr = src.insert("bat")
    src.update(addr, "dog")           # text changes, bucket "ba" does not
    dst = RecordStore.from_snapshot(src.snapshot())
    assert dst.get(addr) == "dog"
    assert dst.insert("bat") == addr
