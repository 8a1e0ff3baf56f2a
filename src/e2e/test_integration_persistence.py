# src/e2e/test_integration_persistence.py

import sqlite3
from pathlib import Path

import pytest

from prefixstore import RecordStore
from prefixstore.errors import CorruptSnapshot, StorageError
from prefixstore.DB.api import make_store
from prefixstore.DB.storage import load_store, save_store


def _seed(strategy: str = "flat:2") -> RecordStore:
    store = RecordStore(strategy)
    for w in ("bat", "bath", "dog", "Café"):
        store.insert(w)
    if strategy.startswith("flat"):
        store.update("ba_1", "batman")
    return store


def _dsns(tmp: Path) -> list[str]:
    return [f"json:///{tmp / 'snap.json'}", f"sqlite:///{tmp / 'snap.sqlite'}", "memory://"]


@pytest.mark.e2e
@pytest.mark.parametrize("kind", [0, 1, 2], ids=["json", "sqlite", "memory"])
@pytest.mark.parametrize("strategy", ["flat:2", "trie"])
def test_save_then_load_roundtrip(tmp_path: Path, kind: int, strategy: str):
    backend = make_store(_dsns(tmp_path)[kind])
    try:
        src = _seed(strategy)
        save_store(src, backend)
        dst = load_store(backend)
        assert dst.strategy == strategy
        assert list(dst.records()) == list(src.records())
        assert dst.allocator.next_id == src.allocator.next_id
    finally:
        backend.close()


@pytest.mark.e2e
def test_file_backends_survive_reopen(tmp_path: Path):
    for dsn in _dsns(tmp_path)[:2]:
        b1 = make_store(dsn)
        save_store(_seed(), b1)
        b1.close()

        b2 = make_store(dsn)
        try:
            store = load_store(b2)
            assert store.get("ba_1") == "batman"
            assert store.get("do_3") == "dog"
        finally:
            b2.close()


@pytest.mark.e2e
def test_empty_backend_gives_fresh_store(tmp_path: Path):
    for dsn in _dsns(tmp_path):
        backend = make_store(dsn)
        try:
            assert backend.load() is None
            store = load_store(backend, "trie")
            assert store.strategy == "trie" and len(store) == 0
        finally:
            backend.close()


@pytest.mark.e2e
def test_requested_strategy_must_match_saved(tmp_path: Path):
    backend = make_store(f"json:///{tmp_path / 'snap.json'}")
    save_store(_seed("flat:2"), backend)
    with pytest.raises(CorruptSnapshot):
        load_store(backend, "trie")
    assert load_store(backend, "flat:2").get("ba_2") == "bath"


@pytest.mark.e2e
def test_clear(tmp_path: Path):
    for dsn in _dsns(tmp_path):
        backend = make_store(dsn)
        try:
            save_store(_seed(), backend)
            backend.clear()
            assert backend.load() is None
        finally:
            backend.close()


@pytest.mark.e2e
def test_json_garbage_raises_storage_error(tmp_path: Path):
    path = tmp_path / "snap.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        make_store(f"json:///{path}").load()


@pytest.mark.e2e
def test_json_write_is_atomic(tmp_path: Path):
    path = tmp_path / "nested" / "snap.json"
    backend = make_store(f"json:///{path}")
    save_store(_seed(), backend)
    assert path.exists()
    assert not Path(f"{path}.tmp").exists()


@pytest.mark.e2e
def test_sqlite_partial_snapshot_raises_storage_error(tmp_path: Path):
    db = tmp_path / "snap.sqlite"
    backend = make_store(f"sqlite:///{db}")
    backend.close()
    with sqlite3.connect(db) as conn:
        conn.execute("INSERT INTO kv(key, value) VALUES (?, ?)", ("prefixstore.data", "{}"))
    backend = make_store(f"sqlite:///{db}")
    try:
        with pytest.raises(StorageError):
            backend.load()
    finally:
        backend.close()


@pytest.mark.e2e
def test_sqlite_keeps_localstorage_style_keys(tmp_path: Path):
    db = tmp_path / "snap.sqlite"
    backend = make_store(f"sqlite:///{db}")
    save_store(_seed(), backend)
    backend.close()
    with sqlite3.connect(db) as conn:
        keys = {k for (k,) in conn.execute("SELECT key FROM kv")}
    assert keys == {"prefixstore.data", "prefixstore.allocator", "prefixstore.meta"}


def test_memory_store_hands_out_copies():
    backend = make_store("memory://")
    save_store(_seed(), backend)
    snap = backend.load()
    snap["buckets"].clear()
    assert backend.load()["buckets"]


def test_unknown_dsn():
    with pytest.raises(ValueError):
        make_store("redis://localhost")
