import pytest

from sshkey_core.storage import (
    CommitFailed, InMemoryStorage, KeyRecord, SQLiteStorage, StoreUnavailable, load_storage_provider,
)


def test_sqlite_roundtrip(tmp_path):
    s = SQLiteStorage(str(tmp_path / "keys.db"))
    rec = KeyRecord(id="k1", name="laptop", key_type="Ed25519", public_key="PLACEHOLDER")
    s.upsert_key(rec)
    got = s.get_key("k1")
    assert got == rec
    assert got.needs_public_key()
    assert s.get_key("missing") is None
    s.close()


def test_sqlite_fetch_all_keeps_insertion_order(tmp_path):
    s = SQLiteStorage(str(tmp_path / "keys.db"))
    for key_id in ("z", "a", "m"):
        s.upsert_key(KeyRecord(id=key_id, name=key_id, key_type="P256"))
    assert [r.id for r in s.fetch_all()] == ["z", "a", "m"]


def test_sqlite_commit_batch_updates_public_keys(tmp_path):
    s = SQLiteStorage(str(tmp_path / "keys.db"))
    s.upsert_key(KeyRecord(id="1", name="one", key_type="Ed25519"))
    s.upsert_key(KeyRecord(id="2", name="two", key_type="Ed25519"))

    records = s.fetch_all()
    for r in records:
        r.public_key = f"ssh-ed25519 AAAA{r.id}"
    assert s.commit_batch(records) == 2

    reopened = SQLiteStorage(str(tmp_path / "keys.db"))
    assert [r.public_key for r in reopened.fetch_all()] == ["ssh-ed25519 AAAA1", "ssh-ed25519 AAAA2"]


def test_sqlite_commit_batch_is_all_or_nothing(tmp_path):
    s = SQLiteStorage(str(tmp_path / "keys.db"))
    s.upsert_key(KeyRecord(id="1", name="one", key_type="Ed25519"))

    known = s.get_key("1")
    known.public_key = "ssh-ed25519 AAAA1"
    ghost = KeyRecord(id="ghost", name="ghost", key_type="Ed25519", public_key="ssh-ed25519 AAAAg")

    with pytest.raises(CommitFailed):
        s.commit_batch([known, ghost])
    assert s.get_key("1").public_key == ""


def test_sqlite_errors_map_to_storage_exceptions(tmp_path):
    s = SQLiteStorage(str(tmp_path / "keys.db"))
    s.upsert_key(KeyRecord(id="1", name="one", key_type="Ed25519"))
    rec = s.get_key("1")
    s.close()

    with pytest.raises(StoreUnavailable):
        s.fetch_all()
    with pytest.raises(CommitFailed):
        s.commit_batch([rec])


def test_sqlite_delete(tmp_path):
    s = SQLiteStorage(str(tmp_path / "keys.db"))
    s.upsert_key(KeyRecord(id="1", name="one", key_type="Ed25519"))
    s.delete_key("1")
    assert s.fetch_all() == []


def test_memory_fetch_returns_detached_copies():
    store = InMemoryStorage([KeyRecord(id="1", name="one", key_type="Ed25519")])
    fetched = store.fetch_all()
    fetched[0].public_key = "ssh-ed25519 AAAA"
    # not durable until committed
    assert store.get_key("1").public_key == ""

    store.commit_batch(fetched)
    assert store.get_key("1").public_key == "ssh-ed25519 AAAA"


def test_memory_commit_rejects_unknown_ids():
    store = InMemoryStorage([KeyRecord(id="1", name="one", key_type="Ed25519")])
    good = store.get_key("1")
    good.public_key = "ssh-ed25519 AAAA"
    with pytest.raises(CommitFailed):
        store.commit_batch([good, KeyRecord(id="2", name="two", key_type="Ed25519")])
    assert store.get_key("1").public_key == ""
    assert store.commits == 0


def test_needs_public_key():
    assert KeyRecord(id="1", name="n", key_type="Ed25519").needs_public_key()
    assert KeyRecord(id="1", name="n", key_type="Ed25519", public_key="ssh-ed25519 PLACEHOLDER").needs_public_key()
    assert not KeyRecord(id="1", name="n", key_type="Ed25519", public_key="ssh-ed25519 AAAA").needs_public_key()
    assert KeyRecord(id="1", name="n", key_type="Ed25519", public_key="TODO").needs_public_key(marker="TODO")


def test_load_storage_provider(tmp_path, monkeypatch):
    monkeypatch.delenv("SSHKEY_STORAGE_PROVIDER", raising=False)
    monkeypatch.setenv("SSHKEY_DB_PATH", str(tmp_path / "env.db"))
    store = load_storage_provider()
    assert isinstance(store, SQLiteStorage)
    assert store.path == str(tmp_path / "env.db")

    monkeypatch.setenv("SSHKEY_STORAGE_PROVIDER", "memory")
    assert isinstance(load_storage_provider(), InMemoryStorage)

    explicit = load_storage_provider({"provider": "sqlite", "sqlite_path": str(tmp_path / "x.db")})
    assert explicit.path == str(tmp_path / "x.db")

    with pytest.raises(ValueError):
        load_storage_provider({"provider": "firestore"})


def test_sqlite_unopenable_path_is_store_unavailable(tmp_path):
    # a directory cannot be opened as a database file
    with pytest.raises(StoreUnavailable):
        SQLiteStorage(str(tmp_path))
