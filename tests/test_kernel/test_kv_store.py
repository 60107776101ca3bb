"""
Tests for the key-value store

Both backends must behave the same: get/set/delete by key, whole-blob
replacement, and sorted key listing.
"""

import sqlite3

import pytest

from moneytracker.kernel.kv_store import InMemoryKeyValueStore, SQLiteKeyValueStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request, temp_db):
    """Each test runs against both backends"""
    if request.param == "memory":
        return InMemoryKeyValueStore()
    return SQLiteKeyValueStore(temp_db)


# =============================================================================
# Shared Behavior
# =============================================================================


def test_get_missing_key_returns_none(store):
    assert store.get("expenses_v1") is None


def test_set_then_get(store):
    store.set("lists_v1", '[{"id": "l1", "name": "General"}]')
    assert store.get("lists_v1") == '[{"id": "l1", "name": "General"}]'


def test_set_replaces_whole_blob(store):
    store.set("cards_v1", "[1, 2, 3]")
    store.set("cards_v1", "[]")
    assert store.get("cards_v1") == "[]"


def test_delete_removes_key(store):
    store.set("selected_list_v1", '"l1"')
    store.delete("selected_list_v1")
    assert store.get("selected_list_v1") is None


def test_delete_missing_key_is_noop(store):
    store.delete("never_written")
    assert store.keys() == []


def test_keys_sorted(store):
    store.set("lists_v1", "[]")
    store.set("budgets_v1", "[]")
    store.set("expenses_v1", "[]")
    assert store.keys() == ["budgets_v1", "expenses_v1", "lists_v1"]


# =============================================================================
# SQLite Specifics
# =============================================================================


def test_sqlite_creates_schema(temp_db):
    """Test the snapshot table exists right after construction"""
    store = SQLiteKeyValueStore(temp_db)

    with store._connect() as conn:
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='snapshot'"
        )
        assert cursor.fetchone() is not None


def test_sqlite_persists_across_instances(temp_db):
    """Test a second store on the same file sees the first one's writes"""
    writer = SQLiteKeyValueStore(temp_db)
    writer.set("lists_v1", "[]")

    reader = SQLiteKeyValueStore(temp_db)
    assert reader.get("lists_v1") == "[]"


def test_sqlite_tracks_updated_at(temp_db):
    store = SQLiteKeyValueStore(temp_db)
    assert store.updated_at("lists_v1") is None

    store.set("lists_v1", "[]")
    assert store.updated_at("lists_v1") is not None


def test_in_memory_initial_data():
    store = InMemoryKeyValueStore({"lists_v1": "[]"})
    assert store.get("lists_v1") == "[]"


def test_sqlite_read_only_reads_but_never_writes(temp_db):
    writer = SQLiteKeyValueStore(temp_db)
    writer.set("lists_v1", "[]")
    written_at = writer.updated_at("lists_v1")

    reader = SQLiteKeyValueStore(temp_db, read_only=True)

    assert reader.get("lists_v1") == "[]"
    assert reader.keys() == ["lists_v1"]
    with pytest.raises(sqlite3.OperationalError):
        reader.set("lists_v1", '[{"id": "l1", "name": "Trip"}]')
    assert writer.get("lists_v1") == "[]"
    assert writer.updated_at("lists_v1") == written_at


def test_sqlite_read_only_does_not_create_schema(temp_db):
    SQLiteKeyValueStore(temp_db, read_only=True)

    conn = sqlite3.connect(temp_db)
    try:
        cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        assert cursor.fetchall() == []
    finally:
        conn.close()
