"""
Tests for the persisted cache stores.
"""

import sqlite3
from unittest.mock import patch

import pytest

from photo_clusters.database import CacheStore, MemoryStore
from photo_clusters.error_handling import CacheError


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return CacheStore(str(tmp_path / "cache.db"))
    return MemoryStore()


class TestStores:
    """Both stores behave the same."""

    def test_missing_key_is_none(self, store):
        assert store.load("nothing.here") is None

    def test_save_and_load(self, store):
        store.save("index", [{"id": "a", "ts": 1}])
        assert store.load("index") == [{"id": "a", "ts": 1}]

    def test_overwrite(self, store):
        store.save("ts", 1)
        store.save("ts", 2)
        assert store.load("ts") == 2

    def test_save_many(self, store):
        store.save_many({"a": [1, 2], "b": {"x": None}, "c": 1700000000000})

        assert store.load("a") == [1, 2]
        assert store.load("b") == {"x": None}
        assert store.load("c") == 1700000000000
        assert store.keys() == ["a", "b", "c"]

    def test_loaded_values_are_copies(self, store):
        value = [{"id": "a"}]
        store.save("index", value)
        value[0]["id"] = "changed"

        loaded = store.load("index")
        loaded.append({"id": "b"})

        assert store.load("index") == [{"id": "a"}]


class TestCacheStore:
    def test_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "cache.db")
        CacheStore(path).save("photoClusters.lastSyncTs.v1", 42)

        assert CacheStore(path).load("photoClusters.lastSyncTs.v1") == 42

    def test_keys_failure_raises_cache_error(self, tmp_path):
        store = CacheStore(str(tmp_path / "cache.db"))

        with patch.object(store, 'get_connection', side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(CacheError):
                store.keys()
