"""Tests for the package cache stores."""

import json
import threading
from unittest.mock import patch

import pytest

from packagecache import FileCacheStore, MemoryCacheStore, create_cache_store


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    """Each behavioral test runs against both backings."""
    if request.param == "memory":
        return MemoryCacheStore()
    return FileCacheStore(tmp_path / "cache")


class TestCacheStoreContract:
    """Behavior shared by every cache backing."""

    def test_miss_returns_none(self, store):
        assert store.get("ns", "missing") is None

    def test_set_then_get(self, store):
        store.set("ns", "k", {"sourceUrl": "https://x/", "releases": []}, 10)
        assert store.get("ns", "k") == {"sourceUrl": "https://x/", "releases": []}

    def test_overwrite_replaces_value(self, store):
        store.set("ns", "k", "abc", 10)
        store.set("ns", "k", "def", 10)
        assert store.get("ns", "k") == "def"

    def test_namespaces_are_isolated(self, store):
        store.set("bitbucket-tags", "k", "one", 10)
        store.set("gitlab-tags", "k", "two", 10)
        assert store.get("bitbucket-tags", "k") == "one"
        assert store.get("gitlab-tags", "k") == "two"

    def test_expired_entry_is_absent(self, store):
        with patch("time.time", return_value=1000.0):
            store.set("ns", "k", "abc", 10)
        with patch("time.time", return_value=1000.0 + 9 * 60):
            assert store.get("ns", "k") == "abc"
        with patch("time.time", return_value=1000.0 + 11 * 60):
            assert store.get("ns", "k") is None

    def test_delete_and_clear(self, store):
        store.set("ns", "a", 1, 10)
        store.set("ns", "b", 2, 10)
        store.delete("ns", "a")
        assert store.get("ns", "a") is None
        store.clear()
        assert store.get("ns", "b") is None


class TestMemoryCacheStore:
    """Memory-specific behavior."""

    def test_evicts_oldest_over_limit(self):
        store = MemoryCacheStore(max_entries=10)
        for i in range(11):
            with patch("time.time", return_value=1000.0 + i):
                store.set("ns", f"k{i}", i, 10)
        with patch("time.time", return_value=1020.0):
            assert store.get("ns", "k0") is None
            assert store.get("ns", "k10") == 10

    def test_stats(self):
        store = MemoryCacheStore()
        store.set("a", "k", 1, 10)
        stats = store.stats()
        assert stats["total_entries"] == 1
        assert stats["namespaces"] == ["a"]

    def test_concurrent_writers(self):
        store = MemoryCacheStore()

        def writer(n):
            for i in range(200):
                store.set("ns", f"{n}-{i}", i, 10)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert store.stats()["total_entries"] == 800


class TestFileCacheStore:
    """File-specific behavior."""

    def test_corrupt_file_is_a_miss(self, tmp_path):
        store = FileCacheStore(tmp_path)
        store.set("ns", "k", "abc", 10)
        path = next(tmp_path.glob("ns/*.json"))
        path.write_text("{not json", encoding="utf-8")
        assert store.get("ns", "k") is None
        assert not path.exists()

    @pytest.mark.parametrize("expires_at", ["soon", None, [1]])
    def test_unparsable_expiry_is_a_miss(self, tmp_path, expires_at):
        store = FileCacheStore(tmp_path)
        store.set("ns", "k", "abc", 10)
        path = next(tmp_path.glob("ns/*.json"))
        doc = json.loads(path.read_text(encoding="utf-8"))
        doc["expires_at"] = expires_at
        path.write_text(json.dumps(doc), encoding="utf-8")

        assert store.get("ns", "k") is None
        assert not path.exists()

    def test_non_object_document_is_a_miss(self, tmp_path):
        store = FileCacheStore(tmp_path)
        store.set("ns", "k", "abc", 10)
        path = next(tmp_path.glob("ns/*.json"))
        path.write_text("[1, 2]", encoding="utf-8")

        assert store.get("ns", "k") is None
        assert not path.exists()

    def test_entry_survives_new_instance(self, tmp_path):
        FileCacheStore(tmp_path).set("ns", "k", ["x"], 10)
        assert FileCacheStore(tmp_path).get("ns", "k") == ["x"]

    def test_document_records_key(self, tmp_path):
        store = FileCacheStore(tmp_path)
        store.set("ns", "https://bitbucket.org/:some/dep:tags", "v", 10)
        doc = json.loads(next(tmp_path.glob("ns/*.json")).read_text(encoding="utf-8"))
        assert doc["key"] == "https://bitbucket.org/:some/dep:tags"
        assert doc["value"] == "v"


class TestCreateCacheStore:
    """Tests for the backend factory."""

    def test_memory(self):
        assert isinstance(create_cache_store("memory"), MemoryCacheStore)

    def test_file(self, tmp_path):
        assert isinstance(create_cache_store("file", str(tmp_path)), FileCacheStore)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_cache_store("redis")
