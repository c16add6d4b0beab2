import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from cache import Cache, FileCache, MemoryCache

NOW = datetime(2024, 7, 4, 12, 0, tzinfo=timezone.utc)


# ── Stores ─────────────────────────────────────────────────────────────────────

def test_memory_cache_expires_entries(mocker):
    clock = mocker.patch("cache._now", return_value=NOW)
    store = MemoryCache()
    store.set("key", "value", 60)
    assert store.get("key") == "value"

    clock.return_value = NOW + timedelta(seconds=61)
    assert store.get("key") is None


def test_memory_cache_evicts_oldest():
    store = MemoryCache(max_entries=2)
    store.set("a", 1, 60)
    store.set("b", 2, 60)
    store.set("c", 3, 60)
    assert store.get("a") is None
    assert store.get("b") == 2
    assert store.get("c") == 3


def test_memory_cache_values_are_copies():
    store = MemoryCache()
    value = [{"waitTime": 25}]
    store.set("key", value, 60)
    value[0]["waitTime"] = 0
    store.get("key")[0]["waitTime"] = 999
    assert store.get("key") == [{"waitTime": 25}]


def test_file_cache_survives_new_instance(tmp_path):
    path = tmp_path / "cache" / "store.json"
    FileCache(str(path)).set("key", {"rides": [1, 2]}, 60)
    assert FileCache(str(path)).get("key") == {"rides": [1, 2]}


def test_file_cache_ignores_expired_entries(tmp_path):
    path = tmp_path / "store.json"
    expired = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
    path.write_text(json.dumps({"key": {"value": "old", "expires_at": expired}}))
    assert FileCache(str(path)).get("key") is None


def test_file_cache_missing_or_corrupt_file(tmp_path):
    assert FileCache(str(tmp_path / "nope.json")).get("key") is None
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json")
    assert FileCache(str(corrupt)).get("key") is None


# ── Namespacing ────────────────────────────────────────────────────────────────

def test_scoped_keys_are_per_park():
    store = MemoryCache()
    park_a = Cache(store, prefix="Park A")
    park_b = Cache(store, prefix="Park B")

    park_a.set("waittimes", "a")
    assert park_a.get("waittimes") == "a"
    assert park_b.get("waittimes") is None
    assert store.get("waitwatch_Park A_waittimes") == "a"


def test_global_keys_are_shared():
    store = MemoryCache()
    Cache(store, prefix="Park A").set_global("resort", "shared")
    assert Cache(store, prefix="Park B").get_global("resort") == "shared"


# ── wrap ───────────────────────────────────────────────────────────────────────

def test_wrap_hit_skips_compute():
    cache = Cache(MemoryCache(), prefix="Park")
    cache.set("key", "cached")
    compute = MagicMock()

    assert cache.wrap("key", compute) == "cached"
    compute.assert_not_called()


def test_wrap_miss_computes_and_stores():
    store = MagicMock()
    store.get.return_value = None
    cache = Cache(store, prefix="Park")

    assert cache.wrap("key", lambda: "fresh", 120) == "fresh"
    store.set.assert_called_once_with("waitwatch_Park_key", "fresh", 120)


def test_wrap_ttl_callable_runs_after_compute():
    store = MagicMock()
    store.get.return_value = None
    cache = Cache(store)
    token = {}

    def compute():
        token["expires_in"] = 900
        return "token"

    cache.wrap("auth", compute, lambda: token["expires_in"])
    store.set.assert_called_once_with("waitwatch_auth", "token", 900)


def test_wrap_falsy_ttl_uses_default():
    store = MagicMock()
    store.get.return_value = None
    cache = Cache(store, default_ttl=42)

    cache.wrap("key", lambda: "value", lambda: None)
    store.set.assert_called_once_with("waitwatch_key", "value", 42)


def test_wrap_survives_cache_read_errors():
    store = MagicMock()
    store.get.side_effect = ConnectionError("cache down")
    cache = Cache(store, prefix="Park")

    assert cache.wrap("key", lambda: 42) == 42
    assert store.set.call_count == 1


def test_wrap_survives_cache_write_errors():
    store = MagicMock()
    store.get.return_value = None
    store.set.side_effect = ConnectionError("cache down")
    cache = Cache(store)

    assert cache.wrap("key", lambda: 42) == 42
    assert cache.set("key", 42) is False


def test_wrap_compute_error_propagates_without_caching():
    store = MagicMock()
    store.get.return_value = None
    cache = Cache(store)

    def compute():
        raise RuntimeError("source down")

    with pytest.raises(RuntimeError):
        cache.wrap("key", compute)
    store.set.assert_not_called()


def test_wrap_global_ignores_prefix():
    store = MagicMock()
    store.get.return_value = None
    Cache(store, prefix="Park").wrap_global("resort", lambda: "data", 10)
    store.get.assert_called_once_with("waitwatch_resort")
    store.set.assert_called_once_with("waitwatch_resort", "data", 10)


def test_no_single_flight_each_miss_computes():
    store = MagicMock()
    store.get.return_value = None
    cache = Cache(store)
    compute = MagicMock(return_value="value")

    cache.wrap("key", compute)
    cache.wrap("key", compute)
    assert compute.call_count == 2
