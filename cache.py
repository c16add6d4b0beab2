"""
Cache-aside helpers.

A store only knows get/set with a TTL. Cache sits in front of a store,
namespaces keys per park (or globally) and implements get-or-compute.
Store failures never fail a request: reads fall through to a fresh fetch
and writes are logged and dropped.
"""

import copy
import json
import logging
import os
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Union

logger = logging.getLogger(__name__)

GLOBAL_PREFIX = "waitwatch_"
DEFAULT_TTL = 60 * 60
DEFAULT_MAX_ENTRIES = 5000


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryCache:
    """In-process store with per-key expiry and a size cap (oldest evicted first)."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        self.max_entries = max_entries
        self._entries: OrderedDict[str, tuple[Any, Optional[datetime]]] = OrderedDict()

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and _now() >= expires_at:
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: int = DEFAULT_TTL):
        expires_at = _now() + timedelta(seconds=ttl) if ttl and ttl > 0 else None
        self._entries.pop(key, None)
        # copies in and out, like a real cache that serializes values
        self._entries[key] = (copy.deepcopy(value), expires_at)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def delete(self, key: str):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()


class FileCache:
    """JSON file store, so a warm cache survives between CLI runs."""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> dict:
        try:
            with open(self.path) as f:
                return json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            return {}

    def _save(self, entries: dict):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(entries, f, indent=2)

    def get(self, key: str) -> Any:
        entry = self._load().get(key)
        if entry is None:
            return None
        expires_at = entry.get("expires_at")
        if expires_at and _now() >= datetime.fromisoformat(expires_at):
            return None
        return entry["value"]

    def set(self, key: str, value: Any, ttl: int = DEFAULT_TTL):
        entries = self._load()
        now = _now()
        # drop anything already expired while we're rewriting the file
        entries = {
            k: v for k, v in entries.items()
            if not v.get("expires_at") or datetime.fromisoformat(v["expires_at"]) > now
        }
        entries[key] = {
            "value": value,
            "expires_at": (now + timedelta(seconds=ttl)).isoformat() if ttl and ttl > 0 else None,
        }
        self._save(entries)

    def delete(self, key: str):
        entries = self._load()
        if entries.pop(key, None) is not None:
            self._save(entries)


TTL = Union[int, Callable[[], Optional[int]], None]


class Cache:
    """
    Park-scoped view over a store.

    Args:
        store: anything with get(key) and set(key, value, ttl)
        prefix: namespace for scoped keys, usually the park name
        default_ttl: seconds used when no TTL (or a falsy one) is given
    """

    def __init__(self, store, prefix: str = "", default_ttl: int = DEFAULT_TTL):
        self.store = store
        self.prefix = f"{prefix}_" if prefix else ""
        self.default_ttl = default_ttl

    def _resolve_ttl(self, ttl: TTL) -> int:
        # callables are only evaluated once the data is known
        if callable(ttl):
            ttl = ttl()
        return ttl or self.default_ttl

    # ── Global scope ───────────────────────────────────────────────────────────

    def get_global(self, key: str) -> Any:
        try:
            return self.store.get(GLOBAL_PREFIX + key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    def set_global(self, key: str, value: Any, ttl: TTL = None) -> bool:
        try:
            self.store.set(GLOBAL_PREFIX + key, value, self._resolve_ttl(ttl))
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False
        return True

    def wrap_global(self, key: str, compute: Callable[[], Any], ttl: TTL = None) -> Any:
        """Like wrap(), but shared by every park using the same store."""
        return self._wrap(key, compute, ttl, self.get_global, self.set_global)

    # ── Park scope ─────────────────────────────────────────────────────────────

    def get(self, key: str) -> Any:
        return self.get_global(self.prefix + key)

    def set(self, key: str, value: Any, ttl: TTL = None) -> bool:
        return self.set_global(self.prefix + key, value, ttl)

    def wrap(self, key: str, compute: Callable[[], Any], ttl: TTL = None) -> Any:
        """
        Return the cached value for key, or compute, cache and return it.

        Exceptions from compute propagate and nothing is cached. ttl may be
        seconds or a zero-argument callable evaluated after compute returns.
        Concurrent misses on the same key each call compute.
        """
        return self._wrap(key, compute, ttl, self.get, self.set)

    def _wrap(self, key, compute, ttl, getter, setter):
        cached = getter(key)
        if cached is not None:
            return cached
        value = compute()
        setter(key, value, ttl)
        return value
