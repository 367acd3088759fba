"""Process-wide response cache with per-entry TTL and LRU eviction.

One ``CacheStore`` is built at application startup and injected into the
orchestrator and routes. Entries are written once and copied on both write
and read, so callers never share mutable payloads across requests.
"""

from __future__ import annotations

import copy
import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

from newsfuse.services import logger as log_service

CACHE_KEY_VERSION = 1


@dataclass(slots=True)
class CacheEntry:
    key: str
    payload: Any
    created_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.created_at >= self.ttl


def make_cache_key(query: str, **filters: Any) -> str:
    """Stable hash of the normalized query plus any non-empty filters."""
    normalized = " ".join((query or "").lower().split())
    parts = [f"v{CACHE_KEY_VERSION}", normalized]
    for name in sorted(filters):
        value = filters[name]
        if value is None or value == "":
            continue
        if isinstance(value, str):
            value = " ".join(value.lower().split())
        parts.append(f"{name}={value}")
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


class CacheStore:
    """Bounded TTL + LRU mapping, safe under concurrent get/put."""

    def __init__(
        self,
        capacity: int = 256,
        default_ttl: float = 600.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                log_service.log_cache_event("get", key, hit=False)
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                log_service.log_cache_event("get", key, hit=False, expired=True)
                return None
            self._entries.move_to_end(key)
            payload = copy.deepcopy(entry.payload)
        log_service.log_cache_event("get", key, hit=True)
        return payload

    def put(self, key: str, payload: Any, ttl: float | None = None) -> None:
        effective_ttl = self.default_ttl if ttl is None else float(ttl)
        stored = copy.deepcopy(payload)
        with self._lock:
            now = self._clock()
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.capacity:
                self._purge_expired(now)
                while len(self._entries) >= self.capacity:
                    self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(
                key=key,
                payload=stored,
                created_at=now,
                ttl=effective_ttl,
            )
        log_service.log_cache_event("put", key, ttl=effective_ttl)

    def _purge_expired(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        """Resident keys, least recently used first."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
