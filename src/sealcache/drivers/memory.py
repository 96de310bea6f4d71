# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-memory storage driver with TTL expiry.

This is the default driver and requires no external services.  Records
live in a plain ``dict`` guarded by a lock; each keeps the TTL it was
stored with and an expiry deadline on the monotonic clock.  Expired
records are dropped lazily when touched.
"""

from __future__ import annotations

import threading
import time
from typing import Any


class _Entry:
    """A stored payload with its TTL and optional expiry timestamp."""

    __slots__ = ("expires_at", "ttl", "value")

    def __init__(self, value: Any, ttl: int, expires_at: float | None) -> None:
        self.value = value
        self.ttl = ttl
        self.expires_at = expires_at

    def is_expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() > self.expires_at


class MemoryDriver:
    """Process-local storage driver."""

    def __init__(self) -> None:
        self._store: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # StorageDriver interface
    # ------------------------------------------------------------------

    def fetch(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._live_entry(key)
            return default if entry is None else entry.value

    def store(self, key: str, payload: Any, ttl: int) -> bool:
        expires_at = (time.monotonic() + ttl) if ttl > 0 else None
        with self._lock:
            self._store[key] = _Entry(value=payload, ttl=ttl, expires_at=expires_at)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            self._store.pop(key, None)
        return True

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def clear(self, prefix: str) -> bool:
        with self._lock:
            for key in [k for k in self._store if k.startswith(prefix)]:
                del self._store[key]
        return True

    def clear_all(self) -> bool:
        with self._lock:
            self._store.clear()
        return True

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def record(self, key: str) -> tuple[Any, int] | None:
        """Return ``(payload, ttl)`` for a live internal key, or ``None``."""
        with self._lock:
            entry = self._live_entry(key)
            return None if entry is None else (entry.value, entry.ttl)

    def keys(self) -> list[str]:
        """Return the internal keys of all live records."""
        with self._lock:
            self._prune_expired()
            return list(self._store)

    def __len__(self) -> int:
        with self._lock:
            self._prune_expired()
            return len(self._store)

    # ------------------------------------------------------------------
    # Internal helpers (call with the lock held)
    # ------------------------------------------------------------------

    def _live_entry(self, key: str) -> _Entry | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            del self._store[key]
            return None
        return entry

    def _prune_expired(self) -> None:
        expired_keys = [k for k, v in self._store.items() if v.is_expired()]
        for k in expired_keys:
            del self._store[k]
