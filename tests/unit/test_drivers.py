# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the memory storage driver and driver selection."""

from __future__ import annotations

import time
from unittest.mock import patch

from sealcache.cache.crypto import Envelope
from sealcache.cache.manager import _create_driver_from_settings, get_cache, reset_cache
from sealcache.core.config import Settings
from sealcache.drivers.base import StorageDriver
from sealcache.drivers.memory import MemoryDriver

# ---------------------------------------------------------------------------
# MemoryDriver
# ---------------------------------------------------------------------------


class TestMemoryDriver:
    def test_store_fetch(self, memory_driver: MemoryDriver) -> None:
        assert memory_driver.store("k1", "v1", 0) is True
        assert memory_driver.fetch("k1") == "v1"

    def test_fetch_missing(self, memory_driver: MemoryDriver) -> None:
        assert memory_driver.fetch("nonexistent") is None
        assert memory_driver.fetch("nonexistent", "d") == "d"

    def test_payload_kept_as_is(self, memory_driver: MemoryDriver) -> None:
        env = Envelope(nonce=b"n" * 12, ciphertext=b"c" * 16)
        memory_driver.store("k", env, 10)
        assert memory_driver.fetch("k") is env
        assert memory_driver.record("k") == (env, 10)

    def test_has(self, memory_driver: MemoryDriver) -> None:
        assert memory_driver.has("k1") is False
        memory_driver.store("k1", "v1", 0)
        assert memory_driver.has("k1") is True

    def test_delete_missing_is_not_failure(self, memory_driver: MemoryDriver) -> None:
        memory_driver.store("k1", "v1", 0)
        assert memory_driver.delete("k1") is True
        assert memory_driver.delete("k1") is True
        assert memory_driver.fetch("k1") is None

    def test_clear_prefix(self, memory_driver: MemoryDriver) -> None:
        memory_driver.store("ONE_a", 1, 0)
        memory_driver.store("ONE_b", 2, 0)
        memory_driver.store("TWO_a", 3, 0)
        assert memory_driver.clear("ONE_") is True
        assert memory_driver.keys() == ["TWO_a"]

    def test_clear_all(self, memory_driver: MemoryDriver) -> None:
        memory_driver.store("ONE_a", 1, 0)
        memory_driver.store("TWO_a", 3, 0)
        assert memory_driver.clear_all() is True
        assert len(memory_driver) == 0

    def test_ttl_expiry(self, memory_driver: MemoryDriver) -> None:
        memory_driver.store("k1", "v1", 1)
        assert memory_driver.fetch("k1") == "v1"

        entry = memory_driver._store["k1"]
        entry.expires_at = time.monotonic() - 1

        assert memory_driver.fetch("k1") is None
        assert memory_driver.has("k1") is False

    def test_expired_entries_not_counted(self, memory_driver: MemoryDriver) -> None:
        memory_driver.store("a", 1, 1)
        memory_driver.store("b", 2, 0)
        memory_driver._store["a"].expires_at = time.monotonic() - 1
        assert len(memory_driver) == 1
        assert memory_driver.keys() == ["b"]

    def test_zero_ttl_means_no_expiry(self, memory_driver: MemoryDriver) -> None:
        memory_driver.store("k1", "v1", 0)
        entry = memory_driver._store["k1"]
        assert entry.expires_at is None
        assert entry.is_expired() is False

    def test_overwrite(self, memory_driver: MemoryDriver) -> None:
        memory_driver.store("k1", "old", 5)
        memory_driver.store("k1", "new", 9)
        assert memory_driver.record("k1") == ("new", 9)

    def test_satisfies_protocol(self, memory_driver: MemoryDriver) -> None:
        assert isinstance(memory_driver, StorageDriver)


# ---------------------------------------------------------------------------
# Driver selection
# ---------------------------------------------------------------------------


class TestDriverSelection:
    def test_memory_by_default(self) -> None:
        assert isinstance(_create_driver_from_settings(Settings()), MemoryDriver)

    def test_graceful_degradation(self) -> None:
        """When the redis driver is requested but not installed, fall back to memory."""
        with patch("sealcache.drivers.redis._REDIS_AVAILABLE", False):
            driver = _create_driver_from_settings(Settings(driver="REDIS"))
        assert isinstance(driver, MemoryDriver)

    def test_get_cache_returns_same_instance(self) -> None:
        reset_cache()
        assert get_cache() is get_cache()

    def test_reset_cache(self) -> None:
        first = get_cache()
        reset_cache()
        assert get_cache() is not first
