# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

import pytest

from sealcache.cache.facade import SealedCache
from sealcache.core.config import CacheConfiguration
from sealcache.drivers.memory import MemoryDriver

SECRET_KEY_HEX = "c2060408cf4602ec2013c6aa77654b6ed1ad41cd0fcdce97ab067f4e971a7605"


@pytest.fixture
def secret_key_hex() -> str:
    return SECRET_KEY_HEX


@pytest.fixture
def memory_driver() -> MemoryDriver:
    return MemoryDriver()


@pytest.fixture
def cache(memory_driver: MemoryDriver) -> SealedCache:
    """A plaintext cache over a fresh memory driver."""
    return SealedCache(driver=memory_driver)


@pytest.fixture
def sealed_cache(memory_driver: MemoryDriver) -> SealedCache:
    """An encrypting cache over a fresh memory driver."""
    return SealedCache(driver=memory_driver, config=CacheConfiguration(secret_key=SECRET_KEY_HEX))


@pytest.fixture(autouse=True)
def _clear_cache():
    """Reset the process-wide cache singleton between tests."""
    from sealcache.cache.manager import reset_cache

    reset_cache()
    yield
    reset_cache()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep SEALCACHE_* variables and any stray .env out of settings."""
    import os

    for name in list(os.environ):
        if name.startswith("SEALCACHE_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
