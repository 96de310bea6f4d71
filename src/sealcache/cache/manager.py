# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Process-wide cache built from application settings.

Library users construct :class:`~sealcache.cache.facade.SealedCache`
directly.  The CLI and anything else configured through ``SEALCACHE_*``
environment variables share the singleton returned by :func:`get_cache`.
"""

from __future__ import annotations

import logging

from sealcache.cache.facade import SealedCache
from sealcache.core.config import Settings, get_settings
from sealcache.core.constants import DriverName
from sealcache.core.logging import cache_context
from sealcache.drivers.base import StorageDriver
from sealcache.drivers.memory import MemoryDriver

logger = logging.getLogger("sealcache.cache.manager")

# Module-level singleton
_cache: SealedCache | None = None


def _create_driver_from_settings(settings: Settings | None = None) -> StorageDriver:
    """Instantiate the storage driver named by application settings."""
    settings = settings or get_settings()

    if settings.driver == DriverName.REDIS:
        from sealcache.drivers.redis import RedisDriver, redis_available

        if not redis_available():
            logger.warning(
                "Redis driver requested but redis package not installed. "
                "Falling back to in-memory driver."
            )
            return MemoryDriver()
        return RedisDriver(redis_url=settings.redis_url)

    return MemoryDriver()


def get_cache() -> SealedCache:
    """Return the module-level :class:`SealedCache` singleton.

    Creates a new instance on first call using application settings.
    """
    global _cache
    if _cache is None:
        settings = get_settings()
        _cache = SealedCache(
            driver=_create_driver_from_settings(settings),
            config=settings.to_cache_config(),
        )
        logger.info(
            "Cache ready (driver=%s, encryption=%s)",
            settings.driver,
            "on" if _cache.encryption_enabled else "off",
            extra=cache_context(driver=settings.driver, prefix=_cache.config.namespace),
        )
    return _cache


def reset_cache() -> None:
    """Reset the singleton (useful for testing)."""
    global _cache
    _cache = None
