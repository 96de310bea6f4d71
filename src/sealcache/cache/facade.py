# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""The cache facade.

:class:`SealedCache` is the primary public interface.  It validates keys
and TTLs, derives internal keys, seals values when a secret key is
configured, and delegates storage to a :class:`~sealcache.drivers.base.StorageDriver`.

Input errors (:class:`~sealcache.core.exceptions.CacheTypeError`,
:class:`~sealcache.core.exceptions.InvalidArgumentError`) are always raised,
even while the cache is disabled.  Driver failures come back as ``False``.
Corrupt or foreign ciphertext reads as a miss.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

from sealcache.cache.crypto import CryptoEnvelope
from sealcache.cache.keys import coerce_key, derive_key
from sealcache.cache.serialization import Serializer
from sealcache.cache.ttl import coerce_default_ttl, coerce_ttl, normalize
from sealcache.core.config import CacheConfiguration
from sealcache.core.constants import CipherName
from sealcache.core.exceptions import CacheTypeError, SetupError
from sealcache.core.logging import cache_context
from sealcache.drivers.base import StorageDriver

logger = logging.getLogger("sealcache.cache.facade")

_MISS = object()


class CacheStats:
    """Simple hit/miss counter."""

    __slots__ = ("decrypt_failures", "hits", "misses", "write_failures", "writes")

    def __init__(self) -> None:
        self.hits: int = 0
        self.misses: int = 0
        self.writes: int = 0
        self.write_failures: int = 0
        self.decrypt_failures: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total": self.total,
            "hit_rate": round(self.hit_rate, 4),
            "writes": self.writes,
            "write_failures": self.write_failures,
            "decrypt_failures": self.decrypt_failures,
        }


class SealedCache:
    """Key-normalizing, optionally encrypting cache over a storage driver.

    Args:
        driver: The storage driver.  ``None`` leaves the cache disabled:
            reads return the default and writes return ``False``.
        config: Cache configuration; defaults apply when omitted.
        serializer: Serializer used for encrypted values.
    """

    def __init__(
        self,
        driver: StorageDriver | None = None,
        config: CacheConfiguration | None = None,
        serializer: Serializer | None = None,
    ) -> None:
        self._driver = driver
        self._config = config or CacheConfiguration()
        self._default_ttl = self._config.default_ttl
        self._stats = CacheStats()
        self._switched_off = False
        self._crypto: CryptoEnvelope | None = None
        if isinstance(self._config.secret_key, bytes):
            self._crypto = CryptoEnvelope(cipher=self._config.cipher, serializer=serializer)
            self._crypto.install_key(self._config.secret_key)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> CacheConfiguration:
        return self._config

    @property
    def driver(self) -> StorageDriver | None:
        return self._driver

    @property
    def stats(self) -> CacheStats:
        """Return the hit/miss statistics object."""
        return self._stats

    @property
    def enabled(self) -> bool:
        """``True`` when a driver is attached and the cache is switched on."""
        return self._driver is not None and not self._switched_off

    @property
    def encryption_enabled(self) -> bool:
        return self._crypto is not None and self._crypto.enabled

    @property
    def cipher(self) -> CipherName | None:
        return self._crypto.cipher if self._crypto is not None else None

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    def enable(self) -> None:
        self._switched_off = False

    def disable(self) -> None:
        self._switched_off = True

    def set_default_ttl(self, ttl: Any) -> None:
        """Change the TTL used when ``set`` receives none.

        Accepts seconds or an interval (and, in non-strict mode, numeric
        strings and floats).
        """
        self._default_ttl = coerce_default_ttl(ttl, strict=self._config.strict_typing)

    # ------------------------------------------------------------------
    # Key and TTL handling
    # ------------------------------------------------------------------

    def real_key(self, key: Any) -> str:
        """Return the internal key the driver sees for user key *key*."""
        return derive_key(coerce_key(key, strict=self._config.strict_typing), self._config)

    def _ttl_seconds(self, ttl: Any) -> int:
        spec = coerce_ttl(ttl, strict=self._config.strict_typing)
        return normalize(spec, int(time.time()), self._default_ttl)

    def _batch_keys(self, keys: Any) -> list[Any]:
        if isinstance(keys, (str, bytes)) or not isinstance(keys, Iterable):
            raise CacheTypeError(
                "Caching functions for multiple cache operations require an iterable argument. "
                f"You supplied type {type(keys).__name__}."
            )
        keys = list(keys)
        for key in keys:
            if not isinstance(key, str):
                raise CacheTypeError(
                    f"The key in an iterable argument must be a string. You supplied type {type(key).__name__}."
                )
        return keys

    def _batch_pairs(self, pairs: Any) -> list[tuple[str, Any]]:
        if isinstance(pairs, Mapping):
            items = list(pairs.items())
        elif isinstance(pairs, (str, bytes)) or not isinstance(pairs, Iterable):
            raise CacheTypeError(
                "Caching functions for multiple cache operations require an iterable argument. "
                f"You supplied type {type(pairs).__name__}."
            )
        else:
            items = []
            for pair in pairs:
                if not isinstance(pair, tuple) or len(pair) != 2:
                    raise CacheTypeError("Each item in an iterable of pairs must be a (key, value) tuple.")
                items.append(pair)
        for key, _ in items:
            if not isinstance(key, str):
                raise CacheTypeError(
                    f"The key in an iterable argument must be a string. You supplied type {type(key).__name__}."
                )
        return items

    # ------------------------------------------------------------------
    # Driver round-trips
    # ------------------------------------------------------------------

    def _require_driver(self) -> StorageDriver:
        if self._driver is None:
            raise SetupError("No storage driver is configured for this cache.")
        return self._driver

    def _fetch(self, real_key: str, default: Any) -> Any:
        driver = self._require_driver()
        payload = driver.fetch(real_key, _MISS)
        if payload is _MISS:
            self._stats.misses += 1
            logger.debug("Cache MISS", extra=cache_context(internal_key=real_key))
            return default
        if self._crypto is not None:
            result = self._crypto.unseal(payload)
            if not result.ok:
                self._stats.decrypt_failures += 1
                self._stats.misses += 1
                logger.warning(
                    "Treating undecryptable record as a miss: %s",
                    result.error,
                    extra=cache_context(internal_key=real_key, cipher=self.cipher),
                )
                return default
            payload = result.value
        self._stats.hits += 1
        logger.debug("Cache HIT", extra=cache_context(internal_key=real_key))
        return payload

    def _store(self, real_key: str, value: Any, seconds: int) -> bool:
        driver = self._require_driver()
        payload = self._crypto.seal(value) if self._crypto is not None else value
        stored = driver.store(real_key, payload, seconds)
        if stored:
            self._stats.writes += 1
            logger.debug("Cached value", extra=cache_context(internal_key=real_key, ttl=seconds))
        else:
            self._stats.write_failures += 1
            logger.warning(
                "Driver refused to store record",
                extra=cache_context(internal_key=real_key, ttl=seconds),
            )
        return stored

    # ------------------------------------------------------------------
    # Single-key operations
    # ------------------------------------------------------------------

    def get(self, key: Any, default: Any = None) -> Any:
        """Fetch a value, or *default* on a miss or when disabled."""
        real_key = self.real_key(key)
        if not self.enabled:
            return default
        return self._fetch(real_key, default)

    def set(self, key: Any, value: Any, ttl: Any = None) -> bool:
        """Store *value* under *key*.

        Args:
            key: The user key.
            value: Any value the serializer accepts (when encrypting) or the
                driver accepts (when not).
            ttl: ``None`` for the default TTL, seconds or a UNIX timestamp,
                a date string such as ``"+1 week"`` or ``"2030-01-01"``, or a
                ``timedelta``/``relativedelta``.

        Returns:
            ``True`` on success, ``False`` when disabled or the driver failed.
        """
        real_key = self.real_key(key)
        seconds = self._ttl_seconds(ttl)
        if not self.enabled:
            return False
        return self._store(real_key, value, seconds)

    def delete(self, key: Any) -> bool:
        """Remove *key*.  Returns ``False`` when disabled or on driver failure."""
        real_key = self.real_key(key)
        if not self.enabled:
            return False
        driver = self._require_driver()
        return driver.delete(real_key)

    def has(self, key: Any) -> bool:
        """Return whether *key* is present.

        Only use this for warming or diagnostics.  Another caller can set or
        delete the key right after this returns, so never use it to guard a
        get-or-create.
        """
        real_key = self.real_key(key)
        if not self.enabled:
            return False
        driver = self._require_driver()
        return driver.has(real_key)

    # ------------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------------

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """Fetch several keys; missing ones map to *default*."""
        user_keys = self._batch_keys(keys)
        real_keys = [self.real_key(key) for key in user_keys]
        if not self.enabled:
            return {key: default for key in user_keys}
        return {
            user_key: self._fetch(real_key, default)
            for user_key, real_key in zip(user_keys, real_keys)
        }

    def set_multiple(
        self,
        pairs: Mapping[str, Any] | Iterable[tuple[str, Any]],
        ttl: Any = None,
    ) -> bool:
        """Store several values with one TTL.

        Every key is validated first.  Stores then run in order and stop at
        the first failure, so a ``False`` result may leave earlier pairs
        stored.
        """
        items = self._batch_pairs(pairs)
        prepared = {self.real_key(key): value for key, value in items}
        seconds = self._ttl_seconds(ttl)
        if not self.enabled:
            return False
        for real_key, value in prepared.items():
            if not self._store(real_key, value, seconds):
                return False
        return True

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """Delete several keys.  ``False`` if any deletion failed."""
        real_keys = [self.real_key(key) for key in self._batch_keys(keys)]
        if not self.enabled:
            return False
        driver = self._require_driver()
        ok = True
        for real_key in real_keys:
            if not driver.delete(real_key):
                ok = False
        return ok

    # ------------------------------------------------------------------
    # Bulk removal
    # ------------------------------------------------------------------

    def clear(self) -> bool:
        """Remove every record under this cache's key prefix."""
        if not self.enabled:
            return False
        driver = self._require_driver()
        cleared = driver.clear(self._config.namespace)
        logger.info("Cache cleared", extra=cache_context(prefix=self._config.namespace))
        return cleared

    def clear_all(self) -> bool:
        """Remove every record in the driver, whatever its prefix."""
        if not self.enabled:
            return False
        driver = self._require_driver()
        cleared = driver.clear_all()
        logger.info("Cache cleared for all prefixes")
        return cleared
