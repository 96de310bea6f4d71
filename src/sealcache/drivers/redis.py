# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Redis storage driver using the synchronous ``redis`` client.

This driver is **optional** -- if the ``redis`` package is not installed
the module can still be imported but :class:`RedisDriver` will raise a
clear error at instantiation time.

Redis stores bytes, so every payload is framed with a one-byte tag:

* ``0x00`` -- a raw value, serialized with the driver's serializer;
* ``0x01`` -- an :class:`~sealcache.cache.crypto.Envelope` in wire form.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sealcache.cache.crypto import Envelope
from sealcache.cache.serialization import JsonSerializer, Serializer
from sealcache.core.exceptions import SerializationError, SetupError

if TYPE_CHECKING:
    from redis import Redis

logger = logging.getLogger("sealcache.drivers.redis")

_RAW_TAG = b"\x00"
_ENVELOPE_TAG = b"\x01"

try:
    import redis

    _REDIS_AVAILABLE = True
except ImportError:  # pragma: no cover
    redis = None  # type: ignore[assignment]
    _REDIS_AVAILABLE = False


def redis_available() -> bool:
    """Return ``True`` if the ``redis`` package is installed."""
    return _REDIS_AVAILABLE


class RedisDriver:
    """Redis-backed storage driver.

    Args:
        redis_url: Redis connection URL (e.g. ``redis://localhost:6379/0``).
        client: An existing client to use instead of connecting to
            *redis_url*.
        serializer: Serializer for raw (unencrypted) payloads.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        client: Redis | None = None,
        serializer: Serializer | None = None,
    ) -> None:
        if client is None:
            if not _REDIS_AVAILABLE:
                raise SetupError(
                    "The 'redis' package is required for the Redis driver. "
                    "Install it with: pip install 'sealcache[redis]'"
                )
            client = redis.Redis.from_url(redis_url)
        self._client = client
        self._serializer = serializer or JsonSerializer()

    # ------------------------------------------------------------------
    # Framing
    # ------------------------------------------------------------------

    def _encode(self, payload: Any) -> bytes:
        if isinstance(payload, Envelope):
            return _ENVELOPE_TAG + payload.to_bytes()
        return _RAW_TAG + self._serializer.dumps(payload)

    def _decode(self, data: bytes, default: Any) -> Any:
        tag, body = data[:1], data[1:]
        if tag == _ENVELOPE_TAG:
            envelope = Envelope.from_bytes(body)
            return default if envelope is None else envelope
        if tag == _RAW_TAG:
            try:
                return self._serializer.loads(body)
            except SerializationError as exc:
                logger.warning("Discarding unreadable record: %s", exc)
                return default
        logger.warning("Discarding record with unknown framing tag %r", tag)
        return default

    # ------------------------------------------------------------------
    # StorageDriver interface
    # ------------------------------------------------------------------

    def fetch(self, key: str, default: Any = None) -> Any:
        try:
            data = self._client.get(key)
        except redis.RedisError as exc:
            logger.warning("Redis GET failed for %s: %s", key[:12], exc)
            return default
        if data is None:
            return default
        return self._decode(bytes(data), default)

    def store(self, key: str, payload: Any, ttl: int) -> bool:
        data = self._encode(payload)
        try:
            if ttl > 0:
                result = self._client.set(key, data, ex=ttl)
            else:
                result = self._client.set(key, data)
        except redis.RedisError as exc:
            logger.warning("Redis SET failed for %s: %s", key[:12], exc)
            return False
        return bool(result)

    def delete(self, key: str) -> bool:
        try:
            self._client.delete(key)
        except redis.RedisError as exc:
            logger.warning("Redis DEL failed for %s: %s", key[:12], exc)
            return False
        return True

    def has(self, key: str) -> bool:
        try:
            return bool(self._client.exists(key))
        except redis.RedisError as exc:
            logger.warning("Redis EXISTS failed for %s: %s", key[:12], exc)
            return False

    def clear(self, prefix: str) -> bool:
        """Delete all keys under *prefix*.

        Uses SCAN to avoid blocking Redis with a KEYS command.
        """
        count = 0
        try:
            for key in self._client.scan_iter(match=f"{prefix}*"):
                self._client.delete(key)
                count += 1
        except redis.RedisError as exc:
            logger.warning("Redis clear of %s* failed after %d keys: %s", prefix, count, exc)
            return False
        logger.info("Cleared %d keys under %s", count, prefix)
        return True

    def clear_all(self) -> bool:
        try:
            return bool(self._client.flushdb())
        except redis.RedisError as exc:
            logger.warning("Redis FLUSHDB failed: %s", exc)
            return False

    def close(self) -> None:
        self._client.close()
