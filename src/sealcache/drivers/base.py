# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Storage driver capability.

A driver physically holds cache records.  It receives internal keys that
have already been derived and validated, payloads that are either raw
values or :class:`~sealcache.cache.crypto.Envelope` instances, and TTLs
already normalized to seconds (``0`` meaning "as long as possible").

Drivers own record lifetime: expiry, eviction and any retry or timeout
policy for remote stores.  Failures are reported as ``False`` (or a miss
on ``fetch``), never as exceptions.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StorageDriver(Protocol):
    """Protocol every storage driver implements."""

    def fetch(self, key: str, default: Any = None) -> Any:
        """Return the payload stored under *key*, or *default* on a miss."""
        ...

    def store(self, key: str, payload: Any, ttl: int) -> bool:
        """Store *payload* under *key* for *ttl* seconds (``0`` = no expiry)."""
        ...

    def delete(self, key: str) -> bool:
        """Remove *key*.  Deleting a missing key is not a failure."""
        ...

    def has(self, key: str) -> bool:
        """Return ``True`` if *key* holds a live record.

        Advisory only: another caller may set or delete the key immediately
        afterwards.
        """
        ...

    def clear(self, prefix: str) -> bool:
        """Remove every record whose key starts with *prefix*."""
        ...

    def clear_all(self) -> bool:
        """Remove every record regardless of prefix."""
        ...
