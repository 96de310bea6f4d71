# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Internal key derivation.

User keys are never handed to the storage driver.  Each one is trimmed,
validated, hashed together with the configured salt, and a fixed window of
the hex digest is appended to the configured namespace::

    DEFAULT_4be1c0a3f7d29e18

Without a secret key the hash is SHA-256 over ``salt + key``.  With a secret
key it is BLAKE2b keyed with the secret over ``key + salt``, so internal keys
cannot be correlated with user keys by anyone who lacks the secret.
"""

from __future__ import annotations

import hashlib

from sealcache.core.config import CacheConfiguration
from sealcache.core.constants import (
    KEYED_HASH_DIGEST_SIZE,
    KEYED_HASH_WINDOW,
    KEYLESS_HASH_WINDOW,
    MAX_KEY_LENGTH,
    RESERVED_KEY_CHARACTERS,
)
from sealcache.core.exceptions import CacheTypeError, InvalidKeyError


def coerce_key(key: object, strict: bool = False) -> str:
    """Return *key* as a string, or raise :class:`CacheTypeError`.

    In non-strict mode integers and floats are recast to strings.  ``None``,
    booleans, containers and arbitrary objects are always rejected.
    """
    if isinstance(key, str):
        return key
    if not strict and isinstance(key, (int, float)) and not isinstance(key, bool):
        return str(key)
    raise CacheTypeError(f"The cache key must be a string. You supplied type {type(key).__name__}.")


def validate_key(key: str) -> str:
    """Trim *key* and check it against the key rules.

    Returns:
        The trimmed key.

    Raises:
        InvalidKeyError: If the key is empty, longer than 255 characters, or
            contains one of ``[]{}()/\\@:``.
    """
    key = key.strip()
    if not key:
        raise InvalidKeyError(
            "The cache key you supplied was an empty string. It must contain at least one character."
        )
    if len(key) > MAX_KEY_LENGTH:
        raise InvalidKeyError(
            f"Cache keys may not be longer than {MAX_KEY_LENGTH} characters. "
            f"Your key is {len(key)} characters long."
        )
    if not RESERVED_KEY_CHARACTERS.isdisjoint(key):
        raise InvalidKeyError(
            f'Cache keys may not contain any of the following characters: "[]{{}}()/\\@:" '
            f"but your key {key!r} does."
        )
    return key


def weak_hash(key: str, salt: str, secret_key: bytes | None = None) -> str:
    """Return the hex window of the key hash used inside internal keys."""
    if secret_key is None:
        digest = hashlib.sha256(f"{salt}{key}".encode()).hexdigest()
        offset, length = KEYLESS_HASH_WINDOW
    else:
        digest = hashlib.blake2b(
            f"{key}{salt}".encode(),
            key=secret_key,
            digest_size=KEYED_HASH_DIGEST_SIZE,
        ).hexdigest()
        offset, length = KEYED_HASH_WINDOW
    return digest[offset : offset + length]


def derive_key(key: str, config: CacheConfiguration) -> str:
    """Turn a user key into the internal key used with the storage driver."""
    key = validate_key(key)
    secret = config.secret_key if isinstance(config.secret_key, bytes) else None
    return f"{config.namespace}{weak_hash(key, config.salt, secret)}"
