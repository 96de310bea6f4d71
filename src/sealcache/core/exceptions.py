# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for sealcache.

Three families matter to callers:

* :class:`CacheTypeError` -- the input has the wrong shape.  Also a
  :class:`TypeError`.
* :class:`InvalidArgumentError` -- the input has the right shape but an
  unacceptable value.  Also a :class:`ValueError`.
* :class:`SetupError` -- the deployment itself is broken (bad config file,
  no usable cipher, nonce fault).  Never recoverable at call sites.

Decryption failures are *not* raised across the cache boundary; they are
reported through :class:`~sealcache.cache.crypto.DecryptResult` and surface
as a cache miss.
"""


class SealCacheError(Exception):
    """Base exception for all sealcache errors."""


class CacheTypeError(SealCacheError, TypeError):
    """A key, TTL, or batch argument has an unsupported type."""


class InvalidArgumentError(SealCacheError, ValueError):
    """An argument has an acceptable type but an invalid value."""


class InvalidKeyError(InvalidArgumentError):
    """A cache key is empty, too long, or contains reserved characters."""


class InvalidTtlError(InvalidArgumentError):
    """A TTL is negative, in the past, or cannot be parsed."""


class InvalidSecretKeyError(InvalidArgumentError):
    """The secret key is not 32 bytes or is obviously weak."""


class InvalidConfigError(InvalidArgumentError):
    """A configuration value (salt, prefix) is out of range."""


class SerializationError(InvalidArgumentError):
    """A value could not be serialized or deserialized."""


class SetupError(SealCacheError, RuntimeError):
    """The cache cannot operate safely with the current setup."""


class ConfigurationError(SetupError):
    """A configuration file is missing, unreadable, or malformed."""


class CipherUnavailableError(SetupError):
    """No supported AEAD cipher is available, or the key self-test failed."""


class NonceError(SetupError):
    """The nonce counter failed to advance."""


class DecryptError(SealCacheError):
    """An envelope could not be opened.

    Carried inside a failed :class:`~sealcache.cache.crypto.DecryptResult`.
    """
