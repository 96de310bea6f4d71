# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables, .env and JSON files.

Two layers live here:

* :class:`Settings` -- process-level settings read by ``pydantic-settings``
  from ``SEALCACHE_*`` environment variables or a ``.env`` file.
* :class:`CacheConfiguration` -- the validated, immutable configuration a
  single :class:`~sealcache.cache.facade.SealedCache` runs with.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sealcache.core.constants import (
    DEFAULT_PREFIX,
    DEFAULT_SALT,
    DEFAULT_TTL,
    KEY_SEPARATOR,
    MAX_PREFIX_LENGTH,
    MIN_PREFIX_LENGTH,
    MIN_SALT_LENGTH,
    CipherChoice,
    DriverName,
)
from sealcache.core.exceptions import (
    ConfigurationError,
    InvalidConfigError,
    InvalidTtlError,
    SealCacheError,
)

logger = logging.getLogger("sealcache.core.config")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SEALCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Key derivation
    salt: str = DEFAULT_SALT
    key_prefix: str = DEFAULT_PREFIX
    strict_typing: bool = False

    # Expiry
    default_ttl: int = DEFAULT_TTL

    # Encryption
    secret_key: str = ""
    cipher: CipherChoice = CipherChoice.AUTO

    # Driver
    driver: DriverName = DriverName.MEMORY
    redis_url: str = "redis://localhost:6379/0"

    # Optional JSON file overriding the key/crypto fields above
    config_file: Path | None = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("cipher", mode="before")
    @classmethod
    def _parse_cipher(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("driver", mode="before")
    @classmethod
    def _parse_driver(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    def to_cache_config(self) -> CacheConfiguration:
        """Build the per-cache configuration, applying ``config_file`` last."""
        if self.config_file is not None:
            return load_config_file(self.config_file, base=self)
        return CacheConfiguration(
            salt=self.salt,
            key_prefix=self.key_prefix,
            default_ttl=self.default_ttl,
            strict_typing=self.strict_typing,
            secret_key=self.secret_key or None,
            cipher=self.cipher,
        )


def get_settings() -> Settings:
    return Settings()


# ---------------------------------------------------------------------------
# Per-cache configuration
# ---------------------------------------------------------------------------


def _translate_validation_error(exc: ValidationError) -> SealCacheError:
    """Map the first pydantic error onto the sealcache exception hierarchy."""
    error = exc.errors()[0]
    original = error.get("ctx", {}).get("error")
    if isinstance(original, SealCacheError):
        return original
    field_name = ".".join(str(part) for part in error["loc"]) or "configuration"
    if field_name == "default_ttl" and error["type"] == "greater_than_equal":
        return InvalidTtlError(
            f"The default TTL can not be a negative number. You supplied {error['input']}."
        )
    return InvalidConfigError(f"Invalid {field_name}: {error['msg']}")


class CacheConfiguration(BaseModel):
    """Validated configuration for one cache instance.

    Args:
        salt: Salt mixed into every internal key (at least 8 characters).
        key_prefix: Namespace for internal keys; trimmed and upper-cased.
        default_ttl: Seconds-to-live used when ``set`` receives no TTL.
            ``0`` means "as long as the driver allows".
        strict_typing: When ``True``, keys must be ``str`` and TTLs must not
            be recast from floats or numeric strings.
        secret_key: Optional 32-byte key (raw bytes or 64 hex digits).  When
            present, values are encrypted and keys are derived with a keyed
            hash.
        cipher: Pin an AEAD cipher, or ``auto`` to probe once per process.

    Validation failures raise the matching :class:`SealCacheError` rather
    than a pydantic ``ValidationError``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    salt: str = DEFAULT_SALT
    key_prefix: str = DEFAULT_PREFIX
    default_ttl: int = Field(default=DEFAULT_TTL, ge=0, strict=True)
    strict_typing: bool = False
    secret_key: bytes | None = Field(default=None, repr=False)
    cipher: CipherChoice = CipherChoice.AUTO

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise _translate_validation_error(exc) from None

    @field_validator("salt", mode="before")
    @classmethod
    def _check_salt(cls, v: object) -> str:
        if not isinstance(v, str):
            raise InvalidConfigError(f"The salt must be a string, not {type(v).__name__}.")
        salt = v.strip()
        if len(salt) < MIN_SALT_LENGTH:
            supplied = "an empty salt" if not salt else f"a {len(salt)} character salt"
            raise InvalidConfigError(
                f"The internal key salt must be at least {MIN_SALT_LENGTH} characters. "
                f"You supplied {supplied}."
            )
        return salt

    @field_validator("key_prefix", mode="before")
    @classmethod
    def _check_prefix(cls, v: object) -> str:
        if not isinstance(v, str):
            raise InvalidConfigError(f"The key prefix must be a string, not {type(v).__name__}.")
        prefix = v.strip().upper()
        if len(prefix) < MIN_PREFIX_LENGTH:
            raise InvalidConfigError(
                f"The key prefix must be at least {MIN_PREFIX_LENGTH} characters. "
                f"You supplied {prefix!r}."
            )
        if len(prefix) > MAX_PREFIX_LENGTH:
            raise InvalidConfigError(
                f"The key prefix must not have more than {MAX_PREFIX_LENGTH} characters. "
                f"You supplied a {len(prefix)} character prefix."
            )
        if not (prefix.isascii() and prefix.isalnum()):
            raise InvalidConfigError(
                f"The key prefix can only contain A-Z letters and 0-9 numbers. You supplied {prefix!r}."
            )
        return prefix

    @field_validator("cipher", mode="before")
    @classmethod
    def _parse_cipher(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("secret_key", mode="before")
    @classmethod
    def _parse_secret(cls, v: object) -> bytes | None:
        from sealcache.cache.crypto import parse_secret_key

        if v is None:
            return None
        return parse_secret_key(v)  # type: ignore[arg-type]

    @property
    def namespace(self) -> str:
        """The prefix with its separator, as it appears in internal keys."""
        return f"{self.key_prefix}{KEY_SEPARATOR}"


# ---------------------------------------------------------------------------
# JSON configuration files
# ---------------------------------------------------------------------------


_FILE_FIELDS = {
    "salt": "salt",
    "prefix": "key_prefix",
    "default_ttl": "default_ttl",
    "strict": "strict_typing",
    "secret": "secret_key",
    "cipher": "cipher",
}


def read_config_file(path: Path | str) -> dict[str, Any]:
    """Read a JSON configuration object from *path*.

    Raises:
        ConfigurationError: If the file is missing, unreadable, or is not a
            JSON object.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"The specified configuration file {path} could not be found.")
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(
            f"The specified configuration file {path} could not be read."
        ) from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"The file {path} did not contain valid JSON data.") from exc
    if not isinstance(data, dict) or not data:
        raise ConfigurationError(f"The file {path} did not contain valid JSON data.")
    return data


def load_config_file(path: Path | str, base: Settings | None = None) -> CacheConfiguration:
    """Build a :class:`CacheConfiguration` from a JSON file.

    Fields absent from the file fall back to *base* (or the defaults).
    Unknown fields are ignored with a warning.
    """
    data = read_config_file(path)
    values: dict[str, Any] = {}
    if base is not None:
        values = {
            "salt": base.salt,
            "key_prefix": base.key_prefix,
            "default_ttl": base.default_ttl,
            "strict_typing": base.strict_typing,
            "secret_key": base.secret_key or None,
            "cipher": base.cipher,
        }
    for name, value in data.items():
        target = _FILE_FIELDS.get(name)
        if target is None:
            logger.warning("Ignoring unknown configuration field %r in %s", name, path)
            continue
        values[target] = value
    return CacheConfiguration(**values)
