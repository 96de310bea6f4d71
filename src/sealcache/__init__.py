# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""sealcache - Key-normalizing, optionally encrypting cache facade."""

__version__ = "0.1.0"

from sealcache.cache.facade import CacheStats, SealedCache
from sealcache.core.config import CacheConfiguration, Settings, load_config_file
from sealcache.core.exceptions import (
    CacheTypeError,
    InvalidArgumentError,
    SealCacheError,
    SetupError,
)
from sealcache.drivers.memory import MemoryDriver

__all__ = [
    "CacheConfiguration",
    "CacheStats",
    "CacheTypeError",
    "InvalidArgumentError",
    "MemoryDriver",
    "SealCacheError",
    "SealedCache",
    "SetupError",
    "Settings",
    "__version__",
    "load_config_file",
]
