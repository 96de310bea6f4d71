# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Key derivation, TTL normalization, encryption and the cache facade."""

from sealcache.cache.facade import SealedCache
from sealcache.cache.manager import get_cache, reset_cache

__all__ = ["SealedCache", "get_cache", "reset_cache"]
