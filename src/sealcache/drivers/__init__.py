# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Storage drivers."""

from sealcache.drivers.base import StorageDriver
from sealcache.drivers.memory import MemoryDriver

__all__ = ["MemoryDriver", "StorageDriver"]
