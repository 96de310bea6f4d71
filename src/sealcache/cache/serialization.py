# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Value serialization used before encryption and by byte-oriented drivers."""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

from sealcache.core.exceptions import SerializationError


@runtime_checkable
class Serializer(Protocol):
    """Turns cache values into bytes and back."""

    def dumps(self, value: Any) -> bytes:
        """Serialize *value*; raise :class:`SerializationError` on failure."""
        ...

    def loads(self, data: bytes) -> Any:
        """Deserialize *data*; raise :class:`SerializationError` on failure."""
        ...


class JsonSerializer:
    """Compact UTF-8 JSON.

    Handles ``str``, ``int``, ``float``, ``bool``, ``None`` and nested
    lists/dicts.  Tuples come back as lists; dict keys come back as strings.
    """

    def dumps(self, value: Any) -> bytes:
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Serialization failed with following message: {exc}") from exc

    def loads(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SerializationError(f"Deserialization failed with following message: {exc}") from exc
