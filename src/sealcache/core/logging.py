# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Structured logging with secret redaction.

Cache call sites attach context through ``extra=``; the formatters pick up
the fields named in :data:`CONTEXT_FIELDS` and emit them alongside the
message.  Internal keys are logged truncated, never the user key.
"""

import json
import logging
import re
import sys
from typing import Any

REDACT_PATTERNS = [
    # 32-byte keys written as hex
    re.compile(r"(\b[0-9a-fA-F]{4})[0-9a-fA-F]{60}\b"),
    re.compile(r"((?:secret_key|secret|cryptokey)['\"]?\s*[=:]\s*['\"]?)[^\s'\",}]+", re.IGNORECASE),
    re.compile(r"(redis://[^:/@\s]*:)[^@\s]+(?=@)"),
]

CONTEXT_FIELDS = ("internal_key", "prefix", "ttl", "cipher", "driver")

INTERNAL_KEY_LOG_LENGTH = 16


def redact_sensitive(text: str) -> str:
    for pattern in REDACT_PATTERNS:
        text = pattern.sub(r"\1[REDACTED]", text)
    return text


def cache_context(**fields: Any) -> dict[str, Any]:
    """Build an ``extra=`` mapping, truncating any internal key."""
    key = fields.get("internal_key")
    if isinstance(key, str):
        fields["internal_key"] = key[:INTERNAL_KEY_LOG_LENGTH]
    return {name: value for name, value in fields.items() if value is not None}


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_sensitive(record.getMessage()),
        }
        for name, value in _context(record).items():
            log_entry[name] = redact_sensitive(str(value)) if isinstance(value, str) else value
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = redact_sensitive(str(record.exc_info[1]))
        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        context = _context(record)
        if context:
            msg += " " + " ".join(f"{name}={value}" for name, value in context.items())
        return redact_sensitive(msg)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install one stderr handler on the ``sealcache`` logger."""
    package_logger = logging.getLogger("sealcache")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    package_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            TextFormatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
    package_logger.addHandler(handler)
