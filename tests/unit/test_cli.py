# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Unit tests for the sealcache CLI."""

from __future__ import annotations

import logging
import re

import pytest
from typer.testing import CliRunner

from sealcache.cli.app import app
from sealcache.core.constants import CipherName

runner = CliRunner()

SECRET = "c2060408cf4602ec2013c6aa77654b6ed1ad41cd0fcdce97ab067f4e971a7605"


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop the handler the CLI callback installs on the package logger."""
    yield
    root = logging.getLogger("sealcache")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Top-level commands
# ---------------------------------------------------------------------------


class TestTopLevel:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "Usage" in result.output

    def test_version(self):
        from sealcache import __version__

        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert f"sealcache v{__version__}" in result.output

    def test_keygen(self):
        result = runner.invoke(app, ["keygen"])
        assert result.exit_code == 0
        assert re.fullmatch(r"[0-9a-f]{64}", result.output.strip())

    def test_keygen_is_random(self):
        first = runner.invoke(app, ["keygen"]).output
        second = runner.invoke(app, ["keygen"]).output
        assert first != second

    def test_real_key(self):
        result = runner.invoke(app, ["real-key", "foo"])
        assert result.exit_code == 0
        assert "DEFAULT_b4da43b1052434af" in result.output

    def test_real_key_uses_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SEALCACHE_KEY_PREFIX", "myapp")
        result = runner.invoke(app, ["real-key", "foo"])
        assert "MYAPP_" in result.output

    def test_real_key_invalid(self):
        result = runner.invoke(app, ["real-key", "bad{key}"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_ttl(self):
        result = runner.invoke(app, ["ttl", "+1 week"])
        assert result.exit_code == 0
        assert "604800" in result.output

    def test_ttl_seconds(self):
        result = runner.invoke(app, ["ttl", "27"])
        assert result.exit_code == 0
        assert result.output.strip().endswith("27")

    def test_ttl_in_past(self):
        result = runner.invoke(app, ["ttl", "--", "-1 week"])
        assert result.exit_code == 1
        assert "past" in result.output

    def test_ttl_help_mentions_separator(self):
        result = runner.invoke(app, ["ttl", "--help"])
        assert result.exit_code == 0
        assert "dash" in result.output

    def test_probe(self):
        result = runner.invoke(app, ["probe"])
        assert result.exit_code == 0
        assert any(str(c) in result.output for c in CipherName)

    def test_probe_pinned(self, monkeypatch):
        monkeypatch.setenv("SEALCACHE_CIPHER", "chacha20-poly1305")
        result = runner.invoke(app, ["probe"])
        assert "chacha20-poly1305" in result.output


# ---------------------------------------------------------------------------
# cache subcommands
# ---------------------------------------------------------------------------


class TestCacheCommands:
    def test_set_get(self):
        result = runner.invoke(app, ["cache", "set", "foo", '{"a": 1}', "--ttl", "60"])
        assert result.exit_code == 0
        assert "Stored 'foo'" in result.output

        result = runner.invoke(app, ["cache", "get", "foo"])
        assert result.exit_code == 0
        assert '{"a": 1}' in result.output

    def test_set_warns_memory_driver_is_per_process(self):
        result = runner.invoke(app, ["cache", "set", "foo", "1"])
        assert result.exit_code == 0
        assert "SEALCACHE_DRIVER=redis" in result.output

    def test_cache_help_mentions_persistent_driver(self):
        result = runner.invoke(app, ["cache", "--help"])
        assert result.exit_code == 0
        assert "SEALCACHE_DRIVER=redis" in result.output

    def test_plain_string_value(self):
        runner.invoke(app, ["cache", "set", "greeting", "hello world"])
        result = runner.invoke(app, ["cache", "get", "greeting"])
        assert '"hello world"' in result.output

    def test_get_miss(self):
        result = runner.invoke(app, ["cache", "get", "missing"])
        assert result.exit_code == 1

    def test_has(self):
        assert runner.invoke(app, ["cache", "has", "foo"]).exit_code == 1
        runner.invoke(app, ["cache", "set", "foo", "1"])
        result = runner.invoke(app, ["cache", "has", "foo"])
        assert result.exit_code == 0
        assert "yes" in result.output

    def test_delete(self):
        runner.invoke(app, ["cache", "set", "foo", "1"])
        result = runner.invoke(app, ["cache", "delete", "foo"])
        assert result.exit_code == 0
        assert runner.invoke(app, ["cache", "get", "foo"]).exit_code == 1

    def test_invalid_key(self):
        result = runner.invoke(app, ["cache", "set", "bad{key}", "1"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_ttl(self):
        result = runner.invoke(app, ["cache", "set", "foo", "1", "--ttl", "1984-02-21"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_clear(self):
        runner.invoke(app, ["cache", "set", "foo", "1"])
        result = runner.invoke(app, ["cache", "clear"])
        assert result.exit_code == 0
        assert "Cache cleared (DEFAULT)" in result.output
        assert runner.invoke(app, ["cache", "get", "foo"]).exit_code == 1

    def test_clear_all(self):
        result = runner.invoke(app, ["cache", "clear", "--all"])
        assert result.exit_code == 0
        assert "all prefixes" in result.output

    def test_stats(self):
        runner.invoke(app, ["cache", "set", "foo", "1"])
        runner.invoke(app, ["cache", "get", "foo"])
        runner.invoke(app, ["cache", "get", "missing"])
        result = runner.invoke(app, ["cache", "stats"])
        assert result.exit_code == 0
        assert "Cache Statistics" in result.output
        assert "Hit Rate" in result.output
        assert "50.00%" in result.output

    def test_encrypted_roundtrip(self, monkeypatch):
        monkeypatch.setenv("SEALCACHE_SECRET_KEY", SECRET)
        runner.invoke(app, ["cache", "set", "foo", "[1, 2, 3]"])
        result = runner.invoke(app, ["cache", "get", "foo"])
        assert result.exit_code == 0
        assert "[1, 2, 3]" in result.output

        from sealcache.cache.manager import get_cache

        assert get_cache().encryption_enabled is True
