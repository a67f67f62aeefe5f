"""Tests for configuration, environment defaults and namespace resolution"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

import pytest

from semlock.core.config import LogConfig, SemLockConfig, WaitConfig
from semlock.core.constants import (
    DEFAULT_MAX_HOLDERS,
    DEFAULT_MAX_WAIT,
    _parse_env_numeric,
    effective_acquire_defaults,
)
from semlock.core.exceptions import ConfigurationError
from semlock.core.namespace import candidate_lock_dir, resolve_lock_dir


class TestSemLockConfig:
    """Test configuration dataclasses"""

    def test_defaults(self):
        config = SemLockConfig()
        assert config.max_holders == -1
        assert config.unbounded
        assert config.wait == WaitConfig(max_wait=10, poll_interval=1.0)
        assert config.log == LogConfig()
        assert config.quiet is False

    def test_from_args(self):
        args = argparse.Namespace(
            max_holders=2,
            lock_dir="/tmp/x",
            max_wait=5,
            poll_interval=0.5,
            log_level=None,
            log_format="json",
            log_file="/tmp/x.log",
            quiet=True,
        )
        config = SemLockConfig.from_args(args)

        assert config.max_holders == 2
        assert not config.unbounded
        assert config.lock_dir == "/tmp/x"
        assert config.wait.to_dict() == {"max_wait": 5, "poll_interval": 0.5}
        assert config.log.level is None
        assert config.log.format == "json"
        assert config.log.file == "/tmp/x.log"
        assert config.quiet is True

    def test_from_partial_args_uses_defaults(self):
        config = SemLockConfig.from_args(argparse.Namespace())
        assert config.max_holders == -1
        assert config.wait.max_wait == 10
        assert config.log.format == "text"

    def test_unbounded_wait(self):
        assert WaitConfig(max_wait=-1).unbounded
        assert not WaitConfig(max_wait=0).unbounded


class TestEnvironmentDefaults:
    """Test SEMLOCK_MAX_HOLDERS / SEMLOCK_MAX_WAIT overrides"""

    def test_builtin_defaults(self):
        assert effective_acquire_defaults({}) == {"max_holders": DEFAULT_MAX_HOLDERS, "max_wait": DEFAULT_MAX_WAIT}

    def test_env_overrides(self):
        env = {"SEMLOCK_MAX_HOLDERS": "3", "SEMLOCK_MAX_WAIT": "-1"}
        assert effective_acquire_defaults(env) == {"max_holders": 3, "max_wait": -1}

    @pytest.mark.parametrize("value", ["abc", "-5", "1.5", ""])
    def test_invalid_env_values_ignored(self, value, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = effective_acquire_defaults({"SEMLOCK_MAX_HOLDERS": value})
        assert cfg["max_holders"] == DEFAULT_MAX_HOLDERS
        assert "Ignoring invalid SEMLOCK_MAX_HOLDERS" in caplog.text

    def test_parse_env_numeric(self):
        assert _parse_env_numeric(None, int) is None
        assert _parse_env_numeric("7", int) == 7
        assert _parse_env_numeric("nan", float) is None
        assert _parse_env_numeric("x", float) is None


class TestNamespaceResolution:
    """Test lock directory precedence and validation"""

    def test_override_wins(self, tmp_path):
        env = {"SEMLOCK_DIR": str(tmp_path / "env"), "XDG_RUNTIME_DIR": str(tmp_path / "run")}
        assert candidate_lock_dir(tmp_path / "cli", env) == tmp_path / "cli"

    def test_env_dir_before_runtime_dir(self, tmp_path):
        env = {"SEMLOCK_DIR": str(tmp_path / "env"), "XDG_RUNTIME_DIR": str(tmp_path / "run")}
        assert candidate_lock_dir(None, env) == tmp_path / "env"

    def test_runtime_dir_subpath(self, tmp_path):
        assert candidate_lock_dir(None, {"XDG_RUNTIME_DIR": str(tmp_path)}) == tmp_path / "semlock"

    @pytest.mark.skipif(not hasattr(os, "getuid"), reason="POSIX uid required")
    def test_fallback_is_per_user_tmp(self):
        assert candidate_lock_dir(None, {}) == Path(f"/tmp/semlock-{os.getuid()}")

    def test_resolve_creates_directory(self, tmp_path):
        target = tmp_path / "a" / "b"
        resolved = resolve_lock_dir(target, {})
        assert resolved == target
        assert resolved.is_dir()
        assert resolved.is_absolute()

    def test_resolve_makes_relative_paths_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert resolve_lock_dir("rel", {}) == tmp_path / "rel"

    def test_resolve_rejects_file(self, tmp_path):
        target = tmp_path / "file"
        target.write_text("x", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_lock_dir(target, {})
        assert exc_info.value.field == "lock_dir"

    @pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores permissions")
    def test_resolve_rejects_unwritable(self, tmp_path):
        target = tmp_path / "ro"
        target.mkdir()
        target.chmod(0o500)
        try:
            with pytest.raises(ConfigurationError, match="not writable"):
                resolve_lock_dir(target, {})
        finally:
            target.chmod(0o700)
