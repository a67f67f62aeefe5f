"""Pytest configuration and fixtures for semlock tests"""
import logging
import os
from pathlib import Path

import pytest

from semlock.core.constants import LOCK_DIR_ENV, MAX_HOLDERS_ENV, MAX_WAIT_ENV, STAGING_PREFIX


class FakeClock:
    """Deterministic clock: sleeping advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep the developer's semlock environment out of the tests."""
    for name in (LOCK_DIR_ENV, MAX_HOLDERS_ENV, MAX_WAIT_ENV, "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Drop handlers installed by setup_logging() so they never outlive a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def lock_dir(tmp_path) -> Path:
    """An existing, empty lock namespace"""
    namespace = tmp_path / "locks"
    namespace.mkdir()
    return namespace


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


def staging_leftovers(namespace: Path) -> list[str]:
    """Names of staging trees still present under a namespace"""
    return sorted(p.name for p in namespace.iterdir() if p.name.startswith(STAGING_PREFIX))


def holder_entries(namespace: Path, lock_name: str) -> list[str]:
    holders = namespace / lock_name / lock_name
    if not holders.is_dir():
        return []
    return sorted(os.listdir(holders))
