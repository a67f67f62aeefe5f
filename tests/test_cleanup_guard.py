"""Tests for the cleanup guard and signal trap"""

from __future__ import annotations

import logging
import shutil
import signal
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from semlock.core.exceptions import AcquireInterrupted
from semlock.core.locks.guard import CleanupGuard, SignalTrap

requires_sigusr = pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="POSIX signals required")


def _staged(namespace: Path) -> Path:
    root = namespace / ".stage.1.2.3"
    (root / "jobA" / "jobA" / "1.2.3").mkdir(parents=True)
    return root


class TestCleanupGuard:
    """Guard removes exactly what its process created"""

    def test_release_removes_staging_tree(self, lock_dir):
        root = _staged(lock_dir)
        with CleanupGuard(root, "jobA") as guard:
            assert root.exists()
        assert guard.closed
        assert not root.exists()

    def test_release_removes_held_token(self, lock_dir):
        root = _staged(lock_dir)
        token = lock_dir / "jobA.modify"
        token.write_text("1\n", encoding="utf-8")

        guard = CleanupGuard(root, "jobA")
        guard.hold_token(token)
        assert guard.holds_token
        guard.release()

        assert not token.exists()
        assert not guard.holds_token

    def test_unheld_token_left_alone(self, lock_dir):
        root = _staged(lock_dir)
        token = lock_dir / "other.modify"
        token.write_text("1\n", encoding="utf-8")

        CleanupGuard(root, "jobA").release()

        assert token.exists()

    def test_cleanup_runs_on_exception(self, lock_dir):
        root = _staged(lock_dir)
        with pytest.raises(RuntimeError):
            with CleanupGuard(root, "jobA"):
                raise RuntimeError("boom")
        assert not root.exists()

    def test_release_is_idempotent(self, lock_dir):
        root = _staged(lock_dir)
        guard = CleanupGuard(root, "jobA")
        guard.release()
        root.mkdir()
        guard.release()
        assert root.exists()

    def test_missing_staging_root_is_fine(self, lock_dir, caplog):
        with caplog.at_level(logging.WARNING):
            CleanupGuard(lock_dir / ".stage.never", "jobA").release()
        assert caplog.records == []

    def test_vanished_token_warns(self, lock_dir, caplog):
        guard = CleanupGuard(lock_dir / ".stage.x", "jobA")
        guard.hold_token(lock_dir / "gone.modify")
        with caplog.at_level(logging.WARNING):
            assert guard.drop_token() is True
        assert "vanished" in caplog.text

    def test_removal_failure_is_logged_not_raised(self, lock_dir, caplog):
        root = _staged(lock_dir)
        with patch.object(shutil, "rmtree", side_effect=PermissionError(13, "Permission denied")):
            with caplog.at_level(logging.WARNING):
                CleanupGuard(root, "jobA").release()
        assert "Failed to remove staging tree" in caplog.text


@requires_sigusr
class TestSignalTrap:
    """Signals become AcquireInterrupted while the trap is installed"""

    def test_signal_raises_interrupt(self):
        with SignalTrap([signal.SIGUSR1]) as trap:
            assert trap.installed
            with pytest.raises(AcquireInterrupted) as exc_info:
                signal.raise_signal(signal.SIGUSR1)
        assert exc_info.value.signum == signal.SIGUSR1
        assert exc_info.value.exit_code == 128 + signal.SIGUSR1
        assert trap.received == signal.SIGUSR1

    def test_previous_handler_restored(self):
        before = signal.getsignal(signal.SIGUSR1)
        with SignalTrap([signal.SIGUSR1]):
            assert signal.getsignal(signal.SIGUSR1) != before
        assert signal.getsignal(signal.SIGUSR1) == before

    def test_deferred_holds_signal_until_block_exits(self):
        completed = []
        with SignalTrap([signal.SIGUSR1]) as trap:
            with pytest.raises(AcquireInterrupted):
                with trap.deferred():
                    signal.raise_signal(signal.SIGUSR1)
                    completed.append("after-signal")
        assert completed == ["after-signal"]

    def test_nested_deferral_raises_at_outermost_exit(self):
        steps = []
        with SignalTrap([signal.SIGUSR1]) as trap:
            with pytest.raises(AcquireInterrupted):
                with trap.deferred():
                    with trap.deferred():
                        signal.raise_signal(signal.SIGUSR1)
                    steps.append("inner-exited")
        assert steps == ["inner-exited"]

    def test_check_without_pending_signal_is_noop(self):
        with SignalTrap([signal.SIGUSR1]) as trap:
            trap.check()
            with trap.deferred():
                pass

    def test_guard_cleanup_completes_under_signal(self, lock_dir):
        root = _staged(lock_dir)
        with SignalTrap([signal.SIGUSR1]) as trap:
            original_release = CleanupGuard.release

            def _release_with_signal(self):
                signal.raise_signal(signal.SIGUSR1)
                original_release(self)

            with patch.object(CleanupGuard, "release", _release_with_signal):
                with pytest.raises(AcquireInterrupted):
                    with CleanupGuard(root, "jobA", trap=trap):
                        pass
        assert not root.exists()

    def test_inert_outside_main_thread(self):
        outcome = {}

        def _worker():
            with SignalTrap([signal.SIGUSR1]) as trap:
                outcome["installed"] = trap.installed
                with trap.deferred():
                    outcome["ran"] = True

        thread = threading.Thread(target=_worker)
        thread.start()
        thread.join()
        assert outcome == {"installed": False, "ran": True}
