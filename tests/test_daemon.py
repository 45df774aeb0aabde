"""Tests for ghostty_styles.core.daemon."""

from __future__ import annotations

import logging
import os
import signal
from unittest.mock import MagicMock

import pytest

from ghostty_styles.config.settings import AppSettings
from ghostty_styles.core import daemon as daemon_module
from ghostty_styles.core.collection import CollectionStore, CollectionTheme, CycleOrder, ThemeCollection
from ghostty_styles.core.daemon import (
    CycleDaemon,
    DaemonState,
    PidFile,
    ProcessControl,
    parse_interval,
)
from ghostty_styles.errors import ErrorCode, GhosttyStylesError
from ghostty_styles.workers.cycle_worker import CycleWorker


class FakeControl(ProcessControl):
    def __init__(self, alive=(), pid=4242):
        self.alive = set(alive)
        self.pid = pid
        self.terminated: list[int] = []

    def current_pid(self) -> int:
        return self.pid

    def is_alive(self, pid: int) -> bool:
        return pid in self.alive

    def terminate(self, pid: int) -> None:
        self.terminated.append(pid)


@pytest.mark.parametrize("value,seconds", [("30m", 1800), ("1h", 3600), ("90s", 90), (" 5m ", 300)])
def test_parse_interval_accepts(value, seconds):
    assert parse_interval(value) == seconds


@pytest.mark.parametrize("value", ["0m", "abc", "", "10", "10d", "m", "-5m", "1.5h", "5 m", "1h30m"])
def test_parse_interval_rejects(value):
    with pytest.raises(GhosttyStylesError) as exc_info:
        parse_interval(value)
    assert exc_info.value.code is ErrorCode.INVALID_INPUT


class TestProcessControl:
    def test_current_process_is_alive(self):
        control = ProcessControl()
        assert control.current_pid() == os.getpid()
        assert control.is_alive(os.getpid()) is True

    def test_missing_process(self, monkeypatch):
        def fake_kill(pid, sig):
            raise ProcessLookupError

        monkeypatch.setattr(daemon_module.os, "kill", fake_kill)
        assert ProcessControl().is_alive(999999) is False

    def test_permission_error_means_alive(self, monkeypatch):
        def fake_kill(pid, sig):
            raise PermissionError

        monkeypatch.setattr(daemon_module.os, "kill", fake_kill)
        assert ProcessControl().is_alive(1) is True

    def test_terminate_sends_sigterm(self, monkeypatch):
        kill = MagicMock()
        monkeypatch.setattr(daemon_module.os, "kill", kill)
        ProcessControl().terminate(123)
        kill.assert_called_once_with(123, signal.SIGTERM)


class TestPidFile:
    def test_read_missing(self, tmp_path):
        assert PidFile(tmp_path / "daemon.pid").read() is None

    def test_read_corrupt(self, tmp_path):
        path = tmp_path / "daemon.pid"
        path.write_text("not-a-pid", encoding="utf-8")
        with pytest.raises(GhosttyStylesError) as exc_info:
            PidFile(path).read()
        assert exc_info.value.code is ErrorCode.CORRUPT_PID_FILE

    def test_acquire_and_release(self, tmp_path):
        pid_file = PidFile(tmp_path / "run" / "daemon.pid")
        pid_file.acquire(77, FakeControl())
        assert pid_file.read() == 77
        pid_file.release()
        assert not pid_file.path.exists()
        pid_file.release()

    def test_context_manager_releases(self, tmp_path):
        pid_file = PidFile(tmp_path / "daemon.pid")
        pid_file.acquire(77, FakeControl())
        with pytest.raises(RuntimeError):
            with pid_file:
                raise RuntimeError("loop died")
        assert not pid_file.path.exists()

    def test_live_holder_blocks(self, tmp_path):
        path = tmp_path / "daemon.pid"
        path.write_text("55\n", encoding="utf-8")
        with pytest.raises(GhosttyStylesError) as exc_info:
            PidFile(path).ensure_available(FakeControl(alive={55}))
        assert exc_info.value.code is ErrorCode.ALREADY_RUNNING
        assert path.exists()

    def test_stale_file_is_cleared(self, tmp_path, caplog):
        path = tmp_path / "daemon.pid"
        path.write_text("55", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="ghostty_styles.core.daemon"):
            PidFile(path).ensure_available(FakeControl())
        assert not path.exists()
        assert "stale PID file" in caplog.text

    def test_read_rejects_non_ascii_digits(self, tmp_path):
        path = tmp_path / "daemon.pid"
        path.write_text("\u00b2", encoding="utf-8")
        with pytest.raises(GhosttyStylesError) as exc_info:
            PidFile(path).read()
        assert exc_info.value.code is ErrorCode.CORRUPT_PID_FILE

    def test_release_keeps_a_newer_daemons_file(self, tmp_path):
        path = tmp_path / "daemon.pid"
        old = PidFile(path)
        old.acquire(111, FakeControl())
        # `cycle stop` removes the file, then a new daemon starts before the old one exits.
        PidFile(path).remove()
        new = PidFile(path)
        new.acquire(222, FakeControl())

        old.release()

        assert new.read() == 222
        new.release()
        assert not path.exists()

    def test_release_without_acquire_is_a_no_op(self, tmp_path):
        path = tmp_path / "daemon.pid"
        path.write_text("55", encoding="utf-8")
        PidFile(path).release()
        assert path.exists()

    def test_remove_is_unconditional(self, tmp_path):
        path = tmp_path / "daemon.pid"
        path.write_text("55", encoding="utf-8")
        pid_file = PidFile(path)
        pid_file.remove()
        pid_file.remove()
        assert not path.exists()


@pytest.fixture
def settings(tmp_path):
    return AppSettings(tmp_path / "profile")


@pytest.fixture
def store(settings):
    return CollectionStore(settings.collections_dir)


def _save_rotation(store, *, interval="30m", themes=2, order=CycleOrder.SEQUENTIAL):
    collection = ThemeCollection(
        "rotation",
        [CollectionTheme(f"t{i}", f"Theme {i}", True, f"# t{i}") for i in range(themes)],
        interval=interval,
        order=order,
    )
    store.save(collection)
    return collection


def _daemon(settings, store, control=None, service=None):
    return CycleDaemon(
        settings,
        store,
        service or MagicMock(),
        pid_file=PidFile(settings.pid_path),
        control=control or FakeControl(),
    )


class TestStartPreconditions:
    def test_requires_active_collection(self, settings, store):
        with pytest.raises(GhosttyStylesError) as exc_info:
            _daemon(settings, store).prepare()
        assert exc_info.value.code is ErrorCode.NO_ACTIVE_COLLECTION

    def test_requires_interval(self, settings, store):
        _save_rotation(store, interval=None)
        settings.active_collection = "rotation"
        with pytest.raises(GhosttyStylesError) as exc_info:
            _daemon(settings, store).prepare()
        assert exc_info.value.code is ErrorCode.NO_INTERVAL
        assert not settings.pid_path.exists()

    def test_rejects_bad_interval(self, settings, store):
        _save_rotation(store, interval="soon")
        settings.active_collection = "rotation"
        with pytest.raises(GhosttyStylesError) as exc_info:
            _daemon(settings, store).prepare()
        assert exc_info.value.code is ErrorCode.INVALID_INPUT

    def test_requires_themes(self, settings, store):
        _save_rotation(store, themes=0)
        settings.active_collection = "rotation"
        with pytest.raises(GhosttyStylesError) as exc_info:
            _daemon(settings, store).prepare()
        assert exc_info.value.code is ErrorCode.EMPTY_COLLECTION

    def test_running_daemon_checked_first(self, settings, store):
        settings.pid_path.write_text("99", encoding="utf-8")
        with pytest.raises(GhosttyStylesError) as exc_info:
            _daemon(settings, store, FakeControl(alive={99})).prepare()
        assert exc_info.value.code is ErrorCode.ALREADY_RUNNING

    def test_prepare_writes_pid(self, settings, store):
        _save_rotation(store, interval="90s")
        settings.active_collection = "rotation"
        settings.pid_path.write_text("99", encoding="utf-8")

        worker = _daemon(settings, store, FakeControl(pid=4242)).prepare()

        assert isinstance(worker, CycleWorker)
        assert settings.pid_path.read_text(encoding="utf-8") == "4242"


class _OneShotWorker(CycleWorker):
    instances: list[_OneShotWorker] = []

    def run(self) -> None:
        _OneShotWorker.instances.append(self)
        self.started.emit()
        self.run_once()
        self.cancelled.emit()


class TestStartLoop:
    @pytest.fixture(autouse=True)
    def one_shot(self, monkeypatch):
        _OneShotWorker.instances = []
        monkeypatch.setattr(daemon_module, "CycleWorker", _OneShotWorker)

    def test_start_runs_loop_and_releases_pid(self, settings, store):
        _save_rotation(store)
        settings.active_collection = "rotation"
        service = MagicMock()
        service.apply_next.return_value = "Applied 'Theme 1' from 'rotation'"

        applied = _daemon(settings, store, service=service).start(install_signal_handlers=False)

        assert applied == 1
        service.apply_next.assert_called_once()
        assert not settings.pid_path.exists()

    def test_failed_cycle_does_not_crash(self, settings, store):
        _save_rotation(store)
        settings.active_collection = "rotation"
        service = MagicMock()
        service.apply_next.side_effect = GhosttyStylesError(ErrorCode.APPLY_FAILED)

        assert _daemon(settings, store, service=service).start(install_signal_handlers=False) == 0
        assert not settings.pid_path.exists()

    def test_sigterm_cancels_worker_and_handlers_are_restored(self, settings, store):
        _save_rotation(store)
        settings.active_collection = "rotation"
        before = signal.getsignal(signal.SIGTERM)

        def raise_sigterm():
            signal.raise_signal(signal.SIGTERM)
            return "Applied"

        service = MagicMock()
        service.apply_next.side_effect = raise_sigterm

        _daemon(settings, store, service=service).start()

        assert _OneShotWorker.instances[0]._is_cancelled is True
        assert _OneShotWorker.instances[0]._cancel_event.is_set() is False
        assert signal.getsignal(signal.SIGTERM) == before


class TestStop:
    def test_no_pid_file(self, settings, store):
        with pytest.raises(GhosttyStylesError) as exc_info:
            _daemon(settings, store).stop()
        assert exc_info.value.code is ErrorCode.NOT_RUNNING

    def test_stale_pid_file(self, settings, store):
        settings.pid_path.write_text("31", encoding="utf-8")
        control = FakeControl()
        with pytest.raises(GhosttyStylesError) as exc_info:
            _daemon(settings, store, control).stop()
        assert exc_info.value.code is ErrorCode.NOT_RUNNING
        assert "Removed stale PID file" in exc_info.value.message
        assert not settings.pid_path.exists()
        assert control.terminated == []

    def test_running_daemon(self, settings, store):
        settings.pid_path.write_text("31", encoding="utf-8")
        control = FakeControl(alive={31})
        assert _daemon(settings, store, control).stop() == 31
        assert control.terminated == [31]
        assert not settings.pid_path.exists()


class TestStatus:
    def test_nothing_configured(self, settings, store):
        status = _daemon(settings, store).status()
        assert status.state is DaemonState.NOT_RUNNING
        assert status.pid is None
        assert status.collection is None

    def test_running_with_collection(self, settings, store):
        collection = _save_rotation(store, themes=3, order=CycleOrder.SHUFFLE)
        collection.current_index = 2
        store.save(collection)
        settings.active_collection = "rotation"
        settings.pid_path.write_text("31", encoding="utf-8")

        status = _daemon(settings, store, FakeControl(alive={31})).status()

        assert status.state is DaemonState.RUNNING
        assert status.pid == 31
        assert status.collection == "rotation"
        assert status.theme_count == 3
        assert status.order is CycleOrder.SHUFFLE
        assert status.interval == "30m"
        assert status.current_title == "Theme 2"

    def test_stale_is_reported_not_removed(self, settings, store):
        settings.pid_path.write_text("31", encoding="utf-8")
        status = _daemon(settings, store).status()
        assert status.state is DaemonState.STALE
        assert settings.pid_path.exists()

    def test_missing_collection_is_reported(self, settings, store):
        settings.active_collection = "gone"
        status = _daemon(settings, store).status()
        assert status.collection == "gone"
        assert "does not exist" in status.error
