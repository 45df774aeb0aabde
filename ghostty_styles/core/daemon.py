"""Single-instance cycling daemon: PID file, liveness and the apply loop."""

from __future__ import annotations

import logging
import os
import re
import signal
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ghostty_styles.config.settings import AppSettings
from ghostty_styles.core.collection import CollectionStore, CycleOrder
from ghostty_styles.core.cycling import CycleService
from ghostty_styles.errors import ErrorCode, GhosttyStylesError, classify_exception
from ghostty_styles.workers.cycle_worker import CycleWorker

logger = logging.getLogger(__name__)

_INTERVAL_RE = re.compile(r"^([0-9]+)([smh])$")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600}
_PID_RE = re.compile(r"[0-9]+")


def parse_interval(value: str) -> int:
    """Parse ``90s``, ``30m`` or ``1h`` into seconds."""
    text = (value or "").strip() if isinstance(value, str) else ""
    if not text:
        raise GhosttyStylesError(ErrorCode.INVALID_INPUT, message="Interval string is empty")
    match = _INTERVAL_RE.match(text)
    if match is None:
        raise GhosttyStylesError(
            ErrorCode.INVALID_INPUT,
            message=f"Invalid interval '{text}': expected a number followed by 's', 'm', or 'h'",
        )
    amount = int(match.group(1))
    if amount == 0:
        raise GhosttyStylesError(ErrorCode.INVALID_INPUT, message="Interval must be greater than zero")
    return amount * _UNIT_SECONDS[match.group(2)]


class ProcessControl:
    """Host OS primitives for probing and stopping a process."""

    def current_pid(self) -> int:
        return os.getpid()

    def is_alive(self, pid: int) -> bool:
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists, owned by someone else.
            return True
        except OSError:
            return False
        return True

    def terminate(self, pid: int) -> None:
        try:
            os.kill(pid, signal.SIGTERM)
        except OSError as exc:
            raise GhosttyStylesError(
                ErrorCode.IO_ERROR,
                message=f"Failed to send SIGTERM to PID {pid}: {exc}",
            ) from exc


class PidFile:
    """The daemon's only cross-process record of liveness.

    Not a lock: there is a window between ``ensure_available`` and
    ``acquire`` where a second daemon could slip in. ``release`` only
    removes the file while it still names the PID this instance wrote.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._owned_pid: int | None = None

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> int | None:
        try:
            contents = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise classify_exception(exc, self._path) from exc
        match = _PID_RE.fullmatch(contents.strip())
        if match is None:
            raise GhosttyStylesError(ErrorCode.CORRUPT_PID_FILE, path=self._path)
        return int(match.group(0))

    def ensure_available(self, control: ProcessControl) -> None:
        """Raise if a live daemon holds the file; clear it if stale."""
        pid = self.read()
        if pid is None:
            return
        if control.is_alive(pid):
            raise GhosttyStylesError(
                ErrorCode.ALREADY_RUNNING,
                message=f"Daemon is already running (PID {pid})",
                path=self._path,
            )
        logger.warning("removing stale PID file %s for PID %s", self._path, pid)
        self.remove()

    def acquire(self, pid: int, control: ProcessControl) -> None:
        self.ensure_available(control)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(str(pid), encoding="utf-8")
        except OSError as exc:
            raise classify_exception(exc, self._path) from exc
        self._owned_pid = pid

    def release(self) -> None:
        """Remove the file if it still records the PID written by ``acquire``."""
        if self._owned_pid is None:
            return
        pid, self._owned_pid = self._owned_pid, None
        try:
            current = self.read()
        except GhosttyStylesError as e:
            logger.warning("leaving PID file %s in place: %s", self._path, e.message)
            return
        if current != pid:
            logger.debug("PID file %s now belongs to PID %s; not removing", self._path, current)
            return
        self.remove()

    def remove(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("could not remove PID file %s: %s", self._path, exc)

    def __enter__(self) -> PidFile:
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

class DaemonState(Enum):
    RUNNING = "running"
    STALE = "stale"
    NOT_RUNNING = "not running"


@dataclass(frozen=True, slots=True)
class DaemonStatus:
    """Read-only snapshot of the daemon and its active collection."""

    state: DaemonState
    pid: int | None = None
    collection: str | None = None
    theme_count: int = 0
    order: CycleOrder | None = None
    interval: str | None = None
    current_title: str | None = None
    error: str = ""


class CycleDaemon:
    """start/stop/status for the background rotation."""

    def __init__(
        self,
        settings: AppSettings,
        store: CollectionStore,
        service: CycleService,
        *,
        pid_file: PidFile | None = None,
        control: ProcessControl | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._service = service
        self._pid_file = pid_file or PidFile(settings.pid_path)
        self._control = control or ProcessControl()

    @property
    def pid_file(self) -> PidFile:
        return self._pid_file

    def check_preconditions(self) -> tuple[str, str, int]:
        """Return ``(collection, interval text, interval seconds)`` or raise."""
        self._settings.sync()
        name = self._settings.active_collection
        if not name:
            raise GhosttyStylesError(ErrorCode.NO_ACTIVE_COLLECTION)
        collection = self._store.load(name)
        interval_text = (collection.interval or "").strip()
        if not interval_text:
            raise GhosttyStylesError(
                ErrorCode.NO_INTERVAL,
                message=f"Collection '{name}' has no interval set. Set one before starting the daemon.",
            )
        seconds = parse_interval(interval_text)
        if not collection.themes:
            raise GhosttyStylesError(
                ErrorCode.EMPTY_COLLECTION,
                message=f"Collection '{name}' has no themes",
            )
        return name, interval_text, seconds

    def prepare(self) -> CycleWorker:
        """Validate, write the PID file and build the loop worker."""
        self._pid_file.ensure_available(self._control)
        name, interval_text, seconds = self.check_preconditions()
        pid = self._control.current_pid()
        self._pid_file.acquire(pid, self._control)
        logger.info("daemon started pid=%s collection=%s interval=%s", pid, name, interval_text)
        return CycleWorker(self._service, seconds)

    def start(self, *, install_signal_handlers: bool = True) -> int:
        """Run the loop in this process until SIGTERM/SIGINT; returns cycles applied."""
        worker = self.prepare()
        previous: dict[int, object] = {}
        with self._pid_file:
            try:
                if install_signal_handlers:
                    for signum in (signal.SIGTERM, signal.SIGINT):
                        previous[signum] = signal.signal(signum, lambda *_: worker.request_stop())
                worker.run()
            finally:
                for signum, handler in previous.items():
                    signal.signal(signum, handler)
        logger.info("daemon stopped after %s cycles", worker.applied_count)
        return worker.applied_count

    def stop(self) -> int:
        """Signal the running daemon; returns its PID."""
        pid = self._pid_file.read()
        if pid is None:
            raise GhosttyStylesError(
                ErrorCode.NOT_RUNNING,
                message="No daemon is running (PID file not found)",
            )
        if not self._control.is_alive(pid):
            self._pid_file.remove()
            raise GhosttyStylesError(
                ErrorCode.NOT_RUNNING,
                message=f"Daemon (PID {pid}) is not running. Removed stale PID file.",
            )
        self._control.terminate(pid)
        self._pid_file.remove()
        logger.info("sent SIGTERM to daemon pid=%s", pid)
        return pid

    def status(self) -> DaemonStatus:
        pid = self._pid_file.read()
        if pid is None:
            state = DaemonState.NOT_RUNNING
        elif self._control.is_alive(pid):
            state = DaemonState.RUNNING
        else:
            state = DaemonState.STALE

        self._settings.sync()
        name = self._settings.active_collection
        if not name:
            return DaemonStatus(state=state, pid=pid)
        try:
            collection = self._store.load(name)
        except GhosttyStylesError as e:
            return DaemonStatus(state=state, pid=pid, collection=name, error=e.message)
        current = collection.current_theme()
        return DaemonStatus(
            state=state,
            pid=pid,
            collection=name,
            theme_count=len(collection.themes),
            order=collection.order,
            interval=collection.interval,
            current_title=current.title if current else None,
        )
