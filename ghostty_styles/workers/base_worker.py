"""Base worker class with standard signals for long-running operations."""

from __future__ import annotations

from threading import Event

from PySide6.QtCore import QObject, Signal


class BaseWorker(QObject):
    """Base class for cancellable workers.

    Workers can run on a QThread via moveToThread, or directly in the
    calling thread (the daemon does this):
        worker = SomeWorker(args)
        worker.error.connect(handler)
        worker.run()
    """

    started = Signal()
    progress = Signal(int, int, str)    # current, total, message
    finished = Signal(object)           # result data
    error = Signal(str)                 # error message
    cancelled = Signal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._cancel_event = Event()
        self._stop_requested = False

    def cancel(self) -> None:
        self._cancel_event.set()

    def request_stop(self) -> None:
        """Flag-only cancel, safe to call from a signal handler.

        Event.set() takes a lock the interrupted wait may already hold, so
        handlers must not call cancel(). Loops notice the flag on their next
        wait slice.
        """
        self._stop_requested = True

    @property
    def _is_cancelled(self) -> bool:
        return self._stop_requested or self._cancel_event.is_set()

    def run(self) -> None:
        """Override in subclass."""
        raise NotImplementedError
