"""Worker that applies the next collection theme on a fixed interval."""

from __future__ import annotations

import logging
import time

from ghostty_styles.core.cycling import CycleService
from ghostty_styles.errors import GhosttyStylesError
from ghostty_styles.workers.base_worker import BaseWorker

logger = logging.getLogger(__name__)

WAIT_SLICE_SECONDS = 0.5


class CycleWorker(BaseWorker):
    """Sleeps, applies, repeats until cancelled.

    A failed cycle is reported through ``error`` and logged; the loop keeps
    going so one bad theme entry cannot stop the rotation. ``finished``
    carries the number of themes applied.
    """

    def __init__(self, service: CycleService, interval_seconds: float) -> None:
        super().__init__()
        self._service = service
        self._interval = interval_seconds
        self._applied = 0

    @property
    def applied_count(self) -> int:
        return self._applied

    def run(self) -> None:
        self.started.emit()
        while self._wait_interval():
            self.run_once()
        self.cancelled.emit()
        self.finished.emit(self._applied)

    def _wait_interval(self) -> bool:
        """Sleep one interval in short slices; False once cancelled."""
        deadline = time.monotonic() + self._interval
        while not self._is_cancelled:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return True
            self._cancel_event.wait(min(remaining, WAIT_SLICE_SECONDS))
        return False

    def run_once(self) -> bool:
        try:
            message = self._service.apply_next()
        except GhosttyStylesError as e:
            logger.error("cycle failed: %s", e.message)
            self.error.emit(e.message)
            return False
        except Exception as e:
            logger.exception("cycle failed unexpectedly")
            self.error.emit(str(e))
            return False
        self._applied += 1
        logger.info(message)
        self.progress.emit(self._applied, 0, message)
        return True
