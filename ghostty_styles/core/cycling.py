"""Pick and apply the next theme of the active collection."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Protocol

from PySide6.QtCore import QObject, Signal

from ghostty_styles.config.settings import AppSettings
from ghostty_styles.core.collection import CollectionStore, CollectionTheme, CycleOrder, ThemeCollection
from ghostty_styles.core.darkmode import detect_current
from ghostty_styles.core.mode import ModePreference, local_minutes_now, mode_label, resolve_mode
from ghostty_styles.errors import ErrorCode, GhosttyStylesError

logger = logging.getLogger(__name__)


class ThemeApplier(Protocol):
    def apply_theme(self, title: str, raw_config: str) -> object: ...


@dataclass(frozen=True, slots=True)
class CycleStep:
    """Outcome of one scheduling decision."""

    index: int
    theme: CollectionTheme
    want_dark: bool | None
    mode_ignored: bool = False


def eligible_indices(
    collection: ThemeCollection,
    want_dark: bool | None,
) -> tuple[list[int], bool]:
    """Indices satisfying the mode constraint, plus whether it had to be dropped."""
    everything = list(range(len(collection.themes)))
    if want_dark is None:
        return everything, False
    matching = [i for i, theme in enumerate(collection.themes) if theme.is_dark == want_dark]
    if not matching:
        return everything, True
    return matching, False


class CycleScheduler:
    """Chooses the next collection index under a traversal policy."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def advance(self, collection: ThemeCollection, want_dark: bool | None = None) -> CycleStep:
        """Select the next theme and store its index as ``current_index``.

        An unsatisfiable mode constraint is dropped for this call with a
        warning instead of failing.
        """
        if not collection.themes:
            raise GhosttyStylesError(
                ErrorCode.EMPTY_COLLECTION,
                message=f"Collection '{collection.name}' is empty",
            )

        current = collection.current_index
        if not 0 <= current < len(collection.themes):
            # Edited outside the CLI; start over from the first theme.
            current = 0
        eligible, mode_ignored = eligible_indices(collection, want_dark)
        if mode_ignored:
            logger.warning(
                "No %s themes in '%s', ignoring mode filter",
                mode_label(want_dark),
                collection.name,
            )

        position = eligible.index(current) if current in eligible else 0
        next_position = self._next_position(collection.order, position, len(eligible))
        next_index = eligible[next_position]

        collection.current_index = next_index
        return CycleStep(
            index=next_index,
            theme=collection.themes[next_index],
            want_dark=want_dark,
            mode_ignored=mode_ignored,
        )

    def _next_position(self, order: CycleOrder, position: int, count: int) -> int:
        if order is CycleOrder.SEQUENTIAL:
            return (position + 1) % count
        if count == 1:
            return 0
        # Any position except the current one.
        choices = [p for p in range(count) if p != position]
        return self._rng.choice(choices)


class CycleService(QObject):
    """Loads fresh state, advances the active collection and applies the theme."""

    theme_applied = Signal(str)

    def __init__(
        self,
        settings: AppSettings,
        store: CollectionStore,
        applier: ThemeApplier,
        *,
        scheduler: CycleScheduler | None = None,
        os_signal: Callable[[], bool | None] = detect_current,
        clock: Callable[[], int] = local_minutes_now,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._store = store
        self._applier = applier
        self._scheduler = scheduler or CycleScheduler()
        self._os_signal = os_signal
        self._clock = clock

    def resolve_want_dark(self) -> bool | None:
        preference = self._settings.mode_preference
        if preference is None:
            return None
        return resolve_mode(
            preference,
            self._settings.dark_after,
            self._settings.light_after,
            self._clock(),
            self._os_signal() if preference is ModePreference.AUTO_OS else None,
        )

    def active_collection_name(self) -> str:
        self._settings.sync()
        name = self._settings.active_collection
        if not name:
            raise GhosttyStylesError(ErrorCode.NO_ACTIVE_COLLECTION)
        return name

    def apply_next(self) -> str:
        name = self.active_collection_name()
        collection = self._store.load(name)
        want_dark = self.resolve_want_dark()

        step = self._scheduler.advance(collection, want_dark)
        self._applier.apply_theme(step.theme.title, step.theme.raw_config)
        self._store.save(collection)

        suffix = f" [{mode_label(want_dark)}]" if want_dark is not None else ""
        message = f"Applied '{step.theme.title}' from '{name}'{suffix}"
        self.theme_applied.emit(message)
        return message
