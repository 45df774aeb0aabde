"""Dark/light mode preference resolution."""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum

MINUTES_PER_DAY = 24 * 60

DEFAULT_DARK_AFTER = "19:00"
DEFAULT_LIGHT_AFTER = "07:00"

_HHMM_RE = re.compile(r"([0-9]+):([0-9]+)")


class ModePreference(Enum):
    """How the cycling filter decides between dark and light themes."""

    DARK = "dark"
    LIGHT = "light"
    AUTO_OS = "auto-os"
    AUTO_TIME = "auto-time"

    @classmethod
    def parse(cls, value: object) -> ModePreference | None:
        if isinstance(value, ModePreference):
            return value
        if not isinstance(value, str):
            return None
        cleaned = value.strip().lower().replace("_", "-")
        for member in cls:
            if member.value == cleaned:
                return member
        return None


def parse_hhmm(value: str) -> int | None:
    """Parse ``HH:MM`` into minutes since midnight, or None when malformed."""
    if not isinstance(value, str):
        return None
    match = _HHMM_RE.fullmatch(value)
    if match is None:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours >= 24 or minutes >= 60:
        return None
    return hours * 60 + minutes


def local_minutes_now(now: datetime | None = None) -> int:
    current = now or datetime.now()
    return current.hour * 60 + current.minute


def resolve_time_window(dark_after: str, light_after: str, now_minutes: int) -> bool | None:
    """Return True inside the dark window, False outside, None for bad times.

    With light before dark (07:00 / 19:00) the dark window wraps midnight;
    otherwise dark is the span ``dark_after <= now < light_after``.
    """
    dark_mins = parse_hhmm(dark_after)
    light_mins = parse_hhmm(light_after)
    if dark_mins is None or light_mins is None:
        return None
    if light_mins < dark_mins:
        return now_minutes < light_mins or now_minutes >= dark_mins
    return dark_mins <= now_minutes < light_mins


def resolve_mode(
    preference: ModePreference | None,
    dark_after: str,
    light_after: str,
    now_minutes: int,
    os_dark: bool | None,
) -> bool | None:
    """Map a preference and the current signals to "prefer dark", if any."""
    if preference is None:
        return None
    if preference is ModePreference.DARK:
        return True
    if preference is ModePreference.LIGHT:
        return False
    if preference is ModePreference.AUTO_OS:
        return os_dark
    return resolve_time_window(dark_after, light_after, now_minutes)


def seconds_until_boundary(dark_after: str, light_after: str, now_minutes: int) -> int | None:
    """Seconds until the next dark/light switch; a boundary equal to now counts as a day away."""
    dark_mins = parse_hhmm(dark_after)
    light_mins = parse_hhmm(light_after)
    if dark_mins is None or light_mins is None:
        return None
    distances = [
        boundary - now_minutes if boundary > now_minutes else boundary + MINUTES_PER_DAY - now_minutes
        for boundary in (dark_mins, light_mins)
    ]
    return min(distances) * 60


def mode_label(want_dark: bool | None) -> str:
    if want_dark is None:
        return ""
    return "dark" if want_dark else "light"
