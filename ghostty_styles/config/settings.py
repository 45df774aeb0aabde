"""Application settings via QSettings."""

from __future__ import annotations

import os
from pathlib import Path

from PySide6.QtCore import QSettings

from ghostty_styles.core.ghostty_config import default_config_path
from ghostty_styles.core.mode import (
    DEFAULT_DARK_AFTER,
    DEFAULT_LIGHT_AFTER,
    ModePreference,
    parse_hhmm,
)
from ghostty_styles.errors import ErrorCode, GhosttyStylesError

APP_NAME = "ghostty-styles"


class AppSettings:
    """Wraps QSettings for persistent app configuration.

    With ``base_dir`` the settings live in ``<base_dir>/settings.ini`` and all
    data paths hang off that directory; otherwise the native store is used.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir
        if base_dir is None:
            self._qs = QSettings(APP_NAME, APP_NAME)
        else:
            base_dir.mkdir(parents=True, exist_ok=True)
            self._qs = QSettings(str(base_dir / "settings.ini"), QSettings.Format.IniFormat)

    def sync(self) -> None:
        """Flush pending writes and pick up values written by other processes."""
        self._qs.sync()

    # -- collections --

    @property
    def active_collection(self) -> str | None:
        raw = self._qs.value("collections/active", "", type=str)
        value = (raw or "").strip()
        return value or None

    @active_collection.setter
    def active_collection(self, value: str | None) -> None:
        cleaned = (value or "").strip()
        if cleaned:
            self._qs.setValue("collections/active", cleaned)
        else:
            self._qs.remove("collections/active")

    # -- mode --

    @property
    def mode_preference(self) -> ModePreference | None:
        raw = self._qs.value("mode/preference", "", type=str)
        return ModePreference.parse(raw)

    @mode_preference.setter
    def mode_preference(self, value: ModePreference | None) -> None:
        if value is None:
            self._qs.remove("mode/preference")
        else:
            self._qs.setValue("mode/preference", value.value)

    @property
    def dark_after(self) -> str:
        raw = self._qs.value("mode/dark_after", DEFAULT_DARK_AFTER, type=str)
        value = (raw or "").strip()
        return value or DEFAULT_DARK_AFTER

    @dark_after.setter
    def dark_after(self, value: str) -> None:
        self._qs.setValue("mode/dark_after", _validated_hhmm(value, "dark_after"))

    @property
    def light_after(self) -> str:
        raw = self._qs.value("mode/light_after", DEFAULT_LIGHT_AFTER, type=str)
        value = (raw or "").strip()
        return value or DEFAULT_LIGHT_AFTER

    @light_after.setter
    def light_after(self, value: str) -> None:
        self._qs.setValue("mode/light_after", _validated_hhmm(value, "light_after"))

    def set_time_window(self, dark_after: str | None, light_after: str | None) -> None:
        """Validate both boundaries before storing either one."""
        updates = {}
        if dark_after is not None:
            updates["mode/dark_after"] = _validated_hhmm(dark_after, "dark_after")
        if light_after is not None:
            updates["mode/light_after"] = _validated_hhmm(light_after, "light_after")
        for key, value in updates.items():
            self._qs.setValue(key, value)

    # -- ghostty --

    @property
    def ghostty_config_path(self) -> Path:
        raw = self._qs.value("ghostty/config_path", "", type=str)
        value = (raw or "").strip()
        if value:
            return Path(value).expanduser()
        return default_config_path(config_home=_xdg_config_home())

    @ghostty_config_path.setter
    def ghostty_config_path(self, value: Path | str | None) -> None:
        cleaned = str(value or "").strip()
        if cleaned:
            self._qs.setValue("ghostty/config_path", cleaned)
        else:
            self._qs.remove("ghostty/config_path")

    # -- helpers --

    @property
    def app_data_dir(self) -> Path:
        path = self._base_dir if self._base_dir is not None else self._app_data_dir()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def collections_dir(self) -> Path:
        path = self.app_data_dir / "collections"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def themes_dir(self) -> Path:
        path = self.app_data_dir / "themes"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def log_dir(self) -> Path:
        path = self.app_data_dir / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def pid_path(self) -> Path:
        return self.app_data_dir / "daemon.pid"

    @staticmethod
    def _app_data_dir() -> Path:
        return _xdg_config_home() / APP_NAME


def _xdg_config_home() -> Path:
    raw = os.environ.get("XDG_CONFIG_HOME", "").strip()
    return Path(raw) if raw else Path.home() / ".config"


def _validated_hhmm(value: str, name: str) -> str:
    cleaned = (value or "").strip()
    if parse_hhmm(cleaned) is None:
        raise GhosttyStylesError(
            ErrorCode.INVALID_INPUT,
            message=f"Invalid {name} time {value!r}: expected HH:MM",
        )
    return cleaned
