"""Best-effort OS dark mode detection."""

from __future__ import annotations

import logging
import os
import subprocess
import sys

logger = logging.getLogger(__name__)

_COMMAND_TIMEOUT = 2.0


def _run(args: list[str]) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=_COMMAND_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("dark mode probe %s failed: %s", args[0], exc)
        return None


def detect_macos() -> bool | None:
    result = _run(["defaults", "read", "-g", "AppleInterfaceStyle"])
    if result is None:
        return None
    if result.returncode == 0:
        return result.stdout.strip().lower() == "dark"
    # The key is absent in light mode.
    return False


def detect_linux() -> bool | None:
    if "dark" in os.environ.get("GTK_THEME", "").lower():
        return True
    for args in (
        ["gsettings", "get", "org.gnome.desktop.interface", "color-scheme"],
        ["dconf", "read", "/org/gnome/desktop/interface/color-scheme"],
    ):
        result = _run(args)
        if result is not None and result.returncode == 0:
            return "prefer-dark" in result.stdout
    return None


def detect_current() -> bool | None:
    """Return True for dark, False for light, None when undetectable."""
    if sys.platform == "darwin":
        return detect_macos()
    if sys.platform.startswith("linux"):
        return detect_linux()
    return None
