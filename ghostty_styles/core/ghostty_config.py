"""Write a theme's color block into the Ghostty config file."""

from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path

from ghostty_styles.errors import ErrorCode, GhosttyStylesError

logger = logging.getLogger(__name__)

# Keys replaced wholesale when a theme is applied.
COLOR_KEYS: frozenset[str] = frozenset(
    {
        "background",
        "foreground",
        "cursor-color",
        "cursor-text",
        "selection-background",
        "selection-foreground",
        "palette",
        "cursor-style",
        "background-opacity",
    }
)


def default_config_path(home: Path | None = None, config_home: Path | None = None) -> Path:
    home = home or Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "com.mitchellh.ghostty" / "config"
    return (config_home or home / ".config") / "ghostty" / "config"


def strip_color_lines(text: str) -> list[str]:
    """Drop color assignments, keeping comments, blanks and other settings."""
    kept: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            kept.append(line)
            continue
        key = stripped.split("=", 1)[0].strip()
        if key not in COLOR_KEYS:
            kept.append(line)
    return kept


class GhosttyConfigWriter:
    """Applies raw theme config text to one Ghostty config file."""

    def __init__(self, config_path: Path) -> None:
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def backup_path(self) -> Path:
        return self._config_path.with_name(f"{self._config_path.name}.bak")

    def apply_theme(self, title: str, raw_config: str) -> Path:
        """Replace the color block, keeping a ``.bak`` copy of the previous file."""
        path = self._config_path
        try:
            if path.exists():
                existing = path.read_text(encoding="utf-8")
                shutil.copyfile(path, self.backup_path)
                logger.debug("backed up %s to %s", path, self.backup_path)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                existing = ""

            new_config = "\n".join(strip_color_lines(existing))
            if new_config and not new_config.endswith("\n"):
                new_config += "\n"
            new_config += f"\n# Theme: {title}\n{raw_config}"
            if not new_config.endswith("\n"):
                new_config += "\n"

            path.write_text(new_config, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise GhosttyStylesError(
                ErrorCode.APPLY_FAILED,
                message=f"Failed to write Ghostty config: {exc}",
                path=path,
            ) from exc
        return path
