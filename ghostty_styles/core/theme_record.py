"""Typed theme record shared by the catalog, the builder and collections."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Sequence

from ghostty_styles.core.color import HslColor
from ghostty_styles.core.palette import is_dark_background
from ghostty_styles.errors import ErrorCode, GhosttyStylesError

UI_COLOR_KEYS: tuple[str, ...] = (
    "background",
    "foreground",
    "cursor-color",
    "cursor-text",
    "selection-background",
    "selection-foreground",
)

_PALETTE_ENTRY_RE = re.compile(r"^\s*(\d{1,2})\s*=\s*(\S+)\s*$")
_THEME_COMMENT_RE = re.compile(r"^#\s*Theme:\s*(.+?)\s*$")


@dataclass(frozen=True, slots=True)
class ThemeRecord:
    """One theme as published by the catalog or produced by the builder."""

    slug: str
    title: str
    raw_config: str
    background: str
    foreground: str
    id: str = ""
    description: str | None = None
    cursor_color: str | None = None
    cursor_text: str | None = None
    selection_bg: str | None = None
    selection_fg: str | None = None
    palette: tuple[str, ...] = ()
    is_dark: bool = True
    tags: tuple[str, ...] = ()
    font_family: str | None = None
    font_size: float | None = None
    cursor_style: str | None = None
    bg_opacity: float | None = None
    source_url: str | None = None
    author_name: str | None = None
    author_url: str | None = None
    is_featured: bool = False
    vote_count: int = 0
    view_count: int = 0
    download_count: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ThemeRecord:
        """Parse a catalog payload object (camelCase keys)."""
        if not isinstance(data, Mapping):
            raise GhosttyStylesError(ErrorCode.INVALID_INPUT, message="Theme record must be a JSON object")

        palette = data.get("palette", [])
        if not isinstance(palette, list) or not all(isinstance(p, str) for p in palette):
            raise GhosttyStylesError(ErrorCode.INVALID_INPUT, message="Theme field 'palette' must be a list of strings")
        tags = data.get("tags", [])
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise GhosttyStylesError(ErrorCode.INVALID_INPUT, message="Theme field 'tags' must be a list of strings")

        return cls(
            id=_optional_str(data, "id") or "",
            slug=_required_str(data, "slug"),
            title=_required_str(data, "title"),
            description=_optional_str(data, "description"),
            raw_config=_required_str(data, "rawConfig"),
            background=_required_str(data, "background"),
            foreground=_required_str(data, "foreground"),
            cursor_color=_optional_str(data, "cursorColor"),
            cursor_text=_optional_str(data, "cursorText"),
            selection_bg=_optional_str(data, "selectionBg"),
            selection_fg=_optional_str(data, "selectionFg"),
            palette=tuple(palette),
            is_dark=bool(data.get("isDark", True)),
            tags=tuple(tags),
            font_family=_optional_str(data, "fontFamily"),
            font_size=_optional_float(data, "fontSize"),
            cursor_style=_optional_str(data, "cursorStyle"),
            bg_opacity=_optional_float(data, "bgOpacity"),
            source_url=_optional_str(data, "sourceUrl"),
            author_name=_optional_str(data, "authorName"),
            author_url=_optional_str(data, "authorUrl"),
            is_featured=bool(data.get("isFeatured", False)),
            vote_count=_optional_int(data, "voteCount"),
            view_count=_optional_int(data, "viewCount"),
            download_count=_optional_int(data, "downloadCount"),
        )

    @classmethod
    def from_config_text(cls, text: str, *, slug: str, title: str | None = None) -> ThemeRecord:
        """Parse a Ghostty ``key = value`` config into a record."""
        values: dict[str, str] = {}
        palette: dict[int, str] = {}
        found_title: str | None = None
        color_lines: list[str] = []

        for line in text.splitlines():
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.startswith("#"):
                match = _THEME_COMMENT_RE.match(stripped)
                if match and found_title is None:
                    found_title = match.group(1)
                continue
            key, sep, value = stripped.partition("=")
            if not sep:
                continue
            key = key.strip()
            value = value.strip()
            if key == "palette":
                entry = _PALETTE_ENTRY_RE.match(value)
                if entry and int(entry.group(1)) < 16:
                    palette[int(entry.group(1))] = entry.group(2)
                    color_lines.append(stripped)
                continue
            if key in UI_COLOR_KEYS:
                values[key] = value
                color_lines.append(stripped)

        background = values.get("background")
        foreground = values.get("foreground")
        if background is None or foreground is None:
            raise GhosttyStylesError(
                ErrorCode.INVALID_INPUT,
                message="Theme config must define both background and foreground",
            )

        bg = HslColor.from_hex(background)
        return cls(
            slug=slug,
            title=title or found_title or slug,
            raw_config="\n".join(color_lines),
            background=background,
            foreground=foreground,
            cursor_color=values.get("cursor-color"),
            cursor_text=values.get("cursor-text"),
            selection_bg=values.get("selection-background"),
            selection_fg=values.get("selection-foreground"),
            palette=tuple(palette.get(i, "") for i in range(max(palette) + 1)) if palette else (),
            is_dark=is_dark_background(bg) if bg is not None else True,
        )


def render_raw_config(colors: Sequence[HslColor]) -> str:
    """Render 22 colors (6 UI + 16 palette) as a Ghostty color block."""
    if len(colors) != len(UI_COLOR_KEYS) + 16:
        raise ValueError(f"expected 22 colors, got {len(colors)}")
    lines = [f"{key} = {color.to_hex()}" for key, color in zip(UI_COLOR_KEYS, colors)]
    for index, color in enumerate(colors[len(UI_COLOR_KEYS):]):
        lines.append(f"palette = {index}={color.to_hex()}")
    return "\n".join(lines)


def _required_str(data: Mapping[str, object], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise GhosttyStylesError(
            ErrorCode.INVALID_INPUT,
            message=f"Theme field {key!r} must be a non-empty string",
        )
    return value


def _optional_str(data: Mapping[str, object], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise GhosttyStylesError(ErrorCode.INVALID_INPUT, message=f"Theme field {key!r} must be a string")
    return value


def _optional_float(data: Mapping[str, object], key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GhosttyStylesError(ErrorCode.INVALID_INPUT, message=f"Theme field {key!r} must be a number")
    return float(value)


def _optional_int(data: Mapping[str, object], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise GhosttyStylesError(ErrorCode.INVALID_INPUT, message=f"Theme field {key!r} must be an integer")
    return value
