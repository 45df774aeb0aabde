"""Save or apply themes produced by the builder."""

from __future__ import annotations

from pathlib import Path

from ghostty_styles.core.builder import ThemeBuilder
from ghostty_styles.core.ghostty_config import GhosttyConfigWriter
from ghostty_styles.errors import ErrorCode, GhosttyStylesError, classify_exception


def export_theme(builder: ThemeBuilder, themes_dir: Path) -> Path:
    """Write ``<slug>.conf`` into ``themes_dir`` and clear the unsaved flag."""
    slug = builder.slug_from_title()
    if not slug:
        raise GhosttyStylesError(
            ErrorCode.INVALID_INPUT,
            message="Theme title is empty; cannot generate a file name",
        )
    path = themes_dir / f"{slug}.conf"
    try:
        themes_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(f"# Theme: {builder.title}\n{builder.build_raw_config()}\n", encoding="utf-8")
    except OSError as exc:
        raise classify_exception(exc, path) from exc
    builder.unsaved = False
    return path


def apply_built_theme(builder: ThemeBuilder, writer: GhosttyConfigWriter) -> Path:
    record = builder.build_theme_record()
    return writer.apply_theme(record.title, record.raw_config)
