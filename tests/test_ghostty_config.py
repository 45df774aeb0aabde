"""Tests for ghostty_styles.core.ghostty_config."""

from __future__ import annotations

from pathlib import Path

import pytest

from ghostty_styles.core import ghostty_config
from ghostty_styles.core.ghostty_config import GhosttyConfigWriter, default_config_path, strip_color_lines
from ghostty_styles.errors import ErrorCode, GhosttyStylesError

EXISTING = """\
# my settings
font-family = Iosevka
background = #000000
palette = 0=#111111

window-padding-x = 4
cursor-style = block
"""


def test_strip_color_lines_keeps_other_settings():
    kept = strip_color_lines(EXISTING)
    assert kept == ["# my settings", "font-family = Iosevka", "", "window-padding-x = 4"]


def test_default_config_path_linux(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(ghostty_config.sys, "platform", "linux")
    assert default_config_path(home=tmp_path) == tmp_path / ".config" / "ghostty" / "config"
    assert default_config_path(home=tmp_path, config_home=tmp_path / "xdg") == tmp_path / "xdg" / "ghostty" / "config"


def test_default_config_path_macos(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(ghostty_config.sys, "platform", "darwin")
    assert default_config_path(home=tmp_path) == (
        tmp_path / "Library" / "Application Support" / "com.mitchellh.ghostty" / "config"
    )


class TestGhosttyConfigWriter:
    def test_creates_missing_config(self, tmp_path: Path):
        path = tmp_path / "ghostty" / "config"
        writer = GhosttyConfigWriter(path)

        assert writer.apply_theme("Nord", "background = #2e3440") == path
        assert path.read_text(encoding="utf-8") == "\n# Theme: Nord\nbackground = #2e3440\n"
        assert not writer.backup_path.exists()

    def test_replaces_colors_and_keeps_backup(self, tmp_path: Path):
        path = tmp_path / "config"
        path.write_text(EXISTING, encoding="utf-8")
        writer = GhosttyConfigWriter(path)

        writer.apply_theme("Nord", "background = #2e3440\nforeground = #d8dee9")

        text = path.read_text(encoding="utf-8")
        assert "font-family = Iosevka" in text
        assert "#000000" not in text
        assert "cursor-style" not in text
        assert text.endswith("# Theme: Nord\nbackground = #2e3440\nforeground = #d8dee9\n")
        assert writer.backup_path == tmp_path / "config.bak"
        assert writer.backup_path.read_text(encoding="utf-8") == EXISTING

    def test_reapplying_replaces_previous_theme(self, tmp_path: Path):
        path = tmp_path / "config"
        writer = GhosttyConfigWriter(path)
        writer.apply_theme("One", "background = #111111")
        writer.apply_theme("Two", "background = #222222")

        text = path.read_text(encoding="utf-8")
        assert "#111111" not in text
        assert text.count("background =") == 1

    def test_write_failure(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        writer = GhosttyConfigWriter(blocker / "config")
        with pytest.raises(GhosttyStylesError) as exc_info:
            writer.apply_theme("Nord", "background = #2e3440")
        assert exc_info.value.code is ErrorCode.APPLY_FAILED
