"""Tests for ghostty_styles.core.exporter and ghostty_styles.core.preview."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from ghostty_styles.core.builder import ThemeBuilder
from ghostty_styles.core.exporter import apply_built_theme, export_theme
from ghostty_styles.core.ghostty_config import GhosttyConfigWriter
from ghostty_styles.core.preview import apply_osc_preview, osc_sequences, reset_sequences, restore_colors
from ghostty_styles.core.theme_record import ThemeRecord
from ghostty_styles.errors import ErrorCode, GhosttyStylesError


class TestExport:
    def test_writes_slug_conf(self, tmp_path: Path):
        builder = ThemeBuilder.new("My Theme")
        builder.unsaved = True

        path = export_theme(builder, tmp_path / "themes")

        assert path == tmp_path / "themes" / "my-theme.conf"
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "# Theme: My Theme"
        assert len(lines) == 23
        assert builder.unsaved is False

    def test_exported_file_parses_back(self, tmp_path: Path):
        builder = ThemeBuilder.new("Round Trip")
        path = export_theme(builder, tmp_path)
        record = ThemeRecord.from_config_text(path.read_text(encoding="utf-8"), slug="round-trip")
        assert record.title == "Round Trip"
        assert record.background == builder.build_theme_record().background
        assert len(record.palette) == 16

    def test_empty_slug(self, tmp_path: Path):
        with pytest.raises(GhosttyStylesError) as exc_info:
            export_theme(ThemeBuilder.new("???"), tmp_path)
        assert exc_info.value.code is ErrorCode.INVALID_INPUT

    def test_apply_built_theme(self, tmp_path: Path):
        builder = ThemeBuilder.new("Applied")
        config = tmp_path / "config"
        assert apply_built_theme(builder, GhosttyConfigWriter(config)) == config
        text = config.read_text(encoding="utf-8")
        assert "# Theme: Applied" in text
        assert builder.build_raw_config() in text


class TestPreview:
    RECORD = ThemeRecord(
        slug="t",
        title="T",
        raw_config="",
        background="#1a1b26",
        foreground="#c0caf5",
        cursor_color="#ff9e64",
        palette=("#15161e", "", "#9ece6a"),
    )

    def test_osc_sequences(self):
        seq = osc_sequences(self.RECORD)
        assert seq.startswith("\x1b]10;#c0caf5\x07\x1b]11;#1a1b26\x07")
        assert "\x1b]12;#ff9e64\x07" in seq
        assert "\x1b]4;0;#15161e\x07" in seq
        assert "\x1b]4;2;#9ece6a\x07" in seq
        assert "\x1b]4;1;" not in seq

    def test_no_cursor_sequence_without_cursor_color(self):
        record = ThemeRecord(slug="t", title="T", raw_config="", background="#000000", foreground="#ffffff")
        assert "\x1b]12;" not in osc_sequences(record)

    def test_reset(self):
        assert reset_sequences() == "\x1b]110\x07\x1b]111\x07\x1b]112\x07\x1b]104\x07"

    def test_stream_helpers(self):
        stream = io.StringIO()
        apply_osc_preview(stream, self.RECORD)
        restore_colors(stream)
        assert stream.getvalue() == osc_sequences(self.RECORD) + reset_sequences()
