"""OSC escape sequences for live terminal color preview."""

from __future__ import annotations

from typing import TextIO

from ghostty_styles.core.theme_record import ThemeRecord

_BEL = "\x07"
_OSC = "\x1b]"


def osc_sequences(record: ThemeRecord) -> str:
    """Sequences that recolor the running terminal without touching config."""
    parts = [
        f"{_OSC}10;{record.foreground}{_BEL}",
        f"{_OSC}11;{record.background}{_BEL}",
    ]
    if record.cursor_color:
        parts.append(f"{_OSC}12;{record.cursor_color}{_BEL}")
    for index, color in enumerate(record.palette):
        if color:
            parts.append(f"{_OSC}4;{index};{color}{_BEL}")
    return "".join(parts)


def reset_sequences() -> str:
    # 110/111/112 reset fg/bg/cursor, 104 resets the whole palette.
    return "".join(f"{_OSC}{code}{_BEL}" for code in (110, 111, 112, 104))


def apply_osc_preview(stream: TextIO, record: ThemeRecord) -> None:
    stream.write(osc_sequences(record))
    stream.flush()


def restore_colors(stream: TextIO) -> None:
    stream.write(reset_sequences())
    stream.flush()
