"""ANSI palette generation from a background/foreground pair."""

from __future__ import annotations

from enum import Enum

from ghostty_styles.core.color import HslColor

PALETTE_SIZE = 16

# Canonical ANSI accent order: red, green, yellow, blue, magenta, cyan.
HUE_ROTATION_OFFSETS: tuple[float, ...] = (0.0, 120.0, 60.0, 240.0, 300.0, 180.0)
BASE16_HUES: tuple[float, ...] = (0.0, 120.0, 60.0, 210.0, 300.0, 180.0)


class GenAlgorithm(Enum):
    """Algorithm used to fill the 16 ANSI slots."""

    HUE_ROTATION = "hue-rotation"
    BASE16 = "base16"

    def toggle(self) -> GenAlgorithm:
        if self is GenAlgorithm.HUE_ROTATION:
            return GenAlgorithm.BASE16
        return GenAlgorithm.HUE_ROTATION

    @property
    def label(self) -> str:
        if self is GenAlgorithm.HUE_ROTATION:
            return "Hue Rotation"
        return "Base16"


def is_dark_background(background: HslColor) -> bool:
    return background.lightness < 50.0


def selection_background(background: HslColor) -> HslColor:
    """Background with saturation capped at 30 and lightness raised by 15."""
    return HslColor(
        background.hue,
        min(background.saturation, 30.0),
        min(background.lightness + 15.0, 100.0),
    )


def derive_ui_colors(
    background: HslColor,
    foreground: HslColor,
) -> tuple[HslColor, HslColor, HslColor, HslColor]:
    """Return (cursor-color, cursor-text, selection-background, selection-foreground)."""
    return foreground, background, selection_background(background), foreground


def generate_palette(
    background: HslColor,
    foreground: HslColor,
    algorithm: GenAlgorithm = GenAlgorithm.HUE_ROTATION,
) -> list[HslColor]:
    """Build the 16 ANSI colors for ``algorithm``.

    Slots 0/7/8/15 come from the background and foreground; slots 1-6 and
    9-14 are the six accents in normal and bright variants.
    """
    if algorithm is GenAlgorithm.BASE16:
        return _base16(background, foreground)
    return _hue_rotation(background, foreground)


def _hue_rotation(bg: HslColor, fg: HslColor) -> list[HslColor]:
    dark = is_dark_background(bg)
    normal_sat, normal_light = 60.0, (60.0 if dark else 40.0)
    bright_sat, bright_light = 70.0, (72.0 if dark else 50.0)

    hues = [(fg.hue + offset) % 360.0 for offset in HUE_ROTATION_OFFSETS]
    return _assemble(
        black=HslColor(bg.hue, bg.saturation, max(bg.lightness * 0.5, 3.0)),
        white=HslColor(fg.hue, min(fg.saturation, 15.0), min(fg.lightness, 80.0)),
        bright_black=HslColor(bg.hue, bg.saturation, min(bg.lightness + 20.0, 50.0)),
        bright_white=HslColor(fg.hue, min(fg.saturation, 10.0), min(max(fg.lightness, 90.0), 100.0)),
        normal=[HslColor(h, normal_sat, normal_light) for h in hues],
        bright=[HslColor(h, bright_sat, bright_light) for h in hues],
    )


def _base16(bg: HslColor, fg: HslColor) -> list[HslColor]:
    dark = is_dark_background(bg)
    normal_sat, normal_light = 55.0, (55.0 if dark else 40.0)
    bright_sat, bright_light = 65.0, (68.0 if dark else 50.0)

    return _assemble(
        black=HslColor(bg.hue, min(bg.saturation, 5.0), min(bg.lightness + 5.0, 100.0)),
        white=HslColor(fg.hue, min(fg.saturation, 5.0), max(fg.lightness - 10.0, 0.0)),
        bright_black=HslColor(bg.hue, min(bg.saturation, 5.0), min(bg.lightness + 25.0, 100.0)),
        bright_white=HslColor(fg.hue, min(fg.saturation, 5.0), fg.lightness),
        normal=[HslColor(h, normal_sat, normal_light) for h in BASE16_HUES],
        bright=[HslColor(h, bright_sat, bright_light) for h in BASE16_HUES],
    )


def _assemble(
    *,
    black: HslColor,
    white: HslColor,
    bright_black: HslColor,
    bright_white: HslColor,
    normal: list[HslColor],
    bright: list[HslColor],
) -> list[HslColor]:
    return [black, *normal, white, bright_black, *bright, bright_white]
