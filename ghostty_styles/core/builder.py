"""Theme creation working set: 22 editable colors plus editor state."""

from __future__ import annotations

import re
from enum import Enum

from ghostty_styles.core.color import BLACK, HslColor
from ghostty_styles.core.palette import (
    PALETTE_SIZE,
    GenAlgorithm,
    derive_ui_colors,
    generate_palette,
    is_dark_background,
    selection_background,
)
from ghostty_styles.core.theme_record import UI_COLOR_KEYS, ThemeRecord, render_raw_config

PALETTE_NAMES: tuple[str, ...] = (
    "Black",
    "Red",
    "Green",
    "Yellow",
    "Blue",
    "Magenta",
    "Cyan",
    "White",
    "Bright Black",
    "Bright Red",
    "Bright Green",
    "Bright Yellow",
    "Bright Blue",
    "Bright Magenta",
    "Bright Cyan",
    "Bright White",
)

_UI_LABELS: tuple[str, ...] = (
    "Background",
    "Foreground",
    "Cursor Color",
    "Cursor Text",
    "Selection BG",
    "Selection FG",
)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

DEFAULT_BACKGROUND = HslColor(220.0, 15.0, 13.0)
DEFAULT_FOREGROUND = HslColor(220.0, 10.0, 85.0)


class ColorField(Enum):
    """The 22 color slots, valued by their position in the working set."""

    BACKGROUND = 0
    FOREGROUND = 1
    CURSOR_COLOR = 2
    CURSOR_TEXT = 3
    SELECTION_BACKGROUND = 4
    SELECTION_FOREGROUND = 5
    PALETTE_0 = 6
    PALETTE_1 = 7
    PALETTE_2 = 8
    PALETTE_3 = 9
    PALETTE_4 = 10
    PALETTE_5 = 11
    PALETTE_6 = 12
    PALETTE_7 = 13
    PALETTE_8 = 14
    PALETTE_9 = 15
    PALETTE_10 = 16
    PALETTE_11 = 17
    PALETTE_12 = 18
    PALETTE_13 = 19
    PALETTE_14 = 20
    PALETTE_15 = 21

    @classmethod
    def palette(cls, index: int) -> ColorField:
        if not 0 <= index < PALETTE_SIZE:
            raise ValueError(f"palette index out of range: {index}")
        return cls(len(UI_COLOR_KEYS) + index)

    @property
    def is_palette(self) -> bool:
        return self.value >= len(UI_COLOR_KEYS)

    @property
    def palette_index(self) -> int | None:
        if not self.is_palette:
            return None
        return self.value - len(UI_COLOR_KEYS)

    @property
    def label(self) -> str:
        index = self.palette_index
        if index is None:
            return _UI_LABELS[self.value]
        return f"Palette {index:>2} ({PALETTE_NAMES[index]})"


FIELD_COUNT = len(ColorField)


class SliderFocus(Enum):
    HUE = "hue"
    SATURATION = "saturation"
    LIGHTNESS = "lightness"

    def next(self) -> SliderFocus:
        order = list(SliderFocus)
        return order[(order.index(self) + 1) % len(order)]


class PickerMode(Enum):
    SLIDER = "slider"
    HEX_INPUT = "hex"


def slug_from_title(title: str) -> str:
    """Lowercase, collapse runs of non-ASCII-alphanumerics to ``-``, trim dashes."""
    return _NON_ALNUM_RE.sub("-", title.lower()).strip("-")


class ThemeBuilder:
    """Mutable working set behind the theme creator.

    ``colors`` is always 22 entries long and aligned with ``ColorField``.
    Editing the background or foreground re-derives the cursor and selection
    colors; editing a palette slot marks the palette as needing regeneration.
    """

    def __init__(
        self,
        title: str,
        colors: list[HslColor],
        *,
        algorithm: GenAlgorithm = GenAlgorithm.HUE_ROTATION,
        forked_from: str | None = None,
    ) -> None:
        if len(colors) != FIELD_COUNT:
            raise ValueError(f"expected {FIELD_COUNT} colors, got {len(colors)}")
        self.title = title
        self.colors: list[HslColor] = list(colors)
        self.algorithm = algorithm
        self.forked_from = forked_from
        self.field_index = 0
        self.editing = False
        self.picker_mode = PickerMode.SLIDER
        self.slider_focus = SliderFocus.HUE
        self.live_preview = False
        self.palette_dirty = False
        self.unsaved = False
        self.hex_input = ""
        self.sync_hex_from_color()

    @classmethod
    def new(cls, title: str) -> ThemeBuilder:
        """Start from a dark blue-gray default with a generated palette."""
        bg, fg = DEFAULT_BACKGROUND, DEFAULT_FOREGROUND
        colors = [bg, fg, *derive_ui_colors(bg, fg), *([BLACK] * PALETTE_SIZE)]
        builder = cls(title, colors)
        builder.regenerate_palette()
        builder.unsaved = False
        builder.palette_dirty = False
        return builder

    @classmethod
    def from_record(cls, record: ThemeRecord) -> ThemeBuilder:
        """Fork an existing theme; unparsable colors fall back instead of failing."""
        bg = HslColor.from_hex(record.background) or BLACK
        fg = HslColor.from_hex(record.foreground) or BLACK

        def parse(value: str | None, fallback: HslColor) -> HslColor:
            if value is None:
                return fallback
            return HslColor.from_hex(value) or BLACK

        colors = [
            bg,
            fg,
            parse(record.cursor_color, fg),
            parse(record.cursor_text, bg),
            parse(record.selection_bg, selection_background(bg)),
            parse(record.selection_fg, fg),
        ]
        for index in range(PALETTE_SIZE):
            value = record.palette[index] if index < len(record.palette) else None
            colors.append(parse(value, BLACK))

        return cls(record.title, colors, forked_from=record.slug)

    # -- queries --

    @property
    def is_dark(self) -> bool:
        return is_dark_background(self.colors[ColorField.BACKGROUND.value])

    @property
    def current_field(self) -> ColorField:
        return ColorField(min(self.field_index, FIELD_COUNT - 1))

    @property
    def current_color(self) -> HslColor:
        return self.colors[self.current_field.value]

    def color(self, field: ColorField) -> HslColor:
        return self.colors[field.value]

    def palette_colors(self) -> list[HslColor]:
        return self.colors[len(UI_COLOR_KEYS):]

    # -- navigation --

    def select_next_field(self) -> ColorField:
        self.field_index = (self.field_index + 1) % FIELD_COUNT
        self.sync_hex_from_color()
        return self.current_field

    def select_previous_field(self) -> ColorField:
        self.field_index = (self.field_index - 1) % FIELD_COUNT
        self.sync_hex_from_color()
        return self.current_field

    def cycle_slider_focus(self) -> SliderFocus:
        self.slider_focus = self.slider_focus.next()
        return self.slider_focus

    def toggle_picker_mode(self) -> PickerMode:
        if self.picker_mode is PickerMode.SLIDER:
            self.picker_mode = PickerMode.HEX_INPUT
        else:
            self.picker_mode = PickerMode.SLIDER
        self.sync_hex_from_color()
        return self.picker_mode

    def toggle_live_preview(self) -> bool:
        self.live_preview = not self.live_preview
        return self.live_preview

    # -- editing --

    def set_field_color(self, field: ColorField, color: HslColor) -> None:
        self.colors[field.value] = color
        self.unsaved = True
        if field.is_palette:
            self.palette_dirty = True
        if field in (ColorField.BACKGROUND, ColorField.FOREGROUND):
            self.auto_derive()

    def set_current_color(self, color: HslColor) -> None:
        self.set_field_color(self.current_field, color)

    def adjust_slider(self, delta: float) -> HslColor:
        color = self.current_color
        if self.slider_focus is SliderFocus.HUE:
            color = color.with_hue(color.hue + delta)
        elif self.slider_focus is SliderFocus.SATURATION:
            color = color.with_saturation(color.saturation + delta)
        else:
            color = color.with_lightness(color.lightness + delta)
        self.set_current_color(color)
        self.sync_hex_from_color()
        return color

    def commit_hex_input(self) -> bool:
        """Apply ``hex_input`` to the current field; invalid input changes nothing."""
        color = HslColor.from_hex(self.hex_input.strip())
        if color is None:
            return False
        self.set_current_color(color)
        return True

    def sync_hex_from_color(self) -> None:
        self.hex_input = self.current_color.to_hex()

    def auto_derive(self) -> None:
        bg = self.colors[ColorField.BACKGROUND.value]
        fg = self.colors[ColorField.FOREGROUND.value]
        self.colors[ColorField.CURSOR_COLOR.value : ColorField.SELECTION_FOREGROUND.value + 1] = list(
            derive_ui_colors(bg, fg)
        )
        self.unsaved = True

    def regenerate_palette(self) -> None:
        palette = generate_palette(
            self.colors[ColorField.BACKGROUND.value],
            self.colors[ColorField.FOREGROUND.value],
            self.algorithm,
        )
        self.colors[len(UI_COLOR_KEYS):] = palette
        self.palette_dirty = False
        self.unsaved = True

    def toggle_algorithm(self) -> GenAlgorithm:
        """Switch algorithms; colors stay untouched until ``regenerate_palette``."""
        self.algorithm = self.algorithm.toggle()
        return self.algorithm

    # -- output --

    def slug_from_title(self) -> str:
        return slug_from_title(self.title)

    def build_raw_config(self) -> str:
        return render_raw_config(self.colors)

    def build_theme_record(self) -> ThemeRecord:
        hexes = [color.to_hex() for color in self.colors]
        return ThemeRecord(
            slug=self.slug_from_title(),
            title=self.title,
            description=f"Forked from {self.forked_from}" if self.forked_from else None,
            raw_config=self.build_raw_config(),
            background=hexes[ColorField.BACKGROUND.value],
            foreground=hexes[ColorField.FOREGROUND.value],
            cursor_color=hexes[ColorField.CURSOR_COLOR.value],
            cursor_text=hexes[ColorField.CURSOR_TEXT.value],
            selection_bg=hexes[ColorField.SELECTION_BACKGROUND.value],
            selection_fg=hexes[ColorField.SELECTION_FOREGROUND.value],
            palette=tuple(hexes[len(UI_COLOR_KEYS):]),
            is_dark=self.is_dark,
        )
