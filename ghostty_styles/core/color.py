"""HSL color value type and RGB/hex conversions."""

from __future__ import annotations

import math
from dataclasses import dataclass

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _round_channel(value: float) -> int:
    """Round half away from zero into 0..255."""
    return max(0, min(255, math.floor(value * 255.0 + 0.5)))


def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0.0:
        t += 1.0
    if t > 1.0:
        t -= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 1.0 / 2.0:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


@dataclass(frozen=True, slots=True)
class HslColor:
    """A color in HSL space.

    ``hue`` is kept in ``[0, 360)`` and ``saturation``/``lightness`` in
    ``[0, 100]``; out-of-range inputs are wrapped or clamped on construction.
    """

    hue: float
    saturation: float
    lightness: float

    def __post_init__(self) -> None:
        hue = float(self.hue) % 360.0
        if hue >= 360.0:
            hue = 0.0
        object.__setattr__(self, "hue", hue)
        object.__setattr__(self, "saturation", min(max(float(self.saturation), 0.0), 100.0))
        object.__setattr__(self, "lightness", min(max(float(self.lightness), 0.0), 100.0))

    def with_hue(self, hue: float) -> HslColor:
        return HslColor(hue, self.saturation, self.lightness)

    def with_saturation(self, saturation: float) -> HslColor:
        return HslColor(self.hue, saturation, self.lightness)

    def with_lightness(self, lightness: float) -> HslColor:
        return HslColor(self.hue, self.saturation, lightness)

    def to_rgb(self) -> tuple[int, int, int]:
        """Convert to an ``(r, g, b)`` tuple with channels in 0..255."""
        h = self.hue / 360.0
        s = self.saturation / 100.0
        lum = self.lightness / 100.0

        if s == 0.0:
            v = _round_channel(lum)
            return v, v, v

        q = lum * (1.0 + s) if lum < 0.5 else lum + s - lum * s
        p = 2.0 * lum - q

        return (
            _round_channel(_hue_to_rgb(p, q, h + 1.0 / 3.0)),
            _round_channel(_hue_to_rgb(p, q, h)),
            _round_channel(_hue_to_rgb(p, q, h - 1.0 / 3.0)),
        )

    def to_hex(self) -> str:
        """Lowercase ``#rrggbb``."""
        r, g, b = self.to_rgb()
        return f"#{r:02x}{g:02x}{b:02x}"

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> HslColor:
        r_f = r / 255.0
        g_f = g / 255.0
        b_f = b / 255.0

        max_c = max(r_f, g_f, b_f)
        min_c = min(r_f, g_f, b_f)
        delta = max_c - min_c
        lum = (max_c + min_c) / 2.0

        if delta == 0.0:
            return cls(0.0, 0.0, lum * 100.0)

        if lum < 0.5:
            s = delta / (max_c + min_c)
        else:
            s = delta / (2.0 - max_c - min_c)

        # Red wins ties, then green, then blue.
        if max_c == r_f:
            h = (g_f - b_f) / delta
            if h < 0.0:
                h += 6.0
        elif max_c == g_f:
            h = (b_f - r_f) / delta + 2.0
        else:
            h = (r_f - g_f) / delta + 4.0

        return cls(h * 60.0, s * 100.0, lum * 100.0)

    @classmethod
    def from_hex(cls, value: str) -> HslColor | None:
        """Parse ``#rrggbb`` or ``rrggbb``; returns None for anything else."""
        if not isinstance(value, str):
            return None
        digits = value[1:] if value.startswith("#") else value
        if len(digits) != 6 or any(ch not in _HEX_DIGITS for ch in digits):
            return None
        return cls.from_rgb(
            int(digits[0:2], 16),
            int(digits[2:4], 16),
            int(digits[4:6], 16),
        )


BLACK = HslColor(0.0, 0.0, 0.0)
