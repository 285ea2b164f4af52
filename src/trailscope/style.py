"""
Immutable stroke/paint styles shared by renderers and the compositor.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum


class BlendMode(Enum):
    SRC_OVER = "src_over"
    MULTIPLY = "multiply"
    LIGHTEN = "lighten"
    ADD = "add"


def argb(a: int, r: int, g: int, b: int) -> int:
    """Pack 0-255 channels into a 32-bit ARGB integer."""
    for channel in (a, r, g, b):
        if not 0 <= channel <= 255:
            raise ValueError(f"Color channel out of range: {channel}")
    return (a << 24) | (r << 16) | (g << 8) | b


def unpack_argb(color: int) -> tuple[int, int, int, int]:
    """Split a 32-bit ARGB integer into (a, r, g, b)."""
    return (color >> 24) & 0xFF, (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


@dataclass(frozen=True)
class Style:
    """Per-draw-call paint settings."""

    color: int = 0xFFFFFFFF
    stroke_width: float = 1.0
    anti_alias: bool = True
    blend: BlendMode = BlendMode.SRC_OVER
    fill: bool = False

    @property
    def alpha(self) -> int:
        return (self.color >> 24) & 0xFF

    @property
    def rgba(self) -> tuple[int, int, int, int]:
        """Color as a pygame-friendly (r, g, b, a) tuple."""
        a, r, g, b = unpack_argb(self.color)
        return (r, g, b, a)

    @property
    def width_px(self) -> int:
        return max(1, int(round(self.stroke_width)))

    def with_color(self, color: int) -> "Style":
        return replace(self, color=color)


class ColorCycler:
    """
    Sinusoidal RGB cycle used by renderers with ``cycle_color`` enabled.

    Each call to :meth:`next_style` returns a new style and advances the phase;
    the base style is never mutated.
    """

    def __init__(self, alpha: int = 128, step: float = 0.03):
        self.alpha = alpha
        self.step = step
        self.counter = 0.0

    def next_style(self, base: Style) -> Style:
        r = min(255, int(math.floor(128 * (math.sin(self.counter) + 1))))
        g = min(255, int(math.floor(128 * (math.sin(self.counter + 2) + 1))))
        b = min(255, int(math.floor(128 * (math.sin(self.counter + 4) + 1))))
        self.counter += self.step
        return base.with_color(argb(self.alpha, r, g, b))

