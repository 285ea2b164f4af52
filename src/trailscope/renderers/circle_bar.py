"""
Radial bar renderer for spectrum data.

Uses the same segmentation as the bar graph. Bar ``i`` points at angle
``2 * pi * i / divisions + rotation`` and runs from ``base_radius``
outward by ``db / MAX_DB`` of the space left before the edge of
``bounds``. ``spin`` advances ``rotation`` every rendered frame and
``cycle_color`` derives a fresh color each frame.
"""

import math

import numpy as np
import pygame

from trailscope.canvas import Canvas
from trailscope.renderers.base import MAX_DB, Renderer, spectrum_db, spectrum_step
from trailscope.style import ColorCycler, Style


class CircleBarRenderer(Renderer):
    def __init__(
        self,
        divisions: int,
        style: Style,
        cycle_color: bool = False,
        spin: bool = True,
        base_radius: float = 0.4,
        spin_step: float = 0.28 / 32,
    ):
        """
        Args:
            divisions: Number of radial bars.
            style: Stroke style.
            cycle_color: Cycle the stroke color every frame.
            spin: Rotate the whole ring every frame.
            base_radius: Inner radius as a fraction of half the shorter side.
            spin_step: Radians added to the rotation per frame.
        """
        super().__init__()
        self.divisions = divisions
        self.style = style
        self.spin = spin
        self.base_radius = base_radius
        self.spin_step = spin_step
        self.rotation = 0.0
        self._cycler = ColorCycler() if cycle_color else None

    def on_render_spectrum(
        self, canvas: Canvas, samples: np.ndarray, bounds: pygame.Rect
    ) -> None:
        step = spectrum_step(len(samples), self.divisions)
        if step == 0:
            return

        style = self._cycler.next_style(self.style) if self._cycler else self.style
        cx, cy = bounds.center
        half = min(bounds.width, bounds.height) / 2
        inner = half * self.base_radius
        reach = half - inner

        segments = []
        for i in range(self.divisions):
            angle = 2 * math.pi * i / self.divisions + self.rotation
            outer = inner + spectrum_db(samples, i * step) / MAX_DB * reach
            cos_a, sin_a = math.cos(angle), math.sin(angle)
            segments.append((
                (cx + inner * cos_a, cy + inner * sin_a),
                (cx + outer * cos_a, cy + outer * sin_a),
            ))
        canvas.draw_lines(segments, style)

        if self.spin:
            self.rotation = (self.rotation + self.spin_step) % (2 * math.pi)

    def __repr__(self) -> str:
        return f"CircleBarRenderer(divisions={self.divisions}, spin={self.spin})"
