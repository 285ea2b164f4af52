"""
Pulsing circle renderer for waveform data.

The radius follows the waveform's peak deviation from silence,
``peak = max(|b - 128|) / 128``, on top of a slow sinusoidal pulse.
A nested circle is drawn at half the radius. An armed flash enlarges
the circles for one frame.
"""

import math

import numpy as np
import pygame

from trailscope.canvas import Canvas
from trailscope.renderers.base import WAVEFORM_MIDPOINT, Renderer
from trailscope.style import ColorCycler, Style


class CircleRenderer(Renderer):
    def __init__(
        self,
        style: Style,
        cycle_color: bool = False,
        aggressive: float = 0.33,
        pulse_step: float = 0.04,
        flash_boost: float = 1.25,
    ):
        super().__init__()
        self.style = style
        self.aggressive = aggressive
        self.pulse_step = pulse_step
        self.flash_boost = flash_boost
        self.modulation = 0.0
        self._cycler = ColorCycler() if cycle_color else None

    def on_render_waveform(
        self, canvas: Canvas, samples: np.ndarray, bounds: pygame.Rect
    ) -> None:
        deviation = np.abs(samples.astype(np.int16) - WAVEFORM_MIDPOINT)
        peak = min(1.0, float(deviation.max()) / WAVEFORM_MIDPOINT)

        half = min(bounds.width, bounds.height) / 2
        pulse = (1.2 + math.sin(self.modulation)) / 2.2
        radius = half * ((1 - self.aggressive) + self.aggressive * peak) * pulse
        if self.consume_flash():
            radius *= self.flash_boost
        self.modulation += self.pulse_step

        style = self._cycler.next_style(self.style) if self._cycler else self.style
        center = bounds.center
        canvas.draw_circle(center, radius, style)
        canvas.draw_circle(center, radius / 2, style)
