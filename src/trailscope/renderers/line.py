"""
Oscilloscope-style line renderer for waveform data.

Samples are spread across the width of ``bounds`` and drawn as one
polyline around the vertical centre, ``y = cy - (b - 128) * (height / 3) / 128``.
Buffers longer than ``max_points`` are decimated by a fixed stride.

The renderer tracks a slowly decaying amplitude peak (mean absolute
deviation / 128). A frame whose amplitude beats the peak, or which
follows a flash, is drawn with ``flash_style``.
"""

import numpy as np
import pygame

from trailscope.canvas import Canvas
from trailscope.renderers.base import WAVEFORM_MIDPOINT, Renderer
from trailscope.style import ColorCycler, Style


class LineRenderer(Renderer):
    def __init__(
        self,
        style: Style,
        flash_style: Style,
        cycle_color: bool = False,
        max_points: int = 512,
        peak_decay: float = 0.99,
    ):
        """
        Args:
            style: Regular stroke style.
            flash_style: Stroke style used on amplitude peaks and flashes.
            cycle_color: Cycle the regular stroke color every frame.
            max_points: Upper bound on polyline vertices.
            peak_decay: Per-frame multiplier applied to the tracked peak.
        """
        super().__init__()
        self.style = style
        self.flash_style = flash_style
        self.max_points = max(2, max_points)
        self.peak_decay = peak_decay
        self.amplitude = 0.0
        self._cycler = ColorCycler() if cycle_color else None

    def on_render_waveform(
        self, canvas: Canvas, samples: np.ndarray, bounds: pygame.Rect
    ) -> None:
        if len(samples) < 2:
            return

        stride = -(-len(samples) // self.max_points)
        values = samples[::stride].astype(np.float32) - WAVEFORM_MIDPOINT
        if len(values) < 2:
            return

        xs = bounds.left + np.linspace(0, bounds.width, len(values))
        ys = bounds.top + bounds.height / 2 - values * (bounds.height / 3) / WAVEFORM_MIDPOINT
        points = list(zip(xs.tolist(), ys.tolist()))

        amp = float(np.abs(values).mean()) / WAVEFORM_MIDPOINT
        flashed = self.consume_flash()
        if amp > self.amplitude or flashed:
            self.amplitude = max(self.amplitude, amp)
            canvas.draw_polyline(points, self.flash_style)
        else:
            self.amplitude *= self.peak_decay
            style = self._cycler.next_style(self.style) if self._cycler else self.style
            canvas.draw_polyline(points, style)
