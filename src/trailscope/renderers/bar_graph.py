"""
Bar graph renderer.

The buffer is split into ``divisions`` equal segments
(``len(buffer) // divisions`` samples each) and one stroked bar is drawn
per segment, centred in its column of ``bounds``.

Waveform (uint8): the first sample ``b`` of a segment deflects the bar
from the vertical centre by ``d = (b - 128) * (height / 2) / 128``.
Bars extend upward for positive ``d``; ``top=True`` mirrors them downward.

Spectrum (int8 Re/Im pairs): the segment width is rounded down to an
even count so every segment starts on a Re byte. The pair there gives
``db = 10 * log10(re^2 + im^2)``, drawn as a bar of length
``db / MAX_DB * height`` growing from the bottom edge, or from the top
edge when ``top=True``.
"""

import numpy as np
import pygame

from trailscope.canvas import Canvas
from trailscope.renderers.base import (
    MAX_DB,
    WAVEFORM_MIDPOINT,
    Renderer,
    segment_width,
    spectrum_step,
    spectrum_db,
)
from trailscope.style import Style


class BarGraphRenderer(Renderer):
    def __init__(self, divisions: int, style: Style, top: bool = False):
        """
        Args:
            divisions: Number of bars.
            style: Stroke style for the bars.
            top: Anchor spectrum bars to the top edge and flip waveform bars.
        """
        super().__init__()
        self.divisions = divisions
        self.style = style
        self.top = top

    def _column_x(self, bounds: pygame.Rect, index: int) -> float:
        return bounds.left + (index + 0.5) * bounds.width / self.divisions

    def on_render_waveform(
        self, canvas: Canvas, samples: np.ndarray, bounds: pygame.Rect
    ) -> None:
        step = segment_width(len(samples), self.divisions)
        if step == 0:
            return

        center = bounds.top + bounds.height / 2
        scale = (bounds.height / 2) / WAVEFORM_MIDPOINT
        direction = 1 if self.top else -1
        segments = []
        for i in range(self.divisions):
            deflection = (int(samples[i * step]) - WAVEFORM_MIDPOINT) * scale
            x = self._column_x(bounds, i)
            segments.append(((x, center), (x, center + direction * deflection)))
        canvas.draw_lines(segments, self.style)

    def on_render_spectrum(
        self, canvas: Canvas, samples: np.ndarray, bounds: pygame.Rect
    ) -> None:
        step = spectrum_step(len(samples), self.divisions)
        if step == 0:
            return

        segments = []
        for i in range(self.divisions):
            length = spectrum_db(samples, i * step) / MAX_DB * bounds.height
            x = self._column_x(bounds, i)
            if self.top:
                segments.append(((x, bounds.top), (x, bounds.top + length)))
            else:
                segments.append(((x, bounds.bottom), (x, bounds.bottom - length)))
        canvas.draw_lines(segments, self.style)

    def __repr__(self) -> str:
        return f"BarGraphRenderer(divisions={self.divisions}, top={self.top})"
