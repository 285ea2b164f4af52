"""
Abstract renderer contract.

A renderer turns one snapshot into primitive draw calls against a canvas.
It opts out of a data kind simply by not overriding that kind's hook.
"""

import abc
import math

import numpy as np
import pygame

from trailscope.canvas import Canvas
from trailscope.snapshot import SampleKind, Snapshot

WAVEFORM_MIDPOINT = 128
# Largest magnitude an int8 (Re, Im) pair can reach: 10 * log10(2 * 128^2).
MAX_DB = 10 * math.log10(2 * 128 * 128)


def segment_width(length: int, divisions: int) -> int:
    """Samples per segment; 0 means the buffer is too short to segment."""
    if divisions <= 0:
        return 0
    return length // divisions


def spectrum_step(length: int, divisions: int) -> int:
    """Like :func:`segment_width`, rounded down to keep (Re, Im) pairs aligned."""
    return segment_width(length, divisions) & ~1


def spectrum_db(samples: np.ndarray, index: int) -> float:
    """Decibel magnitude of the (Re, Im) pair starting at ``index``."""
    if index + 1 >= len(samples):
        return 0.0
    re = int(samples[index])
    im = int(samples[index + 1])
    magnitude = re * re + im * im
    if magnitude <= 0:
        return 0.0
    return 10 * math.log10(magnitude)


class Renderer(abc.ABC):
    """
    Base class for all visualization renderers.

    Subclasses override :meth:`on_render_waveform` and/or
    :meth:`on_render_spectrum`. Both receive a non-empty numpy view of the
    buffer; empty and absent buffers never reach them.
    """

    def __init__(self):
        self._flash_armed = False

    def render(self, canvas: Canvas, snapshot: Snapshot, bounds: pygame.Rect) -> None:
        if len(snapshot) == 0 or bounds.width <= 0 or bounds.height <= 0:
            return
        samples = snapshot.samples
        if snapshot.kind is SampleKind.WAVEFORM:
            self.on_render_waveform(canvas, samples, bounds)
        else:
            self.on_render_spectrum(canvas, samples, bounds)

    def on_render_waveform(
        self, canvas: Canvas, samples: np.ndarray, bounds: pygame.Rect
    ) -> None:
        pass

    def on_render_spectrum(
        self, canvas: Canvas, samples: np.ndarray, bounds: pygame.Rect
    ) -> None:
        pass

    def notify_flash(self) -> None:
        """Arm a one-shot flash for the next render that uses it."""
        self._flash_armed = True

    def consume_flash(self) -> bool:
        armed = self._flash_armed
        self._flash_armed = False
        return armed

    def clear_flash(self) -> None:
        """Disarm a flash this renderer had no data to spend it on."""
        self._flash_armed = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
