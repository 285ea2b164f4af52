"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pygame
import pytest

from trailscope.renderers.base import Renderer


class RecordingCanvas:
    """Canvas double that records every draw command instead of drawing."""

    def __init__(self, size: tuple[int, int] = (320, 200)):
        self._size = size
        self.calls: list[tuple] = []

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def draw_lines(self, segments, style):
        self.calls.append(("lines", list(segments), style))

    def draw_polyline(self, points, style, closed=False):
        self.calls.append(("polyline", list(points), style))

    def draw_circle(self, center, radius, style):
        self.calls.append(("circle", (center, radius), style))

    def draw_paint(self, style):
        self.calls.append(("paint", None, style))

    def of(self, kind: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == kind]


class SpyRenderer(Renderer):
    """Records which snapshot kinds it was asked to render."""

    def __init__(self):
        super().__init__()
        self.kinds: list[str] = []
        self.flashes = 0

    def on_render_waveform(self, canvas, samples, bounds):
        self.kinds.append("waveform")

    def on_render_spectrum(self, canvas, samples, bounds):
        self.kinds.append("spectrum")

    def notify_flash(self):
        super().notify_flash()
        self.flashes += 1


@pytest.fixture
def canvas() -> RecordingCanvas:
    return RecordingCanvas()


@pytest.fixture
def make_canvas():
    """Factory for extra recording canvases within one test."""
    return RecordingCanvas


@pytest.fixture
def bounds() -> pygame.Rect:
    return pygame.Rect(0, 0, 320, 200)


@pytest.fixture
def alternating_waveform() -> bytes:
    """128 bytes alternating 0/255."""
    return bytes([0, 255] * 64)


@pytest.fixture
def sine_waveform() -> bytes:
    """One 1024-sample cycle-rich sine as uint8 PCM."""
    t = np.arange(1024)
    pcm = 128 + 100 * np.sin(2 * np.pi * 8 * t / 1024)
    return np.clip(pcm, 0, 255).astype(np.uint8).tobytes()


@pytest.fixture
def loud_spectrum() -> bytes:
    """FFT bytes with every component at full scale."""
    return np.full(1024, 127, dtype=np.int8).tobytes()


@pytest.fixture
def make_spy():
    """Factory for renderers that record which kinds they rendered."""
    return SpyRenderer
