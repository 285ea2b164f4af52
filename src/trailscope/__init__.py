"""
trailscope: live, decaying audio visualization.

Turns waveform and FFT byte streams into bars, circles and lines
composited onto a persistent pygame surface with fade trails.
"""

__version__ = "0.1.0"

from trailscope.capture import CaptureBridge
from trailscope.compositor import Compositor, RendererSet
from trailscope.config import VisualizerConfig
from trailscope.snapshot import SampleKind, Snapshot, SnapshotMailbox
from trailscope.style import BlendMode, Style, argb

__all__ = [
    "BlendMode",
    "CaptureBridge",
    "Compositor",
    "RendererSet",
    "SampleKind",
    "Snapshot",
    "SnapshotMailbox",
    "Style",
    "VisualizerConfig",
    "argb",
]
