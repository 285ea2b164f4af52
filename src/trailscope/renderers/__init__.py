"""Concrete renderers."""

from trailscope.renderers.bar_graph import BarGraphRenderer
from trailscope.renderers.base import Renderer
from trailscope.renderers.circle import CircleRenderer
from trailscope.renderers.circle_bar import CircleBarRenderer
from trailscope.renderers.line import LineRenderer

__all__ = [
    "BarGraphRenderer",
    "CircleBarRenderer",
    "CircleRenderer",
    "LineRenderer",
    "Renderer",
]
