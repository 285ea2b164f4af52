"""
Drawing backend for the compositor and renderers.

Renderers talk to the :class:`Canvas` protocol; :class:`PygameCanvas`
implements it on top of a per-pixel-alpha ``pygame.Surface``.

pygame's draw functions write RGBA values verbatim instead of blending,
so translucent or blended strokes are drawn onto a scratch layer first
and then blitted over the affected rectangle with the requested blend.
"""

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

import numpy as np
import pygame

from trailscope.style import BlendMode, Style

Point = tuple[float, float]
Segment = tuple[Point, Point]


class Canvas(Protocol):
    """Primitive draw operations available to renderers."""

    @property
    def size(self) -> tuple[int, int]: ...

    def draw_lines(self, segments: Iterable[Segment], style: Style) -> None: ...

    def draw_polyline(
        self, points: Sequence[Point], style: Style, closed: bool = False
    ) -> None: ...

    def draw_circle(self, center: Point, radius: float, style: Style) -> None: ...

    def draw_paint(self, style: Style) -> None: ...


@dataclass(frozen=True)
class Transform:
    """Affine transform applied when presenting the persistent surface."""

    scale: float = 1.0
    rotation: float = 0.0  # degrees, counter-clockwise
    offset: tuple[int, int] = (0, 0)

    @property
    def is_identity(self) -> bool:
        return self.scale == 1.0 and self.rotation == 0.0


IDENTITY = Transform()

_BLEND_FLAGS = {
    BlendMode.SRC_OVER: 0,
    BlendMode.MULTIPLY: pygame.BLEND_RGBA_MULT,
    BlendMode.LIGHTEN: pygame.BLEND_RGBA_MAX,
    BlendMode.ADD: pygame.BLEND_RGBA_ADD,
}

# Scratch pixels must be neutral for the blend they are composited with.
_NEUTRAL = {
    BlendMode.MULTIPLY: (255, 255, 255, 255),
}
_TRANSPARENT = (0, 0, 0, 0)


def _premultiplied(style: Style) -> tuple[int, int, int, int]:
    r, g, b, a = style.rgba
    return (r * a // 255, g * a // 255, b * a // 255, a)


def surface_to_array(surface: pygame.Surface) -> np.ndarray:
    """Convert a pygame surface to an (H, W, 3) uint8 array."""
    # pygame uses (width, height) but numpy expects (height, width)
    arr = pygame.surfarray.array3d(surface)
    return np.transpose(arr, (1, 0, 2))


class PygameCanvas:
    """
    Persistent off-screen surface plus the primitive draw operations.

    Args:
        size: (width, height) in pixels. Fixed for the canvas lifetime.
    """

    def __init__(self, size: tuple[int, int]):
        width, height = size
        self.surface = pygame.Surface((width, height), pygame.SRCALPHA)
        self.surface.fill(_TRANSPARENT)
        self._layer: pygame.Surface | None = None
        self._layer_clear = _TRANSPARENT
        self._overlay: pygame.Surface | None = None

    @property
    def size(self) -> tuple[int, int]:
        return self.surface.get_size()

    def _scratch(self, blend: BlendMode) -> pygame.Surface:
        clear = _NEUTRAL.get(blend, _TRANSPARENT)
        if self._layer is None:
            self._layer = pygame.Surface(self.size, pygame.SRCALPHA)
            self._layer.fill(clear)
            self._layer_clear = clear
        elif clear != self._layer_clear:
            self._layer.fill(clear)
            self._layer_clear = clear
        return self._layer

    def _stroke(self, style: Style, draw) -> None:
        """Run ``draw(surface, color) -> Rect`` honoring alpha and blend mode."""
        if style.blend is BlendMode.SRC_OVER and style.alpha == 255:
            draw(self.surface, style.rgba)
            return

        layer = self._scratch(style.blend)
        dirty = draw(layer, style.rgba).clip(layer.get_rect())
        if dirty.width and dirty.height:
            self.surface.blit(
                layer, dirty.topleft, area=dirty, special_flags=_BLEND_FLAGS[style.blend]
            )
            layer.fill(self._layer_clear, dirty)

    @staticmethod
    def _line(surface, color, start: Point, end: Point, style: Style) -> pygame.Rect:
        if style.anti_alias and style.width_px == 1:
            return pygame.draw.aaline(surface, color, start, end)
        return pygame.draw.line(surface, color, start, end, style.width_px)

    def draw_lines(self, segments: Iterable[Segment], style: Style) -> None:
        segments = list(segments)
        if not segments:
            return

        def draw(surface, color):
            rects = [self._line(surface, color, p0, p1, style) for p0, p1 in segments]
            return rects[0].unionall(rects[1:])

        self._stroke(style, draw)

    def draw_polyline(
        self, points: Sequence[Point], style: Style, closed: bool = False
    ) -> None:
        if len(points) < 2:
            return

        def draw(surface, color):
            if style.anti_alias and style.width_px == 1:
                return pygame.draw.aalines(surface, color, closed, points)
            return pygame.draw.lines(surface, color, closed, points, style.width_px)

        self._stroke(style, draw)

    def draw_circle(self, center: Point, radius: float, style: Style) -> None:
        if radius < 1:
            return
        width = 0 if style.fill else style.width_px

        def draw(surface, color):
            return pygame.draw.circle(surface, color, center, radius, width)

        self._stroke(style, draw)

    def draw_paint(self, style: Style) -> None:
        """Composite ``style.color`` over the whole surface."""
        if style.blend is BlendMode.SRC_OVER:
            if self._overlay is None:
                self._overlay = pygame.Surface(self.size, pygame.SRCALPHA)
            self._overlay.fill(style.rgba)
            self.surface.blit(self._overlay, (0, 0))
            return
        self.surface.fill(_premultiplied(style), special_flags=_BLEND_FLAGS[style.blend])

    def present(self, target: pygame.Surface, transform: Transform = IDENTITY) -> None:
        """Blit the surface onto ``target`` through ``transform``."""
        if transform.is_identity:
            target.blit(self.surface, transform.offset)
            return
        image = pygame.transform.rotozoom(self.surface, transform.rotation, transform.scale)
        target.blit(image, transform.offset)
