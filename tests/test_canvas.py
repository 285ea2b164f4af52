"""Tests for the pygame drawing backend."""

import numpy as np
import pygame
import pytest

from trailscope.canvas import PygameCanvas, Transform, surface_to_array
from trailscope.style import BlendMode, Style, argb

OPAQUE_RED = Style(color=argb(255, 255, 0, 0), stroke_width=3.0)


def _pixel(canvas: PygameCanvas, x: int, y: int) -> tuple[int, int, int, int]:
    return tuple(canvas.surface.get_at((x, y)))


class TestPrimitives:
    def test_new_canvas_is_transparent(self):
        canvas = PygameCanvas((20, 10))
        assert canvas.size == (20, 10)
        assert pygame.surfarray.array_alpha(canvas.surface).max() == 0

    def test_opaque_lines(self):
        canvas = PygameCanvas((20, 20))
        canvas.draw_lines([((10, 0), (10, 19))], OPAQUE_RED)
        assert _pixel(canvas, 10, 10) == (255, 0, 0, 255)
        assert _pixel(canvas, 0, 0)[3] == 0

    def test_empty_segments_are_noop(self):
        canvas = PygameCanvas((20, 20))
        canvas.draw_lines([], OPAQUE_RED)
        canvas.draw_polyline([(1, 1)], OPAQUE_RED)
        assert pygame.surfarray.array_alpha(canvas.surface).max() == 0

    def test_translucent_stroke_is_blended(self):
        canvas = PygameCanvas((20, 20))
        style = Style(color=argb(100, 0, 0, 255), stroke_width=4.0)
        canvas.draw_lines([((0, 10), (19, 10))], style)
        r, g, b, a = _pixel(canvas, 10, 10)
        assert 90 <= a <= 110
        assert b > 0 and r == 0

    def test_scratch_layer_is_cleared_between_calls(self):
        canvas = PygameCanvas((20, 20))
        style = Style(color=argb(100, 0, 0, 255), stroke_width=2.0)
        canvas.draw_lines([((0, 5), (19, 5))], style)
        canvas.draw_lines([((0, 15), (19, 15))], style)
        # The first line is not composited a second time
        assert _pixel(canvas, 10, 5)[3] == _pixel(canvas, 10, 15)[3]

    def test_polyline(self):
        canvas = PygameCanvas((30, 30))
        canvas.draw_polyline([(0, 0), (15, 15), (29, 0)], OPAQUE_RED)
        assert _pixel(canvas, 15, 15)[0] == 255

    def test_circle_outline_and_fill(self):
        canvas = PygameCanvas((40, 40))
        canvas.draw_circle((20, 20), 10, Style(color=argb(255, 0, 255, 0), stroke_width=1.0))
        assert _pixel(canvas, 20, 20)[3] == 0
        assert max(_pixel(canvas, x, 20)[1] for x in range(26, 34)) == 255

        canvas.draw_circle((20, 20), 5, Style(color=argb(255, 0, 255, 0), fill=True))
        assert _pixel(canvas, 20, 20)[1] == 255

    def test_tiny_circle_is_noop(self):
        canvas = PygameCanvas((10, 10))
        canvas.draw_circle((5, 5), 0.5, OPAQUE_RED)
        assert pygame.surfarray.array_alpha(canvas.surface).max() == 0

    def test_lighten_keeps_brighter_channel(self):
        canvas = PygameCanvas((10, 10))
        canvas.surface.fill((200, 10, 10, 255))
        style = Style(color=argb(255, 50, 180, 10), stroke_width=10.0, blend=BlendMode.LIGHTEN)
        canvas.draw_lines([((0, 5), (9, 5))], style)
        r, g, b, _ = _pixel(canvas, 5, 5)
        assert r == 200
        assert g == 180

    def test_shapes_outside_surface_are_clipped(self):
        canvas = PygameCanvas((10, 10))
        style = Style(color=argb(128, 255, 255, 255), stroke_width=4.0)
        canvas.draw_lines([((50, 50), (80, 80))], style)
        canvas.draw_circle((-40, -40), 5, style)
        assert pygame.surfarray.array_alpha(canvas.surface).max() == 0


class TestPaint:
    def test_multiply_paint_darkens(self):
        canvas = PygameCanvas((8, 8))
        canvas.surface.fill((200, 100, 50, 255))
        canvas.draw_paint(Style(color=argb(255, 128, 128, 128), blend=BlendMode.MULTIPLY))
        r, g, b, a = _pixel(canvas, 3, 3)
        assert r == pytest.approx(100, abs=2)
        assert g == pytest.approx(50, abs=2)
        assert b == pytest.approx(25, abs=2)
        assert a == 255

    def test_translucent_white_multiply_fades_alpha(self):
        canvas = PygameCanvas((8, 8))
        canvas.surface.fill((255, 255, 255, 255))
        canvas.draw_paint(Style(color=argb(200, 255, 255, 255), blend=BlendMode.MULTIPLY))
        assert _pixel(canvas, 0, 0)[3] == pytest.approx(200, abs=2)

    def test_src_over_paint(self):
        canvas = PygameCanvas((8, 8))
        canvas.draw_paint(Style(color=argb(122, 255, 255, 255)))
        r, g, b, a = _pixel(canvas, 4, 4)
        assert a == pytest.approx(122, abs=1)
        assert r > 200


class TestPresent:
    def test_identity_present(self):
        canvas = PygameCanvas((16, 16))
        canvas.draw_lines([((8, 0), (8, 15))], OPAQUE_RED)
        target = pygame.Surface((16, 16))
        target.fill((0, 0, 0))
        canvas.present(target)
        assert tuple(target.get_at((8, 8)))[:3] == (255, 0, 0)
        assert tuple(target.get_at((0, 0)))[:3] == (0, 0, 0)

    def test_scaled_present_covers_more(self):
        canvas = PygameCanvas((16, 16))
        canvas.draw_circle((8, 8), 3, Style(color=argb(255, 255, 255, 255), fill=True))

        plain = pygame.Surface((64, 64))
        plain.fill((0, 0, 0))
        canvas.present(plain)

        scaled = pygame.Surface((64, 64))
        scaled.fill((0, 0, 0))
        canvas.present(scaled, Transform(scale=2.0))

        lit_plain = np.count_nonzero(surface_to_array(plain).sum(axis=2))
        lit_scaled = np.count_nonzero(surface_to_array(scaled).sum(axis=2))
        assert lit_scaled > lit_plain

    def test_transform_identity_flag(self):
        assert Transform().is_identity
        assert Transform(offset=(3, 4)).is_identity
        assert not Transform(rotation=90).is_identity


def test_surface_to_array_shape():
    surface = pygame.Surface((30, 20))
    arr = surface_to_array(surface)
    assert arr.shape == (20, 30, 3)
    assert arr.dtype == np.uint8
