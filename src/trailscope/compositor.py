"""
Frame compositor.

Owns the persistent surface and runs, once per ``on_draw``:

1. Render pass: every renderer with the waveform snapshot (if present),
   then every renderer with the spectrum snapshot (if present).
2. Decay pass: multiply the fade color over the whole surface.
3. Flash pass: paint the flash color once if a flash was triggered.
4. Blit to the target, unless drawing is disabled.

Snapshots arrive from the capture thread through a latest-value mailbox;
everything else runs on the render thread.
"""

import logging
import threading
from typing import Callable, Iterator

import pygame

from trailscope.canvas import IDENTITY, PygameCanvas, Transform
from trailscope.config import VisualizerConfig
from trailscope.renderers import (
    BarGraphRenderer,
    CircleBarRenderer,
    CircleRenderer,
    LineRenderer,
    Renderer,
)
from trailscope.snapshot import SampleKind, Snapshot, SnapshotMailbox
from trailscope.style import BlendMode, Style, argb

logger = logging.getLogger(__name__)


class RendererSet:
    """Insertion-ordered set of renderers keyed by identity."""

    def __init__(self):
        self._items: list[Renderer] = []

    def add(self, renderer: Renderer) -> bool:
        """Add ``renderer``; returns False if that instance is already present."""
        if renderer in self:
            return False
        self._items.append(renderer)
        return True

    def clear(self):
        self._items.clear()

    def __contains__(self, renderer: object) -> bool:
        return any(item is renderer for item in self._items)

    def __iter__(self) -> Iterator[Renderer]:
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)


class Compositor:
    """
    Drives renderers over a persistent, decaying surface.

    Args:
        config: Pipeline configuration. Uses defaults if None.
        invalidate: Host callback asking for ``on_draw`` to be scheduled.
        transform: Transform used when presenting the surface.
    """

    def __init__(
        self,
        config: VisualizerConfig | None = None,
        invalidate: Callable[[], None] | None = None,
        transform: Transform = IDENTITY,
    ):
        self.cfg = config or VisualizerConfig()
        self.transform = transform
        self._invalidate = invalidate

        self._mailbox = SnapshotMailbox()
        self._renderers = RendererSet()
        self._faulted: set[int] = set()

        self._fade_style = Style(color=self.cfg.fade_color, blend=BlendMode.MULTIPLY)
        self._flash_style = Style(color=self.cfg.flash_color)

        # Uninitialized until the first draw reveals the target size
        self._canvas: PygameCanvas | None = None
        self._bounds: pygame.Rect | None = None

        self._lock = threading.Lock()
        self._redraw_pending = False
        self._flash = False
        self._drawing_enabled = self.cfg.drawing_enabled
        self.frame_count = 0

    # --- Renderer set ---

    def add_renderer(self, renderer: Renderer | None) -> None:
        if renderer is not None:
            self._renderers.add(renderer)

    def clear_renderers(self) -> None:
        self._renderers.clear()
        self._faulted.clear()

    @property
    def renderers(self) -> tuple[Renderer, ...]:
        return tuple(self._renderers)

    @property
    def renderer_count(self) -> int:
        return len(self._renderers)

    # --- Snapshot input (any thread) ---

    def update_waveform(self, data: bytes | None) -> None:
        self._mailbox.put(SampleKind.WAVEFORM, data)
        self.request_redraw()

    def update_spectrum(self, data: bytes | None) -> None:
        self._mailbox.put(SampleKind.SPECTRUM, data)
        self.request_redraw()

    def snapshots(self) -> tuple[Snapshot, Snapshot]:
        return self._mailbox.latest()

    # --- Flags ---

    def request_redraw(self) -> None:
        """Ask the host for a draw; repeated requests coalesce until it happens."""
        with self._lock:
            if self._redraw_pending:
                return
            self._redraw_pending = True
        if self._invalidate is not None:
            self._invalidate()

    @property
    def redraw_pending(self) -> bool:
        return self._redraw_pending

    def set_drawing_enabled(self, enabled: bool) -> None:
        self._drawing_enabled = enabled

    @property
    def drawing_enabled(self) -> bool:
        return self._drawing_enabled

    def trigger_flash(self) -> None:
        """Flash the visualization on the next frame, e.g. at the start of a track."""
        with self._lock:
            self._flash = True
        self.request_redraw()

    @property
    def flash_pending(self) -> bool:
        return self._flash

    # --- Host lifecycle ---

    def on_size_changed(self, w: int, h: int, oldw: int = 0, oldh: int = 0) -> None:
        """Record new view bounds; the surface itself is reallocated on the next draw."""
        logger.debug("Size changed %dx%d -> %dx%d", oldw, oldh, w, h)
        self._bounds = pygame.Rect(0, 0, w, h)

    @property
    def surface(self) -> pygame.Surface | None:
        return None if self._canvas is None else self._canvas.surface

    def on_draw(self, target: pygame.Surface) -> None:
        """Render one frame into the persistent surface and present it on ``target``."""
        with self._lock:
            self._redraw_pending = False
            flash, self._flash = self._flash, False

        canvas = self._ensure_canvas(target.get_size())
        bounds = self._bounds or pygame.Rect(0, 0, *canvas.size)

        if flash:
            for renderer in self._renderers:
                self._contain(renderer, "flash", renderer.notify_flash)

        waveform, spectrum = self._mailbox.latest()
        for snapshot in (waveform, spectrum):
            if not snapshot.present:
                continue
            for renderer in self._renderers:
                self._contain(
                    renderer, snapshot.kind.value, renderer.render, canvas, snapshot, bounds
                )

        # A flash belongs to this frame only, even for renderers that drew nothing
        if flash:
            for renderer in self._renderers:
                self._contain(renderer, "flash", renderer.clear_flash)

        # Fade out old contents
        canvas.draw_paint(self._fade_style)

        if flash:
            canvas.draw_paint(self._flash_style)

        if self._drawing_enabled:
            canvas.present(target, self.transform)
        self.frame_count += 1

    def _ensure_canvas(self, size: tuple[int, int]) -> PygameCanvas:
        if self._canvas is None or self._canvas.size != size:
            if self._canvas is not None:
                logger.debug("Reallocating surface %s -> %s", self._canvas.size, size)
            self._canvas = PygameCanvas(size)
            # Bounds from on_size_changed survive only if they fit the new surface
            if self._bounds is not None and not self._canvas.surface.get_rect().contains(
                self._bounds
            ):
                self._bounds = None
        return self._canvas

    def _contain(self, renderer: Renderer, stage: str, fn: Callable, *args) -> None:
        """Run one renderer call; a fault is logged and never reaches the frame."""
        try:
            fn(*args)
        except Exception:
            key = id(renderer)
            if key in self._faulted:
                logger.debug("Renderer %r failed again on %s", renderer, stage)
            else:
                self._faulted.add(key)
                logger.exception("Renderer %r failed on %s", renderer, stage)

    # --- Preset renderers ---

    def add_bar_graph_renderer_bottom(self) -> BarGraphRenderer:
        style = Style(color=argb(200, 56, 138, 252), stroke_width=50.0)
        renderer = BarGraphRenderer(16, style, top=False)
        self.add_renderer(renderer)
        return renderer

    def add_bar_graph_renderer_top(self) -> BarGraphRenderer:
        style = Style(color=argb(200, 181, 111, 233), stroke_width=12.0)
        renderer = BarGraphRenderer(4, style, top=True)
        self.add_renderer(renderer)
        return renderer

    def add_circle_bar_renderer(self) -> CircleBarRenderer:
        style = Style(
            color=argb(255, 222, 92, 143), stroke_width=8.0, blend=BlendMode.LIGHTEN
        )
        renderer = CircleBarRenderer(32, style, cycle_color=True)
        self.add_renderer(renderer)
        return renderer

    def add_circle_renderer(self) -> CircleRenderer:
        style = Style(color=argb(255, 222, 92, 143), stroke_width=3.0)
        renderer = CircleRenderer(style, cycle_color=True)
        self.add_renderer(renderer)
        return renderer

    def add_line_renderer(self) -> LineRenderer:
        style = Style(color=argb(88, 0, 128, 255), stroke_width=1.0)
        flash_style = Style(color=argb(188, 255, 255, 255), stroke_width=5.0)
        renderer = LineRenderer(style, flash_style, cycle_color=True)
        self.add_renderer(renderer)
        return renderer

    def add_preset(self, name: str) -> Renderer:
        """Register a preset renderer by config name."""
        factories = {
            "bar_bottom": self.add_bar_graph_renderer_bottom,
            "bar_top": self.add_bar_graph_renderer_top,
            "circle_bar": self.add_circle_bar_renderer,
            "circle": self.add_circle_renderer,
            "line": self.add_line_renderer,
        }
        if name not in factories:
            raise ValueError(f"Unknown renderer preset: {name}")
        return factories[name]()
