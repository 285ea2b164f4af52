"""
CLI entry point for the trailscope demo.

Usage:
    trailscope [options]
    trailscope --headless --frames 120 --output frame.png

Keys (windowed mode): F flash, D toggle drawing, Esc quit.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import pygame
from PIL import Image

from trailscope.canvas import surface_to_array
from trailscope.capture import CaptureBridge
from trailscope.compositor import Compositor
from trailscope.config import RENDERER_PRESETS, VisualizerConfig, load_config
from trailscope.style import Style
from trailscope.synthetic import SyntheticCaptureProvider

logger = logging.getLogger("trailscope")


def save_frame(surface: pygame.Surface, path: Path) -> None:
    """Write ``surface`` to an image file (format from the extension)."""
    Image.fromarray(surface_to_array(surface)).save(path)


def run(
    config: VisualizerConfig,
    frames: int = 0,
    headless: bool = False,
    flash_every: int = 0,
    session_id: int = 0,
    output: Path | None = None,
    seed: int | None = None,
) -> int:
    """
    Drive the compositor with a synthetic capture session.

    Args:
        config: Pipeline configuration.
        frames: Stop after this many frames (0 runs until the window closes).
        headless: Render into an off-screen target instead of a window.
        flash_every: Trigger a flash every N frames (0 disables).
        session_id: Capture session to link.
        output: Save the last presented frame here.
        seed: Noise seed for the synthetic signal.

    Returns:
        Number of frames drawn.
    """
    size = (config.width, config.height)
    pygame.init()
    bridge = None
    drawn = 0
    try:
        if headless:
            target = pygame.Surface(size)
        else:
            target = pygame.display.set_mode(size, pygame.RESIZABLE)
            pygame.display.set_caption("trailscope")

        compositor = Compositor(config)
        compositor.on_size_changed(*size)
        for name in config.renderers:
            compositor.add_preset(name)

        bridge = CaptureBridge(compositor, SyntheticCaptureProvider(seed=seed))
        if not bridge.link(session_id):
            logger.warning("Running without live capture data")

        background = Style(color=config.background_color).rgba
        clock = pygame.time.Clock()
        running = True

        while running and (frames <= 0 or drawn < frames):
            if not headless:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                    elif event.type == pygame.VIDEORESIZE:
                        old = target.get_size()
                        target = pygame.display.get_surface()
                        compositor.on_size_changed(event.w, event.h, *old)
                    elif event.type == pygame.KEYDOWN:
                        if event.key == pygame.K_ESCAPE:
                            running = False
                        elif event.key == pygame.K_f:
                            compositor.trigger_flash()
                        elif event.key == pygame.K_d:
                            compositor.set_drawing_enabled(not compositor.drawing_enabled)

            if flash_every > 0 and drawn % flash_every == 0:
                compositor.trigger_flash()

            target.fill(background)
            compositor.on_draw(target)
            if not headless:
                pygame.display.flip()
            clock.tick(config.fps)
            drawn += 1

        if output is not None:
            save_frame(target, output)
            logger.info("Saved frame to %s", output)
    finally:
        if bridge is not None:
            bridge.unlink()
        pygame.quit()

    return drawn


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="trailscope",
        description="Live decaying audio visualizer driven by a synthetic capture session",
    )

    parser.add_argument(
        "--config", type=Path, default=None,
        help="JSON config file (CLI flags override its values)",
    )
    parser.add_argument("--width", type=int, default=None, help="Window width")
    parser.add_argument("--height", type=int, default=None, help="Window height")
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second")
    parser.add_argument(
        "-r", "--renderers", nargs="+", choices=RENDERER_PRESETS, default=None,
        help="Renderer presets to register (default: all)",
    )

    parser.add_argument(
        "-n", "--frames", type=int, default=None,
        help="Stop after N frames (default: unlimited, 120 when headless)",
    )
    parser.add_argument("--headless", action="store_true", help="Render off-screen, no window")
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Save the last frame as an image (e.g. frame.png)",
    )
    parser.add_argument(
        "--flash-every", type=int, default=0,
        help="Trigger a flash every N frames (default: off)",
    )
    parser.add_argument(
        "--no-drawing", action="store_true",
        help="Start with drawing disabled (capture and decay keep running)",
    )
    parser.add_argument("--session", type=int, default=0, help="Capture session id")
    parser.add_argument("--seed", type=int, default=None, help="Synthetic noise seed")
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {
        "width": args.width,
        "height": args.height,
        "fps": args.fps,
        "renderers": args.renderers,
    }
    if args.no_drawing:
        overrides["drawing_enabled"] = False

    try:
        base = load_config(args.config).to_dict() if args.config else {}
        base.update({k: v for k, v in overrides.items() if v is not None})
        config = VisualizerConfig.from_dict(base)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.headless:
        os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

    frames = args.frames
    if frames is None:
        frames = 120 if args.headless else 0

    drawn = run(
        config,
        frames=frames,
        headless=args.headless,
        flash_every=args.flash_every,
        session_id=args.session,
        output=args.output,
        seed=args.seed,
    )
    print(f"Drew {drawn} frames", flush=True)


if __name__ == "__main__":
    main()
