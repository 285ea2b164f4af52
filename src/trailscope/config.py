"""
Configuration for the visualizer pipeline and demo.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from trailscope.style import argb

RENDERER_PRESETS = ("bar_bottom", "bar_top", "circle_bar", "circle", "line")


@dataclass
class VisualizerConfig:
    """Compositor and demo settings."""

    width: int = 1080
    height: int = 720
    fps: int = 60

    # Decay: multiplied over the surface every frame. Lower alpha fades faster.
    fade_color: int = argb(200, 255, 255, 255)
    # One-shot overlay painted by trigger_flash()
    flash_color: int = argb(122, 255, 255, 255)
    # Host fill behind the presented surface
    background_color: int = argb(255, 0, 0, 0)

    # Fraction of the backend's maximum capture rate to request
    capture_rate_fraction: float = 0.75
    drawing_enabled: bool = True

    renderers: list[str] = field(default_factory=lambda: list(RENDERER_PRESETS))

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid dimensions: {self.width}x{self.height}")
        if self.fps <= 0:
            raise ValueError(f"Invalid fps: {self.fps}")
        for name in ("fade_color", "flash_color", "background_color"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an ARGB integer or [a, r, g, b]: {value!r}")
            if not 0 <= value <= 0xFFFFFFFF:
                raise ValueError(f"{name} is not a 32-bit ARGB value: {value}")
        if not 0.0 < self.capture_rate_fraction <= 1.0:
            raise ValueError(
                f"capture_rate_fraction must be in (0, 1]: {self.capture_rate_fraction}"
            )
        unknown = [r for r in self.renderers if r not in RENDERER_PRESETS]
        if unknown:
            raise ValueError(f"Unknown renderer preset(s): {', '.join(unknown)}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VisualizerConfig":
        """
        Build a config from a plain dict, e.g. parsed JSON.

        Colors may be given as integers or as ``[a, r, g, b]`` lists.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")

        values = dict(data)
        for name in ("fade_color", "flash_color", "background_color"):
            value = values.get(name)
            if isinstance(value, (list, tuple)):
                if len(value) != 4 or not all(
                    isinstance(c, int) and not isinstance(c, bool) for c in value
                ):
                    raise ValueError(f"{name} must be [a, r, g, b]: {value}")
                values[name] = argb(*value)
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(path: Path) -> VisualizerConfig:
    """Load a JSON config file."""
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be an object: {path}")
    return VisualizerConfig.from_dict(data)
