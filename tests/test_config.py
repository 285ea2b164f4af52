"""Tests for VisualizerConfig and JSON loading."""

import json

import pytest

from trailscope.config import RENDERER_PRESETS, VisualizerConfig, load_config
from trailscope.style import argb


class TestVisualizerConfig:
    def test_defaults(self):
        cfg = VisualizerConfig()
        assert (cfg.width, cfg.height, cfg.fps) == (1080, 720, 60)
        assert cfg.fade_color == 0xC8FFFFFF
        assert cfg.flash_color == 0x7AFFFFFF
        assert cfg.capture_rate_fraction == 0.75
        assert cfg.drawing_enabled
        assert cfg.renderers == list(RENDERER_PRESETS)

    def test_renderer_lists_are_independent(self):
        a, b = VisualizerConfig(), VisualizerConfig()
        a.renderers.append("line")
        assert b.renderers == list(RENDERER_PRESETS)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": -1},
            {"fps": 0},
            {"fade_color": -1},
            {"flash_color": 0x1_0000_0000},
            {"capture_rate_fraction": 0.0},
            {"capture_rate_fraction": 1.5},
            {"renderers": ["bar_bottom", "spiral"]},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            VisualizerConfig(**kwargs)


class TestFromDict:
    def test_color_lists(self):
        cfg = VisualizerConfig.from_dict({"fade_color": [100, 255, 255, 255]})
        assert cfg.fade_color == argb(100, 255, 255, 255)

    def test_color_list_wrong_length(self):
        with pytest.raises(ValueError):
            VisualizerConfig.from_dict({"flash_color": [255, 255, 255]})

    def test_color_component_out_of_range(self):
        with pytest.raises(ValueError):
            VisualizerConfig.from_dict({"flash_color": [256, 0, 0, 0]})

    @pytest.mark.parametrize("value", ["0xFFFFFFFF", 1.5, True, [255, "0", 0, 0]])
    def test_non_integer_color(self, value):
        with pytest.raises(ValueError):
            VisualizerConfig.from_dict({"fade_color": value})

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="fade_colour"):
            VisualizerConfig.from_dict({"fade_colour": 0})

    def test_to_dict_round_trip(self):
        cfg = VisualizerConfig(width=320, height=200, renderers=["line"])
        assert VisualizerConfig.from_dict(cfg.to_dict()) == cfg


class TestLoadConfig:
    def test_load(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"fps": 30, "renderers": ["circle"]}))
        cfg = load_config(path)
        assert cfg.fps == 30
        assert cfg.renderers == ["circle"]

    def test_root_must_be_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            load_config(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_config(tmp_path / "missing.json")
