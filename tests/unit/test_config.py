"""Tests for maskworks.core.config — configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides via the MASKWORKS_ prefix.
- Pydantic validation constraints (port range, opacity, brush range).
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from maskworks.core.config import MaskworksConfig


class TestConfigDefaults:
    """Verify that MaskworksConfig provides sensible defaults."""

    def test_display_caps(self, test_config: MaskworksConfig):
        """The drawing surface is capped at 512x512."""
        assert test_config.max_display_width == 512
        assert test_config.max_display_height == 512

    def test_viewport_margins(self, test_config: MaskworksConfig):
        assert test_config.viewport_horizontal_margin == 48
        assert test_config.viewport_vertical_margin == 200

    def test_brush_defaults(self, test_config: MaskworksConfig):
        assert test_config.min_brush_radius == 5.0
        assert test_config.max_brush_radius == 100.0
        assert test_config.default_brush_radius == 15.0
        assert test_config.brush_radius_step == 5.0

    def test_preview_defaults(self, test_config: MaskworksConfig):
        assert test_config.preview_tint == (255, 0, 0)
        assert test_config.preview_opacity == 0.5

    def test_server_defaults(self, test_config: MaskworksConfig):
        assert test_config.server_host == "0.0.0.0"
        assert test_config.server_port == 7870


class TestEnvironmentOverrides:
    """Environment variables with the MASKWORKS_ prefix override defaults."""

    def test_display_width_from_env(self, monkeypatch):
        monkeypatch.setenv("MASKWORKS_MAX_DISPLAY_WIDTH", "256")
        cfg = MaskworksConfig(_env_file=None)
        assert cfg.max_display_width == 256

    def test_brush_radius_from_env(self, monkeypatch):
        monkeypatch.setenv("MASKWORKS_DEFAULT_BRUSH_RADIUS", "40")
        cfg = MaskworksConfig(_env_file=None)
        assert cfg.default_brush_radius == 40.0

    def test_keyword_beats_env(self, monkeypatch):
        monkeypatch.setenv("MASKWORKS_SERVER_PORT", "9000")
        cfg = MaskworksConfig(server_port=9100, _env_file=None)
        assert cfg.server_port == 9100


class TestConfigValidation:
    """Pydantic validation rejects out-of-range settings."""

    def test_port_below_range(self):
        with pytest.raises(ValidationError):
            MaskworksConfig(server_port=80, _env_file=None)

    def test_port_above_range(self):
        with pytest.raises(ValidationError):
            MaskworksConfig(server_port=70000, _env_file=None)

    def test_opacity_above_one(self):
        with pytest.raises(ValidationError):
            MaskworksConfig(preview_opacity=1.5, _env_file=None)

    def test_display_cap_too_small(self):
        with pytest.raises(ValidationError):
            MaskworksConfig(max_display_width=4, _env_file=None)

    def test_min_radius_above_max(self):
        with pytest.raises(ValidationError, match="exceeds"):
            MaskworksConfig(min_brush_radius=50, max_brush_radius=20, _env_file=None)

    def test_default_radius_outside_range(self):
        with pytest.raises(ValidationError, match="default_brush_radius"):
            MaskworksConfig(default_brush_radius=150, _env_file=None)

    def test_tint_channel_out_of_range(self):
        with pytest.raises(ValidationError, match="preview_tint"):
            MaskworksConfig(preview_tint=(300, 0, 0), _env_file=None)
