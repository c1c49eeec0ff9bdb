"""Configuration management for the Maskworks mask editor.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the MASKWORKS_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (MASKWORKS_* prefix)
2. .env file in the project root
3. Default values defined in MaskworksConfig

Example .env file:
    MASKWORKS_MAX_DISPLAY_WIDTH=512
    MASKWORKS_DEFAULT_BRUSH_RADIUS=15
    MASKWORKS_PREVIEW_OPACITY=0.5
    MASKWORKS_SERVER_PORT=7870

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Components accept an explicit config argument and fall back to this instance,
which keeps tests free to build their own.

Usage Example
-------------
    from maskworks.core.config import config

    print(config.max_display_width)
    print(config.min_brush_radius, config.max_brush_radius)

Brush Limits
------------
Brush radius is always expressed in display-space units and always means half
the width of the stamped circle, for both the paint and the erase tool. Values
outside [min_brush_radius, max_brush_radius] are clamped, never rejected.
"""

from typing import Tuple

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MaskworksConfig(BaseSettings):
    """Main configuration for the Maskworks mask editor.

    Attributes
    ----------
    Display Settings:
        max_display_width : int
            Upper bound for the interactive surface width (logical units)
        max_display_height : int
            Upper bound for the interactive surface height (logical units)
        viewport_horizontal_margin : int
            Space reserved around the surface horizontally when fitting it
            into a client viewport
        viewport_vertical_margin : int
            Space reserved for header and toolbar when fitting vertically

    Brush Settings:
        min_brush_radius : float
            Smallest allowed brush radius
        max_brush_radius : float
            Largest allowed brush radius
        default_brush_radius : float
            Radius a new surface starts with
        brush_radius_step : float
            Increment used by the toolbar -/+ controls

    Preview Settings:
        preview_tint : tuple[int, int, int]
            RGB colour painted over marked pixels in the preview
        preview_opacity : float
            Blend factor of the tint (0 = invisible, 1 = opaque)

    Limits:
        max_source_pixels : int
            Largest source image (W*H) that will be encoded
        max_upload_bytes : int
            Largest accepted image upload
        max_sessions : int
            Concurrent editing sessions held by the HTTP host

    Server Settings:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Port for uvicorn (1024-65535)

    Examples
    --------
        >>> custom = MaskworksConfig(max_display_width=256, default_brush_radius=20)
        >>> custom.max_display_width
        256
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MASKWORKS_",
        case_sensitive=False,
    )

    # Display settings
    max_display_width: int = Field(
        default=512,
        ge=16,
        le=4096,
        description="Maximum width of the interactive drawing surface",
    )
    max_display_height: int = Field(
        default=512,
        ge=16,
        le=4096,
        description="Maximum height of the interactive drawing surface",
    )
    viewport_horizontal_margin: int = Field(
        default=48,
        ge=0,
        description="Horizontal space reserved around the surface in the viewport",
    )
    viewport_vertical_margin: int = Field(
        default=200,
        ge=0,
        description="Vertical space reserved for header and toolbar in the viewport",
    )

    # Brush settings
    min_brush_radius: float = Field(default=5.0, gt=0, description="Smallest brush radius")
    max_brush_radius: float = Field(default=100.0, gt=0, description="Largest brush radius")
    default_brush_radius: float = Field(default=15.0, gt=0, description="Initial brush radius")
    brush_radius_step: float = Field(
        default=5.0,
        gt=0,
        description="Radius increment for the toolbar -/+ controls",
    )

    # Preview settings
    preview_tint: Tuple[int, int, int] = Field(
        default=(255, 0, 0),
        description="RGB tint applied to marked pixels in the preview",
    )
    preview_opacity: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Opacity of the preview tint",
    )

    # Limits
    max_source_pixels: int = Field(
        default=40_000_000,
        ge=1,
        description="Largest source image area (W*H) accepted for encoding",
    )
    max_upload_bytes: int = Field(
        default=25 * 1024 * 1024,
        ge=1024,
        description="Largest accepted image upload in bytes",
    )
    max_sessions: int = Field(
        default=64,
        ge=1,
        description="Maximum number of concurrent editing sessions",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7870,
        ge=1024,
        le=65535,
        description="Server port",
    )

    @model_validator(mode="after")
    def _check_brush_range(self) -> "MaskworksConfig":
        """Ensure the brush range is ordered and contains the default."""
        if self.min_brush_radius > self.max_brush_radius:
            raise ValueError(
                f"min_brush_radius ({self.min_brush_radius}) exceeds "
                f"max_brush_radius ({self.max_brush_radius})"
            )
        if not self.min_brush_radius <= self.default_brush_radius <= self.max_brush_radius:
            raise ValueError(
                f"default_brush_radius must lie within "
                f"{self.min_brush_radius}-{self.max_brush_radius}, "
                f"got {self.default_brush_radius}"
            )
        for channel in self.preview_tint:
            if channel < 0 or channel > 255:
                raise ValueError(f"preview_tint channels must be 0-255, got {self.preview_tint}")
        return self


# Global configuration instance
# Loaded once at import time from MASKWORKS_* environment variables and .env.
config = MaskworksConfig()
