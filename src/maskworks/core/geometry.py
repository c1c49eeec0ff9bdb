"""Coordinate mapping between display space and source space.

The user draws on a surface that is usually smaller than the image being
edited. Two coordinate systems are therefore in play:

- **Display space** — pixels of the interactive surface, at most
  ``max_display_width`` x ``max_display_height``.
- **Source space** — pixels of the original, full resolution image.

A :class:`DisplayGeometry` captures the relationship between the two for one
editing session. Every function in this module is pure.

Usage
-----
::

    from maskworks.core.geometry import compute_geometry, to_display, to_source

    geometry = compute_geometry(400, 300, 200, 150)
    geometry.scale_x              # 2.0
    to_source((100, 75), geometry)   # (200.0, 150.0)
    to_display((200, 150), geometry) # (100.0, 75.0)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NamedTuple

from maskworks.core.config import MaskworksConfig
from maskworks.core.config import config as default_config

logger = logging.getLogger(__name__)

Point = tuple[float, float]


class ClientRect(NamedTuple):
    """On-screen rectangle occupied by the drawing surface (CSS pixels)."""

    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class DisplayGeometry:
    """Size of the drawing surface relative to its source image.

    Attributes:
        source_width: Width ``W`` of the source image in pixels.
        source_height: Height ``H`` of the source image in pixels.
        display_width: Width ``dw`` of the drawing surface.
        display_height: Height ``dh`` of the drawing surface.
    """

    source_width: int
    source_height: int
    display_width: int
    display_height: int

    def __post_init__(self) -> None:
        for name in ("source_width", "source_height", "display_width", "display_height"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")

    @property
    def scale_x(self) -> float:
        """Horizontal factor ``sx = W / dw``."""
        return self.source_width / self.display_width

    @property
    def scale_y(self) -> float:
        """Vertical factor ``sy = H / dh``."""
        return self.source_height / self.display_height

    @property
    def display_size(self) -> tuple[int, int]:
        return (self.display_width, self.display_height)

    @property
    def source_size(self) -> tuple[int, int]:
        return (self.source_width, self.source_height)


def fit(source_w: int, source_h: int, max_w: int, max_h: int) -> tuple[int, int]:
    """Fit a source size into a bounding box without upscaling.

    The aspect ratio is preserved up to integer rounding. Neither returned
    dimension drops below 1, so extremely thin images still yield a usable
    surface.

    Args:
        source_w: Source width in pixels.
        source_h: Source height in pixels.
        max_w: Width of the bounding box.
        max_h: Height of the bounding box.

    Returns:
        ``(dw, dh)`` display dimensions. Equal to the source size when the
        source already fits.

    Raises:
        ValueError: If any dimension is not positive.
    """
    if source_w < 1 or source_h < 1:
        raise ValueError(f"Source size must be positive, got {source_w}x{source_h}")
    if max_w < 1 or max_h < 1:
        raise ValueError(f"Bounding box must be positive, got {max_w}x{max_h}")

    if source_w <= max_w and source_h <= max_h:
        return (source_w, source_h)

    scale = min(max_w / source_w, max_h / source_h)
    dw = max(1, min(max_w, round(source_w * scale)))
    dh = max(1, min(max_h, round(source_h * scale)))
    return (dw, dh)


def viewport_bounds(
    viewport_w: int | None = None,
    viewport_h: int | None = None,
    config: MaskworksConfig | None = None,
) -> tuple[int, int]:
    """Return the bounding box available to the surface inside a viewport.

    The configured display caps always apply. When a viewport size is known,
    the configured margins are subtracted from it first so the surface leaves
    room for the toolbar and header.

    Args:
        viewport_w: Client viewport width, or ``None`` if unknown.
        viewport_h: Client viewport height, or ``None`` if unknown.
        config: Configuration to read caps and margins from.

    Returns:
        ``(max_w, max_h)``, each at least 1.
    """
    cfg = config or default_config
    max_w = cfg.max_display_width
    max_h = cfg.max_display_height

    if viewport_w is not None:
        max_w = min(max_w, viewport_w - cfg.viewport_horizontal_margin)
    if viewport_h is not None:
        max_h = min(max_h, viewport_h - cfg.viewport_vertical_margin)

    return (max(1, max_w), max(1, max_h))


def compute_geometry(source_w: int, source_h: int, max_w: int, max_h: int) -> DisplayGeometry:
    """Build the :class:`DisplayGeometry` for a source image and bounding box."""
    dw, dh = fit(source_w, source_h, max_w, max_h)
    geometry = DisplayGeometry(source_w, source_h, dw, dh)
    logger.debug(
        f"Fitted {source_w}x{source_h} into {max_w}x{max_h} -> {dw}x{dh} "
        f"(sx={geometry.scale_x:.4f}, sy={geometry.scale_y:.4f})"
    )
    return geometry


def to_source(point: Point, geometry: DisplayGeometry) -> Point:
    """Map a display-space point to source space."""
    x, y = point
    return (x * geometry.scale_x, y * geometry.scale_y)


def to_display(point: Point, geometry: DisplayGeometry) -> Point:
    """Map a source-space point to display space. Inverse of :func:`to_source`."""
    x, y = point
    return (x / geometry.scale_x, y / geometry.scale_y)


def client_to_surface(
    client_x: float, client_y: float, rect: ClientRect, geometry: DisplayGeometry
) -> Point:
    """Convert a pointer position in client coordinates to display space.

    The surface may be stretched by page layout, so its on-screen rectangle
    does not necessarily match its pixel size. The offset from the rectangle's
    top-left corner is rescaled by ``display_size / rect_size``.

    Args:
        client_x: Pointer x in client coordinates.
        client_y: Pointer y in client coordinates.
        rect: On-screen rectangle of the surface.
        geometry: Geometry of the session.

    Returns:
        Point in display space. May lie outside the surface.

    Raises:
        ValueError: If the rectangle has no area.
    """
    if rect.width <= 0 or rect.height <= 0:
        raise ValueError(f"Surface rectangle has no area: {rect.width}x{rect.height}")

    ratio_x = geometry.display_width / rect.width
    ratio_y = geometry.display_height / rect.height
    return ((client_x - rect.left) * ratio_x, (client_y - rect.top) * ratio_y)
