"""Stroke data types and brush parameter clamping."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from maskworks.core.config import MaskworksConfig
from maskworks.core.config import config as default_config

logger = logging.getLogger(__name__)


class Tool(str, Enum):
    """Brush tool. Paint marks pixels for editing, erase unmarks them."""

    PAINT = "paint"
    ERASE = "erase"


@dataclass
class Stroke:
    """One continuous paint or erase gesture in display space.

    Points are appended while the gesture is in progress and never reordered.
    ``radius`` is fixed when the stroke starts.
    """

    tool: Tool
    radius: float
    points: list[tuple[float, float]] = field(default_factory=list)

    def add_point(self, x: float, y: float) -> None:
        self.points.append((float(x), float(y)))

    def __len__(self) -> int:
        return len(self.points)


def clamp_radius(radius: float, config: MaskworksConfig | None = None) -> float:
    """Clamp a brush radius into the configured range.

    Out-of-range values are clamped silently. Values that are not finite
    numbers fall back to the configured default.

    Args:
        radius: Requested radius in display units.
        config: Configuration holding the brush range.

    Returns:
        Radius within ``[min_brush_radius, max_brush_radius]``.
    """
    cfg = config or default_config

    try:
        value = float(radius)
    except (TypeError, ValueError):
        value = math.nan

    if not math.isfinite(value):
        logger.debug(f"Invalid brush radius {radius!r}, using default")
        return cfg.default_brush_radius

    clamped = min(max(value, cfg.min_brush_radius), cfg.max_brush_radius)
    if clamped != value:
        logger.debug(f"Brush radius {value} clamped to {clamped}")
    return clamped


def coerce_tool(tool: Tool | str) -> Tool:
    """Turn a tool name into a :class:`Tool`.

    Accepts the enum itself, its value, or the names used by the web toolbar
    (``"brush"`` and ``"eraser"``).

    Raises:
        ValueError: If the name is not recognised.
    """
    if isinstance(tool, Tool):
        return tool

    aliases = {"brush": Tool.PAINT, "eraser": Tool.ERASE}
    name = str(tool).strip().lower()
    if name in aliases:
        return aliases[name]
    return Tool(name)
