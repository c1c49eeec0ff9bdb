"""Stroke rasterization into the display-resolution mark buffer.

The mark buffer is a boolean numpy array of shape ``(height, width)`` in
display space. ``True`` means the user has marked that pixel for editing. It is
the single source of truth for the editable region: the paint and erase tools
are two tagged operations on it, and nothing about rendering or blending leaks
into it.

Coverage Rule
-------------
A pixel is covered by a stroke when its centre ``(col + 0.5, row + 0.5)`` lies
within ``radius`` of the stroke path. The path is the polyline through the
stroke's points, so the covered area is the union of disks swept continuously
between consecutive points (a chain of capsules). A one-point stroke covers a
single disk.

Because paint and erase cover the identical pixel set for the same path and
radius, erase is an exact inverse of paint, and applying any stroke twice has
the same effect as applying it once.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

import numpy as np

from maskworks.core.strokes import Stroke, Tool

logger = logging.getLogger(__name__)


def new_mark_buffer(width: int, height: int) -> np.ndarray:
    """Return an all-unmarked buffer for a ``width`` x ``height`` surface."""
    if width < 1 or height < 1:
        raise ValueError(f"Mark buffer size must be positive, got {width}x{height}")
    return np.zeros((height, width), dtype=bool)


def stamp_segment(
    buffer: np.ndarray,
    start: tuple[float, float],
    end: tuple[float, float],
    radius: float,
    value: bool,
) -> np.ndarray:
    """Set every pixel within ``radius`` of the segment ``start``-``end``.

    Only the bounding box of the segment (grown by the radius) is touched, and
    the box is clipped to the buffer, so points off the surface are fine.
    ``start == end`` stamps a single disk.

    Args:
        buffer: Boolean mark buffer, modified in place.
        start: Segment start in display space.
        end: Segment end in display space.
        radius: Brush radius in display units.
        value: ``True`` to mark, ``False`` to unmark.

    Returns:
        The same buffer, for chaining.
    """
    height, width = buffer.shape
    x0, y0 = start
    x1, y1 = end

    # Pixel centres sit at +0.5, hence the half-pixel shift on the bounds.
    col_lo = max(0, math.floor(min(x0, x1) - radius - 0.5))
    col_hi = min(width, math.floor(max(x0, x1) + radius - 0.5) + 1)
    row_lo = max(0, math.floor(min(y0, y1) - radius - 0.5))
    row_hi = min(height, math.floor(max(y0, y1) + radius - 0.5) + 1)

    if col_lo >= col_hi or row_lo >= row_hi:
        return buffer

    cx = np.arange(col_lo, col_hi, dtype=np.float64)[None, :] + 0.5
    cy = np.arange(row_lo, row_hi, dtype=np.float64)[:, None] + 0.5

    dx = x1 - x0
    dy = y1 - y0
    seg_len_sq = dx * dx + dy * dy

    if seg_len_sq == 0:
        dist_sq = (cx - x0) ** 2 + (cy - y0) ** 2
    else:
        # Project each pixel centre onto the segment and clamp to its ends.
        t = np.clip(((cx - x0) * dx + (cy - y0) * dy) / seg_len_sq, 0.0, 1.0)
        dist_sq = (cx - (x0 + t * dx)) ** 2 + (cy - (y0 + t * dy)) ** 2

    covered = dist_sq <= radius * radius
    buffer[row_lo:row_hi, col_lo:col_hi][covered] = value
    return buffer


def apply_stroke(buffer: np.ndarray, stroke: Stroke) -> np.ndarray:
    """Apply one stroke to the mark buffer in place.

    Paint strokes mark every covered pixel; erase strokes unmark exactly the
    same pixels. Strokes without points leave the buffer unchanged.

    Args:
        buffer: Boolean mark buffer, modified in place.
        stroke: Stroke to apply.

    Returns:
        The same buffer.
    """
    if buffer.dtype != bool:
        raise TypeError(f"Mark buffer must be boolean, got {buffer.dtype}")

    points = stroke.points
    if not points:
        return buffer

    value = stroke.tool is Tool.PAINT

    if len(points) == 1:
        return stamp_segment(buffer, points[0], points[0], stroke.radius, value)

    for start, end in zip(points, points[1:]):
        stamp_segment(buffer, start, end, stroke.radius, value)
    return buffer


def replay(strokes: Iterable[Stroke], width: int, height: int) -> np.ndarray:
    """Rebuild a mark buffer from an ordered stroke history."""
    buffer = new_mark_buffer(width, height)
    count = 0
    for stroke in strokes:
        apply_stroke(buffer, stroke)
        count += 1
    logger.debug(f"Replayed {count} strokes into {width}x{height} buffer")
    return buffer


def marked_fraction(buffer: np.ndarray) -> float:
    """Fraction of pixels currently marked, in ``[0, 1]``."""
    if buffer.size == 0:
        return 0.0
    return float(np.count_nonzero(buffer)) / buffer.size
