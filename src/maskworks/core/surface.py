"""Drawing surface controller: pointer input to mark buffer.

:class:`DrawingSurface` owns the interaction state of one editing session:
the active tool, the brush radius, the completed stroke history, the stroke
currently being drawn and the mark buffer they produce.

State Machine
-------------
========  ==============  ===========================================
State     Input           Effect
========  ==============  ===========================================
Idle      start           new stroke from current tool/radius, stamp
                          the point, go to Drawing
Drawing   move            append the point, stamp the swept segment
Drawing   end / leave     move the stroke into history, go to Idle
any       reset           drop history and buffer, go to Idle
========  ==============  ===========================================

All other combinations are ignored. Input is processed synchronously on the
caller's thread, so the buffer always reflects every event handled so far.

Usage
-----
::

    surface = DrawingSurface(200, 150)
    surface.radius = 10
    surface.pointer_down(100, 75)
    surface.pointer_move(120, 75)
    surface.pointer_up()
    surface.mark_buffer.any()   # True
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from maskworks.core.config import MaskworksConfig
from maskworks.core.config import config as default_config
from maskworks.core.rasterizer import (
    apply_stroke,
    marked_fraction,
    new_mark_buffer,
    replay,
    stamp_segment,
)
from maskworks.core.strokes import Stroke, Tool, clamp_radius, coerce_tool

logger = logging.getLogger(__name__)


class SurfaceState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"


class PointerKind(str, Enum):
    """Pointer and touch input, normalised across mouse and touch sources."""

    START = "start"
    MOVE = "move"
    END = "end"
    LEAVE = "leave"


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event already mapped to display space."""

    kind: PointerKind
    x: float = 0.0
    y: float = 0.0


def _is_finite_point(x: float, y: float) -> bool:
    try:
        return math.isfinite(x) and math.isfinite(y)
    except TypeError:
        return False


class DrawingSurface:
    """Interaction state and mark buffer for one editing session.

    Attributes:
        width (int): Surface width in display units.
        height (int): Surface height in display units.
        state (SurfaceState): Idle or Drawing.
    """

    def __init__(
        self,
        width: int,
        height: int,
        config: MaskworksConfig | None = None,
        tool: Tool = Tool.PAINT,
        radius: float | None = None,
    ) -> None:
        self._config = config or default_config
        self.width = width
        self.height = height
        self.state = SurfaceState.IDLE

        self._buffer = new_mark_buffer(width, height)
        self._history: list[Stroke] = []
        self._current: Stroke | None = None

        try:
            self._tool = coerce_tool(tool)
        except ValueError:
            logger.warning(f"Ignoring unknown tool {tool!r}, using {Tool.PAINT.value}")
            self._tool = Tool.PAINT
        self._radius = clamp_radius(
            self._config.default_brush_radius if radius is None else radius, self._config
        )

    # -- Brush parameters ---------------------------------------------------

    @property
    def tool(self) -> Tool:
        return self._tool

    @tool.setter
    def tool(self, value: Tool | str) -> None:
        try:
            self._tool = coerce_tool(value)
        except ValueError:
            logger.warning(f"Ignoring unknown tool {value!r}, keeping {self._tool.value}")

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: float) -> None:
        # A stroke in progress keeps the radius it was seeded with.
        self._radius = clamp_radius(value, self._config)

    def adjust_radius(self, delta: float) -> float:
        """Grow or shrink the brush by ``delta`` and return the clamped result."""
        self.radius = self._radius + delta
        return self._radius

    # -- Read-only views ----------------------------------------------------

    @property
    def mark_buffer(self) -> np.ndarray:
        """The live mark buffer. Callers must not modify it."""
        return self._buffer

    @property
    def history(self) -> tuple[Stroke, ...]:
        """Completed strokes in the order they were drawn."""
        return tuple(self._history)

    @property
    def current_stroke(self) -> Stroke | None:
        return self._current

    @property
    def is_drawing(self) -> bool:
        return self.state is SurfaceState.DRAWING

    @property
    def has_marks(self) -> bool:
        return bool(self._buffer.any())

    @property
    def marked_fraction(self) -> float:
        return marked_fraction(self._buffer)

    # -- Input --------------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> None:
        """Begin a stroke at ``(x, y)``."""
        if self.state is SurfaceState.DRAWING:
            logger.debug("Ignoring start while a stroke is in progress")
            return
        if not _is_finite_point(x, y):
            logger.debug(f"Ignoring start at non-finite position ({x}, {y})")
            return

        self._current = Stroke(tool=self._tool, radius=self._radius)
        self._current.add_point(x, y)
        self.state = SurfaceState.DRAWING
        stamp_segment(self._buffer, (x, y), (x, y), self._current.radius, self._stroke_value())

    def pointer_move(self, x: float, y: float) -> None:
        """Extend the current stroke to ``(x, y)``."""
        if self.state is not SurfaceState.DRAWING or self._current is None:
            return
        if not _is_finite_point(x, y):
            logger.debug(f"Ignoring move to non-finite position ({x}, {y})")
            return

        previous = self._current.points[-1]
        self._current.add_point(x, y)
        stamp_segment(self._buffer, previous, (x, y), self._current.radius, self._stroke_value())

    def pointer_up(self) -> None:
        """Finish the current stroke."""
        if self.state is not SurfaceState.DRAWING or self._current is None:
            return

        self._history.append(self._current)
        logger.debug(
            f"Stroke {len(self._history)} finished: {self._current.tool.value}, "
            f"r={self._current.radius}, {len(self._current)} points"
        )
        self._current = None
        self.state = SurfaceState.IDLE

    def pointer_leave(self) -> None:
        """Pointer left the surface. Finishes the stroke like a release."""
        self.pointer_up()

    def handle(self, event: PointerEvent) -> None:
        """Dispatch one :class:`PointerEvent`."""
        kind = PointerKind(event.kind)
        if kind is PointerKind.START:
            self.pointer_down(event.x, event.y)
        elif kind is PointerKind.MOVE:
            self.pointer_move(event.x, event.y)
        elif kind is PointerKind.END:
            self.pointer_up()
        else:
            self.pointer_leave()

    def reset(self) -> None:
        """Clear every stroke and the mark buffer."""
        self._history.clear()
        self._current = None
        self._buffer = new_mark_buffer(self.width, self.height)
        self.state = SurfaceState.IDLE
        logger.info("Drawing surface reset")

    def rebuild(self) -> np.ndarray:
        """Re-derive the mark buffer by replaying history and the current stroke."""
        buffer = replay(self._history, self.width, self.height)
        if self._current is not None:
            apply_stroke(buffer, self._current)
        self._buffer = buffer
        return buffer

    def _stroke_value(self) -> bool:
        return self._current is not None and self._current.tool is Tool.PAINT

    def __repr__(self) -> str:
        return (
            f"DrawingSurface({self.width}x{self.height}, state={self.state.value}, "
            f"tool={self._tool.value}, radius={self._radius}, strokes={len(self._history)})"
        )
