"""Tests for maskworks.core.surface — the drawing surface state machine.

Tests cover:
- Idle/Drawing transitions for start, move, end and leave.
- Ignored input in the wrong state.
- Tool and radius handling, including silent clamping.
- Full reset as the only undo.
- Incremental stamping agreeing with history replay.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from maskworks.core.config import MaskworksConfig
from maskworks.core.rasterizer import replay
from maskworks.core.strokes import Tool
from maskworks.core.surface import DrawingSurface, PointerEvent, PointerKind, SurfaceState


@pytest.fixture
def surface(test_config: MaskworksConfig) -> DrawingSurface:
    """A 200x150 surface with default brush settings."""
    return DrawingSurface(200, 150, test_config)


class TestInitialState:
    """A new surface is idle, empty and uses configured defaults."""

    def test_idle_and_empty(self, surface: DrawingSurface):
        assert surface.state is SurfaceState.IDLE
        assert surface.history == ()
        assert surface.current_stroke is None
        assert not surface.has_marks

    def test_defaults(self, surface: DrawingSurface, test_config: MaskworksConfig):
        assert surface.tool is Tool.PAINT
        assert surface.radius == test_config.default_brush_radius

    def test_buffer_matches_surface(self, surface: DrawingSurface):
        assert surface.mark_buffer.shape == (150, 200)

    def test_initial_radius_clamped(self, test_config: MaskworksConfig):
        assert DrawingSurface(50, 50, test_config, radius=1000).radius == 100.0


class TestTransitions:
    """Tests for pointer input in each state."""

    def test_start_begins_stroke_and_stamps(self, surface: DrawingSurface):
        surface.pointer_down(100, 75)
        assert surface.state is SurfaceState.DRAWING
        assert surface.is_drawing
        assert surface.current_stroke.points == [(100.0, 75.0)]
        assert surface.mark_buffer[75, 100]

    def test_move_extends_and_stamps(self, surface: DrawingSurface):
        surface.radius = 5
        surface.pointer_down(20, 20)
        surface.pointer_move(180, 20)
        assert len(surface.current_stroke) == 2
        assert surface.mark_buffer[20, 20:180].all()

    def test_end_finalizes(self, surface: DrawingSurface):
        surface.pointer_down(100, 75)
        surface.pointer_move(110, 75)
        surface.pointer_up()
        assert surface.state is SurfaceState.IDLE
        assert surface.current_stroke is None
        assert len(surface.history) == 1
        assert surface.history[0].points == [(100.0, 75.0), (110.0, 75.0)]

    def test_leave_finalizes(self, surface: DrawingSurface):
        surface.pointer_down(100, 75)
        surface.pointer_leave()
        assert surface.state is SurfaceState.IDLE
        assert len(surface.history) == 1

    def test_move_while_idle_ignored(self, surface: DrawingSurface):
        surface.pointer_move(100, 75)
        assert not surface.has_marks
        assert surface.state is SurfaceState.IDLE

    def test_end_while_idle_ignored(self, surface: DrawingSurface):
        surface.pointer_up()
        surface.pointer_leave()
        assert surface.history == ()

    def test_start_while_drawing_ignored(self, surface: DrawingSurface):
        surface.pointer_down(10, 10)
        surface.pointer_down(150, 100)
        assert surface.current_stroke.points == [(10.0, 10.0)]
        assert not surface.mark_buffer[100, 150]

    @pytest.mark.parametrize("x, y", [(math.nan, 10), (10, math.inf), (-math.inf, math.nan)])
    def test_start_at_non_finite_position_ignored(self, surface: DrawingSurface, x, y):
        surface.pointer_down(x, y)
        assert surface.state is SurfaceState.IDLE
        assert surface.current_stroke is None
        surface.pointer_up()
        assert surface.history == ()
        assert not surface.rebuild().any()

    def test_move_to_non_finite_position_ignored(self, surface: DrawingSurface):
        surface.pointer_down(50, 50)
        surface.pointer_move(math.nan, 60)
        surface.pointer_move(70, math.inf)
        surface.pointer_move(80, 50)
        surface.pointer_up()

        assert surface.history[0].points == [(50.0, 50.0), (80.0, 50.0)]
        expected = replay(surface.history, 200, 150)
        assert np.array_equal(surface.mark_buffer, expected)
        assert np.array_equal(surface.rebuild(), expected)

    def test_history_is_ordered(self, surface: DrawingSurface):
        for x in (20, 60, 100):
            surface.pointer_down(x, 50)
            surface.pointer_up()
        assert [s.points[0][0] for s in surface.history] == [20.0, 60.0, 100.0]


class TestHandle:
    """Tests for PointerEvent dispatch."""

    def test_full_gesture(self, surface: DrawingSurface):
        for event in [
            PointerEvent(PointerKind.START, 50, 50),
            PointerEvent(PointerKind.MOVE, 60, 55),
            PointerEvent(PointerKind.MOVE, 70, 60),
            PointerEvent(PointerKind.END),
        ]:
            surface.handle(event)
        assert len(surface.history) == 1
        assert len(surface.history[0]) == 3

    def test_leave_event(self, surface: DrawingSurface):
        surface.handle(PointerEvent(PointerKind.START, 50, 50))
        surface.handle(PointerEvent(PointerKind.LEAVE))
        assert surface.state is SurfaceState.IDLE

    def test_string_kind(self, surface: DrawingSurface):
        surface.handle(PointerEvent("start", 50, 50))
        assert surface.is_drawing


class TestBrush:
    """Tests for tool and radius handling."""

    def test_radius_clamped_silently(self, surface: DrawingSurface):
        surface.radius = 1
        assert surface.radius == 5.0
        surface.radius = 250
        assert surface.radius == 100.0

    def test_adjust_radius(self, surface: DrawingSurface):
        surface.radius = 30
        assert surface.adjust_radius(10) == 40.0
        assert surface.adjust_radius(-100) == 5.0

    def test_radius_change_mid_stroke_applies_to_next(self, surface: DrawingSurface):
        surface.radius = 10
        surface.pointer_down(100, 75)
        surface.radius = 50
        surface.pointer_move(110, 75)
        surface.pointer_up()
        assert surface.history[0].radius == 10
        assert not surface.mark_buffer[75, 150]

    def test_tool_by_name(self, surface: DrawingSurface):
        surface.tool = "eraser"
        assert surface.tool is Tool.ERASE

    def test_unknown_tool_ignored(self, surface: DrawingSurface):
        surface.tool = "lasso"
        assert surface.tool is Tool.PAINT

    def test_unknown_initial_tool_falls_back_to_paint(self, test_config: MaskworksConfig):
        surface = DrawingSurface(50, 50, test_config, tool="lasso")
        assert surface.tool is Tool.PAINT

    def test_initial_tool_alias(self, test_config: MaskworksConfig):
        assert DrawingSurface(50, 50, test_config, tool="eraser").tool is Tool.ERASE

    def test_erase_tool_clears_marks(self, surface: DrawingSurface):
        surface.radius = 20
        surface.pointer_down(100, 75)
        surface.pointer_up()
        surface.tool = Tool.ERASE
        surface.pointer_down(100, 75)
        surface.pointer_up()
        assert not surface.has_marks
        assert surface.history[1].tool is Tool.ERASE


class TestResetAndRebuild:
    """Tests for reset() and rebuild()."""

    def test_reset_clears_everything(self, surface: DrawingSurface):
        surface.pointer_down(100, 75)
        surface.pointer_up()
        surface.pointer_down(50, 50)
        surface.reset()
        assert surface.state is SurfaceState.IDLE
        assert surface.history == ()
        assert surface.current_stroke is None
        assert not surface.has_marks
        assert surface.marked_fraction == 0.0

    def test_reset_keeps_brush(self, surface: DrawingSurface):
        surface.radius = 42
        surface.tool = Tool.ERASE
        surface.reset()
        assert surface.radius == 42
        assert surface.tool is Tool.ERASE

    def test_incremental_buffer_matches_replay(self, surface: DrawingSurface):
        surface.radius = 25
        surface.pointer_down(40, 40)
        surface.pointer_move(160, 110)
        surface.pointer_up()
        surface.tool = Tool.ERASE
        surface.radius = 10
        surface.pointer_down(100, 75)
        surface.pointer_move(120, 60)
        surface.pointer_up()

        expected = replay(surface.history, 200, 150)
        assert np.array_equal(surface.mark_buffer, expected)

    def test_rebuild_includes_current_stroke(self, surface: DrawingSurface):
        surface.pointer_down(100, 75)
        before = surface.mark_buffer.copy()
        rebuilt = surface.rebuild()
        assert np.array_equal(rebuilt, before)
