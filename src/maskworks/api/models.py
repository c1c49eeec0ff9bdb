"""Pydantic request and response models for the mask editor API.

FastAPI uses these for request validation, serialisation, and OpenAPI
documentation generation.

Models
------
PointerEventModel
    One pointer event in display space.
EventsRequest
    Payload for ``POST /api/sessions/{id}/events``: an ordered batch of
    pointer events.
BrushRequest
    Payload for ``PUT /api/sessions/{id}/brush``: tool and radius changes.
SessionSummary
    Response describing a session's geometry and drawing state.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from maskworks.core.session import MaskEditorSession


class PointerEventModel(BaseModel):
    """A pointer event already mapped into display space.

    Attributes:
        kind: ``"start"``, ``"move"``, ``"end"`` or ``"leave"``.
        x: Horizontal position in display units.
        y: Vertical position in display units.
    """

    kind: Literal["start", "move", "end", "leave"] = Field(
        ...,
        description="Event kind: start, move, end or leave.",
    )
    x: float = Field(default=0.0, allow_inf_nan=False, description="X in display space.")
    y: float = Field(default=0.0, allow_inf_nan=False, description="Y in display space.")


class EventsRequest(BaseModel):
    """Request body for ``POST /api/sessions/{id}/events``.

    Events are applied in list order, exactly as if they had arrived one at a
    time from the pointer.
    """

    events: list[PointerEventModel] = Field(
        ...,
        max_length=10_000,
        description="Pointer events in the order they occurred.",
    )


class BrushRequest(BaseModel):
    """Request body for ``PUT /api/sessions/{id}/brush``.

    Radius values outside the configured range are clamped rather than
    rejected. ``radius_delta`` is applied after ``radius`` when both are
    given.

    Attributes:
        tool: ``"paint"``/``"erase"`` (``"brush"``/``"eraser"`` also accepted).
        radius: Absolute brush radius in display units.
        radius_delta: Relative change, as sent by the toolbar -/+ buttons.
    """

    tool: Literal["paint", "erase", "brush", "eraser"] | None = Field(
        default=None,
        description="Brush tool to activate.",
    )
    radius: float | None = Field(
        default=None,
        description="Absolute brush radius (clamped).",
    )
    radius_delta: float | None = Field(
        default=None,
        description="Change to apply to the current radius (clamped).",
    )


class SessionSummary(BaseModel):
    """Geometry and drawing state of one session."""

    id: str
    source_width: int
    source_height: int
    display_width: int
    display_height: int
    scale_x: float
    scale_y: float
    state: str
    tool: str
    radius: float
    strokes: int
    marked_fraction: float

    @classmethod
    def from_session(cls, session: MaskEditorSession) -> "SessionSummary":
        surface = session.surface
        geometry = session.geometry
        return cls(
            id=session.session_id,
            source_width=geometry.source_width,
            source_height=geometry.source_height,
            display_width=geometry.display_width,
            display_height=geometry.display_height,
            scale_x=geometry.scale_x,
            scale_y=geometry.scale_y,
            state=surface.state.value,
            tool=surface.tool.value,
            radius=surface.radius,
            strokes=len(surface.history),
            marked_fraction=surface.marked_fraction,
        )
