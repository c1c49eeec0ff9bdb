"""Maskworks — FastAPI application.

This module hosts mask editing sessions over HTTP so that a browser canvas can
drive the Python core. The browser uploads the image it wants to edit, streams
pointer events in display coordinates, and finally asks for the mask, which is
returned as an RGBA PNG of exactly the source image's size.

Architecture
------------
- **Sessions** live in a :class:`~maskworks.api.session_store.SessionStore`
  created in the application lifespan and stored on ``app.state``.
- **Configuration** comes from :data:`~maskworks.core.config.config`
  (``MASKWORKS_*`` environment variables).
- **No persistence**: completed or cancelled sessions are forgotten. Sending
  the mask to the image-edit endpoint is the caller's job.

Endpoints
---------
========  ===============================  ===================================
Method    Path                             Purpose
========  ===============================  ===================================
GET       ``/api/config``                  Brush limits and display caps
POST      ``/api/sessions``                Upload an image, open a session
GET       ``/api/sessions/{id}``           Session geometry and state
POST      ``/api/sessions/{id}/events``    Apply pointer events in order
PUT       ``/api/sessions/{id}/brush``     Change tool and/or radius
POST      ``/api/sessions/{id}/reset``     Clear all strokes
GET       ``/api/sessions/{id}/preview``   Tinted preview PNG
POST      ``/api/sessions/{id}/complete``  Encode mask PNG, close session
DELETE    ``/api/sessions/{id}``           Cancel session
POST      ``/api/masks/validate``          Check a mask/image pair
========  ===============================  ===================================

Usage
-----
CLI (installed entry point)::

    maskworks

Direct invocation::

    python -m maskworks.api.main
"""

from __future__ import annotations

import io
import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from maskworks import __version__
from maskworks.api.models import BrushRequest, EventsRequest, SessionSummary
from maskworks.api.session_store import SessionLimitError, SessionStore
from maskworks.core.config import config
from maskworks.core.errors import (
    ImageLoadError,
    ImageTooLargeError,
    MaskDimensionError,
    MaskEncodingError,
    SessionClosedError,
)
from maskworks.core.imaging import load_source_image, validate_mask_for_image
from maskworks.core.session import MaskEditorSession
from maskworks.core.strokes import Tool
from maskworks.core.surface import PointerEvent, PointerKind

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Application lifecycle — session store setup and teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the session store on startup and cancel open sessions on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    app.state.sessions = SessionStore(config)
    logger.info("SessionStore initialised.")

    yield

    app.state.sessions.cancel_all()
    logger.info("SessionStore cleared on shutdown.")


app = FastAPI(
    title="Maskworks",
    description="Interactive inpainting mask editor API.",
    version=__version__,
    lifespan=lifespan,
)

# The drawing canvas is usually served by a separate frontend during
# development. Restrict ``allow_origins`` in production.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Helpers.
# ---------------------------------------------------------------------------


def _store() -> SessionStore:
    return app.state.sessions


@contextmanager
def _open_session(session_id: str) -> Iterator[MaskEditorSession]:
    """Check out a session, translating lookup failures into HTTP errors.

    Raises:
        HTTPException: 404 if the session does not exist, 409 if it has
            already been closed.
    """
    try:
        with _store().checkout(session_id) as session:
            if session.closed:
                raise SessionClosedError(f"Session {session_id} is closed")
            yield session
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found")
    except SessionClosedError as e:
        _store().discard(session_id)
        raise HTTPException(status_code=409, detail=str(e))


async def _read_upload(upload: UploadFile) -> bytes:
    """Read an uploaded file, enforcing the configured size limit.

    Raises:
        HTTPException: 413 if the upload is too large, 400 if it is empty.
    """
    data = await upload.read(config.max_upload_bytes + 1)
    if len(data) > config.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Upload exceeds {config.max_upload_bytes} bytes",
        )
    if not data:
        raise HTTPException(status_code=400, detail=f"{upload.filename or 'file'} is empty")
    return data


def _png_response(png: bytes, width: int, height: int) -> Response:
    return Response(
        content=png,
        media_type="image/png",
        headers={"X-Image-Width": str(width), "X-Image-Height": str(height)},
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/api/config")
async def get_config() -> dict:
    """Return the editor limits the frontend needs to build its toolbar.

    Returns:
        Dictionary with ``version``, display caps, brush range, default
        radius, radius step, and available tools.
    """
    return {
        "version": __version__,
        "max_display_width": config.max_display_width,
        "max_display_height": config.max_display_height,
        "min_brush_radius": config.min_brush_radius,
        "max_brush_radius": config.max_brush_radius,
        "default_brush_radius": config.default_brush_radius,
        "brush_radius_step": config.brush_radius_step,
        "tools": [tool.value for tool in Tool],
    }


@app.post("/api/sessions", status_code=201)
async def create_session(
    image: UploadFile = File(...),
    viewport_width: int | None = Form(default=None, ge=1),
    viewport_height: int | None = Form(default=None, ge=1),
) -> SessionSummary:
    """Open an editing session for an uploaded image.

    The drawing surface is fitted into the given viewport (minus toolbar
    margins), capped at the configured display size.

    Args:
        image: The image to edit, in any format Pillow can decode.
        viewport_width: Client viewport width, if known.
        viewport_height: Client viewport height, if known.

    Returns:
        :class:`SessionSummary` of the new session.

    Raises:
        HTTPException: 400 if the image cannot be decoded, 413 if it is too
            large, 503 if too many sessions are open.
    """
    data = await _read_upload(image)

    viewport = None
    if viewport_width is not None or viewport_height is not None:
        viewport = (viewport_width, viewport_height)

    try:
        session = MaskEditorSession(data, viewport=viewport, config=config)
    except ImageTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except ImageLoadError as e:
        logger.warning(f"Rejected upload {image.filename!r}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    try:
        _store().add(session)
    except SessionLimitError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return SessionSummary.from_session(session)


@app.get("/api/sessions/{session_id}")
async def get_session(session_id: str) -> SessionSummary:
    """Return a session's geometry and drawing state.

    Raises:
        HTTPException: 404 if the session does not exist.
    """
    with _open_session(session_id) as session:
        return SessionSummary.from_session(session)


@app.post("/api/sessions/{session_id}/events")
async def post_events(session_id: str, req: EventsRequest) -> SessionSummary:
    """Apply a batch of pointer events in order.

    Args:
        session_id: Target session.
        req: Validated :class:`EventsRequest`.

    Returns:
        :class:`SessionSummary` after all events were applied.
    """
    with _open_session(session_id) as session:
        for event in req.events:
            session.handle(PointerEvent(PointerKind(event.kind), event.x, event.y))
        return SessionSummary.from_session(session)


@app.put("/api/sessions/{session_id}/brush")
async def update_brush(session_id: str, req: BrushRequest) -> SessionSummary:
    """Change the tool and/or radius. Radii are clamped, never rejected."""
    with _open_session(session_id) as session:
        if req.tool is not None:
            session.set_tool(req.tool)
        if req.radius is not None:
            session.set_radius(req.radius)
        if req.radius_delta is not None:
            session.adjust_radius(req.radius_delta)
        return SessionSummary.from_session(session)


@app.post("/api/sessions/{session_id}/reset")
async def reset_session(session_id: str) -> SessionSummary:
    """Clear every stroke and the mark buffer."""
    with _open_session(session_id) as session:
        session.reset()
        return SessionSummary.from_session(session)


@app.get("/api/sessions/{session_id}/preview")
async def get_preview(session_id: str) -> Response:
    """Return the display-size preview with marked pixels tinted, as PNG."""
    with _open_session(session_id) as session:
        preview = session.preview()

    out = io.BytesIO()
    preview.save(out, format="PNG")
    return _png_response(out.getvalue(), preview.width, preview.height)


@app.post("/api/sessions/{session_id}/complete")
async def complete_session(session_id: str) -> Response:
    """Encode the mask and close the session.

    Returns:
        ``image/png`` RGBA mask of exactly the source size. Transparent
        pixels are the region to regenerate.

    Raises:
        HTTPException: 500 if encoding fails. The session stays open so the
            client can retry.
    """
    with _open_session(session_id) as session:
        try:
            result = session.complete(with_preview=False)
        except MaskEncodingError as e:
            raise HTTPException(status_code=500, detail=str(e))

    _store().discard(session_id)
    width, height = result.size
    return _png_response(result.png, width, height)


@app.delete("/api/sessions/{session_id}")
async def cancel_session(session_id: str) -> dict:
    """Cancel a session and discard everything drawn in it."""
    with _open_session(session_id) as session:
        session.cancel()

    _store().discard(session_id)
    return {"success": True, "cancelled": session_id}


@app.post("/api/masks/validate")
async def validate_mask(
    image: UploadFile = File(...),
    mask: UploadFile = File(...),
) -> dict:
    """Check that a mask can be sent with an image to the image-edit endpoint.

    Returns:
        Dictionary with ``valid``, ``width`` and ``height``.

    Raises:
        HTTPException: 400 if either file cannot be decoded, the sizes differ,
            or the mask has no alpha channel.
    """
    try:
        source = load_source_image(await _read_upload(image))
        mask_image = load_source_image(await _read_upload(mask))
        validate_mask_for_image(mask_image, source)
    except (ImageLoadError, MaskDimensionError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"valid": True, "width": source.width, "height": source.height}


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~maskworks.core.config.config`
    (``MASKWORKS_SERVER_HOST`` / ``MASKWORKS_SERVER_PORT``).

    This function is registered as the ``maskworks`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "maskworks.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
