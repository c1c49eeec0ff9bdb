"""Editing session: the seam between a host UI and the mask editor core.

A :class:`MaskEditorSession` is created once per "mark areas to edit"
interaction. Creating it decodes the source image, fits the drawing surface
into the available viewport and sets up the :class:`DrawingSurface`. The host
then forwards pointer input and toolbar commands, and finally either completes
the session (the encoded mask is delivered to ``on_complete``) or cancels it
(``on_cancel`` is called and everything is discarded).

Lifecycle
---------
1. ``MaskEditorSession(image, on_complete=..., on_cancel=...)``: raises
   :class:`ImageLoadError` if the image cannot be decoded. No surface exists
   in that case, so no input is possible.
2. Pointer input and toolbar commands, on the host's thread.
3. Either ``complete()`` / ``submit_complete(executor)`` or ``cancel()``.
   An encoding failure raises :class:`MaskEncodingError` and leaves the
   session open with its strokes intact so the user can retry.
4. After completion or cancellation the session holds no strokes, buffer or
   image, and further input raises :class:`SessionClosedError`.

Usage
-----
::

    def on_complete(result):
        upload(result.png)

    session = MaskEditorSession(image_bytes, on_complete=on_complete)
    session.pointer_down(100, 75)
    session.pointer_up()
    session.complete()
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from concurrent.futures import Executor, Future

import numpy as np
from PIL import Image

from maskworks.core.config import MaskworksConfig
from maskworks.core.config import config as default_config
from maskworks.core.encoder import EncodedMask, encode_mask, render_preview
from maskworks.core.errors import ImageTooLargeError, MaskEncodingError, SessionClosedError
from maskworks.core.geometry import (
    ClientRect,
    DisplayGeometry,
    client_to_surface,
    compute_geometry,
    viewport_bounds,
)
from maskworks.core.imaging import ImageSource, load_source_image
from maskworks.core.strokes import Tool
from maskworks.core.surface import DrawingSurface, PointerEvent, PointerKind

logger = logging.getLogger(__name__)

CompleteCallback = Callable[[EncodedMask], None]
CancelCallback = Callable[[], None]


class MaskEditorSession:
    """One mask editing session over a single source image.

    Attributes:
        session_id (str): Random identifier, useful for hosts that keep
            several sessions.
        geometry (DisplayGeometry): Display/source relationship, fixed for the
            life of the session.
    """

    def __init__(
        self,
        image: ImageSource,
        *,
        on_complete: CompleteCallback | None = None,
        on_cancel: CancelCallback | None = None,
        viewport: tuple[int, int] | None = None,
        config: MaskworksConfig | None = None,
    ) -> None:
        """Load the image and prepare the drawing surface.

        Args:
            image: Source image as a Pillow image, encoded bytes or a path.
            on_complete: Called once with the :class:`EncodedMask` when the
                session completes.
            on_cancel: Called once when the session is cancelled.
            viewport: Client viewport ``(width, height)`` used to size the
                surface, or ``None`` to use the configured caps only.
            config: Configuration; defaults to the global instance.

        Raises:
            ImageLoadError: If the image cannot be decoded.
            ImageTooLargeError: If the image exceeds ``max_source_pixels``.
        """
        self._config = config or default_config
        self._on_complete = on_complete
        self._on_cancel = on_cancel
        self._lock = threading.Lock()
        self.session_id = uuid.uuid4().hex

        source = load_source_image(image)
        width, height = source.size
        if width * height > self._config.max_source_pixels:
            raise ImageTooLargeError(
                f"Image is too large ({width}x{height}). "
                f"Maximum is {self._config.max_source_pixels} pixels."
            )

        viewport_w, viewport_h = viewport if viewport is not None else (None, None)
        max_w, max_h = viewport_bounds(viewport_w, viewport_h, self._config)

        self.geometry: DisplayGeometry = compute_geometry(width, height, max_w, max_h)
        self._source: Image.Image | None = source
        self._surface: DrawingSurface | None = DrawingSurface(
            self.geometry.display_width, self.geometry.display_height, self._config
        )
        self._closed = False

        logger.info(
            f"Session {self.session_id} opened: source {width}x{height}, "
            f"display {self.geometry.display_width}x{self.geometry.display_height}"
        )

    # -- State --------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def surface(self) -> DrawingSurface:
        return self._require_open()

    @property
    def source_image(self) -> Image.Image:
        self._require_open()
        return self._source

    def _require_open(self) -> DrawingSurface:
        if self._closed or self._surface is None:
            raise SessionClosedError(f"Session {self.session_id} is closed")
        return self._surface

    # -- Input --------------------------------------------------------------

    def handle(self, event: PointerEvent) -> None:
        self._require_open().handle(event)

    def handle_client(
        self, kind: PointerKind | str, client_x: float, client_y: float, rect: ClientRect
    ) -> None:
        """Handle a pointer event given in client coordinates."""
        x, y = client_to_surface(client_x, client_y, rect, self.geometry)
        self.handle(PointerEvent(PointerKind(kind), x, y))

    def pointer_down(self, x: float, y: float) -> None:
        self._require_open().pointer_down(x, y)

    def pointer_move(self, x: float, y: float) -> None:
        self._require_open().pointer_move(x, y)

    def pointer_up(self) -> None:
        self._require_open().pointer_up()

    def pointer_leave(self) -> None:
        self._require_open().pointer_leave()

    def set_tool(self, tool: Tool | str) -> None:
        self._require_open().tool = tool

    def set_radius(self, radius: float) -> float:
        surface = self._require_open()
        surface.radius = radius
        return surface.radius

    def adjust_radius(self, delta: float) -> float:
        return self._require_open().adjust_radius(delta)

    def reset(self) -> None:
        self._require_open().reset()

    # -- Output -------------------------------------------------------------

    def preview(self) -> Image.Image:
        """Tinted display-size preview of the current marks."""
        surface = self._require_open()
        return render_preview(self._source, surface.mark_buffer, self.geometry, self._config)

    def complete(self, with_preview: bool = True) -> EncodedMask:
        """Encode the mask, deliver it to ``on_complete`` and close the session.

        A stroke still in progress is finished first.

        Raises:
            SessionClosedError: If the session is already closed.
            MaskEncodingError: If encoding fails. The session stays open.
        """
        surface = self._require_open()
        surface.pointer_up()
        result = self._encode(surface.mark_buffer, with_preview)
        self._finish(result)
        return result

    def submit_complete(self, executor: Executor, with_preview: bool = True) -> Future:
        """Encode on ``executor`` and complete the session from the worker.

        The buffer is snapshotted before submission, so input that arrives
        while the encode runs does not affect the result. ``on_complete`` is
        still called exactly once. If the session is cancelled before the
        encode finishes, the result is dropped and no callback fires.

        Returns:
            Future resolving to the :class:`EncodedMask`, or raising
            :class:`MaskEncodingError`.
        """
        surface = self._require_open()
        surface.pointer_up()
        snapshot = surface.mark_buffer.copy()

        def job() -> EncodedMask:
            result = self._encode(snapshot, with_preview)
            self._finish(result)
            return result

        return executor.submit(job)

    def cancel(self) -> None:
        """Discard all session state and notify ``on_cancel``.

        Cancelling a closed session does nothing.
        """
        with self._lock:
            if self._closed:
                return
            self._discard()
        logger.info(f"Session {self.session_id} cancelled")
        if self._on_cancel is not None:
            self._on_cancel()

    def _encode(self, buffer: np.ndarray, with_preview: bool) -> EncodedMask:
        source = self._source
        try:
            return encode_mask(
                buffer,
                self.geometry,
                source_image=source if with_preview else None,
                config=self._config,
            )
        except MaskEncodingError:
            logger.error(f"Session {self.session_id} failed to encode mask", exc_info=True)
            raise

    def _finish(self, result: EncodedMask) -> None:
        with self._lock:
            if self._closed:
                logger.info(f"Session {self.session_id} closed during encode, dropping result")
                return
            self._discard()
        logger.info(f"Session {self.session_id} completed: mask {result.size[0]}x{result.size[1]}")
        if self._on_complete is not None:
            self._on_complete(result)

    def _discard(self) -> None:
        self._closed = True
        self._surface = None
        self._source = None

    def __repr__(self) -> str:
        status = "closed" if self._closed else repr(self._surface)
        return f"MaskEditorSession({self.session_id}, {status})"
