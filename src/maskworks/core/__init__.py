"""Core of the mask editor.

This package turns freehand pointer input on a scaled-down drawing surface
into the source-resolution RGBA mask an inpainting API consumes.

Architecture Overview
---------------------
The core is layered leaf-first:

1. **Configuration** (config.py):
   - Pydantic Settings with the MASKWORKS_ prefix
   - Display caps, brush range, preview tint, size limits

2. **Geometry** (geometry.py):
   - Aspect-preserving fit of the source into the viewport
   - Display <-> source point mapping

3. **Strokes and rasterizer** (strokes.py, rasterizer.py):
   - Paint/erase strokes applied to a boolean mark buffer
   - Continuous capsule coverage, idempotent replay

4. **Drawing surface** (surface.py):
   - Idle/Drawing state machine over pointer events
   - Tool, radius, history and full reset

5. **Encoder** (encoder.py):
   - Nearest-neighbour upsampling of the buffer to source size
   - Alpha 0 = regenerate, alpha 255 = preserve
   - PNG serialisation and tinted preview

6. **Session** (session.py, imaging.py, errors.py):
   - Image decoding and the host-facing lifecycle
   - Completion and cancellation sinks

Usage Example
-------------
    from maskworks.core import MaskEditorSession

    session = MaskEditorSession("photo.png", on_complete=lambda r: send(r.png))
    session.pointer_down(120, 80)
    session.pointer_move(160, 90)
    session.pointer_up()
    session.complete()
"""

from maskworks.core.config import MaskworksConfig, config
from maskworks.core.encoder import EncodedMask, encode, encode_mask, encode_png, render_preview
from maskworks.core.errors import (
    ImageLoadError,
    ImageTooLargeError,
    MaskDimensionError,
    MaskEncodingError,
    MaskworksError,
    SessionClosedError,
)
from maskworks.core.geometry import DisplayGeometry, compute_geometry, fit, to_display, to_source
from maskworks.core.rasterizer import apply_stroke, new_mark_buffer, replay
from maskworks.core.session import MaskEditorSession
from maskworks.core.strokes import Stroke, Tool, clamp_radius
from maskworks.core.surface import DrawingSurface, PointerEvent, PointerKind, SurfaceState

__all__ = [
    "MaskworksConfig",
    "config",
    "DisplayGeometry",
    "compute_geometry",
    "fit",
    "to_display",
    "to_source",
    "Stroke",
    "Tool",
    "clamp_radius",
    "apply_stroke",
    "new_mark_buffer",
    "replay",
    "DrawingSurface",
    "PointerEvent",
    "PointerKind",
    "SurfaceState",
    "EncodedMask",
    "encode",
    "encode_mask",
    "encode_png",
    "render_preview",
    "MaskEditorSession",
    "MaskworksError",
    "ImageLoadError",
    "ImageTooLargeError",
    "MaskEncodingError",
    "MaskDimensionError",
    "SessionClosedError",
]
