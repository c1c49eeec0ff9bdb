"""Mask encoding: display-resolution mark buffer to source-resolution mask.

This is the contract with the downstream image-edit API, and it is fixed:

- The mask has exactly the source image's dimensions ``(W, H)``.
- It is an RGBA image.
- **Alpha 0** marks a pixel the model should regenerate.
- **Alpha 255** marks a pixel that must be preserved unchanged.

Preserved pixels are opaque white so the mask renders sensibly if anyone looks
at it. Regenerated pixels are fully transparent ``(0, 0, 0, 0)``; their colour
is never read by the API.

Resampling Direction
--------------------
The mark buffer is always resampled *up* to source resolution by inverse
lookup: each output pixel centre is mapped back into display space with
``x / sx`` and ``y / sy`` and the nearest buffer pixel (clamped to the buffer
bounds) decides its alpha. Strokes are never rasterized at full resolution and
the source is never scaled down, so the output size always matches the
source exactly. Nearest-neighbour stair-stepping at region edges is expected;
the API only consumes a binary opaque/transparent signal.

The lookup is one vectorised gather over precomputed row and column indices,
which keeps encoding of large photos well under a second.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image

from maskworks.core.config import MaskworksConfig
from maskworks.core.config import config as default_config
from maskworks.core.errors import MaskEncodingError
from maskworks.core.geometry import DisplayGeometry

logger = logging.getLogger(__name__)

PRESERVE_RGBA = (255, 255, 255, 255)
REGENERATE_RGBA = (0, 0, 0, 0)


@dataclass
class EncodedMask:
    """Everything handed to the session host when a session completes.

    Attributes:
        raster: RGBA mask at source resolution.
        png: The raster encoded as PNG bytes.
        preview: Display-size preview with the marked region tinted, or
            ``None`` if no preview was requested.
    """

    raster: Image.Image
    png: bytes
    preview: Image.Image | None = None

    @property
    def size(self) -> tuple[int, int]:
        return self.raster.size


def _source_indices(source_len: int, display_len: int, scale: float) -> np.ndarray:
    """Nearest display index for every source pixel along one axis."""
    centres = np.arange(source_len, dtype=np.float64) + 0.5
    indices = np.floor(centres / scale).astype(np.intp)
    return np.clip(indices, 0, display_len - 1)


def encode(
    mark_buffer: np.ndarray,
    geometry: DisplayGeometry,
    source_w: int,
    source_h: int,
    config: MaskworksConfig | None = None,
) -> Image.Image:
    """Encode a mark buffer as a source-resolution RGBA mask.

    Args:
        mark_buffer: Boolean buffer of shape ``(dh, dw)``.
        geometry: Geometry relating display and source space.
        source_w: Width of the source image.
        source_h: Height of the source image.
        config: Configuration holding the pixel limit.

    Returns:
        RGBA image of exactly ``(source_w, source_h)``.

    Raises:
        MaskEncodingError: If the buffer or dimensions disagree with the
            geometry, the image is larger than ``max_source_pixels``, or the
            raster cannot be allocated.
    """
    cfg = config or default_config

    if mark_buffer.shape != (geometry.display_height, geometry.display_width):
        raise MaskEncodingError(
            f"Mark buffer shape {mark_buffer.shape} does not match display size "
            f"{geometry.display_width}x{geometry.display_height}"
        )
    if (source_w, source_h) != geometry.source_size:
        raise MaskEncodingError(
            f"Requested mask size {source_w}x{source_h} does not match source "
            f"{geometry.source_width}x{geometry.source_height}"
        )
    if source_w * source_h > cfg.max_source_pixels:
        raise MaskEncodingError(
            f"Image is too large to encode ({source_w}x{source_h}). "
            f"Maximum is {cfg.max_source_pixels} pixels."
        )

    try:
        rows = _source_indices(source_h, geometry.display_height, geometry.scale_y)
        cols = _source_indices(source_w, geometry.display_width, geometry.scale_x)
        marked = mark_buffer[np.ix_(rows, cols)]

        rgba = np.full((source_h, source_w, 4), 255, dtype=np.uint8)
        rgba[marked] = REGENERATE_RGBA
        raster = Image.fromarray(rgba)
    except MemoryError as e:
        raise MaskEncodingError(
            f"Not enough memory to encode a {source_w}x{source_h} mask"
        ) from e

    logger.debug(
        f"Encoded {geometry.display_width}x{geometry.display_height} buffer into "
        f"{source_w}x{source_h} mask ({int(np.count_nonzero(marked))} pixels to regenerate)"
    )
    return raster


def encode_png(raster: Image.Image) -> bytes:
    """Serialise a mask raster as lossless PNG with its alpha channel."""
    if raster.mode != "RGBA":
        raster = raster.convert("RGBA")
    buffer = io.BytesIO()
    raster.save(buffer, format="PNG")
    return buffer.getvalue()


def render_preview(
    source_image: Image.Image,
    mark_buffer: np.ndarray,
    geometry: DisplayGeometry,
    config: MaskworksConfig | None = None,
) -> Image.Image:
    """Render the source at display size with the marked region tinted.

    The host can show this straight away without decoding the mask.

    Args:
        source_image: The image being edited.
        mark_buffer: Boolean buffer of shape ``(dh, dw)``.
        geometry: Geometry of the session.
        config: Configuration holding tint colour and opacity.

    Returns:
        RGB image of the display size.
    """
    cfg = config or default_config

    base = source_image.convert("RGB")
    if base.size != geometry.display_size:
        base = base.resize(geometry.display_size, Image.Resampling.LANCZOS)

    pixels = np.asarray(base, dtype=np.float32).copy()
    tint = np.asarray(cfg.preview_tint, dtype=np.float32)
    alpha = cfg.preview_opacity
    pixels[mark_buffer] = pixels[mark_buffer] * (1.0 - alpha) + tint * alpha

    return Image.fromarray(np.clip(np.rint(pixels), 0, 255).astype(np.uint8))


def encode_mask(
    mark_buffer: np.ndarray,
    geometry: DisplayGeometry,
    source_image: Image.Image | None = None,
    config: MaskworksConfig | None = None,
) -> EncodedMask:
    """Encode the mask, its PNG bytes and, given a source image, a preview.

    Raises:
        MaskEncodingError: See :func:`encode`.
    """
    raster = encode(
        mark_buffer, geometry, geometry.source_width, geometry.source_height, config
    )
    png = encode_png(raster)
    preview = None
    if source_image is not None:
        preview = render_preview(source_image, mark_buffer, geometry, config)
    return EncodedMask(raster=raster, png=png, preview=preview)
