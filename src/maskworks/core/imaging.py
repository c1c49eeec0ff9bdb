"""Image decoding and mask compatibility helpers.

These are the edges of the core: turning whatever the host hands over into a
Pillow image, and checking that a finished mask can be sent to the image-edit
endpoint together with its image.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from maskworks.core.errors import ImageLoadError, MaskDimensionError

logger = logging.getLogger(__name__)

ImageSource = Image.Image | bytes | str | Path


def load_source_image(source: ImageSource) -> Image.Image:
    """Decode the image a session will edit.

    Args:
        source: A Pillow image, encoded image bytes, or a file path.

    Returns:
        A fully loaded Pillow image.

    Raises:
        ImageLoadError: If the data cannot be decoded or has no pixels.
    """
    if isinstance(source, Image.Image):
        image = source
    else:
        try:
            if isinstance(source, bytes):
                image = Image.open(io.BytesIO(source))
            else:
                image = Image.open(Path(source))
            image.load()
        except FileNotFoundError as e:
            raise ImageLoadError(f"Image file not found: {source}") from e
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ImageLoadError(f"Could not decode image: {e}") from e

    width, height = image.size
    if width < 1 or height < 1:
        raise ImageLoadError(f"Image has no pixels ({width}x{height})")

    logger.debug(f"Loaded source image {width}x{height} ({image.mode})")
    return image


def ensure_rgba_png(data: bytes) -> bytes:
    """Re-encode any decodable image as an RGBA PNG.

    The image-edit endpoint only accepts RGBA PNG uploads, for both the image
    and the mask.

    Raises:
        ImageLoadError: If the data cannot be decoded.
    """
    image = load_source_image(data)
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


def validate_mask_for_image(mask: Image.Image, image: Image.Image) -> None:
    """Check that a mask can accompany an image in an edit request.

    Raises:
        MaskDimensionError: If the sizes differ or the mask carries no alpha
            channel.
    """
    if mask.size != image.size:
        logger.warning(f"Rejected mask {mask.size} for image {image.size}")
        raise MaskDimensionError(
            f"Mask size {mask.size[0]}x{mask.size[1]} does not match "
            f"image size {image.size[0]}x{image.size[1]}"
        )
    if "A" not in mask.getbands() and "transparency" not in mask.info:
        logger.warning(f"Rejected mask without alpha channel (mode {mask.mode})")
        raise MaskDimensionError("Mask must have an alpha channel")
