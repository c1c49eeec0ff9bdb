"""Unit tests for image loading and mask compatibility checks."""

import io
from pathlib import Path

import pytest
from PIL import Image

from maskworks.core.errors import ImageLoadError, MaskDimensionError
from maskworks.core.imaging import ensure_rgba_png, load_source_image, validate_mask_for_image


class TestLoadSourceImage:
    """Tests for load_source_image function."""

    def test_from_bytes(self, source_png: bytes):
        image = load_source_image(source_png)
        assert image.size == (400, 300)

    def test_from_path(self, tmp_path: Path, source_image: Image.Image):
        path = tmp_path / "source.png"
        source_image.save(path)
        assert load_source_image(path).size == (400, 300)
        assert load_source_image(str(path)).size == (400, 300)

    def test_pillow_image_passthrough(self, source_image: Image.Image):
        assert load_source_image(source_image) is source_image

    def test_garbage_bytes_raise(self):
        with pytest.raises(ImageLoadError, match="Could not decode"):
            load_source_image(b"definitely not an image")

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ImageLoadError, match="not found"):
            load_source_image(tmp_path / "missing.png")


class TestEnsureRgbaPng:
    """Tests for ensure_rgba_png function."""

    def test_rgb_jpeg_becomes_rgba_png(self):
        out = io.BytesIO()
        Image.new("RGB", (32, 16), (10, 20, 30)).save(out, format="JPEG")

        converted = Image.open(io.BytesIO(ensure_rgba_png(out.getvalue())))
        assert converted.format == "PNG"
        assert converted.mode == "RGBA"
        assert converted.size == (32, 16)
        assert converted.getpixel((0, 0))[3] == 255

    def test_rgba_kept(self):
        out = io.BytesIO()
        Image.new("RGBA", (8, 8), (1, 2, 3, 0)).save(out, format="PNG")
        converted = Image.open(io.BytesIO(ensure_rgba_png(out.getvalue())))
        assert converted.getpixel((0, 0)) == (1, 2, 3, 0)


class TestValidateMaskForImage:
    """Tests for validate_mask_for_image function."""

    def test_matching_rgba_mask_passes(self):
        validate_mask_for_image(Image.new("RGBA", (64, 32)), Image.new("RGB", (64, 32)))

    def test_size_mismatch_raises(self):
        with pytest.raises(MaskDimensionError, match="does not match"):
            validate_mask_for_image(Image.new("RGBA", (32, 32)), Image.new("RGB", (64, 32)))

    def test_mask_without_alpha_raises(self):
        with pytest.raises(MaskDimensionError, match="alpha"):
            validate_mask_for_image(Image.new("RGB", (64, 32)), Image.new("RGB", (64, 32)))
