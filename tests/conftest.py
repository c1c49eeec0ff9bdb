"""Shared pytest fixtures for Maskworks tests."""

from __future__ import annotations

import io
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from maskworks.core.config import MaskworksConfig
from maskworks.core.geometry import DisplayGeometry, compute_geometry


@pytest.fixture
def test_config() -> MaskworksConfig:
    """Create a configuration isolated from the environment and .env files.

    Returns:
        MaskworksConfig with default editor settings
    """
    return MaskworksConfig(_env_file=None)


@pytest.fixture
def source_image() -> Image.Image:
    """A 400x300 gradient image, the canonical example source.

    Returns:
        RGB Pillow image
    """
    image = Image.new("RGB", (400, 300))
    image.putdata([((x * 255) // 399, (y * 255) // 299, 128) for y in range(300) for x in range(400)])
    return image


@pytest.fixture
def source_png(source_image: Image.Image) -> bytes:
    """The source image encoded as PNG bytes."""
    out = io.BytesIO()
    source_image.save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def half_geometry() -> DisplayGeometry:
    """400x300 source fitted into a 200x150 surface (sx = sy = 2)."""
    return compute_geometry(400, 300, 200, 150)


@pytest.fixture
def test_client() -> Generator[TestClient, None, None]:
    """FastAPI test client with the application lifespan running.

    Yields:
        TestClient bound to a fresh session store
    """
    from maskworks.api.main import app

    with TestClient(app) as client:
        yield client
