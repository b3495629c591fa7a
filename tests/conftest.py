"""
Shared fixtures for the image compression tests.

Images are generated in memory with Pillow so the suite needs no fixture files.
"""
import base64
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from image_compress.api import create_app
from image_compress.config import Settings
from image_compress.core.codec import ImageProcessor


def make_image(size=(100, 50), mode="RGB") -> Image.Image:
    """Create an image with enough detail for lossy encoders to matter."""
    width, height = size
    img = Image.new("RGB", size, color="white")
    draw = ImageDraw.Draw(img)
    for i in range(0, width, 4):
        draw.line([(i, 0), (i, height)], fill=(i * 5 % 256, i * 7 % 256, i * 11 % 256))
    for i in range(10):
        x, y = (i * 13) % width, (i * 7) % height
        draw.ellipse([x, y, x + 15, y + 10], fill=(255 - i * 20, 100 + i * 15, i * 25))

    if mode == "RGBA":
        img = img.convert("RGBA")
        img.putalpha(Image.linear_gradient("L").resize(size))
    elif mode != "RGB":
        img = img.convert(mode)
    return img


def image_bytes(fmt="PNG", size=(100, 50), mode="RGB", **save_options) -> bytes:
    buffer = BytesIO()
    make_image(size, mode).save(buffer, format=fmt, **save_options)
    return buffer.getvalue()


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@pytest.fixture
def png_bytes() -> bytes:
    """A 100x50 RGB PNG"""
    return image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A 100x50 RGB JPEG"""
    return image_bytes("JPEG", quality=95)


@pytest.fixture
def rgba_png_bytes() -> bytes:
    """A 100x50 PNG with an alpha gradient"""
    return image_bytes("PNG", mode="RGBA")


@pytest.fixture
def garbage_bytes() -> bytes:
    return b"this is definitely not an image" * 4


@pytest.fixture
def settings() -> Settings:
    return Settings(max_image_size=1024 * 1024, max_batch_size=10, request_timeout=30)


@pytest.fixture
def processor(settings) -> ImageProcessor:
    return ImageProcessor(settings)


@pytest.fixture
def client(settings):
    """Test client for an application built with the test settings."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client
