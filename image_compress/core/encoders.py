"""
Encoder registry mapping output formats to Pillow encoders.

Each entry knows how to prepare a decoded image for its format (colour mode
conversion) and which save options to pass to Pillow. Adding a format means
registering one more ``Encoder``; the codec adapter does not branch on format.
"""
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Callable, Dict, Iterator, Optional

from PIL import Image, features

from image_compress.exceptions import UnsupportedFormatError
from image_compress.models.base import ImageFormat

# Set up logging
logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)


def has_alpha(img: Image.Image) -> bool:
    """Check whether an image carries transparency."""
    if img.mode in ("RGBA", "LA", "PA"):
        return True
    return img.mode == "P" and "transparency" in img.info


def flatten_alpha(img: Image.Image, background=WHITE) -> Image.Image:
    """Composite a transparent image onto a solid background and return RGB."""
    rgba = img.convert("RGBA")
    flattened = Image.new("RGB", rgba.size, background)
    flattened.paste(rgba, mask=rgba.split()[-1])
    return flattened


def prepare_for_jpeg(img: Image.Image) -> Image.Image:
    # JPEG has no alpha channel
    if has_alpha(img):
        return flatten_alpha(img)
    if img.mode in ("RGB", "L", "CMYK"):
        return img
    return img.convert("RGB")


def prepare_for_png(img: Image.Image) -> Image.Image:
    if img.mode in ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"):
        return img
    return img.convert("RGBA" if has_alpha(img) else "RGB")


def prepare_for_webp(img: Image.Image) -> Image.Image:
    if img.mode in ("RGB", "RGBA"):
        return img
    return img.convert("RGBA" if has_alpha(img) else "RGB")


@dataclass(frozen=True)
class Encoder:
    """Encoding capability for one output format"""
    format: ImageFormat
    pillow_format: str
    media_type: str
    extension: str
    lossy: bool
    prepare: Callable[[Image.Image], Image.Image]
    save_options: Callable[[int], Dict[str, Any]]

    def encode(self, img: Image.Image, quality: int) -> bytes:
        """
        Encode a decoded image.

        Args:
            img: Decoded Pillow image in any mode
            quality: Quality 1-100; lossless encoders ignore it

        Returns:
            Encoded image bytes
        """
        buffer = BytesIO()
        self.prepare(img).save(buffer, format=self.pillow_format, **self.save_options(quality))
        return buffer.getvalue()


JPEG_ENCODER = Encoder(
    format=ImageFormat.JPEG,
    pillow_format="JPEG",
    media_type="image/jpeg",
    extension="jpeg",
    lossy=True,
    prepare=prepare_for_jpeg,
    save_options=lambda quality: {"quality": quality, "optimize": True},
)

# PNG is lossless: quality has no effect on the output
PNG_ENCODER = Encoder(
    format=ImageFormat.PNG,
    pillow_format="PNG",
    media_type="image/png",
    extension="png",
    lossy=False,
    prepare=prepare_for_png,
    save_options=lambda quality: {"optimize": True},
)

WEBP_ENCODER = Encoder(
    format=ImageFormat.WEBP,
    pillow_format="WEBP",
    media_type="image/webp",
    extension="webp",
    lossy=True,
    prepare=prepare_for_webp,
    save_options=lambda quality: {"quality": quality, "method": 4},
)


class EncoderRegistry:
    """Lookup table from ``ImageFormat`` to ``Encoder``"""

    def __init__(self):
        self._encoders: Dict[ImageFormat, Encoder] = {}

    def register(self, encoder: Encoder) -> None:
        self._encoders[encoder.format] = encoder

    def get(self, fmt: ImageFormat) -> Encoder:
        """
        Look up the encoder for a format.

        Raises:
            UnsupportedFormatError: If no encoder is registered for the format
        """
        encoder = self._encoders.get(fmt)
        if encoder is None:
            raise UnsupportedFormatError(f"No encoder available for format '{fmt.value}'")
        return encoder

    def __contains__(self, fmt: ImageFormat) -> bool:
        return fmt in self._encoders

    def __iter__(self) -> Iterator[Encoder]:
        return iter(self._encoders.values())

    def formats(self):
        return list(self._encoders)


def default_registry(webp_available: Optional[bool] = None) -> EncoderRegistry:
    """
    Build the registry of encoders available in this Pillow build.

    WEBP is only registered when Pillow was built with libwebp; requesting it
    otherwise fails with ``UnsupportedFormatError``.
    """
    if webp_available is None:
        webp_available = bool(features.check("webp"))

    registry = EncoderRegistry()
    registry.register(JPEG_ENCODER)
    registry.register(PNG_ENCODER)
    if webp_available:
        registry.register(WEBP_ENCODER)
    else:
        logger.warning("Pillow was built without WEBP support; webp output is disabled")
    return registry
