"""
Image codec adapter built on Pillow.

Decodes raw bytes into a Pillow image, re-encodes it through the encoder
registry and reports basic image properties. Everything happens on in-memory
buffers; nothing is written to disk.
"""
import os
import logging
from io import BytesIO
from typing import List, Optional, Union

from PIL import Image, UnidentifiedImageError

from image_compress.config import Settings
from image_compress.core.encoders import EncoderRegistry, default_registry
from image_compress.exceptions import (
    DecodeError,
    EmptyDataError,
    EncodeError,
    InvalidDataError,
    InvalidQualityError,
    TooLargeError,
)
from image_compress.models.base import ImageFormat
from image_compress.models.compression import CompressionResult, ImageInfo
from image_compress.utils.metrics import PerformanceTimer

# Set up logging
logger = logging.getLogger(__name__)

MIN_QUALITY = 1
MAX_QUALITY = 100

# Exceptions Pillow raises for data it cannot decode
DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    SyntaxError,
    ValueError,
    EOFError,
)


def check_quality(quality: int) -> None:
    """Raise ``InvalidQualityError`` unless quality is within 1-100."""
    if not isinstance(quality, int) or isinstance(quality, bool) or not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQualityError(
            f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality!r}"
        )


def decode_image(data: bytes) -> Image.Image:
    """
    Decode image bytes into a fully loaded Pillow image.

    Raises:
        DecodeError: If Pillow cannot decode the data
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
        return img
    except DECODE_ERRORS as e:
        raise DecodeError(f"Error decoding image: {e}") from e


class ImageProcessor:
    """
    Validates, compresses and inspects images.

    The processor holds no per-request state and is safe to share between
    concurrent requests.
    """

    def __init__(self, settings: Optional[Settings] = None, registry: Optional[EncoderRegistry] = None):
        self.settings = settings or Settings()
        self.registry = registry or default_registry()

    @property
    def max_image_size(self) -> int:
        return self.settings.max_image_size

    def supported_formats(self) -> List[ImageFormat]:
        return self.registry.formats()

    def validate(self, data: bytes) -> None:
        """
        Check that the payload is a decodable image within the size limit.

        The size ceiling is enforced before any decode is attempted.

        Raises:
            EmptyDataError: If the payload is empty
            TooLargeError: If the payload exceeds ``max_image_size``
            InvalidDataError: If the payload cannot be decoded
        """
        if not data:
            raise EmptyDataError("Image data is empty")

        if len(data) > self.max_image_size:
            raise TooLargeError(
                f"Image is too large: {len(data)} bytes (maximum {self.max_image_size} bytes)"
            )

        try:
            decode_image(data)
        except DecodeError as e:
            raise InvalidDataError("Invalid image data") from e

    def compress(self, data: bytes, quality: int, fmt: Union[ImageFormat, str] = ImageFormat.JPEG) -> bytes:
        """
        Re-encode an image at the given quality and format.

        JPEG and WEBP honour ``quality`` directly (1 = smallest, 100 = best).
        PNG is lossless, so ``quality`` does not change PNG output at all.

        Args:
            data: Raw image bytes in any format Pillow can decode
            quality: Encoder quality (1-100)
            fmt: Target format

        Returns:
            Encoded image bytes

        Raises:
            EmptyDataError: If the payload is empty
            InvalidQualityError: If quality is outside 1-100
            UnsupportedFormatError: If no encoder is registered for the format
            DecodeError: If the payload cannot be decoded
            EncodeError: If the encoder fails
        """
        if not data:
            raise EmptyDataError("Image data is empty")

        check_quality(quality)
        encoder = self.registry.get(ImageFormat.parse(fmt))

        img = decode_image(data)

        try:
            return encoder.encode(img, quality)
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Encoding to {encoder.pillow_format} failed: {str(e)}")
            raise EncodeError(f"Error encoding image: {e}") from e

    def compress_image(
        self,
        data: bytes,
        quality: int,
        fmt: Union[ImageFormat, str] = ImageFormat.JPEG,
        filename: Optional[str] = None
    ) -> CompressionResult:
        """
        Compress an image and describe the output.

        The output filename keeps the stem of ``filename`` and takes the
        extension of the target format.
        """
        target = ImageFormat.parse(fmt)
        with PerformanceTimer() as timer:
            compressed = self.compress(data, quality, target)

        extension = self.registry.get(target).extension
        stem = os.path.splitext(filename)[0] if filename else ""
        output_name = f"{stem}.{extension}" if stem else f"image.{extension}"

        logger.info(
            f"Compressed {filename or 'image'} to {target.value}: "
            f"{len(data)} -> {len(compressed)} bytes (quality {quality})"
        )

        return CompressionResult(
            filename=output_name,
            data=compressed,
            size=len(compressed),
            format=target,
            original_size=len(data),
            compression_time=round(timer.execution_time, 4)
        )

    def info(self, data: bytes) -> ImageInfo:
        """
        Report width, height and the format the decoder detected.

        Only the image header is parsed; pixel data is not decoded.

        Raises:
            EmptyDataError: If the payload is empty
            DecodeError: If the format cannot be identified
        """
        if not data:
            raise EmptyDataError("Image data is empty")

        try:
            with Image.open(BytesIO(data)) as img:
                width, height = img.size
                detected = (img.format or "unknown").lower()
        except DECODE_ERRORS as e:
            raise DecodeError(f"Error reading image: {e}") from e

        return ImageInfo(width=width, height=height, format=detected)
