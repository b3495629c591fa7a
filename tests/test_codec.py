"""
Tests for the Pillow codec adapter and the encoder registry.
"""
from io import BytesIO

import pytest
from PIL import Image, features

from image_compress.config import Settings
from image_compress.core.codec import ImageProcessor
from image_compress.core.encoders import default_registry
from image_compress.exceptions import (
    DecodeError,
    EmptyDataError,
    InvalidDataError,
    InvalidQualityError,
    TooLargeError,
    UnsupportedFormatError,
)
from image_compress.models.base import ImageFormat
from tests.conftest import image_bytes

webp_required = pytest.mark.skipif(not features.check("webp"), reason="Pillow built without WEBP")


def open_image(data: bytes) -> Image.Image:
    img = Image.open(BytesIO(data))
    img.load()
    return img


class TestValidate:
    """Image validation"""

    def test_valid_png(self, processor, png_bytes):
        processor.validate(png_bytes)

    def test_valid_jpeg(self, processor, jpeg_bytes):
        processor.validate(jpeg_bytes)

    def test_empty_data(self, processor):
        with pytest.raises(EmptyDataError):
            processor.validate(b"")

    def test_too_large(self, png_bytes):
        processor = ImageProcessor(Settings(max_image_size=len(png_bytes) - 1))
        with pytest.raises(TooLargeError):
            processor.validate(png_bytes)

    def test_size_limit_is_inclusive(self, png_bytes):
        processor = ImageProcessor(Settings(max_image_size=len(png_bytes)))
        processor.validate(png_bytes)

    def test_size_checked_before_decode(self, garbage_bytes):
        processor = ImageProcessor(Settings(max_image_size=10))
        with pytest.raises(TooLargeError):
            processor.validate(garbage_bytes)

    def test_garbage_data(self, processor, garbage_bytes):
        with pytest.raises(InvalidDataError):
            processor.validate(garbage_bytes)

    def test_truncated_image(self, processor, png_bytes):
        with pytest.raises(InvalidDataError):
            processor.validate(png_bytes[: len(png_bytes) // 2])


class TestCompress:
    """Re-encoding"""

    @pytest.mark.parametrize("quality", [1, 50, 100])
    def test_png_to_jpeg(self, processor, png_bytes, quality):
        output = processor.compress(png_bytes, quality, ImageFormat.JPEG)

        img = open_image(output)
        assert img.format == "JPEG"
        assert img.size == (100, 50)

    @pytest.mark.parametrize("quality", [1, 80, 100])
    def test_jpeg_to_png(self, processor, jpeg_bytes, quality):
        output = processor.compress(jpeg_bytes, quality, "png")

        img = open_image(output)
        assert img.format == "PNG"
        assert img.size == (100, 50)

    def test_format_names_are_case_insensitive(self, processor, png_bytes):
        output = processor.compress(png_bytes, 80, "JPG")
        assert open_image(output).format == "JPEG"

    def test_jpeg_quality_affects_size(self, processor):
        source = image_bytes("PNG", size=(200, 200))
        low = processor.compress(source, 10, ImageFormat.JPEG)
        high = processor.compress(source, 95, ImageFormat.JPEG)
        assert len(low) < len(high)

    def test_png_ignores_quality(self, processor, jpeg_bytes):
        assert processor.compress(jpeg_bytes, 1, "png") == processor.compress(jpeg_bytes, 100, "png")

    def test_alpha_is_flattened_for_jpeg(self, processor, rgba_png_bytes):
        img = open_image(processor.compress(rgba_png_bytes, 80, ImageFormat.JPEG))
        assert img.format == "JPEG"
        assert img.mode == "RGB"

    def test_alpha_is_kept_for_png(self, processor, rgba_png_bytes):
        img = open_image(processor.compress(rgba_png_bytes, 80, ImageFormat.PNG))
        assert img.mode == "RGBA"

    def test_palette_image_to_jpeg(self, processor):
        source = image_bytes("GIF", mode="P")
        img = open_image(processor.compress(source, 70, ImageFormat.JPEG))
        assert img.format == "JPEG"

    @webp_required
    def test_webp_output_is_real_webp(self, processor, png_bytes):
        img = open_image(processor.compress(png_bytes, 75, ImageFormat.WEBP))
        assert img.format == "WEBP"

    def test_webp_rejected_without_encoder(self, png_bytes):
        processor = ImageProcessor(Settings(), registry=default_registry(webp_available=False))
        with pytest.raises(UnsupportedFormatError):
            processor.compress(png_bytes, 75, ImageFormat.WEBP)

    @pytest.mark.parametrize("quality", [0, 101, -5])
    def test_invalid_quality(self, processor, png_bytes, quality):
        with pytest.raises(InvalidQualityError):
            processor.compress(png_bytes, quality, ImageFormat.JPEG)

    def test_quality_checked_before_decode(self, processor, garbage_bytes):
        with pytest.raises(InvalidQualityError):
            processor.compress(garbage_bytes, 0, ImageFormat.JPEG)

    def test_empty_data(self, processor):
        with pytest.raises(EmptyDataError):
            processor.compress(b"", 80, ImageFormat.JPEG)

    def test_unknown_format(self, processor, png_bytes):
        with pytest.raises(UnsupportedFormatError):
            processor.compress(png_bytes, 80, "gif")

    def test_undecodable_data(self, processor, garbage_bytes):
        with pytest.raises(DecodeError):
            processor.compress(garbage_bytes, 80, ImageFormat.JPEG)

    def test_compress_then_decode_reports_requested_format(self, processor, png_bytes):
        for fmt in processor.supported_formats():
            output = processor.compress(png_bytes, 60, fmt)
            assert processor.info(output).format == fmt.value


class TestCompressImage:
    """Compression results"""

    def test_result_fields(self, processor, png_bytes):
        result = processor.compress_image(png_bytes, 80, "jpeg", filename="holiday.png")

        assert result.filename == "holiday.jpeg"
        assert result.format == ImageFormat.JPEG
        assert result.size == len(result.data)
        assert result.original_size == len(png_bytes)
        assert result.compression_time >= 0

    def test_default_filename(self, processor, png_bytes):
        result = processor.compress_image(png_bytes, 80, ImageFormat.PNG)
        assert result.filename == "image.png"


class TestInfo:
    """Image inspection"""

    def test_dimensions(self, processor, png_bytes):
        info = processor.info(png_bytes)
        assert (info.width, info.height) == (100, 50)
        assert info.format == "png"

    def test_detected_format_not_requested_format(self, processor, jpeg_bytes):
        assert processor.info(jpeg_bytes).format == "jpeg"

    def test_other_formats_are_reported_as_detected(self, processor):
        assert processor.info(image_bytes("GIF", mode="P")).format == "gif"

    def test_empty_data(self, processor):
        with pytest.raises(EmptyDataError):
            processor.info(b"")

    def test_garbage(self, processor, garbage_bytes):
        with pytest.raises(DecodeError):
            processor.info(garbage_bytes)


class TestImageFormat:
    """Format parsing"""

    @pytest.mark.parametrize("value,expected", [
        ("jpeg", ImageFormat.JPEG),
        ("JPG", ImageFormat.JPEG),
        (" png ", ImageFormat.PNG),
        ("WebP", ImageFormat.WEBP),
        (None, ImageFormat.JPEG),
        ("", ImageFormat.JPEG),
        (ImageFormat.PNG, ImageFormat.PNG),
    ])
    def test_parse(self, value, expected):
        assert ImageFormat.parse(value) == expected

    @pytest.mark.parametrize("value", ["gif", "bmp", "tiff", "jpeg2000"])
    def test_parse_unknown(self, value):
        with pytest.raises(UnsupportedFormatError):
            ImageFormat.parse(value)
