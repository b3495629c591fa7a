"""
Request validation and batch processing.

A batch is checked in order of increasing cost: the image count first, then
the shared options, then each image. The first failure aborts the batch, so
an oversized batch never triggers any base64 or image decode work.
"""
import logging
from typing import List, NamedTuple, Tuple

from image_compress.config import Settings
from image_compress.core.archive import ZipBundler
from image_compress.core.codec import ImageProcessor, check_quality
from image_compress.exceptions import (
    BatchSizeExceededError,
    EmptyInputError,
    ImageCompressError,
)
from image_compress.models.base import BatchCompressionRequest, ImageFormat
from image_compress.models.compression import BatchCompressionResult

# Set up logging
logger = logging.getLogger(__name__)


class ValidatedBatch(NamedTuple):
    """A batch that passed validation, with its payloads decoded"""
    format: ImageFormat
    quality: int
    payloads: List[bytes]


class RequestValidator:
    """Checks request-level limits before any image work starts"""

    def __init__(self, settings: Settings, processor: ImageProcessor):
        self.settings = settings
        self.processor = processor

    @property
    def max_batch_size(self) -> int:
        return self.settings.max_batch_size

    def check_quality(self, quality: int) -> None:
        check_quality(quality)

    def resolve_quality(self, quality) -> int:
        """Fall back to the configured default when no quality was given."""
        return self.settings.default_quality if quality is None else quality

    def check_format(self, fmt) -> ImageFormat:
        """Parse a format name and make sure an encoder exists for it."""
        target = ImageFormat.parse(fmt)
        self.processor.registry.get(target)
        return target

    def check_batch_size(self, count: int) -> None:
        if count == 0:
            raise EmptyInputError("No images provided")
        if count > self.max_batch_size:
            raise BatchSizeExceededError(
                f"Maximum {self.max_batch_size} images per batch, got {count}"
            )

    def validate_batch(self, request: BatchCompressionRequest) -> ValidatedBatch:
        """
        Validate a batch request.

        Returns:
            The resolved output format and quality, and the decoded image bytes

        Raises:
            BatchSizeExceededError: If the batch has more images than allowed
            EmptyInputError: If the batch is empty
            InvalidQualityError: If quality is outside 1-100
            UnsupportedFormatError: If the output format is unknown
            ImageCompressError: The first per-image failure, tagged with its 1-based index
        """
        self.check_batch_size(len(request.images))
        quality = self.resolve_quality(request.quality)
        self.check_quality(quality)
        target = self.check_format(request.format)

        payloads = []
        for index, image in enumerate(request.images, start=1):
            try:
                data = image.decode()
                self.processor.validate(data)
            except ImageCompressError as e:
                logger.warning(f"Batch image {index} rejected: {e.message}")
                raise e.with_index(index) from e
            payloads.append(data)

        return ValidatedBatch(format=target, quality=quality, payloads=payloads)


class BatchCompressor:
    """Validates, compresses and bundles a batch of images"""

    def __init__(self, processor: ImageProcessor, bundler: ZipBundler, validator: RequestValidator):
        self.processor = processor
        self.bundler = bundler
        self.validator = validator

    def run(self, request: BatchCompressionRequest) -> BatchCompressionResult:
        """
        Compress every image in the batch and return them as one ZIP archive.

        Images without a filename are named ``image_<n>``. Each entry takes the
        extension of the output format. A batch without a quality uses the
        configured default.
        """
        batch = self.validator.validate_batch(request)

        entries: List[Tuple[str, bytes]] = []
        for index, (image, data) in enumerate(zip(request.images, batch.payloads), start=1):
            try:
                result = self.processor.compress_image(
                    data,
                    batch.quality,
                    batch.format,
                    filename=image.filename or f"image_{index}"
                )
            except ImageCompressError as e:
                raise e.with_index(index, "Error compressing image {index}: {message}") from e
            entries.append((result.filename, result.data))

        zip_data = self.bundler.bundle_entries(entries)
        names = self.bundler.entry_names([name for name, _ in entries])

        logger.info(
            f"Compressed batch of {len(entries)} images at quality {batch.quality} "
            f"into {len(zip_data)} byte archive"
        )

        return BatchCompressionResult(
            zip_data=zip_data,
            size=len(zip_data),
            count=len(entries),
            entries=names
        )
