"""
Core image processing for the compression service.

This package contains:
- codec: Pillow based validation, re-encoding and inspection
- encoders: the format to encoder registry
- archive: ZIP bundling with safe entry names
- validation: request limits and batch processing
"""
from image_compress.core.encoders import (
    Encoder,
    EncoderRegistry,
    default_registry
)

from image_compress.core.codec import (
    MIN_QUALITY,
    MAX_QUALITY,
    ImageProcessor,
    check_quality,
    decode_image
)

from image_compress.core.archive import (
    ZipBundler,
    sanitize_filename
)

from image_compress.core.validation import (
    RequestValidator,
    BatchCompressor,
    ValidatedBatch
)

__all__ = [
    # Encoders
    'Encoder',
    'EncoderRegistry',
    'default_registry',

    # Codec
    'MIN_QUALITY',
    'MAX_QUALITY',
    'ImageProcessor',
    'check_quality',
    'decode_image',

    # Archive
    'ZipBundler',
    'sanitize_filename',

    # Validation
    'RequestValidator',
    'BatchCompressor',
    'ValidatedBatch'
]
