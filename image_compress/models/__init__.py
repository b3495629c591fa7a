"""
Data models for the image compression API.

This module provides Pydantic models for request/response validation and
documentation.
"""
from image_compress.models.base import (
    ImageFormat,
    CompressionRequest,
    ImageData,
    BatchCompressionRequest
)

from image_compress.models.compression import (
    CompressionResult,
    BatchCompressionResult,
    ImageInfo,
    ImageInfoResponse,
    HealthResponse,
    ErrorResponse,
    ApiInfoResponse
)

__all__ = [
    # Request models
    'ImageFormat',
    'CompressionRequest',
    'ImageData',
    'BatchCompressionRequest',

    # Result models
    'CompressionResult',
    'BatchCompressionResult',
    'ImageInfo',
    'ImageInfoResponse',
    'HealthResponse',
    'ErrorResponse',
    'ApiInfoResponse'
]
