"""
Error types for the image compression service.

Every failure the core can produce is an ``ImageCompressError`` subclass that
knows its HTTP status, so the API layer can translate it without branching.
Input problems map to 4xx responses; codec and archive failures that are not
the caller's fault map to 500.
"""
from typing import Optional


class ImageCompressError(Exception):
    """Base class for all service errors"""
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.index = index

    def with_index(self, index: int, template: str = "Image {index} invalid: {message}") -> "ImageCompressError":
        """Return a copy of this error tagged with a 1-based batch position."""
        return type(self)(template.format(index=index, message=self.message), index=index)


class ConfigurationError(ImageCompressError):
    """Raised when environment configuration cannot be parsed"""
    code = "configuration_error"


# Client errors

class EmptyDataError(ImageCompressError):
    status_code = 400
    code = "empty_data"


class TooLargeError(ImageCompressError):
    status_code = 413
    code = "too_large"


class InvalidQualityError(ImageCompressError):
    status_code = 400
    code = "invalid_quality"


class InvalidDataError(ImageCompressError):
    """The payload is not a decodable image"""
    status_code = 400
    code = "invalid_data"


class DecodeError(InvalidDataError):
    code = "decode_error"


class UnsupportedFormatError(ImageCompressError):
    status_code = 400
    code = "unsupported_format"


class BatchSizeExceededError(ImageCompressError):
    status_code = 400
    code = "batch_size_exceeded"


class EmptyInputError(ImageCompressError):
    status_code = 400
    code = "empty_input"


# Internal errors

class EncodeError(ImageCompressError):
    code = "encode_error"


class ArchiveWriteError(ImageCompressError):
    code = "archive_write_error"


__all__ = [
    'ImageCompressError',
    'ConfigurationError',
    'EmptyDataError',
    'TooLargeError',
    'InvalidQualityError',
    'InvalidDataError',
    'DecodeError',
    'UnsupportedFormatError',
    'BatchSizeExceededError',
    'EmptyInputError',
    'EncodeError',
    'ArchiveWriteError',
]
