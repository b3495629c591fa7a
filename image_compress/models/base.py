"""
Base models for the image compression API.

These are request-scoped value objects: they are built when a request is
parsed and discarded once the response is written.
"""
import base64
import binascii
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from image_compress.exceptions import InvalidDataError, UnsupportedFormatError


class ImageFormat(str, Enum):
    """Output formats understood by the service"""
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"

    @classmethod
    def parse(cls, value: Union[str, "ImageFormat", None]) -> "ImageFormat":
        """
        Normalize a user supplied format name.

        Accepts any case and the ``jpg`` alias. Unknown names raise
        ``UnsupportedFormatError`` instead of silently picking a default.
        """
        if isinstance(value, ImageFormat):
            return value
        if value is None or not str(value).strip():
            return cls.JPEG
        name = str(value).strip().lower()
        if name == "jpg":
            name = "jpeg"
        try:
            return cls(name)
        except ValueError:
            supported = ", ".join(f.value for f in cls)
            raise UnsupportedFormatError(
                f"Unsupported image format '{value}' (supported: {supported})"
            )


class CompressionRequest(BaseModel):
    """Options for compressing a single image"""
    quality: int = Field(80, description="Compression quality (1-100, ignored for PNG)")
    format: str = Field("jpeg", description="Output format (jpeg, png, webp)")


class ImageData(BaseModel):
    """A single image inside a batch request"""
    filename: str = Field("", description="Original filename, used as the archive entry name")
    data: Union[str, bytes] = Field(
        ..., description="Base64-encoded image bytes (raw bytes when built in code)"
    )

    @field_validator("data", mode="before")
    @classmethod
    def check_data(cls, value):
        if isinstance(value, bytearray):
            return bytes(value)
        if not isinstance(value, (str, bytes)):
            raise ValueError("data must be a base64 string")
        return value

    def decode(self) -> bytes:
        """
        Return the image bytes.

        Text is base64-decoded (after dropping any ``data:<mime>;base64,``
        prefix); raw bytes are returned unchanged. Decoding is left to the
        caller so a batch can be rejected on its size before any payload is
        touched.

        Raises:
            InvalidDataError: If the text is not valid base64
        """
        if isinstance(self.data, bytes):
            return self.data
        # Remove 'data:image/png;base64,' if present
        payload = self.data.split(",")[-1].strip()
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidDataError(f"data is not valid base64: {e}")


class BatchCompressionRequest(BaseModel):
    """Request model for batch compression"""
    images: List[ImageData] = Field(..., description="Images to compress, in order")
    quality: Optional[int] = Field(
        None, description="Compression quality (1-100, ignored for PNG); the service default when omitted"
    )
    format: str = Field("jpeg", description="Output format (jpeg, png, webp)")
