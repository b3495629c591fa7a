"""
Models for compression results and informational responses.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from image_compress.models.base import ImageFormat


class CompressionResult(BaseModel):
    """Result of compressing one image"""
    filename: str = Field(..., description="Name the compressed image is delivered under")
    data: bytes = Field(..., description="Encoded image bytes")
    size: int = Field(..., description="Size of the encoded image in bytes")
    format: ImageFormat = Field(..., description="Format the image was encoded to")
    original_size: int = Field(..., description="Size of the input image in bytes")
    compression_time: float = Field(0.0, description="Time taken for compression in seconds")


class BatchCompressionResult(BaseModel):
    """Result of compressing a batch into a ZIP archive"""
    zip_data: bytes = Field(..., description="ZIP archive bytes")
    size: int = Field(..., description="Size of the archive in bytes")
    count: int = Field(..., description="Number of images in the archive")
    entries: List[str] = Field([], description="Archive entry names, in order")


class ImageInfo(BaseModel):
    """Decoded image properties"""
    width: int
    height: int
    format: str = Field(..., description="Format detected by the decoder (lower case)")


class ImageInfoResponse(BaseModel):
    """Response model for /compress/info"""
    filename: Optional[str] = Field(None, description="Uploaded filename")
    width: int = Field(..., description="Width in pixels")
    height: int = Field(..., description="Height in pixels")
    format: str = Field(..., description="Detected image format")
    size: int = Field(..., description="Size of the uploaded image in bytes")


class HealthResponse(BaseModel):
    """Response model for /health"""
    status: str
    timestamp: str
    service: str
    version: str


class ErrorResponse(BaseModel):
    """Body returned for handled errors"""
    detail: str
    error: str
    index: Optional[int] = None


class ApiInfoResponse(BaseModel):
    """Response model for the API description at /"""
    name: str
    version: str
    description: str
    endpoints: Dict[str, str]
    supported_formats: List[str]
    max_image_size: int
    max_batch_size: int
