"""
Image Compress API Application

This package implements a FastAPI application that re-encodes raster images
at a requested quality and format:
- JPEG and WEBP output at a chosen quality
- Lossless PNG output
- Batch compression delivered as a ZIP archive
- Image inspection (width, height, detected format)

All processing happens on in-memory buffers.
"""
from image_compress.config import SERVICE_VERSION as __version__

# Export the application factory
from image_compress.api import create_app

__all__ = ['create_app', '__version__']
