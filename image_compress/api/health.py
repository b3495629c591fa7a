"""
Health check and service description endpoints.
"""
import logging
import platform
from datetime import datetime, timezone

import psutil
import PIL
from fastapi import APIRouter, Depends
from PIL import Image

from image_compress.api.dependencies import ServiceContainer, get_services
from image_compress.config import SERVICE_NAME, SERVICE_VERSION
from image_compress.models.compression import ApiInfoResponse, HealthResponse
from image_compress.utils.metrics import get_cpu_mem

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["General"])


@router.get("/", response_model=ApiInfoResponse)
async def api_info(services: ServiceContainer = Depends(get_services)):
    """Describe the API, its endpoints and limits."""
    settings = services.settings
    return ApiInfoResponse(
        name="Image Compress API",
        version=SERVICE_VERSION,
        description="REST API for compressing single images and batches of images",
        endpoints={
            "POST /compress": "Compress one image (multipart: image, quality, format)",
            "POST /compress/batch": "Compress several images into a ZIP (JSON: images, quality, format)",
            "POST /compress/info": "Get width, height and format of an image (multipart: image)",
            "GET /health": "Health check",
            "GET /health/detailed": "Health check with system and codec status",
        },
        supported_formats=[fmt.value for fmt in services.processor.supported_formats()],
        max_image_size=settings.max_image_size,
        max_batch_size=settings.max_batch_size
    )


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Check if the API is running."""
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=SERVICE_NAME,
        version=SERVICE_VERSION
    )


@router.get("/health/detailed")
async def detailed_health_check(services: ServiceContainer = Depends(get_services)):
    """
    Provides detailed health information including system metrics and encoder status.
    """
    # System info
    system_info = {
        **get_cpu_mem(),
        "disk_usage": psutil.disk_usage("/").percent,
        "python_version": platform.python_version(),
        "pillow_version": PIL.__version__,
        "platform": platform.platform()
    }

    # Encode a tiny image with every registered encoder
    test_image = Image.new("RGB", (1, 1), color="red")
    encoder_status = {}
    for encoder in services.processor.registry:
        try:
            encoded = encoder.encode(test_image, services.settings.default_quality)
            encoder_status[encoder.format.value] = {"status": "ok", "size": len(encoded)}
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Encoder self test failed for {encoder.format.value}: {str(e)}")
            encoder_status[encoder.format.value] = {"status": "error", "message": str(e)}

    all_ok = all(status["status"] == "ok" for status in encoder_status.values())
    return {
        "status": "ok" if all_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "system": system_info,
        "encoders": encoder_status,
        "limits": {
            "max_image_size": services.settings.max_image_size,
            "max_batch_size": services.settings.max_batch_size,
            "max_request_size": services.settings.request_body_limit,
            "request_timeout": services.settings.request_timeout
        }
    }
