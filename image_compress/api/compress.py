"""
Image compression API endpoints.

Provides single image compression, batch compression into a ZIP archive and
image inspection. Codec work runs in the threadpool so the event loop stays
free while images are decoded and encoded.
"""
import time
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from image_compress.api.dependencies import ServiceContainer, get_services
from image_compress.core.codec import decode_image
from image_compress.exceptions import ImageCompressError
from image_compress.models.base import BatchCompressionRequest, CompressionRequest
from image_compress.models.compression import ErrorResponse, ImageInfoResponse
from image_compress.utils.metrics import (
    calculate_image_metrics,
    measure_compression_performance
)

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/compress", tags=["Compression"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request or image"},
    413: {"model": ErrorResponse, "description": "Image or request body too large"},
    500: {"model": ErrorResponse, "description": "Internal error"},
}


def _quality_headers(original: bytes, compressed: bytes) -> Dict[str, str]:
    """Compute PSNR/SSIM between the uploaded and the compressed image."""
    try:
        psnr, ssim = calculate_image_metrics(decode_image(original), decode_image(compressed))
    except ImageCompressError as e:
        logger.warning(f"Could not calculate image quality metrics: {e.message}")
        return {}

    headers = {}
    if psnr is not None:
        headers["X-PSNR"] = str(psnr)
    if ssim is not None:
        headers["X-SSIM"] = str(ssim)
    return headers


@router.post(
    "",
    response_class=Response,
    responses={200: {"content": {"application/octet-stream": {}}}, **ERROR_RESPONSES}
)
async def compress_image(
    image: UploadFile = File(..., description="Image file to compress"),
    quality: Optional[int] = Form(None, description="Compression quality (1-100), ignored for PNG"),
    format: Optional[str] = Form(None, description="Output format (jpeg, png, webp)"),
    include_metrics: bool = Form(False, description="Add PSNR/SSIM headers to the response"),
    services: ServiceContainer = Depends(get_services)
):
    """
    Compress a single image.

    - **image**: The image file to compress
    - **quality**: JPEG/WEBP quality (1-100, defaults to `DEFAULT_QUALITY`). PNG output is lossless and ignores it
    - **format**: Output format (jpeg, png or webp; default jpeg)
    - **include_metrics**: Whether to compute PSNR and SSIM against the original

    Returns:
        The compressed image as an attachment
    """
    options = CompressionRequest(
        quality=services.settings.default_quality if quality is None else quality,
        format=format or "jpeg"
    )

    # Cheap checks first
    services.validator.check_quality(options.quality)
    target = services.validator.check_format(options.format)
    quality = options.quality

    original_data = await image.read()
    logger.info(
        f"Compressing image {image.filename} ({len(original_data)} bytes) "
        f"to {target.value} with quality {quality}"
    )

    await run_in_threadpool(services.processor.validate, original_data)
    result = await run_in_threadpool(
        services.processor.compress_image, original_data, quality, target, image.filename
    )

    performance = measure_compression_performance(
        result.original_size, result.size, result.compression_time
    )
    filename = f"compressed_{int(time.time())}.{target.value}"
    headers = {
        "Content-Disposition": f"attachment; filename={filename}",
        "X-Original-Size": str(result.original_size),
        "X-Compressed-Size": str(result.size),
        "X-Compression-Ratio": str(performance["compression_ratio"]),
        "X-Compression-Time": str(result.compression_time),
    }

    if include_metrics:
        headers.update(await run_in_threadpool(_quality_headers, original_data, result.data))

    return Response(content=result.data, media_type="application/octet-stream", headers=headers)


@router.post(
    "/batch",
    response_class=Response,
    responses={200: {"content": {"application/zip": {}}}, **ERROR_RESPONSES}
)
async def compress_batch(
    request: BatchCompressionRequest,
    services: ServiceContainer = Depends(get_services)
):
    """
    Compress multiple images and return them in a ZIP archive.

    - **images**: List of `{filename, data}` objects, `data` being base64 encoded
    - **quality**: JPEG/WEBP quality (1-100, defaults to the configured `DEFAULT_QUALITY`)
    - **format**: Output format (jpeg, png or webp; default jpeg)

    The batch is rejected as a whole on the first invalid image. Payloads are
    only decoded once the image count is within the limit.
    """
    quality = services.validator.resolve_quality(request.quality)
    logger.info(
        f"Batch compression of {len(request.images)} images to {request.format} "
        f"with quality {quality}"
    )

    result = await run_in_threadpool(services.batch.run, request)

    zip_filename = f"compressed_batch_{int(time.time())}.zip"
    return Response(
        content=result.zip_data,
        media_type="application/zip",
        headers={
            "Content-Disposition": f"attachment; filename={zip_filename}",
            "X-Image-Count": str(result.count),
        }
    )


@router.post("/info", response_model=ImageInfoResponse, responses=ERROR_RESPONSES)
async def get_image_info(
    image: UploadFile = File(..., description="Image file to inspect"),
    services: ServiceContainer = Depends(get_services)
):
    """
    Get the dimensions and detected format of an image.

    - **image**: The image file to inspect
    """
    data = await image.read()

    await run_in_threadpool(services.processor.validate, data)
    info = await run_in_threadpool(services.processor.info, data)

    return ImageInfoResponse(
        filename=image.filename,
        width=info.width,
        height=info.height,
        format=info.format,
        size=len(data)
    )
