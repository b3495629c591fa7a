"""
Utilities for measuring compression performance and image quality.
"""
import math
import time
import logging
import numpy as np
import psutil
from PIL import Image
from typing import Tuple, Optional, Dict, Union
from skimage.metrics import peak_signal_noise_ratio, structural_similarity

# Set up logging
logger = logging.getLogger(__name__)


def get_cpu_mem() -> Dict[str, float]:
    """
    Get current CPU and memory usage.

    Returns:
        Dictionary with CPU and memory usage percentages
    """
    return {
        "cpu_usage": psutil.cpu_percent(interval=None),
        "memory_usage": psutil.virtual_memory().percent
    }


def sanitize_float(value: Optional[float]) -> Optional[float]:
    """Map NaN and infinity to None so values stay JSON and header safe."""
    if value is None:
        return None
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _to_rgb_array(img: Union[np.ndarray, Image.Image]) -> np.ndarray:
    if isinstance(img, np.ndarray):
        return img
    return np.array(img.convert("RGB"))


def calculate_image_metrics(
    original_img: Union[np.ndarray, Image.Image],
    compressed_img: Union[np.ndarray, Image.Image]
) -> Tuple[Optional[float], Optional[float]]:
    """
    Calculate PSNR and SSIM for image quality comparison.

    Args:
        original_img: Original image (PIL Image or numpy array)
        compressed_img: Re-encoded image (PIL Image or numpy array)

    Returns:
        Tuple of (PSNR, SSIM) values, rounded to 2 and 4 decimal places respectively.
        PSNR is None for identical images. Returns (None, None) if calculation fails.
    """
    try:
        original = _to_rgb_array(original_img)
        compressed = _to_rgb_array(compressed_img)
    except Exception as e:
        logger.error(f"Failed to convert images to arrays: {e}")
        return None, None

    if original.shape != compressed.shape:
        logger.info(f"Image shapes don't match: original {original.shape} vs compressed {compressed.shape}")
        return None, None

    try:
        mse = float(np.mean(np.square(original.astype(np.float32) - compressed.astype(np.float32))))
        if mse == 0:
            # Identical images have infinite PSNR
            psnr = None
        else:
            psnr = peak_signal_noise_ratio(original, compressed, data_range=255)

        ssim = structural_similarity(original, compressed, data_range=255, channel_axis=2)
    except Exception as e:
        logger.error(f"Error calculating metrics: {e}")
        return None, None

    psnr = sanitize_float(psnr)
    ssim = sanitize_float(ssim)
    return (
        round(psnr, 2) if psnr is not None else None,
        round(ssim, 4) if ssim is not None else None
    )


def measure_compression_performance(
    original_size: int,
    compressed_size: int,
    compression_time: float
) -> Dict[str, float]:
    """
    Calculate compression performance metrics.

    Args:
        original_size: Size of the original file in bytes
        compressed_size: Size of the compressed file in bytes
        compression_time: Time taken for compression in seconds

    Returns:
        Dictionary with compression ratio, space savings percentage, and compression speed
    """
    compression_ratio = original_size / compressed_size if compressed_size > 0 else 0
    space_savings = (1 - (compressed_size / original_size)) * 100 if original_size > 0 else 0
    compression_speed = original_size / (compression_time * 1024 * 1024) if compression_time > 0 else 0  # MB/s

    return {
        "compression_ratio": round(compression_ratio, 2),
        "space_savings_percent": round(space_savings, 2),
        "compression_speed_mbps": round(compression_speed, 2)
    }


class PerformanceTimer:
    """
    Context manager for measuring execution time.

    Example:
        with PerformanceTimer() as timer:
            # Code to measure
        execution_time = timer.execution_time
    """

    def __init__(self):
        self.start_time = None
        self.execution_time = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.execution_time = time.perf_counter() - self.start_time
        return False  # Don't suppress exceptions
