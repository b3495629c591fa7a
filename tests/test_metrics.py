"""
Tests for compression and image quality metrics.
"""
import math

import numpy as np
from PIL import Image

from image_compress.utils.metrics import (
    PerformanceTimer,
    calculate_image_metrics,
    measure_compression_performance,
    sanitize_float,
)
from tests.conftest import make_image


def test_identical_images():
    img = make_image()
    psnr, ssim = calculate_image_metrics(img, img.copy())

    assert psnr is None
    assert ssim == 1.0


def test_different_images():
    original = make_image()
    noisy = np.array(original).astype(np.int16)
    noisy[::2, ::2] += 20
    degraded = Image.fromarray(np.clip(noisy, 0, 255).astype(np.uint8))

    psnr, ssim = calculate_image_metrics(original, degraded)

    assert psnr is not None and 10 < psnr < 100
    assert ssim is not None and 0 < ssim < 1


def test_mismatched_shapes():
    assert calculate_image_metrics(make_image((100, 50)), make_image((50, 100))) == (None, None)


def test_measure_compression_performance():
    metrics = measure_compression_performance(1000, 250, 0.5)

    assert metrics["compression_ratio"] == 4.0
    assert metrics["space_savings_percent"] == 75.0
    assert metrics["compression_speed_mbps"] >= 0


def test_measure_compression_performance_zero_sizes():
    metrics = measure_compression_performance(0, 0, 0)
    assert metrics == {"compression_ratio": 0, "space_savings_percent": 0, "compression_speed_mbps": 0}


def test_sanitize_float():
    assert sanitize_float(None) is None
    assert sanitize_float(float("inf")) is None
    assert sanitize_float(float("nan")) is None
    assert sanitize_float(1.5) == 1.5


def test_performance_timer():
    with PerformanceTimer() as timer:
        math.factorial(200)
    assert timer.execution_time >= 0
