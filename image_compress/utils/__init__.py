"""
Utility functions for the image compression service.
"""
from image_compress.utils.metrics import (
    get_cpu_mem,
    sanitize_float,
    calculate_image_metrics,
    measure_compression_performance,
    PerformanceTimer
)

__all__ = [
    'get_cpu_mem',
    'sanitize_float',
    'calculate_image_metrics',
    'measure_compression_performance',
    'PerformanceTimer'
]
