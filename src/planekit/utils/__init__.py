"""Utility modules for PlaneKit."""

from .image import (
    FORMAT_JPG,
    FORMAT_PNG,
    decode_pixels,
    encode_pixels,
    packed_from_pil,
    packed_to_pil,
    read_image,
    write_image,
)
from .profiler import PerformanceProfiler, global_profiler, estimate_memory_usage

__all__ = [
    "FORMAT_JPG",
    "FORMAT_PNG",
    "decode_pixels",
    "encode_pixels",
    "packed_from_pil",
    "packed_to_pil",
    "read_image",
    "write_image",
    "PerformanceProfiler",
    "global_profiler",
    "estimate_memory_usage",
]
