"""Gaussian kernel synthesis."""

import logging
from typing import Union

import numpy as np

from .convolution import EdgeMode, convolve_fixed

logger = logging.getLogger(__name__)


def make_gaussian_kernel(radius: int, sigma: float) -> np.ndarray:
    """
    Build a normalized (2k+1)x(2k+1) Gaussian kernel.

    The weight at offset (di, dj) from the center is proportional to
    exp(-(di² + dj²) / (2 sigma²)); weights sum to 1.0 so flat regions keep
    their value after filtering.

    Args:
        radius: Kernel half-size k, the kernel spans [-k, k] on both axes
        sigma: Standard deviation in pixels, must be positive

    Returns:
        (2k+1, 2k+1) float64 kernel
    """
    if int(radius) != radius or radius < 0:
        raise ValueError(f"radius must be a non-negative integer, got {radius}")
    if not sigma > 0:
        raise ValueError(f"sigma must be positive, got {sigma}")

    radius = int(radius)
    di, dj = np.mgrid[-radius:radius + 1, -radius:radius + 1]
    kernel = np.exp(-(di ** 2 + dj ** 2) / (2.0 * sigma ** 2))
    return kernel / kernel.sum()


def apply_gaussian_filter(
    plane: np.ndarray,
    radius: int,
    sigma: float,
    edge_mode: Union[EdgeMode, str] = EdgeMode.NEAREST,
) -> np.ndarray:
    """Blur one plane with a Gaussian kernel of the given radius and sigma."""
    kernel = make_gaussian_kernel(radius, sigma)
    return convolve_fixed(plane, kernel, edge_mode)
