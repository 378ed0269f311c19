"""Content-adaptive Gaussian kernel providers."""

import logging
from typing import Dict

import numpy as np
from skimage import filters

from .gaussian import make_gaussian_kernel
from .kernels import KernelProvider

logger = logging.getLogger(__name__)

FLAT_EDGE_TOLERANCE = 1e-12


class SigmaMapKernel(KernelProvider):
    """Gaussian kernel whose sigma is read per pixel from a sigma map.

    Sigmas are rounded to ``precision`` decimals and kernels are cached per
    distinct rounded value.
    """

    def __init__(self, radius: int, sigma_map: np.ndarray, precision: int = 3):
        sigma_map = np.asarray(sigma_map, dtype=np.float64)
        if sigma_map.ndim != 2:
            raise ValueError(f"sigma_map must be 2D, got shape {sigma_map.shape}")
        if sigma_map.size and sigma_map.min() <= 0:
            raise ValueError(f"All sigmas must be positive, got minimum {sigma_map.min()}")

        self.radius = radius
        self.sigma_map = np.round(sigma_map, precision)
        self._cache: Dict[float, np.ndarray] = {}

    def kernel_at(self, i: int, j: int) -> np.ndarray:
        sigma = float(self.sigma_map[i, j])
        kernel = self._cache.get(sigma)
        if kernel is None:
            kernel = make_gaussian_kernel(self.radius, sigma)
            self._cache[sigma] = kernel
        return kernel

    @property
    def cached_kernels(self) -> int:
        return len(self._cache)


class EdgeAwareKernel(SigmaMapKernel):
    """Blurs flat areas strongly and edges weakly.

    The Sobel edge magnitude of ``guide`` is scaled to [0, 1]; the strongest
    edge gets ``sigma_min`` and a perfectly flat area gets ``sigma_max``.
    """

    def __init__(
        self,
        guide: np.ndarray,
        radius: int,
        sigma_min: float = 0.5,
        sigma_max: float = 3.0,
        precision: int = 2,
    ):
        if not 0 < sigma_min <= sigma_max:
            raise ValueError(
                f"Need 0 < sigma_min <= sigma_max, got {sigma_min} and {sigma_max}"
            )

        guide = np.asarray(guide, dtype=np.float64)
        magnitude = filters.sobel(guide)
        peak = magnitude.max() if magnitude.size else 0.0
        # Sobel of a constant guide is rounding noise, not zero
        if peak > FLAT_EDGE_TOLERANCE:
            edges = magnitude / peak
        else:
            edges = np.zeros_like(magnitude)

        sigma_map = sigma_max - (sigma_max - sigma_min) * edges
        if sigma_map.size:
            logger.debug(
                f"Edge-aware sigma map {guide.shape}: "
                f"sigma in [{sigma_map.min():.3f}, {sigma_map.max():.3f}]"
            )

        super().__init__(radius, sigma_map, precision)
        self.sigma_min = sigma_min
        self.sigma_max = sigma_max
