"""2D convolution of a single floating-point plane.

Both the fixed and the spatially varying variants compute, for every output
pixel, the weighted sum of the input pixels under the kernel footprint
centered on that pixel (the kernel is not flipped). The output always has
the same shape as the input.
"""

import logging
from enum import Enum
from typing import Tuple, Union

import numpy as np
from scipy import ndimage

from .errors import InvalidKernelError
from .kernels import KernelProvider

logger = logging.getLogger(__name__)


class EdgeMode(Enum):
    """How the plane is extended where a kernel footprint crosses its border.

    Values are the matching :mod:`scipy.ndimage` mode names.
    """

    NEAREST = "nearest"     # a a a | a b c d | d d d
    CONSTANT = "constant"   # 0 0 0 | a b c d | 0 0 0
    REFLECT = "reflect"     # c b a | a b c d | d c b
    WRAP = "wrap"           # b c d | a b c d | a b c

    @classmethod
    def coerce(cls, value: Union["EdgeMode", str]) -> "EdgeMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = [m.value for m in cls]
            raise ValueError(f"Edge mode must be one of {valid}, got {value!r}")


def validate_kernel(kernel: np.ndarray) -> np.ndarray:
    """Return ``kernel`` as a float64 array, checking it has a unique center."""
    array = np.asarray(kernel, dtype=np.float64)
    if array.ndim != 2:
        raise InvalidKernelError(f"Kernel must be 2D, got shape {array.shape}")
    if array.shape[0] % 2 == 0 or array.shape[1] % 2 == 0:
        raise InvalidKernelError(
            f"Kernel dimensions must be odd to have a center, got {array.shape}"
        )
    return array


def _validate_plane(plane: np.ndarray) -> np.ndarray:
    array = np.asarray(plane, dtype=np.float64)
    if array.ndim != 2:
        raise ValueError(f"Expected a 2D plane, got shape {array.shape}")
    return array


def extend_indices(indices: np.ndarray, size: int, mode: EdgeMode) -> Tuple[np.ndarray, np.ndarray]:
    """Map possibly out-of-range indices onto ``[0, size)``.

    Returns the mapped indices and a boolean mask that is False where the
    value must be treated as zero (only used by :attr:`EdgeMode.CONSTANT`).
    """
    valid = np.ones(indices.shape, dtype=bool)
    if mode is EdgeMode.NEAREST:
        mapped = np.clip(indices, 0, size - 1)
    elif mode is EdgeMode.CONSTANT:
        valid = (indices >= 0) & (indices < size)
        mapped = np.clip(indices, 0, size - 1)
    elif mode is EdgeMode.REFLECT:
        period = 2 * size
        mapped = np.mod(indices, period)
        mapped = np.where(mapped >= size, period - 1 - mapped, mapped)
    elif mode is EdgeMode.WRAP:
        mapped = np.mod(indices, size)
    else:
        raise ValueError(f"Unknown edge mode: {mode}")
    return mapped, valid


def convolve(
    plane: np.ndarray,
    kernel: Union[np.ndarray, KernelProvider],
    edge_mode: Union[EdgeMode, str] = EdgeMode.NEAREST,
) -> np.ndarray:
    """Convolve ``plane`` with a fixed kernel or a :class:`KernelProvider`.

    Args:
        plane: 2D float plane (H, W)
        kernel: odd-sized 2D weight array, or a provider evaluated per pixel
        edge_mode: border extension policy, nearest edge pixel by default

    Returns:
        New (H, W) float64 plane; the input is not modified.
    """
    mode = EdgeMode.coerce(edge_mode)
    if isinstance(kernel, KernelProvider):
        return convolve_varying(plane, kernel, mode)
    return convolve_fixed(plane, kernel, mode)


def convolve_fixed(
    plane: np.ndarray,
    kernel: np.ndarray,
    edge_mode: Union[EdgeMode, str] = EdgeMode.NEAREST,
) -> np.ndarray:
    """Convolve with one kernel for the whole plane."""
    mode = EdgeMode.coerce(edge_mode)
    plane = _validate_plane(plane)
    kernel = validate_kernel(kernel)

    if plane.size == 0:
        return plane.copy()

    logger.debug(f"Fixed convolution: plane {plane.shape}, kernel {kernel.shape}, mode {mode.value}")
    return ndimage.correlate(plane, kernel, mode=mode.value, cval=0.0)


def convolve_varying(
    plane: np.ndarray,
    provider: KernelProvider,
    edge_mode: Union[EdgeMode, str] = EdgeMode.NEAREST,
) -> np.ndarray:
    """Convolve with a kernel requested from ``provider`` at each output pixel."""
    mode = EdgeMode.coerce(edge_mode)
    plane = _validate_plane(plane)
    height, width = plane.shape
    result = np.zeros_like(plane)

    logger.debug(f"Varying convolution: plane {plane.shape}, mode {mode.value}")

    for i in range(height):
        for j in range(width):
            kernel = validate_kernel(provider.kernel_at(i, j))
            half_h, half_w = kernel.shape[0] // 2, kernel.shape[1] // 2

            rows, row_valid = extend_indices(np.arange(i - half_h, i + half_h + 1), height, mode)
            cols, col_valid = extend_indices(np.arange(j - half_w, j + half_w + 1), width, mode)

            window = plane[np.ix_(rows, cols)]
            if mode is EdgeMode.CONSTANT:
                window = window * np.outer(row_valid, col_valid)

            result[i, j] = np.sum(window * kernel)

    return result
