"""End-to-end filters composed from planes, kernels and convolution."""

import logging
from dataclasses import dataclass
from typing import Callable, Sequence, Union

import numpy as np

from .algebra import to_grayscale
from .convolution import EdgeMode, convolve_fixed, convolve_varying
from .gaussian import apply_gaussian_filter
from .kernels import KernelProvider
from .packed import (
    CHANNEL_ALPHA,
    CHANNEL_BLUE,
    CHANNEL_GREEN,
    CHANNEL_RED,
    NB_COLOR_CHANNELS,
    PackedImage,
    unpack_argb,
)
from .planes import ChannelPlanes

logger = logging.getLogger(__name__)


@dataclass
class FilterConfig:
    """Parameters shared by the blur, sharpen and black-and-white filters."""

    radius: int = 2                  # Kernel half-size k (kernel is 2k+1 wide)
    sigma: float = 1.0               # Gaussian standard deviation in pixels
    coef: float = 1.0                # Unsharp mask strength
    mask_threshold: float = 0.0      # Unsharp mask magnitude threshold
    bw_threshold: float = 0.5        # Luma cut for black and white
    edge_mode: EdgeMode = EdgeMode.NEAREST

    def __post_init__(self):
        """Validate configuration parameters after initialization."""
        self.edge_mode = EdgeMode.coerce(self.edge_mode)
        self._validate_parameters()

    def _validate_parameters(self) -> None:
        """Validate all configuration parameters.

        Raises:
            ValueError: If any parameter is invalid
        """
        if self.radius < 0:
            raise ValueError(f"radius must be non-negative, got {self.radius}")
        if self.sigma <= 0:
            raise ValueError(f"sigma must be positive, got {self.sigma}")
        if self.mask_threshold < 0:
            raise ValueError(f"mask_threshold must be non-negative, got {self.mask_threshold}")
        if not 0.0 <= self.bw_threshold <= 1.0:
            raise ValueError(f"bw_threshold must be between 0 and 1, got {self.bw_threshold}")


def _filter_channels(image: ChannelPlanes, plane_filter: Callable[[np.ndarray], np.ndarray]) -> ChannelPlanes:
    filtered = ChannelPlanes(image.width, image.height)
    for c in range(NB_COLOR_CHANNELS):
        filtered.set_channel(c, plane_filter(image.channel(c)))
    return filtered


def gaussian_blur(
    image: ChannelPlanes,
    radius: int,
    sigma: float,
    edge_mode: Union[EdgeMode, str] = EdgeMode.NEAREST,
) -> ChannelPlanes:
    """Blur each color channel with a (2k+1)x(2k+1) Gaussian kernel."""
    logger.debug(f"Gaussian blur: k={radius}, sigma={sigma}")
    return _filter_channels(
        image, lambda plane: apply_gaussian_filter(plane, radius, sigma, edge_mode)
    )


def kernel_filter(
    image: ChannelPlanes,
    kernel: np.ndarray,
    edge_mode: Union[EdgeMode, str] = EdgeMode.NEAREST,
) -> ChannelPlanes:
    """Convolve each color channel with a caller-supplied kernel (not normalized)."""
    return _filter_channels(image, lambda plane: convolve_fixed(plane, kernel, edge_mode))


def varying_kernel_filter(
    image: ChannelPlanes,
    provider: KernelProvider,
    edge_mode: Union[EdgeMode, str] = EdgeMode.NEAREST,
) -> ChannelPlanes:
    """Convolve each color channel with a spatially varying kernel."""
    return _filter_channels(image, lambda plane: convolve_varying(plane, provider, edge_mode))


def unsharp_mask(
    image: ChannelPlanes,
    radius: int,
    sigma: float,
    coef: float,
    mask_threshold: float = 0.0,
    edge_mode: Union[EdgeMode, str] = EdgeMode.NEAREST,
) -> ChannelPlanes:
    """
    Sharpen by adding back the difference between the image and its blur.

    mask = (image - blur(image)) * coef, with mask values whose magnitude is
    below ``mask_threshold`` zeroed; result = image + mask.

    Note: with the default ``mask_threshold=0.0`` nothing is ever zeroed
    (no magnitude is below zero), so every difference passes through. Pass a
    small positive value to suppress low-amplitude noise in the mask.
    """
    blurred = gaussian_blur(image, radius, sigma, edge_mode)

    mask = image.copy().subtract_image(blurred).times(coef)
    mask.threshold(mask_threshold, keep_upper=True)

    return image.copy().add_image(mask)


def to_grayscale_packed(image: PackedImage) -> PackedImage:
    """Grayscale a packed image; the result is opaque."""
    return to_grayscale(ChannelPlanes.from_packed(image)).to_packed()


def invert_colors(image: PackedImage) -> PackedImage:
    """Invert red, green and blue of a packed image, keeping alpha."""
    return image.invert_colors()


def key_color_transparent(image: PackedImage, color: Sequence[int], threshold: float) -> PackedImage:
    """
    Make pixels close to a key color fully transparent.

    The distance is Euclidean in RGB on the 0-255 scale; pixels with
    ``distance <= threshold`` get alpha 0, the others keep their alpha.
    The image is modified in place and returned.

    Args:
        image: Packed image to modify
        color: Key color as (r, g, b) or a packed ARGB integer
        threshold: Maximum distance, 0-255 scale (up to ~441.7 for black vs white)
    """
    if isinstance(color, (int, np.integer)):
        key_r, key_g, key_b, _ = unpack_argb(color)
    else:
        key_r, key_g, key_b = (int(v) for v in tuple(color)[:3])

    red = image.channel(CHANNEL_RED).astype(np.float64)
    green = image.channel(CHANNEL_GREEN).astype(np.float64)
    blue = image.channel(CHANNEL_BLUE).astype(np.float64)

    distance = np.sqrt((red - key_r) ** 2 + (green - key_g) ** 2 + (blue - key_b) ** 2)
    keyed = distance <= threshold

    alpha = image.channel(CHANNEL_ALPHA)
    alpha[keyed] = 0
    image.set_channel(CHANNEL_ALPHA, alpha)

    logger.debug(f"Keyed {int(keyed.sum())} pixels transparent (key={key_r, key_g, key_b}, threshold={threshold})")
    return image
