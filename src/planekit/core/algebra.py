"""Channel algebra over ChannelPlanes: luma, binary thresholding and blending."""

import logging

import numpy as np

from .errors import DimensionMismatchError
from .packed import CHANNEL_BLUE, CHANNEL_GREEN, CHANNEL_RED, NB_COLOR_CHANNELS
from .planes import ChannelPlanes

logger = logging.getLogger(__name__)

# ITU-R BT.601 (PAL/NTSC) luma weights
LUMA_RED = 0.299
LUMA_GREEN = 0.587
LUMA_BLUE = 0.114


def rgb_to_grayscale(red, green, blue):
    """Luma of RGB values; works on scalars and arrays alike."""
    return LUMA_RED * red + LUMA_GREEN * green + LUMA_BLUE * blue


def luma(image: ChannelPlanes) -> np.ndarray:
    """Single luma plane of an image."""
    return rgb_to_grayscale(
        image.channel(CHANNEL_RED),
        image.channel(CHANNEL_GREEN),
        image.channel(CHANNEL_BLUE),
    )


def _uniform(plane: np.ndarray) -> ChannelPlanes:
    return ChannelPlanes.from_planes(np.stack([plane] * NB_COLOR_CHANNELS))


def to_grayscale(image: ChannelPlanes) -> ChannelPlanes:
    """New image with the luma written identically to all three channels."""
    return _uniform(luma(image))


def to_black_and_white(image: ChannelPlanes, threshold: float) -> ChannelPlanes:
    """Grayscale, then 1.0 where luma is strictly above ``threshold`` and 0.0 elsewhere."""
    gray = luma(image)
    return _uniform(np.where(gray > threshold, 1.0, 0.0))


def blend(image1: ChannelPlanes, image2: ChannelPlanes, proportion1: np.ndarray) -> ChannelPlanes:
    """
    Per-pixel weighted average of two images.

    Args:
        image1: First image
        image2: Second image, same size as ``image1``
        proportion1: (H, W) weight of ``image1``; ``image2`` gets ``1 - proportion1``

    Returns:
        New blended image
    """
    if image1.shape != image2.shape:
        raise DimensionMismatchError(image1.shape, image2.shape, "second image")
    proportion1 = np.asarray(proportion1, dtype=np.float64)
    if proportion1.shape != image1.shape:
        raise DimensionMismatchError(image1.shape, proportion1.shape, "proportion map")

    blended = image1.copy().times(proportion1)
    blended.add_image(image2.copy().times(1.0 - proportion1))
    return blended
