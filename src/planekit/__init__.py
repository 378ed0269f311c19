"""PlaneKit - Pixel-level image filtering on packed images and float channel planes."""

__version__ = "0.1.0"
__author__ = "PlaneKit Team"
__description__ = "Convolution, Gaussian and channel-algebra filters for raster images"

from .core.packed import PackedImage
from .core.planes import ChannelPlanes
from .core.convolution import EdgeMode, convolve
from .core.gaussian import make_gaussian_kernel
from .core.filters import gaussian_blur, unsharp_mask, key_color_transparent
from .core.algebra import to_grayscale, to_black_and_white, blend
from .utils.image import read_image, write_image

__all__ = [
    "PackedImage",
    "ChannelPlanes",
    "EdgeMode",
    "convolve",
    "make_gaussian_kernel",
    "gaussian_blur",
    "unsharp_mask",
    "key_color_transparent",
    "to_grayscale",
    "to_black_and_white",
    "blend",
    "read_image",
    "write_image",
]
