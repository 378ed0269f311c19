"""Core processing modules for PlaneKit."""

from .errors import (
    PlaneKitError,
    DimensionMismatchError,
    InvalidChannelError,
    InvalidKernelError,
)
from .packed import (
    PackedImage,
    CHANNEL_ALPHA,
    CHANNEL_RED,
    CHANNEL_GREEN,
    CHANNEL_BLUE,
    NB_COLOR_CHANNELS,
    OPAQUE_WHITE,
    pack_argb,
    unpack_argb,
)
from .planes import ChannelPlanes
from .kernels import KernelProvider, UniformKernel, FunctionKernel
from .convolution import EdgeMode, convolve, convolve_fixed, convolve_varying
from .gaussian import make_gaussian_kernel, apply_gaussian_filter
from .adaptive_kernels import SigmaMapKernel, EdgeAwareKernel
from .algebra import rgb_to_grayscale, to_grayscale, to_black_and_white, blend
from .filters import (
    FilterConfig,
    gaussian_blur,
    kernel_filter,
    varying_kernel_filter,
    unsharp_mask,
    to_grayscale_packed,
    invert_colors,
    key_color_transparent,
)

__all__ = [
    "PlaneKitError",
    "DimensionMismatchError",
    "InvalidChannelError",
    "InvalidKernelError",
    "PackedImage",
    "CHANNEL_ALPHA",
    "CHANNEL_RED",
    "CHANNEL_GREEN",
    "CHANNEL_BLUE",
    "NB_COLOR_CHANNELS",
    "OPAQUE_WHITE",
    "pack_argb",
    "unpack_argb",
    "ChannelPlanes",
    "KernelProvider",
    "UniformKernel",
    "FunctionKernel",
    "EdgeMode",
    "convolve",
    "convolve_fixed",
    "convolve_varying",
    "make_gaussian_kernel",
    "apply_gaussian_filter",
    "SigmaMapKernel",
    "EdgeAwareKernel",
    "rgb_to_grayscale",
    "to_grayscale",
    "to_black_and_white",
    "blend",
    "FilterConfig",
    "gaussian_blur",
    "kernel_filter",
    "varying_kernel_filter",
    "unsharp_mask",
    "to_grayscale_packed",
    "invert_colors",
    "key_color_transparent",
]
