"""Packed integer image: one 32-bit ARGB value per pixel.

Each pixel stores, from most to least significant byte: alpha, red, green,
blue. This is the compact, display-ready representation; use
:class:`~planekit.core.planes.ChannelPlanes` for precise arithmetic.
"""

import logging
from numbers import Integral, Real
from typing import Tuple, Union

import numpy as np

from .errors import DimensionMismatchError, InvalidChannelError

logger = logging.getLogger(__name__)

CHANNEL_BLUE = 0
CHANNEL_GREEN = 1
CHANNEL_RED = 2
CHANNEL_ALPHA = 3

NB_COLOR_CHANNELS = 3
NB_CHANNELS = 4

OPAQUE_WHITE = 0xFFFFFFFF

ChannelData = Union[int, float, np.ndarray]


def pack_argb(red: int, green: int, blue: int, alpha: int = 255) -> int:
    """Pack four 0-255 channel values into a single ARGB integer."""
    for name, value in (("red", red), ("green", green), ("blue", blue), ("alpha", alpha)):
        if not 0 <= value <= 255:
            raise ValueError(f"{name} must be in [0, 255], got {value}")
    return (int(alpha) << 24) | (int(red) << 16) | (int(green) << 8) | int(blue)


def unpack_argb(color: int) -> Tuple[int, int, int, int]:
    """Split an ARGB integer into its (red, green, blue, alpha) components."""
    color = int(color) & 0xFFFFFFFF
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF, (color >> 24) & 0xFF


def float_to_channel_int(values: np.ndarray) -> np.ndarray:
    """Quantize [0.0, 1.0] floats to 0-255 integers, clamping out-of-range input."""
    scaled = np.rint(np.asarray(values, dtype=np.float64) * 255.0)
    return np.clip(scaled, 0, 255).astype(np.uint32)


def _check_channel(channel_id: int) -> int:
    if not isinstance(channel_id, Integral) or not 0 <= channel_id < NB_CHANNELS:
        raise InvalidChannelError(
            f"Channel id must be one of 0-{NB_CHANNELS - 1}, got {channel_id!r}"
        )
    return int(channel_id)


class PackedImage:
    """A grid of packed ARGB pixels.

    The dimensions are fixed at construction; only pixel content changes.
    """

    def __init__(self, width: int = 0, height: int = 0, color: int = OPAQUE_WHITE):
        if width < 0 or height < 0:
            raise ValueError(f"Invalid image size: {width}x{height}")
        self._data = np.empty((height, width), dtype=np.uint32)
        self.reset(color)

    @classmethod
    def from_array(cls, data: np.ndarray) -> "PackedImage":
        """Build an image from a 2D array of packed ARGB integers.

        Signed input (e.g. values produced by a platform that stores ARGB in a
        signed 32-bit int) is reinterpreted as unsigned.
        """
        array = np.asarray(data)
        if array.ndim != 2:
            raise ValueError(f"Expected 2D packed pixel array, got shape {array.shape}")
        if not np.issubdtype(array.dtype, np.integer):
            raise ValueError(f"Expected integer packed pixels, got {array.dtype}")

        image = cls.__new__(cls)
        image._data = (array.astype(np.int64) & 0xFFFFFFFF).astype(np.uint32)
        logger.debug(f"Packed image from array: {image.width}x{image.height}")
        return image

    def copy(self) -> "PackedImage":
        return PackedImage.from_array(self._data)

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width), matching numpy's row-major convention."""
        return self._data.shape

    @property
    def data(self) -> np.ndarray:
        """A copy of the packed pixel grid."""
        return self._data.copy()

    def pixel(self, i: int, j: int) -> int:
        """Packed ARGB value at row ``i``, column ``j``."""
        return int(self._data[i, j])

    def channel(self, channel_id: int) -> np.ndarray:
        """Return one channel as an integer grid with values in [0, 255]."""
        shift = _check_channel(channel_id) * 8
        return ((self._data >> np.uint32(shift)) & np.uint32(0xFF)).astype(np.int32)

    def channel_float(self, channel_id: int) -> np.ndarray:
        """Return one channel as a float grid with values in [0.0, 1.0]."""
        return self.channel(channel_id).astype(np.float64) / 255.0

    def set_channel(self, channel_id: int, data: ChannelData) -> None:
        """Overwrite one channel across all pixels.

        ``data`` may be:

        * an integer grid, values in [0, 255];
        * a float grid, values in [0.0, 1.0], scaled by 255;
        * a scalar applied to every pixel (int in [0, 255] or float in [0.0, 1.0]).

        Values are clamped before packing so that they never spill into the
        neighbouring channels.
        """
        shift = _check_channel(channel_id) * 8
        values = self._channel_values(data)

        mask = np.uint32(~(0xFF << shift) & 0xFFFFFFFF)
        self._data &= mask
        self._data |= values << np.uint32(shift)

    def _channel_values(self, data: ChannelData) -> np.ndarray:
        if isinstance(data, (Integral, Real)) and not isinstance(data, bool):
            if isinstance(data, Integral):
                value = np.uint32(min(max(int(data), 0), 255))
            else:
                value = float_to_channel_int(float(data))
            return np.full(self.shape, value, dtype=np.uint32)

        array = np.asarray(data)
        if array.shape != self.shape:
            raise DimensionMismatchError(self.shape, array.shape, "channel data")

        if np.issubdtype(array.dtype, np.integer):
            return np.clip(array, 0, 255).astype(np.uint32)
        if np.issubdtype(array.dtype, np.floating):
            return float_to_channel_int(array)
        raise ValueError(f"Unsupported channel data type: {array.dtype}")

    def reset(self, color: int = OPAQUE_WHITE) -> None:
        """Fill every pixel with ``color`` (a packed ARGB value)."""
        self._data.fill(np.uint32(int(color) & 0xFFFFFFFF))

    def invert_colors(self) -> "PackedImage":
        """Return a copy with red, green and blue inverted; alpha is kept."""
        out = self.copy()
        for c in range(NB_COLOR_CHANNELS):
            out.set_channel(c, 255 - out.channel(c))
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackedImage):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def __repr__(self) -> str:
        return f"PackedImage(width={self.width}, height={self.height})"
