"""Floating-point channel planes: the precision-preserving working representation."""

import logging
from numbers import Integral
from typing import Optional, Tuple, Union

import numpy as np

from .errors import DimensionMismatchError, InvalidChannelError
from .packed import NB_COLOR_CHANNELS, PackedImage

logger = logging.getLogger(__name__)

Operand = Union[float, np.ndarray]


class ChannelPlanes:
    """An RGB image stored as one float64 plane per color channel.

    Channel ids follow :mod:`planekit.core.packed` (blue=0, green=1, red=2).
    There is no alpha plane. Values are not bounded during computation; they
    are clamped to [0.0, 1.0] only by :meth:`to_packed`.

    The arithmetic operators (``add``, ``times``, ``invert``, ``threshold``,
    ``normalize``, ``add_image``, ``subtract_image``) modify the receiver in
    place and return it, so calls can be chained. Use :meth:`copy` first to
    keep the original.
    """

    def __init__(self, width: int = 0, height: int = 0):
        if width < 0 or height < 0:
            raise ValueError(f"Invalid image size: {width}x{height}")
        self._data = np.zeros((NB_COLOR_CHANNELS, height, width), dtype=np.float64)

    @classmethod
    def from_packed(cls, image: PackedImage) -> "ChannelPlanes":
        """Convert a packed image, normalizing each color channel to [0.0, 1.0]."""
        planes = cls.__new__(cls)
        planes._data = np.stack(
            [image.channel_float(c) for c in range(NB_COLOR_CHANNELS)]
        ).astype(np.float64)
        return planes

    @classmethod
    def from_planes(cls, data: np.ndarray) -> "ChannelPlanes":
        """Build from a ``(3, height, width)`` array (blue, green, red order)."""
        array = np.asarray(data, dtype=np.float64)
        if array.ndim != 3 or array.shape[0] != NB_COLOR_CHANNELS:
            raise ValueError(
                f"Expected ({NB_COLOR_CHANNELS}, H, W) plane stack, got shape {array.shape}"
            )
        planes = cls.__new__(cls)
        planes._data = array.copy()
        return planes

    def copy(self) -> "ChannelPlanes":
        return ChannelPlanes.from_planes(self._data)

    @property
    def width(self) -> int:
        return self._data.shape[2]

    @property
    def height(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width) of every plane."""
        return self._data.shape[1:]

    @property
    def data(self) -> np.ndarray:
        """A copy of the full ``(3, height, width)`` stack."""
        return self._data.copy()

    def channel(self, channel_id: int) -> np.ndarray:
        """Return a copy of one plane."""
        return self._data[self._check_channel(channel_id)].copy()

    def set_channel(self, channel_id: int, plane: np.ndarray) -> None:
        """Replace one plane with a copy of ``plane``."""
        c = self._check_channel(channel_id)
        self._data[c] = self._check_grid(plane)

    def to_packed(self, alpha: int = 255) -> PackedImage:
        """Clamp to [0.0, 1.0], quantize to 0-255 and pack with a uniform ``alpha``."""
        if not 0 <= alpha <= 255:
            raise ValueError(f"alpha must be in [0, 255], got {alpha}")
        image = PackedImage(self.width, self.height, color=(int(alpha) << 24) | 0xFFFFFF)
        for c in range(NB_COLOR_CHANNELS):
            image.set_channel(c, self._data[c])
        return image

    # In-place arithmetic

    def add(self, offset: Operand, channel_id: Optional[int] = None) -> "ChannelPlanes":
        """Add a scalar or a same-sized grid, to every channel or to ``channel_id``."""
        self._target(channel_id)[...] += self._operand(offset)
        return self

    def times(self, coef: Operand, channel_id: Optional[int] = None) -> "ChannelPlanes":
        """Multiply by a scalar or a same-sized grid, every channel or ``channel_id``."""
        self._target(channel_id)[...] *= self._operand(coef)
        return self

    def add_image(self, other: "ChannelPlanes") -> "ChannelPlanes":
        self._check_image(other)
        self._data += other._data
        return self

    def subtract_image(self, other: "ChannelPlanes") -> "ChannelPlanes":
        self._check_image(other)
        self._data -= other._data
        return self

    def invert(self) -> "ChannelPlanes":
        """Replace every value ``v`` with ``1.0 - v``."""
        np.subtract(1.0, self._data, out=self._data)
        return self

    def threshold(self, threshold: float, keep_upper: bool) -> "ChannelPlanes":
        """Zero values by magnitude.

        With ``keep_upper`` every value with ``|v| < threshold`` is set to 0.0,
        otherwise every value with ``|v| > threshold`` is. Values whose
        magnitude equals the threshold are kept in both modes.
        """
        magnitude = np.abs(self._data)
        if keep_upper:
            self._data[magnitude < threshold] = 0.0
        else:
            self._data[magnitude > threshold] = 0.0
        return self

    def normalize(self, channel_id: Optional[int] = None) -> "ChannelPlanes":
        """Rescale using the global (or per-channel) minimum and maximum.

        Computes ``v <- (v + min) / max`` where ``min`` and ``max`` are taken
        before the shift. This is not a true [0, 1] rescale: the offset is
        added rather than subtracted and the scale ignores the shift.

        When ``max <= 0`` only the offset is applied and a warning is
        logged, so ``[-2, -1]`` becomes ``[-4, -3]`` rather than the
        ``[4, 3]`` the formula would give (or the infinities of dividing by
        the smallest positive float).
        """
        target = self._target(channel_id)
        if target.size == 0:
            return self

        low = float(target.min())
        high = float(target.max())
        target += low
        if high <= 0.0:
            logger.warning(f"Cannot scale by non-positive maximum {high}; applied offset only")
            return self
        target *= 1.0 / high
        logger.debug(f"Normalized with min={low}, max={high}")
        return self

    # Validation helpers

    def _check_channel(self, channel_id: int) -> int:
        if not isinstance(channel_id, Integral) or not 0 <= channel_id < NB_COLOR_CHANNELS:
            raise InvalidChannelError(
                f"Color channel id must be one of 0-{NB_COLOR_CHANNELS - 1}, got {channel_id!r}"
            )
        return int(channel_id)

    def _check_grid(self, grid: np.ndarray) -> np.ndarray:
        array = np.asarray(grid, dtype=np.float64)
        if array.shape != self.shape:
            raise DimensionMismatchError(self.shape, array.shape)
        return array

    def _check_image(self, other: "ChannelPlanes") -> None:
        if other.shape != self.shape:
            raise DimensionMismatchError(self.shape, other.shape, "image")

    def _operand(self, value: Operand) -> Union[float, np.ndarray]:
        if np.ndim(value) == 0:
            return float(value)
        return self._check_grid(value)

    def _target(self, channel_id: Optional[int]) -> np.ndarray:
        if channel_id is None:
            return self._data
        return self._data[self._check_channel(channel_id)]

    def __repr__(self) -> str:
        return f"ChannelPlanes(width={self.width}, height={self.height})"
