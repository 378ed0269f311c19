"""Exception types raised by the PlaneKit core."""


class PlaneKitError(Exception):
    """Base class for all PlaneKit errors."""


class DimensionMismatchError(PlaneKitError, ValueError):
    """Raised when two grids or images that must match in shape do not."""

    def __init__(self, expected, actual, what: str = "grid"):
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(
            f"{what} shape {self.actual} does not match image shape {self.expected}"
        )


class InvalidChannelError(PlaneKitError, ValueError):
    """Raised for a channel id outside the range a representation supports."""


class InvalidKernelError(PlaneKitError, ValueError):
    """Raised for kernels without a unique center or with the wrong rank."""
