"""Kernel providers for spatially varying convolution."""

from abc import ABC, abstractmethod
from typing import Callable

import numpy as np


class KernelProvider(ABC):
    """Supplies the kernel to use at each output pixel.

    Kernels are evaluated lazily, one call per output pixel, so providers
    may derive them from local image statistics. Each returned kernel must
    be a 2D array with odd dimensions.
    """

    @abstractmethod
    def kernel_at(self, i: int, j: int) -> np.ndarray:
        """Kernel weights centered on row ``i``, column ``j``."""


class UniformKernel(KernelProvider):
    """The same kernel at every position."""

    def __init__(self, kernel: np.ndarray):
        self.kernel = np.asarray(kernel, dtype=np.float64)

    def kernel_at(self, i: int, j: int) -> np.ndarray:
        return self.kernel


class FunctionKernel(KernelProvider):
    """Wraps a plain ``(i, j) -> kernel`` callable."""

    def __init__(self, func: Callable[[int, int], np.ndarray]):
        self.func = func

    def kernel_at(self, i: int, j: int) -> np.ndarray:
        return self.func(i, j)
