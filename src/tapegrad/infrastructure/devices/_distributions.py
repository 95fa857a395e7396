"""
Value distributions for sampled tensors.

Each distribution draws from the device's `numpy.random.Generator`, so the
values produced by a device depend only on its seed and on the sequence of
sampling calls. Any object with a compatible ``sample(rng, shape, dtype)``
method can be passed where these are accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ...domain._dtype import DType
from ._cpu_storage import numpy_dtype


def _float_dtype(dtype: DType) -> np.dtype:
    if not dtype.is_float:
        raise TypeError(f"Cannot sample real values into a {dtype} buffer")
    return numpy_dtype(dtype)


@dataclass(frozen=True)
class Standard:
    """Uniform on ``[0, 1)`` for floats, fair coin flips for ``bool``."""

    def sample(self, rng: np.random.Generator, shape: Sequence[int], dtype: DType) -> np.ndarray:
        if dtype is DType.BOOL:
            return rng.random(tuple(shape)) < 0.5
        return rng.random(tuple(shape), dtype=_float_dtype(dtype))


@dataclass(frozen=True)
class StandardNormal:
    """Normal with mean 0 and standard deviation 1."""

    def sample(self, rng: np.random.Generator, shape: Sequence[int], dtype: DType) -> np.ndarray:
        return rng.standard_normal(tuple(shape), dtype=_float_dtype(dtype))


@dataclass(frozen=True)
class Uniform:
    """
    Uniform on ``[low, high)``.

    Raises
    ------
    ValueError
        If ``low >= high``.
    """

    low: float
    high: float

    def __post_init__(self) -> None:
        if not self.low < self.high:
            raise ValueError(f"Uniform requires low < high, got [{self.low}, {self.high})")

    def sample(self, rng: np.random.Generator, shape: Sequence[int], dtype: DType) -> np.ndarray:
        out = rng.uniform(self.low, self.high, tuple(shape))
        return out.astype(_float_dtype(dtype), copy=False)


@dataclass(frozen=True)
class Normal:
    """Normal with the given mean and (positive) standard deviation."""

    mean: float = 0.0
    std: float = 1.0

    def __post_init__(self) -> None:
        if self.std <= 0.0:
            raise ValueError(f"Normal requires std > 0, got {self.std}")

    def sample(self, rng: np.random.Generator, shape: Sequence[int], dtype: DType) -> np.ndarray:
        out = rng.normal(self.mean, self.std, tuple(shape))
        return out.astype(_float_dtype(dtype), copy=False)
