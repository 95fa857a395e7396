"""
Reduction mixin: reductions over axes and axis-wise composites.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence, Union

from ... import ops as _ops

if TYPE_CHECKING:
    from .._tensor import Tensor

AxesArg = Optional[Union[int, Sequence[int]]]


class TensorMixinReduction:
    """
    Reductions (`sum`, `mean`, `max`, `min`, `var`, `logsumexp`) and the
    last-axis composites (`normalize`, `softmax`, `log_softmax`).

    Notes
    -----
    ``axes=None`` reduces every axis and, without `keepdims`, produces a
    rank-0 tensor.
    """

    def sum(self, axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
        return _ops.sum(self, axes, keepdims)

    def mean(self, axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
        return _ops.mean(self, axes, keepdims)

    def max(self, axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
        return _ops.max(self, axes, keepdims)

    def min(self, axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
        return _ops.min(self, axes, keepdims)

    def var(self, axes: AxesArg = None, keepdims: bool = False, correction: int = 0) -> "Tensor":
        return _ops.var(self, axes, keepdims, correction)

    def logsumexp(self, axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
        return _ops.logsumexp(self, axes, keepdims)

    def normalize(self, epsilon: float = 1e-5, axis: Optional[int] = None) -> "Tensor":
        return _ops.normalize(self, epsilon, axis)

    def softmax(self, axis: Optional[int] = None) -> "Tensor":
        return _ops.softmax(self, axis)

    def log_softmax(self, axis: Optional[int] = None) -> "Tensor":
        return _ops.log_softmax(self, axis)
