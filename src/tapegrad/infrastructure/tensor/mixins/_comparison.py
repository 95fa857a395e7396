"""
Comparison mixin: boolean masks and selection.

Comparisons are exposed as named methods (`eq`, `ne`) and as the ordering
operators (``<``, ``<=``, ``>``, ``>=``). ``==`` and ``!=`` keep their
identity semantics so tensors stay hashable and usable as dict keys.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from ... import ops as _ops

if TYPE_CHECKING:
    from .._tensor import Tensor

Operand = Union["Tensor", int, float]


class TensorMixinComparison:
    """
    Non-differentiable comparisons returning ``bool`` tensors, and `choose`
    on a boolean tensor.
    """

    def eq(self, other: Operand) -> "Tensor":
        return _ops.eq(self, other)

    def ne(self, other: Operand) -> "Tensor":
        return _ops.ne(self, other)

    def __gt__(self, other: Operand) -> "Tensor":
        return _ops.gt(self, other)

    def __ge__(self, other: Operand) -> "Tensor":
        return _ops.ge(self, other)

    def __lt__(self, other: Operand) -> "Tensor":
        return _ops.lt(self, other)

    def __le__(self, other: Operand) -> "Tensor":
        return _ops.le(self, other)

    def choose(self, lhs: "Tensor", rhs: "Tensor") -> "Tensor":
        """Use this boolean tensor as the condition of `ops.choose`."""
        return _ops.choose(self, lhs, rhs)
