"""
Arithmetic mixin: Python operators and elementwise binary functions.

Operands must have identical shapes; a Python scalar is accepted on either
side of an operator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from ... import ops as _ops

if TYPE_CHECKING:
    from .._tensor import Tensor

Number = Union[int, float]
Operand = Union["Tensor", Number]


class TensorMixinArithmetic:
    """Elementwise ``+ - * /``, ``@``, ``**`` and ``maximum``/``minimum``."""

    def __add__(self, other: Operand) -> "Tensor":
        return _ops.add(self, other)

    def __radd__(self, other: Number) -> "Tensor":
        return _ops.add(other, self)

    def __sub__(self, other: Operand) -> "Tensor":
        return _ops.sub(self, other)

    def __rsub__(self, other: Number) -> "Tensor":
        return _ops.sub(other, self)

    def __mul__(self, other: Operand) -> "Tensor":
        return _ops.mul(self, other)

    def __rmul__(self, other: Number) -> "Tensor":
        return _ops.mul(other, self)

    def __truediv__(self, other: Operand) -> "Tensor":
        return _ops.div(self, other)

    def __rtruediv__(self, other: Number) -> "Tensor":
        return _ops.div(other, self)

    def __pow__(self, exponent: Number) -> "Tensor":
        return _ops.powf(self, exponent)

    def __matmul__(self, other: "Tensor") -> "Tensor":
        return _ops.matmul(self, other)

    def __neg__(self) -> "Tensor":
        return _ops.negate(self)

    def maximum(self, other: Operand) -> "Tensor":
        return _ops.maximum(self, other)

    def minimum(self, other: Operand) -> "Tensor":
        return _ops.minimum(self, other)

    def matmul(self, other: "Tensor") -> "Tensor":
        return _ops.matmul(self, other)
