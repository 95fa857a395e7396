"""
Unary mixin: elementwise activation and math functions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ... import ops as _ops

if TYPE_CHECKING:
    from .._tensor import Tensor


class TensorMixinUnary:
    def negate(self) -> "Tensor":
        return _ops.negate(self)

    def exp(self) -> "Tensor":
        return _ops.exp(self)

    def ln(self) -> "Tensor":
        return _ops.ln(self)

    def sqrt(self) -> "Tensor":
        return _ops.sqrt(self)

    def square(self) -> "Tensor":
        return _ops.square(self)

    def abs(self) -> "Tensor":
        return _ops.abs(self)

    def __abs__(self) -> "Tensor":
        return _ops.abs(self)

    def relu(self) -> "Tensor":
        return _ops.relu(self)

    def sigmoid(self) -> "Tensor":
        return _ops.sigmoid(self)

    def tanh(self) -> "Tensor":
        return _ops.tanh(self)

    def sin(self) -> "Tensor":
        return _ops.sin(self)

    def cos(self) -> "Tensor":
        return _ops.cos(self)

    def gelu(self) -> "Tensor":
        return _ops.gelu(self)

    def powf(self, exponent: float) -> "Tensor":
        return _ops.powf(self, exponent)

    def clamp(self, low: float, high: float) -> "Tensor":
        return _ops.clamp(self, low, high)
