"""
Activation modules.

Each activation is a parameterless module wrapping the tensor op of the same
name, so activations compose with layers inside `Sequential`.
"""

from __future__ import annotations

from typing import Optional

from ..tensor._tensor import Tensor
from ._module import ZeroSizedModule


class ReLU(ZeroSizedModule):
    """``max(x, 0)`` elementwise."""

    def forward(self, x: Tensor) -> Tensor:
        return x.relu()


class GeLU(ZeroSizedModule):
    """Gaussian error linear unit (tanh approximation)."""

    def forward(self, x: Tensor) -> Tensor:
        return x.gelu()


class Sin(ZeroSizedModule):
    def forward(self, x: Tensor) -> Tensor:
        return x.sin()


class Cos(ZeroSizedModule):
    def forward(self, x: Tensor) -> Tensor:
        return x.cos()


class Ln(ZeroSizedModule):
    """Natural logarithm."""

    def forward(self, x: Tensor) -> Tensor:
        return x.ln()


class Exp(ZeroSizedModule):
    def forward(self, x: Tensor) -> Tensor:
        return x.exp()


class Sigmoid(ZeroSizedModule):
    def forward(self, x: Tensor) -> Tensor:
        return x.sigmoid()


class Tanh(ZeroSizedModule):
    def forward(self, x: Tensor) -> Tensor:
        return x.tanh()


class Square(ZeroSizedModule):
    def forward(self, x: Tensor) -> Tensor:
        return x.square()


class Sqrt(ZeroSizedModule):
    def forward(self, x: Tensor) -> Tensor:
        return x.sqrt()


class Abs(ZeroSizedModule):
    def forward(self, x: Tensor) -> Tensor:
        return x.abs()


class Softmax(ZeroSizedModule):
    """
    Softmax along one axis.

    Parameters
    ----------
    axis : int, optional
        Axis to normalize over. Defaults to the last axis.
    """

    def __init__(self, axis: Optional[int] = None) -> None:
        super().__init__()
        self.axis = axis

    def forward(self, x: Tensor) -> Tensor:
        return x.softmax(self.axis)

    def __repr__(self) -> str:
        return f"Softmax(axis={self.axis})"
