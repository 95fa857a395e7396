"""
Layer normalization over the last axis.

For an input ``x`` whose last axis has extent ``M``:

    x_hat = (x - mean(x)) / sqrt(var(x) + epsilon)      (last axis)
    y     = gamma * x_hat + beta

`gamma` and `beta` have shape ``(M,)`` and are broadcast across the leading
axes. Inputs of rank 1, 2 (batch) and 3 (batch, sequence) are supported.

Autograd integration
--------------------
The forward pass is composed from tensor ops, and the parameters are put on
the input's tape before they are broadcast, so the tape records the
broadcasts and the gradients reach `gamma` and `beta` by identity.
"""

from __future__ import annotations

from typing import Any

from ...domain._errors import ShapeMismatchError
from ..tensor._tensor import Tensor
from ._module import Module


class LayerNorm1D(Module):
    """
    Layer normalization of the last axis with learnable affine transform.

    Parameters
    ----------
    gamma : Tensor
        Scale of shape ``(M,)``.
    beta : Tensor
        Shift of shape ``(M,)``.
    epsilon : float, optional
        Added to the variance. Defaults to ``1e-5``.

    Examples
    --------
    >>> m = LayerNorm1D.build(dev, 5)
    >>> y = m(dev.sample_normal((3, 5)))
    """

    def __init__(self, gamma: Tensor, beta: Tensor, epsilon: float = 1e-5) -> None:
        super().__init__()
        if gamma.shape.rank != 1 or gamma.shape != beta.shape:
            raise ShapeMismatchError("LayerNorm1D", gamma.shape, beta.shape, detail="expected two (M,) tensors")
        self.gamma = gamma
        self.beta = beta
        self.epsilon = float(epsilon)

    @classmethod
    def try_build(cls, device: Any, m: int) -> "LayerNorm1D":
        """Build with ``gamma = 1``, ``beta = 0`` and ``epsilon = 1e-5``."""
        return cls(device.try_ones((m,)), device.try_zeros((m,)))

    @property
    def m(self) -> int:
        return self.gamma.shape[0]

    def try_reset_params(self) -> None:
        self.gamma.fill_with_ones()
        self.beta.fill_with_zeros()

    def forward(self, x: Tensor) -> Tensor:
        """
        Normalize `x` over its last axis.

        Raises
        ------
        ShapeMismatchError
            If `x` is not rank 1-3 or its last axis is not ``M``.
        """
        if not 1 <= x.shape.rank <= 3 or x.shape[-1] != self.m:
            raise ShapeMismatchError(
                "LayerNorm1D", x.shape, detail=f"expected rank 1-3 input with last axis {self.m}"
            )
        gamma = self.gamma.retaped(x.tape).broadcast_like(x)
        beta = self.beta.retaped(x.tape).broadcast_like(x)
        return x.normalize(self.epsilon) * gamma + beta

    def __repr__(self) -> str:
        return f"LayerNorm1D(m={self.m}, epsilon={self.epsilon})"
