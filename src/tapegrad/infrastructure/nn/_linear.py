"""
Linear (fully-connected) layer.

Performs the affine projection

    y = x @ W^T + b

Shape conventions
-----------------
- x : (in,), (batch, in) or (batch, seq, in)
- W : (out, in)
- b : (out,)
- y : x.shape[:-1] + (out,)

Autograd integration
--------------------
`forward()` is built from tensor ops (`@`, `transpose`, `broadcast_like`,
`+`). Weight and bias are put on the input's tape first, so their gradients
are recorded under the parameters' own identities.
"""

from __future__ import annotations

import math
from typing import Any

from ...domain._errors import ShapeMismatchError
from ..devices._distributions import Uniform
from ..tensor._tensor import Tensor
from ._module import Module


class Linear(Module):
    """
    Fully-connected layer ``y = x @ W^T + b``.

    Parameters
    ----------
    weight : Tensor
        Weight matrix of shape ``(out, in)``.
    bias : Tensor
        Bias vector of shape ``(out,)``.

    Notes
    -----
    Parameters are initialized from ``U(-1/sqrt(in), 1/sqrt(in))``, both by
    `try_build` and by `try_reset_params`.
    """

    def __init__(self, weight: Tensor, bias: Tensor) -> None:
        super().__init__()
        if weight.shape.rank != 2 or bias.shape.rank != 1 or bias.shape[0] != weight.shape[0]:
            raise ShapeMismatchError(
                "Linear", weight.shape, bias.shape, detail="expected weight (out, in) and bias (out,)"
            )
        self.weight = weight
        self.bias = bias

    @classmethod
    def try_build(cls, device: Any, in_features: int, out_features: int) -> "Linear":
        if in_features <= 0 or out_features <= 0:
            raise ValueError(
                f"Linear needs positive extents, got in={in_features}, out={out_features}"
            )
        distr = cls._init_distr(in_features)
        weight = device.try_sample((out_features, in_features), distr)
        bias = device.try_sample((out_features,), distr)
        return cls(weight, bias)

    @staticmethod
    def _init_distr(in_features: int) -> Uniform:
        bound = 1.0 / math.sqrt(in_features)
        return Uniform(-bound, bound)

    @property
    def in_features(self) -> int:
        return self.weight.shape[1]

    @property
    def out_features(self) -> int:
        return self.weight.shape[0]

    def try_reset_params(self) -> None:
        distr = self._init_distr(self.in_features)
        self.weight.fill_with_distr(distr)
        self.bias.fill_with_distr(distr)

    def forward(self, x: Tensor) -> Tensor:
        """
        Apply the projection to the last axis of `x`.

        Raises
        ------
        ShapeMismatchError
            If `x` is not rank 1-3 or its last axis is not ``in_features``.
        """
        if not 1 <= x.shape.rank <= 3 or x.shape[-1] != self.in_features:
            raise ShapeMismatchError(
                "Linear", x.shape, self.weight.shape,
                detail=f"expected rank 1-3 input with last axis {self.in_features}",
            )
        w = self.weight.retaped(x.tape).transpose()
        out = x @ w
        b = self.bias.retaped(out.tape).broadcast_like(out)
        return out + b

    def __repr__(self) -> str:
        return f"Linear(in_features={self.in_features}, out_features={self.out_features})"
