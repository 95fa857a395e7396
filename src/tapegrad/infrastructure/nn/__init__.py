"""
Neural-network modules.

`Module` and `ZeroSizedModule` are the base classes; the rest are ready-made
layers and activations.
"""

from ._activations import (
    Abs,
    Cos,
    Exp,
    GeLU,
    Ln,
    ReLU,
    Sigmoid,
    Sin,
    Softmax,
    Sqrt,
    Square,
    Tanh,
)
from ._layernorm import LayerNorm1D
from ._linear import Linear
from ._module import Module, ZeroSizedModule
from ._sequential import Sequential

__all__ = [
    "Abs",
    "Cos",
    "Exp",
    "GeLU",
    "LayerNorm1D",
    "Linear",
    "Ln",
    "Module",
    "ReLU",
    "Sequential",
    "Sigmoid",
    "Sin",
    "Softmax",
    "Sqrt",
    "Square",
    "Tanh",
    "ZeroSizedModule",
]
