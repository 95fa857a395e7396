"""
Differentiable tensor operations.

Every function here takes tensors (and, where documented, Python scalars),
computes its result through the operands' device kernels and, when an
operand is traced, records an `OpRecord` on the merged tape. The same
functions are exposed as `Tensor` methods and operators.

Importing this package registers the backward function of every op with
`BackwardRegistry`.
"""

from ._choose import choose
from ._compare import compare, eq, ge, gt, le, lt, ne
from ._composite import log_softmax, normalize, softmax
from ._elementwise import (
    abs,
    add,
    binary,
    clamp,
    cos,
    div,
    exp,
    gelu,
    ln,
    maximum,
    minimum,
    mul,
    negate,
    powf,
    relu,
    sigmoid,
    sin,
    sqrt,
    square,
    sub,
    tanh,
    unary,
)
from ._index import gather, select
from ._matmul import matmul
from ._reduce import logsumexp, max, mean, min, reduce, sum, var
from ._shape import broadcast_like, broadcast_to, permute, reshape, transpose

__all__ = [
    "abs",
    "add",
    "binary",
    "broadcast_like",
    "broadcast_to",
    "choose",
    "clamp",
    "compare",
    "cos",
    "div",
    "eq",
    "exp",
    "gather",
    "ge",
    "gelu",
    "gt",
    "le",
    "ln",
    "log_softmax",
    "logsumexp",
    "lt",
    "matmul",
    "max",
    "maximum",
    "mean",
    "min",
    "minimum",
    "mul",
    "ne",
    "negate",
    "normalize",
    "permute",
    "powf",
    "reduce",
    "relu",
    "reshape",
    "select",
    "sigmoid",
    "sin",
    "softmax",
    "sqrt",
    "square",
    "sub",
    "sum",
    "tanh",
    "transpose",
    "unary",
    "var",
]
