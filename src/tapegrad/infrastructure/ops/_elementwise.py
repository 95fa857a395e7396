"""
Elementwise arithmetic and activation functions.

Binary operations require operands of identical shape and dtype; there is no
implicit broadcasting (use `broadcast_to` / `broadcast_like`). A Python
scalar is accepted on either side of a binary operation and lowers to a
unary op with the scalar as a parameter; scalars take no gradient.

Each op records its own name (``"add"``, ``"exp"``, ``"mul_scalar"``...) and
all of them share two backward functions, one for unary and one for binary
records.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Union

from ...domain._dtype import ensure_float, ensure_same_dtype
from ...domain._shape import ensure_same_shape
from ..kernels import BINARY_FUNCTIONS, UNARY_FUNCTIONS
from ..tensor._backward import register_backward
from ._common import finish, is_scalar, prepare

if TYPE_CHECKING:
    from ..tensor._gradients import Gradients
    from ..tensor._tape import OpRecord
    from ..tensor._tensor import Tensor

Number = Union[int, float]
Operand = Union["Tensor", Number]


# ---------------------------------------------------------------------------
# Primitive application
# ---------------------------------------------------------------------------
def unary(fn: str, x: "Tensor", **params: float) -> "Tensor":
    """Apply the elementwise function registered as `fn`."""
    ensure_float(fn, x.dtype)
    device, tape = prepare(fn, x)
    out = device.unary_forward(fn, x.storage, **params)
    return finish(fn, device, tape, out, (x,), params=params)


def binary(fn: str, lhs: "Tensor", rhs: "Tensor") -> "Tensor":
    """Apply the elementwise binary function registered as `fn`."""
    ensure_same_shape(fn, lhs.shape, rhs.shape)
    ensure_same_dtype(fn, lhs.dtype, rhs.dtype)
    ensure_float(fn, lhs.dtype)
    device, tape = prepare(fn, lhs, rhs)
    out = device.binary_forward(fn, lhs.storage, rhs.storage)
    return finish(fn, device, tape, out, (lhs, rhs))


def _unary_backward(record: "OpRecord", grads: "Gradients") -> None:
    (inp,) = record.inputs
    out = record.output
    grad_inp = grads.get_or_alloc_mut(inp)
    out.device.unary_backward(
        record.op,
        inp.storage,
        out.storage,
        grad_inp,
        grads.get_ref(out),
        **record.saved["params"],
    )


def _binary_backward(record: "OpRecord", grads: "Gradients") -> None:
    lhs, rhs = record.inputs
    out = record.output
    grad_lhs = grads.get_or_alloc_mut(lhs)
    grad_rhs = grads.get_or_alloc_mut(rhs)
    out.device.binary_backward(
        record.op, lhs.storage, rhs.storage, grad_lhs, grad_rhs, grads.get_ref(out)
    )


for _name in UNARY_FUNCTIONS:
    register_backward(_name)(_unary_backward)
for _name in BINARY_FUNCTIONS:
    register_backward(_name)(_binary_backward)


def _check_operands(op: str, lhs: Any, rhs: Any) -> None:
    if is_scalar(lhs) and is_scalar(rhs):
        raise TypeError(f"{op}: at least one operand must be a tensor")
    for v in (lhs, rhs):
        if not is_scalar(v) and not hasattr(v, "storage"):
            raise TypeError(f"{op}: unsupported operand type {type(v).__name__}")


# ---------------------------------------------------------------------------
# Binary arithmetic
# ---------------------------------------------------------------------------
def add(lhs: Operand, rhs: Operand) -> "Tensor":
    """
    Elementwise sum.

    Notes
    -----
    ``d(a + b)/da = 1`` and ``d(a + b)/db = 1``.
    """
    _check_operands("add", lhs, rhs)
    if is_scalar(rhs):
        return unary("add_scalar", lhs, scalar=float(rhs))
    if is_scalar(lhs):
        return unary("add_scalar", rhs, scalar=float(lhs))
    return binary("add", lhs, rhs)


def sub(lhs: Operand, rhs: Operand) -> "Tensor":
    """Elementwise difference ``lhs - rhs``."""
    _check_operands("sub", lhs, rhs)
    if is_scalar(rhs):
        return unary("sub_scalar", lhs, scalar=float(rhs))
    if is_scalar(lhs):
        return unary("rsub_scalar", rhs, scalar=float(lhs))
    return binary("sub", lhs, rhs)


def mul(lhs: Operand, rhs: Operand) -> "Tensor":
    """
    Elementwise product.

    Notes
    -----
    ``d(a * b)/da = b`` and ``d(a * b)/db = a``.
    """
    _check_operands("mul", lhs, rhs)
    if is_scalar(rhs):
        return unary("mul_scalar", lhs, scalar=float(rhs))
    if is_scalar(lhs):
        return unary("mul_scalar", rhs, scalar=float(lhs))
    return binary("mul", lhs, rhs)


def div(lhs: Operand, rhs: Operand) -> "Tensor":
    """
    Elementwise quotient ``lhs / rhs``.

    Notes
    -----
    ``d(a / b)/da = 1 / b`` and ``d(a / b)/db = -a / b^2``.
    """
    _check_operands("div", lhs, rhs)
    if is_scalar(rhs):
        return unary("div_scalar", lhs, scalar=float(rhs))
    if is_scalar(lhs):
        return unary("rdiv_scalar", rhs, scalar=float(lhs))
    return binary("div", lhs, rhs)


def maximum(lhs: Operand, rhs: Operand) -> "Tensor":
    """Elementwise maximum. On ties the gradient goes to `lhs`."""
    _check_operands("maximum", lhs, rhs)
    if is_scalar(rhs):
        return clamp(lhs, float(rhs), math.inf)
    if is_scalar(lhs):
        return clamp(rhs, float(lhs), math.inf)
    return binary("maximum", lhs, rhs)


def minimum(lhs: Operand, rhs: Operand) -> "Tensor":
    """Elementwise minimum. On ties the gradient goes to `lhs`."""
    _check_operands("minimum", lhs, rhs)
    if is_scalar(rhs):
        return clamp(lhs, -math.inf, float(rhs))
    if is_scalar(lhs):
        return clamp(rhs, -math.inf, float(lhs))
    return binary("minimum", lhs, rhs)


# ---------------------------------------------------------------------------
# Unary functions
# ---------------------------------------------------------------------------
def negate(x: "Tensor") -> "Tensor":
    return unary("negate", x)


def exp(x: "Tensor") -> "Tensor":
    return unary("exp", x)


def ln(x: "Tensor") -> "Tensor":
    """Natural logarithm. Non-positive inputs produce nan/-inf."""
    return unary("ln", x)


def sqrt(x: "Tensor") -> "Tensor":
    return unary("sqrt", x)


def square(x: "Tensor") -> "Tensor":
    return unary("square", x)


def abs(x: "Tensor") -> "Tensor":
    """Absolute value; the derivative at 0 is 0."""
    return unary("abs", x)


def relu(x: "Tensor") -> "Tensor":
    """``max(x, 0)``; the derivative at 0 is 0."""
    return unary("relu", x)


def sigmoid(x: "Tensor") -> "Tensor":
    return unary("sigmoid", x)


def tanh(x: "Tensor") -> "Tensor":
    return unary("tanh", x)


def sin(x: "Tensor") -> "Tensor":
    return unary("sin", x)


def cos(x: "Tensor") -> "Tensor":
    return unary("cos", x)


def gelu(x: "Tensor") -> "Tensor":
    """
    Gaussian error linear unit, tanh approximation:
    ``0.5 x (1 + tanh(sqrt(2/pi) (x + 0.044715 x^3)))``.
    """
    return unary("gelu", x)


def powf(x: "Tensor", exponent: float) -> "Tensor":
    """Raise every element to the real power `exponent`."""
    if not is_scalar(exponent):
        raise TypeError(f"powf: exponent must be a real number, got {type(exponent).__name__}")
    return unary("powf", x, exponent=float(exponent))


def clamp(x: "Tensor", low: float, high: float) -> "Tensor":
    """
    Clip every element to ``[low, high]``.

    The gradient passes through where ``low <= x <= high`` and is zero
    elsewhere.

    Raises
    ------
    ValueError
        If ``low > high``.
    """
    if low > high:
        raise ValueError(f"clamp: low ({low}) must not exceed high ({high})")
    return unary("clamp", x, low=float(low), high=float(high))
