"""
CPU elementwise kernels (NumPy backend).

Implements the choose, unary, binary and comparison kernels declared in
`_base.py` for `DeviceType.CPU`. Each unary/binary function is described by
a forward expression and its local derivative(s); the backward kernels
multiply the derivative by the incoming gradient and accumulate into the
gradient buffers in place.

Design notes
------------
- Forward results are handed to `self._wrap`, which converts them into a
  buffer in the device's memory layout and element type.
- Accumulation uses ``np.add(..., out=...)`` so a gradient buffer keeps any
  contribution already stored in it.
- Scalar parameters (``mul_scalar``'s ``scalar``, ``clamp``'s bounds) are
  Python floats, so float32 buffers stay float32.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Tuple

import numpy as np

from ...domain._dtype import DType
from ...domain.device._device import DeviceType
from ._base import BinaryKernel, ChooseKernel, UnaryKernel, kernel_path

_GELU_C = math.sqrt(2.0 / math.pi)
_GELU_K = 0.044715


def _gelu(x: np.ndarray) -> np.ndarray:
    return 0.5 * x * (1.0 + np.tanh(_GELU_C * (x + _GELU_K * x**3)))


def _gelu_grad(x: np.ndarray) -> np.ndarray:
    t = np.tanh(_GELU_C * (x + _GELU_K * x**3))
    return 0.5 * (1.0 + t) + 0.5 * x * (1.0 - t * t) * _GELU_C * (1.0 + 3.0 * _GELU_K * x * x)


def _sigmoid(x: np.ndarray) -> np.ndarray:
    # Split by sign so exp never overflows.
    out = np.empty_like(x)
    pos = x >= 0
    out[pos] = 1.0 / (1.0 + np.exp(-x[pos]))
    e = np.exp(x[~pos])
    out[~pos] = e / (1.0 + e)
    return out


UnaryFn = Callable[..., np.ndarray]

# name -> (forward(x, **params), derivative(x, y, **params))
UNARY_FUNCTIONS: Dict[str, Tuple[UnaryFn, UnaryFn]] = {
    "negate": (lambda x: -x, lambda x, y: -1.0),
    "exp": (np.exp, lambda x, y: y),
    "ln": (np.log, lambda x, y: 1.0 / x),
    "sqrt": (np.sqrt, lambda x, y: 0.5 / y),
    "square": (np.square, lambda x, y: 2.0 * x),
    "abs": (np.abs, lambda x, y: np.sign(x)),
    "relu": (lambda x: np.maximum(x, 0.0), lambda x, y: (x > 0).astype(x.dtype)),
    "sigmoid": (_sigmoid, lambda x, y: y * (1.0 - y)),
    "tanh": (np.tanh, lambda x, y: 1.0 - y * y),
    "sin": (np.sin, lambda x, y: np.cos(x)),
    "cos": (np.cos, lambda x, y: -np.sin(x)),
    "gelu": (_gelu, lambda x, y: _gelu_grad(x)),
    "add_scalar": (lambda x, scalar: x + scalar, lambda x, y, scalar: 1.0),
    "sub_scalar": (lambda x, scalar: x - scalar, lambda x, y, scalar: 1.0),
    "rsub_scalar": (lambda x, scalar: scalar - x, lambda x, y, scalar: -1.0),
    "mul_scalar": (lambda x, scalar: x * scalar, lambda x, y, scalar: scalar),
    "div_scalar": (lambda x, scalar: x / scalar, lambda x, y, scalar: 1.0 / scalar),
    "rdiv_scalar": (lambda x, scalar: scalar / x, lambda x, y, scalar: -scalar / (x * x)),
    "powf": (lambda x, exponent: np.power(x, exponent), lambda x, y, exponent: exponent * np.power(x, exponent - 1.0)),
    "clamp": (
        lambda x, low, high: np.clip(x, low, high),
        lambda x, y, low, high: ((x >= low) & (x <= high)).astype(x.dtype),
    ),
}

BinaryFn = Callable[[np.ndarray, np.ndarray], np.ndarray]

# name -> (forward(l, r), d/dl(l, r), d/dr(l, r))
BINARY_FUNCTIONS: Dict[str, Tuple[BinaryFn, BinaryFn, BinaryFn]] = {
    "add": (np.add, lambda l, r: 1.0, lambda l, r: 1.0),
    "sub": (np.subtract, lambda l, r: 1.0, lambda l, r: -1.0),
    "mul": (np.multiply, lambda l, r: r, lambda l, r: l),
    "div": (np.divide, lambda l, r: 1.0 / r, lambda l, r: -l / (r * r)),
    # ties go to the left operand
    "maximum": (
        np.maximum,
        lambda l, r: (l >= r).astype(l.dtype),
        lambda l, r: (l < r).astype(l.dtype),
    ),
    "minimum": (
        np.minimum,
        lambda l, r: (l <= r).astype(l.dtype),
        lambda l, r: (l > r).astype(l.dtype),
    ),
}

COMPARISONS: Dict[str, BinaryFn] = {
    "eq": np.equal,
    "ne": np.not_equal,
    "gt": np.greater,
    "ge": np.greater_equal,
    "lt": np.less,
    "le": np.less_equal,
}


def _lookup(table: Dict[str, tuple], fn: str, kind: str) -> tuple:
    try:
        return table[fn]
    except KeyError:
        raise ValueError(f"Unknown {kind} function {fn!r}") from None


def _accumulate(grad, contribution) -> None:
    np.add(grad.data, contribution, out=grad.data)


# ---------------------------------------------------------------------------
# choose
# ---------------------------------------------------------------------------
@kernel_path(ChooseKernel, ChooseKernel.choose_forward, DeviceType.CPU)
def choose_forward_cpu(self, cond, lhs, rhs):
    out = np.where(cond.data, lhs.data, rhs.data)
    return self._wrap(out, lhs.shape, lhs.dtype)


@kernel_path(ChooseKernel, ChooseKernel.choose_backward, DeviceType.CPU)
def choose_backward_cpu(self, cond, grad_lhs, grad_rhs, grad_out):
    mask = cond.data
    g = grad_out.data
    zero = np.zeros((), dtype=g.dtype)
    if grad_lhs is not None:
        _accumulate(grad_lhs, np.where(mask, g, zero))
    if grad_rhs is not None:
        _accumulate(grad_rhs, np.where(mask, zero, g))


# ---------------------------------------------------------------------------
# unary
# ---------------------------------------------------------------------------
@kernel_path(UnaryKernel, UnaryKernel.unary_forward, DeviceType.CPU)
def unary_forward_cpu(self, fn, inp, **params):
    forward, _ = _lookup(UNARY_FUNCTIONS, fn, "unary")
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        out = forward(inp.data, **params)
    return self._wrap(out, inp.shape, inp.dtype)


@kernel_path(UnaryKernel, UnaryKernel.unary_backward, DeviceType.CPU)
def unary_backward_cpu(self, fn, inp, out, grad_inp, grad_out, **params):
    _, derivative = _lookup(UNARY_FUNCTIONS, fn, "unary")
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        local = derivative(inp.data, out.data, **params)
    _accumulate(grad_inp, grad_out.data * local)


# ---------------------------------------------------------------------------
# binary
# ---------------------------------------------------------------------------
@kernel_path(BinaryKernel, BinaryKernel.binary_forward, DeviceType.CPU)
def binary_forward_cpu(self, fn, lhs, rhs):
    forward, _, _ = _lookup(BINARY_FUNCTIONS, fn, "binary")
    with np.errstate(divide="ignore", invalid="ignore"):
        out = forward(lhs.data, rhs.data)
    return self._wrap(out, lhs.shape, lhs.dtype)


@kernel_path(BinaryKernel, BinaryKernel.binary_backward, DeviceType.CPU)
def binary_backward_cpu(self, fn, lhs, rhs, grad_lhs, grad_rhs, grad_out):
    _, d_lhs, d_rhs = _lookup(BINARY_FUNCTIONS, fn, "binary")
    l, r, g = lhs.data, rhs.data, grad_out.data
    with np.errstate(divide="ignore", invalid="ignore"):
        if grad_lhs is not None:
            _accumulate(grad_lhs, g * d_lhs(l, r))
        if grad_rhs is not None:
            _accumulate(grad_rhs, g * d_rhs(l, r))


@kernel_path(BinaryKernel, BinaryKernel.compare, DeviceType.CPU)
def compare_cpu(self, fn, lhs, rhs):
    op = _lookup(COMPARISONS, fn, "comparison")
    out = op(lhs.data, getattr(rhs, "data", rhs))
    return self._wrap(out, lhs.shape, DType.BOOL)
