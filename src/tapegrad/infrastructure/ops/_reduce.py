"""
Reductions over axes.

`axes` is ``None`` (every axis), an int, or a sequence of ints; negative
axes count from the end. With ``keepdims=True`` reduced axes stay as extent
1, which makes the result easy to `broadcast_like` back onto the input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence, Union

from ...domain._dtype import ensure_float
from ...domain._errors import ShapeMismatchError
from ..tensor._backward import register_backward
from ._common import finish, prepare

if TYPE_CHECKING:
    from ..tensor._gradients import Gradients
    from ..tensor._tape import OpRecord
    from ..tensor._tensor import Tensor

AxesArg = Optional[Union[int, Sequence[int]]]

REDUCTIONS = ("sum", "mean", "max", "min", "var", "logsumexp")

# reductions without an identity element
_NEEDS_ELEMENTS = ("max", "min", "logsumexp")


def reduce(fn: str, x: "Tensor", axes: AxesArg = None, keepdims: bool = False, **params: float) -> "Tensor":
    """
    Apply reduction `fn` over `axes`.

    Raises
    ------
    ShapeMismatchError
        If an axis is out of range or repeated, or if `fn` is
        ``max``, ``min`` or ``logsumexp`` and a reduced axis is empty.
    DTypeMismatchError
        If `x` is not a float tensor.
    """
    ensure_float(fn, x.dtype)
    norm = x.shape.normalize_axes(axes)
    if fn in _NEEDS_ELEMENTS and any(x.shape.concrete[a] == 0 for a in norm):
        raise ShapeMismatchError(fn, x.shape, detail="cannot reduce over an empty axis")
    device, tape = prepare(fn, x)
    out = device.reduce_forward(fn, x.storage, norm, keepdims, **params)
    return finish(fn, device, tape, out, (x,), axes=norm, keepdims=keepdims, params=params)


def _reduce_backward(record: "OpRecord", grads: "Gradients") -> None:
    (inp,) = record.inputs
    out = record.output
    grad_inp = grads.get_or_alloc_mut(inp)
    out.device.reduce_backward(
        record.op,
        inp.storage,
        out.storage,
        grad_inp,
        grads.get_ref(out),
        record.saved["axes"],
        record.saved["keepdims"],
        **record.saved["params"],
    )


for _name in REDUCTIONS:
    register_backward(_name)(_reduce_backward)


def sum(x: "Tensor", axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
    return reduce("sum", x, axes, keepdims)


def mean(x: "Tensor", axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
    return reduce("mean", x, axes, keepdims)


def max(x: "Tensor", axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
    """Maximum over `axes`. Tied maxima all receive the full gradient."""
    return reduce("max", x, axes, keepdims)


def min(x: "Tensor", axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
    """Minimum over `axes`. Tied minima all receive the full gradient."""
    return reduce("min", x, axes, keepdims)


def var(x: "Tensor", axes: AxesArg = None, keepdims: bool = False, correction: int = 0) -> "Tensor":
    """
    Variance over `axes`.

    Parameters
    ----------
    correction : int, optional
        Subtracted from the element count in the denominator. 0 (default)
        gives the population variance, 1 the unbiased estimate.
    """
    return reduce("var", x, axes, keepdims, correction=int(correction))


def logsumexp(x: "Tensor", axes: AxesArg = None, keepdims: bool = False) -> "Tensor":
    """``log(sum(exp(x)))`` computed stably (max-shifted)."""
    return reduce("logsumexp", x, axes, keepdims)
