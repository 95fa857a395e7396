"""
Elementwise comparisons.

Comparisons return boolean tensors on no tape: they are not differentiable
and are meant to build conditions for `choose`. The right operand may be a
tensor of the same shape and dtype, or a Python scalar.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from ...domain._dtype import ensure_same_dtype
from ...domain._errors import DeviceMismatchError
from ...domain._shape import ensure_same_shape
from ._common import is_scalar

if TYPE_CHECKING:
    from ..tensor._tensor import Tensor

Operand = Union["Tensor", int, float]


def compare(fn: str, lhs: "Tensor", rhs: Operand) -> "Tensor":
    """
    Run comparison `fn` (``"eq"``, ``"ne"``, ``"gt"``, ``"ge"``, ``"lt"``,
    ``"le"``) and return its boolean result.

    Raises
    ------
    ShapeMismatchError
        If `rhs` is a tensor of a different shape.
    DTypeMismatchError
        If `rhs` is a tensor of a different dtype.
    DeviceMismatchError
        If `rhs` lives on another device.
    """
    device = lhs.device
    if is_scalar(rhs):
        rhs_storage = float(rhs)
    else:
        ensure_same_shape(fn, lhs.shape, rhs.shape)
        ensure_same_dtype(fn, lhs.dtype, rhs.dtype)
        if rhs.device != device:
            raise DeviceMismatchError(repr(device), repr(rhs.device))
        rhs_storage = rhs.storage
    return device.upgrade(device.compare(fn, lhs.storage, rhs_storage))


def eq(lhs: "Tensor", rhs: Operand) -> "Tensor":
    return compare("eq", lhs, rhs)


def ne(lhs: "Tensor", rhs: Operand) -> "Tensor":
    return compare("ne", lhs, rhs)


def gt(lhs: "Tensor", rhs: Operand) -> "Tensor":
    return compare("gt", lhs, rhs)


def ge(lhs: "Tensor", rhs: Operand) -> "Tensor":
    return compare("ge", lhs, rhs)


def lt(lhs: "Tensor", rhs: Operand) -> "Tensor":
    return compare("lt", lhs, rhs)


def le(lhs: "Tensor", rhs: Operand) -> "Tensor":
    return compare("le", lhs, rhs)
