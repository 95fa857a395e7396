"""
Elementwise selection.

``choose(cond, lhs, rhs)`` picks ``lhs[i]`` where ``cond[i]`` is true and
``rhs[i]`` otherwise. The condition is a boolean tensor and never receives a
gradient; the output gradient of each element flows to exactly one of the
two value operands.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...domain._dtype import DType, ensure_float, ensure_same_dtype
from ...domain._errors import DTypeMismatchError
from ...domain._shape import ensure_same_shape
from ..tensor._backward import register_backward
from ._common import finish, prepare

if TYPE_CHECKING:
    from ..tensor._gradients import Gradients
    from ..tensor._tape import OpRecord
    from ..tensor._tensor import Tensor


def choose(cond: "Tensor", lhs: "Tensor", rhs: "Tensor") -> "Tensor":
    """
    Select elements from `lhs` where `cond` is true, else from `rhs`.

    Parameters
    ----------
    cond : Tensor
        Boolean condition.
    lhs, rhs : Tensor
        Float operands with the same shape and dtype as each other and the
        same shape as `cond`.

    Returns
    -------
    Tensor
        Tensor shaped like the operands.

    Raises
    ------
    ShapeMismatchError
        If the three shapes differ.
    DTypeMismatchError
        If `cond` is not boolean or the value dtypes differ.

    Examples
    --------
    >>> cond = dev.tensor([True, False, True])
    >>> choose(cond, dev.tensor([1.0, 2.0, 3.0]), dev.tensor([10.0, 20.0, 30.0])).array()
    [1.0, 20.0, 3.0]
    """
    if cond.dtype is not DType.BOOL:
        raise DTypeMismatchError("choose", cond.dtype, detail="condition must be bool")
    ensure_same_shape("choose", cond.shape, lhs.shape, rhs.shape)
    ensure_same_dtype("choose", lhs.dtype, rhs.dtype)
    ensure_float("choose", lhs.dtype)

    device, tape = prepare("choose", cond, lhs, rhs)
    out = device.choose_forward(cond.storage, lhs.storage, rhs.storage)
    return finish("choose", device, tape, out, (cond, lhs, rhs))


@register_backward("choose")
def choose_backward(record: "OpRecord", grads: "Gradients") -> None:
    cond, lhs, rhs = record.inputs
    out = record.output
    grad_lhs = grads.get_or_alloc_mut(lhs)
    grad_rhs = grads.get_or_alloc_mut(rhs)
    out.device.choose_backward(cond.storage, grad_lhs, grad_rhs, grads.get_ref(out))
