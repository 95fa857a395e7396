"""
Matrix product.

Follows ``numpy.matmul``: vectors, matrices and batches of matrices, with
leading batch axes broadcast against each other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ...domain._dtype import ensure_float, ensure_same_dtype
from ...domain._errors import ShapeMismatchError
from ..tensor._backward import register_backward
from ._common import finish, prepare

if TYPE_CHECKING:
    from ..tensor._gradients import Gradients
    from ..tensor._tape import OpRecord
    from ..tensor._tensor import Tensor


def matmul(lhs: "Tensor", rhs: "Tensor") -> "Tensor":
    """
    Matrix product ``lhs @ rhs``.

    Raises
    ------
    ShapeMismatchError
        If an operand is rank 0, the contracted extents differ, or the batch
        axes do not broadcast.
    DTypeMismatchError
        If the dtypes differ or are not float.
    """
    a, b = lhs.shape, rhs.shape
    if a.rank == 0 or b.rank == 0:
        raise ShapeMismatchError("matmul", a, b, detail="operands must have rank >= 1")
    k_lhs = a[-1]
    k_rhs = b[0] if b.rank == 1 else b[-2]
    if k_lhs != k_rhs:
        raise ShapeMismatchError("matmul", a, b, detail=f"contracted extents {k_lhs} != {k_rhs}")
    try:
        np.broadcast_shapes(a.concrete[:-2], b.concrete[:-2])
    except ValueError:
        raise ShapeMismatchError("matmul", a, b, detail="batch axes do not broadcast") from None
    ensure_same_dtype("matmul", lhs.dtype, rhs.dtype)
    ensure_float("matmul", lhs.dtype)

    device, tape = prepare("matmul", lhs, rhs)
    out = device.matmul_forward(lhs.storage, rhs.storage)
    return finish("matmul", device, tape, out, (lhs, rhs))


@register_backward("matmul")
def matmul_backward(record: "OpRecord", grads: "Gradients") -> None:
    lhs, rhs = record.inputs
    out = record.output
    grad_lhs = grads.get_or_alloc_mut(lhs)
    grad_rhs = grads.get_or_alloc_mut(rhs)
    out.device.matmul_backward(lhs.storage, rhs.storage, grad_lhs, grad_rhs, grads.get_ref(out))
