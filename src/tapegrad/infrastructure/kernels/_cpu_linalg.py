"""
CPU matrix-product kernels (NumPy backend).

Operands follow ``np.matmul`` semantics: 1-D operands are promoted to a row
(left) or column (right) matrix and the promoted axis is removed from the
result; leading batch axes broadcast. The backward kernel works on the
promoted operands and sums the gradient over broadcast batch axes before
accumulating it.
"""

from __future__ import annotations

import numpy as np

from ...domain.device._device import DeviceType
from ._base import MatMulKernel, kernel_path
from ._cpu_shape import sum_to_shape


@kernel_path(MatMulKernel, MatMulKernel.matmul_forward, DeviceType.CPU)
def matmul_forward_cpu(self, lhs, rhs):
    return self._wrap(np.matmul(lhs.data, rhs.data), dtype=lhs.dtype)


@kernel_path(MatMulKernel, MatMulKernel.matmul_backward, DeviceType.CPU)
def matmul_backward_cpu(self, lhs, rhs, grad_lhs, grad_rhs, grad_out):
    a = lhs.data
    b = rhs.data
    g = grad_out.data

    a2 = a[None, :] if a.ndim == 1 else a
    b2 = b[:, None] if b.ndim == 1 else b
    if a.ndim == 1 and b.ndim == 1:
        g2 = np.reshape(g, (1, 1))
    elif a.ndim == 1:
        g2 = np.expand_dims(g, -2)
    elif b.ndim == 1:
        g2 = np.expand_dims(g, -1)
    else:
        g2 = g

    if grad_lhs is not None:
        da = sum_to_shape(np.matmul(g2, np.swapaxes(b2, -1, -2)), a2.shape)
        np.add(grad_lhs.data, np.reshape(da, a.shape), out=grad_lhs.data)
    if grad_rhs is not None:
        db = sum_to_shape(np.matmul(np.swapaxes(a2, -1, -2), g2), b2.shape)
        np.add(grad_rhs.data, np.reshape(db, b.shape), out=grad_rhs.data)
