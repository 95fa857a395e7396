"""
CPU shape and indexing kernels (NumPy backend).

Reshape and flat index order are always row-major, independent of the memory
layout of the buffers involved, so a graph produces identical values on a
row-major and a column-major device.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ...domain._shape import Shape
from ...domain.device._device import DeviceType
from ._base import ShapeKernel, kernel_path


def sum_to_shape(arr: np.ndarray, shape: Tuple[int, ...]) -> np.ndarray:
    """
    Reduce a broadcast result back to `shape` by summing broadcast axes.

    Parameters
    ----------
    arr : np.ndarray
        Array whose shape is a NumPy broadcast of `shape`.
    shape : tuple[int, ...]
        Target shape.
    """
    lead = arr.ndim - len(shape)
    if lead > 0:
        arr = arr.sum(axis=tuple(range(lead)))
    axes = tuple(i for i, n in enumerate(shape) if n == 1 and arr.shape[i] != 1)
    if axes:
        arr = arr.sum(axis=axes, keepdims=True)
    return arr


@kernel_path(ShapeKernel, ShapeKernel.broadcast_forward, DeviceType.CPU)
def broadcast_forward_cpu(self, inp, shape):
    out = np.broadcast_to(inp.data, shape.concrete)
    return self._wrap(out, shape, inp.dtype)


@kernel_path(ShapeKernel, ShapeKernel.broadcast_backward, DeviceType.CPU)
def broadcast_backward_cpu(self, grad_inp, grad_out):
    contribution = sum_to_shape(grad_out.data, grad_inp.shape.concrete)
    np.add(grad_inp.data, contribution, out=grad_inp.data)


@kernel_path(ShapeKernel, ShapeKernel.reshape_forward, DeviceType.CPU)
def reshape_forward_cpu(self, inp, shape):
    out = np.reshape(inp.data, shape.concrete, order="C")
    return self._wrap(out, shape, inp.dtype)


@kernel_path(ShapeKernel, ShapeKernel.reshape_backward, DeviceType.CPU)
def reshape_backward_cpu(self, grad_inp, grad_out):
    contribution = np.reshape(grad_out.data, grad_inp.shape.concrete, order="C")
    np.add(grad_inp.data, contribution, out=grad_inp.data)


@kernel_path(ShapeKernel, ShapeKernel.permute_forward, DeviceType.CPU)
def permute_forward_cpu(self, inp, axes):
    out = np.transpose(inp.data, axes)
    dims = inp.shape.dims
    return self._wrap(out, Shape(*(dims[a] for a in axes)), inp.dtype)


@kernel_path(ShapeKernel, ShapeKernel.permute_backward, DeviceType.CPU)
def permute_backward_cpu(self, grad_inp, grad_out, axes):
    inverse = tuple(int(a) for a in np.argsort(axes))
    np.add(grad_inp.data, np.transpose(grad_out.data, inverse), out=grad_inp.data)


def _gather_index(ndim: int, indices, axis: int) -> tuple:
    index = [slice(None)] * ndim
    index[axis] = indices
    return tuple(index)


@kernel_path(ShapeKernel, ShapeKernel.gather_forward, DeviceType.CPU)
def gather_forward_cpu(self, inp, indices: Sequence[int], axis: int, keep_axis: bool):
    dims = list(inp.shape.dims)
    if keep_axis:
        idx = np.asarray(indices, dtype=np.intp)
        dims[axis] = int(idx.size)
    else:
        idx = int(indices[0])
        del dims[axis]
    out = np.take(inp.data, idx, axis=axis)
    return self._wrap(out, Shape(*dims), inp.dtype)


@kernel_path(ShapeKernel, ShapeKernel.gather_backward, DeviceType.CPU)
def gather_backward_cpu(self, grad_inp, grad_out, indices, axis, keep_axis):
    idx = np.asarray(indices, dtype=np.intp) if keep_axis else int(indices[0])
    np.add.at(grad_inp.data, _gather_index(grad_inp.data.ndim, idx, axis), grad_out.data)
