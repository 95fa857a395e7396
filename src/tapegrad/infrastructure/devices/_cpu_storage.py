"""
NumPy-backed storage buffer for the CPU device.

A `CpuStorage` pairs a NumPy array with the tapegrad `Shape` and `DType` it
was allocated for. Buffers are shared by reference between a tensor, its
clones and the tape records that read it. Sharing is tracked with a flag:
any in-place writer first asks for a writable buffer and receives a private
copy when the buffer is shared (copy-on-write), so no reader ever observes a
write made through another handle.
"""

from __future__ import annotations

from typing import Any, List, Optional

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import ShapeMismatchError
from ...domain._shape import Shape
from ...domain.device._device import MemoryLayout


def numpy_dtype(dtype: DType) -> np.dtype:
    """Return the NumPy dtype of the same name as `dtype`."""
    return np.dtype(dtype.value)


class CpuStorage:
    """
    Contiguous NumPy buffer with shape and dtype metadata.

    Parameters
    ----------
    data : np.ndarray
        Backing array. Must be C- or Fortran-contiguous.
    shape : Shape, optional
        Shape descriptor (keeps static/dynamic axis tags). Defaults to the
        array's shape with dynamic axes.
    dtype : DType, optional
        Element type. Defaults to the array's dtype.

    Raises
    ------
    ShapeMismatchError
        If `shape` does not describe `data`.
    """

    __slots__ = ("_data", "_shape", "_dtype", "_shared")

    def __init__(
        self,
        data: np.ndarray,
        shape: Optional[Shape] = None,
        dtype: Optional[DType] = None,
    ) -> None:
        self._dtype = DType.of(data.dtype) if dtype is None else dtype
        self._shape = Shape(*data.shape) if shape is None else shape
        if tuple(data.shape) != self._shape.concrete:
            raise ShapeMismatchError("storage", data.shape, self._shape)
        if data.dtype != numpy_dtype(self._dtype):
            data = data.astype(numpy_dtype(self._dtype))
        self._data = data
        self._shared = False

    @property
    def data(self) -> np.ndarray:
        """
        The backing array.

        Notes
        -----
        Treat the array as read-only unless the buffer was obtained through a
        writable path (a fresh allocation or `writable()`).
        """
        return self._data

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def dtype(self) -> DType:
        return self._dtype

    @property
    def num_elements(self) -> int:
        return int(self._data.size)

    @property
    def layout(self) -> MemoryLayout:
        if self._data.ndim > 1 and not self._data.flags.c_contiguous:
            return MemoryLayout.COLUMN_MAJOR
        return MemoryLayout.ROW_MAJOR

    @property
    def shared(self) -> bool:
        """True if more than one handle may read this buffer."""
        return self._shared

    def share(self) -> "CpuStorage":
        """Mark the buffer as shared and return it."""
        self._shared = True
        return self

    def copy(self, layout: Optional[MemoryLayout] = None) -> "CpuStorage":
        """Return a private copy, in `layout` or in this buffer's layout."""
        order = (layout or self.layout).value
        return CpuStorage(np.array(self._data, order=order, copy=True), self._shape, self._dtype)

    def writable(self) -> "CpuStorage":
        """Return this buffer if private, else a private copy of it."""
        return self.copy() if self._shared else self

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------
    def array(self) -> Any:
        """Nested Python lists (a scalar for rank-0 buffers)."""
        return self._data.tolist()

    def as_vec(self) -> List[Any]:
        """Flat list in row-major index order."""
        return self._data.ravel(order="C").tolist()

    def __repr__(self) -> str:
        return (
            f"CpuStorage(shape={self._shape}, dtype={self._dtype}, "
            f"layout={self.layout.name}, shared={self._shared})"
        )
