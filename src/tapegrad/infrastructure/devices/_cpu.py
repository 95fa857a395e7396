"""
CPU storage device (NumPy backend).

`Cpu` is the concrete storage device of tapegrad. It owns a seeded random
generator, allocates `CpuStorage` buffers in its memory layout, provides the
tensor factory API (zeros/ones/sample/tensor and their `*_like` and `try_*`
variants), copies flat slices in and out of buffers, and inherits every
kernel declared in `..kernels`, whose CPU control paths are registered by
importing that package.

Device objects are cheap to clone: clones share the generator and the lock
that guards it, so they can be handed to several threads.
"""

from __future__ import annotations

import logging
import threading
import warnings
from typing import Any, List, Optional, Sequence

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import AllocationError, ShapeMismatchError, SliceLengthError
from ...domain._shape import Shape, ShapeLike, shape_of, static_shape_of
from ...domain.device._device import DeviceSpec, DeviceType, MemoryLayout
from ...domain.device._device_protocol import IDistribution
from .. import kernels  # noqa: F401  (registers CPU kernel control paths)
from ..kernels import DeviceKernels
from ..settings import get_settings
from ..tensor._tensor import Tensor
from ._cpu_storage import CpuStorage, numpy_dtype
from ._distributions import Standard, StandardNormal

logger = logging.getLogger(__name__)


class Cpu(DeviceKernels):
    """
    NumPy-backed storage device.

    Parameters
    ----------
    seed : int, optional
        Seed of the device's random generator. Defaults to the configured
        seed (``TAPEGRAD_SEED``, 0 when unset).
    layout : MemoryLayout, optional
        Element order of allocated buffers. Defaults to row-major.
    default_dtype : DType | str, optional
        Element type used when a factory call gives none. Defaults to the
        configured dtype (``TAPEGRAD_DEFAULT_DTYPE``, float32 when unset).

    Examples
    --------
    >>> dev = Cpu(seed=0)
    >>> t = dev.tensor([[1.0, 2.0], [3.0, 4.0]])
    >>> t.array()
    [[1.0, 2.0], [3.0, 4.0]]
    """

    kind = DeviceType.CPU

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        layout: MemoryLayout = MemoryLayout.ROW_MAJOR,
        default_dtype: Any = None,
    ) -> None:
        settings = get_settings()
        self.seed = settings.seed if seed is None else int(seed)
        self.layout = MemoryLayout(layout)
        self.default_dtype = (
            settings.default_dtype if default_dtype is None else DType.of(default_dtype)
        )
        self._rng = np.random.default_rng(self.seed)
        self._rng_lock = threading.Lock()
        logger.debug("Created %r", self)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    @property
    def spec(self) -> DeviceSpec:
        return DeviceSpec("cpu")

    def clone(self) -> "Cpu":
        """Return a handle to the same device (shared generator)."""
        other = object.__new__(type(self))
        other.__dict__.update(self.__dict__)
        return other

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cpu):
            return NotImplemented
        return self.layout is other.layout

    def __hash__(self) -> int:
        return hash((self.kind, self.layout))

    def __repr__(self) -> str:
        return f"Cpu(seed={self.seed}, layout={self.layout.name}, default_dtype={self.default_dtype})"

    def __str__(self) -> str:
        return str(self.spec)

    def random_u64(self) -> int:
        """Draw a 64-bit unsigned integer from the device generator."""
        with self._rng_lock:
            return int(self._rng.integers(0, 2**64, dtype=np.uint64))

    # ------------------------------------------------------------------
    # Buffer allocation
    # ------------------------------------------------------------------
    def _dtype(self, dtype: Any) -> DType:
        return self.default_dtype if dtype is None else DType.of(dtype)

    def _alloc(self, shape: Shape, dtype: DType, fill: str) -> CpuStorage:
        np_dtype = numpy_dtype(dtype)
        try:
            if fill == "zeros":
                arr = np.zeros(shape.concrete, dtype=np_dtype, order=self.layout.value)
            elif fill == "ones":
                arr = np.ones(shape.concrete, dtype=np_dtype, order=self.layout.value)
            else:
                arr = np.empty(shape.concrete, dtype=np_dtype, order=self.layout.value)
        except (MemoryError, ValueError) as e:
            raise AllocationError(shape.concrete, str(dtype), str(e) or type(e).__name__) from e
        return CpuStorage(arr, shape, dtype)

    def _wrap(self, arr: Any, shape: Optional[Shape] = None, dtype: Optional[DType] = None) -> CpuStorage:
        """Adopt a kernel result as a buffer in this device's layout."""
        arr = np.asarray(arr)
        if dtype is not None:
            arr = arr.astype(numpy_dtype(dtype), copy=False)
        arr = np.asarray(arr, order=self.layout.value)
        if not (arr.flags.c_contiguous or arr.flags.f_contiguous):
            arr = np.array(arr, order=self.layout.value)
        if arr.base is not None:
            arr = arr.copy(order=self.layout.value)
        if shape is None or tuple(shape.concrete) != arr.shape:
            shape = Shape(*arr.shape)
        return CpuStorage(arr, shape, dtype)

    def try_alloc_grad(self, storage: CpuStorage) -> CpuStorage:
        """Allocate a zeroed gradient buffer shaped like `storage`."""
        return self._alloc(storage.shape, storage.dtype, "zeros")

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    def try_zeros(self, shape: ShapeLike, dtype: Any = None) -> Tensor:
        """
        Create a tensor of zeros with a fully static shape.

        Raises
        ------
        AllocationError
            If the buffer cannot be allocated.
        ShapeMismatchError
            If `shape` has dynamic axes (use `try_zeros_like`).
        """
        return self.try_zeros_like(static_shape_of(shape), dtype)

    def zeros(self, shape: ShapeLike, dtype: Any = None) -> Tensor:
        return self.try_zeros(shape, dtype)

    def try_zeros_like(self, src: ShapeLike, dtype: Any = None) -> Tensor:
        """Create a tensor of zeros shaped like `src` (a shape or a tensor)."""
        return self.upgrade(self._alloc(shape_of(src), self._dtype(dtype), "zeros"))

    def zeros_like(self, src: ShapeLike, dtype: Any = None) -> Tensor:
        return self.try_zeros_like(src, dtype)

    def try_ones(self, shape: ShapeLike, dtype: Any = None) -> Tensor:
        return self.try_ones_like(static_shape_of(shape), dtype)

    def ones(self, shape: ShapeLike, dtype: Any = None) -> Tensor:
        return self.try_ones(shape, dtype)

    def try_ones_like(self, src: ShapeLike, dtype: Any = None) -> Tensor:
        return self.upgrade(self._alloc(shape_of(src), self._dtype(dtype), "ones"))

    def ones_like(self, src: ShapeLike, dtype: Any = None) -> Tensor:
        return self.try_ones_like(src, dtype)

    def try_sample(self, shape: ShapeLike, distr: IDistribution, dtype: Any = None) -> Tensor:
        return self.try_sample_like(static_shape_of(shape), distr, dtype)

    def sample(self, shape: ShapeLike, distr: IDistribution, dtype: Any = None) -> Tensor:
        return self.try_sample(shape, distr, dtype)

    def try_sample_like(self, src: ShapeLike, distr: IDistribution, dtype: Any = None) -> Tensor:
        """Create a tensor shaped like `src` filled with draws from `distr`."""
        storage = self._alloc(shape_of(src), self._dtype(dtype), "empty")
        self.try_fill_with_distr(storage, distr)
        return self.upgrade(storage)

    def sample_like(self, src: ShapeLike, distr: IDistribution, dtype: Any = None) -> Tensor:
        return self.try_sample_like(src, distr, dtype)

    def sample_uniform(self, shape: ShapeLike, dtype: Any = None) -> Tensor:
        """Uniform samples on ``[0, 1)``."""
        return self.sample(shape, Standard(), dtype)

    def sample_normal(self, shape: ShapeLike, dtype: Any = None) -> Tensor:
        """Standard normal samples."""
        return self.sample(shape, StandardNormal(), dtype)

    def try_tensor(self, data: Any, dtype: Any = None) -> Tensor:
        """
        Create a tensor from (nested) Python sequences, scalars or arrays.

        Parameters
        ----------
        data : Any
            Literal values. Boolean data produces a ``bool`` tensor unless
            `dtype` says otherwise; numeric data uses the device default
            dtype.
        dtype : DType | str, optional
            Element type of the result.

        Raises
        ------
        ShapeMismatchError
            If `data` is ragged.
        AllocationError
            If the buffer cannot be allocated.
        """
        try:
            arr = np.asarray(data)
        except ValueError as e:
            raise ShapeMismatchError("tensor", detail=f"ragged literal: {e}") from e
        if arr.dtype == object:
            raise ShapeMismatchError("tensor", detail="ragged or non-numeric literal")

        if dtype is None:
            target = DType.BOOL if arr.dtype == np.bool_ else self.default_dtype
        else:
            target = DType.of(dtype)

        if (
            isinstance(data, np.ndarray)
            and arr.dtype.kind == "f"
            and target.is_float
            and arr.dtype.itemsize > numpy_dtype(target).itemsize
        ):
            warnings.warn(
                f"Casting {arr.dtype} data to {target} loses precision",
                stacklevel=2,
            )

        storage = self._alloc(Shape.static(*arr.shape), target, "empty")
        storage.data[...] = arr
        return self.upgrade(storage)

    def tensor(self, data: Any, dtype: Any = None) -> Tensor:
        return self.try_tensor(data, dtype)

    # ------------------------------------------------------------------
    # In-place fills
    # ------------------------------------------------------------------
    def try_fill_with_zeros(self, storage: CpuStorage) -> None:
        storage.data.fill(0)

    def try_fill_with_ones(self, storage: CpuStorage) -> None:
        storage.data.fill(1)

    def try_fill_with_distr(self, storage: CpuStorage, distr: IDistribution) -> None:
        with self._rng_lock:
            values = distr.sample(self._rng, storage.shape.concrete, storage.dtype)
        storage.data[...] = values

    # ------------------------------------------------------------------
    # Flat copies
    # ------------------------------------------------------------------
    def copy_from(self, dst: Tensor, src: Sequence[Any]) -> None:
        """
        Overwrite `dst` with the values of the flat sequence `src`, taken in
        row-major index order.

        Raises
        ------
        SliceLengthError
            If `src` is not flat or does not hold one value per element.
        """
        n = dst.num_elements
        flat = np.asarray(src, dtype=numpy_dtype(dst.dtype))
        if flat.ndim != 1 or flat.size != n:
            raise SliceLengthError(n, int(flat.size))
        storage = dst.writable_storage()
        storage.data[...] = flat.reshape(storage.shape.concrete, order="C")

    def copy_into(self, src: Tensor, dst: List[Any]) -> None:
        """
        Write the elements of `src` into the flat, mutable sequence `dst` in
        row-major index order.

        Raises
        ------
        SliceLengthError
            If `dst` does not have exactly one slot per element.
        """
        n = src.num_elements
        if len(dst) != n:
            raise SliceLengthError(n, len(dst))
        dst[:] = src.storage.as_vec()

    # ------------------------------------------------------------------
    # Tensors
    # ------------------------------------------------------------------
    def upgrade(self, storage: CpuStorage) -> Tensor:
        """Wrap `storage` in a new tensor with a fresh identity and no tape."""
        return Tensor(storage, self)
