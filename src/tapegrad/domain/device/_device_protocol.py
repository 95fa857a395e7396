"""
Device storage contracts.

A *storage device* is a capability object that owns and produces raw
n-dimensional buffers for a given shape and element type. The contracts here
are structural (`typing.Protocol`), so backends interoperate without sharing
a base class.

Fallibility
-----------
Every `try_*` method raises `AllocationError` when the backend cannot produce
a buffer. The non-`try_` wrappers call the fallible version and let the error
propagate unchanged; they exist for call sites that treat allocation failure
as fatal.
"""

from __future__ import annotations

from typing import Any, List, Protocol, Sequence, runtime_checkable

from .._dtype import DType
from .._shape import Shape, ShapeLike
from ._device import DeviceSpec, DeviceType, MemoryLayout


@runtime_checkable
class IStorage(Protocol):
    """A device-owned, shape-typed block of elements."""

    @property
    def shape(self) -> Shape: ...

    @property
    def dtype(self) -> DType: ...

    @property
    def num_elements(self) -> int: ...


@runtime_checkable
class IDistribution(Protocol):
    """
    A value distribution used to fill buffers.

    Implementations draw `shape` samples from `rng`, the device's random
    generator, and return them in the backend's array type.
    """

    def sample(self, rng: Any, shape: Sequence[int], dtype: DType) -> Any: ...


@runtime_checkable
class IDeviceStorage(Protocol):
    """
    Storage device contract.

    Required members cover allocation, in-place fills, flat copies, gradient
    allocation, random seeding and upgrading a raw buffer into a tensor.
    """

    kind: DeviceType
    layout: MemoryLayout

    @property
    def spec(self) -> DeviceSpec: ...

    def clone(self) -> "IDeviceStorage": ...

    def random_u64(self) -> int: ...

    # ---- allocation ----
    def try_alloc_grad(self, storage: IStorage) -> IStorage: ...

    def try_zeros_like(self, src: ShapeLike, dtype: Any = None) -> Any: ...

    def try_ones_like(self, src: ShapeLike, dtype: Any = None) -> Any: ...

    def try_sample_like(
        self, src: ShapeLike, distr: IDistribution, dtype: Any = None
    ) -> Any: ...

    def try_tensor(self, data: Any, dtype: Any = None) -> Any: ...

    # ---- in-place fills ----
    def try_fill_with_zeros(self, storage: IStorage) -> None: ...

    def try_fill_with_ones(self, storage: IStorage) -> None: ...

    def try_fill_with_distr(self, storage: IStorage, distr: IDistribution) -> None: ...

    # ---- flat copies ----
    def copy_from(self, dst: Any, src: Sequence[Any]) -> None: ...

    def copy_into(self, src: Any, dst: List[Any]) -> None: ...

    # ---- tensors ----
    def upgrade(self, storage: IStorage) -> Any: ...
