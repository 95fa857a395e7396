"""
Concrete Tensor handle.

A `Tensor` combines four things:

- an identity (`UniqueId`), the key under which its gradient is stored;
- a storage buffer, shared by reference with clones and tape records;
- the storage device that owns the buffer and runs its kernels;
- a tape: `NONE_TAPE` for untraced tensors, or a recording `OwnedTape`.

Operations return tensors with a fresh identity. Handle-level calls
(`trace`, `retaped`, `put_tape`, `split_tape`, `detached`, `clone`) keep the
identity, so a gradient computed through one handle is found through the
others.

Design notes
------------
- Buffers are copy-on-write: any in-place write (`copy_from`, the fills,
  updater writes) goes through `writable_storage()`, which copies a shared
  buffer first. Tape records therefore always see forward-time values.
- Operation methods come from the mixins in `.mixins`; they delegate to
  `tapegrad.infrastructure.ops`.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

from ...domain._dtype import DType
from ...domain._errors import ContractViolationError, ShapeMismatchError
from ...domain._shape import Shape
from ...domain._unique_id import UniqueId, unique_id
from ._gradients import Gradients, UnusedTensors
from ._tape import NONE_TAPE, OwnedTape, Tape
from .mixins import (
    TensorMixinArithmetic,
    TensorMixinComparison,
    TensorMixinReduction,
    TensorMixinShape,
    TensorMixinUnary,
)


class Tensor(
    TensorMixinArithmetic,
    TensorMixinUnary,
    TensorMixinComparison,
    TensorMixinReduction,
    TensorMixinShape,
):
    """
    Tensor handle (identity + storage + device + tape).

    Parameters
    ----------
    storage : CpuStorage
        Backing buffer.
    device : Cpu
        Device owning `storage`.
    tape : NoneTape | OwnedTape, optional
        Defaults to `NONE_TAPE`.
    id : UniqueId, optional
        Identity to reuse. A fresh identity is generated when omitted.

    Notes
    -----
    Tensors are normally created by a device factory (`Cpu.zeros`,
    `Cpu.tensor`, ...) or returned by an operation, not constructed
    directly.
    """

    # NumPy defers binary operators with a Tensor on the right to us.
    __array_ufunc__ = None

    def __init__(
        self,
        storage: Any,
        device: Any,
        tape: Tape = NONE_TAPE,
        id: Optional[UniqueId] = None,
    ) -> None:
        self._id = unique_id() if id is None else id
        self._storage = storage
        self._device = device
        self._tape = tape

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------
    @property
    def id(self) -> UniqueId:
        return self._id

    @property
    def storage(self) -> Any:
        return self._storage

    @property
    def device(self) -> Any:
        return self._device

    @property
    def tape(self) -> Tape:
        return self._tape

    @property
    def shape(self) -> Shape:
        return self._storage.shape

    @property
    def dtype(self) -> DType:
        return self._storage.dtype

    @property
    def num_elements(self) -> int:
        return self._storage.num_elements

    @property
    def rank(self) -> int:
        return self._storage.shape.rank

    # ------------------------------------------------------------------
    # Identity-preserving handles
    # ------------------------------------------------------------------
    def _handle(self, tape: Tape) -> "Tensor":
        return Tensor(self._storage.share(), self._device, tape, self._id)

    def trace(self) -> "Tensor":
        """Return this tensor (same identity) on a fresh recording tape."""
        return self._handle(OwnedTape())

    def retaped(self, tape: Optional[Tape] = None) -> "Tensor":
        """
        Return this tensor (same identity) on `tape`.

        When `tape` is None, the new handle gets an empty tape of the same
        kind as the current one.
        """
        if tape is None:
            tape = OwnedTape() if self._tape.owned else NONE_TAPE
        return self._handle(tape)

    def put_tape(self, tape: Tape) -> "Tensor":
        return self._handle(tape)

    def split_tape(self) -> Tuple["Tensor", Tape]:
        """Return ``(untraced handle, tape)``."""
        return self._handle(NONE_TAPE), self._tape

    def detached(self) -> "Tensor":
        """Return an untraced handle with the same identity and storage."""
        return self._handle(NONE_TAPE)

    def clone(self) -> "Tensor":
        """Return a handle with the same identity, storage and tape."""
        return self._handle(self._tape)

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------
    def writable_storage(self) -> Any:
        """
        Return this handle's buffer for an in-place write, copying it first
        if it is shared.
        """
        self._storage = self._storage.writable()
        return self._storage

    def array(self) -> Any:
        """Values as nested Python lists (a scalar for rank 0)."""
        return self._storage.array()

    def as_vec(self) -> List[Any]:
        """Values as a flat list in row-major index order."""
        return self._storage.as_vec()

    def item(self) -> Any:
        """
        The single value of a one-element tensor.

        Raises
        ------
        ShapeMismatchError
            If the tensor holds more than one element.
        """
        if self.num_elements != 1:
            raise ShapeMismatchError("item", self.shape, detail="expected a single element")
        return self.as_vec()[0]

    def copy_from(self, src: Sequence[Any]) -> None:
        """Overwrite the values from a flat row-major sequence."""
        self._device.copy_from(self, src)

    def copy_into(self, dst: List[Any]) -> None:
        """Write the values into a flat mutable sequence of matching length."""
        self._device.copy_into(self, dst)

    def fill_with_zeros(self) -> None:
        self._device.try_fill_with_zeros(self.writable_storage())

    def fill_with_ones(self) -> None:
        self._device.try_fill_with_ones(self.writable_storage())

    def fill_with_distr(self, distr: Any) -> None:
        self._device.try_fill_with_distr(self.writable_storage(), distr)

    def to_device(self, device: Any) -> "Tensor":
        """
        Copy this tensor onto `device`. The copy keeps the identity and has no
        tape.

        Raises
        ------
        AllocationError
            If `device` cannot allocate the buffer.
        """
        moved = device.try_zeros_like(self, self.dtype)
        moved.copy_from(self.as_vec())
        return Tensor(moved.storage, device, NONE_TAPE, self._id)

    # ------------------------------------------------------------------
    # Autodiff
    # ------------------------------------------------------------------
    def update(self, updater: Any, unused: UnusedTensors) -> None:
        """Hand this tensor to `updater.update_param`."""
        updater.update_param(self, unused)

    def backward(self) -> Gradients:
        """
        Run the backward pass from this tensor.

        Seeds the gradient of this tensor with ones, drains its tape and
        executes every record in reverse order.

        Returns
        -------
        Gradients
            Gradients of every tensor on a path to this one.

        Raises
        ------
        ContractViolationError
            If this tensor is not traced.
        TapeDrainedError
            If the tape was already drained.
        AllocationError
            If a gradient buffer cannot be allocated.
        """
        if not self._tape.owned:
            raise ContractViolationError(
                "backward() needs a traced tensor; call trace() on an input first"
            )
        grads = Gradients()
        seed = grads.get_or_alloc_mut(self)
        self._device.try_fill_with_ones(seed)
        return self._tape.execute(grads)

    def __repr__(self) -> str:
        return (
            f"Tensor(id={self._id}, shape={self.shape}, dtype={self.dtype}, "
            f"device={self._device}, tape={self._tape!r})"
        )
