"""
Tensor interface definitions.

This module defines the domain-level interface for tensor handles using
structural typing. The interface captures the properties every backend's
tensor must expose for the tape, the gradients map, modules and updaters to
work with it.

Notes
-----
A tensor handle is the combination of an identity, a storage buffer, the
device that owns the buffer, and a tape. Identity (not storage) is the key
under which gradients are stored.
"""

from __future__ import annotations

from typing import Any, List, Protocol, Sequence, runtime_checkable

from ._dtype import DType
from ._shape import Shape
from ._unique_id import UniqueId


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor handle interface.

    Notes
    -----
    - `trace`, `retaped`, `put_tape`, `split_tape`, `detached` and `clone`
      return handles with the *same* identity.
    - Operations return handles with a fresh identity.
    """

    @property
    def id(self) -> UniqueId: ...

    @property
    def storage(self) -> Any: ...

    @property
    def device(self) -> Any: ...

    @property
    def tape(self) -> Any: ...

    @property
    def shape(self) -> Shape: ...

    @property
    def dtype(self) -> DType: ...

    @property
    def num_elements(self) -> int: ...

    def trace(self) -> "ITensor":
        """Return this tensor on a fresh recording tape."""
        ...

    def retaped(self, tape: Any = None) -> "ITensor": ...

    def put_tape(self, tape: Any) -> "ITensor": ...

    def split_tape(self) -> "tuple[ITensor, Any]": ...

    def detached(self) -> "ITensor": ...

    def clone(self) -> "ITensor": ...

    def array(self) -> Any:
        """Nested Python lists holding the tensor's values."""
        ...

    def as_vec(self) -> List[Any]:
        """Flat list of the tensor's values in row-major index order."""
        ...

    def copy_from(self, src: Sequence[Any]) -> None: ...

    def copy_into(self, dst: List[Any]) -> None: ...

    def backward(self) -> Any:
        """Drain this tensor's tape and return the gradients map."""
        ...
