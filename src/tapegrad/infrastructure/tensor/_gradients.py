"""
Gradients map and unused-parameter tracking.

`Gradients` maps tensor identities to gradient buffers. Buffers are
allocated zeroed on first write and accumulated afterwards, so a tensor that
feeds several operations ends up with the sum of every path's contribution.
An identity that never received a gradient is *absent*, which is different
from having a zero gradient: `get` raises `MissingGradientError` for it, and
updaters record it in `UnusedTensors`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Union

import numpy as np

from ...domain._errors import MissingGradientError, ShapeMismatchError
from ...domain._unique_id import UniqueId

if TYPE_CHECKING:
    from ._tensor import Tensor

TensorOrId = Union["Tensor", UniqueId]


def _key(item: TensorOrId) -> UniqueId:
    return item if isinstance(item, UniqueId) else item.id


class Gradients:
    """
    Mapping from tensor identity to accumulated gradient storage.

    Examples
    --------
    >>> x = dev.tensor([1.0, 2.0]).trace()
    >>> grads = x.square().sum().backward()
    >>> grads.get(x).array()
    [2.0, 4.0]
    """

    def __init__(self) -> None:
        self._grads: Dict[UniqueId, Any] = {}

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get_ref(self, item: TensorOrId) -> Any:
        """
        Return the gradient storage of `item` without copying.

        Raises
        ------
        MissingGradientError
            If no gradient was recorded for `item`.
        """
        key = _key(item)
        try:
            return self._grads[key]
        except KeyError:
            raise MissingGradientError(key) from None

    def get(self, tensor: "Tensor") -> "Tensor":
        """
        Return the gradient of `tensor` as a new untraced tensor.

        The returned tensor shares the map's buffer; the buffer is marked
        shared, so writes through either side copy first.

        Raises
        ------
        MissingGradientError
            If no gradient was recorded for `tensor`.
        """
        return tensor.device.upgrade(self.get_ref(tensor).share())

    def contains(self, item: TensorOrId) -> bool:
        return _key(item) in self._grads

    __contains__ = contains

    def __len__(self) -> int:
        return len(self._grads)

    def ids(self) -> List[UniqueId]:
        return list(self._grads)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def get_or_alloc_mut(self, tensor: "Tensor") -> Any:
        """
        Return a writable gradient buffer for `tensor`, allocating a zeroed
        one through the tensor's device on first use.

        Raises
        ------
        AllocationError
            If the device cannot allocate the buffer.
        """
        key = tensor.id
        storage = self._grads.get(key)
        if storage is None:
            storage = tensor.device.try_alloc_grad(tensor.storage)
        else:
            storage = storage.writable()
        self._grads[key] = storage
        return storage

    def try_alloc_for(self, tensor: "Tensor") -> None:
        """Make sure `tensor` has a (possibly zero) gradient entry."""
        self.get_or_alloc_mut(tensor)

    def accumulate(self, tensor: "Tensor", grad: Any) -> None:
        """
        Add `grad` (a tensor or storage of the same shape) into the gradient
        of `tensor`.

        Raises
        ------
        ShapeMismatchError
            If `grad` is not shaped like `tensor`.
        """
        src = getattr(grad, "storage", grad)
        if src.shape != tensor.shape:
            raise ShapeMismatchError("accumulate", tensor.shape, src.shape)
        dst = self.get_or_alloc_mut(tensor)
        np.add(dst.data, src.data, out=dst.data)

    def remove(self, item: TensorOrId) -> Optional[Any]:
        """Remove and return the gradient storage of `item`, or None."""
        return self._grads.pop(_key(item), None)

    def __iter__(self) -> Iterator[UniqueId]:
        return iter(self._grads)

    def __repr__(self) -> str:
        return f"Gradients({[str(k) for k in self._grads]})"


@dataclass
class UnusedTensors:
    """
    Identities of parameters that received no gradient during an update.

    Attributes
    ----------
    ids : list[UniqueId]
        Identities in the order they were found.
    """

    ids: List[UniqueId] = field(default_factory=list)

    def add(self, item: TensorOrId) -> None:
        self.ids.append(_key(item))

    def is_empty(self) -> bool:
        return not self.ids

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self) -> Iterator[UniqueId]:
        return iter(self.ids)

    def __contains__(self, item: TensorOrId) -> bool:
        return _key(item) in self.ids
