"""
Shape mixin: broadcast, reshape, permute and indexing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ....domain._shape import ShapeLike
from ... import ops as _ops

if TYPE_CHECKING:
    from .._tensor import Tensor


class TensorMixinShape:
    def broadcast_to(self, shape: ShapeLike) -> "Tensor":
        return _ops.broadcast_to(self, shape)

    def broadcast_like(self, src: ShapeLike) -> "Tensor":
        return _ops.broadcast_like(self, src)

    def reshape(self, shape: ShapeLike) -> "Tensor":
        return _ops.reshape(self, shape)

    def permute(self, axes: Sequence[int]) -> "Tensor":
        return _ops.permute(self, axes)

    def transpose(self) -> "Tensor":
        """Swap the last two axes."""
        return _ops.transpose(self)

    @property
    def T(self) -> "Tensor":
        return _ops.transpose(self)

    def select(self, index: int, axis: int = 0) -> "Tensor":
        return _ops.select(self, index, axis)

    def gather(self, indices: Sequence[int], axis: int = 0) -> "Tensor":
        return _ops.gather(self, indices, axis)
