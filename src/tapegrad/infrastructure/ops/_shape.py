"""
Shape operations: broadcast, reshape, permute, transpose.

Broadcasting is never implicit in tapegrad; these ops are how operands of
different shapes are brought together, and their backward functions are
where gradients are summed back over broadcast axes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ...domain._errors import ShapeMismatchError
from ...domain._shape import ShapeLike, shape_of
from ..tensor._backward import register_backward
from ._common import finish, prepare

if TYPE_CHECKING:
    from ..tensor._gradients import Gradients
    from ..tensor._tape import OpRecord
    from ..tensor._tensor import Tensor


def broadcast_to(x: "Tensor", shape: ShapeLike) -> "Tensor":
    """
    Broadcast `x` to `shape` using NumPy's right-aligned rules.

    Raises
    ------
    ShapeMismatchError
        If `x` cannot be broadcast to `shape`.
    """
    dst = shape_of(shape)
    if not x.shape.can_broadcast_to(dst):
        raise ShapeMismatchError("broadcast_to", x.shape, dst)
    device, tape = prepare("broadcast", x)
    out = device.broadcast_forward(x.storage, dst)
    return finish("broadcast", device, tape, out, (x,))


def broadcast_like(x: "Tensor", src: ShapeLike) -> "Tensor":
    """Broadcast `x` to the shape of `src` (a tensor or a shape)."""
    return broadcast_to(x, shape_of(src))


def reshape(x: "Tensor", shape: ShapeLike) -> "Tensor":
    """
    Reinterpret `x` with a new shape of the same element count, in row-major
    element order.

    Raises
    ------
    ShapeMismatchError
        If the element counts differ.
    """
    dst = shape_of(shape)
    if dst.num_elements != x.num_elements:
        raise ShapeMismatchError("reshape", x.shape, dst, detail="element counts differ")
    device, tape = prepare("reshape", x)
    out = device.reshape_forward(x.storage, dst)
    return finish("reshape", device, tape, out, (x,))


def permute(x: "Tensor", axes: Sequence[int]) -> "Tensor":
    """
    Reorder the axes of `x`; output axis ``i`` is input axis ``axes[i]``.

    Raises
    ------
    ShapeMismatchError
        If `axes` is not a permutation of ``range(x.rank)``.
    """
    axes = tuple(int(a) for a in axes)
    rank = x.shape.rank
    norm = tuple(a % rank for a in axes) if rank else ()
    if len(axes) != rank or sorted(norm) != list(range(rank)) or any(not -rank <= a < rank for a in axes):
        raise ShapeMismatchError("permute", x.shape, detail=f"invalid permutation {axes}")
    device, tape = prepare("permute", x)
    out = device.permute_forward(x.storage, norm)
    return finish("permute", device, tape, out, (x,), axes=norm)


def transpose(x: "Tensor") -> "Tensor":
    """
    Swap the last two axes.

    Raises
    ------
    ShapeMismatchError
        If `x` has rank below 2.
    """
    rank = x.shape.rank
    if rank < 2:
        raise ShapeMismatchError("transpose", x.shape, detail="rank must be >= 2")
    axes = list(range(rank))
    axes[-1], axes[-2] = axes[-2], axes[-1]
    return permute(x, axes)


@register_backward("broadcast")
def broadcast_backward(record: "OpRecord", grads: "Gradients") -> None:
    (inp,) = record.inputs
    out = record.output
    out.device.broadcast_backward(grads.get_or_alloc_mut(inp), grads.get_ref(out))


@register_backward("reshape")
def reshape_backward(record: "OpRecord", grads: "Gradients") -> None:
    (inp,) = record.inputs
    out = record.output
    out.device.reshape_backward(grads.get_or_alloc_mut(inp), grads.get_ref(out))


@register_backward("permute")
def permute_backward(record: "OpRecord", grads: "Gradients") -> None:
    (inp,) = record.inputs
    out = record.output
    out.device.permute_backward(
        grads.get_or_alloc_mut(inp), grads.get_ref(out), record.saved["axes"]
    )
