"""
Indexing along one axis.

- `select(x, index, axis)` takes a single index and removes the axis.
- `gather(x, indices, axis)` takes a sequence of indices (repeats allowed)
  and keeps the axis with extent ``len(indices)``.

The backward pass scatter-adds the output gradient, so an element picked
several times receives the sum of the corresponding gradients.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence, Tuple

from ...domain._errors import ShapeMismatchError
from ..tensor._backward import register_backward
from ._common import finish, prepare

if TYPE_CHECKING:
    from ..tensor._gradients import Gradients
    from ..tensor._tape import OpRecord
    from ..tensor._tensor import Tensor


def _check(op: str, x: "Tensor", indices: Sequence[int], axis: int) -> Tuple[Tuple[int, ...], int]:
    axis = x.shape.normalize_axes(axis)[0]
    n = x.shape[axis]
    out = []
    for i in indices:
        i = int(i)
        if not -n <= i < n:
            raise ShapeMismatchError(op, x.shape, detail=f"index {i} out of range for axis {axis}")
        out.append(i % n)
    return tuple(out), axis


def select(x: "Tensor", index: int, axis: int = 0) -> "Tensor":
    """
    Take element `index` of `axis`, removing that axis.

    Raises
    ------
    ShapeMismatchError
        If `axis` or `index` is out of range.
    """
    indices, axis = _check("select", x, (index,), axis)
    device, tape = prepare("select", x)
    out = device.gather_forward(x.storage, indices, axis, False)
    return finish("select", device, tape, out, (x,), indices=indices, axis=axis, keep_axis=False)


def gather(x: "Tensor", indices: Sequence[int], axis: int = 0) -> "Tensor":
    """
    Take `indices` along `axis`.

    Raises
    ------
    ShapeMismatchError
        If `axis` or any index is out of range.
    """
    indices, axis = _check("gather", x, indices, axis)
    device, tape = prepare("gather", x)
    out = device.gather_forward(x.storage, indices, axis, True)
    return finish("gather", device, tape, out, (x,), indices=indices, axis=axis, keep_axis=True)


def _gather_backward(record: "OpRecord", grads: "Gradients") -> None:
    (inp,) = record.inputs
    out = record.output
    out.device.gather_backward(
        grads.get_or_alloc_mut(inp),
        grads.get_ref(out),
        record.saved["indices"],
        record.saved["axis"],
        record.saved["keep_axis"],
    )


register_backward("select")(_gather_backward)
register_backward("gather")(_gather_backward)
