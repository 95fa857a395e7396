"""
Plumbing shared by every differentiable operation.

An operation follows the same three steps:

1. `prepare`: check the operands live on equal devices and merge their
   tapes (raising `TapeMergeError` for two independent tapes) *before* any
   computation happens.
2. Run the forward kernel on the operands' storage.
3. `finish`: upgrade the result buffer to a tensor and, when the merged tape
   is recording, append an `OpRecord` and attach the tape to the result.
"""

from __future__ import annotations

import numbers
from typing import TYPE_CHECKING, Any, Tuple

from ...domain._errors import DeviceMismatchError
from ..tensor._tape import OpRecord, Tape, merge_tapes

if TYPE_CHECKING:
    from ..tensor._tensor import Tensor


def is_scalar(value: Any) -> bool:
    """True for Python/NumPy real numbers (booleans excluded)."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and not hasattr(value, "storage")


def prepare(op: str, *tensors: "Tensor") -> Tuple[Any, Tape]:
    """
    Return the common device and the merged tape of `tensors`.

    Raises
    ------
    DeviceMismatchError
        If two operands live on unequal devices.
    TapeMergeError
        If two operands carry distinct recording tapes.
    """
    device = tensors[0].device
    for t in tensors[1:]:
        if t.device != device:
            raise DeviceMismatchError(repr(device), repr(t.device))
    return device, merge_tapes(*(t.tape for t in tensors))


def finish(
    op: str,
    device: Any,
    tape: Tape,
    storage: Any,
    inputs: Tuple["Tensor", ...],
    **saved: Any,
) -> "Tensor":
    """Wrap `storage` as the op's result and record the op on `tape`."""
    out = device.upgrade(storage)
    if not tape.owned:
        return out
    tape.record(
        OpRecord(
            op=op,
            inputs=tuple(t.detached() for t in inputs),
            output=out.detached(),
            saved=saved,
        )
    )
    return out.put_tape(tape)
