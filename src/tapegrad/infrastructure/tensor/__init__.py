"""
Tensor handles, tapes and gradients.

Import order matters: the tape, gradients and backward registry modules do
not depend on the operations package, so the `ops` package can import them
while `Tensor` (whose mixins use `ops`) is still being defined.
"""

from ._backward import BackwardRegistry, register_backward
from ._gradients import Gradients, UnusedTensors
from ._tape import NONE_TAPE, NoneTape, OpRecord, OwnedTape, TapeState, merge_tapes
from ._tensor import Tensor

__all__ = [
    "BackwardRegistry",
    "Gradients",
    "NONE_TAPE",
    "NoneTape",
    "OpRecord",
    "OwnedTape",
    "TapeState",
    "Tensor",
    "UnusedTensors",
    "merge_tapes",
    "register_backward",
]
