"""
Gradient tape.

A tape is the log of differentiable operations performed on traced tensors.
Two kinds exist:

- `NoneTape`: the tape of untraced tensors. It records nothing; there is a
  single shared instance, `NONE_TAPE`.
- `OwnedTape`: an append-only list of `OpRecord`s. It is created by
  `Tensor.trace()`, grows while operations execute, and is drained exactly
  once by `Tensor.backward()`, which runs the backward function of every
  record in reverse insertion order.

State machine
-------------
``EMPTY -> RECORDING -> DRAINED``. Recording onto, or draining, a DRAINED
tape raises `TapeDrainedError`.

Merging
-------
An operation's output carries the single `OwnedTape` found among its
inputs. Two distinct `OwnedTape` instances meeting at one operation raise
`TapeMergeError`: independently traced graphs must be joined explicitly
(for example by re-tracing one input with `Tensor.put_tape`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Mapping, Tuple, Union

from ...domain._errors import TapeDrainedError, TapeMergeError
from ._backward import BackwardRegistry

if TYPE_CHECKING:
    from ._gradients import Gradients
    from ._tensor import Tensor

logger = logging.getLogger(__name__)


class TapeState(Enum):
    EMPTY = "empty"
    RECORDING = "recording"
    DRAINED = "drained"


@dataclass(frozen=True)
class OpRecord:
    """
    One recorded operation.

    Attributes
    ----------
    op : str
        Op name; selects the backward function in `BackwardRegistry`.
    inputs : tuple[Tensor, ...]
        Detached handles (identity and storage, no tape) of the operands.
    output : Tensor
        Detached handle of the result.
    saved : Mapping[str, Any]
        Non-tensor data needed by the backward function (axes, parameters).
    """

    op: str
    inputs: Tuple["Tensor", ...]
    output: "Tensor"
    saved: Mapping[str, Any] = field(default_factory=dict)


class NoneTape:
    """Tape of untraced tensors. Recording is a no-op."""

    _instance = None
    owned = False

    def __new__(cls) -> "NoneTape":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def state(self) -> TapeState:
        return TapeState.EMPTY

    def record(self, record: OpRecord) -> None:
        pass

    def __len__(self) -> int:
        return 0

    def __repr__(self) -> str:
        return "NoneTape"


NONE_TAPE = NoneTape()


class OwnedTape:
    """
    Recording tape owned by one computation.

    Notes
    -----
    Not thread-safe: a tape is recorded and drained by a single owner.
    """

    owned = True

    def __init__(self) -> None:
        self._records: List[OpRecord] = []
        self._state = TapeState.EMPTY

    @property
    def state(self) -> TapeState:
        return self._state

    @property
    def records(self) -> Tuple[OpRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def record(self, record: OpRecord) -> None:
        """
        Append `record`.

        Raises
        ------
        TapeDrainedError
            If the tape was already drained.
        """
        if self._state is TapeState.DRAINED:
            raise TapeDrainedError(f"Cannot record {record.op!r} onto a drained tape")
        self._records.append(record)
        self._state = TapeState.RECORDING

    def drain(self) -> List[OpRecord]:
        """
        Take every record out of the tape and mark it DRAINED.

        Raises
        ------
        TapeDrainedError
            If the tape was already drained.
        """
        if self._state is TapeState.DRAINED:
            raise TapeDrainedError("Tape has already been drained")
        records, self._records = self._records, []
        self._state = TapeState.DRAINED
        return records

    def execute(self, grads: "Gradients") -> "Gradients":
        """
        Drain the tape and run every record's backward function, last record
        first. Records whose output has no gradient in `grads` are skipped:
        their output does not lie on a path from the seed.
        """
        records = self.drain()
        skipped = 0
        for record in reversed(records):
            if record.output.id not in grads:
                skipped += 1
                continue
            BackwardRegistry.get(record.op)(record, grads)
        logger.debug(
            "Executed tape: %d record(s), %d skipped, %d gradient(s)",
            len(records),
            skipped,
            len(grads),
        )
        return grads

    def __repr__(self) -> str:
        return f"OwnedTape(state={self._state.value}, records={len(self._records)})"


Tape = Union[NoneTape, OwnedTape]


def merge_tapes(*tapes: Tape) -> Tape:
    """
    Return the tape an operation's output carries.

    Raises
    ------
    TapeMergeError
        If two distinct `OwnedTape` instances are given.
    """
    merged: Tape = NONE_TAPE
    for tape in tapes:
        if not tape.owned or tape is merged:
            continue
        if merged.owned:
            raise TapeMergeError(
                "Tensors traced on two independent tapes cannot meet in one operation"
            )
        merged = tape
    return merged
