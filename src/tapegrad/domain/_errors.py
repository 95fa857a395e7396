"""
Exceptions raised by tapegrad.

Errors fall into two families:

- Allocation/backend errors (`AllocationError`, `DeviceNotSupportedError`,
  `DeviceMismatchError`) describe conditions of the environment. Every
  `try_*` device entry point raises them, and callers may handle them.
- Contract violations (`ContractViolationError` and its subclasses) describe
  a broken invariant: a shape or dtype mismatch, a slice of the wrong length,
  reusing a drained tape, merging two independent tapes, or reading a
  gradient that was never recorded. They indicate a programming error and
  the library never catches or retries them.

Contract violations also derive from the closest builtin exception
(`ValueError`, `TypeError`, `KeyError`) so that generic handlers keep working.
"""

from __future__ import annotations

from typing import Any, Sequence


class TapeGradError(Exception):
    """Base class for every exception raised by tapegrad."""


# ---------------------------------------------------------------------------
# Allocation / backend errors
# ---------------------------------------------------------------------------
class AllocationError(TapeGradError, RuntimeError):
    """
    Raised when a device cannot produce a storage buffer.

    Attributes
    ----------
    shape : tuple[int, ...]
        Concrete extents of the buffer that was requested.
    dtype : str
        Name of the requested element type.
    """

    def __init__(self, shape: Sequence[int], dtype: str, reason: str) -> None:
        super().__init__(
            f"Failed to allocate buffer of shape {tuple(shape)} ({dtype}): {reason}"
        )
        self.shape = tuple(shape)
        self.dtype = dtype


class DeviceNotSupportedError(TapeGradError, RuntimeError):
    """
    Raised when an operation is requested on a device backend that is not
    implemented.

    Attributes
    ----------
    op : str
        The name of the operation that was attempted (e.g., "choose").
    device : str
        String representation of the device.
    """

    def __init__(self, op: str, device: str) -> None:
        super().__init__(f"{op} is not implemented for device '{device}'.")
        self.op = op
        self.device = device


class DeviceMismatchError(TapeGradError, RuntimeError):
    """
    Raised when an operation is attempted between tensors on different devices.
    """

    def __init__(self, device_a: str, device_b: str) -> None:
        super().__init__(f"Device mismatch: '{device_a}' vs '{device_b}'.")
        self.device_a = device_a
        self.device_b = device_b


# ---------------------------------------------------------------------------
# Contract violations
# ---------------------------------------------------------------------------
class ContractViolationError(TapeGradError, RuntimeError):
    """Raised when a caller breaks an invariant of the library."""


class ShapeMismatchError(ContractViolationError, ValueError):
    """
    Raised when operand shapes are incompatible for an operation.

    Attributes
    ----------
    op : str
        Operation name.
    shapes : tuple
        The offending shapes, in operand order.
    """

    def __init__(self, op: str, *shapes: Any, detail: str = "") -> None:
        msg = f"{op}: incompatible shapes {', '.join(str(s) for s in shapes)}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)
        self.op = op
        self.shapes = shapes


class DTypeMismatchError(ContractViolationError, TypeError):
    """Raised when operand element types are incompatible for an operation."""

    def __init__(self, op: str, *dtypes: Any, detail: str = "") -> None:
        msg = f"{op}: incompatible dtypes {', '.join(str(d) for d in dtypes)}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)
        self.op = op
        self.dtypes = dtypes


class SliceLengthError(ContractViolationError, ValueError):
    """Raised when a flat slice does not hold exactly one value per element."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Slice length mismatch: tensor has {expected} elements, slice has {actual}"
        )
        self.expected = expected
        self.actual = actual


class TapeDrainedError(ContractViolationError):
    """Raised when a tape is drained twice or recorded onto after draining."""


class TapeMergeError(ContractViolationError):
    """Raised when tensors carrying two independent tapes meet in one operation."""


class MissingGradientError(ContractViolationError, KeyError):
    """
    Raised when looking up a gradient for a tensor that never received one.

    Attributes
    ----------
    tensor_id : UniqueId
        Identity of the tensor that was looked up.
    """

    def __init__(self, tensor_id: Any) -> None:
        super().__init__(f"No gradient recorded for tensor {tensor_id}")
        self.tensor_id = tensor_id

    def __str__(self) -> str:
        return self.args[0]


# ---------------------------------------------------------------------------
# Update-time errors
# ---------------------------------------------------------------------------
class UnusedParamsError(TapeGradError):
    """
    Raised by updaters when some parameters received no gradient.

    Attributes
    ----------
    unused : UnusedTensors
        The identities of the parameters that had no gradient.
    """

    def __init__(self, unused: Any) -> None:
        super().__init__(
            f"{len(unused)} parameter(s) received no gradient: "
            f"{[str(i) for i in unused.ids]}"
        )
        self.unused = unused
