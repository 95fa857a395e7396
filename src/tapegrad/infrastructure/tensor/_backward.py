"""
Backward dispatch table.

Every differentiable operation records an `OpRecord` tagged with its op name.
When a tape is executed, each record is handed to the backward function
registered for that name, which reads the gradient of the record's output
from the `Gradients` map and accumulates into the gradients of its inputs.

Usage example
-------------
Registering a backward function:

    @BackwardRegistry.register("choose")
    def choose_backward(record: OpRecord, grads: Gradients) -> None:
        ...

Dispatch:

    BackwardRegistry.get(record.op)(record, grads)

Notes
-----
- Registration keys must be unique unless explicitly overwritten.
- Backward functions are registered as an import side effect of the
  `..ops` package.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, ClassVar, Dict, TypeVar

from ...domain._errors import ContractViolationError

if TYPE_CHECKING:
    from ._gradients import Gradients
    from ._tape import OpRecord

BackwardFn = Callable[["OpRecord", "Gradients"], None]
F = TypeVar("F", bound=BackwardFn)


class BackwardRegistry:
    """Class-level registry mapping op names to backward functions."""

    BACKWARDS: ClassVar[Dict[str, BackwardFn]] = {}

    @classmethod
    def register(cls, op: str, *, overwrite: bool = False) -> Callable[[F], F]:
        """
        Decorator to register the backward function of `op`.

        Parameters
        ----------
        op:
            Op name stored in the records this function handles.
        overwrite:
            If False (default), raises if `op` is already registered.
        """
        if not isinstance(op, str) or not op:
            raise ValueError("Op name must be a non-empty string")

        def decorator(func: F) -> F:
            if not overwrite and op in cls.BACKWARDS:
                raise ValueError(f"Backward already registered: {op!r}")
            cls.BACKWARDS[op] = func
            return func

        return decorator

    @classmethod
    def get(cls, op: str) -> BackwardFn:
        """
        Return the backward function of `op`.

        Raises
        ------
        ContractViolationError
            If no backward function is registered for `op`.
        """
        try:
            return cls.BACKWARDS[op]
        except KeyError:
            raise ContractViolationError(f"No backward function registered for op {op!r}") from None


register_backward = BackwardRegistry.register
