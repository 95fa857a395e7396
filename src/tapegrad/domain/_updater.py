"""
Parameter updater interface.

An updater is whatever consumes gradients to change parameters: an
optimizer, or a test double that only checks which parameters have
gradients. Modules hand each of their parameters to the updater, together
with an `UnusedTensors` collection the updater fills with the identities of
parameters that had no gradient.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class IParamUpdater(Protocol):
    """Structural contract for parameter updaters."""

    def update_param(self, tensor: ITensor, unused: Any) -> None:
        """
        Update `tensor` in place.

        Parameters
        ----------
        tensor : ITensor
            A parameter owned by a module.
        unused : UnusedTensors
            Collection to add `tensor` to when it has no gradient.

        Raises
        ------
        AllocationError
            If the updater needs a buffer the device cannot allocate.
        """
        ...
