"""
Module (layer) interface definitions.

This module defines the domain-level interface for learnable units using
structural subtyping via `typing.Protocol`.

Any object that implements the required methods is considered a valid module,
independent of inheritance, enabling flexible composition and clean separation
between domain contracts and infrastructure implementations.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable

from ._tensor import ITensor
from ._updater import IParamUpdater


@runtime_checkable
class IModule(Protocol):
    """
    Domain-level module (layer) interface.

    Notes
    -----
    - `try_build` / `build` are classmethods taking a storage device.
    - `try_*` methods raise `AllocationError` on backend failure; the plain
      variants let the same error propagate.
    - Parameterless modules implement every method trivially.
    """

    @classmethod
    def try_build(cls, device: Any, *args: Any, **kwargs: Any) -> "IModule":
        """Construct the module with freshly initialized parameters."""
        ...

    @classmethod
    def build(cls, device: Any, *args: Any, **kwargs: Any) -> "IModule": ...

    def try_reset_params(self) -> None:
        """Re-initialize every parameter in place."""
        ...

    def reset_params(self) -> None: ...

    def forward(self, x: ITensor) -> ITensor:
        """
        Execute the forward computation of the module.

        Parameters
        ----------
        x : ITensor
            Input tensor to the module.

        Returns
        -------
        ITensor
            Output tensor produced by the module.
        """
        ...

    def forward_mut(self, x: ITensor) -> ITensor:
        """Forward pass for modules that change internal state."""
        ...

    def update(self, updater: IParamUpdater, unused: Any) -> None:
        """Hand every owned parameter to `updater.update_param`."""
        ...

    def to_device(self, device: Any) -> "IModule":
        """Return an equivalent module whose parameters live on `device`."""
        ...

    def parameters(self) -> Iterable[ITensor]:
        """Return the module's parameters, own first, then submodules'."""
        ...
