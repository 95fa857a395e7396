"""
Infrastructure module base classes.

This module provides a concrete `Module` implementation that satisfies the
domain-level `IModule` protocol. It implements the conveniences shared by
every layer:

- parameter and submodule registration (explicit, or implicit through
  attribute assignment)
- recursive parameter traversal (`parameters`, `named_parameters`)
- `update`, which hands every parameter to a parameter updater
- `to_device`, which copies the module with its parameters moved
- `__call__` forwarding to `forward`

`ZeroSizedModule` gives parameterless modules (activations) a trivial
implementation of the build/reset/update/transfer contract.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any, Dict, Iterator, Optional

from typing_extensions import Self

from ...domain._module import IModule
from ...domain._updater import IParamUpdater
from ..tensor._gradients import UnusedTensors
from ..tensor._tensor import Tensor


class Module(IModule):
    """
    Infrastructure base class for learnable units.

    Subclasses typically:

    - implement `try_build` to allocate their parameters on a device,
    - assign parameter tensors and child modules as attributes (which
      registers them),
    - implement `try_reset_params` when they own parameters,
    - implement `forward`.

    Attributes
    ----------
    _parameters : Dict[str, Tensor]
        Parameters owned directly by this module.
    _modules : Dict[str, Module]
        Child modules, in registration order.
    """

    def __init__(self) -> None:
        # bypass our own __setattr__
        super().__setattr__("_parameters", {})
        super().__setattr__("_modules", {})

    def __setattr__(self, name: str, value: Any) -> None:
        """
        Intercept attribute assignment to auto-register parameter tensors and
        child modules. Assigning None unregisters.
        """
        if name in {"_parameters", "_modules"}:
            super().__setattr__(name, value)
            return

        if value is None:
            self._parameters.pop(name, None)
            self._modules.pop(name, None)
        elif isinstance(value, Tensor):
            self._parameters[name] = value
        elif isinstance(value, Module):
            self._modules[name] = value
        super().__setattr__(name, value)

    def register_parameter(self, name: str, param: Optional[Tensor]) -> None:
        """Register `param` under `name` (no-op for None)."""
        if param is None:
            return
        self._parameters[name] = param
        super().__setattr__(name, param)

    def register_module(self, name: str, module: Optional["Module"]) -> None:
        """Register a child module under `name` (no-op for None)."""
        if module is None:
            return
        self._modules[name] = module
        super().__setattr__(name, module)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def try_build(cls, device: Any, *args: Any, **kwargs: Any) -> Self:
        """
        Construct the module with freshly initialized parameters on `device`.

        Raises
        ------
        AllocationError
            If a parameter buffer cannot be allocated.
        """
        raise NotImplementedError(f"{cls.__name__} does not implement try_build()")

    @classmethod
    def build(cls, device: Any, *args: Any, **kwargs: Any) -> Self:
        return cls.try_build(device, *args, **kwargs)

    def try_reset_params(self) -> None:
        """
        Re-initialize parameters in place.

        The base implementation resets child modules; modules owning
        parameters extend it.
        """
        for m in self._modules.values():
            m.try_reset_params()

    def reset_params(self) -> None:
        self.try_reset_params()

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------
    def parameters(self) -> Iterable[Tensor]:
        """Yield own parameters, then the parameters of every child module."""
        for p in self._parameters.values():
            yield p
        for m in self._modules.values():
            yield from m.parameters()

    def named_parameters(self, prefix: str = "") -> Iterator[tuple[str, Tensor]]:
        """Yield ``(qualified_name, parameter)`` pairs, recursively."""
        base = prefix + "." if prefix else ""
        for name, p in self._parameters.items():
            yield (f"{base}{name}", p)
        for child_name, child in self._modules.items():
            yield from child.named_parameters(f"{base}{child_name}")

    def update(self, updater: IParamUpdater, unused: UnusedTensors) -> None:
        """
        Hand every parameter to `updater`, own parameters first, then child
        modules in registration order.
        """
        for p in self._parameters.values():
            p.update(updater, unused)
        for m in self._modules.values():
            m.update(updater, unused)

    def to_device(self, device: Any) -> Self:
        """
        Return a copy of this module whose parameters (and children's
        parameters) live on `device`. Parameter identities are kept.

        Raises
        ------
        AllocationError
            If `device` cannot allocate a parameter buffer.
        """
        new = copy.copy(self)
        Module.__init__(new)
        for name, p in self._parameters.items():
            setattr(new, name, p.to_device(device))
        for name, m in self._modules.items():
            setattr(new, name, m.to_device(device))
        if "device" in self.__dict__:
            object.__setattr__(new, "device", device)
        return new

    # ------------------------------------------------------------------
    # Forward
    # ------------------------------------------------------------------
    def forward(self, x: Tensor) -> Tensor:
        """
        Execute the forward computation of the module.

        Subclasses must implement this.
        """
        raise NotImplementedError

    def forward_mut(self, x: Tensor) -> Tensor:
        """Forward pass allowed to change module state; defaults to `forward`."""
        return self.forward(x)

    def __call__(self, x: Tensor) -> Tensor:
        return self.forward(x)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ZeroSizedModule(Module):
    """
    Base for modules without parameters.

    Building ignores the device, resetting and updating do nothing, and a
    device transfer returns a copy.
    """

    @classmethod
    def try_build(cls, device: Any = None, *args: Any, **kwargs: Any) -> Self:
        return cls(*args, **kwargs)

    def try_reset_params(self) -> None:
        pass

    def update(self, updater: IParamUpdater, unused: UnusedTensors) -> None:
        pass

    def to_device(self, device: Any) -> Self:
        new = copy.copy(self)
        Module.__init__(new)
        return new
