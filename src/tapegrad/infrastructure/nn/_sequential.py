"""
Sequential container module.

`Sequential` applies its children in order:

    y = L_n(...L_2(L_1(x)))

Children are registered under their position ("0", "1", ...), so they take
part in parameter traversal, `update` and `to_device` like any submodule.
The registration dict is the authoritative execution order.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from ..tensor._tensor import Tensor
from ._module import Module


class Sequential(Module):
    """
    Container applying child modules one after another.

    Examples
    --------
    >>> model = Sequential.build(dev, (Linear, 4, 8), ReLU, (Linear, 8, 2))
    >>> y = model(x)
    """

    def __init__(self, *layers: Module) -> None:
        super().__init__()
        for layer in layers:
            self.add(layer)

    @classmethod
    def try_build(cls, device: Any, *layers: Any) -> "Sequential":
        """
        Build every layer on `device`.

        Parameters
        ----------
        *layers
            Module classes, or ``(cls, *args)`` tuples whose extra items are
            passed to ``cls.try_build(device, *args)``.
        """
        built = []
        for entry in layers:
            if isinstance(entry, tuple):
                layer_cls, *args = entry
            else:
                layer_cls, args = entry, []
            built.append(layer_cls.try_build(device, *args))
        return cls(*built)

    def add(self, layer: Module, name: Optional[str] = None) -> None:
        """
        Append `layer` and register it as a submodule.

        Raises
        ------
        TypeError
            If `layer` is not a `Module`.
        ValueError
            If `name` is already taken.
        """
        if not isinstance(layer, Module):
            raise TypeError(f"Sequential.add expects a Module, got: {type(layer)}")
        layer_name = name if name is not None else str(len(self._modules))
        if layer_name in self._modules:
            raise ValueError(f"Duplicate layer name '{layer_name}' in Sequential.")
        self.register_module(layer_name, layer)

    def forward(self, x: Tensor) -> Tensor:
        out = x
        for layer in self._modules.values():
            out = layer(out)
        return out

    def forward_mut(self, x: Tensor) -> Tensor:
        out = x
        for layer in self._modules.values():
            out = layer.forward_mut(out)
        return out

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules.values())

    def __getitem__(self, idx: int) -> Module:
        return list(self._modules.values())[idx]

    def __repr__(self) -> str:
        inner = ", ".join(repr(m) for m in self._modules.values())
        return f"Sequential({inner})"
