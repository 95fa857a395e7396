"""
Stochastic Gradient Descent (SGD) parameter updater.

`Sgd` consumes a `Gradients` map produced by `Tensor.backward()` and applies
one descent step to every parameter of a module, in place.

Update rule
-----------
For each parameter ``p`` with gradient ``g``:

- if ``weight_decay > 0`` (classical L2 regularization):
    ``g <- g + weight_decay * p``
- ``p <- p - lr * g``

Design notes
------------
- The module drives the traversal: `Sgd.update` calls ``module.update(self,
  unused)``, and every parameter is handed back through `update_param`.
- Gradients are removed from the map as they are applied, so a parameter
  reached twice is only stepped once.
- Parameters without a gradient are collected in an `UnusedTensors` value.
  They are an error unless the updater was created with
  ``allow_unused=True``, in which case they are logged and skipped.
- Updates write to the parameter buffers directly and are never recorded on
  a tape.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from ...domain._errors import UnusedParamsError
from ..tensor._gradients import Gradients, UnusedTensors
from ..tensor._tensor import Tensor

logger = logging.getLogger(__name__)


@dataclass
class Sgd:
    """
    Plain SGD with optional coupled weight decay.

    Parameters
    ----------
    lr : float, optional
        Learning rate. Must be positive. Defaults to 1e-2.
    weight_decay : float, optional
        Classical L2 weight decay coefficient. Must be non-negative.
        Defaults to 0.0.
    allow_unused : bool, optional
        When True, parameters without a gradient are skipped with a warning
        instead of raising `UnusedParamsError`. Defaults to False.
    """

    lr: float = 1e-2
    weight_decay: float = 0.0
    allow_unused: bool = False
    _grads: Optional[Gradients] = field(default=None, init=False, repr=False, compare=False)

    def __init__(
        self,
        lr: float = 1e-2,
        *,
        weight_decay: float = 0.0,
        allow_unused: bool = False,
    ) -> None:
        """
        Raises
        ------
        ValueError
            If ``lr <= 0`` or ``weight_decay < 0``.
        """
        self.lr = float(lr)
        self.weight_decay = float(weight_decay)
        self.allow_unused = bool(allow_unused)
        self._grads = None

        if self.lr <= 0.0:
            raise ValueError(f"lr must be > 0, got {self.lr}")
        if self.weight_decay < 0.0:
            raise ValueError(f"weight_decay must be >= 0, got {self.weight_decay}")

    def update(self, module: Any, grads: Gradients) -> UnusedTensors:
        """
        Apply one step to every parameter of `module`.

        `grads` is consumed: the gradients of updated parameters are removed
        from it.

        Returns
        -------
        UnusedTensors
            Parameters that had no gradient (empty unless ``allow_unused``).

        Raises
        ------
        UnusedParamsError
            If some parameter had no gradient and ``allow_unused`` is False.
        """
        unused = UnusedTensors()
        self._grads = grads
        try:
            module.update(self, unused)
        finally:
            self._grads = None

        if not unused.is_empty():
            if not self.allow_unused:
                raise UnusedParamsError(unused)
            logger.warning(
                "Sgd update skipped %d parameter(s) without a gradient", len(unused)
            )
        return unused

    def update_param(self, tensor: Tensor, unused: UnusedTensors) -> None:
        if self._grads is None:
            raise RuntimeError("Sgd.update_param called outside Sgd.update")
        grad = self._grads.remove(tensor)
        if grad is None:
            unused.add(tensor)
            return

        p = tensor.writable_storage().data
        g = grad.data
        if self.weight_decay != 0.0:
            g = g + self.weight_decay * p
        np.subtract(p, self.lr * g, out=p)
