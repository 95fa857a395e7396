"""
tapegrad: tape-based reverse-mode automatic differentiation on NumPy.

Tensors carry a tape of the operations applied to them. Calling
``backward()`` on a traced result replays the tape in reverse and returns a
`Gradients` map keyed by tensor identity, which a parameter updater such as
`Sgd` consumes to train a `Module`.

Examples
--------
>>> import tapegrad as tg
>>> dev = tg.Cpu(seed=0)
>>> x = dev.tensor([1.0, 2.0, 3.0])
>>> y = (x.trace() * 2.0).sum()
>>> grads = y.backward()
>>> grads.get(x).as_vec()
[2.0, 2.0, 2.0]
"""

import logging

from .domain import (
    AllocationError,
    ContractViolationError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    DType,
    DTypeMismatchError,
    MissingGradientError,
    Shape,
    ShapeMismatchError,
    SliceLengthError,
    TapeDrainedError,
    TapeGradError,
    TapeMergeError,
    UniqueId,
    UnusedParamsError,
)
from .domain.device import DeviceSpec, DeviceType, MemoryLayout
from .infrastructure import nn, ops, optim
from .infrastructure.devices import (
    Cpu,
    Normal,
    Standard,
    StandardNormal,
    Uniform,
    device_from_spec,
)
from .infrastructure.settings import Settings, get_settings, reload_settings
from .infrastructure.tensor import Gradients, OwnedTape, Tensor, UnusedTensors

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AllocationError",
    "ContractViolationError",
    "Cpu",
    "DType",
    "DTypeMismatchError",
    "DeviceMismatchError",
    "DeviceNotSupportedError",
    "DeviceSpec",
    "DeviceType",
    "Gradients",
    "MemoryLayout",
    "MissingGradientError",
    "Normal",
    "OwnedTape",
    "Settings",
    "Shape",
    "ShapeMismatchError",
    "SliceLengthError",
    "Standard",
    "StandardNormal",
    "TapeDrainedError",
    "TapeGradError",
    "TapeMergeError",
    "Tensor",
    "Uniform",
    "UniqueId",
    "UnusedParamsError",
    "UnusedTensors",
    "device_from_spec",
    "get_settings",
    "nn",
    "ops",
    "optim",
    "reload_settings",
]
