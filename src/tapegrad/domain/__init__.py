"""
Backend-independent building blocks: shapes, dtypes, identities, device
descriptors, errors and the structural protocols implemented by the
infrastructure layer.
"""

from ._dtype import DType
from ._errors import (
    AllocationError,
    ContractViolationError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    DTypeMismatchError,
    MissingGradientError,
    ShapeMismatchError,
    SliceLengthError,
    TapeDrainedError,
    TapeGradError,
    TapeMergeError,
    UnusedParamsError,
)
from ._module import IModule
from ._shape import Const, Shape, rank0, rank1, rank2, rank3, rank4
from ._tensor import ITensor
from ._unique_id import UniqueId, unique_id
from ._updater import IParamUpdater

__all__ = [
    "AllocationError",
    "Const",
    "ContractViolationError",
    "DType",
    "DTypeMismatchError",
    "DeviceMismatchError",
    "DeviceNotSupportedError",
    "IModule",
    "IParamUpdater",
    "ITensor",
    "MissingGradientError",
    "Shape",
    "ShapeMismatchError",
    "SliceLengthError",
    "TapeDrainedError",
    "TapeGradError",
    "TapeMergeError",
    "UniqueId",
    "UnusedParamsError",
    "rank0",
    "rank1",
    "rank2",
    "rank3",
    "rank4",
    "unique_id",
]
