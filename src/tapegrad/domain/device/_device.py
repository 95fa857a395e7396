"""
Device descriptors.

Backend-free descriptions of where a computation runs:

- `DeviceType`: device category. Concrete devices expose it as ``kind``
  and kernel dispatch is keyed on it.
- `MemoryLayout`: element order of the buffers a device allocates.
- `DeviceSpec`: a parsed device string (``"cpu"``, ``"cuda:0"``).

Storage devices themselves live in the infrastructure layer.
"""

from enum import Enum
import re
from typing import Optional, Tuple


class DeviceType(Enum):
    """
    Device categories known to descriptors and dispatch.

    Only `CPU` has a storage backend; `CUDA` is recognized so that device
    strings naming a GPU fail with a clear error instead of a parse error.
    """

    CPU = "cpu"
    CUDA = "cuda"


class MemoryLayout(Enum):
    """
    Element order of a device's storage buffers.

    The value is the NumPy ``order`` argument. Logical indexing never
    depends on the layout: copies in and out of a buffer always walk
    elements in row-major index order.
    """

    ROW_MAJOR = "C"
    COLUMN_MAJOR = "F"


_DEVICE_RE = re.compile(r"^(?P<kind>cpu|cuda)(?::(?P<index>\d+))?$")


def _parse(device: str) -> Tuple[DeviceType, Optional[int]]:
    m = _DEVICE_RE.match(device) if isinstance(device, str) else None
    if m is None:
        raise ValueError(f"Invalid device {device!r}. Expected 'cpu' or 'cuda:<index>'")
    kind = DeviceType(m.group("kind"))
    index = m.group("index")
    if kind is DeviceType.CPU and index is not None:
        raise ValueError(f"Invalid device {device!r}: 'cpu' takes no index")
    if kind is DeviceType.CUDA and index is None:
        raise ValueError(f"Invalid device {device!r}: 'cuda' needs an index")
    return kind, None if index is None else int(index)


class DeviceSpec:
    """
    Parsed device string.

    Parameters
    ----------
    device : str
        ``"cpu"`` or ``"cuda:<index>"`` with a non-negative index. Matching
        is case-sensitive.

    Raises
    ------
    ValueError
        If `device` is not in one of those forms.
    """

    __slots__ = ("type", "index")

    def __init__(self, device: str):
        self.type, self.index = _parse(device)

    @property
    def kind(self) -> DeviceType:
        return self.type

    def is_cpu(self) -> bool:
        return self.type is DeviceType.CPU

    def is_cuda(self) -> bool:
        return self.type is DeviceType.CUDA

    def __str__(self) -> str:
        if self.index is None:
            return self.type.value
        return f"{self.type.value}:{self.index}"

    def __repr__(self) -> str:
        return f"DeviceSpec('{self}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeviceSpec):
            return NotImplemented
        return (self.type, self.index) == (other.type, other.index)

    def __hash__(self) -> int:
        return hash((self.type, self.index))
