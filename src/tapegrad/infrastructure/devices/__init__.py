"""
Storage devices.

`Cpu` is the only backend. `device_from_spec` turns a device string such as
``"cpu"`` into a device object; other device kinds are recognized by
`DeviceSpec` but have no storage backend.
"""

from __future__ import annotations

from typing import Any, Union

from ...domain._errors import DeviceNotSupportedError
from ...domain.device._device import DeviceSpec, MemoryLayout
from ._cpu import Cpu
from ._cpu_storage import CpuStorage, numpy_dtype
from ._distributions import Normal, Standard, StandardNormal, Uniform


def device_from_spec(spec: Union[str, DeviceSpec], **kwargs: Any) -> Cpu:
    """
    Build a device from a descriptor.

    Parameters
    ----------
    spec : str | DeviceSpec
        ``"cpu"`` or ``"cuda:<index>"``.
    **kwargs
        Forwarded to the device constructor (``seed``, ``layout``,
        ``default_dtype``).

    Raises
    ------
    ValueError
        If `spec` is not a valid descriptor.
    DeviceNotSupportedError
        If the descriptor names a device without a backend.
    """
    if not isinstance(spec, DeviceSpec):
        spec = DeviceSpec(spec)
    if spec.is_cpu():
        return Cpu(**kwargs)
    raise DeviceNotSupportedError("device_from_spec", str(spec))


__all__ = [
    "Cpu",
    "CpuStorage",
    "DeviceSpec",
    "MemoryLayout",
    "Normal",
    "Standard",
    "StandardNormal",
    "Uniform",
    "device_from_spec",
    "numpy_dtype",
]
