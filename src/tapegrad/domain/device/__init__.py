from ._device import DeviceSpec, DeviceType, MemoryLayout
from ._device_protocol import IDeviceStorage, IDistribution, IStorage

__all__ = [
    "DeviceSpec",
    "DeviceType",
    "IDeviceStorage",
    "IDistribution",
    "IStorage",
    "MemoryLayout",
]
