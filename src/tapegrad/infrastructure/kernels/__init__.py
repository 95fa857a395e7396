"""
Device kernels.

Importing this package registers the CPU implementation of every kernel
declared in `_base` with the kernel control-path dispatcher.
"""

from ._base import (
    BinaryKernel,
    ChooseKernel,
    DeviceKernels,
    MatMulKernel,
    ReduceKernel,
    ShapeKernel,
    UnaryKernel,
    kernel_control_path,
    kernel_path,
)
from . import _cpu_elementwise, _cpu_linalg, _cpu_reduce, _cpu_shape  # noqa: F401
from ._cpu_elementwise import BINARY_FUNCTIONS, COMPARISONS, UNARY_FUNCTIONS

__all__ = [
    "BinaryKernel",
    "ChooseKernel",
    "DeviceKernels",
    "MatMulKernel",
    "ReduceKernel",
    "ShapeKernel",
    "UnaryKernel",
    "kernel_control_path",
    "kernel_path",
    "BINARY_FUNCTIONS",
    "COMPARISONS",
    "UNARY_FUNCTIONS",
]
