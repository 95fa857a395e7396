"""
Kernel declarations.

Every numerical routine a storage device must provide is declared here as a
method on a small kernel mixin. The methods document the contract only; the
bodies are supplied per device kind by control paths registered with
`kernel_control_path` (see `_cpu_*.py`). A device class inherits the mixins,
exposes its `kind`, and calls resolve to the implementation registered for
that kind.

Conventions
-----------
- Forward kernels return a new storage buffer.
- Backward kernels *accumulate* into the gradient buffers they are given
  (``grad += contribution``). A gradient buffer may already hold
  contributions from other paths and must never be overwritten.
- A gradient argument of ``None`` means the corresponding input takes no
  gradient (for example a non-float operand).
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

from ...domain._errors import DeviceNotSupportedError
from ...domain.utils._control_path import create_path_builder

kernel_control_path = create_path_builder("kind")
"""Control-path manager that dispatches kernel methods on `self.kind`."""


def _not_supported(method, kind) -> DeviceNotSupportedError:
    return DeviceNotSupportedError(method.__name__, str(getattr(kind, "value", kind)))


def kernel_path(cls, method, kind):
    """Register a kernel implementation of `cls.method` for device `kind`."""
    return kernel_control_path(cls, method, kind, _not_supported)


class ChooseKernel:
    """Elementwise selection between two buffers by a boolean condition."""

    def choose_forward(self, cond: Any, lhs: Any, rhs: Any) -> Any:
        """
        Return ``out[i] = lhs[i] if cond[i] else rhs[i]``.

        All three buffers have identical shapes; `cond` is boolean.
        """
        ...

    def choose_backward(
        self, cond: Any, grad_lhs: Optional[Any], grad_rhs: Optional[Any], grad_out: Any
    ) -> None:
        """
        Add ``grad_out[i]`` into ``grad_lhs[i]`` where ``cond[i]`` is true and
        into ``grad_rhs[i]`` otherwise. The other buffer is left untouched for
        that element. `grad_lhs` and `grad_rhs` may be the same buffer.
        """
        ...


class UnaryKernel:
    """Elementwise functions of one buffer, optionally with scalar parameters."""

    def unary_forward(self, fn: str, inp: Any, **params: float) -> Any:
        """Apply elementwise function `fn` (e.g. ``"exp"``, ``"mul_scalar"``)."""
        ...

    def unary_backward(
        self, fn: str, inp: Any, out: Any, grad_inp: Any, grad_out: Any, **params: float
    ) -> None:
        """Accumulate ``f'(inp) * grad_out`` into `grad_inp`."""
        ...


class BinaryKernel:
    """Elementwise functions of two same-shaped buffers."""

    def binary_forward(self, fn: str, lhs: Any, rhs: Any) -> Any: ...

    def binary_backward(
        self,
        fn: str,
        lhs: Any,
        rhs: Any,
        grad_lhs: Optional[Any],
        grad_rhs: Optional[Any],
        grad_out: Any,
    ) -> None:
        """Accumulate partial derivatives into `grad_lhs` and `grad_rhs`."""
        ...

    def compare(self, fn: str, lhs: Any, rhs: Any) -> Any:
        """Return a boolean buffer; `rhs` may be a Python scalar."""
        ...


class ReduceKernel:
    """Reductions over a set of axes."""

    def reduce_forward(
        self, fn: str, inp: Any, axes: Tuple[int, ...], keepdims: bool, **params: float
    ) -> Any: ...

    def reduce_backward(
        self,
        fn: str,
        inp: Any,
        out: Any,
        grad_inp: Any,
        grad_out: Any,
        axes: Tuple[int, ...],
        keepdims: bool,
        **params: float,
    ) -> None: ...


class MatMulKernel:
    """Matrix products with NumPy ``matmul`` semantics."""

    def matmul_forward(self, lhs: Any, rhs: Any) -> Any: ...

    def matmul_backward(
        self,
        lhs: Any,
        rhs: Any,
        grad_lhs: Optional[Any],
        grad_rhs: Optional[Any],
        grad_out: Any,
    ) -> None: ...


class ShapeKernel:
    """Broadcast, reshape, permute and indexing."""

    def broadcast_forward(self, inp: Any, shape: Any) -> Any: ...

    def broadcast_backward(self, grad_inp: Any, grad_out: Any) -> None:
        """Sum `grad_out` over broadcast axes and accumulate into `grad_inp`."""
        ...

    def reshape_forward(self, inp: Any, shape: Any) -> Any: ...

    def reshape_backward(self, grad_inp: Any, grad_out: Any) -> None: ...

    def permute_forward(self, inp: Any, axes: Tuple[int, ...]) -> Any: ...

    def permute_backward(self, grad_inp: Any, grad_out: Any, axes: Tuple[int, ...]) -> None: ...

    def gather_forward(self, inp: Any, indices: Sequence[int], axis: int, keep_axis: bool) -> Any:
        """
        Take `indices` along `axis`. With ``keep_axis=False`` a single index
        removes the axis (select).
        """
        ...

    def gather_backward(
        self,
        grad_inp: Any,
        grad_out: Any,
        indices: Sequence[int],
        axis: int,
        keep_axis: bool,
    ) -> None:
        """Scatter-add `grad_out` back to `indices`; repeated indices accumulate."""
        ...


class DeviceKernels(
    ChooseKernel,
    UnaryKernel,
    BinaryKernel,
    ReduceKernel,
    MatMulKernel,
    ShapeKernel,
):
    """Aggregate of every kernel mixin a storage device must provide."""
