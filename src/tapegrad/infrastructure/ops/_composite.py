"""
Axis-wise composites built from primitive ops.

These functions record no records of their own: every primitive they call
records itself, so gradients follow from the primitives' backward
functions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from . import _elementwise as ew
from . import _reduce as rd
from ._shape import broadcast_like

if TYPE_CHECKING:
    from ..tensor._tensor import Tensor


def _axis(x: "Tensor", axis: Optional[int]) -> int:
    return x.shape.last_axis if axis is None else x.shape.normalize_axes(axis)[0]


def normalize(x: "Tensor", epsilon: float = 1e-5, axis: Optional[int] = None) -> "Tensor":
    """
    Standardize `x` along `axis` (the last axis by default):
    ``(x - mean) / sqrt(var + epsilon)``, with the population variance.
    """
    axis = _axis(x, axis)
    centered = ew.sub(x, broadcast_like(rd.mean(x, axis, keepdims=True), x))
    std = ew.sqrt(ew.add(rd.var(x, axis, keepdims=True), epsilon))
    return ew.div(centered, broadcast_like(std, x))


def log_softmax(x: "Tensor", axis: Optional[int] = None) -> "Tensor":
    """``x - logsumexp(x)`` along `axis` (the last axis by default)."""
    axis = _axis(x, axis)
    return ew.sub(x, broadcast_like(rd.logsumexp(x, axis, keepdims=True), x))


def softmax(x: "Tensor", axis: Optional[int] = None) -> "Tensor":
    """Softmax along `axis` (the last axis by default)."""
    return ew.exp(log_softmax(x, axis))
