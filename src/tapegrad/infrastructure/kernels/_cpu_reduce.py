"""
CPU reduction kernels (NumPy backend).

Supported reductions: ``sum``, ``mean``, ``max``, ``min``, ``var`` (with a
``correction`` parameter, 0 for the population variance) and
``logsumexp``. `axes` arrive already normalized (sorted, non-negative).

The backward kernels first re-insert the reduced axes into the incoming
gradient (and the forward output) when ``keepdims`` was False, then rely on
NumPy broadcasting against the input buffer.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ...domain.device._device import DeviceType
from ._base import ReduceKernel, kernel_path


def _count(shape: Tuple[int, ...], axes: Tuple[int, ...]) -> int:
    n = 1
    for a in axes:
        n *= shape[a]
    return n


def _logsumexp(x: np.ndarray, axes: Tuple[int, ...], keepdims: bool) -> np.ndarray:
    m = np.max(x, axis=axes, keepdims=True)
    m = np.where(np.isfinite(m), m, 0.0).astype(x.dtype)
    out = m + np.log(np.sum(np.exp(x - m), axis=axes, keepdims=True))
    if not keepdims:
        out = np.squeeze(out, axis=axes)
    return out


@kernel_path(ReduceKernel, ReduceKernel.reduce_forward, DeviceType.CPU)
def reduce_forward_cpu(self, fn, inp, axes, keepdims, **params):
    x = inp.data
    if fn == "sum":
        out = np.sum(x, axis=axes, keepdims=keepdims)
    elif fn == "mean":
        out = np.mean(x, axis=axes, keepdims=keepdims)
    elif fn == "max":
        out = np.max(x, axis=axes, keepdims=keepdims)
    elif fn == "min":
        out = np.min(x, axis=axes, keepdims=keepdims)
    elif fn == "var":
        out = np.var(x, axis=axes, keepdims=keepdims, ddof=params.get("correction", 0))
    elif fn == "logsumexp":
        out = _logsumexp(x, axes, keepdims)
    else:
        raise ValueError(f"Unknown reduction {fn!r}")
    return self._wrap(out, inp.shape.reduced(axes, keepdims), inp.dtype)


@kernel_path(ReduceKernel, ReduceKernel.reduce_backward, DeviceType.CPU)
def reduce_backward_cpu(self, fn, inp, out, grad_inp, grad_out, axes, keepdims, **params):
    x = inp.data
    y = out.data
    g = grad_out.data
    if not keepdims:
        y = np.expand_dims(y, axes)
        g = np.expand_dims(g, axes)

    if fn == "sum":
        contribution = np.broadcast_to(g, x.shape)
    elif fn == "mean":
        contribution = np.broadcast_to(g / max(_count(x.shape, axes), 1), x.shape)
    elif fn in ("max", "min"):
        # every element equal to the extreme receives the gradient
        contribution = g * (x == y)
    elif fn == "var":
        correction = params.get("correction", 0)
        n = _count(x.shape, axes)
        mu = np.mean(x, axis=axes, keepdims=True)
        contribution = g * (2.0 / max(n - correction, 1)) * (x - mu)
    elif fn == "logsumexp":
        contribution = g * np.exp(x - y)
    else:
        raise ValueError(f"Unknown reduction {fn!r}")

    np.add(grad_inp.data, contribution, out=grad_inp.data)
