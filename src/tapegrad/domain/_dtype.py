"""
Element type model.

`DType` tags the numeric type stored in a buffer. The domain layer only
knows the names; backends translate them (the CPU backend maps each name to
the NumPy dtype of the same name).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from ._errors import DTypeMismatchError

_ALIASES = {
    "float": "float64",
    "double": "float64",
    "single": "float32",
    "f4": "float32",
    "f8": "float64",
    "bool_": "bool",
    "?": "bool",
}


class DType(Enum):
    """
    Supported element types.

    Attributes
    ----------
    FLOAT32 : DType
        32-bit IEEE float. Differentiable.
    FLOAT64 : DType
        64-bit IEEE float. Differentiable.
    BOOL : DType
        Boolean. Used for conditions and masks; never differentiated.
    """

    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"

    @property
    def is_float(self) -> bool:
        return self is not DType.BOOL

    @classmethod
    def of(cls, value: Any) -> "DType":
        """
        Normalize a user-facing dtype description.

        Parameters
        ----------
        value : DType | str | dtype-like | type
            For example ``DType.FLOAT32``, ``"float64"``, ``numpy.float32``,
            ``numpy.dtype("bool")`` or the builtin ``bool``.

        Returns
        -------
        DType

        Raises
        ------
        TypeError
            If the value does not name a supported element type.
        """
        if isinstance(value, DType):
            return value
        if isinstance(value, str):
            name = value
        else:
            # dtype objects expose `.name`, scalar types expose `__name__`
            name = getattr(value, "name", None) or getattr(value, "__name__", None)
        if not isinstance(name, str):
            raise TypeError(f"Unsupported dtype: {value!r}")
        name = _ALIASES.get(name, name)
        for member in cls:
            if member.value == name:
                return member
        raise TypeError(f"Unsupported dtype: {value!r}")

    def __str__(self) -> str:
        return self.value


def ensure_same_dtype(op: str, *dtypes: DType) -> DType:
    """Return the common dtype of the operands, or raise `DTypeMismatchError`."""
    first = dtypes[0]
    for d in dtypes[1:]:
        if d is not first:
            raise DTypeMismatchError(op, *dtypes)
    return first


def ensure_float(op: str, dtype: DType) -> None:
    """Raise `DTypeMismatchError` unless `dtype` is differentiable."""
    if not dtype.is_float:
        raise DTypeMismatchError(op, dtype, detail="expected a float dtype")
