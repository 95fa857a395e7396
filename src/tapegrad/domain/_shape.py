"""
Shape model.

A `Shape` is an ordered sequence of axis extents. Each axis is either a
static extent, written `Const(n)`, or a dynamic extent, written as a plain
`int`. Static axes document sizes that are fixed by the program (a layer
width, a feature count); dynamic axes carry sizes known only at runtime (a
batch size).

Both kinds behave identically once data exists: shape checks compare the
concrete extents at operation boundaries, and `Shape` compares equal to a
plain tuple of the same extents. The static/dynamic tag survives operations
that keep an axis, so `Shape.is_static` can be used to validate factory
calls that require fully static shapes.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Protocol, Sequence, Tuple, Union, runtime_checkable

from ._errors import ShapeMismatchError


class Const:
    """
    Static axis extent.

    Parameters
    ----------
    size : int
        Non-negative extent of the axis.
    """

    __slots__ = ("size",)

    def __init__(self, size: int) -> None:
        size = int(size)
        if size < 0:
            raise ValueError(f"Axis extent must be non-negative, got {size}")
        self.size = size

    def __int__(self) -> int:
        return self.size

    def __index__(self) -> int:
        return self.size

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Const):
            return self.size == other.size
        if isinstance(other, int):
            return self.size == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.size)

    def __repr__(self) -> str:
        return f"Const({self.size})"


Dim = Union[int, Const]
Axes = Union[None, int, Sequence[int]]


def _check_dim(d: Dim) -> Dim:
    if isinstance(d, Const):
        return d
    if isinstance(d, bool) or not hasattr(d, "__index__"):
        raise TypeError(f"Axis extent must be an int or Const, got {d!r}")
    d = int(d)
    if d < 0:
        raise ValueError(f"Axis extent must be non-negative, got {d}")
    return d


class Shape:
    """
    Ordered axis extents, each static (`Const`) or dynamic (`int`).

    Parameters
    ----------
    *dims : int | Const
        Axis extents, outermost first. A single iterable argument is also
        accepted: ``Shape((2, 3))`` equals ``Shape(2, 3)``.

    Notes
    -----
    - Iteration and indexing yield plain ints, so a `Shape` can be passed
      wherever NumPy expects a shape tuple.
    - Equality and hashing only consider concrete extents.
    """

    __slots__ = ("_dims",)

    def __init__(self, *dims: Union[Dim, Iterable[Dim]]) -> None:
        if len(dims) == 1 and hasattr(dims[0], "__iter__"):
            dims = tuple(dims[0])  # type: ignore[arg-type]
        self._dims: Tuple[Dim, ...] = tuple(_check_dim(d) for d in dims)  # type: ignore[arg-type]

    @classmethod
    def static(cls, *sizes: int) -> "Shape":
        """Build a shape whose every axis is static."""
        if len(sizes) == 1 and hasattr(sizes[0], "__iter__"):
            sizes = tuple(sizes[0])  # type: ignore[arg-type]
        return cls(*(s if isinstance(s, Const) else Const(s) for s in sizes))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def dims(self) -> Tuple[Dim, ...]:
        """Axis extents with their static/dynamic tags."""
        return self._dims

    @property
    def concrete(self) -> Tuple[int, ...]:
        """Axis extents as plain ints."""
        return tuple(int(d) for d in self._dims)

    @property
    def rank(self) -> int:
        return len(self._dims)

    @property
    def num_elements(self) -> int:
        n = 1
        for d in self._dims:
            n *= int(d)
        return n

    @property
    def last_axis(self) -> int:
        """Index of the last axis, the axis used by axis-wise operations."""
        if not self._dims:
            raise ShapeMismatchError("last_axis", self, detail="rank-0 shape has no axes")
        return len(self._dims) - 1

    @property
    def is_static(self) -> bool:
        return all(isinstance(d, Const) for d in self._dims)

    # ------------------------------------------------------------------
    # Derived shapes
    # ------------------------------------------------------------------
    def normalize_axes(self, axes: Axes) -> Tuple[int, ...]:
        """
        Resolve an axis specification to sorted, non-negative, unique axes.

        Parameters
        ----------
        axes : None | int | Sequence[int]
            ``None`` selects every axis. Negative axes count from the end.

        Raises
        ------
        ShapeMismatchError
            If an axis is out of range or repeated.
        """
        if axes is None:
            return tuple(range(self.rank))
        if isinstance(axes, int):
            axes = (axes,)
        out = []
        for a in axes:
            a = int(a)
            if not -self.rank <= a < self.rank:
                raise ShapeMismatchError(
                    "axis", self, detail=f"axis {a} out of range for rank {self.rank}"
                )
            out.append(a % self.rank)
        if len(set(out)) != len(out):
            raise ShapeMismatchError("axis", self, detail=f"repeated axis in {tuple(axes)}")
        return tuple(sorted(out))

    def reduced(self, axes: Axes, keepdims: bool = False) -> "Shape":
        """Shape after reducing over `axes`."""
        ax = set(self.normalize_axes(axes))
        dims = []
        for i, d in enumerate(self._dims):
            if i in ax:
                if keepdims:
                    dims.append(1)
            else:
                dims.append(d)
        return Shape(*dims)

    def can_broadcast_to(self, dst: "Shape") -> bool:
        """Return True if NumPy broadcasting maps this shape onto `dst`."""
        src = self.concrete
        tgt = dst.concrete
        if len(src) > len(tgt):
            return False
        for s, t in zip(reversed(src), reversed(tgt)):
            if s != t and s != 1:
                return False
        return True

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[int]:
        return iter(self.concrete)

    def __len__(self) -> int:
        return len(self._dims)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return Shape(*self._dims[item])
        return int(self._dims[item])

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Shape):
            return self.concrete == other.concrete
        if isinstance(other, (tuple, list)):
            try:
                return self.concrete == tuple(int(d) for d in other)
            except (TypeError, ValueError):
                return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.concrete)

    def __repr__(self) -> str:
        inner = ", ".join(repr(d) for d in self._dims)
        return f"Shape({inner})"

    def __str__(self) -> str:
        return str(self.concrete)


@runtime_checkable
class HasShape(Protocol):
    """Anything that exposes a `shape` (tensors, storage buffers)."""

    @property
    def shape(self) -> Shape: ...


ShapeLike = Union[Shape, HasShape, Sequence[Dim], int]


def shape_of(src: ShapeLike) -> Shape:
    """
    Extract a `Shape` from a shape-bearing value.

    Parameters
    ----------
    src : Shape | HasShape | Sequence[int | Const] | int
        A shape, a tuple of extents, a single extent, or any object with a
        `shape` attribute (tensors, storage buffers, NumPy arrays).
    """
    if isinstance(src, Shape):
        return src
    if isinstance(src, (int, Const)) and not isinstance(src, bool):
        return Shape(src)
    if isinstance(src, (tuple, list)):
        return Shape(*src)
    inner = getattr(src, "shape", None)
    if inner is None:
        raise TypeError(f"Cannot derive a shape from {type(src).__name__}")
    return shape_of(inner)


def static_shape_of(src: ShapeLike) -> Shape:
    """
    Like `shape_of`, but plain tuples are taken as fully static shapes.

    Raises
    ------
    ShapeMismatchError
        If `src` is a `Shape` with dynamic axes.
    """
    if isinstance(src, Shape):
        if not src.is_static:
            raise ShapeMismatchError(
                "static shape", src, detail="use the *_like variant for dynamic axes"
            )
        return src
    return Shape.static(*shape_of(src).dims)


def ensure_same_shape(op: str, *shapes: Shape) -> Shape:
    """Return the first shape if every shape matches it, else raise."""
    first = shapes[0]
    for s in shapes[1:]:
        if s != first:
            raise ShapeMismatchError(op, *shapes)
    return first


def rank0() -> Shape:
    return Shape()


def rank1(m: int) -> Shape:
    return Shape.static(m)


def rank2(m: int, n: int) -> Shape:
    return Shape.static(m, n)


def rank3(m: int, n: int, o: int) -> Shape:
    return Shape.static(m, n, o)


def rank4(m: int, n: int, o: int, p: int) -> Shape:
    return Shape.static(m, n, o, p)
