"""
Tensor operation mixins.

Each mixin groups one family of `Tensor` methods. The methods are thin
wrappers over the functions in `tapegrad.infrastructure.ops`, which hold
the validation, the kernel calls and the tape recording.
"""

from ._arithmetic import TensorMixinArithmetic
from ._comparison import TensorMixinComparison
from ._reduction import TensorMixinReduction
from ._shape import TensorMixinShape
from ._unary import TensorMixinUnary

__all__ = [
    TensorMixinArithmetic.__name__,
    TensorMixinComparison.__name__,
    TensorMixinReduction.__name__,
    TensorMixinShape.__name__,
    TensorMixinUnary.__name__,
]
