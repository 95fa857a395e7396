"""
Control-path dispatch: route one method to per-state implementations.

A class declares a base method that fixes the public signature. Device- or
mode-specific bodies are then registered against it, each under a state
value. The first registration replaces the base method with a dispatcher
that reads ``getattr(self, state_attr)`` on every call and forwards to the
body registered for that value.

Kernel mixins use this with ``state_attr="kind"``: `Cpu` devices carry
``kind == DeviceType.CPU`` and so resolve every kernel method to its NumPy
body.

Notes
-----
- Registrations live in a table owned by the builder that made them. Once a
  dispatcher is installed for a method, later registrations for that method
  (from any builder) only add table entries; the installed dispatcher keeps
  reading the table of the builder that installed it.
- Bodies are called as ``body(self, *args, **kwargs)``.
- Subclasses inherit the dispatcher.
"""

from collections import namedtuple
from functools import wraps
from typing import Any, Callable, Dict, Hashable, Optional, Type, Union

from typing_extensions import ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

Trap = Optional[Union[BaseException, Callable[[Callable[..., Any], Any], Any]]]

PathKey = namedtuple("PathKey", ["owner", "method", "state"])
"""Key of one registered body: declaring class name, method name, state."""


def _missing_path(state_attr: str, state: Any, base: Callable[..., Any], trap: Trap) -> BaseException:
    default = NotImplementedError(
        f"Missing control path ({state_attr}={state!r}) for {base.__qualname__}"
    )
    if trap is None:
        return default
    if isinstance(trap, BaseException):
        return trap
    err = trap(base, state)
    return err if isinstance(err, BaseException) else default


def create_path_builder(
    state_attr: str = "_state",
) -> Callable[[Type, Callable[P, R], Hashable, Trap], Callable[[Callable[P, R]], Callable[P, R]]]:
    """
    Create a registration function bound to one state attribute.

    Parameters
    ----------
    state_attr : str, optional
        Attribute of ``self`` whose value selects the body. Defaults to
        ``"_state"``.

    Returns
    -------
    Callable
        ``register(cls, method, state, trap_exception=None)`` returning a
        decorator for the body.

    Examples
    --------
    ::

        register = create_path_builder("kind")

        class Kernels:
            def scale(self, x, k): ...

        @register(Kernels, Kernels.scale, DeviceType.CPU)
        def scale_cpu(self, x, k):
            return x * k
    """

    table: Dict[PathKey, Callable[..., Any]] = {}

    def register(
        cls: Type,
        method: Callable[P, R],
        state: Hashable,
        trap_exception: Trap = None,
    ) -> Callable[[Callable[P, R]], Callable[P, R]]:
        """
        Return a decorator registering a body of `method` for `state`.

        Parameters
        ----------
        cls : Type
            Class declaring `method`; the dispatcher is installed on it.
        method : Callable
            The base method, or the dispatcher already installed for it.
        state : Hashable
            Value of the state attribute that selects the body.
        trap_exception : BaseException | Callable, optional
            Used when no body matches the current state. An exception
            instance is raised as-is; a callable is invoked as
            ``trap_exception(method, state)`` and its result is raised when
            it is an exception. Without it a `NotImplementedError` is raised.

        Raises
        ------
        TypeError
            If `state` is not hashable.
        """
        try:
            hash(state)
        except TypeError:
            raise TypeError(f"The argument for 'state' must be hashable. Got {state!r}") from None

        base = getattr(method, "__wrapped__", method)
        name = base.__name__

        def decorator(body: Callable[P, R]) -> Callable[P, R]:
            table[PathKey(cls.__name__, name, state)] = body
            if getattr(cls.__dict__.get(name), "__control_path__", False):
                return body

            @wraps(base)
            def dispatch(self: Any, *args: P.args, **kwargs: P.kwargs) -> Any:
                if not hasattr(self, state_attr):
                    raise NotImplementedError(f"{type(self)} is missing attribute {state_attr!r}")
                current = getattr(self, state_attr)
                impl = table.get(PathKey(cls.__name__, name, current))
                if impl is None:
                    raise _missing_path(state_attr, current, base, trap_exception)
                return impl(self, *args, **kwargs)

            dispatch.__control_path__ = True  # type: ignore[attr-defined]
            setattr(cls, name, dispatch)
            return body

        return decorator

    return register
