"""
Small helpers shared across sextant.

- Unset: the "argument not given" marker, for parameters where None is a real value.
- coalesce(): turn Unset into a fallback.
- rename(): give generated accessors readable names in tracebacks.
- mirror(): read-only view of a private container attribute.
"""
import builtins
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker. There is exactly one instance; it is falsy.

    The type takes part in PEP 604 unions, so `str | Unset` can be used with
    isinstance() wherever a parameter may be omitted.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(value, default=None, /):
    """
    Return `default` when `value` is Unset, else `value` (None, 0 and "" included).
    """
    return default if value is Unset else value


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of the decorated function to `name`.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not builtins.callable(function):
            raise TypeError("rename() must decorate a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _detach(container):
    # one level deep: the items themselves are shared
    match container:
        case str():
            return container
        case Sequence():
            return tuple(container)
        case Mapping():
            return dict(container)
        case Set():
            return frozenset(container)
    return container


def mirror(name, /):
    """
    Read-only property exposing a snapshot of the container stored in "_{name}".
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


__all__ = (
    "Unset",
    "UnsetType",
    "coalesce",
    "rename",
    "mirror",
)
