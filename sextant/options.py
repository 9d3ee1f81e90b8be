r"""
Sextant option descriptors.

Overview
- Descriptors
  • Flag: presence-only switch (no payload), e.g. -v/--verbose.
  • Single[_T]: value-bearing option that may be given at most once; holds an
    optional value, pre-settable as a default.
  • Multiple[_T]: value-bearing option that may be repeated; values accumulate in order.
- Groups
  • Group: a named set of descriptors shown together in usage, with a recorded
    constraint (none, mutually exclusive, required and mutually exclusive).

Identity
- Names are given the way users type them: "-f", "--triple", or both.
  At most one short name (one letter or digit) and one long name.
- `name` is the long name when there is one, else the short character; every
  message about an option uses it.

Parsing contract
- parse(cursor) runs the kind-specific _parse(cursor), then counts one occurrence.
  A descriptor that refuses repetition checks the count itself before converting.
- Value failures from the codec keep their kind and gain the option prefix:
  "option '<name>': <cause>". A repeated Single stands alone:
  "option '<name>' cannot be used more than once".

Ownership
- Descriptors are created by the application code and registered by reference;
  the registry never copies them, and parsing writes results back into them.

Quick example:
    >>> factor = Single("-f", type=int, metavar="N", default=42, help="Integer factor")
    >>> triple = Single("-t", "--triple", type=tuple[int, int, int], metavar=("A", "B", "C"))
    >>> verbose = Flag("-v", "--verbose", help="Talk more")
"""
import copy
import functools
import operator
import re
from abc import ABCMeta, abstractmethod
from enum import Enum

from .cells import Cell, textual
from .faults import FaultCode, OptionRepeatedError, ParseException, getdoc
from .utils import Unset, coalesce, mirror, rename
from .values import codec


class OptionType(ABCMeta):
    """
    Metaclass giving descriptors a stable typename and readable representations.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in construction errors.
    - __introspectable__ lists the attributes shown by __repr__/__rich_repr__.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {"__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower()},
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, names, /):
    r"""
    Internal: split user-typed names into (short, long).

    Rules
    - at least one name is required.
    - short: r"-[^\W_]" (one Unicode letter or digit).
    - long: r"--[^\W\d_][^\W_]*(?:-[^\W_]+)*" (hyphen-separated segments, no underscores,
      no leading digit).
    - at most one name of each kind.

    Returns
    - tuple[str | None, str | None]: the short character and the long name,
      both without their dashes.
    """
    if not names:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    short = long = None
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif match := re.fullmatch(r"-(?P<short>[^\W_])", name):
            if short is not None:
                raise ValueError(f"{cls.__typename__} cannot have more than one short name")
            short = match["short"]
        elif match := re.fullmatch(r"--(?P<long>[^\W\d_][^\W_]*(?:-[^\W_]+)*)", name):
            if long is not None:
                raise ValueError(f"{cls.__typename__} cannot have more than one long name")
            long = match["long"]
        else:
            raise ValueError(f"{cls.__typename__} names must look like '-x' or '--name', got {name!r}")
    return short, long


def _sanitize_text(cls, field, value, /):
    if not isinstance(value, str | Cell | Unset):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    return coalesce(value, "")


class OptionBase(metaclass=OptionType):
    """
    Shared contract of every registered descriptor.

    Properties
    - short: the short name character, or None.
    - long: the long name as a Cell (empty when absent).
    - name: long name if present, else the short character (as a Cell).
    - help / doc: help line and longer documentation (Cells; assignable).
    - occurrences: how many times the option matched and converted successfully.
    - value_names: the names printed after the option in usage (tuple of Cells).
    """
    __introspectable__ = ("short", "long", "help", "occurrences")

    help = textual("help")
    doc = textual("doc")

    def __init__(self, *names, help=Unset, doc=Unset):
        cls = type(self)
        self._short, long = _sanitize_names(cls, names)
        self._long = Cell(coalesce(long, ""))
        self.help = _sanitize_text(cls, "help", help)
        self.doc = _sanitize_text(cls, "doc", doc)
        self._occurrences = 0

    @property
    def short(self):
        return self._short

    @property
    def long(self):
        return self._long

    @property
    def occurrences(self):
        return self._occurrences

    def has_short(self):
        return self._short is not None

    def has_long(self):
        return not self._long.empty()

    @property
    def name(self):
        if self.has_long():
            return self._long
        return Cell(self._short)

    @property
    @abstractmethod
    def value_names(self): ...

    def parse(self, cursor, /):
        """
        Convert this occurrence from `cursor`, then count it.
        """
        self._parse(cursor)
        self._occurrences += 1

    @abstractmethod
    def _parse(self, cursor, /): ...

    def _wrap(self, fault, /):
        return copy.replace(fault, message="option '%s': %s" % (self.name, fault), option=self)

    def _repeated(self):
        return OptionRepeatedError(
            "option '%s' cannot be used more than once" % self.name,
            title="repeated option",
            code=FaultCode.OPTION_REPEATED,
            option=self,
            hint="keep a single occurrence of this option",
            docs=getdoc(FaultCode.OPTION_REPEATED),
        )


class Flag(OptionBase):
    """
    Presence-only option; its value is whether it occurred at all.
    """
    __introspectable__ = ("short", "long", "help", "occurrences", "value")

    @property
    def value(self):
        return self._occurrences > 0

    @property
    def value_names(self):
        return ()

    def _parse(self, cursor, /):
        pass


class _Parametric[_T](OptionBase):
    """
    Internal base of value-bearing descriptors: codec and value names.
    """

    def __init__(self, *names, type=str, metavar=Unset, help=Unset, doc=Unset):
        super().__init__(*names, help=help, doc=doc)
        self._codec = codec(type)
        self._metavar = self._codec.names(metavar)

    @property
    def codec(self):
        return self._codec

    @property
    def metavar(self):
        return self._metavar

    @property
    def value_names(self):
        if isinstance(self._metavar, Cell):
            return (self._metavar,)
        return self._metavar

    def _convert(self, cursor, /):
        try:
            return self._codec.parse(cursor, self._metavar)
        except ParseException as fault:
            raise self._wrap(fault) from fault


class Single[_T](_Parametric[_T]):
    """
    Value-bearing option given at most once.

    Parameters
    - names: "-x" and/or "--name".
    - type: a type with a registered codec, tuple[...] of such types, or a Codec.
    - metavar: value name (str) or, for tuples, one name per slot.
      Defaults to the codec's own metavar.
    - default: initial value; None when omitted.
    - help / doc: usage help line and longer documentation.
    """
    __introspectable__ = ("short", "long", "help", "occurrences", "metavar", "value")

    def __init__(self, *names, type=str, metavar=Unset, default=Unset, help=Unset, doc=Unset):
        super().__init__(*names, type=type, metavar=metavar, help=help, doc=doc)
        self.value = coalesce(default)

    def has_value(self):
        return self.value is not None

    def render(self):
        """
        Canonical text of the current value, or None without one.
        """
        return self._codec.render(self.value) if self.has_value() else None

    def _parse(self, cursor, /):
        if self._occurrences >= 1:
            raise self._repeated()
        self.value = self._convert(cursor)


class Multiple[_T](_Parametric[_T]):
    """
    Value-bearing option that may be repeated; each occurrence appends one value.
    """
    __introspectable__ = ("short", "long", "help", "occurrences", "metavar", "values")

    def __init__(self, *names, type=str, metavar=Unset, default=(), help=Unset, doc=Unset):
        super().__init__(*names, type=type, metavar=metavar, help=help, doc=doc)
        self.values = list(default)

    def render(self):
        return [self._codec.render(value) for value in self.values]

    def _parse(self, cursor, /):
        self.values.append(self._convert(cursor))


class Constraint(Enum):
    NONE = "none"
    MUTUALLY_EXCLUSIVE = "mutually-exclusive"
    REQUIRED_MUTUALLY_EXCLUSIVE = "required-mutually-exclusive"


class Group:
    """
    Named set of descriptors displayed as one usage section.

    The constraint is recorded for the application code to consult; parsing
    does not enforce it.
    """
    name = textual("name")
    help = textual("help")

    options = mirror("options")

    def __init__(self, name, /, *options, constraint=Constraint.NONE, help=Unset):
        if not isinstance(name, str | Cell):
            raise TypeError("group name must be a string")
        if not str(name).strip():
            raise ValueError("group name cannot be empty")
        if not isinstance(constraint, Constraint):
            raise TypeError("group constraint must be a Constraint")
        self.name = name
        self.help = coalesce(help, "")
        self.constraint = constraint
        self._options = []
        self.add(*options)

    def add(self, *options):
        for option in options:
            if not isinstance(option, OptionBase):
                raise TypeError("groups can only hold options, not %r" % type(option).__name__)
            if option in self:
                raise ValueError("option '%s' is already in group '%s'" % (option.name, self.name))
            self._options.append(option)
        return self

    def __contains__(self, option, /):
        return any(option is member for member in self._options)

    def __iter__(self):
        return iter(tuple(self._options))

    def __len__(self):
        return len(self._options)

    def __repr__(self):
        return "group(name=%r, options=%d, constraint=%s)" % (str(self.name), len(self), self.constraint.value)


__all__ = (
    "OptionBase",
    "Flag",
    "Single",
    "Multiple",
    "Constraint",
    "Group",
)
