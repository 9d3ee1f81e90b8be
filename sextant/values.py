r"""
Sextant value codecs: text → typed value, typed value → text.

Overview
- Codec[_T]: the parse/format pair bound to one semantic value type.
  • convert(text, name): strict conversion of one token, or InvalidValueError.
  • parse(source, name): `source` is a token (str or Cell) or a Cursor; a cursor
    yields exactly one token through next_or_fail(name).
  • format(buffer, value) -> int: append the canonical text of `value` to a buffer
    and return the number of characters appended.
  • names(metavar): the value-name shape an option stores for usage and messages.
- TupleCodec: fixed-size composite built from element codecs; its name shape is
  one name per slot and a cursor parse consumes exactly one token per slot.

Codec table
- codec(type) resolves a type to its codec:
  • str → TextCodec, Cell → CellCodec (borrows the token), int → IntegerCodec,
    float → FloatCodec, bool → BooleanCodec,
  • ctypes.c_int8 … c_int64 and c_uint8 … c_uint64 → bounded IntegerCodec,
  • tuple[T1, ..., TN] → TupleCodec(codec(T1), ..., codec(TN)),
  • a Codec instance is returned unchanged.
- register(type, codec) / @register(type) extends the table.

Strictness
- The whole token must be consumed: "42 " and "45.67" are not integers.
- Bounded integers reject magnitudes that do not fit with the same message.

Message
- "value '<name>' is not a valid <description>: '<text>'"

Quick example:
    >>> codec(int).convert("0xF", "N")
    15
    >>> codec(tuple[int, int]).render((4, -2))
    '4 -2'
"""
import builtins
import ctypes
import re
import typing
from abc import ABC, abstractmethod

from .buffers import Buffer
from .cells import Cell
from .cursor import Cursor
from .faults import FaultCode, InvalidValueError, getdoc
from .utils import Unset, coalesce, rename


class Codec[_T](ABC):
    """
    Parse/format pair for one value type.

    Subclasses provide `description` (used in messages), `metavar` (the default
    value name), convert() and format(). Scalar codecs have arity 1.
    """
    description = "value"
    metavar = "VALUE"
    arity = 1

    def names(self, metavar=Unset, /):
        """
        Build the value-name shape for this codec: a single Cell for scalars.
        """
        if not isinstance(metavar := coalesce(metavar, self.metavar), str | Cell):
            raise TypeError("%s metavar must be a string" % self.description)
        return Cell().assign(metavar)

    @abstractmethod
    def convert(self, text, name, /): ...

    def parse(self, source, name, /):
        match source:
            case Cursor():
                return self.convert(source.next_or_fail(name), name)
            case str():
                return self.convert(source, name)
            case Cell():
                return self.convert(source.view(), name)
            case _:
                raise TypeError("parse() source must be a token or a cursor, not %r" % type(source).__name__)

    @abstractmethod
    def format(self, buffer, value, /): ...

    def render(self, value, /):
        """
        Return the canonical text of `value`.
        """
        self.format(buffer := Buffer(), value)
        return buffer.text

    def fail(self, text, name, /):
        raise InvalidValueError(
            "value '%s' is not a valid %s: '%s'" % (name, self.description, text),
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            name=str(name),
            text=text,
            hint="pass a value that reads as %s" % self.description,
            docs=getdoc(FaultCode.INVALID_VALUE),
        )

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.description)


class TextCodec(Codec[str]):
    description = "text"
    metavar = "TEXT"

    def convert(self, text, name, /):
        return text

    def format(self, buffer, value, /):
        return buffer.push(value)


class CellCodec(Codec[Cell]):
    """
    Text values that stay borrowed from the argument vector.
    """
    description = "text"
    metavar = "TEXT"

    def convert(self, text, name, /):
        return Cell.borrowed(text)

    def format(self, buffer, value, /):
        return buffer.push(value)


_INTEGER = re.compile(r"(?P<sign>[+-]?)(?:0[xX](?P<hex>[0-9a-fA-F]+)|0[oO](?P<oct>[0-7]+)|0[bB](?P<bin>[01]+)|(?P<dec>[0-9]+))")


class IntegerCodec(Codec[int]):
    """
    Integers with optional sign and 0x/0o/0b radix prefixes; leading zeros are decimal.

    An unbounded codec (Python int) is labelled "int"; bounded codecs carry the
    width in their label ("int8", "uint32", ...).
    """
    metavar = "INT"

    def __init__(self, label="int", /, minimum=Unset, maximum=Unset):
        self.label = label
        self.minimum = minimum
        self.maximum = maximum
        self.description = "integer (%s)" % label

    @classmethod
    def bounded(cls, bits, /, *, signed=True):
        if signed:
            return cls("int%d" % bits, -(1 << (bits - 1)), (1 << (bits - 1)) - 1)
        return cls("uint%d" % bits, 0, (1 << bits) - 1)

    def convert(self, text, name, /):
        if not (match := _INTEGER.fullmatch(text)):
            self.fail(text, name)

        # int() refuses decimal strings longer than sys.get_int_max_str_digits()
        try:
            if match["hex"] is not None:
                value = int(match["hex"], 16)
            elif match["oct"] is not None:
                value = int(match["oct"], 8)
            elif match["bin"] is not None:
                value = int(match["bin"], 2)
            else:
                value = int(match["dec"], 10)
        except ValueError:
            self.fail(text, name)

        if match["sign"] == "-":
            value = -value

        if self.minimum is not Unset and value < self.minimum:
            self.fail(text, name)
        if self.maximum is not Unset and value > self.maximum:
            self.fail(text, name)
        return value

    def format(self, buffer, value, /):
        return buffer.push(str(value))


class FloatCodec(Codec[float]):
    description = "number (float)"
    metavar = "FLOAT"

    def convert(self, text, name, /):
        # float() tolerates surrounding whitespace and digit separators
        if not text or text != text.strip() or "_" in text:
            self.fail(text, name)
        try:
            return float(text)
        except ValueError:
            self.fail(text, name)

    def format(self, buffer, value, /):
        return buffer.push(repr(float(value)))


class BooleanCodec(Codec[bool]):
    description = "boolean (bool)"
    metavar = "BOOL"

    TRUTHS = frozenset({"true", "yes", "on", "1"})
    FALSITIES = frozenset({"false", "no", "off", "0"})

    def convert(self, text, name, /):
        if (lowered := text.lower()) in self.TRUTHS:
            return True
        if lowered in self.FALSITIES:
            return False
        self.fail(text, name)

    def format(self, buffer, value, /):
        return buffer.push("true" if value else "false")


class TupleCodec(Codec[tuple]):
    """
    Fixed-size tuple of scalar values.

    A cursor parse applies each element codec in order, against one name per
    slot, consuming exactly `arity` tokens whatever they look like. The first
    failing element aborts the whole tuple.
    """

    def __init__(self, *elements):
        if not elements:
            raise TypeError("tuple codec needs at least one element")
        for element in elements:
            if not isinstance(element, Codec):
                raise TypeError("tuple codec elements must be codecs")
            if element.arity != 1:
                raise TypeError("tuple codec elements must be scalar codecs")
        self.elements = elements
        self.arity = len(elements)
        self.description = "tuple (%s)" % ", ".join(element.description for element in elements)
        self.metavar = tuple(element.metavar for element in elements)

    def names(self, metavar=Unset, /):
        """
        Build the value-name shape: one Cell per slot.
        """
        metavar = coalesce(metavar, self.metavar)
        if isinstance(metavar, str | Cell):
            raise TypeError("%s metavar must be a sequence of %d names" % (self.description, self.arity))
        if len(metavar := tuple(metavar)) != self.arity:
            raise ValueError("%s metavar must contain exactly %d names" % (self.description, self.arity))
        return tuple(element.names(name) for element, name in zip(self.elements, metavar))

    def convert(self, text, names, /):
        if len(parts := text.split()) != self.arity:
            self.fail(text, " ".join(map(str, names)))
        return tuple(element.convert(part, name) for element, part, name in zip(self.elements, parts, names))

    def parse(self, source, names, /):
        if isinstance(source, Cursor):
            return tuple(element.parse(source, name) for element, name in zip(self.elements, names))
        return super().parse(source, names)

    def format(self, buffer, value, /):
        if len(value) != self.arity:
            raise ValueError("%s expects %d values, got %d" % (self.description, self.arity, len(value)))
        size = 0
        for index, (element, item) in enumerate(zip(self.elements, value)):
            if index:
                size += buffer.push(" ")
            size += element.format(buffer, item)
        return size


_codecs = {}


def register(*parameters):
    """
    Bind a codec to a type in the codec table.

    Forms
    - Function form: register(type, codec) -> codec
    - Decorator form: @register(type) on a Codec subclass; an instance built
      without arguments is registered and the class is returned.
    """
    match len(parameters):
        case 2:
            type, codec = parameters
            if not isinstance(codec, Codec):
                raise TypeError("register() second argument must be a codec")
            _codecs[type] = codec
            return codec
        case 1:
            type, = parameters

            @rename("register")
            def wrapper(cls):
                if not isinstance(cls, builtins.type) or not issubclass(cls, Codec):
                    raise TypeError("@register() must be applied to a codec class")
                register(type, cls())
                return cls

            return wrapper
        case _:
            raise TypeError("register takes 1 to 2 arguments but %d were given" % len(parameters))


def codec(type, /):
    """
    Resolve the codec for `type`.
    """
    if isinstance(type, Codec):
        return type
    if typing.get_origin(type) is tuple:
        arguments = typing.get_args(type)
        if not arguments or Ellipsis in arguments:
            raise TypeError("only fixed-size tuples have a codec")
        return TupleCodec(*map(codec, arguments))
    try:
        return _codecs[type]
    except (KeyError, TypeError):
        raise TypeError("no codec registered for %r" % (type,)) from None


register(str, TextCodec())
register(Cell, CellCodec())
register(int, IntegerCodec())
register(float, FloatCodec())
register(bool, BooleanCodec())

for _bits, _signed, _unsigned in (
    (8, ctypes.c_int8, ctypes.c_uint8),
    (16, ctypes.c_int16, ctypes.c_uint16),
    (32, ctypes.c_int32, ctypes.c_uint32),
    (64, ctypes.c_int64, ctypes.c_uint64),
):
    register(_signed, IntegerCodec.bounded(_bits, signed=True))
    register(_unsigned, IntegerCodec.bounded(_bits, signed=False))

del _bits, _signed, _unsigned


__all__ = (
    "Codec",
    "TextCodec",
    "CellCodec",
    "IntegerCodec",
    "FloatCodec",
    "BooleanCodec",
    "TupleCodec",
    "codec",
    "register",
)
