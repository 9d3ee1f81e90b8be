"""
Sextant text cells: borrowed-or-owned immutable text.

A Cell carries every name, help text and textual value in the package. It is
either a view of text that lives elsewhere (borrowed) or a snapshot that the
cell holds on its own (owned), never both.

Construction paths
- Cell("literal")        → borrowed: a str is immutable, borrowing it is always safe.
- Cell(b"bytes")         → owned: any other string-like source is copied (UTF-8).
- Cell.borrowed(source)  → borrowed, explicitly: the caller keeps `source` unchanged
                           for as long as the cell is read (mutable buffers included).
- Cell.owned(source)     → owned, explicitly: always a private snapshot.

Duplication is never implicit: Cell(cell), copy.copy(cell) and copy.deepcopy(cell)
are rejected. A cell is moved with take(), or replaced with assign().
"""
import os
from enum import Enum
from typing import final

from rich.text import Text

from .utils import rename


class CellType(Enum):
    BORROWED = "borrowed"
    OWNED = "owned"


def _snapshot(source):
    """
    Copy any string-like source into a private str.
    """
    match source:
        case str():
            return str(source)
        case bytes() | bytearray() | memoryview():
            return bytes(source).decode("utf-8")
        case os.PathLike():
            return _snapshot(os.fspath(source))
        case _:
            raise TypeError("cell source must be a string, a bytes-like object or a path, not %r" % type(source).__name__)


@final
class Cell:
    """
    Immutable text held either by reference (borrowed) or by copy (owned).

    Invariants
    - the content never changes in place; assign() swaps the whole state.
    - an owned snapshot is dropped exactly once, when the state is replaced.
    - viewing a borrowed str or an owned cell returns the stored str as-is.
    """
    __slots__ = ("_source", "_type")

    LIMIT = 2 ** 32 - 1

    def __init__(self, source="", /):
        if isinstance(source, Cell):
            raise TypeError("cells cannot be copied implicitly; use Cell.borrowed() or Cell.owned()")
        if isinstance(source, str):
            self._adopt(source, CellType.BORROWED)
        else:
            self._adopt(_snapshot(source), CellType.OWNED)

    @classmethod
    def borrowed(cls, source, /):
        """
        Borrow `source` without copying it.

        Bytes-like sources are kept through a memoryview and decoded on view(), so a
        mutable buffer must not change while the cell is in use.
        """
        self = cls.__new__(cls)
        match source:
            case Cell():
                raise TypeError("a cell cannot borrow from another cell; use take()")
            case str():
                self._adopt(source, CellType.BORROWED)
            case bytes() | bytearray() | memoryview():
                self._adopt(memoryview(source).toreadonly(), CellType.BORROWED)
            case os.PathLike():
                return cls.borrowed(os.fspath(source))
            case _:
                raise TypeError("cell source must be a string, a bytes-like object or a path, not %r" % type(source).__name__)
        return self

    @classmethod
    def owned(cls, source, /):
        """
        Copy `source` into a private snapshot. Empty text stays the empty borrowed cell.
        """
        if isinstance(source, Cell):
            raise TypeError("a cell cannot copy another cell; use take()")
        self = cls.__new__(cls)
        text = _snapshot(source)
        self._adopt(text, CellType.OWNED if text else CellType.BORROWED)
        return self

    def _adopt(self, source, type, /):
        if len(source) > Cell.LIMIT:
            raise OverflowError("cell content cannot exceed %d characters" % Cell.LIMIT)
        if not len(source):
            source, type = "", CellType.BORROWED
        object.__setattr__(self, "_source", source)
        object.__setattr__(self, "_type", type)

    def __setattr__(self, name, value, /):
        raise AttributeError("cell content is immutable; use assign()")

    def take(self):
        """
        Move the state into a new cell, leaving this one empty and borrowed.
        """
        moved = Cell.__new__(Cell)
        moved._adopt(self._source, self._type)
        self._adopt("", CellType.BORROWED)
        return moved

    def assign(self, value, /):
        """
        Replace the whole state. A Cell argument is moved; anything else goes
        through the implicit constructor (str borrowed, other sources copied).
        """
        if isinstance(value, Cell):
            if value is not self:
                source, type = value._source, value._type
                value._adopt("", CellType.BORROWED)
                self._adopt(source, type)
            return self
        replacement = Cell(value)
        self._adopt(replacement._source, replacement._type)
        return self

    @property
    def type(self):
        return self._type

    def view(self):
        if isinstance(self._source, memoryview):
            return str(self._source, "utf-8")
        return self._source

    def empty(self):
        return not len(self._source)

    def __str__(self):
        return self.view()

    def __len__(self):
        if isinstance(self._source, memoryview):
            return len(self.view())
        return len(self._source)

    def __bool__(self):
        return not self.empty()

    def __eq__(self, other, /):
        if isinstance(other, Cell):
            return self.view() == other.view()
        if isinstance(other, str):
            return self.view() == other
        return NotImplemented

    __hash__ = None

    def __copy__(self):
        raise TypeError("cells cannot be copied implicitly; use Cell.borrowed() or Cell.owned()")

    def __deepcopy__(self, memo, /):
        raise TypeError("cells cannot be copied implicitly; use Cell.borrowed() or Cell.owned()")

    def __repr__(self):
        return "Cell(%r, %s)" % (self.view(), self._type.value)

    def __rich__(self):
        return Text(self.view())


def textual(name, /):
    """
    Define a property whose backing field "_{name}" always holds a Cell.

    Reads return the Cell itself. Writes go through Cell.assign(), so assigning a
    str borrows it, assigning other text copies it, and assigning a Cell moves it.
    """
    if not isinstance(name, str):
        raise TypeError("textual() argument must be a string")

    @rename(name)
    def getter(self):
        try:
            return getattr(self, "_" + name)
        except AttributeError:
            setattr(self, "_" + name, cell := Cell())
            return cell

    @rename(name)
    def setter(self, value):
        getter(self).assign(value)

    return property(getter, setter)


__all__ = (
    "Cell",
    "CellType",
    "textual",
)
