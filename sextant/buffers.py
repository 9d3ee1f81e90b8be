"""
Growable text buffers used to compose usage and error text.

- Buffer accumulates text and flushes it to a sink.
- Measure has the same push() interface but only counts characters; the usage
  renderer runs its layout once through Measure to find the alignment column.

Sinks are either a rich Console (written raw: no markup, no highlighting, no
wrapping) or any object with a write(str) method (files, io.StringIO, ...).
"""
from rich.console import Console

from .cells import Cell


def _text(fragment, /):
    match fragment:
        case str():
            return fragment
        case Cell():
            return fragment.view()
        case _:
            raise TypeError("buffers accept strings and cells, not %r" % type(fragment).__name__)


class Buffer:
    __slots__ = ("_parts",)

    def __init__(self):
        self._parts = []

    def push(self, fragment, /):
        """
        Append `fragment` and return the number of characters appended.
        """
        text = _text(fragment)
        self._parts.append(text)
        return len(text)

    @property
    def text(self):
        return "".join(self._parts)

    def clear(self):
        self._parts.clear()

    def write_to(self, output, /):
        """
        Flush the buffered text to `output` and start over.
        """
        text = self.text
        if isinstance(output, Console):
            output.out(text, end="", highlight=False)
        elif callable(getattr(output, "write", None)):
            output.write(text)
        else:
            raise TypeError("output must be a rich console or provide a write() method")
        self.clear()

    def __len__(self):
        return sum(map(len, self._parts))


class Measure:
    __slots__ = ()

    def push(self, fragment, /):
        return len(_text(fragment))


__all__ = (
    "Buffer",
    "Measure",
)
