"""
Parse faults: the errors a user can cause on the command line.

Every fault carries one exact, user-facing message line, for example

    option 'triple': value 'C' is not a valid integer (int): '-a'

and a read-only mapping of context options (title, code, hint, docs, and the
offending name, text, token or option). Descriptors prefix codec failures with
copy.replace(fault, message=...), which keeps the fault kind.

Outside shell mode faults are raised. In shell mode they are printed with rich
on standard error and the process exits with status 1. Hosts can adjust the
output from __main__: __prog__ (program name), __styles__ (rich styles),
__codes__ (labels for fault codes) and __docs__ (documentation per code).
"""
import copy
import sys
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)

STYLES = {
    "program": "bold white",
    "code": "bold cyan",
    "title": "bold red",
    "message": "default",
    "arrow": "dim green",
    "hint": "italic green",
}


class FaultCode(IntEnum):
    # syntax
    UNSUPPORTED_SYNTAX = 11111
    UNKNOWN_OPTION = 11112
    OPTION_REPEATED = 11115

    # values
    MISSING_VALUE = 11117
    INVALID_VALUE = 11124

    def normalize(self):
        """
        Label shown for this code: the host's __codes__ entry, else the number.
        """
        labels = getattr(sys.modules["__main__"], "__codes__", {})
        return str(labels.get(self, self.value))


class ParseException(Exception):
    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError("fault message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message or ""

    def __replace__(self, /, **changes):
        message = changes.pop("message", self.message)
        return type(self)(message, **(dict(self.options) | changes))

    def __rich__(self):
        main = sys.modules["__main__"]
        styles = STYLES | getattr(main, "__styles__", {})
        colorful = self.options.get("colorful", True)

        def styled(fragment, key):
            return Text(str(fragment or ""), styles.get(key, "") if colorful else "")

        tool = self.options.get("tool")
        program = getattr(main, "__prog__", None) or getattr(tool, "program", "sextant")
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            styled(program, "program"),
            " — ",
            styled(code.normalize() if code is not None else "", "code"),
            " | ",
            styled(self.options.get("title", "parse error").title(), "title"),
            " ]",
        )
        body = styled(self, "message")
        hint = Text.assemble(styled(" → ", "arrow"), styled(self.options.get("hint"), "hint"))

        if self.options.get("fancy", False):
            return Panel(Group(body, hint), title=header, title_align="left")
        return Group(header, body, hint)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)


class MissingValueError(ParseException): ...
class InvalidValueError(ParseException): ...
class OptionRepeatedError(ParseException): ...
class UnknownOptionError(ParseException): ...
class UnsupportedSyntaxError(ParseException): ...


def trigger(fault, /, **options):
    """
    Attach `options` (tool, shell, fancy, colorful, ...) to `fault` and surface it.
    """
    if not callable(getattr(fault, "__trigger__", None)) or not callable(getattr(fault, "__replace__", None)):
        raise TypeError("trigger() argument must be a fault")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    Documentation for `code` from the host's __docs__ mapping, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault code")
    return getattr(sys.modules["__main__"], "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "ParseException",
    "MissingValueError",
    "InvalidValueError",
    "OptionRepeatedError",
    "UnknownOptionError",
    "UnsupportedSyntaxError",
    "trigger",
    "getdoc",
)
