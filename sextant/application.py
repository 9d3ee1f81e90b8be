"""
Sextant application: option registry, token classification and usage.

What this module provides
- Application: owns the ordered set of registered descriptors and groups,
  walks an argument vector, dispatches option tokens to their descriptors and
  renders aligned usage text.

Token classification (one flag of state: option parsing, on until a bare "--")
- "--name"   → long option, looked up by exact name; unknown names fail.
- "--"       → turns option parsing off for the rest of the run.
- "-c"       → short option, looked up by exact character; unknown names fail.
- "-abc"     → packed short options: reported, never split.
- anything else (and everything after "--") is not interpreted; such tokens are
  kept, in order, in `unparsed`.

A matched descriptor parses from the same cursor, so it consumes its own value
tokens whatever they look like. The first fault ends the run.

Usage layout
    <name> [options]

    Options:
      -f N                 Integer factor
      -t,--triple A B C    Make a tuple with 3 elements

The help column sits three spaces past the widest option pattern. Options that
belong to a group are listed in a section named after the group instead.

Faults
- Outside shell mode every fault is raised (a ParseException subclass).
- In shell mode the usage and the rendered fault go to standard error and the
  process exits with status 1.
"""
import difflib
import io
import os.path
import shlex
import sys
from collections.abc import Sequence, Iterable

from rich.console import Console
from rich.text import Text

from . import faults
from .buffers import Buffer, Measure
from .cells import Cell, textual
from .cursor import Cursor
from .faults import (
    FaultCode,
    ParseException,
    UnknownOptionError,
    UnsupportedSyntaxError,
    getdoc,
    trigger,
)
from .options import OptionBase, Group
from .utils import Unset, coalesce, mirror


class Application:
    """
    Registry of option descriptors and the parser that fills them.

    Parameters
    - name: program name shown in usage and faults. When omitted, __prog__ in
      __main__ is used, then the base name of the program-name slot of the last
      parsed vector, then "sextant".
    - shell: render faults and exit instead of raising.
    - fancy: render faults inside a panel (shell mode).
    - colorful: style rendered faults (shell mode).

    Descriptors are held by reference: they must stay alive, and keep their
    names, for as long as the application parses into them.
    """
    name = textual("name")

    options = mirror("options")
    groups = mirror("groups")
    unparsed = mirror("unparsed")

    def __init__(self, name=Unset, /, *, shell=False, fancy=False, colorful=True):
        if not isinstance(name, str | Cell | Unset):
            raise TypeError("application name must be a string")
        if name is not Unset and not str(name).strip():
            raise ValueError("application name cannot be empty")
        self.name = coalesce(name, "")
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)
        self._options = []
        self._groups = []
        self._unparsed = []
        self._process = Unset

    @property
    def program(self):
        if self.name:
            return self.name.view()
        if prog := getattr(sys.modules["__main__"], "__prog__", None):
            return str(prog)
        if self._process:
            return os.path.basename(self._process) or "sextant"
        return "sextant"

    def add(self, *options):
        """
        Register descriptors in usage order and return the application.

        Raises
        - TypeError: when an item is not a descriptor.
        - ValueError: when a descriptor is already registered, or one of its
          names is already taken by another descriptor.
        """
        for option in options:
            if not isinstance(option, OptionBase):
                raise TypeError("only options can be registered, not %r" % type(option).__name__)
            if option in self:
                raise ValueError("option '%s' is already registered" % option.name)
            if option.has_short() and self.find(short=option.short) is not None:
                raise ValueError("short name '-%s' is already registered" % option.short)
            if option.has_long() and self.find(long=option.long) is not None:
                raise ValueError("long name '--%s' is already registered" % option.long)
            self._options.append(option)
        return self

    def group(self, group, /):
        """
        Register a group, and any of its options not registered yet.
        """
        if not isinstance(group, Group):
            raise TypeError("group() argument must be a Group")
        if any(group is known for known in self._groups):
            raise ValueError("group '%s' is already registered" % group.name)
        self.add(*(option for option in group if option not in self))
        self._groups.append(group)
        return self

    def find(self, *, short=Unset, long=Unset):
        """
        Exact, case-sensitive lookup by short character or by long name.
        """
        if (short is Unset) == (long is Unset):
            raise TypeError("find() takes exactly one of 'short' or 'long'")
        for option in self._options:
            if short is not Unset:
                if option.has_short() and option.short == short:
                    return option
            elif option.has_long() and option.long == long:
                return option
        return None

    def trigger(self, fault, /, **options):
        trigger(fault, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful, **options)

    def _cursor(self, argv):
        if argv is Unset:
            return Cursor(sys.argv)
        elif isinstance(argv, Cursor):
            return argv
        elif isinstance(argv, str):
            return Cursor([self.program, *shlex.split(argv)])
        elif isinstance(argv, Iterable):
            if not isinstance(argv, Sequence):
                argv = list(argv)
            for token in argv:
                if not isinstance(token, str):
                    raise TypeError("parse() argument must be a string or an iterable of strings")
            return Cursor(argv)
        raise TypeError("parse() argument must be a string or an iterable of strings")

    def _unknown(self, token):
        names = []
        for option in self._options:
            if option.has_short():
                names.append("-" + option.short)
            if option.has_long():
                names.append("--" + option.long.view())
        try:
            hint = "did you mean %r?" % difflib.get_close_matches(token, names, 1)[0]
        except IndexError:
            hint = "check the usage of %r for the available options" % self.program
        return UnknownOptionError(
            "unknown option name: '%s'" % token,
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            token=token,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        )

    def _parseargs(self, cursor):
        parsing = True  # turned off by a bare "--"

        for token in cursor:
            if parsing and len(token) >= 2 and token.startswith("--"):
                if not (input := token[2:]):
                    parsing = False
                    continue
                if (option := self.find(long=input)) is None:
                    raise self._unknown(token)
                option.parse(cursor)
            elif parsing and len(token) >= 2 and token.startswith("-"):
                if len(token) > 2:
                    raise UnsupportedSyntaxError(
                        "packed short options are not supported: '%s'" % token,
                        title="packed short options",
                        code=FaultCode.UNSUPPORTED_SYNTAX,
                        token=token,
                        hint="pass each short option separately (for example: %s)" % " ".join("-" + char for char in token[1:]),
                        docs=getdoc(FaultCode.UNSUPPORTED_SYNTAX),
                    )
                if (option := self.find(short=token[1])) is None:
                    raise self._unknown(token)
                option.parse(cursor)
            else:
                self._unparsed.append(token)

    def parse(self, argv=Unset, /):
        """
        Parse an argument vector into the registered descriptors.

        Parameters
        - argv:
          • Unset: sys.argv.
          • Cursor: used as is.
          • str: shell-like string, split via shlex.split; the program name is prepended.
          • Iterable[str]: a full vector, program-name slot first.

        Returns
        - the application, for chaining.

        Raises
        - ParseException subclasses outside shell mode; the first fault ends the run.
        """
        cursor = self._cursor(argv)
        self._process = cursor.process_name
        self._unparsed.clear()
        try:
            self._parseargs(cursor)
        except ParseException as fault:
            if self.shell:
                self.write_usage(faults.console)
            self.trigger(fault)
        return self

    @staticmethod
    def _pattern(buffer, option):
        size = buffer.push("  ")
        if option.has_short():
            size += buffer.push("-")
            size += buffer.push(option.short)
        if option.has_short() and option.has_long():
            size += buffer.push(",")
        if option.has_long():
            size += buffer.push("--")
            size += buffer.push(option.long)
        for name in option.value_names:
            size += buffer.push(" ")
            size += buffer.push(name)
        return size

    def write_usage(self, output=Unset, /):
        """
        Write the usage text to `output` (a rich Console or any object with
        write(); standard error by default).
        """
        output = coalesce(output, Console(stderr=True))
        buffer = Buffer()

        buffer.push(self.program)
        buffer.push(" [options]\n\n")
        buffer.write_to(output)

        offset = 0
        for option in self._options:
            offset = max(offset, self._pattern(Measure(), option) + 3)

        grouped = [option for group in self._groups for option in group]
        sections = [("Options", [option for option in self._options if not any(option is member for member in grouped)])]
        for group in self._groups:
            sections.append((group.name, [option for option in group if option in self]))

        for index, (title, options) in enumerate(sections):
            if index:
                buffer.push("\n")
            buffer.push(title)
            buffer.push(":\n")
            buffer.write_to(output)
            for option in options:
                size = self._pattern(buffer, option)
                while size < offset:
                    size += buffer.push(" ")
                buffer.push(option.help)
                buffer.push("\n")
                buffer.write_to(output)

    def usage(self):
        self.write_usage(stream := io.StringIO())
        return stream.getvalue()

    def __contains__(self, option, /):
        return any(option is known for known in self._options)

    def __len__(self):
        return len(self._options)

    def __rich__(self):
        return Text(self.usage())

    def __repr__(self):
        return "application(name=%r, options=%d, groups=%d)" % (self.program, len(self._options), len(self._groups))


__all__ = (
    "Application",
)
