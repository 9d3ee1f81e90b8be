"""
Token cursor over an argument vector, with a single slot of lookahead.

The cursor never copies the vector: it keeps the sequence it was given and an
index past the program-name slot. A token taken with next() can be handed back
once with push_front(); it is then the next token returned.
"""
from .faults import FaultCode, MissingValueError, getdoc
from .utils import Unset


class Cursor:
    __slots__ = ("_argv", "_index", "_pending")

    def __init__(self, argv, /):
        if isinstance(argv, str):
            raise TypeError("cursor argument must be a sequence of strings, not a string")
        if not len(argv):
            raise ValueError("argument vector must contain at least the program name")
        self._argv = argv
        self._index = 1
        self._pending = Unset

    @property
    def process_name(self):
        return self._argv[0]

    def has_next(self):
        return self._pending is not Unset or self._index < len(self._argv)

    def next(self):
        """
        Return the pushed-back token, else the next argument, else None.
        """
        if self._pending is not Unset:
            token, self._pending = self._pending, Unset
            return token
        if self._index < len(self._argv):
            token = self._argv[self._index]
            self._index += 1
            return token
        return None

    def push_front(self, token, /):
        if self._pending is not Unset:
            raise RuntimeError("cursor already holds a pushed-back token")
        self._pending = token

    def next_or_fail(self, name, /):
        """
        Return the next token or raise MissingValueError for the value `name`.
        """
        token = self.next()
        if token is None:
            raise MissingValueError(
                "missing value '%s'" % name,
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                name=str(name),
                hint="add the value after the option name",
                docs=getdoc(FaultCode.MISSING_VALUE),
            )
        return token

    def remaining(self):
        """
        Unconsumed tokens, pushed-back token first. Does not consume them.
        """
        head = () if self._pending is Unset else (self._pending,)
        return (*head, *self._argv[self._index:])

    def __iter__(self):
        while (token := self.next()) is not None:
            yield token

    def __repr__(self):
        return "Cursor(%r, index=%d)" % (self.process_name, self._index)


__all__ = (
    "Cursor",
)
