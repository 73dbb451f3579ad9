"""
Switchyard faults (parameter errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every parse-time problem.
- ParameterErrorEvent: the payload delivered to error listeners. Carries the
  human-readable message plus the offending token, its position and its code,
  and knows how to render itself with rich.
- ParameterExit: exception grouping every event of a failed parse, raised by
  ParameterHandler.raise_for_errors().

Message copy
- The message of an event is plain and stable (e.g. "Parameter -bogus not
  recognised"); positions and hints only appear in the rich rendering.
- Styles can be overridden through a __styles__ mapping in __main__, the
  program name through __prog__, and code labels through __codes__.
"""
import functools
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes for parameter errors (stable identifiers).

    grouping
    - recognition (2110x): UNRECOGNISED_PARAMETER, UNEXPECTED_ARGUMENT
    - placement (2111x): TRAILING_PARAMETER
    - validation (2112x): MANDATORY_PARAMETER
    """
    # --- recognition errors ---
    UNRECOGNISED_PARAMETER = 21101
    UNEXPECTED_ARGUMENT    = 21102

    # --- placement errors ---
    TRAILING_PARAMETER     = 21111

    # --- validation errors ---
    MANDATORY_PARAMETER    = 21121

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids; otherwise the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


_TITLES = {
    FaultCode.UNRECOGNISED_PARAMETER: "unrecognised parameter",
    FaultCode.UNEXPECTED_ARGUMENT: "unexpected argument",
    FaultCode.TRAILING_PARAMETER: "trailing parameter",
    FaultCode.MANDATORY_PARAMETER: "missing parameter",
}

_HINTS = {
    FaultCode.UNRECOGNISED_PARAMETER: "check the spelling, or run with -help to list parameters",
    FaultCode.UNEXPECTED_ARGUMENT: "this command takes no positional arguments",
    FaultCode.TRAILING_PARAMETER: "supply a value after it, or remove it",
    FaultCode.MANDATORY_PARAMETER: "this parameter must be given a value",
}


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _palette(base):
    return defaultdict(str, base | getattr(__import__("__main__"), "__styles__", {}))


def _text(fragment, style, colorful):
    if not fragment:
        return Text("")
    if not colorful:
        return Text(str(fragment))
    return Text(str(fragment), style)


class ParameterErrorEvent:
    """
    Payload of the error channel: one problem found while parsing.

    Fields
    - message: the plain message ("Mandatory parameter settings not specified").
    - code: FaultCode classifying the problem.
    - token: raw token at fault, or the parameter name for validation errors.
    - index: 0-based token index, None for post-scan validation errors.
    - options: read-only rendering options (colorful, prog).
    """

    __slots__ = ("message", "code", "token", "index", "options")

    def __init__(self, message, /, code, token=Unset, index=None, **options):
        assert isinstance(message, str)
        self.message = message
        self.code = FaultCode(code)
        self.token = coalesce(token)
        self.index = index
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"parameter-error-event(message={self.message!r}, code={self.code.name}, index={self.index!r})"

    def __eq__(self, other):
        if not isinstance(other, ParameterErrorEvent):
            return NotImplemented
        return (self.message, self.code, self.token, self.index) == (other.message, other.code, other.token, other.index)

    def __hash__(self):
        return hash((self.message, self.code, self.token, self.index))

    @property
    def hint(self):
        hint = _HINTS[self.code]
        if self.index is not None:
            hint = f"from {_ordinal(self.index + 1)} position, {hint}"
        return hint

    def __rich__(self):
        styles = _palette({
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })
        colorful = self.options.get("colorful", False)

        def text(fragment, style):
            return _text(fragment, styles[style], colorful)

        prog = getattr(__import__("__main__"), "__prog__", self.options.get("prog", "switchyard"))

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " | ",
            text(self.code.normalize(), "code"),
            " | ",
            text(_TITLES[self.code].title(), "error-title"),
            " ]",
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint"))
        return Group(header, message, hint)


class ParameterExit(Exception):
    """
    Raised when a parse produced errors and the caller asked for a hard stop.

    Carries every event, in the order they were raised.
    """

    def __init__(self, events, /, **options):
        self.events = tuple(events)
        self.options = MappingProxyType(options)
        super().__init__(f"{len(self.events)} parameter error(s)")

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })
        colorful = self.options.get("colorful", False)
        prog = getattr(__import__("__main__"), "__prog__", self.options.get("prog", "switchyard"))

        header = Text.assemble(
            "[ ",
            _text(prog, styles["prog-name"], colorful),
            " | ",
            _text("Bad Parameters", styles["title"], colorful),
            " ]",
        )
        return Group(header, *self.events)


__all__ = (
    "FaultCode",
    "ParameterErrorEvent",
    "ParameterExit",
)
