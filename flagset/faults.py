"""
flagset faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue.
- FlagSetException / FlagSetWarning: base types that carry message + options
  and know how to render themselves with rich.
- trigger(): central entry point to surface a fault (respecting shell mode).
- chain() / caused_by(): walk the wrapped error chain so callers can make
  kind or identity checks instead of matching on strings.

Error chain
- Every parse failure surfaces as ParseError. Its __cause__ is the resolver
  failure: UnrecognizedFlagError, or HydrateError naming the matched flag.
  A HydrateError is in turn caused by a ConversionError, an
  UnsupportedTypeError, an exception raised by a user callback or codec, or a
  halt sentinel.

    try:
        fs.parse(["-n", "x"])
    except ParseError as error:
        if caused_by(error, help_requested):
            ...

Integration
- Outside shell mode faults are raised (errors) or emitted through the
  warnings module (warnings). In shell mode they are printed to stderr via
  rich and errors terminate the process with status 1.
"""
import copy
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - resolution (2110x): UNRECOGNIZED_FLAG, PARSE_FAILURE, HALT_REQUESTED
    - hydration (2112x): HYDRATE_FAILURE, CONVERSION_FAILURE, UNSUPPORTED_TYPE
    - registration warnings (2211x): DUPLICATE_NAME

    normalize() lets the host remap codes through a __codes__ mapping in
    __main__ while the numeric identity stays stable.
    """
    # --- resolution errors ---
    UNRECOGNIZED_FLAG  = 21101
    PARSE_FAILURE      = 21102
    HALT_REQUESTED     = 21103

    # --- hydration errors ---
    HYDRATE_FAILURE    = 21121
    CONVERSION_FAILURE = 21122
    UNSUPPORTED_TYPE   = 21123

    # --- warnings ---
    DUPLICATE_NAME     = 22111

    def normalize(self):
        """
        return a host-normalized string for this code.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _render(fault, styles, title_style, message_style):
    """
    shared rich layout for errors and warnings: header, message, hint.
    """
    colorful = fault.options.get("colorful", True)
    fancy = fault.options.get("fancy", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    tool = fault.options.get("tool")
    prog = getattr(__import__("__main__"), "__prog__", getattr(tool, "name", "flagset"))

    header = Text.assemble(
        "[ ",
        text(prog, styler("prog-name")),
        " — ",
        text(fault.code.normalize(), styler("code")),
        " | ",
        text(fault.title.title(), styler(title_style)),
        " ]"
    )
    message = text(str(fault), styler(message_style))
    parts = [message]
    if hint := fault.options.get("hint"):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if fancy:
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class FlagSetException(Exception):
    """
    base type of every flagset error.

    attributes
    - message: the single-line description of this link of the chain.
    - options: read-only mapping of context (flag name, raw value, tool, ...).

    str(error) joins this message with the messages of its causes so a single
    line identifies the failing flag and the underlying problem.
    """
    code = FaultCode.PARSE_FAILURE
    title = "error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | UnsetType)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        message = self.message if self.message is not Unset else self.title
        if (cause := self.__cause__) is not None:
            return "%s: %s" % (message, cause)
        return message

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })
        return _render(self, styles, "error-title", "error-message")

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class ParseError(FlagSetException):
    """
    raised by FlagSet.parse; the resolver failure is its __cause__.
    """
    code = FaultCode.PARSE_FAILURE
    title = "parse failure"

    @property
    def halted(self):
        """
        the halt sentinel that stopped parsing, or None for genuine failures.
        """
        for link in chain(self):
            if isinstance(link, HydrateError) and link.options.get("halt", False):
                return link.__cause__
        return None


class UnrecognizedFlagError(FlagSetException):
    code = FaultCode.UNRECOGNIZED_FLAG
    title = "unrecognized flag"

    def __init__(self, message=Unset, /, **options):
        if message is Unset:
            message = "unrecognized flag: %r" % options.get("name", "")
        super().__init__(message, **options)

    @property
    def name(self):
        return self.options.get("name", "")


class HydrateError(FlagSetException):
    """
    a raw string could not be applied to a flag's destination.
    """
    code = FaultCode.HYDRATE_FAILURE
    title = "hydrate failure"

    def __init__(self, message=Unset, /, **options):
        if message is Unset:
            message = "hydrate (%s)" % options.get("flag", "")
        super().__init__(message, **options)

    @property
    def flag(self):
        return self.options.get("flag", "")


class ConversionError(FlagSetException, ValueError):
    """
    built-in conversion failure; names the raw string and the target type.
    """
    code = FaultCode.CONVERSION_FAILURE
    title = "conversion failure"

    def __init__(self, message=Unset, /, **options):
        if message is Unset:
            message = "parsing %r as %s: %s" % (
                options.get("raw", ""), options.get("type", "value"), options.get("reason", "invalid syntax")
            )
        super().__init__(message, **options)


class UnsupportedTypeError(FlagSetException, TypeError):
    code = FaultCode.UNSUPPORTED_TYPE
    title = "unsupported type"

    def __init__(self, message=Unset, /, **options):
        if message is Unset:
            message = "unsupported destination type: %s" % options.get("type", "object")
        super().__init__(message, **options)


class FlagSetWarning(Warning):
    code = FaultCode.DUPLICATE_NAME
    title = "warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | UnsetType)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else self.title

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })
        return _render(self, styles, "warning-title", "warning-message")

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicateNameWarning(FlagSetWarning):
    code = FaultCode.DUPLICATE_NAME
    title = "duplicate flag name"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see base classes).
    - options are merged into a copy of the fault before triggering.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def chain(error, /):
    """
    yield error and every exception it wraps, outermost first.

    explicit causes (raise ... from ...) are preferred; implicit context is
    followed only when no cause was recorded and the context is not suppressed.
    """
    seen = set()
    while error is not None and id(error) not in seen:
        seen.add(id(error))
        yield error
        if error.__cause__ is not None:
            error = error.__cause__
        elif not error.__suppress_context__:
            error = error.__context__
        else:
            error = None


def caused_by(error, target, /):
    """
    kind/identity check across a wrapped error chain.

    - target is an exception class: True when any link is an instance of it.
    - target is an exception instance: True when any link is that very object.
    """
    if isinstance(target, type):
        return any(isinstance(link, target) for link in chain(error))
    return any(link is target for link in chain(error))


__all__ = (
    "FaultCode",
    "FlagSetException",
    "ParseError",
    "UnrecognizedFlagError",
    "HydrateError",
    "ConversionError",
    "UnsupportedTypeError",
    "FlagSetWarning",
    "DuplicateNameWarning",
    "trigger",
    "chain",
    "caused_by",
)
