r"""
flagset destinations and value hydration.

Overview
- Destination
  • The common shape of everything a flag can be bound to: type_name(),
    default_text(), apply(raw) and the is_bool property. Presentation labels
    are explicit per variant instead of being derived by inspecting values.

- Variants (probed by destination() in this precedence order)
  • Halt: an exception instance; applying it stops parsing with that
    exception. Always boolean-arity.
  • TextCodec: an object exposing unmarshal_text(str) and marshal_text().
  • Settable: an object exposing set(str).
  • Callback / BoolCallback: a plain callable, invoked with the raw string,
    or with a parsed bool when its first parameter is annotated as bool.
  • Slot subclasses: mutable typed slots holding .value (String, Bool, the
    signed and unsigned integer widths, Float32, Float64, Duration, Enum) and
    the multi-valued Slice.

- hydrate(target, raw, name=...)
  • Apply one raw string and wrap any failure in HydrateError naming the
    flag, chained to the underlying cause.

Conversion rules
- Bool: 1, t, T, TRUE, true, True, 0, f, F, FALSE, false, False.
- Signed integers: optional sign then ASCII digits, base 10, range-checked
  against the width. Unsigned integers: ASCII digits only.
- Floats: decimal or hexadecimal (with p exponent) notation, inf/infinity/nan.
  Finite input that overflows the width is out of range.
- Duration: [-+]?(<number><unit>)+ with units ns, us, µs, μs, ms, s, m, h,
  or a bare 0. Held as datetime.timedelta.

Quick example
    >>> count = Int(3)
    >>> hydrate(count, "42", name="count")
    >>> count.value
    42
"""
import enum
import inspect
import math
import re
import struct
from abc import ABC, abstractmethod
from datetime import timedelta
from decimal import Decimal

from .faults import ConversionError, HydrateError, UnsupportedTypeError
from .utils import Unset, coalesce

_SIGNED = re.compile(r"[+-]?[0-9]+", re.ASCII)
_UNSIGNED = re.compile(r"[0-9]+", re.ASCII)
_FLOAT = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?)|nan",
    re.ASCII | re.IGNORECASE
)
_HEXFLOAT = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+",
    re.ASCII
)

_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))

# nanoseconds per unit
_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 60 * 60 * 1_000_000_000,
}
_MAX_NANOSECONDS = (1 << 63) - 1


def parse_bool(raw, /):
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConversionError(raw=raw, type="bool")


def parse_int(raw, /, bits=64, *, signed=True, label=Unset):
    """
    parse a base-10 integer and check it fits a fixed width.
    """
    label = coalesce(label, ("int" if signed else "uint") + ("" if bits == 64 else str(bits)))
    if not (_SIGNED if signed else _UNSIGNED).fullmatch(raw):
        raise ConversionError(raw=raw, type=label)
    number = int(raw)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= number <= high:
        raise ConversionError(raw=raw, type=label, reason="value out of range")
    return number


def parse_float(raw, /, bits=64):
    label = "float%d" % bits
    if _HEXFLOAT.fullmatch(raw):
        try:
            number = float.fromhex(raw)
        except OverflowError:
            raise ConversionError(raw=raw, type=label, reason="value out of range") from None
    elif _FLOAT.fullmatch(raw):
        number = float(raw)
    else:
        raise ConversionError(raw=raw, type=label)

    if math.isinf(number) and "inf" not in raw.lower():
        raise ConversionError(raw=raw, type=label, reason="value out of range")
    if bits == 32 and math.isfinite(number):
        try:
            number, = struct.unpack("<f", struct.pack("<f", number))
        except OverflowError:
            raise ConversionError(raw=raw, type=label, reason="value out of range") from None
    return number


def parse_duration(raw, /):
    """
    parse a duration string such as "300ms", "-1.5h" or "2h45m".

    returns
    - datetime.timedelta, rounded to the nearest microsecond.
    """
    text = raw
    negative = False
    if text[:1] in ("-", "+"):
        negative = text[0] == "-"
        text = text[1:]

    if text == "0":
        return timedelta()
    if not text:
        raise ConversionError(raw=raw, type="duration", reason="invalid duration")

    total = 0
    while text:
        match = re.match(r"([0-9]*)(?:\.([0-9]*))?", text, re.ASCII)
        whole, fraction = match[1], match[2] or ""
        if not whole and not fraction:
            raise ConversionError(raw=raw, type="duration", reason="invalid duration")
        text = text[match.end():]

        unit = re.match(r"[^0-9.]*", text)[0]
        if not unit:
            raise ConversionError(raw=raw, type="duration", reason="missing unit in duration")
        if unit not in _UNITS:
            raise ConversionError(raw=raw, type="duration", reason="unknown unit %r in duration" % unit)
        text = text[len(unit):]

        scale = _UNITS[unit]
        total += int(whole or "0") * scale
        if fraction:
            total += int(fraction) * scale // 10 ** len(fraction)
        if total > _MAX_NANOSECONDS + negative:
            raise ConversionError(raw=raw, type="duration", reason="invalid duration")

    microseconds, remainder = divmod(total, 1_000)
    if remainder >= 500:
        microseconds += 1
    return timedelta(microseconds=-microseconds if negative else microseconds)


def _fraction(value, scale):
    whole, part = divmod(value, scale)
    digits = str(part).rjust(len(str(scale)) - 1, "0").rstrip("0")
    return "%d.%s" % (whole, digits) if digits else str(whole)


def format_duration(value, /):
    """
    canonical duration text: "0s", "1.5s", "300ms", "1h30m0s".
    """
    nanoseconds = (value // timedelta(microseconds=1)) * 1_000
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    magnitude = abs(nanoseconds)

    if magnitude < _UNITS["s"]:
        for unit, scale in (("ms", _UNITS["ms"]), ("µs", _UNITS["µs"]), ("ns", 1)):
            if magnitude >= scale:
                return sign + _fraction(magnitude, scale) + unit

    seconds, nanos = divmod(magnitude, _UNITS["s"])
    minutes, seconds = divmod(seconds, 60)
    text = _fraction(seconds * _UNITS["s"] + nanos, _UNITS["s"]) + "s"
    if minutes:
        hours, minutes = divmod(minutes, 60)
        text = "%dm" % minutes + text
        if hours:
            text = "%dh" % hours + text
    return sign + text


def format_float(value, /, bits=64):
    """
    shortest text that reads back to the same value at the given width;
    exponent form below 1e-4 and from 1e21 upward ("1e+21", "1e-05").
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"

    text = repr(value)
    if bits == 32:
        for precision in range(1, 10):
            text = "%.*g" % (precision, value)
            if struct.unpack("<f", struct.pack("<f", float(text)))[0] == value:
                break

    number = Decimal(text).normalize()
    sign, digits, exponent = number.as_tuple()
    magnitude = len(digits) + exponent - 1
    if value == 0 or -4 <= magnitude < 21:
        return format(number, "f")

    mantissa = "".join(map(str, digits))
    if len(mantissa) > 1:
        mantissa = mantissa[0] + "." + mantissa[1:]
    return "%s%se%s%02d" % ("-" if sign else "", mantissa, "-" if magnitude < 0 else "+", abs(magnitude))


def _usage_type_name(object, fallback):
    if callable(hook := getattr(object, "usage_type_name", None)):
        return hook()
    return fallback


class Destination(ABC):
    """
    something a flag's raw value is applied to.

    contract
    - type_name(): label for usage output ("" hides the type hint).
    - default_text(): current value rendered for usage ("" hides it).
    - apply(raw): mutate state or invoke a callback; raise on failure.
    - is_bool: boolean-arity destinations never consume the following token.
    """
    is_bool = False

    def type_name(self):
        return "value"

    def default_text(self):
        return ""

    @abstractmethod
    def apply(self, raw, /):
        ...

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, self.default_text())


class Halt(Destination):
    """
    halt sentinel: applying any value, even bare presence, raises the wrapped
    exception so parsing stops there (used for help flags).
    """
    is_bool = True

    def __init__(self, sentinel, /):
        if not isinstance(sentinel, BaseException):
            raise TypeError("Halt() argument must be an exception instance")
        self.sentinel = sentinel

    def type_name(self):
        return ""

    def apply(self, raw, /):
        # the sentinel is reused across parses; drop frames from earlier raises
        raise self.sentinel.with_traceback(None)

    def __repr__(self):
        return "Halt(%r)" % self.sentinel


class TextCodec(Destination):
    """
    adapter for objects exposing unmarshal_text(str) and marshal_text().
    """

    def __init__(self, target, /):
        self.target = target

    def type_name(self):
        return _usage_type_name(self.target, "value")

    def default_text(self):
        try:
            text = self.target.marshal_text()
        except Exception as error:
            return str(error)
        if isinstance(text, bytes | bytearray):
            text = text.decode()
        return coalesce(text, "") or ""

    @property
    def is_bool(self):
        return _bool_capable(self.target)

    def apply(self, raw, /):
        self.target.unmarshal_text(raw)


class Settable(Destination):
    """
    adapter for objects exposing set(str); str(target) is the default label.
    """

    def __init__(self, target, /):
        self.target = target

    def type_name(self):
        return _usage_type_name(self.target, "value")

    def default_text(self):
        return str(self.target)

    @property
    def is_bool(self):
        return _bool_capable(self.target)

    def apply(self, raw, /):
        self.target.set(raw)


class Callback(Destination):
    """
    a function called with the raw string every time its flag is resolved.
    """

    def __init__(self, function, /):
        if not callable(function):
            raise TypeError("Callback() argument must be callable")
        self.function = function

    def type_name(self):
        return _usage_type_name(self.function, "value")

    def apply(self, raw, /):
        self.function(raw)

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, getattr(self.function, "__qualname__", self.function))


class BoolCallback(Callback):
    """
    a boolean-arity callback: receives True when the flag is merely present
    (or given an empty value) and the parsed boolean otherwise.
    """
    is_bool = True

    def type_name(self):
        return _usage_type_name(self.function, "bool")

    def apply(self, raw, /):
        self.function(True if raw == "" else parse_bool(raw))


def _bool_capable(target):
    flag = getattr(target, "is_bool", False)
    return bool(flag() if callable(flag) else flag)


class Slot(Destination):
    """
    mutable typed slot; the parsed value lives in .value.

    subclasses provide label, zero, convert(raw) and format(value).
    """
    label = "value"
    zero = None

    def __init__(self, default=Unset, /):
        self.value = coalesce(default, self.zero)

    def convert(self, raw, /):
        raise NotImplementedError

    def format(self, value, /):
        return str(value)

    def type_name(self):
        return self.label

    def default_text(self):
        return self.format(self.value)

    def apply(self, raw, /):
        self.value = self.convert(raw)

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.value)


class String(Slot):
    label = "string"
    zero = ""

    def convert(self, raw, /):
        return raw


class Bool(Slot):
    label = "bool"
    zero = False
    is_bool = True

    def convert(self, raw, /):
        return parse_bool(raw)

    def format(self, value, /):
        return "true" if value else "false"


class Int(Slot):
    label = "int"
    zero = 0
    bits = 64
    signed = True

    def convert(self, raw, /):
        return parse_int(raw, self.bits, signed=self.signed, label=self.label)


class Int8(Int):
    label, bits = "int8", 8


class Int16(Int):
    label, bits = "int16", 16


class Int32(Int):
    label, bits = "int32", 32


class Int64(Int):
    label, bits = "int64", 64


class Uint(Int):
    label, signed = "uint", False


class Uint8(Uint):
    label, bits = "uint8", 8


class Uint16(Uint):
    label, bits = "uint16", 16


class Uint32(Uint):
    label, bits = "uint32", 32


class Uint64(Uint):
    label, bits = "uint64", 64


class Float64(Slot):
    label = "float64"
    zero = 0.0
    bits = 64

    def convert(self, raw, /):
        return parse_float(raw, self.bits)

    def format(self, value, /):
        return format_float(value, self.bits)


class Float32(Float64):
    label, bits = "float32", 32


class Duration(Slot):
    label = "duration"
    zero = timedelta()

    def convert(self, raw, /):
        return parse_duration(raw)

    def format(self, value, /):
        return format_duration(value)


class Enum(Slot):
    """
    enum-like slot over an enum.Enum class.

    raw text matches a member name first, then the text form of a member
    value. The default is the first member unless given.
    """

    def __init__(self, members, default=Unset, /):
        if not (isinstance(members, type) and issubclass(members, enum.Enum)):
            raise TypeError("Enum() first argument must be an enum.Enum subclass")
        if not len(members):
            raise ValueError("Enum() first argument must declare at least one member")
        self.members = members
        super().__init__(coalesce(default, next(iter(members))))

    @property
    def label(self):
        return self.members.__name__.lower()

    def convert(self, raw, /):
        try:
            return self.members[raw]
        except KeyError:
            pass
        for member in self.members:
            if str(member.value) == raw:
                return member
        raise ConversionError(
            raw=raw,
            type=self.label,
            reason="expected one of %s" % ", ".join(member.name for member in self.members)
        )

    def format(self, value, /):
        return value.name


class Slice(Slot):
    """
    multi-valued slot: every application appends to .value.

    - the first application clears whatever the list held before, so a
      default is replaced rather than extended.
    - split_each splits the raw text on separator and converts every chunk.
    - target binds an existing list, which is then mutated in place.
    """

    def __init__(self, element=Unset, /, *, separator=",", split_each=False, target=Unset, default=Unset):
        element = coalesce(element, String)
        if isinstance(element, type) and issubclass(element, Slot):
            element = element()
        if not isinstance(element, Slot) or isinstance(element, Slice):
            raise TypeError("Slice() element must be a scalar slot type or instance")
        if target is not Unset and not isinstance(target, list):
            raise TypeError("Slice() target must be a list")
        if not isinstance(separator, str) or not separator:
            raise ValueError("Slice() separator must be a non-empty string")

        self.element = element
        self.separator = separator
        self.split_each = bool(split_each)
        self.started = False
        if target is Unset:
            target = list(coalesce(default, ()))
        super().__init__(target)

    @property
    def is_bool(self):
        return isinstance(self.element, Bool)

    def type_name(self):
        return _usage_type_name(self.element, self.element.type_name()) + ("(csv)" if self.split_each else "")

    def default_text(self):
        return self.separator.join(map(self.element.format, self.value))

    def apply(self, raw, /):
        chunks = raw.split(self.separator) if self.split_each else [raw]
        items = [self.element.convert(chunk) for chunk in chunks]
        if not self.started:
            self.value.clear()
            self.started = True
        self.value.extend(items)


def _takes_bool(function):
    try:
        parameters = list(inspect.signature(function).parameters.values())
    except (TypeError, ValueError):
        return False
    return bool(parameters) and parameters[0].annotation in (bool, "bool")


def destination(object, /):
    """
    turn a registration value into a Destination.

    precedence
    - Destination instances are returned unchanged.
    - exception instances become Halt sentinels.
    - text codecs, then settables.
    - a plain list becomes Slice(String, target=list).
    - callables become Callback, or BoolCallback when the first parameter is
      annotated as bool.

    raises
    - UnsupportedTypeError for anything else (immutable values such as a bare
      int or str cannot be written back and are rejected).
    """
    if isinstance(object, Destination):
        return object
    if isinstance(object, BaseException):
        return Halt(object)
    if isinstance(object, type):
        raise UnsupportedTypeError(
            type="type[%s]" % object.__name__,
            hint="register an instance, not the class itself"
        )
    if callable(getattr(object, "unmarshal_text", None)) and callable(getattr(object, "marshal_text", None)):
        return TextCodec(object)
    if callable(getattr(object, "set", None)):
        return Settable(object)
    if isinstance(object, list):
        return Slice(String, target=object)
    if callable(object):
        return BoolCallback(object) if _takes_bool(object) else Callback(object)

    raise UnsupportedTypeError(
        type=type(object).__name__,
        hint="wrap plain values in a slot such as String(...), Int(...) or Bool(...)"
    )


def hydrate(target, raw, /, *, name=""):
    """
    apply raw to target (any registration value or Destination).

    raises
    - HydrateError(flag=name) chained to the cause. When target is a halt
      sentinel the error is marked halt=True and its cause is the sentinel.
    """
    try:
        target = destination(target)
        target.apply(raw)
    except Exception as error:
        raise HydrateError(flag=name, raw=raw, halt=isinstance(target, Halt)) from error
    except BaseException as error:
        if not isinstance(target, Halt) or error is not target.sentinel:
            raise
        raise HydrateError(flag=name, raw=raw, halt=True) from error


__all__ = (
    # Protocol and adapters
    "Destination",
    "Halt",
    "TextCodec",
    "Settable",
    "Callback",
    "BoolCallback",

    # Slots
    "Slot",
    "String",
    "Bool",
    "Int",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "Float32",
    "Float64",
    "Duration",
    "Enum",
    "Slice",

    # Functions
    "destination",
    "hydrate",
    "parse_bool",
    "parse_int",
    "parse_float",
    "parse_duration",
    "format_duration",
    "format_float",
)
