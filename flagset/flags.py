r"""
flagset flag definitions.

Overview
- Flag: one registered option. Holds its long and short names, the bound
  destination, a description, a hidden switch and a free-form meta mapping
  for custom usage renderers.
- split_names("info|i"): classify a pipe-delimited names string into long
  names (more than one character) and short names (exactly one character).

Lifecycle
- A Flag is created once by FlagSet.flag(...) before parsing. Names and the
  destination are fixed from then on; only the destination's value changes
  while parsing. descr, hidden and meta stay writable for the caller.
- type_name and default_text are computed once, at registration, from the
  destination's current state. They describe the default, not the parsed
  value.

Validation
- every name is non-empty, carries no leading '-', no '=' and no whitespace.
- a name may appear only once in the same names string.
"""
import re

from .utils import mirror
from .values import destination

_INVALID_NAME = re.compile(r"^-|[=\s]")


def split_names(names, /):
    """
    split "name1|n|name2" into (longs, shorts), preserving order.

    classification counts code points, so "é" is a short name.
    """
    if not isinstance(names, str):
        raise TypeError("flag names must be a string")

    longs, shorts, seen = [], [], set()
    for name in names.split("|"):
        if not name:
            raise ValueError("flag names %r contain an empty name" % names)
        if _INVALID_NAME.search(name):
            raise ValueError("flag name %r must not start with '-' or contain '=' or whitespace" % name)
        if name in seen:
            raise ValueError("flag name %r is repeated in %r" % (name, names))
        seen.add(name)
        (shorts if len(name) == 1 else longs).append(name)
    return longs, shorts


class Flag:
    """
    Registered flag option.

    Read-only
    - names: the pipe-delimited string given at registration.
    - longs / shorts: classified names, in declaration order.
    - destination: the Destination the raw values are applied to.
    - type_name / default_text: presentation labels for usage output.

    Writable
    - descr: description shown under the names.
    - hidden: suppress from usage output.
    - meta: dict for custom renderers.
    """

    __introspectable__ = (
        "names",
        "longs",
        "shorts",
        "type_name",
        "default_text",
        "descr",
        "hidden",
    )

    names = mirror("names")
    longs = mirror("longs")
    shorts = mirror("shorts")
    type_name = mirror("type_name")
    default_text = mirror("default_text")

    def __init__(self, target, names, descr="", /, *, hidden=False, meta=None):
        self._longs, self._shorts = split_names(names)
        self._names = names
        self._destination = destination(target)
        self._type_name = self._destination.type_name()
        self._default_text = self._destination.default_text()
        self.descr = descr
        self.hidden = hidden
        self.meta = {} if meta is None else dict(meta)

    @property
    def destination(self):
        return self._destination

    @property
    def descr(self):
        return self._descr

    @descr.setter
    def descr(self, value):
        if not isinstance(value, str):
            raise TypeError("flag 'descr' must be a string")
        self._descr = value

    @property
    def hidden(self):
        return self._hidden

    @hidden.setter
    def hidden(self, value):
        self._hidden = bool(value)

    @property
    def is_bool(self):
        return self._destination.is_bool

    def matches(self, name, /):
        """
        exact, case-sensitive match against the names of the same arity.
        """
        return name in (self._shorts if len(name) == 1 else self._longs)

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "flag(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Flag",
    "split_names",
)
