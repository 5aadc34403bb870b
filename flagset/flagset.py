"""
flagset: POSIX-style flag parsing.

What this module provides
- FlagSet: registers flags, parses argument vectors and renders usage.

Rules
- "-abc" is read as "-a -b -c" (bundled short flags are exploded first).
- "--name=value" and "--name value" both work for value-taking flags;
  boolean flags never consume the next token ("--verbose file" leaves "file"
  as an operand) but accept "--verbose=false".
- the first operand, or "--", ends flag parsing.

Quick start
    from flagset import FlagSet, String, Int, Bool

    info, num, verbose = String("default-value"), Int(), Bool()
    help_requested = Exception("help requested")

    fs = FlagSet("app")
    fs.flag(info, "info|i", "Interesting info.")
    fs.flag(num, "num|n", "Number with no usage.").hidden = True
    fs.flag(verbose, "verbose|v", "Set verbose output.")
    fs.flag(help_requested, "help|h", "Display usage output.")

    operands = fs.parse(["--info=non-default", "-n", "42", "-v", "build"])
    # info.value == "non-default", num.value == 42, verbose.value is True
    # operands == ["build"]

Shell mode
- FlagSet(..., shell=True) turns parse failures into a rendered fault plus
  usage on stderr and exit status 1; a halt sentinel (such as the help
  exception above) prints usage and exits 0.
"""
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .faults import DuplicateNameWarning, FlagSetException, ParseError, console, trigger
from .flags import Flag
from .resolver import NameIndex, explode, resolve
from .usage import UsageConfig
from .utils import Unset, mirror


def _tokenize(tokens):
    if tokens is Unset:
        return sys.argv[1:]
    if isinstance(tokens, str):
        return shlex.split(tokens)
    if isinstance(tokens, Iterable):
        tokens = list(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


class FlagSet:
    """
    A named set of flags.

    Options
    - shell: render failures and exit instead of raising.
    - colorful / fancy: styling of rendered usage and faults.
    - hide_type_hints / hide_default_hints: drop the "=TYPE" and
      "default: ..." parts of usage entries.
    - meta: free-form mapping for custom usage renderers.
    - usage: a UsageConfig; a fresh default one is built otherwise.
    """

    parsed = mirror("parsed")
    operands = mirror("operands")

    def __init__(
            self,
            name,
            /,
            *,
            shell=False,
            colorful=True,
            fancy=False,
            hide_type_hints=False,
            hide_default_hints=False,
            meta=None,
            usage=Unset,
    ):
        if not isinstance(name, str):
            raise TypeError("FlagSet() name must be a string")
        self._name = name
        self._index = NameIndex()
        self._parsed = []
        self._operands = []
        self._usage_config = UsageConfig() if usage is Unset else usage
        if not isinstance(self._usage_config, UsageConfig):
            raise TypeError("FlagSet() usage must be a UsageConfig")

        self.shell = bool(shell)
        self.colorful = bool(colorful)
        self.fancy = bool(fancy)
        self.hide_type_hints = bool(hide_type_hints)
        self.hide_default_hints = bool(hide_default_hints)
        self.meta = {} if meta is None else dict(meta)

    @property
    def name(self):
        return self._name

    @property
    def flags(self):
        """
        registered flags, in registration order.
        """
        return tuple(self._index)

    def operand(self, index, /):
        """
        the index'th operand, or "" when there is none.
        """
        if 0 <= index < len(self._operands):
            return self._operands[index]
        return ""

    def flag(self, target, names, descr="", /, *, hidden=False, meta=None):
        """
        register a flag and return its handle.

        parameters
        - target: a slot (String(), Int(), ...), a text codec, a settable, a
          callback, a list (collects every value), or an exception instance
          (halt sentinel, e.g. for --help).
        - names: pipe-delimited long and short names, e.g. "verbose|v".
        - descr: description for usage output.

        names already claimed by an earlier flag stay bound to that flag;
        a DuplicateNameWarning is emitted.
        """
        flag = Flag(target, names, descr, hidden=hidden, meta=meta)

        for name in flag.longs + flag.shorts:
            if owners := self._index.owners(name):
                trigger(
                    DuplicateNameWarning(
                        "flag name %r of %r is already registered by %r" % (name, names, owners[0].names),
                        name=name,
                        hint="%r resolves to the first registration" % name,
                    ),
                    tool=self,
                    shell=self.shell,
                    colorful=self.colorful,
                    fancy=self.fancy,
                )

        self._index.add(flag)
        return flag

    def parse(self, tokens=Unset, /):
        """
        parse tokens (without the program name) and return the operands.

        tokens
        - Unset: sys.argv[1:].
        - str: split with shlex.split.
        - Iterable[str]: used as-is.

        raises
        - ParseError chained to UnrecognizedFlagError or HydrateError.
          Destinations applied before the failing token keep their values
          and the operands are left empty.
        """
        self._parsed = explode(_tokenize(tokens))
        self._operands = []

        try:
            operands = resolve(self._index, self._parsed)
        except FlagSetException as error:
            fault = ParseError("parse", tool=self)
            fault.__cause__ = error
            if not self.shell:
                raise fault from error
            self._exit(fault)

        self._operands = operands
        return list(operands)

    def _exit(self, fault):
        if fault.halted is not None:
            self.print_usage()
            sys.exit(0)
        self.print_usage(stderr=True)
        trigger(fault, tool=self, shell=True, colorful=self.colorful, fancy=self.fancy)

    def set_usage_templating(self, config, /):
        """
        replace the usage configuration of this FlagSet only.
        """
        if not isinstance(config, UsageConfig):
            raise TypeError("set_usage_templating() argument must be a UsageConfig")
        self._usage_config = config

    @property
    def usage_config(self):
        return self._usage_config

    def usage(self):
        """
        usage text, unstyled.
        """
        return self._usage_config(self).plain

    def print_usage(self, *, stderr=False):
        (console if stderr else Console()).print(self)

    def __rich__(self):
        rendered = self._usage_config(self)
        if self.fancy:
            return Panel(
                rendered,
                title=Text.assemble("[ ", self._name.upper(), " FLAGS ]"),
                title_align="left",
            )
        return rendered

    def __repr__(self):
        return "FlagSet(%r, flags=%d)" % (self._name, len(self._index))


__all__ = (
    "FlagSet",
)
