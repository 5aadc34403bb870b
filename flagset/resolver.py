"""
flagset argument resolution.

What this module provides
- explode(tokens): rewrite "-abc" into "-a", "-b", "-c". Long flags, "--",
  a bare "-" and operands pass through untouched. Pure and idempotent.
- NameIndex: name -> Flag lookup. One-character names are searched among
  short names only, longer names among long names only. Exact and case
  sensitive; the first registered match wins.
- resolve(index, tokens): the single left-to-right scan that applies flag
  values and returns the operand sequence.

Scan rules (state: expecting a flag/operand, or a value for a pending flag)
- a token that does not start with '-', or is exactly '-', starts the
  operands; the rest of the tokens are returned as-is.
- "--" ends the scan; everything after it is returned.
- "--name=value" applies value verbatim, whatever the destination.
- "--name" and "-n" apply "true" at once to boolean-arity destinations and
  otherwise take the next token, whole, as the value (even if it starts
  with '-'). Running out of tokens applies the empty string.

Every failure aborts the scan: UnrecognizedFlagError for unknown names,
HydrateError (naming the matched flag) for values that do not apply.
"""
from .faults import UnrecognizedFlagError
from .values import hydrate


def explode(tokens, /):
    """
    split bundled short flags into one token per character.

    examples
    - ["-abc"] -> ["-a", "-b", "-c"]
    - ["--abc"] -> ["--abc"]
    - ["-a"] -> ["-a"]
    """
    exploded = []
    for token in tokens:
        if len(token) > 1 and token[0] == "-" and token[1] != "-":
            exploded.extend("-" + character for character in token[1:])
        else:
            exploded.append(token)
    return exploded


class NameIndex:
    """
    ordered lookup over registered flags.
    """

    def __init__(self, flags=(), /):
        self._flags = list(flags)

    def __len__(self):
        return len(self._flags)

    def __iter__(self):
        return iter(self._flags)

    def add(self, flag, /):
        self._flags.append(flag)

    def owners(self, name, /):
        """
        every flag claiming name, in registration order.
        """
        return [flag for flag in self._flags if flag.matches(name)]

    def lookup(self, name, /):
        """
        return the first flag registered under name.

        raises
        - UnrecognizedFlagError carrying the name.
        """
        for flag in self._flags:
            if flag.matches(name):
                return flag
        raise UnrecognizedFlagError(name=name, hint="check the spelling or run with --help to list the flags")


def _present(flag, name):
    # boolean-arity flags never take the following token
    if flag.is_bool:
        hydrate(flag.destination, "true", name=name)
        return None
    return (flag, name)


def resolve(index, tokens, /):
    """
    scan already exploded tokens; return the operands.
    """
    pending = None

    for position, token in enumerate(tokens):
        if pending is not None:
            flag, name = pending
            hydrate(flag.destination, token, name=name)
            pending = None
            continue

        if not token.startswith("-") or token == "-":
            return list(tokens[position:])

        if token == "--":
            return list(tokens[position + 1:])

        if token.startswith("--"):
            name, assigned, raw = token[2:].partition("=")
            flag = index.lookup(name)
            if assigned:
                hydrate(flag.destination, raw, name=name)
            else:
                pending = _present(flag, name)
            continue

        # exploded short flags are exactly "-X"
        name = token[1:2]
        pending = _present(index.lookup(name), name)

    if pending is not None:
        flag, name = pending
        hydrate(flag.destination, "", name=name)
    return []


__all__ = (
    "NameIndex",
    "explode",
    "resolve",
)
