"""
flagset usage rendering.

What this module provides
- UsageConfig: the per-FlagSet rendering configuration (renderer, hint
  functions, palette). Every FlagSet builds its own; nothing is shared
  process-wide.
- render(flagset, config): the default renderer, returning rich Text.
- render_type_hint / render_default_hint: the default hint functions.

Default layout (plain form)

    Flags for app:

        -i, --info  =STRING    default: default-value
            Interesting info.

        -v, --verbose  [=BOOL]    default: false
            Set verbose output.

Custom renderers
- A renderer is any callable taking (flagset, config) and returning a str or
  a rich renderable Text. Flag.meta and FlagSet.meta are free-form and meant
  for such renderers.

Palette keys
- usage-label, set-name, flag-name, type-hint, default-hint, flag-description
- Override per instance with UsageConfig(styles=...), or for the whole program
  with a __styles__ mapping in __main__ (the instance palette wins).
"""
from collections import defaultdict

from rich.text import Text

from .utils import Unset, coalesce

_STYLES = {
    "usage-label": "bold #00E6FF",
    "set-name": "bold #FF4D94",
    "flag-name": "bold #22C55E",
    "type-hint": "bold #FFD600",
    "default-hint": "italic #A3A3A3",
    "flag-description": "#9CA3AF",
}


def render_type_hint(flag, flagset):
    """
    "=TYPE", "[=TYPE]" for boolean-arity flags with long names, or "".
    """
    if flagset.hide_type_hints or not flag.type_name:
        return ""
    prefix, suffix = "=", ""
    if flag.is_bool and flag.longs:
        prefix, suffix = "[=", "]"
    return prefix + flag.type_name.upper() + suffix


def render_default_hint(flag, flagset):
    if flagset.hide_default_hints or not flag.default_text:
        return ""
    return "default: " + flag.default_text


class UsageConfig:
    """
    rendering configuration owned by a single FlagSet.

    attributes
    - renderer: callable(flagset, config) -> Text | str.
    - type_hint / default_hint: callable(flag, flagset) -> str.
    - styles: palette overrides (mapping of palette key to rich style).
    """

    def __init__(self, renderer=Unset, *, type_hint=Unset, default_hint=Unset, styles=Unset):
        self.renderer = coalesce(renderer, render)
        self.type_hint = coalesce(type_hint, render_type_hint)
        self.default_hint = coalesce(default_hint, render_default_hint)
        self.styles = dict(coalesce(styles, {}))
        for name in ("renderer", "type_hint", "default_hint"):
            if not callable(getattr(self, name)):
                raise TypeError("UsageConfig() %r must be callable" % name)

    def palette(self):
        return defaultdict(str, _STYLES | getattr(__import__("__main__"), "__styles__", {}) | self.styles)

    def __call__(self, flagset):
        rendered = self.renderer(flagset, self)
        return Text(rendered) if isinstance(rendered, str) else rendered

    def __repr__(self):
        return "UsageConfig(renderer=%s)" % getattr(self.renderer, "__qualname__", self.renderer)


def render(flagset, config):
    """
    default renderer: a header and one entry per visible flag.
    """
    styles = config.palette()

    def styler(style):
        return styles[style] if flagset.colorful else ""

    if not flagset.flags:
        return Text("")

    usage = Text()
    usage.append("Flags for ", styler("usage-label"))
    usage.append(flagset.name, styler("set-name"))
    usage.append(":", styler("usage-label"))
    usage.append("\n")

    for flag in flagset.flags:
        if flag.hidden:
            continue

        # names: "-i, --info"
        names = ["-" + name for name in flag.shorts] + ["--" + name for name in flag.longs]
        usage.append("\n    ")
        usage.append(Text(", ").join(Text(name, styler("flag-name")) for name in names))

        if hint := config.type_hint(flag, flagset):
            usage.append("  ").append(hint, styler("type-hint"))
        if hint := config.default_hint(flag, flagset):
            usage.append("    ").append(hint, styler("default-hint"))
        usage.append("\n")

        for line in flag.descr.splitlines():
            usage.append(" " * 8).append(line, styler("flag-description")).append("\n")

    usage.rstrip()
    return usage


__all__ = (
    "UsageConfig",
    "render",
    "render_type_hint",
    "render_default_hint",
)
