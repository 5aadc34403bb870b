from rich.pretty import pprint

from flagset import *

help_requested = Exception("help requested")

info = String("default-value")
num = Int()
verbose = Bool()
timeout = Duration()

fs = FlagSet("app", shell=True)
fs.flag(info, "info|i", "Interesting info.")
fs.flag(num, "num|n", "Number with no usage.").hidden = True
fs.flag(verbose, "verbose|v", "Set verbose output.")
fs.flag(timeout, "timeout|t", "Give up after this long.")
fs.flag(help_requested, "help|h", "Display usage output.")


if __name__ == '__main__':
    fs.parse()
    pprint(dict(info=info.value, num=num.value, verbose=verbose.value, timeout=timeout.value, operands=fs.operands))
