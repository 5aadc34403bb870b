"""
Tests for faults.

This module verifies:
- Default messages and the chained single-line str() form.
- Walking wrapped errors with chain() and caused_by().
- copy.replace() support and trigger() in raising and shell modes.
- Rich rendering of errors and warnings.
"""
import copy
import io
import unittest
from contextlib import redirect_stderr
from unittest import TestCase

from rich.console import Console

from flagset import (
    ConversionError,
    DuplicateNameWarning,
    FaultCode,
    HydrateError,
    ParseError,
    UnrecognizedFlagError,
    UnsupportedTypeError,
    caused_by,
    chain,
    trigger,
)


def _nested(sentinel=None):
    """
    build ParseError -> HydrateError -> ConversionError (or sentinel).
    """
    inner = sentinel if sentinel is not None else ConversionError(raw="x", type="int")
    hydrate = HydrateError(flag="n", raw="x", halt=sentinel is not None)
    hydrate.__cause__ = inner
    outer = ParseError("parse")
    outer.__cause__ = hydrate
    return outer, hydrate, inner


class MessageTest(TestCase):

    def testDefaults(self) -> None:
        self.assertEqual(str(UnrecognizedFlagError(name="x")), "unrecognized flag: 'x'")
        self.assertEqual(str(HydrateError(flag="num")), "hydrate (num)")
        self.assertEqual(
            str(ConversionError(raw="300", type="int8", reason="value out of range")),
            "parsing '300' as int8: value out of range"
        )
        self.assertEqual(str(UnsupportedTypeError(type="int")), "unsupported destination type: int")

    def testChainedStr(self) -> None:
        """
        Messages of wrapped errors are joined into one line.
        """
        outer, _, _ = _nested()
        self.assertEqual(str(outer), "parse: hydrate (n): parsing 'x' as int: invalid syntax")

    def testOptionsAreReadOnly(self) -> None:
        error = HydrateError(flag="num")
        with self.assertRaises(TypeError):
            error.options["flag"] = "other"

    def testCodes(self) -> None:
        self.assertEqual(UnrecognizedFlagError.code, FaultCode.UNRECOGNIZED_FLAG)
        self.assertEqual(FaultCode.HYDRATE_FAILURE.normalize(), "21121")

    def testStandardBases(self) -> None:
        self.assertIsInstance(ConversionError(), ValueError)
        self.assertIsInstance(UnsupportedTypeError(), TypeError)


class ChainTest(TestCase):
    """
    Test suite for `chain`, `caused_by` and `ParseError.halted`.
    """

    def testOrder(self) -> None:
        outer, hydrate, inner = _nested()
        self.assertEqual(list(chain(outer)), [outer, hydrate, inner])

    def testFollowsUnsuppressedContext(self) -> None:
        try:
            try:
                raise KeyError("inner")
            except KeyError:
                raise ValueError("outer")
        except ValueError as error:
            links = list(chain(error))
        self.assertEqual([type(link) for link in links], [ValueError, KeyError])

    def testCausedByKind(self) -> None:
        outer, _, _ = _nested()
        self.assertTrue(caused_by(outer, ConversionError))
        self.assertTrue(caused_by(outer, ValueError))
        self.assertFalse(caused_by(outer, UnrecognizedFlagError))

    def testCausedByIdentity(self) -> None:
        sentinel = Exception("help requested")
        outer, _, _ = _nested(sentinel)
        self.assertTrue(caused_by(outer, sentinel))
        self.assertFalse(caused_by(outer, Exception("help requested")))

    def testHalted(self) -> None:
        sentinel = Exception("help requested")
        self.assertIs(_nested(sentinel)[0].halted, sentinel)
        self.assertIsNone(_nested()[0].halted)


class TriggerTest(TestCase):
    """
    Test suite for `trigger` and `copy.replace` support.
    """

    def testReplacePreservesCause(self) -> None:
        outer, hydrate, _ = _nested()
        replaced = copy.replace(outer, shell=False)
        self.assertIsNot(replaced, outer)
        self.assertIs(replaced.__cause__, hydrate)
        self.assertEqual(replaced.message, "parse")
        self.assertFalse(replaced.options["shell"])

    def testRaisesOutsideShell(self) -> None:
        with self.assertRaises(UnrecognizedFlagError) as context:
            trigger(UnrecognizedFlagError(name="x"))
        self.assertEqual(context.exception.name, "x")

    def testShellExits(self) -> None:
        """
        In shell mode the error is rendered to stderr and the process exits 1.
        """
        stream = io.StringIO()
        with redirect_stderr(stream), self.assertRaises(SystemExit) as context:
            trigger(UnrecognizedFlagError(name="x"), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unrecognized flag: 'x'", stream.getvalue())

    def testWarningOutsideShell(self) -> None:
        with self.assertWarns(DuplicateNameWarning):
            trigger(DuplicateNameWarning("name 'v' is taken"))

    def testWarningInShellIsPrinted(self) -> None:
        stream = io.StringIO()
        with redirect_stderr(stream):
            trigger(DuplicateNameWarning("name 'v' is taken"), shell=True, colorful=False)
        self.assertIn("name 'v' is taken", stream.getvalue())

    def testRejectsPlainObjects(self) -> None:
        with self.assertRaises(TypeError):
            trigger(object())


class RenderTest(TestCase):

    def render(self, fault) -> str:
        console = Console(file=io.StringIO(), width=200, color_system=None)
        console.print(fault)
        return console.file.getvalue()

    def testErrorLayout(self) -> None:
        output = self.render(UnrecognizedFlagError(name="x", hint="run with --help", colorful=False))
        self.assertIn("21101", output)
        self.assertIn("Unrecognized Flag", output)
        self.assertIn("unrecognized flag: 'x'", output)
        self.assertIn("run with --help", output)

    def testFancyPanel(self) -> None:
        output = self.render(HydrateError(flag="n", fancy=True))
        self.assertIn("hydrate (n)", output)
        self.assertIn("Hydrate Failure", output)

    def testWarningLayout(self) -> None:
        output = self.render(DuplicateNameWarning("name 'v' is taken"))
        self.assertIn("22111", output)
        self.assertIn("Duplicate Flag Name", output)


if __name__ == '__main__':
    unittest.main()
