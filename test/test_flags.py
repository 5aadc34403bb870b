"""
Tests for flag definitions.

This module verifies:
- Name classification and validation performed by split_names.
- Read-only registration state of Flag and its writable presentation fields.
- Labels computed once at registration time.
"""
import unittest
from unittest import TestCase

from flagset import Bool, Flag, Int, String, UnsupportedTypeError, split_names


class SplitNamesTest(TestCase):

    def testClassification(self) -> None:
        """
        One-character names are short, everything longer is long.
        """
        self.assertEqual(split_names("info|i"), (["info"], ["i"]))
        self.assertEqual(split_names("v|verbose|V|loud"), (["verbose", "loud"], ["v", "V"]))
        self.assertEqual(split_names("x"), ([], ["x"]))

    def testCodePoints(self) -> None:
        self.assertEqual(split_names("é|ünïcode"), (["ünïcode"], ["é"]))

    def testInvalidNames(self) -> None:
        for names in ("", "a||b", "info|", "-i", "--info", "a=b", "two words", "tab\tname"):
            with self.assertRaises(ValueError, msg=names):
                split_names(names)

    def testRepeatedName(self) -> None:
        with self.assertRaises(ValueError):
            split_names("x|info|x")

    def testRequiresString(self) -> None:
        with self.assertRaises(TypeError):
            split_names(["info", "i"])


class FlagTest(TestCase):
    """
    Test suite for `Flag`.
    """

    def setUp(self) -> None:
        self.count = Int(7)
        self.flag = Flag(self.count, "count|c", "How many.")

    def testNames(self) -> None:
        self.assertEqual(self.flag.names, "count|c")
        self.assertEqual(self.flag.longs, ["count"])
        self.assertEqual(self.flag.shorts, ["c"])

    def testNamesAreReadOnly(self) -> None:
        """
        Names cannot be reassigned and returned lists are copies.
        """
        with self.assertRaises(AttributeError):
            self.flag.longs = ["other"]
        self.flag.longs.append("other")
        self.assertEqual(self.flag.longs, ["count"])
        self.assertFalse(self.flag.matches("other"))

    def testLabelsFixedAtRegistration(self) -> None:
        """
        type_name and default_text describe the default, not later values.
        """
        self.assertEqual(self.flag.type_name, "int")
        self.assertEqual(self.flag.default_text, "7")
        self.count.apply("42")
        self.assertEqual(self.flag.default_text, "7")

    def testDestination(self) -> None:
        self.assertIs(self.flag.destination, self.count)
        self.assertFalse(self.flag.is_bool)
        self.assertTrue(Flag(Bool(), "v").is_bool)

    def testMatches(self) -> None:
        """
        Short names are only matched by one-character lookups, and vice versa.
        """
        flag = Flag(String(), "c|co")
        self.assertTrue(flag.matches("c"))
        self.assertTrue(flag.matches("co"))
        self.assertFalse(flag.matches("C"))
        self.assertFalse(flag.matches("CO"))
        self.assertFalse(self.flag.matches("coun"))

    def testWritableFields(self) -> None:
        self.flag.descr = "Updated."
        self.flag.hidden = 1
        self.assertEqual(self.flag.descr, "Updated.")
        self.assertIs(self.flag.hidden, True)
        with self.assertRaises(TypeError):
            self.flag.descr = None

    def testMetaIsCopied(self) -> None:
        meta = {"group": "io"}
        flag = Flag(String(), "out|o", "", meta=meta)
        meta["group"] = "other"
        self.assertEqual(flag.meta, {"group": "io"})
        self.assertEqual(self.flag.meta, {})

    def testUnsupportedTarget(self) -> None:
        with self.assertRaises(UnsupportedTypeError):
            Flag(5, "five")

    def testRepr(self) -> None:
        self.assertIn("names='count|c'", repr(self.flag))
        self.assertTrue(repr(self.flag).startswith("flag("))


if __name__ == '__main__':
    unittest.main()
