"""
Tests for the internal helpers.

This module verifies:
- Unset: singleton identity, falsiness, representation and finality.
- coalesce: only Unset is replaced, other falsey values survive.
- mirror: read-only properties that hand out detached copies.
- rename: function and decorator forms.
"""
import unittest
from unittest import TestCase

from flagset.utils import Unset, UnsetType, coalesce, mirror, rename


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported instance on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        """
        Unset is falsey but distinct from None.
        """
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self) -> None:
        """
        Subclassing the sentinel type is rejected.
        """
        with self.assertRaises(TypeError):
            class Derived(UnsetType):
                pass


class CoalesceTest(TestCase):

    def testUnsetIsReplaced(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")

    def testFalseyValuesArePreserved(self) -> None:
        """
        None, 0 and "" are legitimate values and come back unchanged.
        """
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testDefaultIsNone(self) -> None:
        self.assertIsNone(coalesce(Unset))


class MirrorTest(TestCase):
    """
    Test suite for `mirror` properties.
    """

    def setUp(self) -> None:
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = ["a", "b"]
                self._table = {"key": ["value"]}

        self.holder = Holder()

    def testReadsBackingField(self) -> None:
        self.assertEqual(self.holder.items, ["a", "b"])

    def testReturnsDetachedCopies(self) -> None:
        """
        Mutating a returned container leaves the backing field untouched.
        """
        self.holder.items.append("c")
        self.holder.table["key"].append("other")
        self.assertEqual(self.holder.items, ["a", "b"])
        self.assertEqual(self.holder.table, {"key": ["value"]})

    def testIsReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.holder.items = []

    def testRejectsNonStringName(self) -> None:
        with self.assertRaises(TypeError):
            mirror(1)


class RenameTest(TestCase):

    def testFunctionForm(self) -> None:
        def original():
            pass

        self.assertIs(rename(original, "renamed"), original)
        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testDecoratorForm(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")

    def testWrongArity(self) -> None:
        with self.assertRaises(TypeError):
            rename()


if __name__ == '__main__':
    unittest.main()
