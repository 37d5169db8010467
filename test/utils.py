# python
"""
Utility helper tests.

Scope
- Unset sentinel: singleton, falsy, sealed, usable in isinstance unions.
- coalesce, rename, mirror and ordinal.

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from flagstone.utils import Unset, UnsetType, coalesce, rename, mirror, ordinal


class TestUnset(TestCase):
    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyButNotNone(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testSealed(self):
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testUnion(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(1, str | Unset)


class TestCoalesce(TestCase):
    def testUnsetIsReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testFalseyValuesArePreserved(self):
        for value in (None, 0, "", [], False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class TestRename(TestCase):
    def testDirectForm(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testDecoratorForm(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testMisuse(self):
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):
    def testReadOnlyDetachedCopies(self):
        class Sample:
            names = mirror("names")
            table = mirror("table")

            def __init__(self):
                self._names = ["a", ["b"]]
                self._table = {"k": {1, 2}}

        sample = Sample()
        self.assertEqual(sample.names, ("a", ("b",)))
        self.assertEqual(sample.table, {"k": frozenset({1, 2})})
        sample.table["k"] = None
        self.assertEqual(sample._table, {"k": {1, 2}})
        with self.assertRaises(AttributeError):
            sample.names = ()

    def testNameMustBeAString(self):
        with self.assertRaises(TypeError):
            mirror(1)


class TestOrdinal(TestCase):
    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        cases = {11: "11th", 12: "12th", 13: "13th", 21: "21st", 22: "22nd", 23: "23rd", 24: "24th", 111: "111th", 101: "101st"}
        for number, label in cases.items():
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), label)


if __name__ == "__main__":
    unittest.main()
