# python
"""
Option declaration and specification index tests.

Scope
- Option: construction, read-only declaration, derived kind/constraint/names.
- SpecIndex: every validation rule in order, index reporting, cause chaining,
  lookups, and the reset of runtime state and flag holders.

Conventions
- Test method names follow CamelCase per project convention.
- Every holder is created fresh inside the test that uses it.
"""

import unittest
from unittest import TestCase

from flagstone import (
    Holder,
    Option,
    SpecIndex,
    TypeKind,
    TypeConstraint,
    FaultCode,
    SpecError,
    ParseError,
    InvalidOptionError,
    NoNameError,
    ShortNameTooLongError,
    ShortNameCharacterError,
    LongNameCharacterError,
    UnexpectedHolderTypeError,
    DuplicatedShortNameError,
    DuplicatedLongNameError,
    ReusedValueHolderError,
)


class TestOption(TestCase):
    def testDeclaration(self):
        holder = Holder(TypeKind.STRINGS)
        option = Option("p", "path", holder)
        self.assertEqual(option.short, "p")
        self.assertEqual(option.long, "path")
        self.assertIs(option.holder, holder)
        self.assertFalse(option.set)
        self.assertIsNone(option.index)

    def testEmptyNamesAreAbsent(self):
        option = Option("", "input", Holder(TypeKind.STRING))
        self.assertIsNone(option.short)
        self.assertEqual(option.names, ("--input",))

    def testDerivedProperties(self):
        option = Option("v", holder=Holder(TypeKind.BOOL))
        self.assertIs(option.kind, TypeKind.BOOL)
        self.assertEqual(option.constraint, TypeConstraint(singleton=True, requires_value=False))
        self.assertEqual(option.names, ("-v",))
        self.assertEqual(Option("p", "path", Holder(TypeKind.STRINGS)).names, ("-p", "--path"))

    def testDeclarationIsReadOnly(self):
        option = Option("v", holder=Holder(TypeKind.BOOL))
        for name in ("short", "long", "holder", "set", "index"):
            with self.subTest(name=name):
                with self.assertRaises(AttributeError):
                    setattr(option, name, None)

    def testNonStringNamesRejected(self):
        with self.assertRaises(TypeError):
            Option(1, holder=Holder(TypeKind.BOOL))
        with self.assertRaises(TypeError):
            Option(long=b"input", holder=Holder(TypeKind.STRING))

    def testRepr(self):
        text = repr(Option("v", holder=Holder(TypeKind.BOOL)))
        self.assertTrue(text.startswith("option(short='v', long=None, holder=holder("))
        self.assertTrue(text.endswith("set=False, index=None)"))


class TestSpecIndex(TestCase):
    def testLookups(self):
        verbose = Option("v", holder=Holder(TypeKind.BOOL))
        path = Option("p", "path", Holder(TypeKind.STRINGS))
        index = SpecIndex([verbose, path])
        self.assertIs(index.getshort("v"), verbose)
        self.assertIs(index.getshort("p"), path)
        self.assertIs(index.getlong("path"), path)
        self.assertIsNone(index.getlong("v"))
        self.assertIsNone(index.getshort("x"))
        self.assertEqual(index.options, (verbose, path))
        self.assertEqual(index.shorts, {"v": verbose, "p": path})
        self.assertEqual(index.longs, {"path": path})

    def testMappingsAreDetached(self):
        index = SpecIndex([Option("v", holder=Holder(TypeKind.BOOL))])
        index.shorts.clear()
        self.assertIsNotNone(index.getshort("v"))

    def testEmptySpecification(self):
        index = SpecIndex([])
        self.assertEqual(index.options, ())
        self.assertIsNone(index.getshort("v"))

    def testResetsRuntimeStateAndFlags(self):
        flag = Holder(TypeKind.BOOL, True)
        text = Holder(TypeKind.STRING, "kept")
        option = Option("v", holder=flag)
        option.__use__(3)
        self.assertTrue(option.set)
        SpecIndex([option, Option("i", holder=text)])
        self.assertFalse(option.set)
        self.assertIsNone(option.index)
        self.assertIs(flag.value, False)
        self.assertEqual(text.value, "kept")

    def testUseRecordsFirstIndex(self):
        option = Option("p", holder=Holder(TypeKind.STRINGS))
        option.__use__(1)
        option.__use__(4)
        self.assertEqual(option.index, 1)

    def testTypeMisuse(self):
        with self.assertRaises(TypeError):
            SpecIndex("v")
        with self.assertRaises(TypeError):
            SpecIndex([("v", Holder(TypeKind.BOOL))])


class TestSpecValidation(TestCase):
    def assertInvalidOption(self, options, index, cause, code):
        with self.assertRaises(InvalidOptionError) as context:
            SpecIndex(options)
        fault = context.exception
        self.assertEqual(fault.options["index"], index)
        self.assertEqual(fault.options["code"], FaultCode.INVALID_OPTION)
        self.assertIsInstance(fault.__cause__, cause)
        self.assertIs(fault.options["cause"], fault.__cause__)
        self.assertEqual(fault.__cause__.options["code"], code)
        return fault

    def testNoName(self):
        self.assertInvalidOption(
            [Option("v", holder=Holder(TypeKind.BOOL)), Option(holder=Holder(TypeKind.BOOL))],
            1, NoNameError, FaultCode.NO_NAME,
        )

    def testEmptyNamesCountAsNoName(self):
        self.assertInvalidOption([Option("", "", Holder(TypeKind.BOOL))], 0, NoNameError, FaultCode.NO_NAME)

    def testShortNameTooLong(self):
        self.assertInvalidOption(
            [Option("vv", holder=Holder(TypeKind.BOOL))], 0, ShortNameTooLongError, FaultCode.SHORT_NAME_TOO_LONG,
        )

    def testShortNameCharacter(self):
        for name in ("-", ".", "_", "é"):
            with self.subTest(name=name):
                self.assertInvalidOption(
                    [Option(name, holder=Holder(TypeKind.BOOL))],
                    0, ShortNameCharacterError, FaultCode.SHORT_NAME_CHARACTER,
                )

    def testLongNameCharacter(self):
        for name in (".o", "-option", "a b", "a=b"):
            with self.subTest(name=name):
                self.assertInvalidOption(
                    [Option(long=name, holder=Holder(TypeKind.STRING))],
                    0, LongNameCharacterError, FaultCode.LONG_NAME_CHARACTER,
                )

    def testDashedLongNameRejected(self):
        fault = self.assertInvalidOption(
            [Option(long="--input", holder=Holder(TypeKind.STRING))],
            0, LongNameCharacterError, FaultCode.LONG_NAME_CHARACTER,
        )
        self.assertEqual(fault.__cause__.options["name"], "--input")

    def testUnexpectedHolderType(self):
        fault = self.assertInvalidOption(
            [Option("v", holder=Holder(TypeKind.BOOL)), Option("x", holder=[])],
            1, UnexpectedHolderTypeError, FaultCode.UNEXPECTED_HOLDER_TYPE,
        )
        self.assertIn("second position", fault.message)

    def testMissingHolder(self):
        self.assertInvalidOption(
            [Option("v")], 0, UnexpectedHolderTypeError, FaultCode.UNEXPECTED_HOLDER_TYPE,
        )

    def testDuplicatedShortName(self):
        with self.assertRaises(DuplicatedShortNameError) as context:
            SpecIndex([
                Option("v", holder=Holder(TypeKind.BOOL)),
                Option("i", "input", Holder(TypeKind.STRING)),
                Option("v", "verbose", Holder(TypeKind.BOOL)),
            ])
        self.assertEqual(context.exception.options["index"], 2)
        self.assertEqual(context.exception.options["name"], "v")

    def testDuplicatedLongName(self):
        with self.assertRaises(DuplicatedLongNameError) as context:
            SpecIndex([
                Option(long="input", holder=Holder(TypeKind.STRING)),
                Option("i", "input", Holder(TypeKind.STRING)),
            ])
        self.assertEqual(context.exception.options["index"], 1)
        self.assertEqual(context.exception.options["code"], FaultCode.DUPLICATED_LONG_NAME)

    def testReusedValueHolder(self):
        shared = Holder(TypeKind.STRING)
        with self.assertRaises(ReusedValueHolderError) as context:
            SpecIndex([
                Option("a", holder=shared),
                Option("b", holder=Holder(TypeKind.STRING)),
                Option("c", holder=shared),
            ])
        self.assertEqual(context.exception.options["index"], 2)
        self.assertEqual(context.exception.options["previous"], 0)

    def testEqualButDistinctHoldersAccepted(self):
        SpecIndex([Option("a", holder=Holder(TypeKind.STRING)), Option("b", holder=Holder(TypeKind.STRING))])

    def testFirstViolationWins(self):
        with self.assertRaises(InvalidOptionError) as context:
            SpecIndex([
                Option("v", holder=Holder(TypeKind.BOOL)),
                Option("vv", holder=Holder(TypeKind.BOOL)),
                Option("v", holder=Holder(TypeKind.BOOL)),
            ])
        self.assertEqual(context.exception.options["index"], 1)

    def testNoResetWhenInvalid(self):
        flag = Holder(TypeKind.BOOL, True)
        with self.assertRaises(SpecError):
            SpecIndex([Option("v", holder=flag), Option(holder=Holder(TypeKind.BOOL))])
        self.assertIs(flag.value, True)

    def testSpecErrorsAreNotParseErrors(self):
        for fault in (InvalidOptionError, DuplicatedShortNameError, DuplicatedLongNameError, ReusedValueHolderError):
            with self.subTest(fault=fault):
                self.assertTrue(issubclass(fault, SpecError))
                self.assertFalse(issubclass(fault, ParseError))


if __name__ == "__main__":
    unittest.main()
