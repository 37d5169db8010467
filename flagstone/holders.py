r"""
Flagstone value holders and value coercion.

Overview
- Holder: a typed, mutable value container bound to one option. Its kind is
  chosen explicitly at creation time and never inferred from its contents:
      verbose = Holder(TypeKind.BOOL)
      level   = Holder(TypeKind.UINT8)
      paths   = Holder(TypeKind.STRINGS)
  After a successful parse, holder.value carries the result:
  • BOOL → True/False (reset to False by every parse)
  • scalar kinds → the converted value, or the initial value (None by default)
  • repeated kinds → a list with one element per occurrence, or None when unused

- coerce(holder, value): the coercion engine. Converts a textual value (or the
  boolean presence of a flag) and assigns it, or appends it for repeated kinds.

Conversion rules
- STRING: stored verbatim.
- signed integers: base 10, optional sign, ASCII digits only; the result must
  fit the exact bit width of the kind (INT/INTS use the native word size).
- unsigned integers: ASCII digits only (no sign).
- floats: decimal with optional exponent ("1", "-2.5", ".5", "1e-3"),
  "inf"/"infinity"/"nan" (any case, optional sign) and hexadecimal
  ("0x1.8p3"). FLOAT32 values are rounded to single precision.
- malformed text → NumberSyntaxError; values outside the kind's range →
  NumberRangeError. The holder is never touched on failure, and elements
  already appended to a repeated holder are kept.

Holders are not reset for you between parses (except BOOL holders); call
holder.clear() when reusing repeated or scalar holders.
"""
import functools
import math
import operator
import re
import struct

from .faults import *
from .kinds import TypeKind, classify, element, isrepeated
from .utils import Unset, coalesce, mirror

_NATIVE = struct.calcsize("n") * 8

_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"[0-9]+")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SPECIAL = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)
_HEXADECIMAL = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+")


def _syntax(text, kind):
    return NumberSyntaxError(
        "cannot parse %r as %s: invalid syntax" % (text, kind.name.lower()),
        title="invalid number",
        code=FaultCode.NUMBER_SYNTAX,
        hint="write the value as a plain base-10 number",
        value=text,
        kind=kind,
        docs=getdoc(FaultCode.NUMBER_SYNTAX),
    )


def _range(text, kind):
    return NumberRangeError(
        "cannot parse %r as %s: value out of range" % (text, kind.name.lower()),
        title="number out of range",
        code=FaultCode.NUMBER_RANGE,
        hint="use a value that fits in %s" % kind.name.lower(),
        value=text,
        kind=kind,
        docs=getdoc(FaultCode.NUMBER_RANGE),
    )


def _string(text, kind, /):
    return text


def _signed(text, kind, /, *, bits):
    if not _SIGNED.fullmatch(text):
        raise _syntax(text, kind)
    value = int(text)
    if not -(1 << bits - 1) <= value < 1 << bits - 1:
        raise _range(text, kind)
    return value


def _unsigned(text, kind, /, *, bits):
    if not _UNSIGNED.fullmatch(text):
        raise _syntax(text, kind)
    value = int(text)
    if value >= 1 << bits:
        raise _range(text, kind)
    return value


def _float(text, kind, /, *, single):
    if _DECIMAL.fullmatch(text) or _SPECIAL.fullmatch(text):
        value = float(text)
    elif _HEXADECIMAL.fullmatch(text):
        try:
            value = float.fromhex(text)
        except OverflowError:
            raise _range(text, kind) from None
    else:
        raise _syntax(text, kind)

    # a finite literal must not overflow to infinity
    if math.isinf(value) and not _SPECIAL.fullmatch(text):
        raise _range(text, kind)
    if single:
        try:
            value, = struct.unpack("f", struct.pack("f", value))
        except OverflowError:
            raise _range(text, kind) from None
    return value


_CONVERTERS = {
    TypeKind.STRING:  _string,
    TypeKind.INT:     functools.partial(_signed, bits=_NATIVE),
    TypeKind.INT8:    functools.partial(_signed, bits=8),
    TypeKind.INT16:   functools.partial(_signed, bits=16),
    TypeKind.INT32:   functools.partial(_signed, bits=32),
    TypeKind.INT64:   functools.partial(_signed, bits=64),
    TypeKind.UINT:    functools.partial(_unsigned, bits=_NATIVE),
    TypeKind.UINT8:   functools.partial(_unsigned, bits=8),
    TypeKind.UINT16:  functools.partial(_unsigned, bits=16),
    TypeKind.UINT32:  functools.partial(_unsigned, bits=32),
    TypeKind.UINT64:  functools.partial(_unsigned, bits=64),
    TypeKind.FLOAT32: functools.partial(_float, single=True),
    TypeKind.FLOAT64: functools.partial(_float, single=False),
}


def convert(kind, text, /):
    """
    convert a textual value according to a kind, without storing it.

    for repeated kinds the element rule applies. BOOL has no textual form and
    raises BoolExpectedError.
    """
    if element(kind) is TypeKind.BOOL:
        raise BoolExpectedError(
            "expected a boolean, got %r" % text,
            title="boolean expected",
            code=FaultCode.BOOL_EXPECTED,
            hint="flags do not take values; remove the value",
            value=text,
            kind=kind,
            docs=getdoc(FaultCode.BOOL_EXPECTED),
        )
    if not isinstance(text, str):
        raise StringExpectedError(
            "expected a string, got %r" % type(text).__name__,
            title="string expected",
            code=FaultCode.STRING_EXPECTED,
            hint="pass the raw command-line text",
            value=text,
            kind=kind,
            docs=getdoc(FaultCode.STRING_EXPECTED),
        )
    return _CONVERTERS[element(kind)](text, element(kind))


class Holder:
    """
    Typed value container bound to a single option.

    Parameters
    - kind: TypeKind (positional-only)
      The declared kind; decides cardinality, value requirement and conversion.
    - value: Any (positional-only, optional)
      Initial value. Defaults to False for BOOL and None otherwise. For
      repeated kinds, a provided initial value must be a list; it is extended
      in place.

    Properties
    - kind: read-only.
    - value: the current value (read/write).
    """

    __slots__ = ("_kind", "value")

    kind = mirror("kind")

    def __init__(self, kind, value=Unset, /):
        if not isinstance(kind, TypeKind):
            raise TypeError("holder kind must be a TypeKind")
        if value is not Unset and isrepeated(kind) and not isinstance(value, list | None):
            raise TypeError("initial value of a repeated holder must be a list")
        self._kind = kind
        self.value = coalesce(value, False if kind is TypeKind.BOOL else None)

    def __kind__(self):
        """
        Introspection hook: advertise the declared kind (see kinds.classify).
        """
        return self._kind

    def clear(self):
        """
        Reset the value to its blank state (False for BOOL, None otherwise).
        """
        self.value = False if self._kind is TypeKind.BOOL else None

    def __repr__(self):
        return "holder(%s)" % ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))

    def __rich_repr__(self):
        yield "kind", self._kind
        yield "value", self.value


def coerce(holder, value, /):
    """
    convert and store a value into a holder.

    - BOOL holders accept only a bool (flags receive True on use).
    - other holders accept only text, converted with convert(); scalar kinds
      are assigned, repeated kinds append (the list is created on first use).

    raises
    - UnexpectedHolderTypeError: not a holder.
    - BoolExpectedError / StringExpectedError: wrong input type.
    - NumberSyntaxError / NumberRangeError: invalid numeric text.
    """
    kind = classify(holder)

    if kind is TypeKind.BOOL:
        if not isinstance(value, bool):
            raise BoolExpectedError(
                "expected a boolean, got %r" % value,
                title="boolean expected",
                code=FaultCode.BOOL_EXPECTED,
                hint="flags do not take values; remove the value",
                value=value,
                kind=kind,
                docs=getdoc(FaultCode.BOOL_EXPECTED),
            )
        holder.value = value
        return

    result = convert(kind, value)
    if not isrepeated(kind):
        holder.value = result
    elif holder.value is None:
        holder.value = [result]
    else:
        holder.value.append(result)


__all__ = (
    "Holder",
    "convert",
    "coerce",
)
