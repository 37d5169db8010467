"""
Flagstone type descriptor table.

Every value holder is created for exactly one TypeKind, chosen explicitly by
the caller (Holder(TypeKind.INT8)). The kind alone decides:

- singleton: whether the option may appear at most once on the command line;
- requires_value: whether the option consumes the following token as its value.

    kind                    singleton  requires_value
    BOOL                    yes        no   (flag)
    STRING, INT*, UINT*,
    FLOAT32, FLOAT64        yes        yes
    repeated kinds (…S)     no         yes  (one value per occurrence)

The table is exhaustive: the registry, the coercion layer and the parser all
consult it, so a new kind must be added here, in _ELEMENTS and in the holder
converters at the same time.
"""
import functools
from collections import namedtuple
from enum import IntEnum

from .faults import FaultCode, UnexpectedHolderTypeError, getdoc


class TypeKind(IntEnum):
    """
    closed enumeration of the supported value-holder kinds.

    scalar kinds are numbered 1xx, repeated kinds 2xx with the same low digits
    as their element kind (STRINGS = 202 repeats STRING = 102).
    """
    BOOL     = 101
    STRING   = 102
    INT      = 110
    INT8     = 111
    INT16    = 112
    INT32    = 113
    INT64    = 114
    UINT     = 120
    UINT8    = 121
    UINT16   = 122
    UINT32   = 123
    UINT64   = 124
    FLOAT32  = 131
    FLOAT64  = 132

    STRINGS  = 202
    INTS     = 210
    INT8S    = 211
    INT16S   = 212
    INT32S   = 213
    INT64S   = 214
    UINTS    = 220
    UINT8S   = 221
    UINT16S  = 222
    UINT32S  = 223
    UINT64S  = 224
    FLOAT32S = 231
    FLOAT64S = 232


TypeConstraint = namedtuple("TypeConstraint", ("singleton", "requires_value"))

_FLAG = TypeConstraint(singleton=True, requires_value=False)
_SINGLETON = TypeConstraint(singleton=True, requires_value=True)
_REPEATABLE = TypeConstraint(singleton=False, requires_value=True)

_ELEMENTS = {
    TypeKind.STRINGS:  TypeKind.STRING,
    TypeKind.INTS:     TypeKind.INT,
    TypeKind.INT8S:    TypeKind.INT8,
    TypeKind.INT16S:   TypeKind.INT16,
    TypeKind.INT32S:   TypeKind.INT32,
    TypeKind.INT64S:   TypeKind.INT64,
    TypeKind.UINTS:    TypeKind.UINT,
    TypeKind.UINT8S:   TypeKind.UINT8,
    TypeKind.UINT16S:  TypeKind.UINT16,
    TypeKind.UINT32S:  TypeKind.UINT32,
    TypeKind.UINT64S:  TypeKind.UINT64,
    TypeKind.FLOAT32S: TypeKind.FLOAT32,
    TypeKind.FLOAT64S: TypeKind.FLOAT64,
}

_CONSTRAINTS = {
    kind: _FLAG if kind is TypeKind.BOOL else _REPEATABLE if kind in _ELEMENTS else _SINGLETON
    for kind in TypeKind
}


def _checked(kind):
    if not isinstance(kind, TypeKind):
        raise TypeError("expected a TypeKind, got %r" % type(kind).__name__)
    return kind


@functools.cache
def constraints(kind, /):
    """
    return the TypeConstraint (singleton, requires_value) of a kind.
    """
    return _CONSTRAINTS[_checked(kind)]


def isrepeated(kind, /):
    return _checked(kind) in _ELEMENTS


def element(kind, /):
    """
    return the scalar kind stored by a repeated kind (identity for scalar kinds).
    """
    return _ELEMENTS.get(_checked(kind), kind)


def classify(holder, /):
    """
    return the TypeKind of a value holder.

    a holder advertises its kind through a __kind__() hook (see Holder).
    anything else, including the Holder class itself or a hook returning
    something other than a TypeKind, is an unexpected holder type.
    """
    try:
        kind = holder.__kind__()
    except (AttributeError, TypeError):
        kind = None
    if not isinstance(kind, TypeKind):
        raise UnexpectedHolderTypeError(
            "unexpected value holder of type %r" % type(holder).__name__,
            title="unexpected holder type",
            code=FaultCode.UNEXPECTED_HOLDER_TYPE,
            hint="use a flagstone Holder, e.g. Holder(TypeKind.STRING)",
            holder=holder,
            docs=getdoc(FaultCode.UNEXPECTED_HOLDER_TYPE),
        )
    return kind


__all__ = (
    "TypeKind",
    "TypeConstraint",
    "constraints",
    "isrepeated",
    "element",
    "classify",
)
