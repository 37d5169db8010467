r"""
Flagstone option declarations and specification index.

Overview
- Option: one declared option, made of an optional short name, an optional long
  name and a value holder. At least one name is required.
      Option("v", holder=Holder(TypeKind.BOOL))             # -v
      Option(long="input", holder=Holder(TypeKind.STRING))  # --input VALUE
      Option("p", "path", Holder(TypeKind.STRINGS))         # -p VALUE / --path VALUE (repeatable)
  Names are given without their dashes.

- SpecIndex: validates a sequence of options and indexes them by short and
  long name. It is rebuilt by every parse call, which also resets the runtime
  state of each option (set flag, first-use index) and every BOOL holder.

Validation (in declaration order; the first violation aborts)
1. at least one name                       → NoNameError
2. short name is one character             → ShortNameTooLongError
   made of [A-Za-z0-9!?]                   → ShortNameCharacterError
3. long name matches the long grammar      → LongNameCharacterError
4. holder is a flagstone Holder            → UnexpectedHolderTypeError
   (1-4 are wrapped into InvalidOptionError, chained to the cause)
5. short name not already declared         → DuplicatedShortNameError
6. long name not already declared          → DuplicatedLongNameError
7. holder not shared with an earlier option → ReusedValueHolderError

Every fault carries the 0-based declaration index as `index`.
"""
import functools
import operator
import re
from collections.abc import Iterable

from .faults import *
from .kinds import TypeKind, classify, constraints
from .tokens import isshort, islong
from .utils import *


class SpecType(type):
    """
    Metaclass that turns declarations into introspectable objects.

    Responsibilities
    - derive __typename__ from the class name (camel-case split with hyphens),
      used in messages and representations.
    - expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field.
    - provide stable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(short='v', long=None, holder=holder(kind=..., value=False), set=False)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Option(metaclass=SpecType):
    """
    Declared command-line option.

    Parameters
    - short: Unset | str
      Short name, without its dash ("v" for "-v"). An empty string counts as absent.
    - long: Unset | str
      Long name, without its dashes ("input" for "--input"). An empty string
      counts as absent.
    - holder: Holder
      The value container receiving the option's value(s). Its kind decides
      whether the option is a flag, a singleton or a repeatable option.

    Names and holder are only checked when the option is indexed (see
    SpecIndex), so that faults can report the declaration position. Passing
    a non-string name is a TypeError right away.

    Properties
    - short, long, holder: the declaration (read-only; absent names are None).
    - set: whether the option was used by the last parse.
    - index: raw token position of the first use in the last parse (or None).
    - kind, constraint: derived from the holder.
    """

    __introspectable__ = (
        "short",
        "long",
        "holder",
        "set",
        "index",
    )

    def __new__(cls, short=Unset, long=Unset, holder=Unset):
        for label, name in (("short", short), ("long", long)):
            if not isinstance(name, str | Unset):
                raise TypeError(f"{cls.__typename__} {label} name must be a string")

        self = super().__new__(cls)
        self._short = coalesce(short) or None
        self._long = coalesce(long) or None
        self._holder = coalesce(holder)
        self._set = False
        self._index = None
        return self

    @property
    def kind(self):
        return classify(self._holder)

    @property
    def constraint(self):
        return constraints(self.kind)

    @property
    def names(self):
        """
        The dashed names, short first ("-p", "--path").
        """
        return tuple(filter(None, (
            self._short and "-" + self._short,
            self._long and "--" + self._long,
        )))

    def __use__(self, index, /):
        """
        Runtime hook: mark the option as used at a raw token position.
        """
        if not self._set:
            self._index = index
        self._set = True

    def __reset__(self):
        """
        Runtime hook: clear the runtime state, and the value of a flag.
        """
        self._set = False
        self._index = None
        if self.kind is TypeKind.BOOL:
            self._holder.value = False


def _check_option(option):
    """
    Internal: validate the names and the holder of a single option.

    Raises an OptionDefinitionError subclass on the first violation.
    """
    if option.short is None and option.long is None:
        raise NoNameError(
            "no name (whether short or long) is specified for this option",
            title="option without name",
            code=FaultCode.NO_NAME,
            hint="give the option a short name, a long name, or both",
            docs=getdoc(FaultCode.NO_NAME),
        )

    if option.short is not None:
        if len(option.short) > 1:
            raise ShortNameTooLongError(
                "invalid short name %r: a short name is made of a single character" % option.short,
                title="short name too long",
                code=FaultCode.SHORT_NAME_TOO_LONG,
                hint="use a long name for %r instead" % option.short,
                name=option.short,
                docs=getdoc(FaultCode.SHORT_NAME_TOO_LONG),
            )
        if not isshort(option.short)[0]:
            raise ShortNameCharacterError(
                "invalid short name %r" % option.short,
                title="invalid short name",
                code=FaultCode.SHORT_NAME_CHARACTER,
                hint="short names are a letter, a digit, '!' or '?' (without the dash)",
                name=option.short,
                docs=getdoc(FaultCode.SHORT_NAME_CHARACTER),
            )

    if option.long is not None and islong(option.long)[1] != option.long:
        raise LongNameCharacterError(
            "invalid long name %r" % option.long,
            title="invalid long name",
            code=FaultCode.LONG_NAME_CHARACTER,
            hint="long names start with a letter, a digit, '!' or '?' and continue with "
                 "letters, digits, '_', '-' or '.' (without the dashes)",
            name=option.long,
            docs=getdoc(FaultCode.LONG_NAME_CHARACTER),
        )

    classify(option.holder)


class SpecIndex(metaclass=SpecType):
    """
    Validated index of declared options by short and long name.

    Parameters
    - options: Iterable[Option] (positional-only)
      The declarations, in order. Non-Option items are a TypeError.

    Properties
    - options: the declarations (read-only tuple).
    - shorts / longs: name → Option mappings (detached copies).

    Lookups
    - getshort(name) / getlong(name): the option, or None when unknown.

    Side effects
    - once every option is validated, each option's runtime state is reset
      and BOOL holders are set to False. Other holders are left as they are.
    """

    __introspectable__ = (
        "options",
        "shorts",
        "longs",
    )

    def __new__(cls, options, /):
        if isinstance(options, str) or not isinstance(options, Iterable):
            raise TypeError(f"{cls.__typename__} options must be an iterable of options")
        options = tuple(options)
        for option in options:
            if not isinstance(option, Option):
                raise TypeError(f"{cls.__typename__} options must be Option instances, got {type(option).__name__!r}")

        shorts = {}
        longs = {}
        holders = {}

        for index, option in enumerate(options):
            try:
                _check_option(option)
            except OptionDefinitionError as error:
                raise InvalidOptionError(
                    "invalid option at %s position of the specification: %s" % (ordinal(index + 1), error.message),
                    title="invalid option",
                    code=FaultCode.INVALID_OPTION,
                    hint=error.options.get("hint"),
                    index=index,
                    option=option,
                    cause=error,
                    docs=getdoc(FaultCode.INVALID_OPTION),
                ) from error

            if option.short is not None:
                if option.short in shorts:
                    raise DuplicatedShortNameError(
                        "duplicated short name %r at %s position of the specification" % (option.short, ordinal(index + 1)),
                        title="duplicated short name",
                        code=FaultCode.DUPLICATED_SHORT_NAME,
                        hint="each short name must be declared once",
                        name=option.short,
                        index=index,
                        option=option,
                        docs=getdoc(FaultCode.DUPLICATED_SHORT_NAME),
                    )
                shorts[option.short] = option

            if option.long is not None:
                if option.long in longs:
                    raise DuplicatedLongNameError(
                        "duplicated long name %r at %s position of the specification" % (option.long, ordinal(index + 1)),
                        title="duplicated long name",
                        code=FaultCode.DUPLICATED_LONG_NAME,
                        hint="each long name must be declared once",
                        name=option.long,
                        index=index,
                        option=option,
                        docs=getdoc(FaultCode.DUPLICATED_LONG_NAME),
                    )
                longs[option.long] = option

            # holders are compared by identity: two options must never write the same storage
            if (previous := holders.setdefault(id(option.holder), index)) != index:
                raise ReusedValueHolderError(
                    "the value holder of the option at %s position of the specification is already used by the %s option"
                    % (ordinal(index + 1), ordinal(previous + 1)),
                    title="reused value holder",
                    code=FaultCode.REUSED_VALUE_HOLDER,
                    hint="give every option its own Holder",
                    index=index,
                    previous=previous,
                    option=option,
                    docs=getdoc(FaultCode.REUSED_VALUE_HOLDER),
                )

        for option in options:
            option.__reset__()

        self = super().__new__(cls)
        self._options = options
        self._shorts = shorts
        self._longs = longs
        return self

    def getshort(self, name, /):
        return self._shorts.get(name)

    def getlong(self, name, /):
        return self._longs.get(name)


__all__ = (
    "Option",
    "SpecIndex",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del SpecType
