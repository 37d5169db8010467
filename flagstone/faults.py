"""
Flagstone faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault. Codes are
  grouped by domain to keep copy consistent and make logs/searches predictable.
- FaultException: base type that carries message + options and knows how to
  render itself (rich) in a friendly, lowercased, and actionable way.
- SpecError / ParseError: the two families. A SpecError means the program
  declared its options wrongly; a ParseError means the user's command line is
  invalid. Callers can tell one from the other with a single except clause.
- trigger(): central entry point to surface any fault (raise, or render and exit
  in shell mode).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: token-level faults include the ordinal position of
  the offending token (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The registry and the coercion layer raise faults directly.
- The parser merges runtime options (shell/fancy/colorful/prog, token index)
  into the fault and calls trigger().
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich.
"""
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - command line (11xxx), raised while expanding the user's tokens
      • switches (1111x): UNKNOWN_SHORT_OPTION, UNKNOWN_LONG_OPTION,
        INVALID_OPTION_SPECIFIER, DUPLICATED_FLAG_OPTION,
        DUPLICATED_SINGLETON_OPTION, VALUE_OPTION_IN_COMPOUND
      • values (1112x): UNEXPECTED_END_OF_OPTIONS_MARKER,
        VALUE_EXPECTED_BUT_OPTION_FOUND
      • coercion (1113x): BOOL_EXPECTED, STRING_EXPECTED, NUMBER_SYNTAX, NUMBER_RANGE
    - specification (21xxx), raised while indexing the declared options
      • index (2110x): INVALID_OPTION, DUPLICATED_SHORT_NAME,
        DUPLICATED_LONG_NAME, REUSED_VALUE_HOLDER
      • definition (2111x): NO_NAME, SHORT_NAME_TOO_LONG,
        SHORT_NAME_CHARACTER, LONG_NAME_CHARACTER, UNEXPECTED_HOLDER_TYPE

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- command line: switches (1111x) ---
    UNKNOWN_SHORT_OPTION             = 11111
    UNKNOWN_LONG_OPTION              = 11112
    INVALID_OPTION_SPECIFIER         = 11113
    DUPLICATED_FLAG_OPTION           = 11114
    DUPLICATED_SINGLETON_OPTION      = 11115
    VALUE_OPTION_IN_COMPOUND         = 11116

    # --- command line: values (1112x) ---
    UNEXPECTED_END_OF_OPTIONS_MARKER = 11121
    VALUE_EXPECTED_BUT_OPTION_FOUND  = 11122

    # --- command line: coercion (1113x) ---
    BOOL_EXPECTED                    = 11131
    STRING_EXPECTED                  = 11132
    NUMBER_SYNTAX                    = 11133
    NUMBER_RANGE                     = 11134

    # --- specification: index (2110x) ---
    INVALID_OPTION                   = 21101
    DUPLICATED_SHORT_NAME            = 21102
    DUPLICATED_LONG_NAME             = 21103
    REUSED_VALUE_HOLDER              = 21104

    # --- specification: definition (2111x) ---
    NO_NAME                          = 21111
    SHORT_NAME_TOO_LONG              = 21112
    SHORT_NAME_CHARACTER             = 21113
    LONG_NAME_CHARACTER              = 21114
    UNEXPECTED_HOLDER_TYPE           = 21115

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class FaultException(Exception):
    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError("fault message must be a string")
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", coalesce(
            self.options.get("prog", Unset),
            os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "flagstone"
        )), styler("prog-name"))

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", type(self).__name__)).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, message=Unset, **overrides):
        assert not unused, "positional arguments are not allowed"
        fault = type(self)(coalesce(message, self.message), **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


# --- specification faults (the program declared its options wrongly) ---

class SpecError(FaultException): ...
class InvalidOptionError(SpecError): ...
class DuplicatedShortNameError(SpecError): ...
class DuplicatedLongNameError(SpecError): ...
class ReusedValueHolderError(SpecError): ...

class OptionDefinitionError(FaultException): ...
class NoNameError(OptionDefinitionError): ...
class ShortNameTooLongError(OptionDefinitionError): ...
class ShortNameCharacterError(OptionDefinitionError): ...
class LongNameCharacterError(OptionDefinitionError): ...
class UnexpectedHolderTypeError(OptionDefinitionError): ...


# --- command line faults (the user's tokens are invalid) ---

class ParseError(FaultException): ...

class UnknownOptionError(ParseError): ...
class UnknownShortOptionError(UnknownOptionError): ...
class UnknownLongOptionError(UnknownOptionError): ...

class DuplicatedOptionError(ParseError): ...
class DuplicatedFlagOptionError(DuplicatedOptionError): ...
class DuplicatedSingletonOptionError(DuplicatedOptionError): ...

class ValueOptionInCompoundError(ParseError): ...
class InvalidOptionSpecifierError(ParseError): ...
class UnexpectedEndOfOptionsMarkerError(ParseError): ...
class ValueExpectedButOptionFoundError(ParseError): ...

class CoercionError(ParseError): ...
class BoolExpectedError(CoercionError): ...
class StringExpectedError(CoercionError): ...
class NumberSyntaxError(CoercionError): ...
class NumberRangeError(CoercionError): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see FaultException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console and the process exits
      with status 1; otherwise, the fault is raised.

    typical options
    - shell, fancy, colorful, prog, title, code, hint, docs, and any other
      context the reporter may want to carry (name, token, index, ...).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "FaultException",
    "SpecError",
    "InvalidOptionError",
    "DuplicatedShortNameError",
    "DuplicatedLongNameError",
    "ReusedValueHolderError",
    "OptionDefinitionError",
    "NoNameError",
    "ShortNameTooLongError",
    "ShortNameCharacterError",
    "LongNameCharacterError",
    "UnexpectedHolderTypeError",
    "ParseError",
    "UnknownOptionError",
    "UnknownShortOptionError",
    "UnknownLongOptionError",
    "DuplicatedOptionError",
    "DuplicatedFlagOptionError",
    "DuplicatedSingletonOptionError",
    "ValueOptionInCompoundError",
    "InvalidOptionSpecifierError",
    "UnexpectedEndOfOptionsMarkerError",
    "ValueExpectedButOptionFoundError",
    "CoercionError",
    "BoolExpectedError",
    "StringExpectedError",
    "NumberSyntaxError",
    "NumberRangeError",
    "trigger",
    "getdoc",
)
