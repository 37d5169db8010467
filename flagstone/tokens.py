r"""
Flagstone token classifier.

Anatomy of a command line (after the program name)
- an optional list of options,
- the optional end-of-options marker "--",
- an optional list of arguments.

Option shapes
- short options are prefaced with a single dash and made of one character
  (e.g., "-v"); several flags may be grouped into a compound ("-vh" is "-v -h").
- long options are prefaced with a double dash and made of one or more
  characters (e.g., "--input", "--log.level").
- anything after "--", or starting from the first token that is not an
  option, is an argument.

These predicates are the only definition of what a valid option name looks
like: declared names are validated with the very same functions (the prefix
is optional for that reason), so the declared and the recognized grammar
cannot drift apart.

Public API
- isoption(token)      -> bool
- isshort(token)       -> (bool, tuple[str, ...])
- islong(token)        -> (bool, str | None)
- isterminator(token)  -> bool
"""
import re

TERMINATOR = "--"

_OPTION = re.compile(r"--?.+", re.DOTALL)
_SHORT = re.compile(r"-?(?P<names>[A-Za-z0-9!?]+)")
_LONG = re.compile(r"(?:--)?(?P<name>[A-Za-z0-9!?][A-Za-z0-9_\-.]*)")


def isoption(token, /):
    """
    tell whether a token starts like an option specifier ("-x", "--x", ...).

    a lone "-" is not an option (conventionally it names stdin/stdout).
    a true result does not mean the specifier is well formed; see isshort()
    and islong() for that.
    """
    return _OPTION.fullmatch(token) is not None


def isshort(token, /):
    """
    match a short option specifier, splitting compounds.

    accepted forms
    - "-o" or "o"     → (True, ("o",))
    - "-vh" or "vh"   → (True, ("v", "h"))
    anything else (embedded dashes, dots, double dash, ...) → (False, ()).
    """
    if match := _SHORT.fullmatch(token):
        return True, tuple(match["names"])
    return False, ()


def islong(token, /):
    """
    match a long option specifier.

    accepted forms
    - "--option" or "option" → (True, "option")
    - "--o" or "o"           → (True, "o")
    rejected: names starting with "." or "-", three or more leading dashes,
    characters outside [A-Za-z0-9_-.] (plus "!" and "?" as first character).
    """
    if match := _LONG.fullmatch(token):
        return True, match["name"]
    return False, None


def isterminator(token, /):
    return token == TERMINATOR


__all__ = (
    "TERMINATOR",
    "isoption",
    "isshort",
    "islong",
    "isterminator",
)
