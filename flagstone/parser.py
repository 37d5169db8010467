"""
Flagstone expansion engine: raw tokens in, canonical tokens, arguments and
populated holders out.

What this module provides
- parse(tokens, options, /, **config): one-shot helper.
- Parser: the same engine bound to a list of options and a rendering
  configuration, reusable across calls.
- ParseResult: (expanded, arguments) named tuple.

How a command line is read
- tokens are consumed left to right, one at a time, in one of two states:
  • EXPECTING_TOKEN: the next token may be an option, the "--" marker or the
    first argument.
  • EXPECTING_VALUE: the previous token named an option that takes a value;
    this token is that value.
- "-vh" is a compound of the flags -v and -h; only flags can be grouped.
- "--" ends the options: it is kept in the expansion, and every later token
  is an argument, even when it looks like an option.
- the first token that does not look like an option ends the options too; it
  and every later token are arguments.

Expansion
- the expansion is the canonical form of the command line: compounds split
  into single options ("-vh" → "-v", "-h"), option/value pairs kept in place,
  the arguments (and the marker, when present) copied verbatim.

Faults
- the specification is indexed first (SpecError family), then the tokens are
  read (ParseError family). The first fault aborts the whole parse.
- with shell=True faults are rendered on stderr with rich and the process
  exits with status 1; otherwise they are raised.

Quick example
    >>> verbose, paths = Holder(TypeKind.BOOL), Holder(TypeKind.STRINGS)
    >>> parse(["-v", "-p", "/a", "--path", "/b", "x"], [
    ...     Option("v", holder=verbose),
    ...     Option("p", "path", paths),
    ... ])
    ParseResult(expanded=('-v', '-p', '/a', '--path', '/b', 'x'), arguments=('x',))
"""
from collections import namedtuple
from collections.abc import Iterable
from enum import Enum, auto

from .faults import *
from .faults import trigger as _trigger
from .holders import coerce
from .registry import SpecIndex
from .tokens import isoption, isshort, islong, isterminator
from .utils import *

ParseResult = namedtuple("ParseResult", ("expanded", "arguments"))


class State(Enum):
    EXPECTING_TOKEN = auto()
    EXPECTING_VALUE = auto()


class Parser:
    """
    Expansion engine bound to a specification.

    Parameters
    - options: Iterable[Option] (positional-only)
      The declared options. Kept as given; validated by every parse().
    - shell: bool
      Render faults on stderr and exit(1) instead of raising them.
    - fancy: bool
      Render faults inside a panel.
    - colorful: bool
      Colorize rendered faults (styles can be overridden via __styles__ in __main__).
    - prog: Unset | str
      Program name shown in rendered faults (defaults to __prog__ in __main__,
      then to the basename of sys.argv[0]).

    Properties (read-only)
    - options, shell, fancy, colorful, prog
    """

    options = mirror("options")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    prog = mirror("prog")

    def __init__(self, options, /, *, shell=False, fancy=False, colorful=False, prog=Unset):
        if isinstance(options, str) or not isinstance(options, Iterable):
            raise TypeError("parser options must be an iterable of options")
        if not isinstance(prog, str | Unset):
            raise TypeError("parser 'prog' must be a string")
        self._options = tuple(options)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._prog = prog

    def __repr__(self):
        return "parser(options=%r, shell=%r)" % (self._options, self._shell)

    def trigger(self, fault, /, **options):
        """
        surface a fault with this parser's rendering configuration merged in.
        """
        _trigger(fault, **options, shell=self._shell, fancy=self._fancy, colorful=self._colorful, prog=self._prog)

    def _record(self, option, name, label, index):
        """
        mark an option as used, enforcing its cardinality.

        flags and value-taking singletons can be used once; repeatable options
        any number of times. the fault reports the second occurrence as `index`
        and the first one as `previous`.
        """
        constraint = option.constraint
        if option.set and (constraint.singleton or not constraint.requires_value):
            if not constraint.requires_value:
                self.trigger(DuplicatedFlagOptionError(
                    "duplicated use of flag option %r at %s position (first used at %s position)"
                    % (label, ordinal(index + 1), ordinal(option.index + 1)),
                    title="duplicated flag",
                    code=FaultCode.DUPLICATED_FLAG_OPTION,
                    hint="use %s only once" % " or ".join(option.names),
                    name=name,
                    option=option,
                    index=index,
                    previous=option.index,
                    docs=getdoc(FaultCode.DUPLICATED_FLAG_OPTION),
                ))
            self.trigger(DuplicatedSingletonOptionError(
                "duplicated use of non flag option %r at %s position (first used at %s position)"
                % (label, ordinal(index + 1), ordinal(option.index + 1)),
                title="duplicated option",
                code=FaultCode.DUPLICATED_SINGLETON_OPTION,
                hint="%s accepts a single value; use %s only once" % (label, " or ".join(option.names)),
                name=name,
                option=option,
                index=index,
                previous=option.index,
                docs=getdoc(FaultCode.DUPLICATED_SINGLETON_OPTION),
            ))
        option.__use__(index)

    def _coerce(self, option, name, label, value, index):
        try:
            coerce(option.holder, value)
        except CoercionError as fault:
            self.trigger(
                fault,
                message="invalid value for option %r at %s position: %s" % (label, ordinal(index + 1), fault.message),
                name=name,
                option=option,
                token=value,
                index=index,
            )

    def parse(self, tokens, /):
        """
        expand a command line (without the program name).

        returns
        - ParseResult(expanded, arguments), both tuples of strings; arguments is
          empty when the command line holds options only.
        - a value-taking option ending the command line is recorded as used but
          receives no value; its holder is left as it was.

        side effects
        - the holders of the used options receive their values; flags not used
          are reset to False.

        faults
        - SpecError when the declared options are invalid.
        - ParseError when the command line is invalid.
        - TypeError when tokens is not an iterable of strings.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() tokens must be an iterable of strings")
        tokens = tuple(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() tokens must be strings, got %r" % type(token).__name__)

        try:
            index = SpecIndex(self._options)
        except SpecError as fault:
            self.trigger(fault)

        expanded = []
        state = State.EXPECTING_TOKEN
        pending = None  # (option, name, label, index) awaiting its value

        for position, token in enumerate(tokens):
            if state is State.EXPECTING_VALUE:
                option, name, label, start = pending
                if isterminator(token):
                    self.trigger(UnexpectedEndOfOptionsMarkerError(
                        "unexpected end of options marker '--' at %s position: a value for option %r was expected"
                        % (ordinal(position + 1), label),
                        title="value expected",
                        code=FaultCode.UNEXPECTED_END_OF_OPTIONS_MARKER,
                        hint="give %s a value before '--'" % label,
                        name=name,
                        option=option,
                        token=token,
                        index=position,
                        docs=getdoc(FaultCode.UNEXPECTED_END_OF_OPTIONS_MARKER),
                    ))
                if isoption(token):
                    self.trigger(ValueExpectedButOptionFoundError(
                        "unexpected option specifier %r at %s position: a value for option %r was expected"
                        % (token, ordinal(position + 1), label),
                        title="value expected",
                        code=FaultCode.VALUE_EXPECTED_BUT_OPTION_FOUND,
                        hint="give %s a value before %s" % (label, token),
                        name=name,
                        option=option,
                        token=token,
                        index=position,
                        docs=getdoc(FaultCode.VALUE_EXPECTED_BUT_OPTION_FOUND),
                    ))
                expanded.append(token)
                self._coerce(option, name, label, token, position)
                state, pending = State.EXPECTING_TOKEN, None
                continue

            if isterminator(token):
                return ParseResult((*expanded, *tokens[position:]), tokens[position + 1:])

            if not isoption(token):
                return ParseResult((*expanded, *tokens[position:]), tokens[position:])

            if (match := isshort(token))[0]:
                names = match[1]
                for name in names:
                    label = "-" + name
                    if (option := index.getshort(name)) is None:
                        self.trigger(UnknownShortOptionError(
                            "unexpected option which short name is %r at %s position" % (name, ordinal(position + 1)),
                            title="unknown option",
                            code=FaultCode.UNKNOWN_SHORT_OPTION,
                            hint="remove %s or declare it" % label,
                            name=name,
                            token=token,
                            index=position,
                            docs=getdoc(FaultCode.UNKNOWN_SHORT_OPTION),
                        ))
                    if len(names) > 1 and option.constraint.requires_value:
                        self.trigger(ValueOptionInCompoundError(
                            "the option %r at %s position requires a value: it cannot appear within a compound"
                            % (label, ordinal(position + 1)),
                            title="value option in compound",
                            code=FaultCode.VALUE_OPTION_IN_COMPOUND,
                            hint="pass %s on its own, followed by its value" % label,
                            name=name,
                            option=option,
                            token=token,
                            index=position,
                            docs=getdoc(FaultCode.VALUE_OPTION_IN_COMPOUND),
                        ))
                    self._record(option, name, label, position)
                    if not option.constraint.requires_value:
                        self._coerce(option, name, label, True, position)
                    expanded.append(label)

                if len(names) == 1 and option.constraint.requires_value:
                    state, pending = State.EXPECTING_VALUE, (option, name, label, position)
                continue

            if (match := islong(token))[0]:
                name = match[1]
                label = "--" + name
                if (option := index.getlong(name)) is None:
                    self.trigger(UnknownLongOptionError(
                        "unexpected option which long name is %r at %s position" % (name, ordinal(position + 1)),
                        title="unknown option",
                        code=FaultCode.UNKNOWN_LONG_OPTION,
                        hint="remove %s or declare it (abbreviations are not supported)" % label,
                        name=name,
                        token=token,
                        index=position,
                        docs=getdoc(FaultCode.UNKNOWN_LONG_OPTION),
                    ))
                self._record(option, name, label, position)
                if option.constraint.requires_value:
                    state, pending = State.EXPECTING_VALUE, (option, name, label, position)
                else:
                    self._coerce(option, name, label, True, position)
                expanded.append(label)
                continue

            self.trigger(InvalidOptionSpecifierError(
                "invalid option specifier %r at %s position" % (token, ordinal(position + 1)),
                title="invalid option specifier",
                code=FaultCode.INVALID_OPTION_SPECIFIER,
                hint="use -x for short options, --name for long options, "
                     "or put '--' before arguments starting with a dash",
                token=token,
                index=position,
                docs=getdoc(FaultCode.INVALID_OPTION_SPECIFIER),
            ))

        return ParseResult(tuple(expanded), ())


def parse(tokens, options, /, **config):
    """
    expand a command line against a list of options in one call.

    equivalent to Parser(options, **config).parse(tokens); see Parser for the
    accepted configuration (shell, fancy, colorful, prog).
    """
    return Parser(options, **config).parse(tokens)


__all__ = (
    "ParseResult",
    "State",
    "Parser",
    "parse",
)
