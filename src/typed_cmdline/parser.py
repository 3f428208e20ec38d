"""
Parser - the token classifier and parsing engine.

The parser consumes an already-split argument vector exactly once and produces
a ParseState: a map of named values, an ordered list of positional values and
an ordered list of error messages. Errors caused by user input are collected,
never raised, so callers can decide whether to render usage information.

Example:
    parser = (
        Parser(["--input", "in.txt", "-v", "out.txt"])
        .with_argument("input", has_value=True)
        .with_argument("verbose", short_name="v")
    )
    parser.named_arguments   # {"input": "in.txt", "verbose": "1"}
    parser.positional_arguments  # ["out.txt"]
"""

import dataclasses
import enum
import logging
from typing import Iterable, Optional, Sequence

from .definitions import (
    ArgumentDefinition,
    ArgumentRegistry,
    NamedArgument,
    PositionalArgument,
)
from .errors import AlreadyParsedError, NotParsedError, ParsingFailedError
from .filters import CommandLineFilter, DefaultValueFilter, RequiredFilter
from .usage import UsageWriter

logger = logging.getLogger(__name__)

# Value stored for flags and for options nobody declared
FLAG_VALUE = "1"

HELP_KEYS = ("help", "h", "?")


class ParseStatus(enum.Enum):
    UNPARSED = "unparsed"
    PARSED = "parsed"


@dataclasses.dataclass
class ParseState:
    """Accumulated result of one parse pass."""

    named: dict[str, str] = dataclasses.field(default_factory=dict)
    positional: list[str] = dataclasses.field(default_factory=list)
    errors: list[str] = dataclasses.field(default_factory=list)
    # Long names filled in by the default-value filter instead of the command line
    defaulted: set[str] = dataclasses.field(default_factory=set)


class Parser:
    """
    Parses a command line against a registry of argument definitions.

    The default filter pipeline substitutes declared default values and then
    checks required arguments. Additional filters run after those two, in the
    order they were added.
    """

    def __init__(
        self,
        arguments: Sequence[str],
        filters: Optional[Iterable[CommandLineFilter]] = None,
        *,
        use_default_filters: bool = True,
        registry: Optional[ArgumentRegistry] = None,
        usage_writer: Optional[UsageWriter] = None,
        prog: Optional[str] = None,
        compat_bundle_keys: bool = False,
    ) -> None:
        """
        Args:
            arguments: The argument vector, without the program name.
            filters: Filters to run after the default ones.
            use_default_filters: Install DefaultValueFilter and RequiredFilter.
            registry: Pre-built registry; a fresh one is created when omitted.
            usage_writer: Receives the show-usage requests; defaults to UsageWriter.
            prog: Program name shown in usage output.
            compat_bundle_keys: Record an unknown character inside a short
                bundle under the whole bundle text instead of the character.
        """
        if arguments is None:
            raise TypeError("arguments must not be None")

        self.arguments: list[str] = list(arguments)
        self.registry: ArgumentRegistry = registry or ArgumentRegistry()
        self.prog = prog
        self.compat_bundle_keys = compat_bundle_keys
        self.filters: list[CommandLineFilter] = []
        if use_default_filters:
            self.filters.extend([DefaultValueFilter(), RequiredFilter()])
        if filters:
            self.filters.extend(filters)
        self.usage_writer: UsageWriter = usage_writer or UsageWriter(self)

        self._state = ParseState()
        self._status = ParseStatus.UNPARSED

    def add_argument(self, definition: ArgumentDefinition) -> "Parser":
        self.registry.add(definition)
        return self

    def with_argument(
        self,
        long_name: str,
        short_name: Optional[str] = None,
        has_value: bool = False,
        default_value: Optional[str] = None,
        is_required: bool = False,
        help: str = "",
    ) -> "Parser":
        """Declare a named argument and return the parser for chaining."""
        return self.add_argument(
            NamedArgument(
                long_name=long_name,
                short_name=short_name,
                has_value=has_value,
                default_value=default_value,
                is_required=is_required,
                help=help,
            )
        )

    def with_positional(
        self,
        index: int,
        name: Optional[str] = None,
        is_required: bool = False,
        help: str = "",
    ) -> "Parser":
        """Declare a positional argument and return the parser for chaining."""
        return self.add_argument(
            PositionalArgument(index=index, is_required=is_required, name=name, help=help)
        )

    def add_filter(self, filter: CommandLineFilter) -> "Parser":
        self.filters.append(filter)
        return self

    @property
    def status(self) -> ParseStatus:
        return self._status

    @property
    def is_parsed(self) -> bool:
        return self._status is ParseStatus.PARSED

    @property
    def state(self) -> ParseState:
        """The parse state, parsing first if that has not happened yet."""
        if self._status is ParseStatus.UNPARSED:
            self.parse()
        return self._state

    @property
    def named_arguments(self) -> dict[str, str]:
        return self.state.named

    @property
    def positional_arguments(self) -> list[str]:
        return self.state.positional

    @property
    def errors(self) -> list[str]:
        return self._state.errors

    @property
    def help_requested(self) -> bool:
        return any(key in self.state.named for key in HELP_KEYS)

    def add_error(self, message: str) -> None:
        logger.debug("Command line error: %s", message)
        self._state.errors.append(message)

    def parse(self) -> ParseState:
        """
        Run the filter pipeline and the token pass.

        Returns:
            ParseState: The named values, positional values and errors.

        Raises:
            AlreadyParsedError: If this parser has parsed before.
        """
        if self._status is ParseStatus.PARSED:
            raise AlreadyParsedError("The arguments have been parsed already")
        self._status = ParseStatus.PARSED

        logger.debug("Parsing %d arguments", len(self.arguments))

        for filter in self.filters:
            filter.before_parsing(self)

        n = 0
        while n < len(self.arguments):
            argument = self.arguments[n]
            if not argument:
                pass
            elif argument.startswith("--"):
                n = self._add_value_to_named_argument(n, argument[2:])
            elif argument.startswith("-"):
                n = self._parse_short_bundle(n, argument[1:])
            else:
                self._state.positional.append(argument)
            n += 1

        for filter in self.filters:
            filter.after_parsing(self)

        return self._state

    def _parse_short_bundle(self, n: int, bundle: str) -> int:
        """
        Handle ``-abc``: every character is looked up as a short name.

        Returns:
            int: The cursor position, advanced if a value was consumed.
        """
        for char in bundle:
            definition = self.registry.find_short(char)
            if definition is None:
                key = bundle if self.compat_bundle_keys else char
                self._state.named[key] = FLAG_VALUE
            elif not definition.has_value:
                self._state.named[definition.long_name] = FLAG_VALUE
            else:
                if len(bundle) > 1:
                    self.add_error(
                        f"short name {char} has a value and is used with other options"
                    )
                n = self._add_value_to_named_argument(n, definition.long_name)
        return n

    def _add_value_to_named_argument(self, n: int, name: str) -> int:
        """
        Record ``name`` as present, consuming the following token as its value
        when the declaration says the option has one.

        ``=`` inside ``name`` is not split off; it is part of the name.
        """
        definition = self.registry.find_long(name)
        if definition is None:
            self._state.named[name] = FLAG_VALUE
        elif not definition.has_value:
            self._state.named[definition.long_name] = FLAG_VALUE
        elif n + 1 >= len(self.arguments):
            self.add_error(f"value missing for parameter: {name}")
        else:
            n += 1
            self._state.named[definition.long_name] = self.arguments[n]
        return n

    def show_usage_if_necessary(self) -> bool:
        """
        Render usage when errors exist or help was requested.

        Returns:
            bool: True if usage was shown and the caller should stop.
        """
        if self.errors:
            self.usage_writer.show_usage_and_errors()
            return True
        if self.help_requested:
            self.usage_writer.show_usage()
            return True
        return False

    def parse_or_show_usage(self) -> bool:
        """Parse and show usage if necessary. Returns True when parsing succeeded."""
        self.parse()
        return not self.show_usage_if_necessary()

    def check_for_errors(self) -> None:
        """
        Raises:
            NotParsedError: If parse() has not run.
            ParsingFailedError: If errors were collected.
        """
        if self._status is ParseStatus.UNPARSED:
            raise NotParsedError("parse() has not been called")
        if self.errors:
            raise ParsingFailedError(self.errors)
