"""Exceptions raised for programmer misuse of the parsing API.

Bad user input never raises; it is collected as messages on the parser.
"""

from typing import Iterable


class CommandLineError(Exception):
    """Base class for all errors raised by typed_cmdline."""


class AlreadyParsedError(CommandLineError, RuntimeError):
    pass


class NotParsedError(CommandLineError, RuntimeError):
    pass


class ParsingFailedError(CommandLineError, RuntimeError):
    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: list[str] = list(errors)
        super().__init__("Errors occurred during parsing: " + "; ".join(self.errors))


class ArgumentDefinitionError(CommandLineError, ValueError):
    """Invalid or conflicting argument declaration."""
