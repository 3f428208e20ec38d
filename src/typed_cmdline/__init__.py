"""
typed_cmdline - Parse command lines into typed option objects.

This package splits an argument vector into named and positional values,
applies default and required checks through a filter pipeline, and binds the
result onto dataclass instances described by field metadata.
"""

from .binder import (
    Coercion,
    DataclassBinder,
    FieldBinding,
    argument,
    option,
    parse_into_or_show_usage,
    try_parse_into,
)
from .definitions import ArgumentRegistry, NamedArgument, PositionalArgument
from .errors import (
    AlreadyParsedError,
    ArgumentDefinitionError,
    CommandLineError,
    NotParsedError,
    ParsingFailedError,
)
from .filters import CommandLineFilter, ConfigFileFilter, DefaultValueFilter, RequiredFilter
from .parser import HELP_KEYS, ParseState, ParseStatus, Parser
from .usage import UsageWriter

__version__ = "1.0.0"
__all__ = [
    "AlreadyParsedError",
    "ArgumentDefinitionError",
    "ArgumentRegistry",
    "Coercion",
    "CommandLineError",
    "CommandLineFilter",
    "ConfigFileFilter",
    "DataclassBinder",
    "DefaultValueFilter",
    "FieldBinding",
    "HELP_KEYS",
    "NamedArgument",
    "NotParsedError",
    "ParseState",
    "ParseStatus",
    "Parser",
    "ParsingFailedError",
    "PositionalArgument",
    "RequiredFilter",
    "UsageWriter",
    "argument",
    "option",
    "parse_into_or_show_usage",
    "try_parse_into",
]
