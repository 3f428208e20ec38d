"""
Usage output for a Parser.

Rendering is delegated to argparse: the registry is mirrored into an
ArgumentParser that is only used for formatting, never for parsing.
"""

import argparse
import sys
from typing import TYPE_CHECKING, Optional, TextIO

if TYPE_CHECKING:
    from .parser import Parser


def _format_description(description: str, default_value: Optional[str]) -> str:
    """Append default value info to the argument description."""
    # argparse applies %-formatting to help strings
    description = description.replace("%", "%%")
    if default_value is None:
        return description
    default_value = default_value.replace("%", "%%")
    default_suffix = f"(default: {default_value})"
    return f"{description} {default_suffix}" if description else default_suffix


class UsageWriter:
    """Writes usage and collected errors of a parser to text streams."""

    def __init__(
        self,
        parser: "Parser",
        stream: Optional[TextIO] = None,
        error_stream: Optional[TextIO] = None,
    ) -> None:
        self.parser = parser
        # None means sys.stdout / sys.stderr at the time of writing
        self.stream = stream
        self.error_stream = error_stream

    def build_help_parser(self) -> argparse.ArgumentParser:
        help_parser = argparse.ArgumentParser(prog=self.parser.prog, add_help=False)
        registry = self.parser.registry

        for positional in registry.positional:
            help_parser.add_argument(
                positional.display_name,
                nargs=None if positional.is_required else "?",
                help=_format_description(positional.help, None),
            )

        for named in registry.named:
            names = [f"--{named.long_name}"]
            if named.short_name is not None:
                names.insert(0, f"-{named.short_name}")
            description = _format_description(named.help, named.default_value)
            if named.has_value:
                help_parser.add_argument(
                    *names,
                    dest=named.long_name,
                    metavar=named.long_name.upper(),
                    required=named.is_required,
                    help=description,
                )
            else:
                help_parser.add_argument(
                    *names, dest=named.long_name, action="store_true", help=description
                )
        return help_parser

    def format_usage(self) -> str:
        return self.build_help_parser().format_help()

    def show_usage(self) -> None:
        stream = self.stream or sys.stdout
        stream.write(self.format_usage())

    def show_usage_and_errors(self) -> None:
        error_stream = self.error_stream or sys.stderr
        for error in self.parser.errors:
            error_stream.write(f"error: {error}\n")
        self.show_usage()
