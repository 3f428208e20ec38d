"""
Argument declarations and the registry the parser consults while classifying tokens.

A definition is either a NamedArgument (``--long`` / ``-s``) or a
PositionalArgument (matched by index). The registry enforces uniqueness of
long names (case-insensitively), short names and positional indices.
"""

import dataclasses
from typing import Iterator, Optional, Union

from .errors import ArgumentDefinitionError


@dataclasses.dataclass(frozen=True)
class NamedArgument:
    """An option introduced by ``--long_name`` or, if set, ``-short_name``."""

    long_name: str
    short_name: Optional[str] = None
    has_value: bool = False
    default_value: Optional[str] = None
    is_required: bool = False
    help: str = ""

    def __post_init__(self) -> None:
        if not self.long_name:
            raise ArgumentDefinitionError("Named argument requires a long name")
        if self.short_name is not None and len(self.short_name) != 1:
            raise ArgumentDefinitionError(
                f"Short name must be a single character, got {self.short_name!r}"
            )


@dataclasses.dataclass(frozen=True)
class PositionalArgument:
    """An argument without leading dash, matched by encounter order."""

    index: int
    is_required: bool = False
    name: Optional[str] = None
    help: str = ""

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ArgumentDefinitionError(
                f"Positional index must be non-negative, got {self.index}"
            )

    @property
    def display_name(self) -> str:
        return self.name or f"arg{self.index}"


ArgumentDefinition = Union[NamedArgument, PositionalArgument]


class ArgumentRegistry:
    """
    Ordered collection of argument definitions.

    Lookups by long name are case-insensitive; lookups by short name are exact.
    """

    def __init__(self) -> None:
        self._definitions: list[ArgumentDefinition] = []
        self._by_long: dict[str, NamedArgument] = {}
        self._by_short: dict[str, NamedArgument] = {}
        self._by_index: dict[int, PositionalArgument] = {}

    def add(self, definition: ArgumentDefinition) -> None:
        """
        Register a definition.

        Raises:
            ArgumentDefinitionError: If the long name, short name or index is taken.
        """
        if isinstance(definition, NamedArgument):
            key = definition.long_name.lower()
            if key in self._by_long:
                raise ArgumentDefinitionError(
                    f"Duplicate long name: {definition.long_name}"
                )
            short = definition.short_name
            if short is not None and short in self._by_short:
                raise ArgumentDefinitionError(f"Duplicate short name: {short}")
            self._by_long[key] = definition
            if short is not None:
                self._by_short[short] = definition
        elif isinstance(definition, PositionalArgument):
            if definition.index in self._by_index:
                raise ArgumentDefinitionError(
                    f"Duplicate positional index: {definition.index}"
                )
            self._by_index[definition.index] = definition
        else:
            raise TypeError(
                f"Expected NamedArgument or PositionalArgument, got {type(definition).__name__}"
            )
        self._definitions.append(definition)

    def find_long(self, name: str) -> Optional[NamedArgument]:
        return self._by_long.get(name.lower())

    def find_short(self, char: str) -> Optional[NamedArgument]:
        return self._by_short.get(char)

    @property
    def named(self) -> list[NamedArgument]:
        return [d for d in self._definitions if isinstance(d, NamedArgument)]

    @property
    def positional(self) -> list[PositionalArgument]:
        # Sorted by index so usage output lists them in command-line order
        return sorted(self._by_index.values(), key=lambda d: d.index)

    def __iter__(self) -> Iterator[ArgumentDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._by_long
