"""
Binding of parsed command lines onto dataclass instances.

Each dataclass field becomes one argument definition. Field metadata controls
the details; ``option()`` and ``argument()`` are thin wrappers around
``dataclasses.field`` that write it:

    @dataclass
    class Options:
        input: str = argument(0, required=True, help="File to read")
        output: str = argument(1, help="File to write")
        verbose: bool = option(short="v", help="Talk more")
        level: int = option(default_value="3")

    options = parse_into_or_show_usage(Options, sys.argv[1:])

Without metadata a field is a named argument called like the field. Boolean
fields are flags; every other field takes the next token as its value.
"""

import dataclasses
import enum
import logging
import types
import typing
from typing import Any, Callable, Generic, Iterable, Literal, Optional, Sequence, Type, TypeVar, Union

from result import Err, Ok, Result

from .definitions import ArgumentDefinition, NamedArgument, PositionalArgument
from .errors import ArgumentDefinitionError, NotParsedError
from .filters import CommandLineFilter
from .parser import ParseState, Parser

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNION_TYPES = (Union, getattr(types, "UnionType", Union))

# Metadata keys that only make sense for named arguments
_NAMED_ONLY_KEYS = ("name", "short", "default_value", "has_value")


def option(
    short: Optional[str] = None,
    *,
    name: Optional[str] = None,
    default_value: Optional[str] = None,
    required: bool = False,
    has_value: Optional[bool] = None,
    help: str = "",
    **field_kwargs: Any,
) -> Any:
    """
    Declare a dataclass field as a named argument.

    Args:
        short: Single-character short name, used as ``-c``.
        name: Long name; defaults to the field name.
        default_value: Command-line level default, as a string. For boolean
            fields any non-empty string means True.
        required: Report an error when the argument is missing.
        has_value: Override whether the option consumes the next token.
        help: Description shown in the usage output.
        **field_kwargs: Passed to dataclasses.field (default, default_factory, ...).
    """
    metadata: dict[str, Any] = {"help": help, "required": required}
    if short is not None:
        metadata["short"] = short
    if name is not None:
        metadata["name"] = name
    if default_value is not None:
        metadata["default_value"] = default_value
    if has_value is not None:
        metadata["has_value"] = has_value
    return dataclasses.field(metadata=metadata, **field_kwargs)


def argument(
    position: int, *, required: bool = False, help: str = "", **field_kwargs: Any
) -> Any:
    """
    Declare a dataclass field as the positional argument at ``position``.

    Boolean fields cannot be positional; declare them with ``option()``.
    """
    metadata = {"position": position, "required": required, "help": help}
    return dataclasses.field(metadata=metadata, **field_kwargs)


class Coercion(enum.Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    CHOICE = "choice"


@dataclasses.dataclass(frozen=True)
class FieldBinding:
    """Connects one argument definition to one field of the target dataclass."""

    definition: ArgumentDefinition
    field_name: str
    coercion: Coercion
    fallback: Callable[[], Any]
    choices: tuple = ()

    @property
    def label(self) -> str:
        if isinstance(self.definition, NamedArgument):
            return self.definition.long_name
        return self.definition.display_name


def _get_optional_inner_type(type_hint: Any) -> Optional[Any]:
    """
    If type_hint is Optional[T] (i.e., Union[T, None]), return T.
    Otherwise, return None.
    """
    if typing.get_origin(type_hint) in _UNION_TYPES:
        args = typing.get_args(type_hint)
        non_none_args = [a for a in args if a is not type(None)]
        if len(non_none_args) == 1 and type(None) in args:
            return non_none_args[0]
    return None


def _coercion_for(arg_type: Any) -> tuple[Coercion, tuple]:
    """Map a field type to its coercion rule and, for Literal types, the choices."""
    inner_type = _get_optional_inner_type(arg_type)
    if inner_type is not None:
        arg_type = inner_type

    # bool before int, bool is a subclass of int
    if arg_type is bool:
        return Coercion.BOOLEAN, ()
    if arg_type is int:
        return Coercion.INTEGER, ()
    if arg_type is float:
        return Coercion.FLOAT, ()
    if typing.get_origin(arg_type) is Literal:
        return Coercion.CHOICE, typing.get_args(arg_type)
    return Coercion.STRING, ()


def _zero_value(arg_type: Any) -> Any:
    if _get_optional_inner_type(arg_type) is not None:
        return None
    zero_values = {str: "", bool: False, int: 0, float: 0.0}
    return zero_values.get(arg_type)


def _field_fallback(field: dataclasses.Field, arg_type: Any) -> Callable[[], Any]:
    """Value used when nothing was given for the field."""
    if field.default is not dataclasses.MISSING:
        default = field.default
        return lambda: default
    if field.default_factory is not dataclasses.MISSING:
        return field.default_factory
    zero = _zero_value(arg_type)
    return lambda: zero


class DataclassBinder(Generic[T]):
    """
    Builds argument definitions from a dataclass and fills new instances of it.

    Example:
        binder = DataclassBinder(Options)
        parser = binder.prepare_parser(["in.txt", "-v"])
        if parser.parse_or_show_usage():
            options = binder.fill_object()
    """

    def __init__(self, cls: Type[T]) -> None:
        if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
            raise TypeError(f"Expected a dataclass type, got {cls!r}")
        self.cls = cls
        self.bindings: tuple[FieldBinding, ...] = tuple(self._build_bindings())
        self.parser: Optional[Parser] = None

    def _build_bindings(self) -> Iterable[FieldBinding]:
        type_hints = typing.get_type_hints(self.cls)
        for field in dataclasses.fields(self.cls):
            if not field.init:
                continue
            arg_type = type_hints.get(field.name, str)
            coercion, choices = _coercion_for(arg_type)
            yield FieldBinding(
                definition=self._definition_for(field, coercion),
                field_name=field.name,
                coercion=coercion,
                fallback=_field_fallback(field, arg_type),
                choices=choices,
            )

    def _definition_for(
        self, field: dataclasses.Field, coercion: Coercion
    ) -> ArgumentDefinition:
        metadata = field.metadata
        if "position" in metadata:
            conflicting = [key for key in _NAMED_ONLY_KEYS if key in metadata]
            if conflicting:
                raise ArgumentDefinitionError(
                    f"Field '{field.name}' is positional and cannot use: {', '.join(conflicting)}"
                )
            if coercion is Coercion.BOOLEAN:
                raise ArgumentDefinitionError(
                    f"Field '{field.name}' is boolean and cannot be positional"
                )
            return PositionalArgument(
                index=metadata["position"],
                is_required=metadata.get("required", False),
                name=field.name,
                help=metadata.get("help", ""),
            )

        has_value = metadata.get("has_value")
        if has_value is None:
            has_value = coercion is not Coercion.BOOLEAN
        return NamedArgument(
            long_name=metadata.get("name") or field.name,
            short_name=metadata.get("short"),
            has_value=has_value,
            default_value=metadata.get("default_value"),
            is_required=metadata.get("required", False),
            help=metadata.get("help", ""),
        )

    @property
    def definitions(self) -> list[ArgumentDefinition]:
        return [binding.definition for binding in self.bindings]

    def prepare_parser(
        self,
        arguments: Sequence[str],
        filters: Optional[Iterable[CommandLineFilter]] = None,
        **parser_kwargs: Any,
    ) -> Parser:
        """Create a parser that knows every argument of the dataclass."""
        parser = Parser(arguments, filters, **parser_kwargs)
        for definition in self.definitions:
            parser.add_argument(definition)
        self.parser = parser
        return parser

    def fill_object(self) -> T:
        """
        Create a new instance from the parsed values.

        Values that cannot be converted are reported on the parser and the
        field keeps its fallback value, so callers must check the parser's
        errors afterwards.

        Raises:
            NotParsedError: If the parser was not prepared or has not parsed.
            ParsingFailedError: If parsing produced errors.
        """
        if self.parser is None:
            raise NotParsedError("prepare_parser() has not been called")
        self.parser.check_for_errors()

        state = self.parser.state
        values = {
            binding.field_name: self._value_for(self.parser, binding, state)
            for binding in self.bindings
        }
        return self.cls(**values)

    def _value_for(
        self, parser: Parser, binding: FieldBinding, state: ParseState
    ) -> Any:
        definition = binding.definition
        if isinstance(definition, PositionalArgument):
            raw = (
                state.positional[definition.index]
                if definition.index < len(state.positional)
                else None
            )
        else:
            raw = state.named.get(definition.long_name)

        if binding.coercion is Coercion.BOOLEAN:
            return bool(raw)
        if raw is None:
            return binding.fallback()
        return self._coerce(parser, binding, raw)

    def _coerce(self, parser: Parser, binding: FieldBinding, raw: str) -> Any:
        if binding.coercion is Coercion.INTEGER:
            try:
                return int(raw)
            except ValueError:
                parser.add_error(
                    f"invalid integer value for argument {binding.label}: {raw!r}"
                )
                return binding.fallback()
        if binding.coercion is Coercion.FLOAT:
            try:
                return float(raw)
            except ValueError:
                parser.add_error(
                    f"invalid float value for argument {binding.label}: {raw!r}"
                )
                return binding.fallback()
        if binding.coercion is Coercion.CHOICE:
            for choice in binding.choices:
                if str(choice) == raw:
                    return choice
            parser.add_error(
                f"invalid choice for argument {binding.label}: {raw!r} "
                f"(choose from {', '.join(str(c) for c in binding.choices)})"
            )
            return binding.fallback()
        return raw


def parse_into_or_show_usage(
    cls: Type[T],
    arguments: Sequence[str],
    filters: Optional[Iterable[CommandLineFilter]] = None,
    **parser_kwargs: Any,
) -> Optional[T]:
    """
    Parse ``arguments`` into a new instance of the dataclass ``cls``.

    Returns:
        Optional[T]: The filled instance, or None when errors occurred or help
        was requested. In both cases the usage has been written.
    """
    binder = DataclassBinder(cls)
    parser = binder.prepare_parser(arguments, filters, **parser_kwargs)
    parser.parse()

    if parser.show_usage_if_necessary():
        return None

    result = binder.fill_object()
    if parser.show_usage_if_necessary():
        return None

    logger.debug("Bound command line onto %s", cls.__name__)
    return result


def try_parse_into(
    cls: Type[T],
    arguments: Sequence[str],
    filters: Optional[Iterable[CommandLineFilter]] = None,
    **parser_kwargs: Any,
) -> Result[T, list[str]]:
    """
    Parse ``arguments`` into ``cls`` without writing any usage output.

    Returns:
        Result[T, list[str]]:
            - Ok with the filled instance,
            - Err with the error messages, or ["help requested"] for a help flag.
    """
    binder = DataclassBinder(cls)
    parser = binder.prepare_parser(arguments, filters, **parser_kwargs)
    parser.parse()

    if parser.errors:
        return Err(list(parser.errors))
    if parser.help_requested:
        return Err(["help requested"])

    instance = binder.fill_object()
    if parser.errors:
        return Err(list(parser.errors))
    return Ok(instance)
