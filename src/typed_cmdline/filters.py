"""
Filters run around the token pass of a Parser.

Every filter gets ``before_parsing`` and ``after_parsing`` calls, in the order
the filters were registered. They work directly on the parser's state and
report problems through ``parser.add_error``.
"""

import json
import logging
import os
from typing import TYPE_CHECKING, Any, Optional

from .definitions import NamedArgument

try:
    import yaml

    HAS_YAML = True
except ImportError:
    HAS_YAML = False

if TYPE_CHECKING:
    from .parser import Parser

logger = logging.getLogger(__name__)


class CommandLineFilter:
    """Base class for filters; both hooks do nothing by default."""

    def before_parsing(self, parser: "Parser") -> None:
        pass

    def after_parsing(self, parser: "Parser") -> None:
        pass


class DefaultValueFilter(CommandLineFilter):
    """Fills declared default values for named arguments not given on the command line."""

    def after_parsing(self, parser: "Parser") -> None:
        state = parser.state
        for definition in parser.registry.named:
            if definition.default_value is None:
                continue
            if definition.long_name not in state.named:
                state.named[definition.long_name] = definition.default_value
                state.defaulted.add(definition.long_name)


class RequiredFilter(CommandLineFilter):
    """Adds an error for every required argument that is missing."""

    def after_parsing(self, parser: "Parser") -> None:
        state = parser.state
        for definition in parser.registry.named:
            if definition.is_required and definition.long_name not in state.named:
                parser.add_error(f"missing required argument: {definition.long_name}")
        for positional in parser.registry.positional:
            if positional.is_required and len(state.positional) < positional.index + 1:
                parser.add_error(
                    f"missing required positional argument at index {positional.index}"
                )


class ConfigFileFilter(CommandLineFilter):
    """
    Reads option values from a YAML or JSON file named on the command line.

    Values given on the command line win over the file, the file wins over
    declared defaults. Keys are matched case-insensitively against the long
    names of declared named arguments; unknown keys are ignored.

    The default pipeline checks required arguments before this filter runs;
    put RequiredFilter after it to let the file satisfy required options.

    Example:
        parser = Parser(argv, [ConfigFileFilter()])
        # prog --config settings.yaml --name override
    """

    def __init__(self, option: str = "config", section: Optional[str] = None) -> None:
        """
        Args:
            option: Long name of the option carrying the file path.
            section: Top-level key of the file to read values from; the whole
                file is used when omitted.
        """
        self.option = option
        self.section = section

    def before_parsing(self, parser: "Parser") -> None:
        if self.option not in parser.registry:
            parser.add_argument(
                NamedArgument(
                    long_name=self.option,
                    has_value=True,
                    help="Path to configuration file (YAML or JSON format)",
                )
            )

    def after_parsing(self, parser: "Parser") -> None:
        state = parser.state
        definition = parser.registry.find_long(self.option)
        config_path = state.named.get(definition.long_name) if definition else None
        if not config_path:
            return

        try:
            config_data = self._load_config_file(config_path)
        except (OSError, ValueError) as e:
            parser.add_error(str(e))
            return

        if self.section is not None:
            config_data = config_data.get(self.section) or {}
            if not isinstance(config_data, dict):
                parser.add_error(
                    f"Configuration section '{self.section}' must be a mapping"
                )
                return

        for key, value in config_data.items():
            target = parser.registry.find_long(str(key))
            if target is None:
                logger.debug("Ignoring unknown configuration key: %s", key)
                continue
            name = target.long_name
            if name in state.named and name not in state.defaulted:
                continue
            state.defaulted.discard(name)
            if value is None:
                # null leaves the field at its fallback value
                state.named.pop(name, None)
                continue
            state.named[name] = self._to_argument_value(value, target)

    def _load_config_file(self, config_path: str) -> dict[str, Any]:
        """
        Load configuration from a YAML or JSON file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            ValueError: If the file format is not supported or invalid.
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        file_ext = os.path.splitext(config_path)[1].lower()
        logger.debug("Loading configuration file %s", config_path)

        with open(config_path, "r") as f:
            if file_ext in [".yaml", ".yml"]:
                if not HAS_YAML:
                    raise ValueError(
                        "YAML support not available. Please install PyYAML: pip install PyYAML"
                    )
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ValueError(f"Invalid YAML file: {e}")
            elif file_ext == ".json":
                try:
                    data = json.load(f)
                except json.JSONDecodeError as e:
                    raise ValueError(f"Invalid JSON file: {e}")
            else:
                raise ValueError(
                    f"Unsupported file format: {file_ext}. "
                    "Supported formats are: .yaml, .yml, .json"
                )

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Configuration file must contain a mapping, got {type(data).__name__}"
            )
        return data

    @staticmethod
    def _to_argument_value(value: Any, target: NamedArgument) -> str:
        # Booleans for flags: presence is "1", absence is the empty string
        if isinstance(value, bool) and not target.has_value:
            return "1" if value else ""
        return str(value)
