import dataclasses
from dataclasses import dataclass, field

import pytest
from result import Err, Ok

from typed_cmdline import (
    ArgumentDefinitionError,
    Coercion,
    CommandLineFilter,
    DataclassBinder,
    NamedArgument,
    NotParsedError,
    ParsingFailedError,
    PositionalArgument,
    argument,
    option,
    parse_into_or_show_usage,
    try_parse_into,
)


@dataclass
class NoAttributes:
    Input: str
    Output: str
    Verbose: bool
    FullDetail: bool


@dataclass
class AttributesShortName:
    Input: str
    Output: str
    Verbose: bool = option(short="v")
    FullDetail: bool = option(short="f")


@dataclass
class AttributesDefaultValue:
    Input: str
    Output: str = option(default_value="no.txt")
    Verbose: bool = option(default_value="1")
    FullDetail: bool = option(short="f")


@dataclass
class UnnamedArguments:
    Input: str = argument(0, required=True)
    Output: str = argument(1, required=False)
    Verbose: bool = option(short="v")
    FullDetail: bool = option(short="f")


class TestNoMetadata:
    """Test suite for dataclasses without field metadata."""

    def test_field_names_as_long_names(self):
        """Test that field names are the option names."""
        result = parse_into_or_show_usage(
            NoAttributes, ["--Input", "input.txt", "--Output", "output.txt"]
        )

        assert result == NoAttributes("input.txt", "output.txt", False, False)

    def test_flag_sets_boolean(self):
        """Test that a boolean field becomes a flag."""
        result = parse_into_or_show_usage(
            NoAttributes,
            ["--Input", "input.txt", "--Output", "output.txt", "--Verbose"],
        )

        assert result is not None
        assert result.Verbose is True
        assert result.FullDetail is False

    def test_small_letters(self):
        """Test that option names match case-insensitively."""
        result = parse_into_or_show_usage(
            NoAttributes,
            ["--input", "input.txt", "--output", "output.txt", "--verbose"],
        )

        assert result == NoAttributes("input.txt", "output.txt", True, False)

    def test_absent_string_fields_get_zero_value(self):
        """Test that missing string options fall back to the empty string."""
        result = parse_into_or_show_usage(NoAttributes, [])

        assert result == NoAttributes("", "", False, False)


class TestShortNamesAndDefaults:
    """Test suite for ``option()`` overrides."""

    def test_short_name_bundle(self):
        """Test that ``-vf`` sets both flags."""
        result = parse_into_or_show_usage(
            AttributesShortName,
            ["--Input", "input.txt", "--Output", "output.txt", "-vf"],
        )

        assert result == AttributesShortName("input.txt", "output.txt", True, True)

    def test_single_short_name(self):
        """Test that an absent short flag stays False."""
        result = parse_into_or_show_usage(
            AttributesShortName,
            ["--Input", "input.txt", "--Output", "output.txt", "-f"],
        )

        assert result is not None
        assert result.FullDetail is True
        assert result.Verbose is False

    def test_default_values(self):
        """Test that default values fill absent options only."""
        result = parse_into_or_show_usage(
            AttributesDefaultValue, ["--Input", "input.txt", "-vf"]
        )
        assert result == AttributesDefaultValue("input.txt", "no.txt", True, True)

        result = parse_into_or_show_usage(
            AttributesDefaultValue,
            ["--Input", "input.txt", "--Output", "output.txt", "-f"],
        )
        assert result == AttributesDefaultValue("input.txt", "output.txt", True, True)


class TestPositionalFields:
    """Test suite for ``argument()`` fields."""

    def test_all_positional_given(self):
        """Test positional binding together with a flag bundle."""
        result = parse_into_or_show_usage(
            UnnamedArguments, ["input.txt", "output.txt", "-vf"]
        )

        assert result == UnnamedArguments("input.txt", "output.txt", True, True)

    def test_optional_positional_missing(self):
        """Test that an absent optional positional keeps its zero value."""
        result = parse_into_or_show_usage(UnnamedArguments, ["input.txt", "-f"])

        assert result is not None
        assert result.Input == "input.txt"
        assert not result.Output
        assert result.FullDetail is True
        assert result.Verbose is False

    def test_only_verbose(self):
        result = parse_into_or_show_usage(UnnamedArguments, ["input.txt", "-v"])

        assert result == UnnamedArguments("input.txt", "", True, False)

    def test_required_positional_missing(self, capsys):
        """Test that a missing required positional yields no object."""
        result = parse_into_or_show_usage(UnnamedArguments, ["-f"])

        assert result is None
        assert "missing required positional argument at index 0" in capsys.readouterr().err


class TestHelpAndErrors:
    """Test suite for the show-usage path."""

    @pytest.mark.parametrize("token", ["--help", "-h", "-?"])
    def test_help_returns_none(self, token, capsys):
        result = parse_into_or_show_usage(
            AttributesShortName, ["--Input", "a", token], prog="tool"
        )

        assert result is None
        out = capsys.readouterr().out
        assert "usage: tool" in out
        assert "--Input" in out

    def test_bundled_value_option(self, capsys):
        """Test that misuse of a value option in a bundle yields no object."""

        @dataclass
        class Options:
            name: str = option(short="n")
            verbose: bool = option(short="v")

        assert parse_into_or_show_usage(Options, ["-vn", "x"]) is None
        assert (
            "short name n has a value and is used with other options"
            in capsys.readouterr().err
        )


class TestDataclassBinder:
    """Test suite for the two-phase binder API."""

    def test_definitions_from_fields(self):
        """Test the registry entries derived from field metadata."""
        binder = DataclassBinder(UnnamedArguments)

        assert binder.definitions == [
            PositionalArgument(index=0, is_required=True, name="Input"),
            PositionalArgument(index=1, is_required=False, name="Output"),
            NamedArgument("Verbose", short_name="v", has_value=False),
            NamedArgument("FullDetail", short_name="f", has_value=False),
        ]
        assert [b.coercion for b in binder.bindings] == [
            Coercion.STRING,
            Coercion.STRING,
            Coercion.BOOLEAN,
            Coercion.BOOLEAN,
        ]

    def test_explicit_name_and_required(self):
        """Test overriding the long name and the required flag."""

        @dataclass
        class Options:
            output_file: str = option(
                "o", name="output", required=True, help="Where to write"
            )

        binder = DataclassBinder(Options)
        assert binder.definitions == [
            NamedArgument(
                "output",
                short_name="o",
                has_value=True,
                is_required=True,
                help="Where to write",
            )
        ]

        result = parse_into_or_show_usage(Options, ["-o", "x.txt"])
        assert result == Options("x.txt")

        assert parse_into_or_show_usage(Options, []) is None

    def test_has_value_override(self):
        """Test that a boolean field can be declared to take a value."""

        @dataclass
        class Options:
            color: bool = option(has_value=True)

        assert parse_into_or_show_usage(Options, ["--color", "yes"]) == Options(True)
        assert parse_into_or_show_usage(Options, ["--color", ""]) == Options(False)

    def test_fill_before_parse_raises(self):
        """Test that filling requires a prepared, parsed parser."""
        binder = DataclassBinder(NoAttributes)
        with pytest.raises(NotParsedError):
            binder.fill_object()

        binder.prepare_parser([])
        with pytest.raises(NotParsedError):
            binder.fill_object()

    def test_fill_with_errors_raises(self):
        binder = DataclassBinder(UnnamedArguments)
        parser = binder.prepare_parser([])
        parser.parse()

        with pytest.raises(ParsingFailedError):
            binder.fill_object()

    def test_two_phase_usage(self):
        binder = DataclassBinder(AttributesShortName)
        parser = binder.prepare_parser(["--Input", "a", "-v"])

        assert parser.parse_or_show_usage()
        assert binder.fill_object() == AttributesShortName("a", "", True, False)

    def test_positional_with_named_metadata_raises(self):
        """Test that contradictory metadata is rejected."""

        @dataclass
        class Options:
            source: str = field(metadata={"position": 0, "short": "s"})

        with pytest.raises(ArgumentDefinitionError):
            DataclassBinder(Options)

    def test_boolean_positional_raises(self):
        """Test that a flag field cannot be declared positional."""

        @dataclass
        class Options:
            force: bool = argument(0)

        with pytest.raises(ArgumentDefinitionError):
            DataclassBinder(Options)

    def test_duplicate_short_names_raise(self):
        @dataclass
        class Options:
            verbose: bool = option(short="v")
            version: bool = option(short="v")

        binder = DataclassBinder(Options)
        with pytest.raises(ArgumentDefinitionError):
            binder.prepare_parser([])

    def test_non_dataclass_rejected(self):
        class NotADataclass:
            pass

        with pytest.raises(TypeError):
            DataclassBinder(NotADataclass)

        with pytest.raises(TypeError):
            DataclassBinder(NoAttributes("a", "b", False, False))

    def test_non_init_fields_are_skipped(self):
        @dataclass
        class Options:
            name: str
            computed: str = field(init=False, default="fixed")

        binder = DataclassBinder(Options)
        assert [b.field_name for b in binder.bindings] == ["name"]
        result = parse_into_or_show_usage(Options, ["--name", "x"])
        assert result is not None
        assert result.computed == "fixed"

    def test_filters_are_passed_through(self):
        """Test that extra filters take part in the high-level API."""

        class ForceVerbose(CommandLineFilter):
            def after_parsing(self, parser):
                parser.state.named["Verbose"] = "1"

        result = parse_into_or_show_usage(
            AttributesShortName, ["--Input", "a"], [ForceVerbose()]
        )
        assert result is not None
        assert result.Verbose is True


class TestTryParseInto:
    """Test suite for the Result-returning entry point."""

    def test_ok(self):
        result = try_parse_into(UnnamedArguments, ["in.txt", "-v"])

        assert isinstance(result, Ok)
        assert result.ok_value == UnnamedArguments("in.txt", "", True, False)

    def test_err_with_messages(self, capsys):
        """Test that errors are returned and nothing is printed."""
        result = try_parse_into(UnnamedArguments, [])

        assert isinstance(result, Err)
        assert result.err_value == ["missing required positional argument at index 0"]
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_help_requested(self):
        result = try_parse_into(UnnamedArguments, ["in.txt", "--help"])

        assert isinstance(result, Err)
        assert result.err_value == ["help requested"]


def test_binding_is_frozen():
    binding = DataclassBinder(NoAttributes).bindings[0]

    with pytest.raises(dataclasses.FrozenInstanceError):
        binding.field_name = "other"
