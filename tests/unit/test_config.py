"""
Unit tests for generator configuration and the generator registry.
"""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from tsbridge.core.errors import ConfigurationError
from tsbridge.emit import (
    GeneratorConfig,
    GeneratorKind,
    GeneratorRegistry,
    load_generator_config,
    parse_generator_directive,
)
from tsbridge.emit.declarations import DeclarationEmitter
from tsbridge.emit.form import FormEmitter
from tsbridge.emit.resolver import ResolverEmitter

# =============================================================================
# Directives
# =============================================================================


class TestGeneratorDirective:
    """Test layout directive parsing."""

    @pytest.mark.parametrize(
        ("directive", "expected"),
        [
            ("plain", (GeneratorKind.PLAIN, None)),
            ("withresolver", (GeneratorKind.WITH_RESOLVER, None)),
            ("withform", (GeneratorKind.WITH_FORM, None)),
            ("withform(4)", (GeneratorKind.WITH_FORM, 4)),
            ("WithForm( 12 )", (GeneratorKind.WITH_FORM, 12)),
            ("  withform(1)  ", (GeneratorKind.WITH_FORM, 1)),
            ("withform(4, Orders)", (GeneratorKind.WITH_FORM, 4)),
            ("withform( 2 ,Edit person)", (GeneratorKind.WITH_FORM, 2)),
        ],
    )
    def test_valid(self, directive: str, expected: tuple) -> None:
        assert parse_generator_directive(directive) == expected

    @pytest.mark.parametrize(
        ("directive", "message"),
        [
            ("withform(", "Malformed"),
            ("with-form", "Malformed"),
            ("fancy", "Unknown generator"),
            ("plain(2)", "takes no arguments"),
            ("withform(x)", "must be an integer"),
            ("withform(-1)", "must be an integer"),
            ("withform(, Orders)", "must be an integer"),
            ("withform(13, Orders)", "between 1 and 12"),
            ("withform(0)", "between 1 and 12"),
            ("withform(13)", "between 1 and 12"),
        ],
    )
    def test_invalid(self, directive: str, message: str) -> None:
        with pytest.raises(ConfigurationError, match=message):
            parse_generator_directive(directive)


# =============================================================================
# Config model
# =============================================================================


class TestGeneratorConfig:
    """Test config defaults and validation."""

    def test_defaults(self) -> None:
        config = GeneratorConfig()

        assert config.generator == GeneratorKind.PLAIN
        assert config.enable_namespace_wrapping is False
        assert config.emit_properties is True
        assert config.emit_fields is False
        assert config.column_count == 1
        assert config.camel_case_names is False
        assert config.indentation == "\t"

    def test_create_reports_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="column_count"):
            GeneratorConfig.create(column_count=20)

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="colour"):
            GeneratorConfig.create(colour="blue")

    def test_frozen(self) -> None:
        config = GeneratorConfig()

        with pytest.raises(ValidationError):
            config.column_count = 3  # type: ignore[misc]


class TestLoadGeneratorConfig:
    """Test the [tool.tsbridge] table."""

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_generator_config(tmp_path / "pyproject.toml") == GeneratorConfig()

    def test_missing_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "demo"\n')

        assert load_generator_config(path) == GeneratorConfig()

    def test_table_values(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text(
            dedent(
                """
                [tool.tsbridge]
                generator = "withform(3)"
                camel-case-names = true
                emit_fields = true
                indentation = "  "
                """
            )
        )

        config = load_generator_config(path)

        assert config.generator == GeneratorKind.WITH_FORM
        assert config.column_count == 3
        assert config.camel_case_names is True
        assert config.emit_fields is True
        assert config.indentation == "  "

    def test_explicit_column_count_wins(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[tool.tsbridge]\ngenerator = "withform(3)"\ncolumn-count = 6\n')

        assert load_generator_config(path).column_count == 6

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("[tool.tsbridge\n")

        with pytest.raises(ConfigurationError, match="Cannot parse"):
            load_generator_config(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("[tool.tsbridge]\ncolumn-count = 0\n")

        with pytest.raises(ConfigurationError):
            load_generator_config(path)


# =============================================================================
# Registry
# =============================================================================


class TestGeneratorRegistry:
    """Test emitter chain registration."""

    def test_generators_registered(self) -> None:
        assert GeneratorRegistry.list_generators() == ["plain", "withresolver", "withform"]

    def test_plain_chain(self) -> None:
        generator = GeneratorRegistry.create(GeneratorConfig())

        assert type(generator.emitter) is DeclarationEmitter

    def test_form_chain(self) -> None:
        generator = GeneratorRegistry.create(GeneratorConfig(generator="withform", column_count=5))
        emitter = generator.emitter

        assert isinstance(emitter, FormEmitter)
        assert emitter.widths == [2, 2, 2, 2, 4]
        assert isinstance(emitter.inner, ResolverEmitter)
        assert isinstance(emitter.inner.inner, DeclarationEmitter)

    def test_get_unknown(self) -> None:
        assert GeneratorRegistry.get("nope") is None
