"""
Generator configuration models.

Parses the [tool.tsbridge] table from pyproject.toml and the layout directive
accepted on the command line (``plain``, ``withresolver``, ``withform(4)``).
"""

from __future__ import annotations

import logging
import re
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tsbridge.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

MAX_COLUMN_COUNT = 12

_DIRECTIVE = re.compile(r"^\s*(?P<name>[A-Za-z]+)\s*(?:\(\s*(?P<arg>[^)]*?)\s*\))?\s*$")


class GeneratorKind(str, Enum):
    """Available emitter chains."""

    PLAIN = "plain"
    WITH_RESOLVER = "withresolver"
    WITH_FORM = "withform"


class GeneratorConfig(BaseModel):
    """
    Options consumed by the emitters.

    Attributes:
        generator: Which emitter chain to run
        enable_namespace_wrapping: Wrap each module in ``export namespace``
        emit_properties: Emit members of the property category
        emit_fields: Emit members of the field category
        column_count: Form grid columns (1-12)
        camel_case_names: Emit member names in camelCase
        indentation: Indentation unit of generated code
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    generator: GeneratorKind = GeneratorKind.PLAIN
    enable_namespace_wrapping: bool = False
    emit_properties: bool = True
    emit_fields: bool = False
    column_count: int = Field(default=1, ge=1, le=MAX_COLUMN_COUNT)
    camel_case_names: bool = False
    indentation: str = "\t"

    @classmethod
    def create(cls, **values: Any) -> GeneratorConfig:
        """Validate *values*, reporting problems as ``ConfigurationError``."""
        try:
            return cls(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid generator configuration: {problems}") from e


def parse_generator_directive(directive: str) -> tuple[GeneratorKind, int | None]:
    """
    Parse a layout directive.

    Args:
        directive: ``plain``, ``withresolver`` or ``withform(<columns>[, <title>])``;
            matching is case-insensitive. The optional title after the column
            count is accepted for compatibility and ignored

    Returns:
        tuple of:
        - GeneratorKind: Selected chain
        - int | None: Column count, when the directive carries one

    Raises:
        ConfigurationError: If the directive is malformed or the column
            count is outside 1..12

    Examples:
        >>> parse_generator_directive("withform(4)")
        (<GeneratorKind.WITH_FORM: 'withform'>, 4)
    """
    match = _DIRECTIVE.match(directive)
    if match is None:
        raise ConfigurationError(f"Malformed generator directive '{directive}'")

    name = match.group("name").lower()
    try:
        kind = GeneratorKind(name)
    except ValueError:
        choices = ", ".join(k.value for k in GeneratorKind)
        raise ConfigurationError(
            f"Unknown generator '{name}' (expected one of: {choices})"
        ) from None

    argument = match.group("arg")
    if argument is None:
        return kind, None

    if kind != GeneratorKind.WITH_FORM:
        raise ConfigurationError(f"Generator '{name}' takes no arguments")

    argument, _, title = (part.strip() for part in argument.partition(","))
    if title:
        logger.debug("Ignoring form title %r in directive '%s'", title, directive)
    if not argument.isdigit():
        raise ConfigurationError(f"Column count must be an integer, got '{argument}'")

    columns = int(argument)
    if not 1 <= columns <= MAX_COLUMN_COUNT:
        raise ConfigurationError(
            f"Column count must be between 1 and {MAX_COLUMN_COUNT}, got {columns}"
        )
    return kind, columns


def load_generator_config(toml_path: Path) -> GeneratorConfig:
    """
    Load generator configuration from pyproject.toml.

    Args:
        toml_path: Path to pyproject.toml

    Returns:
        GeneratorConfig with parsed values or defaults

    Raises:
        ConfigurationError: If the file cannot be parsed or holds invalid
            values
    """
    if not toml_path.exists():
        return GeneratorConfig()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Cannot parse {toml_path}: {e}") from e

    section = data.get("tool", {}).get("tsbridge", {})
    if not section:
        return GeneratorConfig()

    config_dict: dict[str, Any] = {
        key.replace("-", "_"): value for key, value in section.items() if key != "generator"
    }

    # The generator key accepts the same directive syntax as the CLI
    if "generator" in section:
        kind, columns = parse_generator_directive(str(section["generator"]))
        config_dict["generator"] = kind
        if columns is not None:
            config_dict.setdefault("column_count", columns)

    return GeneratorConfig.create(**config_dict)
