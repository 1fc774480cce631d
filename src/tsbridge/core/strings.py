"""
String utility functions for tsbridge.

Provides the name transformations and TypeScript literal formatting shared by
the type model and the emitters.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any

_TS_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_WORD_SEPARATORS = re.compile(r"[^0-9A-Za-z]+")


def camel_case(name: str) -> str:
    """
    Convert a snake_case or PascalCase name to camelCase.

    Args:
        name: Host member or type name

    Returns:
        camelCase name

    Examples:
        >>> camel_case("first_name")
        'firstName'
        >>> camel_case("FirstName")
        'firstName'
        >>> camel_case("_private")
        '_private'
    """
    if not name:
        return name

    stripped = name.lstrip("_")
    prefix = name[: len(name) - len(stripped)]

    if "_" in stripped:
        head, *rest = [part for part in stripped.split("_") if part]
        return prefix + head[:1].lower() + head[1:] + "".join(part.title() for part in rest)

    return prefix + stripped[:1].lower() + stripped[1:]


def pascal_case(name: str) -> str:
    """
    Convert snake_case, dotted or kebab names to PascalCase.

    Examples:
        >>> pascal_case("app.models")
        'AppModels'
        >>> pascal_case("order_line")
        'OrderLine'
    """
    return "".join(part[:1].upper() + part[1:] for part in _WORD_SEPARATORS.split(name) if part)


def module_identifier(module_name: str) -> str:
    """
    Identifier used for a module's ``export namespace`` block.

    Examples:
        >>> module_identifier("app.models.person")
        'AppModelsPerson'
    """
    identifier = pascal_case(module_name)
    if not identifier or identifier[0].isdigit():
        identifier = "M" + identifier
    return identifier


def is_ts_identifier(name: str) -> bool:
    """Check whether *name* can be used as a bare TypeScript property name."""
    return bool(_TS_IDENTIFIER.match(name))


def ts_string(value: str) -> str:
    """
    Quote *value* as a single-quoted TypeScript string literal.

    Examples:
        >>> ts_string("Name is required.")
        "'Name is required.'"
        >>> ts_string("it's")
        "'it\\\\'s'"
    """
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f"'{escaped}'"


def format_number(value: int | float | Decimal) -> str:
    """
    Format a number as a TypeScript numeric literal without float noise.

    Examples:
        >>> format_number(120)
        '120'
        >>> format_number(Decimal("0.20"))
        '0.2'
        >>> format_number(1.5)
        '1.5'
    """
    number = value if isinstance(value, Decimal) else Decimal(str(value))
    if number == number.to_integral_value():
        return str(int(number))
    return format(number.normalize(), "f")


def ts_literal(value: Any) -> str:
    """
    Format a constant host value as a TypeScript literal.

    Booleans, numbers, strings and None are supported; anything else is
    rendered through its string form.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float | Decimal):
        return format_number(value)
    return ts_string(str(value))
