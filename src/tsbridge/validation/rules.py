"""
Validation rule variants.

Each rule knows when it applies to a member, how to render its message and
how to emit the TypeScript check that pushes a ``{ type, message }`` record
into the member's error bucket inside a generated resolver.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict

from tsbridge.core.ir import SystemKind, TypeKind
from tsbridge.core.strings import format_number, ts_string
from tsbridge.core.symbols import LibraryImport

if TYPE_CHECKING:
    from tsbridge.core.ir import Member
    from tsbridge.emit.script import ScriptBuilder

logger = logging.getLogger(__name__)

PERCENTAGE_DATA_TYPE = "percentage"
_PERCENT = Decimal("0.01")


class _Placeholders(dict):
    """Leaves unknown ``{placeholders}`` in message templates untouched."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


@dataclass
class RuleContext:
    """
    Everything a rule needs to emit its check.

    Attributes:
        sb: Output buffer, positioned inside the resolver body
        member: Member being validated
        value: Expression for the incoming value (``values.name``)
        bucket: Expression for the member's error list (``errorBuffer.name``)
        lookup: Resolves another member name to ``(value expression, display)``
        symbol: Resolves an import request to its local identifier
    """

    sb: ScriptBuilder
    member: Member
    value: str
    bucket: str
    lookup: Callable[[str], tuple[str, str] | None]
    symbol: Callable[[LibraryImport], str]


def absence_condition(member: Member, value: str) -> str:
    """TypeScript condition that is true when *value* counts as empty."""
    match member.type.kind:
        case TypeKind.COLLECTION:
            return f"!{value} || {value}.length === 0"
        case TypeKind.SYSTEM if member.system_kind == SystemKind.STRING:
            return f"!{value}"
        case TypeKind.SYSTEM if member.system_kind == SystemKind.NUMBER:
            return f"{value} === undefined || {value} === null || Number.isNaN({value})"
        case _:
            return f"{value} === undefined || {value} === null"


def presence_condition(member: Member, value: str) -> str:
    """TypeScript condition that is true when *value* is present."""
    match member.type.kind:
        case TypeKind.SYSTEM if member.system_kind == SystemKind.STRING:
            return value
        case TypeKind.SYSTEM if member.system_kind == SystemKind.NUMBER:
            return f"{value} !== undefined && {value} !== null && !Number.isNaN({value})"
        case _:
            return f"{value} !== undefined && {value} !== null"


def to_js_pattern(pattern: str, full_match: bool) -> str:
    """Translate a host regular expression to JavaScript ``RegExp`` source."""
    source = re.sub(r"\(\?P<(\w+)>", r"(?<\1>", pattern)
    source = re.sub(r"\(\?P=(\w+)\)", r"\\k<\1>", source)
    source = source.replace(r"\A", "^").replace(r"\Z", "$")
    if full_match:
        source = f"^(?:{source})$"
    return source


class ValidationRule(BaseModel):
    """Base class for rule variants."""

    model_config = ConfigDict(frozen=True)

    message: str | None = None

    error_type: ClassVar[str] = "validate"
    default_message: ClassVar[str] = "{display} is invalid."
    # False only for Required: every other rule runs against a present value
    requires_value: ClassVar[bool] = True

    def is_applicable(self, member: Member) -> bool:
        return True

    def message_parameters(self, member: Member) -> dict[str, Any]:
        return {"display": member.display}

    def format_message(self, member: Member, template: str | None = None) -> str:
        """Render the explicit message, or *template*, or the default message."""
        text = self.message or template or self.default_message
        return text.format_map(_Placeholders(self.message_parameters(member)))

    def imports(self) -> list[LibraryImport]:
        return []

    def emit(self, ctx: RuleContext) -> None:
        raise NotImplementedError

    def _emit_check(
        self,
        ctx: RuleContext,
        condition: str,
        error_type: str | None = None,
        template: str | None = None,
    ) -> None:
        message = self.format_message(ctx.member, template)
        ctx.sb.line(f"if ({condition}) {{")
        with ctx.sb.indent():
            ctx.sb.line(
                f"{ctx.bucket}.push({{ type: '{error_type or self.error_type}', "
                f"message: {ts_string(message)} }});"
            )
        ctx.sb.line("}")


class RequiredRule(ValidationRule):
    kind: Literal["required"] = "required"

    error_type: ClassVar[str] = "required"
    default_message: ClassVar[str] = "{display} is required."
    requires_value: ClassVar[bool] = False

    def emit(self, ctx: RuleContext) -> None:
        self._emit_check(ctx, absence_condition(ctx.member, ctx.value))


class RangeRule(ValidationRule):
    """
    Numeric bounds.

    With ``percentage`` set, the declared bounds are percentages and the
    generated check compares against fractions of 1.
    Integer members additionally reject fractional input.
    """

    kind: Literal["range"] = "range"
    minimum: int | float | Decimal | None = None
    maximum: int | float | Decimal | None = None
    numeric_kind: Literal["int", "float", "decimal"] = "float"
    percentage: bool = False
    min_exclusive: bool = False
    max_exclusive: bool = False

    def is_applicable(self, member: Member) -> bool:
        return member.system_kind == SystemKind.NUMBER

    def message_parameters(self, member: Member) -> dict[str, Any]:
        params = super().message_parameters(member)
        params["min"] = "" if self.minimum is None else format_number(self.minimum)
        params["max"] = "" if self.maximum is None else format_number(self.maximum)
        return params

    def bound(self, value: int | float | Decimal) -> str:
        """Bound as it appears in the generated comparison."""
        if self.percentage:
            return format_number(Decimal(str(value)) * _PERCENT)
        return format_number(value)

    def emit(self, ctx: RuleContext) -> None:
        if self.numeric_kind == "int" and not self.percentage:
            self._emit_check(
                ctx,
                f"!Number.isInteger({ctx.value})",
                "validate",
                "{display} must be a whole number.",
            )
        if self.minimum is not None:
            operator = "<=" if self.min_exclusive else "<"
            template = (
                "{display} must be greater than {min}."
                if self.min_exclusive
                else "{display} cannot be less than {min}."
            )
            self._emit_check(
                ctx, f"{ctx.value} {operator} {self.bound(self.minimum)}", "min", template
            )
        if self.maximum is not None:
            operator = ">=" if self.max_exclusive else ">"
            template = (
                "{display} must be less than {max}."
                if self.max_exclusive
                else "{display} cannot exceed {max}."
            )
            self._emit_check(
                ctx, f"{ctx.value} {operator} {self.bound(self.maximum)}", "max", template
            )


class StringLengthRule(ValidationRule):
    kind: Literal["string_length"] = "string_length"
    minimum: int = 0
    maximum: int | None = None

    def is_applicable(self, member: Member) -> bool:
        return member.system_kind == SystemKind.STRING

    def message_parameters(self, member: Member) -> dict[str, Any]:
        params = super().message_parameters(member)
        params["min"] = str(self.minimum)
        params["max"] = "" if self.maximum is None else str(self.maximum)
        return params

    def emit(self, ctx: RuleContext) -> None:
        if self.maximum is not None:
            self._emit_check(
                ctx,
                f"{ctx.value}.length > {self.maximum}",
                "maxLength",
                "{display} cannot exceed {max} characters.",
            )
        if self.minimum > 0:
            self._emit_check(
                ctx,
                f"{ctx.value}.length < {self.minimum}",
                "minLength",
                "{display} cannot be less than {min} characters long.",
            )


class RegularExpressionRule(ValidationRule):
    kind: Literal["regular_expression"] = "regular_expression"
    pattern: str
    full_match: bool = True

    error_type: ClassVar[str] = "pattern"
    default_message: ClassVar[str] = "{display} must match the pattern '{pattern}'."

    def is_applicable(self, member: Member) -> bool:
        return member.system_kind == SystemKind.STRING

    def message_parameters(self, member: Member) -> dict[str, Any]:
        params = super().message_parameters(member)
        params["pattern"] = self.pattern
        return params

    def emit(self, ctx: RuleContext) -> None:
        source = json.dumps(to_js_pattern(self.pattern, self.full_match))
        self._emit_check(ctx, f"!new RegExp({source}).test({ctx.value})")


class CompareRule(ValidationRule):
    kind: Literal["compare"] = "compare"
    other: str

    default_message: ClassVar[str] = "'{display}' and '{other}' do not match."

    def emit(self, ctx: RuleContext) -> None:
        target = ctx.lookup(self.other)
        if target is None:
            logger.warning(
                "Skipping compare rule on %s: no member named %r",
                ctx.member.name,
                self.other,
            )
            return
        other_value, other_display = target
        message = self.format_message(ctx.member).replace("{other}", other_display)
        ctx.sb.line(f"if ({ctx.value} !== {other_value}) {{")
        with ctx.sb.indent():
            ctx.sb.line(
                f"{ctx.bucket}.push({{ type: '{self.error_type}', message: {ts_string(message)} }});"
            )
        ctx.sb.line("}")


class _PatternRule(ValidationRule):
    """A rule that is a fixed JavaScript regular expression test."""

    js_pattern: ClassVar[str] = ""
    error_type: ClassVar[str] = "pattern"

    def is_applicable(self, member: Member) -> bool:
        return member.system_kind == SystemKind.STRING

    def emit(self, ctx: RuleContext) -> None:
        self._emit_check(ctx, f"!{self.js_pattern}.test({ctx.value})")


class EmailAddressRule(_PatternRule):
    kind: Literal["email_address"] = "email_address"

    js_pattern: ClassVar[str] = r"/^[^@\s]+@[^@\s]+$/"
    default_message: ClassVar[str] = "{display} is not a valid e-mail address."


class UrlRule(_PatternRule):
    kind: Literal["url"] = "url"

    js_pattern: ClassVar[str] = r"/^(https?|ftp):\/\/\S+$/i"
    default_message: ClassVar[str] = "{display} is not a valid fully-qualified http, https, or ftp URL."


class PhoneRule(_PatternRule):
    kind: Literal["phone"] = "phone"

    js_pattern: ClassVar[str] = r"/^\+?(?=.*[0-9])[0-9\s\-.()]+(\s*(x|ext\.?|extension)\s*[0-9]+)?$/i"
    default_message: ClassVar[str] = "{display} is not a valid phone number."


class CreditCardRule(ValidationRule):
    """Luhn checksum over the digits of the value."""

    kind: Literal["credit_card"] = "credit_card"

    default_message: ClassVar[str] = "{display} is not a valid credit card number."

    def is_applicable(self, member: Member) -> bool:
        return member.system_kind in (SystemKind.STRING, SystemKind.NUMBER)

    def emit(self, ctx: RuleContext) -> None:
        sb = ctx.sb
        sb.line("if (!((digits: string) => {")
        with sb.indent():
            sb.line("let sum = 0;")
            sb.line("for (let i = 0; i < digits.length; i++) {")
            with sb.indent():
                sb.line("let digit = digits.charCodeAt(digits.length - 1 - i) - 48;")
                sb.line("if (i % 2 === 1) {")
                with sb.indent():
                    sb.line("digit *= 2;")
                    sb.line("if (digit > 9) digit -= 9;")
                sb.line("}")
                sb.line("sum += digit;")
            sb.line("}")
            sb.line("return /^[0-9]+$/.test(digits) && sum % 10 === 0;")
        sb.line(f"}})(String({ctx.value}).replace(/[\\s-]/g, ''))) {{")
        with sb.indent():
            message = self.format_message(ctx.member)
            sb.line(f"{ctx.bucket}.push({{ type: '{self.error_type}', message: {ts_string(message)} }});")
        sb.line("}")


class CustomRule(ValidationRule):
    """
    Calls a user-supplied validator ``(value, values) => boolean | string``.

    ``true`` passes, a string is used as the error message, anything else
    fails with the rule's message.
    """

    kind: Literal["custom"] = "custom"
    module: str
    function: str

    def imports(self) -> list[LibraryImport]:
        return [LibraryImport(self.module, self.function)]

    def emit(self, ctx: RuleContext) -> None:
        validator = ctx.symbol(LibraryImport(self.module, self.function))
        message = self.format_message(ctx.member)
        ctx.sb.line("{")
        with ctx.sb.indent():
            ctx.sb.line(f"const result = {validator}({ctx.value}, values);")
            ctx.sb.line("if (result !== true) {")
            with ctx.sb.indent():
                ctx.sb.line(
                    f"{ctx.bucket}.push({{ type: '{self.error_type}', "
                    f"message: typeof result === 'string' ? result : {ts_string(message)} }});"
                )
            ctx.sb.line("}")
        ctx.sb.line("}")


def emit_member_rules(ctx: RuleContext) -> None:
    """
    Emit every applicable rule of ``ctx.member``.

    The Required check comes first; all other rules run in declaration order
    inside one presence guard, so each sees only a present value. Rules do
    not short-circuit each other.
    """
    member = ctx.member
    applicable: list[ValidationRule] = []
    for rule in member.rules:
        if rule.is_applicable(member):
            applicable.append(rule)
        else:
            logger.warning(
                "Skipping %s rule on %s.%s: not applicable to %s",
                rule.kind,  # type: ignore[attr-defined]
                member.owner.name,
                member.name,
                member.type,
            )

    for rule in applicable:
        if not rule.requires_value:
            rule.emit(ctx)

    guarded = [rule for rule in applicable if rule.requires_value]
    if not guarded:
        return

    ctx.sb.line(f"if ({presence_condition(member, ctx.value)}) {{")
    with ctx.sb.indent():
        for rule in guarded:
            rule.emit(ctx)
    ctx.sb.line("}")
