"""
Unit tests for the validation rule set.

Tests the constraint builder, message templates, applicability and the
TypeScript checks each rule emits.
"""

import logging

import pytest
from pydantic import ValidationError

from tsbridge.core.builder import build_type_graph
from tsbridge.core.errors import ConstructionError
from tsbridge.core.ir import Member, SystemKind
from tsbridge.core.metadata import (
    ConstraintKind,
    HostConstraint,
    HostKind,
    HostMember,
    HostType,
    collection,
    nullable,
    primitive,
)
from tsbridge.core.symbols import LibraryImport
from tsbridge.emit.script import ScriptBuilder
from tsbridge.validation import (
    PERCENTAGE_DATA_TYPE,
    CompareRule,
    CreditCardRule,
    CustomRule,
    RangeRule,
    RegularExpressionRule,
    RequiredRule,
    RuleContext,
    StringLengthRule,
    build_rule,
    build_rules,
    emit_member_rules,
)
from tsbridge.validation.rules import to_js_pattern

# =============================================================================
# Fixtures
# =============================================================================


def _member(host_member: HostMember, *others: HostMember) -> Member:
    """Build a one-class graph and return the member called like *host_member*."""
    host = HostType(
        name="Sample",
        kind=HostKind.CLASS,
        namespace="app",
        module="app.models",
        members=[host_member, *others],
    )
    return build_type_graph(host).root.members[host_member.name]


def _emit(member: Member, lookup=None) -> str:
    sb = ScriptBuilder("  ")
    emit_member_rules(
        RuleContext(
            sb=sb,
            member=member,
            value=f"values.{member.name}",
            bucket=f"errorBuffer.{member.name}",
            lookup=lookup or (lambda name: None),
            symbol=lambda request: request.symbol,
        )
    )
    return sb.to_string()


@pytest.fixture
def number_member(number_host: HostType) -> Member:
    return _member(
        HostMember(
            "score",
            number_host,
            display_name="Score",
            constraints=[HostConstraint(ConstraintKind.RANGE, {"minimum": 1, "maximum": 10})],
        )
    )


# =============================================================================
# Constraint builder
# =============================================================================


class TestRuleFactory:
    """Test turning host constraints into rules."""

    def test_required_flag(self, string_host: HostType) -> None:
        member = HostMember(
            "name",
            string_host,
            constraints=[
                HostConstraint(ConstraintKind.STRING_LENGTH, {"maximum": 5}),
                HostConstraint(ConstraintKind.REQUIRED),
            ],
        )

        rules, is_required = build_rules(member)

        assert is_required is True
        assert [type(r) for r in rules] == [StringLengthRule, RequiredRule]

    def test_percentage_data_type(self, number_host: HostType) -> None:
        member = HostMember("rate", number_host, data_type=PERCENTAGE_DATA_TYPE)

        rule = build_rule(HostConstraint(ConstraintKind.RANGE, {"minimum": 0, "maximum": 20}), member)

        assert isinstance(rule, RangeRule)
        assert rule.percentage is True

    def test_explicit_message_kept(self, string_host: HostType) -> None:
        member = HostMember("name", string_host)

        rule = build_rule(HostConstraint(ConstraintKind.REQUIRED, message="Who are you?"), member)

        assert rule.message == "Who are you?"

    def test_wrongly_typed_parameter(self, number_host: HostType) -> None:
        member = HostMember("score", number_host)

        with pytest.raises(ConstructionError, match="has invalid parameters: minimum"):
            build_rule(HostConstraint(ConstraintKind.RANGE, {"minimum": "lots"}), member, "app.Sample")

    def test_missing_parameter(self, string_host: HostType) -> None:
        member = HostMember("code", string_host)

        with pytest.raises(ConstructionError, match="missing parameter 'pattern'"):
            build_rule(HostConstraint(ConstraintKind.REGULAR_EXPRESSION), member)

    def test_rules_are_frozen(self) -> None:
        rule = RequiredRule()

        with pytest.raises(ValidationError):
            rule.message = "changed"  # type: ignore[misc]


# =============================================================================
# Messages
# =============================================================================


class TestMessages:
    """Test message templates."""

    def test_default_message_uses_display(self, number_member: Member) -> None:
        assert RequiredRule().format_message(number_member) == "Score is required."

    def test_explicit_message_placeholders(self, number_member: Member) -> None:
        rule = RangeRule(minimum=1, maximum=10, message="{display} must be {min}-{max}")

        assert rule.format_message(number_member) == "Score must be 1-10"

    def test_unknown_placeholder_left_alone(self, number_member: Member) -> None:
        rule = RequiredRule(message="{display} {nope}")

        assert rule.format_message(number_member) == "Score {nope}"

    def test_pattern_placeholder(self, string_host: HostType) -> None:
        member = _member(HostMember("code", string_host))
        rule = RegularExpressionRule(pattern="[A-Z]+")

        assert rule.format_message(member) == "code must match the pattern '[A-Z]+'."


# =============================================================================
# Emission
# =============================================================================


class TestRuleEmission:
    """Test the TypeScript checks."""

    def test_range_checks(self, number_member: Member) -> None:
        script = _emit(number_member)

        assert "if (values.score < 1) {" in script
        assert "errorBuffer.score.push({ type: 'min', message: 'Score cannot be less than 1.' });" in script
        assert "if (values.score > 10) {" in script
        assert "type: 'max', message: 'Score cannot exceed 10.'" in script

    def test_non_required_rules_are_guarded(self, number_member: Member) -> None:
        script = _emit(number_member)

        assert script.startswith(
            "if (values.score !== undefined && values.score !== null && !Number.isNaN(values.score)) {"
        )

    def test_required_runs_before_guard(self, person_host: HostType) -> None:
        name = build_type_graph(person_host).root.members["name"]

        lines = _emit(name).splitlines()

        assert lines[0] == "if (!values.name) {"
        assert lines[1] == "  errorBuffer.name.push({ type: 'required', message: 'name is required.' });"
        assert lines[3] == "if (values.name) {"
        assert lines[4] == "  if (values.name.length > 50) {"

    def test_percentage_scales_bounds(self, number_host: HostType) -> None:
        member = _member(
            HostMember(
                "rate",
                number_host,
                data_type=PERCENTAGE_DATA_TYPE,
                constraints=[HostConstraint(ConstraintKind.RANGE, {"minimum": 5, "maximum": 20})],
            )
        )

        script = _emit(member)

        assert "if (values.rate < 0.05) {" in script
        assert "if (values.rate > 0.2) {" in script
        # Messages keep the declared percentages
        assert "rate cannot exceed 20." in script

    def test_exclusive_bounds(self, number_host: HostType) -> None:
        member = _member(
            HostMember(
                "weight",
                number_host,
                constraints=[
                    HostConstraint(
                        ConstraintKind.RANGE,
                        {"minimum": 0, "min_exclusive": True, "maximum": 1.5, "max_exclusive": True},
                    )
                ],
            )
        )

        script = _emit(member)

        assert "if (values.weight <= 0) {" in script
        assert "if (values.weight >= 1.5) {" in script
        assert "weight must be greater than 0." in script

    def test_integer_range_rejects_fractions(self, number_host: HostType) -> None:
        member = _member(
            HostMember(
                "count",
                number_host,
                constraints=[
                    HostConstraint(
                        ConstraintKind.RANGE, {"minimum": 1, "maximum": 9, "numeric_kind": "int"}
                    )
                ],
            )
        )

        lines = _emit(member).splitlines()

        assert lines[1] == "  if (!Number.isInteger(values.count)) {"
        assert lines[2] == (
            "    errorBuffer.count.push({ type: 'validate', message: 'count must be a whole number.' });"
        )
        assert lines[4] == "  if (values.count < 1) {"

    def test_float_range_accepts_fractions(self, number_member: Member) -> None:
        assert "Number.isInteger" not in _emit(number_member)

    def test_string_length_min_only_when_positive(self, string_host: HostType) -> None:
        member = _member(
            HostMember(
                "code",
                string_host,
                constraints=[HostConstraint(ConstraintKind.STRING_LENGTH, {"maximum": 3})],
            )
        )

        script = _emit(member)

        assert "values.code.length > 3" in script
        assert "minLength" not in script

    def test_inapplicable_rule_skipped(
        self, string_host: HostType, caplog: pytest.LogCaptureFixture
    ) -> None:
        member = _member(
            HostMember(
                "title",
                string_host,
                constraints=[HostConstraint(ConstraintKind.RANGE, {"minimum": 1})],
            )
        )

        with caplog.at_level(logging.WARNING, logger="tsbridge.validation.rules"):
            script = _emit(member)

        assert script == "\n"
        assert "not applicable" in caplog.text

    def test_regular_expression(self, string_host: HostType) -> None:
        member = _member(
            HostMember(
                "zip",
                string_host,
                constraints=[HostConstraint(ConstraintKind.REGULAR_EXPRESSION, {"pattern": r"\d{5}"})],
            )
        )

        script = _emit(member)

        assert 'if (!new RegExp("^(?:\\\\d{5})$").test(values.zip)) {' in script

    def test_compare_uses_other_display(self, string_host: HostType) -> None:
        password = HostMember("password", string_host, display_name="Password")
        confirm = HostMember(
            "confirm",
            string_host,
            display_name="Confirmation",
            constraints=[HostConstraint(ConstraintKind.COMPARE, {"other": "password"})],
        )
        member = _member(confirm, password)

        script = _emit(member, lookup=lambda name: ("values.password", "Password"))

        assert "if (values.confirm !== values.password) {" in script
        assert "'Confirmation' and 'Password' do not match." in script

    def test_compare_missing_other_skipped(self, string_host: HostType) -> None:
        member = _member(
            HostMember(
                "confirm",
                string_host,
                constraints=[HostConstraint(ConstraintKind.COMPARE, {"other": "nothing"})],
            )
        )

        script = _emit(member)

        assert "!==" not in script

    def test_required_collection(self, string_host: HostType) -> None:
        member = _member(
            HostMember(
                "tags",
                collection(string_host),
                constraints=[HostConstraint(ConstraintKind.REQUIRED)],
            )
        )

        assert "if (!values.tags || values.tags.length === 0) {" in _emit(member)

    def test_credit_card_checksum(self, string_host: HostType) -> None:
        member = _member(
            HostMember("card", string_host, constraints=[HostConstraint(ConstraintKind.CREDIT_CARD)])
        )

        script = _emit(member)

        assert "sum % 10 === 0" in script
        assert "})(String(values.card).replace(/[\\s-]/g, ''))) {" in script

    def test_custom_rule_imports_validator(self, string_host: HostType) -> None:
        rule = CustomRule(module="./validators", function="isSlug")
        member = _member(
            HostMember(
                "slug",
                nullable(string_host),
                constraints=[
                    HostConstraint(
                        ConstraintKind.CUSTOM, {"module": "./validators", "function": "isSlug"}
                    )
                ],
            )
        )

        script = _emit(member)

        assert rule.imports() == [LibraryImport("./validators", "isSlug")]
        assert "const result = isSlug(values.slug, values);" in script
        assert "typeof result === 'string' ? result : 'slug is invalid.'" in script


class TestPatterns:
    """Test Python to JavaScript regular expression translation."""

    def test_full_match_anchors(self) -> None:
        assert to_js_pattern("a|b", True) == "^(?:a|b)$"

    def test_search_left_alone(self) -> None:
        assert to_js_pattern("abc", False) == "abc"

    def test_named_groups(self) -> None:
        assert to_js_pattern(r"(?P<year>\d+)-(?P=year)", False) == r"(?<year>\d+)-\k<year>"

    def test_string_anchors(self) -> None:
        assert to_js_pattern(r"\Aabc\Z", False) == "^abc$"


class TestApplicability:
    """Test which member types each rule accepts."""

    @pytest.mark.parametrize(
        ("rule", "kind", "applicable"),
        [
            (RangeRule(minimum=1), SystemKind.NUMBER, True),
            (RangeRule(minimum=1), SystemKind.STRING, False),
            (StringLengthRule(maximum=3), SystemKind.STRING, True),
            (StringLengthRule(maximum=3), SystemKind.DATE, False),
            (CreditCardRule(), SystemKind.NUMBER, True),
            (CompareRule(other="x"), SystemKind.BOOLEAN, True),
        ],
    )
    def test_is_applicable(self, rule, kind: SystemKind, applicable: bool) -> None:
        member = _member(HostMember("value", primitive(kind)))

        assert rule.is_applicable(member) is applicable
