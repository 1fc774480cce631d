"""
Constraint builder: turns declared host constraints into validation rules.
"""

from __future__ import annotations

from pydantic import ValidationError

from tsbridge.core.errors import ConstructionError, ErrorContext
from tsbridge.core.metadata import ConstraintKind, HostConstraint, HostMember

from .rules import (
    PERCENTAGE_DATA_TYPE,
    CompareRule,
    CreditCardRule,
    CustomRule,
    EmailAddressRule,
    PhoneRule,
    RangeRule,
    RegularExpressionRule,
    RequiredRule,
    StringLengthRule,
    UrlRule,
    ValidationRule,
)


def build_rule(
    constraint: HostConstraint, member: HostMember, owner: str = ""
) -> ValidationRule:
    """
    Build the rule for one constraint.

    Args:
        constraint: Declared constraint
        member: Host member carrying it (for data-type annotations)
        owner: Qualified name of the owning type, for error context

    Raises:
        ConstructionError: If a required parameter is missing or a parameter
            has the wrong type
    """
    params = constraint.parameters
    message = constraint.message

    try:
        match constraint.kind:
            case ConstraintKind.REQUIRED:
                return RequiredRule(message=message)
            case ConstraintKind.RANGE:
                return RangeRule(
                    message=message,
                    minimum=params.get("minimum"),
                    maximum=params.get("maximum"),
                    numeric_kind=params.get("numeric_kind", "float"),
                    percentage=member.data_type == PERCENTAGE_DATA_TYPE,
                    min_exclusive=params.get("min_exclusive", False),
                    max_exclusive=params.get("max_exclusive", False),
                )
            case ConstraintKind.STRING_LENGTH:
                return StringLengthRule(
                    message=message,
                    minimum=params.get("minimum") or 0,
                    maximum=params.get("maximum"),
                )
            case ConstraintKind.REGULAR_EXPRESSION:
                return RegularExpressionRule(
                    message=message,
                    pattern=params["pattern"],
                    full_match=params.get("full_match", True),
                )
            case ConstraintKind.COMPARE:
                return CompareRule(message=message, other=params["other"])
            case ConstraintKind.EMAIL_ADDRESS:
                return EmailAddressRule(message=message)
            case ConstraintKind.URL:
                return UrlRule(message=message)
            case ConstraintKind.PHONE:
                return PhoneRule(message=message)
            case ConstraintKind.CREDIT_CARD:
                return CreditCardRule(message=message)
            case ConstraintKind.CUSTOM:
                return CustomRule(
                    message=message,
                    module=params["module"],
                    function=params["function"],
                )
            case _:
                raise ValueError(f"Unknown constraint kind: {constraint.kind}")
    except KeyError as e:
        raise ConstructionError(
            f"Constraint '{constraint.kind.value}' is missing parameter {e}",
            ErrorContext(owner or "?", member.name),
        ) from e
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConstructionError(
            f"Constraint '{constraint.kind.value}' has invalid parameters: {problems}",
            ErrorContext(owner or "?", member.name),
        ) from e


def build_rules(member: HostMember, owner: str = "") -> tuple[list[ValidationRule], bool]:
    """
    Build all rules of a host member, in declaration order.

    Returns:
        tuple of:
        - list[ValidationRule]: Rules in declaration order
        - bool: Whether the member is required
    """
    rules = [build_rule(constraint, member, owner) for constraint in member.constraints]
    is_required = any(isinstance(rule, RequiredRule) for rule in rules)
    return rules, is_required
