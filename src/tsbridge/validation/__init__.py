"""
Validation rule set.

Rules are attached to members while the type graph is built and are turned
into TypeScript checks by the resolver emitter.
"""

from .factory import build_rule, build_rules
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
    RuleContext,
    StringLengthRule,
    UrlRule,
    ValidationRule,
    emit_member_rules,
)

__all__ = [
    "ValidationRule",
    "RequiredRule",
    "RangeRule",
    "StringLengthRule",
    "RegularExpressionRule",
    "CompareRule",
    "EmailAddressRule",
    "UrlRule",
    "PhoneRule",
    "CreditCardRule",
    "CustomRule",
    "RuleContext",
    "emit_member_rules",
    "build_rule",
    "build_rules",
    "PERCENTAGE_DATA_TYPE",
]
