"""
Member (property/field) definitions for the tsbridge IR.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..strings import ts_literal
from .types import SystemKind, TypeKind

if TYPE_CHECKING:
    from tsbridge.validation.rules import ValidationRule

    from .types import ObjectType, TypeNode


UI_HINT_HIDDEN = "hidden"


class MemberCategory(str, Enum):
    """Which host member category a member came from."""

    PROPERTY = "property"
    FIELD = "field"


@dataclass(eq=False, repr=False)
class Member:
    """
    A property or field of an interface or class.

    Attributes:
        name: Host member name, unique within the owner's own members
        owner: Owning type node
        type: Declared type with nullable wrappers removed
        generic_arguments: Arguments when ``type`` is a generic definition
        is_nullable: Accepts null (optional value wrapper or nullable reference)
        is_required: Carries a Required constraint
        constant_value: Literal value for constant fields
        display_name: Label used by forms and messages
        prompt: Placeholder text used by forms
        ui_hint: Free-form key picking the input affordance
        serialized_name: Explicit wire name, overrides name formatting
        rules: Validation rules in declaration order
    """

    name: str
    owner: ObjectType
    type: TypeNode
    category: MemberCategory = MemberCategory.PROPERTY
    generic_arguments: list[TypeNode] = field(default_factory=list)
    is_nullable: bool = False
    is_required: bool = False
    constant_value: Any = None
    display_name: str | None = None
    prompt: str | None = None
    ui_hint: str | None = None
    ui_hint_parameters: dict[str, str] = field(default_factory=dict)
    data_type: str | None = None
    serialized_name: str | None = None
    ignored: bool = False
    rules: list[ValidationRule] = field(default_factory=list)

    @property
    def display(self) -> str:
        return self.display_name or self.name

    @property
    def is_constant(self) -> bool:
        return self.constant_value is not None

    @property
    def is_hidden(self) -> bool:
        return self.ui_hint == UI_HINT_HIDDEN

    @property
    def system_kind(self) -> SystemKind | None:
        """The primitive category of the member type, if it is a system type."""
        if self.type.kind == TypeKind.SYSTEM:
            return self.type.system_kind  # type: ignore[union-attr]
        return None

    def default_value(self) -> str | None:
        """
        Default value expression used when a required member has no value.

        Returns:
            TypeScript expression, or None when the type has no natural
            default (the member then becomes a constructor parameter)
        """
        if self.is_nullable:
            return "null"

        match self.type.kind:
            case TypeKind.ENUM:
                values = self.type.values  # type: ignore[union-attr]
                return ts_literal(values[0].value) if values else "0"
            case TypeKind.COLLECTION:
                return "[]"
            case TypeKind.SYSTEM:
                match self.type.system_kind:  # type: ignore[union-attr]
                    case SystemKind.STRING:
                        return '""'
                    case SystemKind.NUMBER:
                        return "0"
                    case SystemKind.BOOLEAN:
                        return "false"
                    case _:
                        return None
            case _:
                return None

    def __repr__(self) -> str:
        return f"Member({self.owner.name}.{self.name})"
