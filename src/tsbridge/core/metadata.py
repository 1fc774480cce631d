"""
Host metadata contract.

These dataclasses are the only thing the type-model builder reads. Any
ingestion adapter (see ``tsbridge.ingest``) populates them from whatever the
host type system offers; the core never inspects host code itself.

Host descriptors are compared by identity: the adapter must hand out the same
``HostType`` object every time it meets the same host type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .ir import MemberCategory, SystemKind


class HostKind(str, Enum):
    """Categories a host type can be described as."""

    PRIMITIVE = "primitive"
    NULLABLE = "nullable"  # optional-value wrapper around ``element``
    COLLECTION = "collection"
    ENUM = "enum"
    INTERFACE = "interface"
    CLASS = "class"
    GENERIC_PARAMETER = "generic_parameter"
    UNKNOWN = "unknown"


class ConstraintKind(str, Enum):
    """Declarative validation constraints a host member can carry."""

    REQUIRED = "required"
    RANGE = "range"
    STRING_LENGTH = "string_length"
    REGULAR_EXPRESSION = "regular_expression"
    COMPARE = "compare"
    EMAIL_ADDRESS = "email_address"
    URL = "url"
    PHONE = "phone"
    CREDIT_CARD = "credit_card"
    CUSTOM = "custom"


@dataclass
class HostConstraint:
    """
    One declared constraint.

    ``parameters`` keys per kind:
        range: minimum, maximum, min_exclusive, max_exclusive, numeric_kind
        string_length: minimum, maximum
        regular_expression: pattern, full_match
        compare: other
        custom: module, function
    """

    kind: ConstraintKind
    parameters: dict[str, Any] = field(default_factory=dict)
    message: str | None = None


@dataclass(frozen=True)
class HostEnumValue:
    name: str
    value: int | str
    display: str | None = None


@dataclass(eq=False)
class HostMember:
    """A property or field declared on a host type."""

    name: str
    type: HostType
    category: MemberCategory = MemberCategory.PROPERTY
    nullable: bool = False
    constant_value: Any = None
    display_name: str | None = None
    prompt: str | None = None
    ui_hint: str | None = None
    ui_hint_parameters: dict[str, str] = field(default_factory=dict)
    data_type: str | None = None
    serialized_name: str | None = None
    ignored: bool = False
    constraints: list[HostConstraint] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"HostMember({self.name}: {self.type!r})"


@dataclass(eq=False)
class HostType:
    """
    Description of one host type.

    A generic instantiation (``Page[Person]``) is described by a HostType
    whose ``generic_definition`` points at the definition and whose
    ``generic_arguments`` list the arguments in declaration order.
    """

    name: str
    kind: HostKind
    namespace: str = ""
    module: str = ""
    system_kind: SystemKind | None = None
    element: HostType | None = None
    members: list[HostMember] = field(default_factory=list)
    base: HostType | None = None
    type_parameters: list[str] = field(default_factory=list)
    generic_definition: HostType | None = None
    generic_arguments: list[HostType] = field(default_factory=list)
    enum_values: list[HostEnumValue] = field(default_factory=list)
    ignored: bool = False
    private: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}" if self.module else self.name

    @property
    def is_generic_instance(self) -> bool:
        return self.generic_definition is not None

    def __repr__(self) -> str:
        return f"HostType({self.kind.value} {self.qualified_name})"


def primitive(kind: SystemKind) -> HostType:
    """Convenience constructor for primitive host types."""
    return HostType(name=kind.value, kind=HostKind.PRIMITIVE, system_kind=kind)


def nullable(element: HostType) -> HostType:
    """Wrap *element* in an optional-value wrapper."""
    return HostType(name=f"{element.name}?", kind=HostKind.NULLABLE, element=element)


def collection(element: HostType) -> HostType:
    """Describe an ordered collection of *element*."""
    return HostType(name=f"{element.name}[]", kind=HostKind.COLLECTION, element=element)
