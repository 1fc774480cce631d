"""
tsbridge Internal Representation.

The IR is the read-only type graph that every emitter layer consumes:
type nodes, members and the namespace/module grouping.
"""

from .members import UI_HINT_HIDDEN, Member, MemberCategory
from .types import (
    ClassType,
    CollectionType,
    DeclaredType,
    EnumType,
    EnumValue,
    GenericParameterType,
    InterfaceType,
    ModuleType,
    NamespaceType,
    ObjectType,
    SystemKind,
    SystemType,
    TypeGraph,
    TypeKind,
    TypeNode,
    UnknownType,
)

__all__ = [
    # Types
    "TypeKind",
    "SystemKind",
    "SystemType",
    "CollectionType",
    "EnumType",
    "EnumValue",
    "ObjectType",
    "InterfaceType",
    "ClassType",
    "GenericParameterType",
    "UnknownType",
    "TypeNode",
    "DeclaredType",
    # Grouping
    "ModuleType",
    "NamespaceType",
    "TypeGraph",
    # Members
    "Member",
    "MemberCategory",
    "UI_HINT_HIDDEN",
]
