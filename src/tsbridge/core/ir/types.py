"""
Type node definitions for the tsbridge IR.

A type node is one of a closed set of variants, each tagged with a
``TypeKind`` so emitters can match on ``node.kind`` exhaustively. Nodes are
shared by reference: the same host type always maps to the same node object,
so equality and hashing are identity based.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..strings import module_identifier

if TYPE_CHECKING:
    from .members import Member


class TypeKind(str, Enum):
    """Discriminator for type node variants."""

    SYSTEM = "system"
    COLLECTION = "collection"
    ENUM = "enum"
    INTERFACE = "interface"
    CLASS = "class"
    GENERIC_PARAMETER = "generic_parameter"
    UNKNOWN = "unknown"


class SystemKind(str, Enum):
    """Primitive categories and their TypeScript spelling."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OTHER = "other"

    @property
    def ts_name(self) -> str:
        return _SYSTEM_TS_NAMES[self]


_SYSTEM_TS_NAMES = {
    SystemKind.STRING: "string",
    SystemKind.NUMBER: "number",
    SystemKind.BOOLEAN: "boolean",
    SystemKind.DATE: "Date",
    SystemKind.OTHER: "any",
}


@dataclass(eq=False, repr=False)
class SystemType:
    """A primitive host type mapped 1:1 to a TypeScript primitive."""

    system_kind: SystemKind
    kind: TypeKind = field(default=TypeKind.SYSTEM, init=False)

    @property
    def name(self) -> str:
        return self.system_kind.ts_name

    def __repr__(self) -> str:
        return f"SystemType({self.system_kind.value})"


@dataclass(eq=False, repr=False)
class CollectionType:
    """An ordered homogeneous collection of ``element``."""

    element: TypeNode
    kind: TypeKind = field(default=TypeKind.COLLECTION, init=False)

    def __repr__(self) -> str:
        return f"CollectionType({self.element!r})"


@dataclass(frozen=True)
class EnumValue:
    """One enum entry: identifier, value and display label."""

    name: str
    value: int | str
    display: str | None = None

    @property
    def display_name(self) -> str:
        return self.display or self.name


@dataclass(eq=False, repr=False)
class EnumType:
    """A named, ordered list of enum entries."""

    name: str
    namespace: str
    module: str
    values: list[EnumValue] = field(default_factory=list)
    private: bool = False
    ignored: bool = False
    kind: TypeKind = field(default=TypeKind.ENUM, init=False)

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"

    def __repr__(self) -> str:
        return f"EnumType({self.qualified_name})"


@dataclass(eq=False, repr=False)
class ObjectType:
    """
    Shared shape of interfaces and classes.

    Attributes:
        members: Own declared members keyed by host member name
        base: Single base type (no multiple inheritance)
        base_arguments: Generic arguments applied to ``base``, in order
        type_parameters: Generic parameter names declared by this type
        ignored: Hidden from output
        private: Host-private name; only exported when referenced elsewhere
    """

    name: str
    namespace: str
    module: str
    members: dict[str, Member] = field(default_factory=dict)
    base: ObjectType | None = None
    base_arguments: list[TypeNode] = field(default_factory=list)
    type_parameters: list[str] = field(default_factory=list)
    ignored: bool = False
    private: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"

    @property
    def is_generic(self) -> bool:
        return bool(self.type_parameters)

    def add_member(self, member: Member) -> None:
        """Register an own member; names must be unique within the type."""
        if member.name in self.members:
            from ..errors import ConstructionError, ErrorContext

            raise ConstructionError(
                "Duplicate member name",
                ErrorContext(self.qualified_name, member.name),
            )
        self.members[member.name] = member

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.qualified_name})"


@dataclass(eq=False, repr=False)
class InterfaceType(ObjectType):
    kind: TypeKind = field(default=TypeKind.INTERFACE, init=False)


@dataclass(eq=False, repr=False)
class ClassType(ObjectType):
    kind: TypeKind = field(default=TypeKind.CLASS, init=False)


@dataclass(eq=False, repr=False)
class GenericParameterType:
    """Reference to a generic parameter such as ``T``."""

    name: str
    kind: TypeKind = field(default=TypeKind.GENERIC_PARAMETER, init=False)

    def __repr__(self) -> str:
        return f"GenericParameterType({self.name})"


@dataclass(eq=False, repr=False)
class UnknownType:
    """Degraded node for host types that cannot be categorized."""

    description: str = "unknown"
    kind: TypeKind = field(default=TypeKind.UNKNOWN, init=False)

    def __repr__(self) -> str:
        return f"UnknownType({self.description})"


TypeNode = (
    SystemType
    | CollectionType
    | EnumType
    | InterfaceType
    | ClassType
    | GenericParameterType
    | UnknownType
)

DeclaredType = EnumType | InterfaceType | ClassType


@dataclass(eq=False, repr=False)
class ModuleType:
    """A named group of declarations emitted together."""

    name: str
    namespace: str
    declarations: list[DeclaredType] = field(default_factory=list)

    @property
    def identifier(self) -> str:
        return module_identifier(self.name)

    @property
    def enums(self) -> list[EnumType]:
        return [d for d in self.declarations if d.kind == TypeKind.ENUM and not d.ignored]

    @property
    def interfaces(self) -> list[InterfaceType]:
        return [d for d in self.declarations if d.kind == TypeKind.INTERFACE and not d.ignored]

    @property
    def classes(self) -> list[ClassType]:
        return [d for d in self.declarations if d.kind == TypeKind.CLASS and not d.ignored]

    def __repr__(self) -> str:
        return f"ModuleType({self.name}, {len(self.declarations)} declarations)"


@dataclass(eq=False, repr=False)
class NamespaceType:
    """A named group of modules; the unit written to one output file."""

    name: str
    modules: dict[str, ModuleType] = field(default_factory=dict)

    def module(self, name: str) -> ModuleType:
        """Get or create the module called *name*."""
        if name not in self.modules:
            self.modules[name] = ModuleType(name=name, namespace=self.name)
        return self.modules[name]

    @property
    def classes(self) -> list[ClassType]:
        return [c for m in self.modules.values() for c in m.classes]

    def declarations(self) -> list[DeclaredType]:
        return [d for m in self.modules.values() for d in m.declarations if not d.ignored]

    def __repr__(self) -> str:
        return f"NamespaceType({self.name})"


@dataclass(eq=False)
class TypeGraph:
    """
    The fully connected type graph for one generation request.

    Built once by ``TypeModelBuilder`` and read-only afterwards.
    """

    root: TypeNode | None = None
    namespaces: dict[str, NamespaceType] = field(default_factory=dict)
    _locations: dict[int, ModuleType] = field(default_factory=dict, repr=False)

    def add(self, node: DeclaredType) -> ModuleType:
        """Place a declared node in its namespace/module."""
        namespace = self.namespaces.get(node.namespace)
        if namespace is None:
            namespace = self.namespaces[node.namespace] = NamespaceType(name=node.namespace)
        module = namespace.module(node.module)
        module.declarations.append(node)
        self._locations[id(node)] = module
        return module

    def contains(self, node: Any) -> bool:
        return id(node) in self._locations

    def module_of(self, node: DeclaredType) -> ModuleType | None:
        return self._locations.get(id(node))

    def namespace_of(self, node: DeclaredType) -> NamespaceType | None:
        module = self.module_of(node)
        if module is None:
            return None
        return self.namespaces[module.namespace]

    @property
    def root_namespace(self) -> str | None:
        if self.root is not None and self.contains(self.root):
            return self.root.namespace  # type: ignore[union-attr]
        return None
