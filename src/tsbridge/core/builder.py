"""
Type model builder.

Walks a host type description and materializes the connected type graph.
Each distinct host type becomes exactly one node; nodes are registered before
their members are walked, so mutually referencing types terminate.
"""

from __future__ import annotations

import logging

from tsbridge.validation import build_rules

from .errors import ConstructionError, ErrorContext
from .ir import (
    ClassType,
    CollectionType,
    EnumType,
    EnumValue,
    GenericParameterType,
    InterfaceType,
    Member,
    ObjectType,
    SystemKind,
    SystemType,
    TypeGraph,
    TypeNode,
    UnknownType,
)
from .metadata import HostKind, HostMember, HostType

logger = logging.getLogger(__name__)


class TypeModelBuilder:
    """
    Build a ``TypeGraph`` from a root ``HostType``.

    A builder instance serves one generation request; create a new one per
    run.

    Example:
        graph = TypeModelBuilder().build(host_person)
        graph.root            # ClassType(app.models.Person)
        graph.namespaces      # {"app": NamespaceType(app)}
    """

    def __init__(self) -> None:
        self._graph = TypeGraph()
        self._built: dict[int, TypeNode] = {}
        # Hosts kept alive so their ids stay unique for the whole run
        self._hosts: list[HostType] = []
        self._system: dict[SystemKind, SystemType] = {}
        self._resolving_base: set[int] = set()

    def build(self, root: HostType) -> TypeGraph:
        """
        Build the graph reachable from *root*.

        Raises:
            ConstructionError: On inheritance cycles or malformed members
        """
        target = root.generic_definition or root
        self._graph.root = self._build(target)
        logger.debug(
            "Built type graph for %s: %d namespace(s)",
            root.qualified_name,
            len(self._graph.namespaces),
        )
        return self._graph

    def _build(self, host: HostType) -> TypeNode:
        key = id(host)
        if key in self._built:
            return self._built[key]

        match host.kind:
            case HostKind.PRIMITIVE:
                node: TypeNode = self._system_type(host.system_kind or SystemKind.OTHER)
            case HostKind.NULLABLE:
                # Nullability is recorded on the member, not on the node
                node = self._build(host.element) if host.element else self._unknown(host)
            case HostKind.COLLECTION:
                node = CollectionType(
                    element=self._build_argument(host.element) if host.element else self._unknown(host)
                )
            case HostKind.ENUM:
                node = self._build_enum(host)
            case HostKind.INTERFACE | HostKind.CLASS:
                if host.is_generic_instance:
                    # Bare instantiations outside a member lose their arguments
                    node = self._build(host.generic_definition)  # type: ignore[arg-type]
                else:
                    return self._build_object(host)
            case HostKind.GENERIC_PARAMETER:
                node = GenericParameterType(name=host.name)
            case _:
                node = self._unknown(host)

        self._remember(host, node)
        return node

    def _remember(self, host: HostType, node: TypeNode) -> None:
        self._built[id(host)] = node
        self._hosts.append(host)

    def _system_type(self, kind: SystemKind) -> SystemType:
        if kind not in self._system:
            self._system[kind] = SystemType(system_kind=kind)
        return self._system[kind]

    def _unknown(self, host: HostType) -> UnknownType:
        logger.warning("Cannot map host type %s; emitting it as 'any'", host.qualified_name)
        return UnknownType(description=host.qualified_name)

    def _build_enum(self, host: HostType) -> EnumType:
        node = EnumType(
            name=host.name,
            namespace=host.namespace,
            module=host.module,
            values=[EnumValue(name=v.name, value=v.value, display=v.display) for v in host.enum_values],
            private=host.private,
            ignored=host.ignored,
        )
        self._graph.add(node)
        return node

    def _build_object(self, host: HostType) -> ObjectType:
        node_class = InterfaceType if host.kind == HostKind.INTERFACE else ClassType
        node = node_class(
            name=host.name,
            namespace=host.namespace,
            module=host.module,
            type_parameters=list(host.type_parameters),
            ignored=host.ignored,
            private=host.private,
        )
        self._remember(host, node)
        self._graph.add(node)

        if host.base is not None:
            self._resolve_base(host, node)

        owner = node.qualified_name
        for host_member in host.members:
            node.add_member(self._build_member(node, host_member, owner))

        logger.debug("Built %s with %d member(s)", node, len(node.members))
        return node

    def _resolve_base(self, host: HostType, node: ObjectType) -> None:
        base_host = host.base.generic_definition or host.base  # type: ignore[union-attr]
        self._resolving_base.add(id(host))
        if id(base_host) in self._resolving_base:
            raise ConstructionError(
                f"Inheritance cycle through base type {base_host.qualified_name}",
                ErrorContext(host.qualified_name),
            )

        try:
            base = self._build(base_host)
        finally:
            self._resolving_base.discard(id(host))

        if not isinstance(base, ObjectType):
            logger.warning("Ignoring non-object base %r of %s", base, node)
            return

        node.base = base
        node.base_arguments = [
            self._build_argument(arg)
            for arg in host.base.generic_arguments  # type: ignore[union-attr]
        ]

    def _build_argument(self, host: HostType) -> TypeNode:
        """Build a generic argument or collection element."""
        if host.kind == HostKind.NULLABLE and host.element is not None:
            host = host.element
        if host.is_generic_instance:
            # Nested instantiations are not representable as a single node
            logger.warning("Nested generic instantiation %s degraded to 'any'", host.qualified_name)
            return UnknownType(description=host.qualified_name)
        return self._build(host)

    def _build_member(self, owner: ObjectType, host_member: HostMember, owner_name: str) -> Member:
        host_type = host_member.type
        is_nullable = host_member.nullable

        if host_type.kind == HostKind.NULLABLE:
            is_nullable = True
            host_type = host_type.element or host_type

        generic_arguments: list[TypeNode] = []
        if host_type.is_generic_instance:
            generic_arguments = [self._build_argument(arg) for arg in host_type.generic_arguments]
            host_type = host_type.generic_definition  # type: ignore[assignment]

        rules, is_required = build_rules(host_member, owner_name)

        return Member(
            name=host_member.name,
            owner=owner,
            type=self._build(host_type),
            category=host_member.category,
            generic_arguments=generic_arguments,
            is_nullable=is_nullable,
            is_required=is_required,
            constant_value=host_member.constant_value,
            display_name=host_member.display_name,
            prompt=host_member.prompt,
            ui_hint=host_member.ui_hint,
            ui_hint_parameters=dict(host_member.ui_hint_parameters),
            data_type=host_member.data_type,
            serialized_name=host_member.serialized_name,
            ignored=host_member.ignored,
            rules=rules,
        )


def build_type_graph(root: HostType) -> TypeGraph:
    """Build the type graph for *root* with a fresh builder."""
    return TypeModelBuilder().build(root)
