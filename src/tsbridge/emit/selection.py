"""
Member selection shared by every emitter layer.

Decides which members of a type are emitted, under which name and in which
order, and which declared types an emitted declaration refers to. The import
resolver and the emitters both go through this module so that the symbols
that get imported are exactly the symbols that get written.
"""

from __future__ import annotations

import logging

from tsbridge.core.ir import (
    DeclaredType,
    Member,
    MemberCategory,
    ModuleType,
    NamespaceType,
    ObjectType,
    TypeKind,
    TypeNode,
)
from tsbridge.core.strings import camel_case

from .config import GeneratorConfig

logger = logging.getLogger(__name__)


def degrades_to_any(node: TypeNode, arguments: list[TypeNode] | None = None) -> bool:
    """
    Whether a reference to *node* with *arguments* is emitted as ``any``.

    Unknown and ignored types degrade, as do generic instantiations whose
    argument count does not match the definition's parameters.
    """
    arguments = arguments or []
    match node.kind:
        case TypeKind.UNKNOWN:
            return True
        case TypeKind.ENUM:
            return node.ignored or bool(arguments)  # type: ignore[union-attr]
        case TypeKind.INTERFACE | TypeKind.CLASS:
            return node.ignored or len(arguments) != len(node.type_parameters)  # type: ignore[union-attr]
        case _:
            return False


def referenced_types(node: TypeNode, arguments: list[TypeNode] | None = None) -> list[DeclaredType]:
    """Declared types written out by a reference to *node*, in order."""
    arguments = arguments or []
    if degrades_to_any(node, arguments):
        return []

    match node.kind:
        case TypeKind.COLLECTION:
            return referenced_types(node.element)  # type: ignore[union-attr]
        case TypeKind.ENUM | TypeKind.INTERFACE | TypeKind.CLASS:
            found: list[DeclaredType] = [node]  # type: ignore[list-item]
            for argument in arguments:
                found.extend(referenced_types(argument))
            return found
        case _:
            return []


def nearest_emitted_base(node: ObjectType) -> ObjectType | None:
    """Nearest ancestor of *node* that is not ignored."""
    base = node.base
    while base is not None and base.ignored:
        base = base.base
    return base


def ordered_modules(namespace: NamespaceType) -> list[ModuleType]:
    """
    Modules of *namespace* in emission order.

    Sorted by name, except that a module declaring a base type always comes
    before the modules whose declarations derive from it. Modules that derive
    from each other are emitted by name and a warning is logged.
    """
    depends: dict[str, set[str]] = {name: set() for name in namespace.modules}
    for name, module in namespace.modules.items():
        for node in [*module.interfaces, *module.classes]:
            base = nearest_emitted_base(node)
            if base is None or base.namespace != namespace.name or base.module == name:
                continue
            if base.module in depends:
                depends[name].add(base.module)

    ordered: list[ModuleType] = []
    remaining = depends
    while remaining:
        ready = [name for name, deps in remaining.items() if not deps & remaining.keys()]
        if ready:
            name = min(ready)
        else:
            name = min(remaining)
            logger.warning(
                "Modules of namespace %s derive from each other: %s",
                namespace.name,
                ", ".join(sorted(remaining)),
            )
        ordered.append(namespace.modules[name])
        del remaining[name]
    return ordered


class MemberSelection:
    """
    Member filtering, naming and ordering for one configuration.

    Inherited members are merged here at emission time; the members of the
    type graph are never modified.
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config

    def format_name(self, member: Member) -> str:
        """Emitted member name: explicit alias, else camelCase when enabled."""
        if member.serialized_name:
            return member.serialized_name
        if self.config.camel_case_names:
            return camel_case(member.name)
        return member.name

    def is_enabled(self, member: Member) -> bool:
        if member.ignored:
            return False
        if member.category == MemberCategory.FIELD:
            return self.config.emit_fields
        return self.config.emit_properties

    def emitted_base(self, node: ObjectType) -> ObjectType | None:
        """Nearest ancestor that is emitted (ignored ancestors are skipped)."""
        return nearest_emitted_base(node)

    def base_arguments(self, node: ObjectType) -> list[TypeNode]:
        """Generic arguments applied to the emitted base."""
        base = self.emitted_base(node)
        if base is None or base is not node.base:
            return []
        return node.base_arguments

    def declared(self, node: ObjectType) -> list[Member]:
        """
        Own members plus those merged in from ignored ancestors.

        A class also declares every member of the interfaces it implements.
        """
        chain = [node]
        base = node.base
        while base is not None and (base.ignored or self._implements(node, base)):
            chain.append(base)
            base = base.base
        return self._merge(chain)

    def all(self, node: ObjectType) -> list[Member]:
        """Every enabled member, base first with overrides winning."""
        chain: list[ObjectType] = []
        current: ObjectType | None = node
        while current is not None:
            chain.append(current)
            current = current.base
        return self._merge(chain)

    def instance_members(self, node: ObjectType) -> list[Member]:
        """All non-constant members; the members a value object carries."""
        return [m for m in self.all(node) if not m.is_constant]

    def constructor_parameters(self, node: ObjectType) -> tuple[list[Member], list[Member]]:
        """
        Members that must be passed to the constructor.

        Returns:
            tuple of:
            - list[Member]: Parameters assigned by this declaration
            - list[Member]: Parameters forwarded to the base constructor
        """
        own = [m for m in self.declared(node) if self._needs_parameter(m)]
        base = self.emitted_base(node)
        forwarded: list[Member] = []
        if base is not None and base.kind == TypeKind.CLASS:
            base_own, base_forwarded = self.constructor_parameters(base)
            forwarded = base_own + base_forwarded
        return own, forwarded

    def references(self, node: DeclaredType) -> list[DeclaredType]:
        """Declared types the declaration of *node* writes out, deduplicated."""
        if node.kind == TypeKind.ENUM:
            return []

        found: list[DeclaredType] = []
        base = self.emitted_base(node)  # type: ignore[arg-type]
        if base is not None:
            found.append(base)  # type: ignore[arg-type]
            for argument in self.base_arguments(node):  # type: ignore[arg-type]
                found.extend(referenced_types(argument))

        for member in self.declared(node):  # type: ignore[arg-type]
            if member.is_constant:
                continue
            found.extend(referenced_types(member.type, member.generic_arguments))

        unique: dict[int, DeclaredType] = {}
        for ref in found:
            unique.setdefault(id(ref), ref)
        return list(unique.values())

    def _implements(self, node: ObjectType, base: ObjectType) -> bool:
        return node.kind == TypeKind.CLASS and base.kind == TypeKind.INTERFACE

    def _needs_parameter(self, member: Member) -> bool:
        return member.is_required and not member.is_constant and member.default_value() is None

    def _merge(self, chain: list[ObjectType]) -> list[Member]:
        merged: dict[str, Member] = {}
        for owner in reversed(chain):
            for member in owner.members.values():
                if self.is_enabled(member):
                    merged.pop(member.name, None)
                    merged[member.name] = member
        return sorted(merged.values(), key=self.format_name)
