"""
Per-namespace emission state handed to every emitter layer.
"""

from __future__ import annotations

from dataclasses import dataclass

from tsbridge.core.ir import (
    DeclaredType,
    Member,
    ModuleType,
    NamespaceType,
    ObjectType,
    TypeGraph,
    TypeKind,
    TypeNode,
)
from tsbridge.core.symbols import LibraryImport

from .config import GeneratorConfig
from .imports import ImportResolver, ImportTable
from .script import ScriptBuilder, property_access, property_key
from .selection import MemberSelection, degrades_to_any


@dataclass
class EmitContext:
    """
    Everything an emitter needs while writing one namespace file.

    Attributes:
        sb: Output buffer of the file
        graph: Full type graph of the run
        namespace: Namespace being written
        module: Module currently being written (changes while iterating)
        imports: Resolved import table of the file
        resolver: Import resolver of the run, for visibility queries
        selection: Member filtering/naming for the configuration
        config: Generator configuration
    """

    sb: ScriptBuilder
    graph: TypeGraph
    namespace: NamespaceType
    module: ModuleType
    imports: ImportTable
    resolver: ImportResolver
    selection: MemberSelection
    config: GeneratorConfig

    def reference(self, node: DeclaredType, suffix: str = "") -> str:
        return self.imports.reference(node, self.module, suffix)

    def symbol(self, request: LibraryImport) -> str:
        return self.imports.symbol(request)

    def is_exported(self, node: DeclaredType) -> bool:
        """Host-private types stay unexported unless another module refers to them."""
        return not node.private or self.resolver.is_referenced_externally(node)

    def export_prefix(self, node: DeclaredType) -> str:
        return "export " if self.is_exported(node) else ""

    def member_name(self, member: Member) -> str:
        return self.selection.format_name(member)

    def member_key(self, member: Member) -> str:
        """Member name as a declaration or object-literal key."""
        return property_key(self.member_name(member))

    def access(self, target: str, member: Member) -> str:
        """``target.member`` with the emitted member name."""
        return property_access(target, self.member_name(member))

    def type_expression(
        self,
        node: TypeNode,
        arguments: list[TypeNode] | None = None,
        scope: ObjectType | None = None,
    ) -> str:
        """
        TypeScript type expression for a reference to *node*.

        Args:
            node: Referenced type
            arguments: Generic arguments, when *node* is a generic definition
            scope: Declaration the expression appears in; generic parameters
                it does not declare degrade to ``any``
        """
        arguments = arguments or []
        if degrades_to_any(node, arguments):
            return "any"

        match node.kind:
            case TypeKind.SYSTEM:
                return node.system_kind.ts_name  # type: ignore[union-attr]
            case TypeKind.COLLECTION:
                element = self.type_expression(node.element, scope=scope)  # type: ignore[union-attr]
                return f"({element})[]" if " " in element else f"{element}[]"
            case TypeKind.GENERIC_PARAMETER:
                if scope is not None and node.name in scope.type_parameters:  # type: ignore[union-attr]
                    return node.name  # type: ignore[union-attr]
                return "any"
            case TypeKind.ENUM | TypeKind.INTERFACE | TypeKind.CLASS:
                name = self.reference(node)  # type: ignore[arg-type]
                if arguments:
                    rendered = ", ".join(self.type_expression(a, scope=scope) for a in arguments)
                    return f"{name}<{rendered}>"
                return name
            case _:
                return "any"

    def member_type(self, member: Member, scope: ObjectType | None = None) -> str:
        """Member type with its nullability marker."""
        expression = self.type_expression(member.type, member.generic_arguments, scope or member.owner)
        if member.is_nullable:
            return f"{expression} | null"
        return expression
