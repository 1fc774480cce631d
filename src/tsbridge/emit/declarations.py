"""
Plain TypeScript declarations.

``DeclarationEmitter`` writes enums, interfaces and classes. Higher layers
(``ResolverEmitter``, ``FormEmitter``) wrap an inner emitter through
``LayeredEmitter`` and append their own output after the inner emitter's.
"""

from __future__ import annotations

import logging

from tsbridge.core.errors import EmissionError, ErrorContext
from tsbridge.core.ir import (
    ClassType,
    EnumType,
    InterfaceType,
    Member,
    ModuleType,
    NamespaceType,
    ObjectType,
    TypeKind,
)
from tsbridge.core.strings import ts_literal
from tsbridge.core.symbols import ImportRequest

from .context import EmitContext
from .result import TS_EXTENSION, GeneratedModule
from .selection import MemberSelection, nearest_emitted_base, ordered_modules

logger = logging.getLogger(__name__)


def ordered_declarations(module: ModuleType) -> list[EnumType | InterfaceType | ClassType]:
    """
    Declarations of *module* in emission order.

    Enums, then interfaces, then classes, each sorted by name; a base that
    lives in the same module is always placed before its derived type.
    """
    ordered: list[EnumType | InterfaceType | ClassType] = sorted(module.enums, key=lambda n: n.name)
    for group in (module.interfaces, module.classes):
        members = {id(node) for node in group}
        placed: set[int] = set()

        def place(node: ObjectType) -> None:
            if id(node) in placed:
                return
            placed.add(id(node))
            base = nearest_emitted_base(node)
            if base is not None and id(base) in members:
                place(base)
            ordered.append(node)  # type: ignore[arg-type]

        for node in sorted(group, key=lambda n: n.name):
            place(node)
    return ordered


class DeclarationEmitter:
    """
    Base emitter layer: enum, interface and class declarations.

    Example output:
        export class Person {
            age?: number | null;
            name: string = "";
        }
    """

    def requests(self, namespace: NamespaceType, selection: MemberSelection) -> list[ImportRequest]:
        """Extra import requests beyond the type references of declarations."""
        return []

    def class_symbol_suffixes(self) -> list[str]:
        """Suffixes of symbols derived from each emitted class."""
        return []

    def file_extension(self, namespace: NamespaceType, selection: MemberSelection) -> str:
        return TS_EXTENSION

    def helper_modules(self, sources: set[str]) -> dict[str, GeneratedModule]:
        """Synthesized support modules, given every import source used in the run."""
        return {}

    def emit_enum(self, node: EnumType, ctx: EmitContext) -> None:
        sb = ctx.sb
        sb.line(f"{ctx.export_prefix(node)}const enum {node.name} {{")
        with sb.indent():
            for i, value in enumerate(node.values):
                separator = "," if i < len(node.values) - 1 else ""
                sb.line(f"{value.name} = {ts_literal(value.value)}{separator}")
        sb.line("}")

    def emit_interface(self, node: InterfaceType, ctx: EmitContext) -> None:
        sb = ctx.sb
        sb.line(f"{ctx.export_prefix(node)}interface {self._heading(node, ctx)} {{")
        with sb.indent():
            for member in ctx.selection.declared(node):
                if member.is_constant:
                    continue
                optional = "" if member.is_required else "?"
                sb.line(f"{ctx.member_key(member)}{optional}: {ctx.member_type(member, node)};")
        sb.line("}")

    def emit_class(self, node: ClassType, ctx: EmitContext) -> None:
        sb = ctx.sb
        declared = ctx.selection.declared(node)
        own_params, base_params = ctx.selection.constructor_parameters(node)

        sb.line(f"{ctx.export_prefix(node)}class {self._heading(node, ctx)} {{")
        with sb.indent():
            instance = [m for m in declared if not m.is_constant]
            for member in declared:
                if member.is_constant:
                    sb.line(f"static readonly {ctx.member_key(member)} = {ts_literal(member.constant_value)};")
            if instance and len(instance) < len(declared):
                sb.blank()

            for member in instance:
                sb.line(self._class_member_line(member, node, ctx))

            if own_params:
                sb.blank()
                self._emit_constructor(node, own_params, base_params, ctx)
        sb.line("}")

    def _heading(self, node: ObjectType, ctx: EmitContext) -> str:
        heading = node.name
        if node.type_parameters:
            heading += f"<{', '.join(node.type_parameters)}>"

        base = ctx.selection.emitted_base(node)
        if base is None:
            return heading

        if not ctx.graph.contains(base):
            raise EmissionError(
                f"Base type {base.qualified_name} is not part of the type graph",
                ErrorContext(node.qualified_name),
            )

        base_name = ctx.reference(base)
        if base.type_parameters:
            arguments = ctx.selection.base_arguments(node)
            if len(arguments) == len(base.type_parameters):
                rendered = [ctx.type_expression(a, scope=node) for a in arguments]
            else:
                logger.warning(
                    "Base %s of %s expects %d generic argument(s); using 'any'",
                    base,
                    node,
                    len(base.type_parameters),
                )
                rendered = ["any"] * len(base.type_parameters)
            base_name += f"<{', '.join(rendered)}>"
        keyword = "extends"
        if node.kind == TypeKind.CLASS and base.kind == TypeKind.INTERFACE:
            keyword = "implements"
        return f"{heading} {keyword} {base_name}"

    def _class_member_line(self, member: Member, scope: ClassType, ctx: EmitContext) -> str:
        key = ctx.member_key(member)
        member_type = ctx.member_type(member, scope)
        if not member.is_required:
            return f"{key}?: {member_type};"

        default = member.default_value()
        if default is None:
            return f"{key}: {member_type};"
        return f"{key}: {member_type} = {default};"

    def _emit_constructor(
        self,
        node: ClassType,
        own_params: list[Member],
        base_params: list[Member],
        ctx: EmitContext,
    ) -> None:
        sb = ctx.sb
        names = _parameter_names(own_params + base_params, ctx)
        signature = ", ".join(
            f"{names[id(m)]}: {ctx.member_type(m, node)}" for m in own_params + base_params
        )

        sb.line(f"constructor({signature}) {{")
        with sb.indent():
            base = ctx.selection.emitted_base(node)
            if base is not None and base.kind == TypeKind.CLASS:
                forwarded = ", ".join(names[id(m)] for m in base_params)
                sb.line(f"super({forwarded});")
            for member in own_params:
                sb.line(f"{ctx.access('this', member)} = {names[id(member)]};")
        sb.line("}")


def _parameter_names(members: list[Member], ctx: EmitContext) -> dict[int, str]:
    """Constructor parameter identifiers, made unique and valid."""
    names: dict[int, str] = {}
    used: set[str] = set()
    for member in members:
        base = "".join(c if c.isalnum() or c in "_$" else "_" for c in ctx.member_name(member))
        if not base or base[0].isdigit():
            base = "_" + base
        name, n = base, 1
        while name in used:
            name, n = f"{base}{n}", n + 1
        used.add(name)
        names[id(member)] = name
    return names


class LayeredEmitter:
    """
    An emitter layer wrapping an inner emitter.

    Every hook delegates to ``inner``; subclasses extend the hooks they need
    and call the inner emitter before appending their own output.
    """

    def __init__(self, inner: DeclarationEmitter | LayeredEmitter):
        self.inner = inner

    def requests(self, namespace: NamespaceType, selection: MemberSelection) -> list[ImportRequest]:
        return self.inner.requests(namespace, selection)

    def class_symbol_suffixes(self) -> list[str]:
        return self.inner.class_symbol_suffixes()

    def file_extension(self, namespace: NamespaceType, selection: MemberSelection) -> str:
        return self.inner.file_extension(namespace, selection)

    def helper_modules(self, sources: set[str]) -> dict[str, GeneratedModule]:
        return self.inner.helper_modules(sources)

    def emit_enum(self, node: EnumType, ctx: EmitContext) -> None:
        self.inner.emit_enum(node, ctx)

    def emit_interface(self, node: InterfaceType, ctx: EmitContext) -> None:
        self.inner.emit_interface(node, ctx)

    def emit_class(self, node: ClassType, ctx: EmitContext) -> None:
        self.inner.emit_class(node, ctx)


Emitter = DeclarationEmitter | LayeredEmitter


def attached_classes(namespace: NamespaceType) -> list[ClassType]:
    """Non-generic classes of *namespace* in emission order; layers attach code to these."""
    return [
        node
        for module in ordered_modules(namespace)
        for node in ordered_declarations(module)
        if node.kind == TypeKind.CLASS and not node.is_generic  # type: ignore[union-attr]
    ]
