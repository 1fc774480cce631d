"""
Resolver layer: a react-hook-form resolver per emitted class.

Generated shape (for a class ``Person``):

    export const PersonResolver: Resolver<Person> = async (values) => {
        const errorBuffer = {
            name: [] as FieldError[]
        };

        if (!values.name) {
            errorBuffer.name.push({ type: 'required', message: 'Name is required.' });
        }

        const returnValues: Partial<Person> = {};
        const returnErrors: FieldErrors<Person> = {};

        if (errorBuffer.name.length === 0) {
            returnValues.name = values.name;
        } else {
            returnErrors.name = errorBuffer.name[0];
        }

        return {
            values: returnValues,
            errors: returnErrors
        };
    };

Every rule of a member runs; only the first error collected for a member is
reported.
"""

from __future__ import annotations

from tsbridge.core.ir import ClassType, Member, NamespaceType, TypeKind
from tsbridge.core.symbols import ImportRequest, LibraryImport, SymbolRef
from tsbridge.validation import RuleContext, emit_member_rules

from .context import EmitContext
from .declarations import LayeredEmitter, attached_classes
from .selection import MemberSelection

REACT_HOOK_FORM = "react-hook-form"
RESOLVER_SUFFIX = "Resolver"

RESOLVER = LibraryImport(REACT_HOOK_FORM, "Resolver")
FIELD_ERROR = LibraryImport(REACT_HOOK_FORM, "FieldError")
FIELD_ERRORS = LibraryImport(REACT_HOOK_FORM, "FieldErrors")
RESOLVER_OPTIONS = LibraryImport(REACT_HOOK_FORM, "ResolverOptions")


def resolver_base(node: ClassType, selection: MemberSelection) -> ClassType | None:
    """The base class whose generated resolver *node*'s resolver awaits."""
    base = selection.emitted_base(node)
    if base is None or base.kind != TypeKind.CLASS or base.is_generic:
        return None
    return base  # type: ignore[return-value]


def validated_members(node: ClassType, selection: MemberSelection) -> list[Member]:
    """
    Members checked by *node*'s own resolver.

    When a base resolver is awaited it covers the inherited members, so only
    the members declared here are checked.
    """
    if resolver_base(node, selection) is not None:
        members = selection.declared(node)
    else:
        members = selection.all(node)
    return [m for m in members if not m.is_constant]


class ResolverEmitter(LayeredEmitter):
    """Appends ``<T>Resolver`` after each non-generic class declaration."""

    def requests(self, namespace: NamespaceType, selection: MemberSelection) -> list[ImportRequest]:
        requests = self.inner.requests(namespace, selection)
        classes = attached_classes(namespace)
        if not classes:
            return requests

        requests += [RESOLVER, FIELD_ERROR, FIELD_ERRORS]
        for node in classes:
            base = resolver_base(node, selection)
            if base is not None:
                requests += [RESOLVER_OPTIONS, SymbolRef(base, RESOLVER_SUFFIX)]
            for member in validated_members(node, selection):
                for rule in member.rules:
                    requests.extend(rule.imports())
        return requests

    def class_symbol_suffixes(self) -> list[str]:
        return self.inner.class_symbol_suffixes() + [RESOLVER_SUFFIX]

    def emit_class(self, node: ClassType, ctx: EmitContext) -> None:
        self.inner.emit_class(node, ctx)
        if node.is_generic:
            return
        ctx.sb.blank()
        self.emit_resolver(node, ctx)

    def emit_resolver(self, node: ClassType, ctx: EmitContext) -> None:
        sb = ctx.sb
        type_name = ctx.reference(node)
        members = validated_members(node, ctx.selection)
        checked = [m for m in members if m.rules]
        lookup_pool = {m.name: m for m in ctx.selection.instance_members(node)}

        def lookup(name: str) -> tuple[str, str] | None:
            other = lookup_pool.get(name)
            if other is None:
                return None
            return ctx.access("values", other), other.display

        sb.line(
            f"{ctx.export_prefix(node)}const {node.name}{RESOLVER_SUFFIX}: "
            f"{ctx.symbol(RESOLVER)}<{type_name}> = async (values) => {{"
        )
        with sb.indent():
            if checked:
                field_error = ctx.symbol(FIELD_ERROR)
                sb.line("const errorBuffer = {")
                with sb.indent():
                    for i, member in enumerate(checked):
                        separator = "," if i < len(checked) - 1 else ""
                        sb.line(f"{ctx.member_key(member)}: [] as {field_error}[]{separator}")
                sb.line("};")
                sb.blank()

                for member in checked:
                    emit_member_rules(
                        RuleContext(
                            sb=sb,
                            member=member,
                            value=ctx.access("values", member),
                            bucket=ctx.access("errorBuffer", member),
                            lookup=lookup,
                            symbol=ctx.symbol,
                        )
                    )
                sb.blank()

            sb.line(f"const returnValues: Partial<{type_name}> = {{}};")
            sb.line(f"const returnErrors: {ctx.symbol(FIELD_ERRORS)}<{type_name}> = {{}};")
            sb.blank()

            for member in members:
                self._emit_partition(member, member in checked, ctx)

            base = resolver_base(node, ctx.selection)
            if base is not None:
                sb.blank()
                base_name = ctx.reference(base)
                sb.line(
                    f"const baseResults = await {ctx.reference(base, RESOLVER_SUFFIX)}"
                    f"(values, undefined, {{}} as {ctx.symbol(RESOLVER_OPTIONS)}<{base_name}>);"
                )
            sb.blank()

            sb.line("return {")
            with sb.indent():
                if base is not None:
                    sb.line("values: { ...baseResults.values, ...returnValues },")
                    sb.line("errors: { ...baseResults.errors, ...returnErrors }")
                else:
                    sb.line("values: returnValues,")
                    sb.line("errors: returnErrors")
            sb.line("};")
        sb.line("};")

    def _emit_partition(self, member: Member, checked: bool, ctx: EmitContext) -> None:
        sb = ctx.sb
        copy = f"{ctx.access('returnValues', member)} = {ctx.access('values', member)};"
        if not checked:
            sb.line(copy)
            return

        bucket = ctx.access("errorBuffer", member)
        sb.line(f"if ({bucket}.length === 0) {{")
        with sb.indent():
            sb.line(copy)
        sb.line("} else {")
        with sb.indent():
            sb.line(f"{ctx.access('returnErrors', member)} = {bucket}[0];")
        sb.line("}")
