"""
Namespace driver.

Runs an emitter chain over a type graph: namespaces in dependency order, one
``ScriptBuilder`` per namespace file, flushed into the result map when the
namespace is done.
"""

from __future__ import annotations

import logging

from tsbridge.core.ir import (
    ClassType,
    EnumType,
    InterfaceType,
    ModuleType,
    NamespaceType,
    TypeGraph,
    TypeKind,
    UnknownType,
)

from .config import GeneratorConfig
from .context import EmitContext
from .declarations import Emitter, ordered_declarations
from .imports import ImportResolver
from .result import GeneratedModule, GeneratorResult
from .script import ScriptBuilder
from .selection import MemberSelection, ordered_modules

logger = logging.getLogger(__name__)


class TypeScriptGenerator:
    """
    Generates one TypeScript file per namespace of a type graph.

    Example:
        generator = TypeScriptGenerator(FormEmitter(ResolverEmitter(DeclarationEmitter())), config)
        result = generator.generate(graph)
        result.modules["app"].script
    """

    def __init__(self, emitter: Emitter, config: GeneratorConfig | None = None):
        self.emitter = emitter
        self.config = config or GeneratorConfig()

    def generate(self, graph: TypeGraph) -> GeneratorResult:
        """
        Emit every namespace of *graph*.

        Raises:
            EmissionError: If the graph violates an emission invariant
        """
        selection = MemberSelection(self.config)
        resolver = ImportResolver(graph, selection, self.config.enable_namespace_wrapping)
        result = GeneratorResult(root_namespace=graph.root_namespace)

        used_sources: set[str] = set()
        for namespace in resolver.namespace_order():
            module, sources = self._generate_namespace(namespace, graph, resolver, selection)
            result.modules[namespace.name] = module
            used_sources.update(sources)
            logger.debug("Generated namespace %s (%s)", namespace.name, module.file_extension)

        for name, helper in self.emitter.helper_modules(used_sources).items():
            result.modules[name] = helper
            logger.debug("Generated helper module %s", name)

        for node in self._unmapped(graph):
            result.add_warning(f"{node.description} could not be mapped and was emitted as 'any'")

        return result

    def _generate_namespace(
        self,
        namespace: NamespaceType,
        graph: TypeGraph,
        resolver: ImportResolver,
        selection: MemberSelection,
    ) -> tuple[GeneratedModule, list[str]]:
        modules = ordered_modules(namespace)
        requests = [
            *resolver.type_requests(namespace),
            *self.emitter.requests(namespace, selection),
        ]
        table = resolver.resolve(namespace, requests, self._reserved_names(namespace))

        sb = ScriptBuilder(self.config.indentation)
        statements = table.statements()
        sb.lines(statements)
        if statements:
            sb.blank()

        ctx = EmitContext(
            sb=sb,
            graph=graph,
            namespace=namespace,
            module=modules[0],
            imports=table,
            resolver=resolver,
            selection=selection,
            config=self.config,
        )
        for module in modules:
            declarations = ordered_declarations(module)
            if not declarations:
                continue
            ctx.module = module
            if self.config.enable_namespace_wrapping:
                sb.line(f"export namespace {module.identifier} {{")
                with sb.indent():
                    self._emit_declarations(declarations, ctx)
                sb.line("}")
            else:
                self._emit_declarations(declarations, ctx)
            sb.blank()

        extension = self.emitter.file_extension(namespace, selection)
        return GeneratedModule(extension, sb.to_string()), table.sources

    def _emit_declarations(
        self, declarations: list[EnumType | InterfaceType | ClassType], ctx: EmitContext
    ) -> None:
        for i, node in enumerate(declarations):
            if i:
                ctx.sb.blank()
            match node.kind:
                case TypeKind.ENUM:
                    self.emitter.emit_enum(node, ctx)  # type: ignore[arg-type]
                case TypeKind.INTERFACE:
                    self.emitter.emit_interface(node, ctx)  # type: ignore[arg-type]
                case TypeKind.CLASS:
                    self.emitter.emit_class(node, ctx)  # type: ignore[arg-type]

    def _reserved_names(self, namespace: NamespaceType) -> set[str]:
        """Names the namespace file declares itself."""
        suffixes = self.emitter.class_symbol_suffixes()
        reserved: set[str] = set()
        for module in namespace.modules.values():
            reserved.update(self._module_names(module, suffixes))
        return reserved

    def _module_names(self, module: ModuleType, suffixes: list[str]) -> set[str]:
        names = {node.name for node in module.declarations if not node.ignored}
        for node in module.classes:
            if not node.is_generic:
                names.update(node.name + suffix for suffix in suffixes)
        return names

    def _unmapped(self, graph: TypeGraph) -> list[UnknownType]:
        found: dict[str, UnknownType] = {}
        for namespace in graph.namespaces.values():
            for node in namespace.declarations():
                if node.kind == TypeKind.ENUM:
                    continue
                for member in node.members.values():  # type: ignore[union-attr]
                    if member.type.kind == TypeKind.UNKNOWN:
                        found.setdefault(member.type.description, member.type)  # type: ignore[union-attr]
        return list(found.values())
