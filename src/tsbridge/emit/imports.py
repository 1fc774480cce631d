"""
Cross-file import resolution.

Every identifier a generated file uses but does not declare is requested
through ``tsbridge.core.symbols``. The resolver turns those requests into an
``ImportTable``: the import statements of one namespace file plus the local
name each requested symbol got. Names that collide with a local declaration
or an earlier import get numeric suffixes (``Address1``, ``Address2``) in
first-seen order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from tsbridge.core.errors import EmissionError, ErrorContext
from tsbridge.core.ir import DeclaredType, ModuleType, NamespaceType, TypeGraph
from tsbridge.core.strings import module_identifier
from tsbridge.core.symbols import ImportRequest, LibraryImport, SymbolRef

from .selection import MemberSelection, ordered_modules

logger = logging.getLogger(__name__)


def relative_source(namespace: str) -> str:
    """Import path of the file generated for *namespace*."""
    return f"./{namespace}"


@dataclass
class ImportAccumulator:
    """
    Local-name bookkeeping for one file.

    Attributes:
        reserved: Names declared by the file itself
        sources: Source path -> {exported symbol: local name}, insertion ordered
        counters: Last suffix handed out per colliding symbol
    """

    reserved: set[str] = field(default_factory=set)
    sources: dict[str, dict[str, str]] = field(default_factory=dict)
    counters: dict[str, int] = field(default_factory=dict)

    def claim(self, source: str, symbol: str) -> str:
        """Local name for *symbol* imported from *source*."""
        imported = self.sources.setdefault(source, {})
        if symbol in imported:
            return imported[symbol]

        local = symbol
        while local in self.reserved or self._is_taken(local):
            self.counters[symbol] = self.counters.get(symbol, 0) + 1
            local = f"{symbol}{self.counters[symbol]}"

        if local != symbol:
            logger.debug("Import %s from %s renamed to %s", symbol, source, local)
        imported[symbol] = local
        return local

    def lookup(self, source: str, symbol: str) -> str | None:
        return self.sources.get(source, {}).get(symbol)

    def _is_taken(self, name: str) -> bool:
        return any(name in imported.values() for imported in self.sources.values())


@dataclass
class ImportTable:
    """
    Resolved imports of one namespace file.

    Attributes:
        namespace: Namespace the file is generated for
        wrapping: Whether modules are wrapped in ``export namespace`` blocks
        accumulator: Local names handed out while resolving
    """

    namespace: NamespaceType
    wrapping: bool
    accumulator: ImportAccumulator

    @property
    def sources(self) -> list[str]:
        return [source for source, symbols in self.accumulator.sources.items() if symbols]

    def reference(self, node: DeclaredType, module: ModuleType, suffix: str = "") -> str:
        """
        Expression referring to *node* (or a symbol derived from it) from *module*.

        Raises:
            EmissionError: If the node lives in another file and was never
                requested
        """
        symbol = node.name + suffix
        if node.namespace == self.namespace.name:
            if self.wrapping and node.module != module.name:
                return f"{module_identifier(node.module)}.{symbol}"
            return symbol

        source = relative_source(node.namespace)
        if self.wrapping:
            alias = self.accumulator.lookup(source, module_identifier(node.module))
            if alias is not None:
                return f"{alias}.{symbol}"
        else:
            local = self.accumulator.lookup(source, symbol)
            if local is not None:
                return local

        raise EmissionError(
            f"Reference to {node.qualified_name}{suffix} was not resolved for namespace "
            f"'{self.namespace.name}'",
            ErrorContext(node.qualified_name),
        )

    def symbol(self, request: LibraryImport) -> str:
        """Local name of a library or helper symbol."""
        local = self.accumulator.lookup(request.source, request.symbol)
        if local is None:
            raise EmissionError(
                f"Symbol '{request.symbol}' from '{request.source}' was not requested for "
                f"namespace '{self.namespace.name}'"
            )
        return local

    def statements(self) -> list[str]:
        """
        Import statements: library sources first, then generated files,
        each group in first-seen order.
        """
        ordered = [s for s in self.sources if not s.startswith(".")]
        ordered += [s for s in self.sources if s.startswith(".")]

        lines = []
        for source in ordered:
            names = [
                symbol if symbol == local else f"{symbol} as {local}"
                for symbol, local in self.accumulator.sources[source].items()
            ]
            lines.append(f"import {{ {', '.join(names)} }} from '{source}';")
        return lines


class ImportResolver:
    """
    Computes import tables and namespace processing order for one graph.

    Example:
        resolver = ImportResolver(graph, selection, wrapping=False)
        for namespace in resolver.namespace_order():
            table = resolver.resolve(namespace, layer_requests, reserved)
            table.statements()   # ["import { Address } from './app.common';"]
    """

    def __init__(self, graph: TypeGraph, selection: MemberSelection, wrapping: bool):
        self.graph = graph
        self.selection = selection
        self.wrapping = wrapping
        self._external: set[int] = set()
        for namespace in graph.namespaces.values():
            for module in namespace.modules.values():
                for ref in self._module_references(module):
                    if ref.module != module.name or ref.namespace != module.namespace:
                        self._external.add(id(ref))

    def is_referenced_externally(self, node: DeclaredType) -> bool:
        """Whether a declaration in another module refers to *node*."""
        return id(node) in self._external

    def type_requests(self, namespace: NamespaceType) -> list[SymbolRef]:
        """Requests for every declared type the namespace's declarations write out."""
        requests: list[SymbolRef] = []
        for module in self._modules(namespace):
            requests.extend(SymbolRef(ref) for ref in self._module_references(module))
        return requests

    def resolve(
        self,
        namespace: NamespaceType,
        requests: Iterable[ImportRequest],
        reserved: Iterable[str] = (),
    ) -> ImportTable:
        """
        Build the import table of *namespace*.

        Args:
            namespace: Namespace being emitted
            requests: Type references and layer-requested symbols, in the
                order they should claim names
            reserved: Names declared by the file itself
        """
        accumulator = ImportAccumulator(reserved=set(reserved))
        if self.wrapping:
            accumulator.reserved.update(m.identifier for m in namespace.modules.values())

        for request in requests:
            match request:
                case LibraryImport(source=source, symbol=symbol):
                    accumulator.claim(source, symbol)
                case SymbolRef(node=node) if node.namespace != namespace.name:
                    source = relative_source(node.namespace)
                    if self.wrapping:
                        accumulator.claim(source, module_identifier(node.module))
                    else:
                        accumulator.claim(source, request.symbol)

        return ImportTable(namespace=namespace, wrapping=self.wrapping, accumulator=accumulator)

    def namespace_order(self) -> list[NamespaceType]:
        """
        Namespaces with emitted declarations, dependencies first.

        Ties are broken by name; namespaces caught in a reference cycle
        follow in name order.
        """
        emitted = {
            name: ns for name, ns in self.graph.namespaces.items() if ns.declarations()
        }
        dependencies: dict[str, set[str]] = {name: set() for name in emitted}
        for name, namespace in emitted.items():
            for ref in self.type_requests(namespace):
                target = ref.node.namespace
                if target != name and target in emitted:
                    dependencies[name].add(target)

        ordered: list[str] = []
        remaining = dict(dependencies)
        while remaining:
            ready = sorted(n for n, deps in remaining.items() if not deps & remaining.keys())
            if not ready:
                cycle = sorted(remaining)
                logger.warning("Namespace reference cycle between %s", ", ".join(cycle))
                ordered.extend(cycle)
                break
            for name in ready:
                ordered.append(name)
                del remaining[name]

        return [emitted[name] for name in ordered]

    def _modules(self, namespace: NamespaceType) -> list[ModuleType]:
        return ordered_modules(namespace)

    def _module_references(self, module: ModuleType) -> list[DeclaredType]:
        refs: list[DeclaredType] = []
        for declaration in module.declarations:
            if declaration.ignored:
                continue
            for ref in self.selection.references(declaration):
                if ref is not declaration:
                    refs.append(ref)
        return refs
