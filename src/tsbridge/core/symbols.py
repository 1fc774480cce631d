"""
Import request types shared by the validation rules and the emitters.

An emitter never writes an identifier that lives in another file without
first asking for it through one of these requests; the import resolver then
decides the local name (possibly with a disambiguating suffix).
"""

from __future__ import annotations

from dataclasses import dataclass

from .ir import DeclaredType


@dataclass(frozen=True)
class SymbolRef:
    """
    A symbol derived from a declared node.

    ``suffix`` names derived symbols such as ``PersonResolver``.
    """

    node: DeclaredType
    suffix: str = ""

    @property
    def symbol(self) -> str:
        return self.node.name + self.suffix


@dataclass(frozen=True)
class LibraryImport:
    """A named export of a library or helper module, e.g. ``Resolver`` from ``react-hook-form``."""

    source: str
    symbol: str

    @property
    def is_relative(self) -> bool:
        return self.source.startswith(".")


ImportRequest = SymbolRef | LibraryImport
