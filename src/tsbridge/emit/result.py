"""
Generation output types.
"""

from __future__ import annotations

from dataclasses import dataclass, field

TS_EXTENSION = ".ts"
TSX_EXTENSION = ".tsx"


@dataclass(frozen=True)
class GeneratedModule:
    """
    One generated file.

    Attributes:
        file_extension: ``.ts`` or ``.tsx``
        script: File content
        is_helper: Synthesized support module rather than a namespace file
    """

    file_extension: str
    script: str
    is_helper: bool = False


@dataclass
class GeneratorResult:
    """
    Result of one generation run.

    Attributes:
        modules: Namespace or helper name -> generated file, namespaces in
            dependency order followed by helper modules
        root_namespace: Namespace holding the requested root type
        warnings: Non-fatal problems worth showing to the user
    """

    modules: dict[str, GeneratedModule] = field(default_factory=dict)
    root_namespace: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def namespaces(self) -> dict[str, GeneratedModule]:
        return {name: m for name, m in self.modules.items() if not m.is_helper}

    @property
    def helpers(self) -> dict[str, GeneratedModule]:
        return {name: m for name, m in self.modules.items() if m.is_helper}

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def __str__(self) -> str:
        """Concatenated namespace scripts; helper modules are left out."""
        return "\n".join(m.script for m in self.namespaces.values())
