"""
TypeScript emission.

Layered emitter chain (declarations -> resolvers -> forms), import
resolution and the namespace driver.
"""

from .config import (
    MAX_COLUMN_COUNT,
    GeneratorConfig,
    GeneratorKind,
    load_generator_config,
    parse_generator_directive,
)
from .declarations import DeclarationEmitter, LayeredEmitter
from .form import FormEmitter, bootstrap_utils_module, column_widths
from .generator import TypeScriptGenerator
from .imports import ImportAccumulator, ImportResolver, ImportTable
from .registry import GeneratorRegistry, generate
from .resolver import ResolverEmitter
from .result import GeneratedModule, GeneratorResult

__all__ = [
    "GeneratorConfig",
    "GeneratorKind",
    "MAX_COLUMN_COUNT",
    "load_generator_config",
    "parse_generator_directive",
    "DeclarationEmitter",
    "LayeredEmitter",
    "ResolverEmitter",
    "FormEmitter",
    "bootstrap_utils_module",
    "column_widths",
    "TypeScriptGenerator",
    "ImportAccumulator",
    "ImportResolver",
    "ImportTable",
    "GeneratorRegistry",
    "generate",
    "GeneratedModule",
    "GeneratorResult",
]
