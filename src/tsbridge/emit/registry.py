"""
Generator registry.

Maps generator names to factories building the emitter chain for a
configuration: ``plain`` (declarations), ``withresolver`` (declarations +
resolvers) and ``withform`` (declarations + resolvers + forms).
"""

from __future__ import annotations

from collections.abc import Callable

from tsbridge.core.builder import build_type_graph
from tsbridge.core.errors import ConfigurationError
from tsbridge.core.metadata import HostType

from .config import GeneratorConfig, GeneratorKind
from .declarations import DeclarationEmitter, Emitter
from .form import FormEmitter
from .generator import TypeScriptGenerator
from .resolver import ResolverEmitter
from .result import GeneratorResult

EmitterFactory = Callable[[GeneratorConfig], Emitter]


class GeneratorRegistry:
    """
    Registry for emitter chains.

    Maps configuration values to emitter factories.
    """

    _factories: dict[str, EmitterFactory] = {}

    @classmethod
    def register(cls, name: str, factory: EmitterFactory) -> None:
        """Register an emitter chain factory."""
        cls._factories[name] = factory

    @classmethod
    def get(cls, name: str) -> EmitterFactory | None:
        """Get an emitter chain factory by generator name."""
        return cls._factories.get(name)

    @classmethod
    def list_generators(cls) -> list[str]:
        """List registered generator names."""
        return list(cls._factories.keys())

    @classmethod
    def create(cls, config: GeneratorConfig) -> TypeScriptGenerator:
        """
        Build the generator selected by ``config.generator``.

        Raises:
            ConfigurationError: If no factory is registered under that name
        """
        name = GeneratorKind(config.generator).value
        factory = cls.get(name)
        if factory is None:
            raise ConfigurationError(
                f"No generator registered as '{name}' "
                f"(available: {', '.join(cls.list_generators())})"
            )
        return TypeScriptGenerator(factory(config), config)


def _plain(config: GeneratorConfig) -> Emitter:
    return DeclarationEmitter()


def _with_resolver(config: GeneratorConfig) -> Emitter:
    return ResolverEmitter(DeclarationEmitter())


def _with_form(config: GeneratorConfig) -> Emitter:
    return FormEmitter(
        ResolverEmitter(DeclarationEmitter()),
        column_count=config.column_count,
        indentation=config.indentation,
    )


GeneratorRegistry.register(GeneratorKind.PLAIN.value, _plain)
GeneratorRegistry.register(GeneratorKind.WITH_RESOLVER.value, _with_resolver)
GeneratorRegistry.register(GeneratorKind.WITH_FORM.value, _with_form)


def generate(root: HostType, config: GeneratorConfig | None = None) -> GeneratorResult:
    """
    Build the type graph of *root* and run the configured generator on it.

    Raises:
        ConfigurationError: Before anything is built, for a bad configuration
        ConstructionError: If the host metadata cannot be turned into a graph
        EmissionError: If emission hits an invariant violation
    """
    config = config or GeneratorConfig()
    generator = GeneratorRegistry.create(config)
    return generator.generate(build_type_graph(root))
