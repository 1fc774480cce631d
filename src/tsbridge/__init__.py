"""
tsbridge - TypeScript declarations, react-hook-form resolvers and Bootstrap
forms generated from Python data types.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version

# Re-export commonly used types for convenience
from .core import ir
from .core.errors import ConfigurationError, ConstructionError, EmissionError, TsBridgeError
from .emit import GeneratorConfig, GeneratorResult, generate


def _get_version() -> str:
    try:
        return _metadata_version("tsbridge")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    "TsBridgeError",
    "ConfigurationError",
    "ConstructionError",
    "EmissionError",
    "GeneratorConfig",
    "GeneratorResult",
    "generate",
]
