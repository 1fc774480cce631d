"""Core tsbridge functionality: IR, host metadata contract, errors and the type model builder."""

from . import ir
from .errors import (
    ConfigurationError,
    ConstructionError,
    EmissionError,
    ErrorContext,
    TsBridgeError,
)
from .metadata import HostConstraint, HostEnumValue, HostKind, HostMember, HostType
from .symbols import ImportRequest, LibraryImport, SymbolRef

# The builder depends on tsbridge.validation, which imports from this
# package; import it as tsbridge.core.builder.

__all__ = [
    "ir",
    "TsBridgeError",
    "ConfigurationError",
    "ConstructionError",
    "EmissionError",
    "ErrorContext",
    "HostKind",
    "HostType",
    "HostMember",
    "HostConstraint",
    "HostEnumValue",
    "SymbolRef",
    "LibraryImport",
    "ImportRequest",
]
