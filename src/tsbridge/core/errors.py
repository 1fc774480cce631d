"""
Error types for tsbridge type-model construction and emission.
"""

from dataclasses import dataclass
from typing import Optional


class TsBridgeError(Exception):
    """Base exception for all tsbridge errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ConfigurationError(TsBridgeError):
    """
    Raised when the generator configuration is invalid.

    Examples:
    - Column count outside 1..12
    - Malformed generator directive such as ``withform(x)``
    - Unreadable ``[tool.tsbridge]`` table

    Always raised before any emission starts.
    """

    pass


class ConstructionError(TsBridgeError):
    """
    Raised when the host metadata cannot be turned into a type graph.

    Examples:
    - Inheritance cycle between host classes
    - Duplicate member names on one host type
    """

    pass


class EmissionError(TsBridgeError):
    """
    Raised when an invariant of the type graph is violated during emission.

    Examples:
    - A class whose base type is not part of the built graph
    """

    pass


@dataclass
class ErrorContext:
    """
    Location of an error inside the type graph.

    Attributes:
        type_name: Qualified name of the host or target type
        member_name: Optional member on that type
    """

    type_name: str
    member_name: str | None = None

    def format(self) -> str:
        """
        Format the context as a human-readable string.

        Returns:
            Formatted string like ``app.models.Person.name``
        """
        if self.member_name:
            return f"{self.type_name}.{self.member_name}"
        return self.type_name
