"""
Declarative markers for Python host types.

Markers go into ``typing.Annotated`` metadata next to (or instead of) pydantic
``Field`` constraints:

    class Person(BaseModel):
        name: Annotated[str, Required(), Length(max=50), Display("Name")]
        age: Annotated[int | None, Range(min=20, max=120)] = None

Class-level behaviour is set with decorators (``ignore_type``,
``as_interface``, ``enum_labels``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeVar

from tsbridge.core.ir import UI_HINT_HIDDEN
from tsbridge.core.metadata import ConstraintKind, HostConstraint

T = TypeVar("T", bound=type)

IGNORE_ATTRIBUTE = "__tsbridge_ignore__"
INTERFACE_ATTRIBUTE = "__tsbridge_interface__"
ENUM_LABELS_ATTRIBUTE = "__tsbridge_labels__"


class Marker:
    """Base class of member markers."""


@dataclass(frozen=True)
class ConstraintMarker(Marker):
    """A marker that declares one validation constraint."""

    message: str | None = field(default=None, kw_only=True)

    def constraint(self) -> HostConstraint:
        raise NotImplementedError


@dataclass(frozen=True)
class Required(ConstraintMarker):
    def constraint(self) -> HostConstraint:
        return HostConstraint(ConstraintKind.REQUIRED, message=self.message)


@dataclass(frozen=True)
class Range(ConstraintMarker):
    min: int | float | None = None
    max: int | float | None = None

    def constraint(self) -> HostConstraint:
        return HostConstraint(
            ConstraintKind.RANGE,
            {"minimum": self.min, "maximum": self.max},
            self.message,
        )


@dataclass(frozen=True)
class Length(ConstraintMarker):
    min: int = 0
    max: int | None = None

    def constraint(self) -> HostConstraint:
        return HostConstraint(
            ConstraintKind.STRING_LENGTH,
            {"minimum": self.min, "maximum": self.max},
            self.message,
        )


@dataclass(frozen=True)
class Pattern(ConstraintMarker):
    """Regular expression the whole value must match."""

    regex: str

    def constraint(self) -> HostConstraint:
        return HostConstraint(
            ConstraintKind.REGULAR_EXPRESSION,
            {"pattern": self.regex, "full_match": True},
            self.message,
        )


@dataclass(frozen=True)
class Compare(ConstraintMarker):
    """Value must equal the value of member *other* (host name)."""

    other: str

    def constraint(self) -> HostConstraint:
        return HostConstraint(ConstraintKind.COMPARE, {"other": self.other}, self.message)


@dataclass(frozen=True)
class Email(ConstraintMarker):
    def constraint(self) -> HostConstraint:
        return HostConstraint(ConstraintKind.EMAIL_ADDRESS, message=self.message)


@dataclass(frozen=True)
class Url(ConstraintMarker):
    def constraint(self) -> HostConstraint:
        return HostConstraint(ConstraintKind.URL, message=self.message)


@dataclass(frozen=True)
class Phone(ConstraintMarker):
    def constraint(self) -> HostConstraint:
        return HostConstraint(ConstraintKind.PHONE, message=self.message)


@dataclass(frozen=True)
class CreditCard(ConstraintMarker):
    def constraint(self) -> HostConstraint:
        return HostConstraint(ConstraintKind.CREDIT_CARD, message=self.message)


@dataclass(frozen=True)
class Custom(ConstraintMarker):
    """
    Validate with a TypeScript function ``(value, values) => boolean | string``.

    Args:
        module: Import path of the function, e.g. ``./validators``
        function: Exported function name
    """

    module: str
    function: str

    def constraint(self) -> HostConstraint:
        return HostConstraint(
            ConstraintKind.CUSTOM,
            {"module": self.module, "function": self.function},
            self.message,
        )


@dataclass(frozen=True)
class Display(Marker):
    """Label and placeholder used by forms and messages."""

    name: str
    prompt: str | None = None


@dataclass(frozen=True)
class UIHint(Marker):
    """
    Input affordance, e.g. ``password``; ``hidden`` renders a hidden input.

    ``parameters`` carries layout options such as ``{"colSpan": "2"}``.
    """

    hint: str = ""
    parameters: dict[str, str] = field(default_factory=dict, hash=False)


Hidden = UIHint(UI_HINT_HIDDEN)


@dataclass(frozen=True)
class Percentage(Marker):
    """Range bounds are percentages (0-100) of a fraction-valued member."""


@dataclass(frozen=True)
class Ignore(Marker):
    """Leave the member out of every generated artifact."""


def ignore_type(cls: T) -> T:
    """Class decorator: hide the type; its members merge into derived classes."""
    setattr(cls, IGNORE_ATTRIBUTE, True)
    return cls


def as_interface(cls: T) -> T:
    """Class decorator: emit the type as a TypeScript interface."""
    setattr(cls, INTERFACE_ATTRIBUTE, True)
    return cls


def enum_labels(**labels: str):
    """
    Enum decorator: display labels per member name.

    Example:
        @enum_labels(Unknown="Not specified")
        class Gender(IntEnum): ...
    """

    def decorate(cls: T) -> T:
        setattr(cls, ENUM_LABELS_ATTRIBUTE, dict(labels))
        return cls

    return decorate
