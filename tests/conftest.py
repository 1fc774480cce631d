"""Shared pytest fixtures for tsbridge tests."""

import pytest

from tsbridge.core.ir import SystemKind
from tsbridge.core.metadata import (
    ConstraintKind,
    HostConstraint,
    HostEnumValue,
    HostKind,
    HostMember,
    HostType,
    nullable,
    primitive,
)


@pytest.fixture
def string_host() -> HostType:
    return primitive(SystemKind.STRING)


@pytest.fixture
def number_host() -> HostType:
    return primitive(SystemKind.NUMBER)


@pytest.fixture
def person_host(string_host: HostType, number_host: HostType) -> HostType:
    """
    Return the classic Person class.

    name: string [required, max length 50]
    age: number? [20..120]
    location: string? [length 2..120]
    """
    return HostType(
        name="Person",
        kind=HostKind.CLASS,
        namespace="app",
        module="app.models",
        members=[
            HostMember(
                name="name",
                type=string_host,
                constraints=[
                    HostConstraint(ConstraintKind.REQUIRED),
                    HostConstraint(ConstraintKind.STRING_LENGTH, {"maximum": 50}),
                ],
            ),
            HostMember(
                name="age",
                type=nullable(number_host),
                constraints=[
                    HostConstraint(ConstraintKind.RANGE, {"minimum": 20, "maximum": 120}),
                ],
            ),
            HostMember(
                name="location",
                type=nullable(string_host),
                constraints=[
                    HostConstraint(ConstraintKind.STRING_LENGTH, {"minimum": 2, "maximum": 120}),
                ],
            ),
        ],
    )


@pytest.fixture
def gender_host() -> HostType:
    """Return an integer enum with display labels."""
    return HostType(
        name="Gender",
        kind=HostKind.ENUM,
        namespace="app",
        module="app.models",
        enum_values=[
            HostEnumValue("Unknown", 0, "Not specified"),
            HostEnumValue("Male", 1),
            HostEnumValue("Female", 2),
        ],
    )


@pytest.fixture
def employee_host(person_host: HostType, gender_host: HostType) -> HostType:
    """Return a class deriving from Person with one required enum member."""
    return HostType(
        name="Employee",
        kind=HostKind.CLASS,
        namespace="app",
        module="app.models",
        base=person_host,
        members=[
            HostMember(
                name="gender",
                type=gender_host,
                constraints=[HostConstraint(ConstraintKind.REQUIRED)],
            ),
        ],
    )


def make_class(
    name: str,
    members: list[HostMember] | None = None,
    namespace: str = "app",
    module: str | None = None,
    **kwargs,
) -> HostType:
    """Helper to describe a host class with sensible placement defaults."""
    return HostType(
        name=name,
        kind=kwargs.pop("kind", HostKind.CLASS),
        namespace=namespace,
        module=module or f"{namespace}.models",
        members=members or [],
        **kwargs,
    )


@pytest.fixture
def class_factory():
    """Return the ``make_class`` helper."""
    return make_class
