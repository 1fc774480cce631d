"""
Unit tests for the Python host adapter.

Tests reading pydantic models, dataclasses, TypedDicts, Protocols and enums
into host descriptions, and generating TypeScript from them end to end.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Annotated, ClassVar, Generic, Protocol, TypedDict, TypeVar

import pytest
from pydantic import BaseModel, Field

from tsbridge.core.errors import ConfigurationError
from tsbridge.core.ir import MemberCategory, SystemKind
from tsbridge.core.metadata import ConstraintKind, HostKind, HostType
from tsbridge.emit import GeneratorConfig, generate
from tsbridge.ingest import (
    Compare,
    Custom,
    Display,
    Email,
    Hidden,
    Ignore,
    Length,
    Pattern,
    Percentage,
    PythonTypeReader,
    Range,
    Required,
    UIHint,
    as_interface,
    enum_labels,
    ignore_type,
    import_type,
    read_type,
)

# =============================================================================
# Sample host types
# =============================================================================


@enum_labels(Unknown="Not specified")
class Gender(IntEnum):
    Unknown = 0
    Male = 1
    Female = 2


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"


class Person(BaseModel):
    MAX_AGE: ClassVar[int] = 120

    name: Annotated[str, Length(max=50), Display("Full name", "Your name")]
    age: Annotated[int | None, Range(min=20, max=120)] = None
    location: str | None = Field(None, min_length=2, max_length=120)
    gender: Gender = Gender.Unknown


class Employee(Person):
    department: Annotated[str, Required(message="Pick a department")] = ""
    rate: Annotated[float, Percentage(), Field(ge=0, le=100)] = 0.0
    score: int = Field(0, ge=1, lt=10)
    code: str = Field("", pattern=r"^[A-Z]+$", title="Code")
    nick: str | None = Field(None, alias="nickName")
    secret: str = Field("", exclude=True)
    internal: Annotated[str, Ignore()] = ""
    id: Annotated[str, Hidden] = ""
    password: Annotated[str, UIHint("password", {"colSpan": "*"})] = ""
    confirm: Annotated[str, Compare("password"), Email()] = ""
    slug: Annotated[str, Custom("./validators", "isSlug", message="Bad slug")] = ""
    extras: dict[str, int] = {}


@dataclass
class Address:
    street: str
    city: str = ""
    zip: Annotated[str | None, Pattern(r"\d{5}")] = None
    tags: list[str] = field(default_factory=list)


class Shape(TypedDict):
    label: str


class Options(TypedDict, total=False):
    verbose: bool


class Named(Protocol):
    name: str


@as_interface
class Point(BaseModel):
    x: float
    y: float


@ignore_type
class Audited(BaseModel):
    created_by: str = ""


class Invoice(Audited):
    number: str
    billing: Address
    lines: list[Point] = []


T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: list[T] = []
    total: int = 0


class PersonPage(Page[Person]):
    pass


class Catalog(BaseModel):
    page: Page[Color] | None = None


class _Draft(BaseModel):
    text: str = ""


def _members(host: HostType) -> dict:
    return {m.name: m for m in host.members}


def _constraint(member, kind: ConstraintKind):
    return next(c for c in member.constraints if c.kind == kind)


def _script(tp: type, **config) -> str:
    result = generate(read_type(tp), GeneratorConfig(**config))
    return result.modules[result.root_namespace].script


# =============================================================================
# Pydantic models
# =============================================================================


class TestPydanticModels:
    """Test reading pydantic models."""

    def test_placement(self) -> None:
        host = read_type(Person)

        assert host.kind == HostKind.CLASS
        assert host.name == "Person"
        assert host.module == Person.__module__
        assert host.namespace == (Person.__module__.rpartition(".")[0] or Person.__module__)

    def test_same_type_same_host(self) -> None:
        reader = PythonTypeReader()

        assert reader.read(Person) is reader.read(Person)
        assert reader.read(Employee).base is reader.read(Person)

    def test_implicit_required(self) -> None:
        members = _members(read_type(Person))

        assert [c.kind for c in members["name"].constraints] == [
            ConstraintKind.REQUIRED,
            ConstraintKind.STRING_LENGTH,
        ]
        assert members["age"].nullable is False
        assert members["age"].type.kind == HostKind.NULLABLE
        assert ConstraintKind.REQUIRED not in [c.kind for c in members["age"].constraints]

    def test_display_marker(self) -> None:
        name = _members(read_type(Person))["name"]

        assert name.display_name == "Full name"
        assert name.prompt == "Your name"

    def test_field_constraints(self) -> None:
        location = _members(read_type(Person))["location"]

        assert _constraint(location, ConstraintKind.STRING_LENGTH).parameters == {
            "minimum": 2,
            "maximum": 120,
        }

    def test_range_marker(self) -> None:
        age = _members(read_type(Person))["age"]

        assert _constraint(age, ConstraintKind.RANGE).parameters == {"minimum": 20, "maximum": 120}

    def test_class_var_constant(self) -> None:
        constant = _members(read_type(Person))["MAX_AGE"]

        assert constant.category == MemberCategory.FIELD
        assert constant.constant_value == 120
        assert constant.type.system_kind == SystemKind.NUMBER

    def test_enum_member(self) -> None:
        gender = _members(read_type(Person))["gender"]

        assert gender.type.kind == HostKind.ENUM
        assert gender.type.enum_values[0].display == "Not specified"
        assert gender.type.enum_values[1].display is None

    def test_only_own_members(self) -> None:
        members = _members(read_type(Employee))

        assert "name" not in members
        assert "department" in members

    def test_explicit_required_message(self) -> None:
        department = _members(read_type(Employee))["department"]

        required = [c for c in department.constraints if c.kind == ConstraintKind.REQUIRED]
        assert len(required) == 1
        assert required[0].message == "Pick a department"

    def test_percentage(self) -> None:
        rate = _members(read_type(Employee))["rate"]

        assert rate.data_type == "percentage"
        assert _constraint(rate, ConstraintKind.RANGE).parameters == {
            "minimum": 0,
            "maximum": 100,
            "numeric_kind": "float",
        }

    def test_exclusive_bound_and_numeric_kind(self) -> None:
        score = _members(read_type(Employee))["score"]

        assert _constraint(score, ConstraintKind.RANGE).parameters == {
            "minimum": 1,
            "maximum": 10,
            "max_exclusive": True,
            "numeric_kind": "int",
        }

    def test_field_pattern_searches(self) -> None:
        code = _members(read_type(Employee))["code"]

        assert _constraint(code, ConstraintKind.REGULAR_EXPRESSION).parameters == {
            "pattern": "^[A-Z]+$",
            "full_match": False,
        }
        assert code.display_name == "Code"

    def test_alias_exclude_and_ignore(self) -> None:
        members = _members(read_type(Employee))

        assert members["nick"].serialized_name == "nickName"
        assert members["secret"].ignored is True
        assert members["internal"].ignored is True

    def test_ui_hints(self) -> None:
        members = _members(read_type(Employee))

        assert members["id"].ui_hint == "hidden"
        assert members["password"].ui_hint == "password"
        assert members["password"].ui_hint_parameters == {"colSpan": "*"}
        assert members["id"].ui_hint_parameters == {}

    def test_compare_email_custom(self) -> None:
        members = _members(read_type(Employee))

        assert [c.kind for c in members["confirm"].constraints] == [
            ConstraintKind.COMPARE,
            ConstraintKind.EMAIL_ADDRESS,
        ]
        custom = _constraint(members["slug"], ConstraintKind.CUSTOM)
        assert custom.parameters == {"module": "./validators", "function": "isSlug"}
        assert custom.message == "Bad slug"

    def test_unmappable_type(self) -> None:
        extras = _members(read_type(Employee))["extras"]

        assert extras.type.kind == HostKind.UNKNOWN

    def test_private_model(self) -> None:
        assert read_type(_Draft).private is True


# =============================================================================
# Other host kinds
# =============================================================================


class TestOtherHostKinds:
    """Test dataclasses, TypedDicts, Protocols and enums."""

    def test_dataclass(self) -> None:
        members = _members(read_type(Address))

        assert [c.kind for c in members["street"].constraints] == [ConstraintKind.REQUIRED]
        assert members["city"].constraints == []
        assert members["tags"].type.kind == HostKind.COLLECTION
        assert members["tags"].constraints == []

    def test_dataclass_pattern_marker(self) -> None:
        zip_code = _members(read_type(Address))["zip"]

        assert zip_code.type.kind == HostKind.NULLABLE
        assert _constraint(zip_code, ConstraintKind.REGULAR_EXPRESSION).parameters == {
            "pattern": r"\d{5}",
            "full_match": True,
        }

    def test_typed_dict(self) -> None:
        shape = read_type(Shape)
        options = read_type(Options)

        assert shape.kind == HostKind.INTERFACE
        assert [c.kind for c in _members(shape)["label"].constraints] == [ConstraintKind.REQUIRED]
        assert _members(options)["verbose"].constraints == []

    def test_protocol(self) -> None:
        host = read_type(Named)

        assert host.kind == HostKind.INTERFACE
        assert list(_members(host)) == ["name"]

    def test_as_interface(self) -> None:
        assert read_type(Point).kind == HostKind.INTERFACE

    def test_ignore_type_not_inherited(self) -> None:
        invoice = read_type(Invoice)

        assert invoice.ignored is False
        assert invoice.base.ignored is True

    def test_int_enum(self) -> None:
        host = read_type(Gender)

        assert host.kind == HostKind.ENUM
        assert [(v.name, v.value) for v in host.enum_values] == [
            ("Unknown", 0),
            ("Male", 1),
            ("Female", 2),
        ]

    def test_str_enum(self) -> None:
        host = read_type(Color)

        assert [v.value for v in host.enum_values] == ["red", "blue"]

    def test_generic_model(self) -> None:
        page = read_type(Page)

        assert page.type_parameters == ["T"]
        items = _members(page)["items"]
        assert items.type.element.kind == HostKind.GENERIC_PARAMETER

    def test_generic_base(self) -> None:
        host = read_type(PersonPage)

        assert host.base.is_generic_instance
        assert host.base.generic_definition.name == "Page"
        assert host.base.generic_arguments[0].name == "Person"


# =============================================================================
# End to end
# =============================================================================


class TestGenerateFromPython:
    """Test generating TypeScript from Python types."""

    def test_person_declaration(self) -> None:
        script = _script(Person)

        assert "export const enum Gender {\n\tUnknown = 0,\n\tMale = 1,\n\tFemale = 2\n}" in script
        assert "export class Person {\n\tage?: number | null;\n\tgender?: Gender;\n" in script
        assert '\tname: string = "";\n' in script

    def test_ignored_base_merged(self) -> None:
        script = _script(Invoice)

        assert "class Audited" not in script
        assert "export class Invoice {" in script
        assert "\tcreated_by?: string;\n" in script
        assert "\tlines?: Point[];\n" in script
        assert "export interface Point {\n\tx: number;\n\ty: number;\n}" in script

    def test_dataclass_constructor(self) -> None:
        script = _script(Invoice)

        assert "\tbilling: Address;\n" in script
        assert "constructor(billing: Address, number: string)" not in script
        assert "constructor(billing: Address) {" in script

    def test_generic_base_emitted(self) -> None:
        assert "export class PersonPage extends Page<Person> {" in _script(PersonPage)

    def test_generic_member(self) -> None:
        script = _script(Catalog)

        assert "\tpage?: Page<Color> | null;\n" in script
        assert "export class Page<T> {\n\titems?: T[];\n\ttotal?: number;\n}" in script

    def test_form_from_model(self) -> None:
        script = _script(Employee, generator="withform", column_count=2, camel_case_names=True)

        assert '<input type="hidden" {...register("id")} />' in script
        assert '<input type="password"' in script
        assert 'placeholder="Your name"' in script
        assert 'register("nickName")' in script
        assert "secret" not in script
        assert "internal" not in script
        assert "import { isSlug } from './validators';" in script

    def test_unmapped_warning(self) -> None:
        result = generate(read_type(Employee))

        assert any("dict" in warning for warning in result.warnings)
        assert "\textras?: any;\n" in result.modules[result.root_namespace].script


# =============================================================================
# Type references
# =============================================================================


class TestImportType:
    """Test resolving 'module:Type' references."""

    def test_import(self) -> None:
        assert import_type("pathlib:Path").__name__ == "Path"

    def test_nested_attribute(self) -> None:
        assert import_type("collections:OrderedDict").__name__ == "OrderedDict"

    @pytest.mark.parametrize(
        ("reference", "message"),
        [
            ("pathlib.Path", "Expected 'module:TypeName'"),
            ("no_such_module_xyz:Thing", "Cannot import module"),
            ("pathlib:Nope", "has no attribute"),
            ("os.path:sep", "is not a class"),
        ],
    )
    def test_invalid(self, reference: str, message: str) -> None:
        with pytest.raises(ConfigurationError, match=message):
            import_type(reference)
