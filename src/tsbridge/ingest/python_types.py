"""
Python host adapter.

Describes pydantic models, dataclasses, TypedDicts, Protocols and enums as
``HostType``s. This is the only place that introspects Python types; the
builder consumes the resulting descriptions.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import datetime
import decimal
import enum
import importlib
import inspect
import logging
import types
import typing
import uuid
from collections.abc import Iterable
from typing import Any, ClassVar

import annotated_types
from pydantic import AnyUrl, BaseModel, EmailStr
from pydantic.fields import FieldInfo

from tsbridge.core.errors import ConfigurationError, ConstructionError, ErrorContext
from tsbridge.core.ir import MemberCategory, SystemKind
from tsbridge.core.metadata import (
    ConstraintKind,
    HostConstraint,
    HostEnumValue,
    HostKind,
    HostMember,
    HostType,
    collection,
    nullable,
    primitive,
)
from tsbridge.validation import PERCENTAGE_DATA_TYPE

from .markers import (
    ENUM_LABELS_ATTRIBUTE,
    IGNORE_ATTRIBUTE,
    INTERFACE_ATTRIBUTE,
    ConstraintMarker,
    Display,
    Ignore,
    Percentage,
    Required,
    UIHint,
)

logger = logging.getLogger(__name__)

_SYSTEM_KINDS: dict[Any, SystemKind] = {
    str: SystemKind.STRING,
    uuid.UUID: SystemKind.STRING,
    int: SystemKind.NUMBER,
    float: SystemKind.NUMBER,
    decimal.Decimal: SystemKind.NUMBER,
    bool: SystemKind.BOOLEAN,
    datetime.date: SystemKind.DATE,
    datetime.datetime: SystemKind.DATE,
    Any: SystemKind.OTHER,
    object: SystemKind.OTHER,
}

_NUMERIC_KINDS = {int: "int", float: "float", decimal.Decimal: "decimal"}

_COLLECTION_ORIGINS = {
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
}

_CONSTANT_TYPES = (bool, int, float, str, decimal.Decimal)


def import_type(reference: str) -> type:
    """
    Import a type from a ``package.module:TypeName`` reference.

    Raises:
        ConfigurationError: If the reference is malformed or cannot be imported
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigurationError(f"Expected 'module:TypeName', got '{reference}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}': {e}") from e

    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise ConfigurationError(
                f"Module '{module_name}' has no attribute '{attribute}'"
            ) from None

    if not isinstance(target, type):
        raise ConfigurationError(f"'{reference}' is not a class")
    return target


def _is_pydantic_model(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel) and tp is not BaseModel


def _is_protocol(tp: Any) -> bool:
    return isinstance(tp, type) and bool(getattr(tp, "_is_protocol", False))


def _own_flag(cls: type, attribute: str) -> bool:
    """Class-decorator flags are not inherited."""
    return bool(cls.__dict__.get(attribute, False))


def _value_annotation(hint: Any) -> Any:
    """*hint* without ``Annotated`` and a single-type ``Optional`` wrapper."""
    while typing.get_origin(hint) is typing.Annotated:
        hint = hint.__origin__
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        arguments = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(arguments) == 1:
            return _value_annotation(arguments[0])
    return hint


class PythonTypeReader:
    """
    Turns Python types into host descriptions.

    The same Python class always yields the same ``HostType`` object, which
    is what the builder's identity-based visited map relies on.

    Example:
        host = PythonTypeReader().read(Person)
        host.kind               # HostKind.CLASS
        [m.name for m in host.members]
    """

    def __init__(self) -> None:
        self._types: dict[Any, HostType] = {}
        self._primitives: dict[SystemKind, HostType] = {}

    def read(self, tp: Any) -> HostType:
        """Describe *tp*."""
        host, _ = self._describe(tp)
        return host

    # -- type expressions -------------------------------------------------

    def _describe(self, tp: Any) -> tuple[HostType, list[Any]]:
        """
        Describe a type expression.

        Returns:
            tuple of:
            - HostType: Description (nullable wrapper when the type admits None)
            - list[Any]: ``Annotated`` metadata found while unwrapping
        """
        metadata: list[Any] = []
        while typing.get_origin(tp) is typing.Annotated:
            metadata.extend(tp.__metadata__)
            tp = tp.__origin__

        origin = typing.get_origin(tp)
        if origin is typing.Union or origin is types.UnionType:
            arguments = [a for a in typing.get_args(tp) if a is not type(None)]
            if len(arguments) == 1:
                inner, inner_meta = self._describe(arguments[0])
                metadata.extend(inner_meta)
                if inner.kind != HostKind.NULLABLE:
                    inner = nullable(inner)
                return inner, metadata
            return self._unknown(tp), metadata

        return self._describe_plain(tp, origin), metadata

    def _describe_plain(self, tp: Any, origin: Any) -> HostType:
        if isinstance(tp, typing.TypeVar):
            return HostType(name=tp.__name__, kind=HostKind.GENERIC_PARAMETER)

        if isinstance(tp, type):
            # Enums first: IntEnum and StrEnum are also int and str subclasses
            if issubclass(tp, enum.Enum):
                return self._read_enum(tp)
            if tp in _SYSTEM_KINDS:
                return self._primitive(_SYSTEM_KINDS[tp])
            if tp is EmailStr or issubclass(tp, (str, AnyUrl)):
                return self._primitive(SystemKind.STRING)
            if issubclass(tp, bool):
                return self._primitive(SystemKind.BOOLEAN)
            if issubclass(tp, (int, float, decimal.Decimal)):
                return self._primitive(SystemKind.NUMBER)
        elif tp is Any:
            return self._primitive(SystemKind.OTHER)

        if origin in _COLLECTION_ORIGINS or tp in _COLLECTION_ORIGINS:
            arguments = [a for a in typing.get_args(tp) if a is not Ellipsis]
            if origin is tuple and len(set(arguments)) > 1:
                return self._unknown(tp)
            element = self.read(arguments[0]) if arguments else self._primitive(SystemKind.OTHER)
            return collection(element)

        if isinstance(origin, type) and self._is_object(origin):
            return self._generic_instance(origin, typing.get_args(tp))

        if _is_pydantic_model(tp):
            generic = tp.__pydantic_generic_metadata__
            if generic["origin"] is not None:
                return self._generic_instance(generic["origin"], generic["args"])

        if isinstance(tp, type) and self._is_object(tp):
            return self._read_object(tp)

        return self._unknown(tp)

    def _primitive(self, kind: SystemKind) -> HostType:
        if kind not in self._primitives:
            self._primitives[kind] = primitive(kind)
        return self._primitives[kind]

    def _unknown(self, tp: Any) -> HostType:
        name = getattr(tp, "__qualname__", None) or repr(tp)
        return HostType(name=name, kind=HostKind.UNKNOWN, module=getattr(tp, "__module__", ""))

    def _generic_instance(self, origin: type, arguments: Iterable[Any]) -> HostType:
        definition = self.read(origin)
        return HostType(
            name=definition.name,
            kind=definition.kind,
            namespace=definition.namespace,
            module=definition.module,
            generic_definition=definition,
            generic_arguments=[self.read(a) for a in arguments],
        )

    # -- declared types ---------------------------------------------------

    def _is_object(self, cls: type) -> bool:
        return (
            _is_pydantic_model(cls)
            or dataclasses.is_dataclass(cls)
            or typing.is_typeddict(cls)
            or _is_protocol(cls)
        )

    def _placement(self, cls: type) -> dict[str, Any]:
        module = cls.__module__
        return {
            "namespace": module.rpartition(".")[0] or module,
            "module": module,
            "private": cls.__name__.startswith("_"),
            "ignored": _own_flag(cls, IGNORE_ATTRIBUTE),
        }

    def _read_enum(self, cls: type[enum.Enum]) -> HostType:
        if cls in self._types:
            return self._types[cls]

        labels = cls.__dict__.get(ENUM_LABELS_ATTRIBUTE, {})
        values = []
        for member in cls:
            value = member.value
            if not isinstance(value, (int, str)) or isinstance(value, bool):
                value = str(value)
            values.append(HostEnumValue(member.name, value, labels.get(member.name)))

        host = HostType(name=cls.__name__, kind=HostKind.ENUM, enum_values=values, **self._placement(cls))
        self._types[cls] = host
        return host

    def _read_object(self, cls: type) -> HostType:
        if cls in self._types:
            return self._types[cls]

        interface = (
            typing.is_typeddict(cls) or _is_protocol(cls) or _own_flag(cls, INTERFACE_ATTRIBUTE)
        )
        host = HostType(
            name=cls.__name__,
            kind=HostKind.INTERFACE if interface else HostKind.CLASS,
            type_parameters=[p.__name__ for p in self._type_parameters(cls)],
            **self._placement(cls),
        )
        # Registered before members are read so self references terminate
        self._types[cls] = host

        base = self._base(cls)
        if base is not None:
            host.base = self.read(base)

        host.members = list(self._read_members(cls, base))
        logger.debug("Read %s with %d member(s)", host.qualified_name, len(host.members))
        return host

    def _type_parameters(self, cls: type) -> tuple[Any, ...]:
        if _is_pydantic_model(cls):
            return tuple(cls.__pydantic_generic_metadata__["parameters"])
        return tuple(getattr(cls, "__parameters__", ()))

    def _base(self, cls: type) -> Any | None:
        """First base that is itself a describable type, generic arguments kept."""
        candidates = list(cls.__dict__.get("__orig_bases__", ())) + list(cls.__bases__)
        for candidate in candidates:
            target = typing.get_origin(candidate) or candidate
            if target is typing.Generic or target is typing.Protocol:
                continue
            if isinstance(target, type) and target is not cls and self._is_object(target):
                return candidate
        return None

    def _hints(self, cls: type) -> dict[str, Any]:
        try:
            return typing.get_type_hints(cls, include_extras=True)
        except (NameError, TypeError) as e:
            raise ConstructionError(
                f"Cannot resolve annotations: {e}", ErrorContext(cls.__qualname__)
            ) from e

    def _read_members(self, cls: type, base: Any | None) -> Iterable[HostMember]:
        own = list(inspect.get_annotations(cls))

        if _is_pydantic_model(cls):
            for name in own:
                if name in cls.__class_vars__:
                    constant = self._constant(cls, name, None)
                    if constant is not None:
                        yield constant
                elif name in cls.model_fields:
                    yield self._pydantic_member(cls, name, cls.model_fields[name])
            return

        hints = self._hints(cls)
        if typing.is_typeddict(cls) and base is not None:
            # TypedDict annotations include the keys of its bases
            inherited = getattr(typing.get_origin(base) or base, "__annotations__", {})
            own = [name for name in own if name not in inherited]

        for name in own:
            hint = hints.get(name)
            if typing.get_origin(hint) is ClassVar:
                constant = self._constant(cls, name, hint)
                if constant is not None:
                    yield constant
            elif dataclasses.is_dataclass(cls):
                yield self._dataclass_member(cls, name, hint)
            elif typing.is_typeddict(cls):
                required = name in getattr(cls, "__required_keys__", frozenset())
                yield self._member(name, hint, [], required)
            else:
                yield self._member(name, hint, [], required=True)

    def _constant(self, cls: type, name: str, hint: Any) -> HostMember | None:
        value = cls.__dict__.get(name)
        if not isinstance(value, _CONSTANT_TYPES):
            return None
        arguments = typing.get_args(hint) if hint is not None else ()
        host = self.read(arguments[0]) if arguments else self.read(type(value))
        return HostMember(
            name=name,
            type=host,
            category=MemberCategory.FIELD,
            constant_value=value,
        )

    def _pydantic_member(self, cls: type, name: str, info: FieldInfo) -> HostMember:
        member = self._member(name, info.annotation, list(info.metadata), info.is_required())
        if info.title and member.display_name is None:
            member.display_name = info.title
        if info.description and member.prompt is None:
            member.prompt = info.description
        alias = info.serialization_alias or info.alias
        if alias and alias != name:
            member.serialized_name = alias
        if info.exclude:
            member.ignored = True
        return member

    def _dataclass_member(self, cls: type, name: str, hint: Any) -> HostMember:
        declared = next((f for f in dataclasses.fields(cls) if f.name == name), None)
        required = declared is not None and (
            declared.default is dataclasses.MISSING
            and declared.default_factory is dataclasses.MISSING
        )
        return self._member(name, hint, [], required)

    def _member(self, name: str, hint: Any, metadata: list[Any], required: bool) -> HostMember:
        host, annotated = self._describe(hint)
        metadata = annotated + metadata
        is_nullable = host.kind == HostKind.NULLABLE

        member = HostMember(name=name, type=host)
        constraints: list[HostConstraint] = []

        if required and not is_nullable and not any(isinstance(m, Required) for m in metadata):
            constraints.append(HostConstraint(ConstraintKind.REQUIRED))

        bounds: dict[str, Any] = {}
        lengths: dict[str, Any] = {}
        for item in self._flatten(metadata):
            match item:
                case ConstraintMarker():
                    constraints.append(item.constraint())
                case Display(name=label, prompt=prompt):
                    member.display_name = label
                    member.prompt = prompt or member.prompt
                case UIHint(hint=ui_hint, parameters=parameters):
                    member.ui_hint = ui_hint
                    member.ui_hint_parameters = dict(parameters)
                case Percentage():
                    member.data_type = PERCENTAGE_DATA_TYPE
                case Ignore():
                    member.ignored = True
                case annotated_types.Ge(ge=value):
                    self._collect(constraints, bounds, ConstraintKind.RANGE, minimum=value)
                case annotated_types.Gt(gt=value):
                    self._collect(
                        constraints, bounds, ConstraintKind.RANGE, minimum=value, min_exclusive=True
                    )
                case annotated_types.Le(le=value):
                    self._collect(constraints, bounds, ConstraintKind.RANGE, maximum=value)
                case annotated_types.Lt(lt=value):
                    self._collect(
                        constraints, bounds, ConstraintKind.RANGE, maximum=value, max_exclusive=True
                    )
                case annotated_types.MinLen(min_length=value):
                    self._collect(constraints, lengths, ConstraintKind.STRING_LENGTH, minimum=value)
                case annotated_types.MaxLen(max_length=value):
                    self._collect(constraints, lengths, ConstraintKind.STRING_LENGTH, maximum=value)
                case _ if isinstance(getattr(item, "pattern", None), str):
                    # pydantic's Field(pattern=...) searches rather than full-matches
                    constraints.append(
                        HostConstraint(
                            ConstraintKind.REGULAR_EXPRESSION,
                            {"pattern": item.pattern, "full_match": False},
                        )
                    )

        value_type = _value_annotation(hint)
        if bounds:
            bounds.setdefault("numeric_kind", _NUMERIC_KINDS.get(value_type, "float"))

        implied = self._implied_constraint(value_type)
        if implied is not None and all(c.kind != implied.kind for c in constraints):
            constraints.append(implied)

        member.constraints = constraints
        return member

    def _flatten(self, metadata: list[Any]) -> Iterable[Any]:
        for item in metadata:
            if isinstance(item, FieldInfo):
                yield from self._flatten(list(item.metadata))
            elif isinstance(item, annotated_types.Len):
                if item.min_length:
                    yield annotated_types.MinLen(item.min_length)
                if item.max_length is not None:
                    yield annotated_types.MaxLen(item.max_length)
            elif isinstance(item, annotated_types.GroupedMetadata):
                yield from self._flatten(list(item))
            else:
                yield item

    def _collect(
        self,
        constraints: list[HostConstraint],
        parameters: dict[str, Any],
        kind: ConstraintKind,
        **values: Any,
    ) -> None:
        """Merge bound-style metadata into one constraint placed at its first occurrence."""
        if not parameters:
            constraints.append(HostConstraint(kind, parameters))
        parameters.update(values)

    def _implied_constraint(self, value_type: Any) -> HostConstraint | None:
        """Constraints implied by the annotation type itself (``EmailStr``, URL types)."""
        if value_type is EmailStr:
            return HostConstraint(ConstraintKind.EMAIL_ADDRESS)
        if isinstance(value_type, type) and issubclass(value_type, AnyUrl):
            return HostConstraint(ConstraintKind.URL)
        return None


def read_type(tp: Any) -> HostType:
    """Describe *tp* with a fresh reader."""
    return PythonTypeReader().read(tp)
