"""
Field Schema - Defines the structure of a record that text is scraped into.

This file uses Pydantic for the descriptor models themselves and also knows
how to read a user's Pydantic model and turn it into a list of descriptors.

- FieldKind lists the primitive kinds a capture can be converted into
- FieldDescriptor describes one field: where it goes, what kind, which regex
- RecordShape is the ordered collection of descriptors for one record type
"""

import dataclasses
import types
from enum import Enum
from typing import Annotated, Any, Optional, Sequence, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.fields import FieldInfo

from config import FRAGMENT_KEY, SKIP_SENTINEL


class FieldKind(str, Enum):
    """Primitive kind a field's captured text is converted into."""

    BOOL = "bool"

    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"

    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"

    FLOAT32 = "float32"
    FLOAT64 = "float64"

    STRING = "str"

    # Describable but never matchable
    STRUCT = "struct"
    LIST = "list"
    MAP = "map"
    OTHER = "other"

    @property
    def is_supported(self) -> bool:
        return self not in _UNSUPPORTED_KINDS

    @property
    def is_signed_int(self) -> bool:
        return self in _SIGNED_BITS

    @property
    def is_unsigned_int(self) -> bool:
        return self in _UNSIGNED_BITS

    @property
    def is_float(self) -> bool:
        return self in _FLOAT_BITS

    @property
    def bits(self) -> Optional[int]:
        """Bit width of numeric kinds, None for everything else."""
        for table in (_SIGNED_BITS, _UNSIGNED_BITS, _FLOAT_BITS):
            if self in table:
                return table[self]
        return None


_SIGNED_BITS = {
    FieldKind.INT: 64,
    FieldKind.INT8: 8,
    FieldKind.INT16: 16,
    FieldKind.INT32: 32,
    FieldKind.INT64: 64,
}

_UNSIGNED_BITS = {
    FieldKind.UINT: 64,
    FieldKind.UINT8: 8,
    FieldKind.UINT16: 16,
    FieldKind.UINT32: 32,
    FieldKind.UINT64: 64,
}

_FLOAT_BITS = {
    FieldKind.FLOAT32: 32,
    FieldKind.FLOAT64: 64,
}

_UNSUPPORTED_KINDS = frozenset({FieldKind.STRUCT, FieldKind.LIST, FieldKind.MAP, FieldKind.OTHER})


class FieldDescriptor(BaseModel):
    """
    Describes a single field of a record shape.

    The position is the field's index in declaration order and is what
    errors refer to; the name is the attribute (or mapping key) written
    when a match is unmarshalled.
    """

    model_config = ConfigDict(frozen=True)

    position: int = Field(..., ge=0, description="Index of the field in declaration order")
    name: str = Field(..., description="Attribute or key the converted value is written to")
    kind: FieldKind = Field(..., description="Primitive kind of the field")
    fragment: str = Field("", description="Regex fragment with exactly one capturing group")
    exported: bool = Field(True, description="Whether the field is externally visible")

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        """Field names must be usable as attribute names or mapping keys"""
        if not v.strip():
            raise ValueError("field name must not be empty")
        return v

    @property
    def is_skipped(self) -> bool:
        return self.fragment in (SKIP_SENTINEL, "")

    @property
    def is_recognized(self) -> bool:
        return self.exported and not self.is_skipped and self.kind.is_supported


class RecordShape(BaseModel):
    """
    Ordered field descriptors of one record type.

    When the shape was derived from a pydantic model, `source_model` keeps that
    class so matchers can build fresh records and check destinations.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field("record", description="Human readable name of the record type")
    fields: Tuple[FieldDescriptor, ...] = Field(default_factory=tuple)
    source_model: Optional[Type[Any]] = Field(None, description="Model class the shape was derived from")

    @classmethod
    def from_descriptors(cls, fields: Sequence[FieldDescriptor], name: str = "record") -> "RecordShape":
        """Build a shape from an explicit descriptor list, keeping its order."""
        seen = set()
        for descriptor in fields:
            if descriptor.position in seen:
                raise ValueError(f"duplicate field position {descriptor.position} in shape {name}")
            seen.add(descriptor.position)
        return cls(name=name, fields=tuple(fields))

    @property
    def recognized_fields(self) -> Tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if f.is_recognized)


def _kind_from_annotation(annotation: Any) -> FieldKind:
    """Map a Python type annotation onto a FieldKind."""
    origin = get_origin(annotation)

    if origin is Annotated:
        base, *metadata = get_args(annotation)
        for item in metadata:
            if isinstance(item, FieldKind):
                return item
        return _kind_from_annotation(base)

    if origin is Union or origin is types.UnionType:
        # Optional[X] behaves like X; any other union is ambiguous
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return _kind_from_annotation(members[0])
        return FieldKind.OTHER

    if origin in (list, tuple, set, frozenset) or annotation in (list, tuple, set, frozenset):
        return FieldKind.LIST
    if origin is dict or annotation is dict:
        return FieldKind.MAP

    # bool is a subclass of int, so it has to be checked first
    if annotation is bool:
        return FieldKind.BOOL
    if annotation is int:
        return FieldKind.INT
    if annotation is float:
        return FieldKind.FLOAT64
    if annotation is str:
        return FieldKind.STRING

    if isinstance(annotation, type) and (issubclass(annotation, BaseModel) or dataclasses.is_dataclass(annotation)):
        return FieldKind.STRUCT

    return FieldKind.OTHER


def kind_of_field(info: FieldInfo) -> FieldKind:
    """Kind of a pydantic field; an explicit FieldKind in Annotated metadata wins."""
    for item in info.metadata:
        if isinstance(item, FieldKind):
            return item
    return _kind_from_annotation(info.annotation)


def fragment_of_field(info: FieldInfo) -> str:
    """
    Regex fragment attached to a pydantic field.

    The dedicated key in json_schema_extra is preferred; otherwise the
    whole description is treated as the fragment.
    """
    extra = info.json_schema_extra
    if isinstance(extra, dict) and FRAGMENT_KEY in extra:
        return str(extra[FRAGMENT_KEY])
    return info.description or ""


def shape_from_model(model: Any) -> RecordShape:
    """
    Derive a RecordShape from a pydantic model class or instance.

    Private attributes (leading underscore) are not model fields, so they
    never become part of the shape.
    """
    model_cls = model if isinstance(model, type) else type(model)
    if not issubclass(model_cls, BaseModel):
        raise TypeError(f"Expected a pydantic model class or instance, got {model_cls.__name__}")

    descriptors = [
        FieldDescriptor(
            position=position,
            name=name,
            kind=kind_of_field(info),
            fragment=fragment_of_field(info),
        )
        for position, (name, info) in enumerate(model_cls.model_fields.items())
    ]

    return RecordShape(name=model_cls.__name__, fields=tuple(descriptors), source_model=model_cls)
