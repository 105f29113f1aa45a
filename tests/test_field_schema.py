"""Tests for shapes.field_schema: kinds, descriptors and model-derived shapes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Dict, List, Optional, Union

import pytest
from pydantic import BaseModel, Field, PrivateAttr, ValidationError

from shapes import FieldDescriptor, FieldKind, RecordShape, shape_from_model


class TestFieldKind:
    """Kind classification and bit widths."""

    @pytest.mark.parametrize(
        "kind, bits",
        [
            (FieldKind.INT, 64),
            (FieldKind.INT8, 8),
            (FieldKind.INT32, 32),
            (FieldKind.UINT, 64),
            (FieldKind.UINT16, 16),
            (FieldKind.FLOAT32, 32),
            (FieldKind.FLOAT64, 64),
            (FieldKind.STRING, None),
            (FieldKind.BOOL, None),
        ],
    )
    def test_bits(self, kind: FieldKind, bits: int | None) -> None:
        assert kind.bits == bits

    def test_supported_kinds(self) -> None:
        unsupported = {FieldKind.STRUCT, FieldKind.LIST, FieldKind.MAP, FieldKind.OTHER}
        for kind in FieldKind:
            assert kind.is_supported is (kind not in unsupported)

    def test_numeric_families(self) -> None:
        assert FieldKind.INT16.is_signed_int
        assert not FieldKind.INT16.is_unsigned_int
        assert FieldKind.UINT64.is_unsigned_int
        assert FieldKind.FLOAT32.is_float
        assert not FieldKind.BOOL.is_float


class TestFieldDescriptor:
    """Descriptor flags and immutability."""

    @pytest.mark.parametrize("fragment", ["-", ""])
    def test_skip_fragments(self, fragment: str) -> None:
        field = FieldDescriptor(position=0, name="a", kind=FieldKind.STRING, fragment=fragment)
        assert field.is_skipped
        assert not field.is_recognized

    def test_recognized(self) -> None:
        field = FieldDescriptor(position=0, name="a", kind=FieldKind.STRING, fragment="(a)")
        assert field.is_recognized

    def test_not_exported_is_not_recognized(self) -> None:
        field = FieldDescriptor(position=0, name="a", kind=FieldKind.STRING, fragment="(a)", exported=False)
        assert not field.is_recognized

    def test_unsupported_kind_is_not_recognized(self) -> None:
        field = FieldDescriptor(position=0, name="a", kind=FieldKind.STRUCT, fragment="(a)")
        assert not field.is_recognized

    def test_frozen(self) -> None:
        field = FieldDescriptor(position=0, name="a", kind=FieldKind.STRING, fragment="(a)")
        with pytest.raises(ValidationError):
            field.fragment = "(b)"

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldDescriptor(position=0, name="  ", kind=FieldKind.STRING)

    def test_negative_position_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldDescriptor(position=-1, name="a", kind=FieldKind.STRING)


class TestRecordShape:
    """Explicit shapes built from descriptor lists."""

    def test_keeps_order(self) -> None:
        fields = [
            FieldDescriptor(position=1, name="b", kind=FieldKind.INT, fragment="(b)"),
            FieldDescriptor(position=0, name="a", kind=FieldKind.INT, fragment="(a)"),
        ]
        shape = RecordShape.from_descriptors(fields, name="pair")
        assert [f.name for f in shape.fields] == ["b", "a"]
        assert shape.name == "pair"
        assert shape.source_model is None

    def test_duplicate_positions(self) -> None:
        fields = [
            FieldDescriptor(position=0, name="a", kind=FieldKind.INT, fragment="(a)"),
            FieldDescriptor(position=0, name="b", kind=FieldKind.INT, fragment="(b)"),
        ]
        with pytest.raises(ValueError, match="duplicate field position 0"):
            RecordShape.from_descriptors(fields)

    def test_recognized_fields(self) -> None:
        fields = [
            FieldDescriptor(position=0, name="a", kind=FieldKind.INT, fragment="(a)"),
            FieldDescriptor(position=1, name="b", kind=FieldKind.INT, fragment="-"),
            FieldDescriptor(position=2, name="c", kind=FieldKind.INT, fragment="(c)", exported=False),
        ]
        shape = RecordShape.from_descriptors(fields)
        assert [f.name for f in shape.recognized_fields] == ["a"]


@dataclass
class Point:
    x: int = 0


class Inner(BaseModel):
    value: int = 0


class Everything(BaseModel):
    flag: bool = Field(False, description="(flag)")
    count: int = Field(0, description="(count)")
    ratio: float = Field(0.0, description="(ratio)")
    label: str = Field("", description="(label)")
    small: Annotated[int, FieldKind.INT8] = Field(0, description="(small)")
    size: Annotated[int, FieldKind.UINT32] = Field(0, description="(size)")
    maybe: Optional[int] = Field(None, description="(maybe)")
    pipe_maybe: float | None = Field(None, description="(pipe)")
    either: Union[int, str] = Field(0, description="(either)")
    nested: Inner = Field(default_factory=Inner, description="(nested)")
    point: Optional[Point] = Field(None, description="(point)")
    items: List[int] = Field(default_factory=list, description="(items)")
    mapping: Dict[str, int] = Field(default_factory=dict, description="(mapping)")
    _hidden: str = PrivateAttr("")


class TestShapeFromModel:
    """Deriving shapes from pydantic models."""

    def test_kinds(self) -> None:
        shape = shape_from_model(Everything)
        kinds = {f.name: f.kind for f in shape.fields}
        assert kinds == {
            "flag": FieldKind.BOOL,
            "count": FieldKind.INT,
            "ratio": FieldKind.FLOAT64,
            "label": FieldKind.STRING,
            "small": FieldKind.INT8,
            "size": FieldKind.UINT32,
            "maybe": FieldKind.INT,
            "pipe_maybe": FieldKind.FLOAT64,
            "either": FieldKind.OTHER,
            "nested": FieldKind.STRUCT,
            "point": FieldKind.STRUCT,
            "items": FieldKind.LIST,
            "mapping": FieldKind.MAP,
        }

    def test_positions_follow_declaration_order(self) -> None:
        shape = shape_from_model(Everything)
        assert [f.position for f in shape.fields] == list(range(len(shape.fields)))
        assert shape.fields[0].name == "flag"

    def test_private_attributes_are_invisible(self) -> None:
        shape = shape_from_model(Everything)
        assert "_hidden" not in {f.name for f in shape.fields}

    def test_metadata(self) -> None:
        shape = shape_from_model(Everything)
        assert shape.name == "Everything"
        assert shape.source_model is Everything

    def test_fragment_sources(self, opusenc_model) -> None:
        fields = {f.name: f for f in shape_from_model(opusenc_model).fields}
        assert fields["empty"].fragment == ""
        assert fields["more_empty"].fragment == "-"
        assert fields["even_more_empty"].fragment == "-"
        assert fields["encoded"].fragment == "Encoded: (.+)"
        assert fields["wrote_bytes"].fragment == r"Wrote: (\d+) bytes"

    def test_dedicated_key_wins_over_description(self) -> None:
        class Both(BaseModel):
            value: str = Field("", description="documentation only", json_schema_extra={"match": "(v)"})

        (field,) = shape_from_model(Both).fields
        assert field.fragment == "(v)"

    def test_instance_accepted(self, opusenc_model) -> None:
        assert shape_from_model(opusenc_model()) == shape_from_model(opusenc_model)

    def test_not_a_model(self) -> None:
        with pytest.raises(TypeError, match="pydantic model"):
            shape_from_model(Point)
