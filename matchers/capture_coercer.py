"""
Capture Coercer - Turns the groups of one regex match into typed values.

A compiled matcher is executed once against the input. Each capturing group
is then converted to the primitive kind of the field it belongs to (group 1
to the first recognized field, group 2 to the second, and so on) and
written into the destination record.

Conversion stops at the first field that fails; whatever was written before
that field stays written. Fields the destination cannot accept (frozen
models, read-only mappings, None) are skipped before their capture is
converted, so they never fail. Use validate() to check every capture.
"""

import dataclasses
import logging
import math
import re
import struct
from collections.abc import Mapping, MutableMapping
from typing import TYPE_CHECKING, Any, Dict, Iterator, Tuple

from pydantic import BaseModel, ValidationError

from matchers.errors import FieldConversionError, NoMatchError, ShapeMismatchError
from shapes.field_schema import FieldDescriptor, FieldKind

if TYPE_CHECKING:
    from matchers.pattern_compiler import CompiledMatcher

logger = logging.getLogger(__name__)

# Literals accepted for boolean fields, nothing else converts
BOOL_LITERALS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}

SIGNED_INT_RE = re.compile(r"[+-]?[0-9]+")
UNSIGNED_INT_RE = re.compile(r"[0-9]+")
FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
# Hex mantissa needs a binary exponent: 0x1p-2, -0X1.8P3
HEX_FLOAT_RE = re.compile(r"[+-]?0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)p[+-]?[0-9]+", re.IGNORECASE)


def parse_bool(text: str) -> bool:
    try:
        return BOOL_LITERALS[text]
    except KeyError:
        raise ValueError(f"invalid boolean literal {text!r}") from None


def parse_signed(text: str, bits: int) -> int:
    if not SIGNED_INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer literal {text!r}")
    value = int(text)
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    if not low <= value <= high:
        raise ValueError(f"value {text!r} out of range for int{bits}")
    return value


def parse_unsigned(text: str, bits: int) -> int:
    # Signs are rejected, including "-0" and "+1"
    if not UNSIGNED_INT_RE.fullmatch(text):
        raise ValueError(f"invalid unsigned integer literal {text!r}")
    value = int(text)
    if value > (1 << bits) - 1:
        raise ValueError(f"value {text!r} out of range for uint{bits}")
    return value


def parse_float(text: str, bits: int) -> float:
    if HEX_FLOAT_RE.fullmatch(text):
        try:
            value = float.fromhex(text)
        except OverflowError:
            raise ValueError(f"value {text!r} out of range for float{bits}") from None
    elif FLOAT_RE.fullmatch(text):
        value = float(text)
    else:
        raise ValueError(f"invalid float literal {text!r}")
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError(f"value {text!r} out of range for float{bits}")
    if bits == 32 and math.isfinite(value):
        # Overflows only when rounding to single precision gives infinity
        try:
            struct.pack("f", value)
        except OverflowError:
            raise ValueError(f"value {text!r} out of range for float32") from None
    return value


def convert_capture(kind: FieldKind, text: str) -> Any:
    """Convert one captured substring to the Python value for `kind`."""
    if kind is FieldKind.STRING:
        return text
    if kind is FieldKind.BOOL:
        return parse_bool(text)
    if kind.is_signed_int:
        return parse_signed(text, kind.bits)
    if kind.is_unsigned_int:
        return parse_unsigned(text, kind.bits)
    if kind.is_float:
        return parse_float(text, kind.bits)
    raise ValueError(f"unsupported kind {kind.value}")


def _captures(matcher: "CompiledMatcher", text: str) -> Iterator[Tuple[FieldDescriptor, str]]:
    match = matcher.pattern.search(text)
    if match is None:
        raise NoMatchError()

    # group 0 is the whole match, field i lives in group i + 1
    for group, field in enumerate(matcher.fields, start=1):
        raw = match.group(group)
        yield field, "" if raw is None else raw


def _convert(field: FieldDescriptor, raw: str) -> Any:
    try:
        return convert_capture(field.kind, raw)
    except ValueError as e:
        raise FieldConversionError(field, raw, e) from e


def _converted_captures(matcher: "CompiledMatcher", text: str) -> Iterator[Tuple[FieldDescriptor, str, Any]]:
    for field, raw in _captures(matcher, text):
        yield field, raw, _convert(field, raw)


def _is_writable(destination: Any, name: str) -> bool:
    if destination is None:
        return False
    if isinstance(destination, MutableMapping):
        return True
    if isinstance(destination, Mapping):
        return False
    if isinstance(destination, BaseModel):
        if destination.model_config.get("frozen"):
            return False
        info = type(destination).model_fields.get(name)
        if info is None:
            return destination.model_config.get("extra") == "allow"
        return not info.frozen
    if dataclasses.is_dataclass(destination) and destination.__dataclass_params__.frozen:
        return False
    return True


def _write(destination: Any, field: FieldDescriptor, raw: str, value: Any) -> bool:
    """Assign one value; returns False when the destination refused it."""
    if isinstance(destination, MutableMapping):
        destination[field.name] = value
        return True
    try:
        setattr(destination, field.name, value)
    except ValidationError as e:
        # Models with validate_assignment reject the value itself
        raise FieldConversionError(field, raw, e) from e
    except (AttributeError, TypeError):
        return False
    return True


def unmarshal(matcher: "CompiledMatcher", text: str, destination: Any, *, strict: bool = False) -> None:
    """
    Match `text` once and write every converted capture into `destination`.

    Args:
        matcher: Compiled matcher to execute
        text: Input text, usually the output of a command
        destination: Record receiving the values (object or mutable mapping)
        strict: Refuse destinations that are not instances of the model
            the matcher was compiled from

    Raises:
        NoMatchError: The composite expression did not match
        FieldConversionError: A capture for a writable field could not be converted
        ShapeMismatchError: strict is set and the destination has the wrong type
    """
    source_model = matcher.shape.source_model
    if strict and source_model is not None and not isinstance(destination, source_model):
        raise ShapeMismatchError(source_model, destination)

    for field, raw in _captures(matcher, text):
        # Unwritable fields are skipped before conversion and never fail
        written = _is_writable(destination, field.name) and _write(destination, field, raw, _convert(field, raw))
        if not written:
            logger.debug(
                "Field %d (%s) not writable on %s, skipped",
                field.position, field.name, type(destination).__name__,
            )


def validate(matcher: "CompiledMatcher", text: str) -> None:
    """Run match and conversion without writing anything."""
    for _ in _converted_captures(matcher, text):
        pass


def extract(matcher: "CompiledMatcher", text: str) -> Dict[str, Any]:
    """Converted values keyed by field name, in field order."""
    return {field.name: value for field, _, value in _converted_captures(matcher, text)}
