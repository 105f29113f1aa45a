"""
Pattern Compiler - Builds one composite regular expression from a record shape.

Each recognized field contributes the delimiter followed by its own fragment,
in declaration order. The result is compiled once and checked so that the
number of capturing groups equals the number of recognized fields; the
capture coercer relies on that to map group i to field i.

Compilation is all-or-nothing: any unsupported kind, broken fragment or
group count mismatch raises a CompileError and no matcher is produced.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel

import config
from matchers import capture_coercer
from matchers.errors import (
    CompileError,
    GroupCountMismatchError,
    InvalidShapeError,
    PatternSyntaxError,
    UnsupportedKindError,
)
from shapes.field_schema import FieldDescriptor, RecordShape, shape_from_model

logger = logging.getLogger(__name__)

# {m}, {m,}, {,n}, {m,n} and {,}; "{}" and anything else is a literal brace
_BRACE_QUANTIFIER_RE = re.compile(r"\{(?!\})[0-9]*(?:,[0-9]*)?\}")


@dataclass(frozen=True)
class CompiledMatcher:
    """
    Immutable result of compiling a record shape.

    Safe to share between threads: matching only reads from it.
    """

    pattern: "re.Pattern[str]"
    fields: Tuple[FieldDescriptor, ...]
    shape: RecordShape

    @property
    def expression(self) -> str:
        return self.pattern.pattern

    def unmarshal(self, text: str, destination: Any, *, strict: bool = False) -> None:
        capture_coercer.unmarshal(self, text, destination, strict=strict)

    def validate(self, text: str) -> None:
        capture_coercer.validate(self, text)

    def extract(self, text: str) -> Dict[str, Any]:
        return capture_coercer.extract(self, text)

    def parse(self, text: str) -> BaseModel:
        """Build a fresh instance of the model this matcher was compiled from."""
        if self.shape.source_model is None:
            raise TypeError(f"Matcher for {self.shape.name} was not compiled from a model")
        return self.shape.source_model(**self.extract(text))


def swap_greediness(pattern: str) -> str:
    """
    Swap greedy and lazy quantifiers in a regex pattern.

    `a*` becomes `a*?` and `a*?` becomes `a*`; possessive quantifiers,
    escapes, character classes and group prefixes such as `(?:` are left
    untouched. Used for the ungreedy-by-default dialect.
    """
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]

        if c == "\\":
            out.append(pattern[i:i + 2])
            i += 2
            continue

        if c == "[":
            # Copy the whole class; "]" right after "[" or "[^" is a literal
            start = i
            i += 1
            if i < n and pattern[i] == "^":
                i += 1
            if i < n and pattern[i] == "]":
                i += 1
            while i < n and pattern[i] != "]":
                i += 2 if pattern[i] == "\\" else 1
            i += 1
            out.append(pattern[start:i])
            continue

        if c == "(" and pattern.startswith("(?#", i):
            end = pattern.find(")", i)
            end = n if end < 0 else end + 1
            out.append(pattern[i:end])
            i = end
            continue

        if c == "(" and pattern.startswith("(?", i):
            out.append("(?")
            i += 2
            continue

        if c in "*+?":
            quantifier = c
            i += 1
        elif c == "{":
            brace = _BRACE_QUANTIFIER_RE.match(pattern, i)
            if brace is None:
                out.append(c)
                i += 1
                continue
            quantifier = brace.group(0)
            i = brace.end()
        else:
            out.append(c)
            i += 1
            continue

        out.append(quantifier)
        if i < n and pattern[i] == "?":
            i += 1
        elif i < n and pattern[i] == "+":
            out.append("+")
            i += 1
        else:
            out.append("?")

    return "".join(out)


def coerce_shape(shape: Any) -> RecordShape:
    """Accept a RecordShape, a sequence of FieldDescriptors or a pydantic model."""
    if isinstance(shape, RecordShape):
        return shape
    try:
        if isinstance(shape, (list, tuple)):
            return RecordShape.from_descriptors(shape)
        return shape_from_model(shape)
    except (TypeError, ValueError) as e:
        raise InvalidShapeError(f"Cannot describe {shape!r} as a record shape: {e}") from e


def compile_with_delimiter(
    shape: Any,
    delimiter: Optional[str] = None,
    *,
    ungreedy: Optional[bool] = None,
    flags: Optional[int] = None,
) -> CompiledMatcher:
    """
    Compile a record shape into a matcher.

    Args:
        shape: RecordShape, list of FieldDescriptors or pydantic model
        delimiter: Regex placed before each fragment; None uses the default
        ungreedy: Swap quantifier greediness in fragments and delimiter;
            None uses the configured default
        flags: Extra re flags on top of re.MULTILINE; None uses the
            configured default

    Returns:
        CompiledMatcher ready to unmarshal text

    Raises:
        CompileError: the shape cannot be compiled
    """
    record_shape = coerce_shape(shape)

    if ungreedy is None:
        ungreedy = config.UNGREEDY_BY_DEFAULT
    if flags is None:
        flags = config.EXTRA_REGEX_FLAGS

    if delimiter is None:
        delimiter = config.DEFAULT_DELIMITER
    if ungreedy and delimiter != config.BUILTIN_DELIMITER:
        separator = swap_greediness(delimiter)
    else:
        separator = delimiter

    parts = []
    recognized = []

    for field in record_shape.fields:
        if not field.exported:
            logger.debug("Skipping non-exported field %s", field.name)
            continue
        if field.is_skipped:
            logger.debug("Skipping field %s without fragment", field.name)
            continue
        if not field.kind.is_supported:
            raise UnsupportedKindError(field)

        fragment = swap_greediness(field.fragment) if ungreedy else field.fragment
        parts.append(separator)
        parts.append(f"(?:{fragment})")
        recognized.append(field)

    expression = "".join(parts)

    try:
        pattern = re.compile(expression, config.BASE_REGEX_FLAGS | flags)
    except re.error as e:
        raise PatternSyntaxError(expression, e) from e

    if pattern.groups != len(recognized):
        raise GroupCountMismatchError(len(recognized), pattern.groups)

    logger.debug("Compiled %s into %r (%d fields)", record_shape.name, expression, len(recognized))
    return CompiledMatcher(pattern=pattern, fields=tuple(recognized), shape=record_shape)


def compile_shape(shape: Any) -> CompiledMatcher:
    """Compile a record shape with the default delimiter."""
    return compile_with_delimiter(shape)


def must_compile(shape: Any, delimiter: Optional[str] = None, **options) -> CompiledMatcher:
    """
    Compile a shape that is fixed at development time.

    A failure here is a programming error, so it stops the process
    instead of returning an error.
    """
    try:
        return compile_with_delimiter(shape, delimiter, **options)
    except CompileError as e:
        logger.critical("Cannot compile record shape: %s", e)
        raise SystemExit(str(e)) from e
