"""
Matchers package for scraping text into typed records.

Two steps, run at different times:
- compile a record shape once into a CompiledMatcher (pattern_compiler)
- unmarshal any number of inputs with it (capture_coercer)
"""

from .capture_coercer import extract, unmarshal, validate
from .errors import (
    CompileError,
    FieldConversionError,
    GroupCountMismatchError,
    InvalidShapeError,
    MatchError,
    NoMatchError,
    PatternSyntaxError,
    ShapeMatchError,
    ShapeMismatchError,
    UnsupportedKindError,
)
from .pattern_compiler import (
    CompiledMatcher,
    compile_shape,
    compile_with_delimiter,
    must_compile,
    swap_greediness,
)

# This allows easy importing like: from matchers import compile_shape
__all__ = [
    "CompiledMatcher",
    "compile_shape",
    "compile_with_delimiter",
    "must_compile",
    "swap_greediness",
    "unmarshal",
    "validate",
    "extract",
    "ShapeMatchError",
    "CompileError",
    "InvalidShapeError",
    "UnsupportedKindError",
    "PatternSyntaxError",
    "GroupCountMismatchError",
    "MatchError",
    "NoMatchError",
    "FieldConversionError",
    "ShapeMismatchError",
]
