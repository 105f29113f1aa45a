"""
Errors raised while compiling record shapes and while matching text.

Compile-time errors (CompileError) happen once, before any matching.
Match-time errors (MatchError) happen per input and are recoverable.
Both derive from ValueError so callers can catch them broadly.
"""


class ShapeMatchError(ValueError):
    """Base class for every error raised by shapematch."""


class CompileError(ShapeMatchError):
    """A record shape could not be compiled into a matcher."""


class InvalidShapeError(CompileError):
    """The object passed as a shape cannot be described as fields."""


class UnsupportedKindError(CompileError):
    def __init__(self, field):
        self.field = field
        super().__init__(f"Failed to use field {field.name}: Unsupported kind {field.kind.value}")


class PatternSyntaxError(CompileError):
    def __init__(self, expression, error):
        self.expression = expression
        super().__init__(f"Failed to compile the regex: {error}")


class GroupCountMismatchError(CompileError):
    def __init__(self, expected, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Mismatch field count and submatch count ({expected} fields, {actual} capturing groups)"
        )


class MatchError(ShapeMatchError):
    """Text could not be matched or converted into a record."""


class NoMatchError(MatchError):
    def __init__(self, message="No matches found"):
        super().__init__(message)


class FieldConversionError(MatchError):
    """A captured substring could not be converted to its field's kind."""

    def __init__(self, field, text, error):
        self.field = field
        self.position = field.position
        self.name = field.name
        self.text = text
        super().__init__(f"Failed to parse field {field.position} ({field.name}): {error}")


class ShapeMismatchError(MatchError):
    def __init__(self, expected, destination):
        self.expected = expected
        self.destination = destination
        super().__init__(
            f"Destination of type {type(destination).__name__} does not match "
            f"compiled shape {expected.__name__}"
        )
