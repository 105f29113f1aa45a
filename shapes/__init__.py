"""
Shapes package for describing the records that text is scraped into.

A record shape is an ordered list of field descriptors. Each descriptor
says which attribute of the record receives a value, which primitive kind
the captured text is converted to, and which regex fragment captures it.

Shapes can be built explicitly from descriptors or derived from a pydantic
model whose fields carry their fragment in the field metadata.
"""

from .field_schema import FieldDescriptor, FieldKind, RecordShape, shape_from_model

# This allows easy importing like: from shapes import FieldDescriptor
__all__ = ["FieldDescriptor", "FieldKind", "RecordShape", "shape_from_model"]
