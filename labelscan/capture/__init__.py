"""Structured label-capture field mapping."""

from .fields import (
    BUILTIN_DATE_FIELDS,
    FIELD_DEFINITIONS,
    FieldDefinition,
    OutputRole,
    active_definitions,
)
from .mapper import (
    BarcodeField,
    CaptureField,
    DateField,
    TextField,
    field_from_dict,
    map_field_values,
    map_fields,
)

__all__ = [
    "BUILTIN_DATE_FIELDS",
    "BarcodeField",
    "CaptureField",
    "DateField",
    "FIELD_DEFINITIONS",
    "FieldDefinition",
    "OutputRole",
    "TextField",
    "active_definitions",
    "field_from_dict",
    "map_field_values",
    "map_fields",
]
