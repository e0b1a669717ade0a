"""Conversion layer - coerce loosely typed driver values into target types."""

from __future__ import annotations

from rowmap.conversion.engine import (
    convert,
    convert_spec,
    to_bool,
    to_char,
    to_date,
    to_datetime,
    to_decimal,
    to_double,
    to_int8,
    to_int16,
    to_int32,
    to_int64,
    to_nullable_bool,
    to_nullable_char,
    to_nullable_date,
    to_nullable_datetime,
    to_nullable_decimal,
    to_nullable_double,
    to_nullable_int8,
    to_nullable_int16,
    to_nullable_int32,
    to_nullable_int64,
    to_nullable_single,
    to_nullable_uint8,
    to_nullable_uint16,
    to_nullable_uint32,
    to_nullable_uint64,
    to_nullable_uuid,
    to_single,
    to_string,
    to_uint8,
    to_uint16,
    to_uint32,
    to_uint64,
    to_uuid,
)
from rowmap.conversion.types import (
    Char,
    Double,
    Int8,
    Int16,
    Int32,
    Int64,
    ScalarKind,
    Single,
    TypeSpec,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    resolve_type,
    spec_for,
)

__all__ = [
    # Engine
    "convert",
    "convert_spec",
    # Types
    "ScalarKind",
    "TypeSpec",
    "resolve_type",
    "spec_for",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Single",
    "Double",
    "Char",
    # Entry points
    "to_bool",
    "to_int8",
    "to_int16",
    "to_int32",
    "to_int64",
    "to_uint8",
    "to_uint16",
    "to_uint32",
    "to_uint64",
    "to_single",
    "to_double",
    "to_decimal",
    "to_char",
    "to_datetime",
    "to_date",
    "to_uuid",
    "to_string",
    "to_nullable_bool",
    "to_nullable_int8",
    "to_nullable_int16",
    "to_nullable_int32",
    "to_nullable_int64",
    "to_nullable_uint8",
    "to_nullable_uint16",
    "to_nullable_uint32",
    "to_nullable_uint64",
    "to_nullable_single",
    "to_nullable_double",
    "to_nullable_decimal",
    "to_nullable_char",
    "to_nullable_datetime",
    "to_nullable_date",
    "to_nullable_uuid",
]
