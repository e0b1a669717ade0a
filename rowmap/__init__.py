"""rowmap - map cursor rows onto typed records with best-effort value coercion."""

from __future__ import annotations

from rowmap.conversion import (
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
    convert,
    resolve_type,
)
from rowmap.core.connection import ConnectionConfig, ConnectionManager
from rowmap.core.culture import FormatContext
from rowmap.core.engine import Engine, QueryBuilder
from rowmap.core.enums import DatabaseBackend
from rowmap.core.exceptions import (
    AdapterError,
    CoercionError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    ExecutionError,
    FieldCoercionError,
    MultipleRowsError,
    ParameterBindingError,
    RowMapError,
)
from rowmap.mapping import (
    Cursor,
    DbApiCursor,
    RecordDescriptor,
    RecordMapper,
    RowCursor,
)

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Engine
    "Engine",
    "QueryBuilder",
    # Conversion
    "convert",
    "resolve_type",
    "FormatContext",
    "ScalarKind",
    "TypeSpec",
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
    # Mapping
    "RecordMapper",
    "RecordDescriptor",
    "Cursor",
    "DbApiCursor",
    "RowCursor",
    # Enums
    "DatabaseBackend",
    # Exceptions
    "RowMapError",
    "ConfigurationError",
    "CoercionError",
    "FieldCoercionError",
    "ExecutionError",
    "MultipleRowsError",
    "ParameterBindingError",
    "AdapterError",
    "ConnectionError",
]
