"""rowmap exception hierarchy.

All exceptions are rowmap-specific. Driver and builtin conversion errors
are always chained, never raised bare to callers.
"""

from __future__ import annotations

from typing import Any


class RowMapError(Exception):
    """Base exception for all rowmap errors."""


# --- Configuration ---


class ConfigurationError(RowMapError):
    """Raised for unusable type descriptors, record factories or drivers."""


# --- Coercion ---


def _describe_target(target: Any) -> str:
    return getattr(target, "__name__", None) or str(target)


class CoercionError(RowMapError):
    """Raised when a raw value cannot be interpreted as the requested type."""

    def __init__(self, value: Any, target: Any, reason: str) -> None:
        self.value = value
        self.target = target
        self.reason = reason
        super().__init__(
            f"Cannot convert {value!r} ({type(value).__name__}) "
            f"to {_describe_target(target)}: {reason}"
        )


class FieldCoercionError(CoercionError):
    """Raised by the record mapper when a column value fails to coerce.

    Carries the field and column that failed so a single bad row can be
    diagnosed without discarding the mapper.
    """

    def __init__(
        self,
        record_type: str,
        field_name: str,
        column_index: int,
        column_name: str,
        value: Any,
        target: Any,
        reason: str,
    ) -> None:
        self.record_type = record_type
        self.field_name = field_name
        self.column_index = column_index
        self.column_name = column_name
        super().__init__(
            value,
            target,
            f"{record_type}.{field_name} from column {column_index} "
            f"('{column_name}'): {reason}",
        )


# --- Execution ---


class ExecutionError(RowMapError):
    """Base for query execution errors."""


class MultipleRowsError(ExecutionError):
    """Raised when fetch_one encounters more than one row."""

    def __init__(self, sql: str, row_count: int) -> None:
        self.sql = sql
        self.row_count = row_count
        super().__init__(f"fetch_one returned {row_count} rows (expected 0 or 1): {sql}")


class ParameterBindingError(ExecutionError):
    """Raised when the driver rejects a statement or its parameters."""

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        super().__init__(f"Statement failed: {detail}\n{sql}")


# --- Adapter ---


class AdapterError(RowMapError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""
