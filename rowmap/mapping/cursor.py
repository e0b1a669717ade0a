"""Cursor abstraction consumed by the record mapper.

A cursor exposes the column layout of a result set and the raw values of
its current row. The shape fingerprint (lower-cased column names in
positional order) identifies the layout for correlation caching.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from rowmap.core.exceptions import ExecutionError

Fingerprint = tuple[str, ...]


@runtime_checkable
class Cursor(Protocol):
    """Forward-readable tabular result positioned on a row."""

    @property
    def column_count(self) -> int:
        """Number of columns in the result set."""
        ...

    def column_name(self, index: int) -> str:
        """Name of the column at index."""
        ...

    def value_at(self, index: int) -> Any:
        """Raw value of the current row at index; None when absent."""
        ...


def fingerprint_of(cursor: Cursor) -> Fingerprint:
    """Return the cursor's shape fingerprint.

    Cursors may carry a precomputed ``fingerprint`` attribute; otherwise it
    is derived from the column names.
    """
    fingerprint = getattr(cursor, "fingerprint", None)
    if fingerprint is not None:
        return fingerprint  # type: ignore[no-any-return]
    return tuple(cursor.column_name(i).lower() for i in range(cursor.column_count))


def _fingerprint(columns: Sequence[str]) -> Fingerprint:
    return tuple(name.lower() for name in columns)


class DbApiCursor:
    """Cursor over a DB-API 2.0 driver cursor.

    Column names come from ``description``; ``advance()`` fetches the next
    row. Tuple rows, ``sqlite3.Row`` and mapping rows (psycopg ``dict_row``)
    are all supported.
    """

    def __init__(self, cursor: Any) -> None:
        if cursor.description is None:
            raise ExecutionError("Statement did not produce a result set")
        self._cursor = cursor
        self._columns: tuple[str, ...] = tuple(desc[0] for desc in cursor.description)
        self.fingerprint: Fingerprint = _fingerprint(self._columns)
        self._row: Any = None

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def column_count(self) -> int:
        return len(self._columns)

    def column_name(self, index: int) -> str:
        return self._columns[index]

    def value_at(self, index: int) -> Any:
        if self._row is None:
            raise ExecutionError("Cursor is not positioned on a row; call advance() first")
        if isinstance(self._row, Mapping):
            return self._row[self._columns[index]]
        return self._row[index]

    def advance(self) -> bool:
        """Move to the next row. Returns False once the result is exhausted."""
        self._row = self._cursor.fetchone()
        return self._row is not None

    @property
    def rowcount(self) -> int:
        return int(self._cursor.rowcount)


class RowCursor:
    """In-memory cursor over a list of rows.

    Rows are sequences aligned with ``columns`` or mappings keyed by column
    name. A freshly built cursor is positioned before the first row.
    """

    def __init__(self, columns: Sequence[str], rows: Iterable[Any] = ()) -> None:
        self._columns = tuple(columns)
        self._rows = list(rows)
        self._position = -1
        self.fingerprint: Fingerprint = _fingerprint(self._columns)

    @classmethod
    def single(cls, row: Mapping[str, Any]) -> RowCursor:
        """Cursor positioned on one mapping row."""
        cursor = cls(list(row.keys()), [row])
        cursor.advance()
        return cursor

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def column_count(self) -> int:
        return len(self._columns)

    def column_name(self, index: int) -> str:
        return self._columns[index]

    def value_at(self, index: int) -> Any:
        if not 0 <= self._position < len(self._rows):
            raise ExecutionError("Cursor is not positioned on a row; call advance() first")
        row = self._rows[self._position]
        if isinstance(row, Mapping):
            return row.get(self._columns[index])
        return row[index]

    def advance(self) -> bool:
        """Move to the next row. Returns False once the rows are exhausted."""
        if self._position < len(self._rows):
            self._position += 1
        return self._position < len(self._rows)
