"""Query execution engine.

The Engine binds parameters, executes through the adapter, and hands the
driver cursor to a RecordMapper (or the conversion engine for scalars).
Mappers are cached per record type, so repeated queries reuse their
correlation plans.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, TypeVar

from rowmap.conversion.engine import convert
from rowmap.core.connection import ConnectionConfig, ConnectionManager
from rowmap.core.culture import FormatContext
from rowmap.core.exceptions import (
    MultipleRowsError,
    ParameterBindingError,
)
from rowmap.core.params import bind_params, normalize_params, params_from
from rowmap.mapping.cursor import DbApiCursor
from rowmap.mapping.protocol import Mapper
from rowmap.mapping.record import RecordMapper

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _row_to_dict(cursor: DbApiCursor) -> dict[str, Any]:
    """Current row as a column-name keyed dict."""
    return {cursor.column_name(i): cursor.value_at(i) for i in range(cursor.column_count)}


class Engine:
    """Synchronous query execution engine.

    Args:
        connection_manager: Source of pooled connections.
        context: Culture rules used for every conversion this engine runs.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        *,
        context: FormatContext | None = None,
    ) -> None:
        self._connection_manager = connection_manager
        self._paramstyle = connection_manager.adapter.paramstyle
        self._context = context or FormatContext.invariant()
        self._mappers: dict[Any, RecordMapper[Any]] = {}
        self._mappers_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        *,
        context: FormatContext | None = None,
    ) -> Engine:
        """Create an Engine from a ConnectionConfig.

        Args:
            config: ConnectionConfig instance
            context: Optional FormatContext for conversions

        Returns:
            Engine instance
        """
        return cls(ConnectionManager(config), context=context)

    @property
    def connection_manager(self) -> ConnectionManager:
        return self._connection_manager

    def close(self) -> None:
        """Close all pooled connections."""
        self._connection_manager.close_pool()

    def mapper_for(
        self,
        record_type: type[T],
        aliases: Mapping[str, str] | None = None,
    ) -> RecordMapper[T]:
        """Return the engine's mapper for record_type, creating it once."""
        key = (record_type, tuple(sorted(aliases.items())) if aliases else None)
        with self._mappers_lock:
            mapper = self._mappers.get(key)
            if mapper is None:
                mapper = RecordMapper(record_type, context=self._context, aliases=aliases)
                self._mappers[key] = mapper
        return mapper

    @contextmanager
    def _cursor(
        self, sql: str, params: Mapping[str, Any] | None
    ) -> Iterator[tuple[Any, Any]]:
        """Execute sql on a pooled connection, yielding (connection, driver cursor)."""
        try:
            bound = bind_params(sql, params)
        except KeyError as e:
            raise ParameterBindingError(sql, f"missing parameter '{e.args[0]}'") from e
        statement = normalize_params(sql, self._paramstyle)

        with self._connection_manager.get_connection() as conn:
            logger.debug(f"Executing: {statement} with {sorted(bound)}")
            try:
                cursor = self._connection_manager.adapter.execute(conn, statement, bound)
            except Exception as e:
                raise ParameterBindingError(sql, str(e)) from e
            try:
                yield conn, cursor
            finally:
                close = getattr(cursor, "close", None)
                if close is not None:
                    close()

    def _resolve_mapper(
        self,
        record_type: type[T] | None,
        mapper: Mapper[T] | None,
        aliases: Mapping[str, str] | None = None,
    ) -> Mapper[T] | None:
        if mapper is not None:
            return mapper
        if record_type is not None:
            return self.mapper_for(record_type, aliases)
        return None

    def fetch_one(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
        record_type: type[T] | None = None,
        *,
        mapper: Mapper[T] | None = None,
        aliases: Mapping[str, str] | None = None,
    ) -> Any:
        """Fetch a single row.

        Returns None if zero rows match, a record when record_type or
        mapper is given, otherwise a dict. ``aliases`` maps column names
        to field names of record_type.
        Raises MultipleRowsError if more than one row matches.
        """
        row_mapper = self._resolve_mapper(record_type, mapper, aliases)
        with self._cursor(sql, params) as (_, raw):
            cursor = DbApiCursor(raw)
            if not cursor.advance():
                return None
            result = row_mapper.map_one(cursor) if row_mapper else _row_to_dict(cursor)
            row_count = 1
            while cursor.advance():
                row_count += 1
            if row_count > 1:
                raise MultipleRowsError(sql, row_count)
        return result

    def fetch_all(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
        record_type: type[T] | None = None,
        *,
        mapper: Mapper[T] | None = None,
        aliases: Mapping[str, str] | None = None,
    ) -> list[Any]:
        """Fetch all matching rows as records (or dicts without a record type)."""
        row_mapper = self._resolve_mapper(record_type, mapper, aliases)
        with self._cursor(sql, params) as (_, raw):
            cursor = DbApiCursor(raw)
            if row_mapper is not None:
                return row_mapper.map_many(cursor)
            rows: list[Any] = []
            while cursor.advance():
                rows.append(_row_to_dict(cursor))
            return rows

    def fetch_scalar(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
        target: Any = None,
    ) -> Any:
        """Fetch the first column of the first row.

        With a target type the value is passed through the conversion
        engine, so an empty result yields the target's absent value.
        """
        with self._cursor(sql, params) as (_, raw):
            cursor = DbApiCursor(raw)
            value = cursor.value_at(0) if cursor.advance() else None
        if target is None:
            return value
        return convert(value, target, self._context)

    def execute(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
    ) -> int:
        """Execute a write statement. Returns affected row count."""
        with self._cursor(sql, params) as (conn, raw):
            conn.commit()
            return int(raw.rowcount)

    def query(self, sql: str) -> QueryBuilder:
        """Start a fluent query over sql."""
        return QueryBuilder(self, sql)


class QueryBuilder:
    """Fluent wrapper collecting parameters before a terminal fetch."""

    def __init__(self, engine: Engine, sql: str) -> None:
        self._engine = engine
        self._sql = sql
        self._params: dict[str, Any] = {}

    def param(self, name: str, value: Any) -> QueryBuilder:
        """Bind a single :name parameter."""
        self._params[name] = value
        return self

    def params(self, values: Any) -> QueryBuilder:
        """Bind several parameters at once.

        Args:
            values: A mapping, or a dataclass / Pydantic / plain instance
                whose public fields name the parameters.
        """
        self._params.update(params_from(values))
        return self

    def fetch_all(
        self,
        record_type: type[T] | None = None,
        *,
        mapper: Mapper[T] | None = None,
        aliases: Mapping[str, str] | None = None,
    ) -> list[Any]:
        return self._engine.fetch_all(
            self._sql, self._params, record_type, mapper=mapper, aliases=aliases
        )

    def fetch_one(
        self,
        record_type: type[T] | None = None,
        *,
        mapper: Mapper[T] | None = None,
        aliases: Mapping[str, str] | None = None,
    ) -> Any:
        return self._engine.fetch_one(
            self._sql, self._params, record_type, mapper=mapper, aliases=aliases
        )

    def fetch_scalar(self, target: Any = None) -> Any:
        return self._engine.fetch_scalar(self._sql, self._params, target)

    def execute(self) -> int:
        return self._engine.execute(self._sql, self._params)
