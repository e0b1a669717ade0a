"""Contract tests for adapter protocol compliance."""

from __future__ import annotations

import pytest

from rowmap.adapters.protocol import SyncAdapter
from rowmap.adapters.sqlite import SqliteSyncAdapter
from rowmap.core.connection import ConnectionConfig, ConnectionManager
from rowmap.core.exceptions import AdapterError, ConnectionError  # noqa: A004
from rowmap.mapping import DbApiCursor


class TestSqliteSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        adapter = SqliteSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.paramstyle == "named"

    def test_lifecycle(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(sqlite_config)
        assert len(pool) == 1

        conn = adapter.acquire_connection(pool)
        assert conn is not None
        assert len(pool) == 0

        cursor = DbApiCursor(adapter.execute(conn, "SELECT 1 AS val"))
        assert cursor.columns == ("val",)
        assert cursor.advance()
        assert cursor.value_at(0) == 1

        adapter.release_connection(conn, pool)
        assert len(pool) == 1

        adapter.close_pool(pool)
        assert len(pool) == 0

    def test_named_parameters(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(sqlite_config)
        conn = adapter.acquire_connection(pool)
        try:
            row = adapter.execute(conn, "SELECT :a + :b", {"a": 2, "b": 3}).fetchone()
            assert row == (5,)
        finally:
            adapter.release_connection(conn, pool)
            adapter.close_pool(pool)

    def test_empty_pool(self) -> None:
        with pytest.raises(AdapterError):
            SqliteSyncAdapter().acquire_connection([])


class TestPostgresqlSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        from rowmap.adapters.postgresql import PostgresqlSyncAdapter

        adapter = PostgresqlSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        from rowmap.adapters.postgresql import PostgresqlSyncAdapter

        adapter = PostgresqlSyncAdapter()
        assert adapter.paramstyle == "pyformat"

    def test_conninfo(self) -> None:
        from rowmap.adapters.postgresql import _build_conninfo

        config = ConnectionConfig(
            driver="postgresql",
            host="db.local",
            port=5433,
            user="app",
            database="sales",
            extra={"sslmode": "require"},
        )
        assert _build_conninfo(config) == (
            "host=db.local port=5433 user=app dbname=sales sslmode=require"
        )


class TestConnectionManager:
    def test_loads_adapter_for_driver(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        assert isinstance(manager.adapter, SqliteSyncAdapter)

    def test_connection_returned_to_pool(self, sqlite_manager: ConnectionManager) -> None:
        with sqlite_manager.get_connection() as conn:
            assert conn.execute("SELECT 1").fetchone() == (1,)
        with sqlite_manager.get_connection() as again:
            assert again is conn

    def test_connection_failure_is_wrapped(self, tmp_path) -> None:
        config = ConnectionConfig(
            driver="sqlite", database=str(tmp_path / "missing" / "db.sqlite"), pool_size=1
        )
        manager = ConnectionManager(config)
        with pytest.raises(ConnectionError):
            manager.initialize_pool()

    def test_invalid_pool_size(self) -> None:
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            ConnectionConfig(driver="sqlite", database=":memory:", pool_size=0)
