"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from rowmap.core.connection import ConnectionConfig, ConnectionManager
from rowmap.core.culture import FormatContext
from rowmap.mapping.descriptor import RecordDescriptor


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def sqlite_manager(sqlite_config: ConnectionConfig) -> Iterator[ConnectionManager]:
    """Connection manager over a single in-memory SQLite connection."""
    manager = ConnectionManager(sqlite_config)
    yield manager
    manager.close_pool()


@pytest.fixture
def comma_decimal() -> FormatContext:
    """Context using ',' for decimals and '.' for grouping."""
    return FormatContext(decimal_separator=",", group_separator=".")


@pytest.fixture
def registered():
    """Register explicit descriptors and drop them after the test.

    Usage:
        registered(MyRecord, {"id": int})
    """
    types: list[type] = []

    def _register(record_type: type, fields=None, **kwargs):
        types.append(record_type)
        return RecordDescriptor.register(record_type, fields, **kwargs)

    yield _register
    for record_type in types:
        RecordDescriptor.forget(record_type)
