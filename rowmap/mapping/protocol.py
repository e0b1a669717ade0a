"""Mapper protocol.

All mappers implement this interface. The Engine calls map_one for
fetch_one results and map_many for fetch_all results.
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from rowmap.mapping.cursor import Cursor

T = TypeVar("T", covariant=True)


@runtime_checkable
class Mapper(Protocol[T]):
    """Base mapper protocol."""

    def map_one(self, cursor: Cursor) -> T:
        """Map the cursor's current row to a target object."""
        ...

    def map_many(self, cursor: Cursor) -> list[T]:
        """Advance through the cursor, mapping every remaining row."""
        ...
