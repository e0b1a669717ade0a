"""Mapping layer - transform cursor rows into typed records."""

from __future__ import annotations

from rowmap.mapping.cursor import Cursor, DbApiCursor, RowCursor, fingerprint_of
from rowmap.mapping.descriptor import FieldDescriptor, RecordDescriptor
from rowmap.mapping.plan import Correlation, CorrelationPlan, compile_plan
from rowmap.mapping.protocol import Mapper
from rowmap.mapping.record import RecordMapper

__all__ = [
    "RecordMapper",
    "Mapper",
    "Cursor",
    "DbApiCursor",
    "RowCursor",
    "fingerprint_of",
    "FieldDescriptor",
    "RecordDescriptor",
    "Correlation",
    "CorrelationPlan",
    "compile_plan",
]
