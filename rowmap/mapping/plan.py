"""Correlation plans.

Frozen dataclasses pairing record fields with cursor column indices.
A plan is compiled once per (record type, cursor shape) and reused by
RecordMapper for every row of that shape.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from rowmap.mapping.cursor import Cursor, Fingerprint
from rowmap.mapping.descriptor import FieldDescriptor, RecordDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Correlation:
    """A record field bound to the column it is read from."""

    column_index: int
    column_name: str
    field: FieldDescriptor


@dataclass(frozen=True)
class CorrelationPlan:
    """Compiled field-to-column correlation for one cursor shape."""

    fingerprint: Fingerprint
    correlations: tuple[Correlation, ...] = field(default_factory=tuple)
    unmatched_fields: tuple[FieldDescriptor, ...] = field(default_factory=tuple)

    @property
    def unmatched(self) -> tuple[str, ...]:
        """Names of the fields no column correlates with."""
        return tuple(fd.name for fd in self.unmatched_fields)

    def matches(self, fingerprint: Fingerprint) -> bool:
        return self.fingerprint == fingerprint


def compile_plan(
    descriptor: RecordDescriptor,
    cursor: Cursor,
    fingerprint: Fingerprint,
    aliases: Mapping[str, str] | None = None,
) -> CorrelationPlan:
    """Correlate descriptor fields with the cursor's columns.

    Column names match field names case-insensitively; when a name occurs
    more than once the first column wins. ``aliases`` maps column names to
    field names for columns whose name differs from the field.
    """
    alias_map = {k.lower(): v.lower() for k, v in (aliases or {}).items()}

    columns: dict[str, int] = {}
    for index, name in enumerate(fingerprint):
        key = alias_map.get(name, name)
        columns.setdefault(key, index)

    correlations: list[Correlation] = []
    unmatched: list[FieldDescriptor] = []
    for fd in descriptor.fields:
        index = columns.get(fd.name.lower())
        if index is None:
            unmatched.append(fd)
            continue
        correlations.append(Correlation(index, cursor.column_name(index), fd))

    plan = CorrelationPlan(fingerprint, tuple(correlations), tuple(unmatched))
    logger.debug(
        f"Compiled plan for {descriptor.record_type.__name__}: "
        f"{len(plan.correlations)} of {len(descriptor.fields)} fields correlated"
        + (f", unmatched {list(plan.unmatched)}" if plan.unmatched else "")
    )
    return plan
