"""Cursor-to-record mapper.

RecordMapper turns the current row of a cursor into an instance of a
record type. The field/column correlation is compiled once per cursor
shape and kept in a single slot keyed by the shape fingerprint, so rows
after the first cost one conversion per correlated field.

The slot is replaced as a whole and each call reads it once, so a mapper
shared between threads recompiles on shape changes instead of applying a
plan built for another layout. One mapper per query type is still the
cheapest arrangement.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Generic, TypeVar

from rowmap.conversion.engine import convert_spec
from rowmap.core.culture import FormatContext
from rowmap.core.exceptions import CoercionError, ConfigurationError, FieldCoercionError
from rowmap.mapping.cursor import Cursor, RowCursor, fingerprint_of
from rowmap.mapping.descriptor import RecordDescriptor
from rowmap.mapping.plan import Correlation, CorrelationPlan, compile_plan

T = TypeVar("T")


class RecordMapper(Generic[T]):
    """Map cursor rows onto instances of target_class.

    Args:
        target_class: Record type with a zero-argument constructor and
            annotated, settable fields.
        context: Culture rules passed to the conversion engine.
        aliases: Optional column-name to field-name mapping.

    Raises:
        ConfigurationError: If target_class is None or its annotations
            cannot be resolved.
    """

    def __init__(
        self,
        target_class: type[T],
        *,
        context: FormatContext | None = None,
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        self._descriptor = RecordDescriptor.of(target_class)
        self._context = context or FormatContext.invariant()
        self._aliases = dict(aliases) if aliases else None
        self._plan: CorrelationPlan | None = None

    @property
    def target_class(self) -> type[T]:
        return self._descriptor.record_type

    @property
    def plan(self) -> CorrelationPlan | None:
        """The correlation plan of the most recently mapped shape."""
        return self._plan

    def _plan_for(self, cursor: Cursor) -> CorrelationPlan:
        fingerprint = fingerprint_of(cursor)
        plan = self._plan
        if plan is None or not plan.matches(fingerprint):
            plan = compile_plan(self._descriptor, cursor, fingerprint, self._aliases)
            self._plan = plan
        return plan

    def _coerce(self, cursor: Cursor, correlation: Correlation) -> Any:
        raw = cursor.value_at(correlation.column_index)
        try:
            return convert_spec(raw, correlation.field.spec, self._context)
        except CoercionError as e:
            raise self._field_error(correlation, raw, e.reason) from e

    def _field_error(self, correlation: Correlation, raw: Any, reason: str) -> FieldCoercionError:
        return FieldCoercionError(
            self._descriptor.record_type.__name__,
            correlation.field.name,
            correlation.column_index,
            correlation.column_name,
            raw,
            correlation.field.spec,
            reason,
        )

    def map_one(self, cursor: Cursor) -> T:
        """Map the cursor's current row.

        Fields without a matching column keep their default value; those
        the instance has no value for get their absent value (None or the
        zero-equivalent).

        Raises:
            FieldCoercionError: If a column value cannot be coerced to its
                field's type. The mapper stays usable for later rows.
            ConfigurationError: If the record cannot be instantiated.
        """
        plan = self._plan_for(cursor)
        instance = self._descriptor.instantiate()
        for fd in plan.unmatched_fields:
            if not hasattr(instance, fd.name):
                fd.assign(instance, fd.spec.absent)
        for correlation in plan.correlations:
            value = self._coerce(cursor, correlation)
            try:
                correlation.field.assign(instance, value)
            except (TypeError, ValueError) as e:
                raw = cursor.value_at(correlation.column_index)
                raise self._field_error(correlation, raw, f"assignment rejected: {e}") from e
        return instance  # type: ignore[no-any-return]

    def iter_many(self, cursor: Cursor) -> Iterator[T]:
        """Advance through the cursor, yielding one record per row."""
        advance = getattr(cursor, "advance", None)
        if advance is None:
            raise ConfigurationError(
                f"{type(cursor).__name__} cannot advance; map rows with map_one"
            )
        while advance():
            yield self.map_one(cursor)

    def map_many(self, cursor: Cursor) -> list[T]:
        """Map every remaining row of the cursor."""
        return list(self.iter_many(cursor))

    def map_row(self, row: Mapping[str, Any]) -> T:
        """Map a single row dict."""
        return self.map_one(RowCursor.single(row))

    def map_rows(self, rows: list[Mapping[str, Any]]) -> list[T]:
        """Map a list of row dicts."""
        return [self.map_row(row) for row in rows]
