"""Universal value conversion.

convert() coerces a loosely typed value, as returned by a database
driver, into a requested target type. Every call runs the same
pre-checks (identity short-circuit, absent-value handling) and then
dispatches on the target's ScalarKind through the _RULES table.

The engine is stateless: culture-sensitive behaviour comes from the
FormatContext passed in, so concurrent use needs no coordination.
"""

from __future__ import annotations

import datetime
import decimal
import numbers
import uuid
from collections.abc import Callable
from functools import lru_cache
from typing import Any

import dateutil.parser
from pydantic import ConfigDict, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from rowmap.conversion.types import (
    INTEGER_RANGES,
    ScalarKind,
    TypeSpec,
    as_single,
    resolve_type,
    spec_for,
)
from rowmap.core.culture import FormatContext
from rowmap.core.exceptions import CoercionError

Rule = Callable[[Any, TypeSpec, FormatContext], Any]

_BINARY = (bytes, bytearray, memoryview)


def convert(value: Any, target: Any, context: FormatContext | None = None) -> Any:
    """Convert value to target.

    Args:
        value: Raw value. None is the absent-value marker.
        target: Python type, ``Annotated`` alias, ``Optional[...]``,
            ScalarKind or TypeSpec.
        context: Culture rules; defaults to FormatContext.invariant().

    Returns:
        A value of the target type. For absent input: None when the target
        is nullable or a reference type, else the type's zero-equivalent.

    Raises:
        CoercionError: If the value cannot be interpreted as target.
        ConfigurationError: If target does not describe a type.
    """
    return convert_spec(value, resolve_type(target), context)


def convert_spec(value: Any, spec: TypeSpec, context: FormatContext | None = None) -> Any:
    """Convert value to an already resolved TypeSpec."""
    if spec.accepts(value):
        return value
    if value is None:
        return spec.absent
    return _RULES[spec.kind](value, spec, context or FormatContext.invariant())


# --- numeric helpers ---


def _parse_int(text: str, context: FormatContext) -> int | None:
    """Parse integer text; None when text is not an integer literal."""
    text = context.normalize_number(text, grouping=False)
    if "_" in text:
        return None
    try:
        return int(text, 10)
    except ValueError:
        return None


def _check_range(result: int, value: Any, spec: TypeSpec) -> int:
    low, high = INTEGER_RANGES[spec.kind]
    if not low <= result <= high:
        raise CoercionError(value, spec, f"value out of range [{low}, {high}]")
    return result


def _to_integer(value: Any, spec: TypeSpec, context: FormatContext) -> int:
    if isinstance(value, bool):
        result = int(value)
    elif isinstance(value, numbers.Integral):
        result = int(value)
    elif isinstance(value, decimal.Decimal):
        if not value.is_finite():
            raise CoercionError(value, spec, "value is not finite")
        result = int(value.to_integral_value(rounding=decimal.ROUND_HALF_EVEN))
    elif isinstance(value, numbers.Real):
        try:
            # round() on floats is half-to-even
            result = round(float(value))
        except (OverflowError, ValueError) as e:
            raise CoercionError(value, spec, "value is not finite") from e
    elif isinstance(value, str):
        parsed = _parse_int(value, context)
        if parsed is None:
            raise CoercionError(value, spec, "not a valid number")
        result = parsed
    else:
        raise CoercionError(value, spec, "unsupported source type")
    return _check_range(result, value, spec)


def _to_float(value: Any, spec: TypeSpec, context: FormatContext) -> float:
    if isinstance(value, str):
        text = context.normalize_number(value)
        if "_" in text:
            raise CoercionError(value, spec, "not a valid number")
        try:
            result = float(text)
        except ValueError as e:
            raise CoercionError(value, spec, "not a valid number") from e
    elif isinstance(value, (numbers.Real, decimal.Decimal)):
        try:
            result = float(value)
        except OverflowError as e:
            raise CoercionError(value, spec, "value out of range") from e
    else:
        raise CoercionError(value, spec, "unsupported source type")

    if spec.kind is ScalarKind.SINGLE:
        single = as_single(result)
        if single is None:
            raise CoercionError(value, spec, "value out of range for single precision")
        result = single
    return result


def _to_decimal(value: Any, spec: TypeSpec, context: FormatContext) -> decimal.Decimal:
    if isinstance(value, decimal.Decimal):
        result = value
    elif isinstance(value, numbers.Integral):
        result = decimal.Decimal(int(value))
    elif isinstance(value, numbers.Real):
        result = decimal.Decimal(str(float(value)))
    elif isinstance(value, str):
        text = context.normalize_number(value)
        if "_" in text:
            raise CoercionError(value, spec, "not a valid number")
        try:
            result = decimal.Decimal(text)
        except decimal.InvalidOperation as e:
            raise CoercionError(value, spec, "not a valid number") from e
    else:
        raise CoercionError(value, spec, "unsupported source type")

    if not result.is_finite():
        raise CoercionError(value, spec, "value is not finite")
    return result


# --- scalar rules ---


def _to_boolean(value: Any, spec: TypeSpec, context: FormatContext) -> bool:
    if isinstance(value, str):
        literal = value.strip().lower()
        if literal in ("true", "false"):
            return literal == "true"
    parsed = _parse_int(str(value), context)
    if parsed is not None:
        return parsed != 0
    if isinstance(value, (numbers.Number, decimal.Decimal)):
        return bool(value != 0)
    raise CoercionError(value, spec, "not a boolean literal or integer")


def _to_char(value: Any, spec: TypeSpec, context: FormatContext) -> str:
    if isinstance(value, str):
        if value:
            return value[0]
        raise CoercionError(value, spec, "string must contain at least one character")
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        code = int(value)
        if 0 <= code <= 0xFFFF:
            return chr(code)
        raise CoercionError(value, spec, "value out of range for a character")
    raise CoercionError(value, spec, "unsupported source type")


def _parse_datetime(value: str, spec: TypeSpec, context: FormatContext) -> datetime.datetime:
    try:
        return dateutil.parser.parse(
            value, dayfirst=context.dayfirst, yearfirst=context.yearfirst
        )
    except (ValueError, OverflowError) as e:
        raise CoercionError(value, spec, "not a recognized date/time") from e


def _to_datetime(value: Any, spec: TypeSpec, context: FormatContext) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, str):
        return _parse_datetime(value, spec, context)
    raise CoercionError(value, spec, "unsupported source type")


def _to_date(value: Any, spec: TypeSpec, context: FormatContext) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        return _parse_datetime(value, spec, context).date()
    raise CoercionError(value, spec, "unsupported source type")


def _to_string(value: Any, spec: TypeSpec, context: FormatContext) -> str:
    if isinstance(value, str):
        return str(value)
    if isinstance(value, (float, decimal.Decimal)):
        text = str(value)
        if context.decimal_separator != ".":
            text = text.replace(".", context.decimal_separator)
        return text
    if isinstance(value, (datetime.datetime, datetime.date)):
        if context.datetime_format:
            return value.strftime(context.datetime_format)
        if isinstance(value, datetime.datetime):
            return value.isoformat(sep=" ")
        return value.isoformat()
    if isinstance(value, _BINARY):
        raw = bytes(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw.hex()
    return str(value)


def _to_uuid(value: Any, spec: TypeSpec, context: FormatContext) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, _BINARY):
        raw = bytes(value)
        if len(raw) != 16:
            raise CoercionError(value, spec, f"expected 16 bytes, got {len(raw)}")
        return uuid.UUID(bytes_le=raw) if context.uuid_bytes_le else uuid.UUID(bytes=raw)
    try:
        return uuid.UUID(str(value).strip())
    except ValueError as e:
        raise CoercionError(value, spec, "not a recognized identifier") from e


@lru_cache(maxsize=256)
def _type_adapter(python_type: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(python_type)
    except PydanticSchemaGenerationError:
        # Plain classes without a pydantic schema validate by isinstance.
        return TypeAdapter(python_type, config=ConfigDict(arbitrary_types_allowed=True))


def _to_object(value: Any, spec: TypeSpec, context: FormatContext) -> Any:
    if spec.python_type in (object, Any):
        return value
    try:
        return _type_adapter(spec.python_type).validate_python(value)
    except ValidationError as e:
        errors = e.errors()
        reason = errors[0]["msg"] if errors else str(e)
        raise CoercionError(value, spec, reason) from e


_RULES: dict[ScalarKind, Rule] = {
    ScalarKind.BOOLEAN: _to_boolean,
    ScalarKind.INT8: _to_integer,
    ScalarKind.INT16: _to_integer,
    ScalarKind.INT32: _to_integer,
    ScalarKind.INT64: _to_integer,
    ScalarKind.UINT8: _to_integer,
    ScalarKind.UINT16: _to_integer,
    ScalarKind.UINT32: _to_integer,
    ScalarKind.UINT64: _to_integer,
    ScalarKind.SINGLE: _to_float,
    ScalarKind.DOUBLE: _to_float,
    ScalarKind.DECIMAL: _to_decimal,
    ScalarKind.CHAR: _to_char,
    ScalarKind.DATETIME: _to_datetime,
    ScalarKind.DATE: _to_date,
    ScalarKind.STRING: _to_string,
    ScalarKind.UUID: _to_uuid,
    ScalarKind.OBJECT: _to_object,
}


# --- single-target entry points ---


def _entry(name: str, kind: ScalarKind, *, nullable: bool) -> Callable[..., Any]:
    spec = spec_for(kind, nullable=nullable)

    def entry(value: Any, context: FormatContext | None = None) -> Any:
        return convert_spec(value, spec, context)

    entry.__name__ = entry.__qualname__ = name
    absent = repr(spec.absent)
    entry.__doc__ = f"Convert value to {spec}. Absent input returns {absent}."
    return entry


to_bool = _entry("to_bool", ScalarKind.BOOLEAN, nullable=False)
to_int8 = _entry("to_int8", ScalarKind.INT8, nullable=False)
to_int16 = _entry("to_int16", ScalarKind.INT16, nullable=False)
to_int32 = _entry("to_int32", ScalarKind.INT32, nullable=False)
to_int64 = _entry("to_int64", ScalarKind.INT64, nullable=False)
to_uint8 = _entry("to_uint8", ScalarKind.UINT8, nullable=False)
to_uint16 = _entry("to_uint16", ScalarKind.UINT16, nullable=False)
to_uint32 = _entry("to_uint32", ScalarKind.UINT32, nullable=False)
to_uint64 = _entry("to_uint64", ScalarKind.UINT64, nullable=False)
to_single = _entry("to_single", ScalarKind.SINGLE, nullable=False)
to_double = _entry("to_double", ScalarKind.DOUBLE, nullable=False)
to_decimal = _entry("to_decimal", ScalarKind.DECIMAL, nullable=False)
to_char = _entry("to_char", ScalarKind.CHAR, nullable=False)
to_datetime = _entry("to_datetime", ScalarKind.DATETIME, nullable=False)
to_date = _entry("to_date", ScalarKind.DATE, nullable=False)
to_uuid = _entry("to_uuid", ScalarKind.UUID, nullable=False)
to_string = _entry("to_string", ScalarKind.STRING, nullable=False)

to_nullable_bool = _entry("to_nullable_bool", ScalarKind.BOOLEAN, nullable=True)
to_nullable_int8 = _entry("to_nullable_int8", ScalarKind.INT8, nullable=True)
to_nullable_int16 = _entry("to_nullable_int16", ScalarKind.INT16, nullable=True)
to_nullable_int32 = _entry("to_nullable_int32", ScalarKind.INT32, nullable=True)
to_nullable_int64 = _entry("to_nullable_int64", ScalarKind.INT64, nullable=True)
to_nullable_uint8 = _entry("to_nullable_uint8", ScalarKind.UINT8, nullable=True)
to_nullable_uint16 = _entry("to_nullable_uint16", ScalarKind.UINT16, nullable=True)
to_nullable_uint32 = _entry("to_nullable_uint32", ScalarKind.UINT32, nullable=True)
to_nullable_uint64 = _entry("to_nullable_uint64", ScalarKind.UINT64, nullable=True)
to_nullable_single = _entry("to_nullable_single", ScalarKind.SINGLE, nullable=True)
to_nullable_double = _entry("to_nullable_double", ScalarKind.DOUBLE, nullable=True)
to_nullable_decimal = _entry("to_nullable_decimal", ScalarKind.DECIMAL, nullable=True)
to_nullable_char = _entry("to_nullable_char", ScalarKind.CHAR, nullable=True)
to_nullable_datetime = _entry("to_nullable_datetime", ScalarKind.DATETIME, nullable=True)
to_nullable_date = _entry("to_nullable_date", ScalarKind.DATE, nullable=True)
to_nullable_uuid = _entry("to_nullable_uuid", ScalarKind.UUID, nullable=True)
