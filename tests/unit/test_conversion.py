"""Unit tests for the conversion engine."""

from __future__ import annotations

import datetime
import enum
import math
import uuid
from decimal import Decimal
from typing import Optional

import pytest

from rowmap.conversion import (
    Char,
    Int8,
    Int16,
    Int32,
    ScalarKind,
    Single,
    UInt8,
    UInt16,
    UInt64,
    convert,
    to_bool,
    to_char,
    to_decimal,
    to_int32,
    to_nullable_date,
    to_nullable_int32,
    to_nullable_uuid,
    to_string,
    to_uint8,
    to_uuid,
)
from rowmap.core.culture import FormatContext
from rowmap.core.exceptions import CoercionError, ConfigurationError


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class Point:
    def __init__(self, x: int = 0, y: int = 0) -> None:
        self.x = x
        self.y = y


class TestPreChecks:
    def test_identity_returns_same_object(self) -> None:
        value = "not a number"
        assert convert(value, str) is value

    def test_identity_skips_parsing(self) -> None:
        # A NaN Decimal would be rejected by the decimal rule.
        value = Decimal("NaN")
        assert convert(value, Decimal) is value

    def test_identity_respects_width(self) -> None:
        with pytest.raises(CoercionError):
            convert(300, Int8)

    def test_absent_value_type_gives_zero(self) -> None:
        assert convert(None, int) == 0
        assert convert(None, float) == 0.0
        assert convert(None, bool) is False
        assert convert(None, Decimal) == Decimal(0)
        assert convert(None, uuid.UUID) == uuid.UUID(int=0)
        assert convert(None, datetime.datetime) == datetime.datetime.min
        assert convert(None, datetime.date) == datetime.date.min
        assert convert(None, Char) == "\0"

    def test_absent_nullable_gives_none(self) -> None:
        assert convert(None, Optional[int]) is None
        assert convert(None, int | None) is None
        assert convert(None, Optional[Int16]) is None
        assert convert(None, datetime.datetime | None) is None

    def test_absent_reference_type_gives_none(self) -> None:
        assert convert(None, str) is None
        assert convert(None, Color) is None

    def test_none_target_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            convert(1, None)

    def test_scalar_kind_target(self) -> None:
        assert convert("12", ScalarKind.INT16) == 12


class TestBoolean:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("TRUE", True),
            (" False ", False),
            ("1", True),
            ("0", False),
            ("-3", True),
            (0, False),
            (7, True),
            (0.0, False),
            (2.5, True),
            (Decimal("0"), False),
        ],
    )
    def test_coercion_table(self, raw: object, expected: bool) -> None:
        assert convert(raw, bool) is expected

    @pytest.mark.parametrize("raw", ["maybe", "", "1.0", "yes"])
    def test_unrecognized_text_raises(self, raw: str) -> None:
        with pytest.raises(CoercionError):
            convert(raw, bool)

    def test_temporal_raises(self) -> None:
        with pytest.raises(CoercionError):
            convert(datetime.date(2024, 1, 1), bool)


class TestIntegers:
    def test_text(self) -> None:
        assert convert("42", int) == 42
        assert convert(" -7 ", Int32) == -7
        assert convert("+5", UInt16) == 5

    def test_bool_source(self) -> None:
        assert convert(True, int) == 1
        assert convert(False, Int8) == 0

    def test_float_rounds_half_to_even(self) -> None:
        assert convert(2.5, Int32) == 2
        assert convert(3.5, Int32) == 4
        assert convert(-1.5, Int32) == -2

    def test_decimal_rounds_half_to_even(self) -> None:
        assert convert(Decimal("2.5"), int) == 2
        assert convert(Decimal("7.51"), int) == 8

    @pytest.mark.parametrize(
        ("raw", "target"),
        [
            ("128", Int8),
            ("-129", Int8),
            ("-1", UInt8),
            (70000, UInt16),
            (2**64, UInt64),
            (2**63, int),
        ],
    )
    def test_overflow(self, raw: object, target: object) -> None:
        with pytest.raises(CoercionError, match="out of range"):
            convert(raw, target)

    @pytest.mark.parametrize("raw", ["abc", "1.5", "1,000", "1_000", ""])
    def test_format_error(self, raw: str) -> None:
        with pytest.raises(CoercionError):
            convert(raw, int)

    def test_unsupported_source(self) -> None:
        with pytest.raises(CoercionError, match="unsupported"):
            convert(datetime.datetime(2024, 1, 1), int)

    def test_non_finite_float(self) -> None:
        with pytest.raises(CoercionError):
            convert(float("inf"), int)


class TestFloatingPoint:
    def test_text_with_grouping(self) -> None:
        assert convert("1,234.5", float) == 1234.5

    def test_culture_separators(self, comma_decimal: FormatContext) -> None:
        assert convert("1.234,5", float, comma_decimal) == 1234.5

    def test_numeric_sources(self) -> None:
        assert convert(3, float) == 3.0
        assert convert(Decimal("0.25"), float) == 0.25
        assert convert(True, float) == 1.0

    def test_single_rounds_to_binary32(self) -> None:
        result = convert("0.1", Single)
        assert result == pytest.approx(0.1, rel=1e-7)
        assert result != 0.1

    def test_single_rounds_float_sources(self) -> None:
        result = convert(0.1, Single)
        assert result != 0.1
        assert result == convert("0.1", Single) == convert(Decimal("0.1"), Single)

    def test_single_keeps_representable_float(self) -> None:
        value = 0.5
        assert convert(value, Single) is value

    def test_single_passes_nan(self) -> None:
        assert math.isnan(convert(float("nan"), Single))

    def test_single_overflow(self) -> None:
        with pytest.raises(CoercionError):
            convert(1e39, Single)

    def test_bad_text(self) -> None:
        with pytest.raises(CoercionError):
            convert("twelve", float)


class TestDecimal:
    def test_text(self) -> None:
        assert convert("12.50", Decimal) == Decimal("12.50")

    def test_float_uses_shortest_repr(self) -> None:
        assert convert(0.1, Decimal) == Decimal("0.1")

    def test_int(self) -> None:
        assert convert(12, Decimal) == Decimal(12)

    def test_culture_separators(self, comma_decimal: FormatContext) -> None:
        assert convert("1.000,25", Decimal, comma_decimal) == Decimal("1000.25")

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "abc"])
    def test_rejected_text(self, raw: str) -> None:
        with pytest.raises(CoercionError):
            convert(raw, Decimal)


class TestChar:
    def test_first_character(self) -> None:
        assert convert("hello", Char) == "h"

    def test_code_point(self) -> None:
        assert convert(65, Char) == "A"

    def test_empty_text_raises(self) -> None:
        with pytest.raises(CoercionError):
            convert("", Char)

    def test_out_of_range_code(self) -> None:
        with pytest.raises(CoercionError):
            convert(0x110000, Char)

    def test_nullable(self) -> None:
        assert convert(None, Optional[Char]) is None


class TestTemporal:
    def test_text_datetime(self) -> None:
        assert convert("2024-03-01 10:30:00", datetime.datetime) == datetime.datetime(
            2024, 3, 1, 10, 30
        )

    def test_date_widens_to_datetime(self) -> None:
        assert convert(datetime.date(2024, 3, 1), datetime.datetime) == datetime.datetime(
            2024, 3, 1
        )

    def test_datetime_narrows_to_date(self) -> None:
        assert convert(datetime.datetime(2024, 3, 1, 8), datetime.date) == datetime.date(2024, 3, 1)

    def test_dayfirst(self) -> None:
        assert convert("01/03/2024", datetime.date) == datetime.date(2024, 1, 3)
        context = FormatContext(dayfirst=True)
        assert convert("01/03/2024", datetime.date, context) == datetime.date(2024, 3, 1)

    def test_bad_text(self) -> None:
        with pytest.raises(CoercionError):
            convert("not a date", datetime.datetime)

    def test_numeric_source_raises(self) -> None:
        with pytest.raises(CoercionError):
            convert(20240301, datetime.datetime)


class TestString:
    def test_scalars(self) -> None:
        assert convert(42, str) == "42"
        assert convert(True, str) == "True"
        assert convert(uuid.UUID(int=1), str) == "00000000-0000-0000-0000-000000000001"

    def test_decimal_separator(self, comma_decimal: FormatContext) -> None:
        assert convert(3.5, str, comma_decimal) == "3,5"
        assert convert(Decimal("10.25"), str, comma_decimal) == "10,25"

    def test_temporal(self) -> None:
        value = datetime.datetime(2024, 3, 1, 10, 30)
        assert convert(value, str) == "2024-03-01 10:30:00"
        assert convert(value.date(), str) == "2024-03-01"
        context = FormatContext(datetime_format="%d.%m.%Y")
        assert convert(value, str, context) == "01.03.2024"

    def test_bytes(self) -> None:
        assert convert(b"abc", str) == "abc"
        assert convert(b"\xff\x00", str) == "ff00"


class TestUuid:
    def test_bytes_and_text_agree(self) -> None:
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        from_bytes = convert(value.bytes, uuid.UUID)
        from_text = convert(str(value), uuid.UUID)
        assert from_bytes == from_text == value

    def test_little_endian_bytes(self) -> None:
        value = uuid.uuid4()
        context = FormatContext(uuid_bytes_le=True)
        assert convert(value.bytes_le, uuid.UUID, context) == value

    def test_memoryview(self) -> None:
        value = uuid.uuid4()
        assert convert(memoryview(value.bytes), uuid.UUID) == value

    def test_braced_text(self) -> None:
        value = uuid.uuid4()
        assert convert("{" + str(value) + "}", uuid.UUID) == value

    def test_wrong_length(self) -> None:
        with pytest.raises(CoercionError, match="16 bytes"):
            convert(b"\x00" * 15, uuid.UUID)

    def test_bad_text(self) -> None:
        with pytest.raises(CoercionError):
            convert("not-a-uuid", uuid.UUID)


class TestUniversalFallback:
    def test_enum(self) -> None:
        assert convert("red", Color) is Color.RED

    def test_enum_rejects_unknown(self) -> None:
        with pytest.raises(CoercionError):
            convert("blue", Color)

    def test_generic_alias(self) -> None:
        assert convert(["1", "2"], list[int]) == [1, 2]

    def test_plain_class_identity(self) -> None:
        point = Point(1, 2)
        assert convert(point, Point) is point

    def test_plain_class_rejects_other_values(self) -> None:
        with pytest.raises(CoercionError):
            convert("1,2", Point)

    def test_union_without_none(self) -> None:
        assert convert("5", int | str) in (5, "5")


class TestEntryPoints:
    def test_value_type_entries(self) -> None:
        assert to_int32("5") == 5
        assert to_int32(None) == 0
        assert to_bool("TRUE") is True
        assert to_char(None) == "\0"
        assert to_uint8(None) == 0

    def test_nullable_entries(self) -> None:
        assert to_nullable_int32(None) is None
        assert to_nullable_int32("7") == 7
        assert to_nullable_uuid(None) is None
        assert to_nullable_date("2024-02-29") == datetime.date(2024, 2, 29)

    def test_string_entry(self) -> None:
        assert to_string(None) is None
        assert to_string(1.5) == "1.5"

    def test_context_argument(self, comma_decimal: FormatContext) -> None:
        assert to_decimal("2,75", comma_decimal) == Decimal("2.75")

    def test_uuid_entry(self) -> None:
        value = uuid.uuid4()
        assert to_uuid(value.bytes) == to_uuid(str(value)) == value

    def test_entry_names(self) -> None:
        assert to_int32.__name__ == "to_int32"
        assert "int32?" in (to_nullable_int32.__doc__ or "")

    def test_range_enforced(self) -> None:
        with pytest.raises(CoercionError):
            to_uint8(256)
