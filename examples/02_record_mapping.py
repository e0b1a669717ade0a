"""
Example 02: Record Mapping and Conversion

This example demonstrates RecordMapper over in-memory rows, width-specific
field types, culture-aware parsing and the standalone converters.
"""

from dataclasses import dataclass
from decimal import Decimal
import uuid

from pydantic import BaseModel

from rowmap import FieldCoercionError, FormatContext, Int16, RecordMapper, RowCursor, UInt8
from rowmap.conversion import to_nullable_int32, to_uuid


@dataclass
class Reading:
    """Sensor reading using width-specific integer fields"""
    sensor: Int16 = 0
    level: UInt8 = 0
    value: Decimal = Decimal(0)


class Device(BaseModel):
    """Device model using Pydantic"""
    device_id: uuid.UUID = uuid.UUID(int=0)
    label: str = ""


def main():
    print("=== Record Mapping ===\n")

    # Columns match fields case-insensitively; extra columns are ignored
    cursor = RowCursor(
        ["SENSOR", "Level", "Value", "recorded_by"],
        [(1, "200", "12.5", "ops"), (2, 17, 3, "ops")],
    )
    mapper = RecordMapper(Reading)
    for reading in mapper.map_many(cursor):
        print(f"  {reading}")
    print()

    # Culture-specific number formats
    german = FormatContext(decimal_separator=",", group_separator=".")
    mapper_de = RecordMapper(Reading, context=german)
    print(f"German row: {mapper_de.map_row({'sensor': '3', 'value': '1.234,5'})}\n")

    # A bad value reports the field and column it came from
    try:
        mapper.map_row({"sensor": 4, "level": 300})
    except FieldCoercionError as e:
        print(f"FieldCoercionError: field={e.field_name}, column={e.column_name}, value={e.value}\n")

    # Pydantic models and UUID columns stored as bytes
    device_id = uuid.uuid4()
    device = RecordMapper(Device).map_row({"device_id": device_id.bytes, "label": "pump"})
    print(f"Device: {device}\n")

    print("=== Standalone Converters ===\n")
    print(f"to_nullable_int32(None) = {to_nullable_int32(None)}")
    print(f"to_nullable_int32('42') = {to_nullable_int32('42')}")
    print(f"to_uuid(bytes) == to_uuid(str): {to_uuid(device_id.bytes) == to_uuid(str(device_id))}")


if __name__ == "__main__":
    main()
