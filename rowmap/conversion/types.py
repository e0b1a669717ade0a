"""Target type descriptors for the conversion engine.

A target is reduced to a TypeSpec: a ScalarKind tag selecting the coercion
rule, the Python type the result has, and whether the target is the
nullable wrapper of that type. Width-specific targets are expressed with
``Annotated`` aliases such as ``Int16`` or ``Char``.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import math
import struct
import types
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any, Union, get_args, get_origin

from rowmap.core.exceptions import ConfigurationError


class ScalarKind(enum.Enum):
    """One member per coercion rule."""

    BOOLEAN = "boolean"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    SINGLE = "single"
    DOUBLE = "double"
    DECIMAL = "decimal"
    CHAR = "char"
    DATETIME = "datetime"
    DATE = "date"
    STRING = "string"
    UUID = "uuid"
    OBJECT = "object"


INTEGER_RANGES: dict[ScalarKind, tuple[int, int]] = {
    ScalarKind.INT8: (-(2**7), 2**7 - 1),
    ScalarKind.INT16: (-(2**15), 2**15 - 1),
    ScalarKind.INT32: (-(2**31), 2**31 - 1),
    ScalarKind.INT64: (-(2**63), 2**63 - 1),
    ScalarKind.UINT8: (0, 2**8 - 1),
    ScalarKind.UINT16: (0, 2**16 - 1),
    ScalarKind.UINT32: (0, 2**32 - 1),
    ScalarKind.UINT64: (0, 2**64 - 1),
}

def as_single(value: float) -> float | None:
    """Round value to the nearest binary32 float; None when it does not fit."""
    try:
        return struct.unpack("f", struct.pack("f", value))[0]  # type: ignore[no-any-return]
    except OverflowError:
        return None


_PYTHON_TYPES: dict[ScalarKind, type] = {
    ScalarKind.BOOLEAN: bool,
    **{kind: int for kind in INTEGER_RANGES},
    ScalarKind.SINGLE: float,
    ScalarKind.DOUBLE: float,
    ScalarKind.DECIMAL: decimal.Decimal,
    ScalarKind.CHAR: str,
    ScalarKind.DATETIME: datetime.datetime,
    ScalarKind.DATE: datetime.date,
    ScalarKind.STRING: str,
    ScalarKind.UUID: uuid.UUID,
    ScalarKind.OBJECT: object,
}

_ZEROS: dict[ScalarKind, Any] = {
    ScalarKind.BOOLEAN: False,
    **{kind: 0 for kind in INTEGER_RANGES},
    ScalarKind.SINGLE: 0.0,
    ScalarKind.DOUBLE: 0.0,
    ScalarKind.DECIMAL: decimal.Decimal(0),
    ScalarKind.CHAR: "\0",
    ScalarKind.DATETIME: datetime.datetime.min,
    ScalarKind.DATE: datetime.date.min,
    ScalarKind.UUID: uuid.UUID(int=0),
}

# Plain Python types and the rule they select. Matched by identity;
# subclasses (IntEnum, custom str types) go to the universal converter.
_DEFAULT_KINDS: tuple[tuple[type, ScalarKind], ...] = (
    (bool, ScalarKind.BOOLEAN),
    (int, ScalarKind.INT64),
    (float, ScalarKind.DOUBLE),
    (decimal.Decimal, ScalarKind.DECIMAL),
    (str, ScalarKind.STRING),
    (datetime.datetime, ScalarKind.DATETIME),
    (datetime.date, ScalarKind.DATE),
    (uuid.UUID, ScalarKind.UUID),
)

_UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)


@dataclass(frozen=True)
class TypeSpec:
    """Resolved conversion target."""

    kind: ScalarKind
    python_type: Any
    nullable: bool = False

    @property
    def is_value_type(self) -> bool:
        """Value types materialize a zero-equivalent for absent input."""
        return self.kind not in (ScalarKind.STRING, ScalarKind.OBJECT)

    @property
    def zero(self) -> Any:
        return _ZEROS.get(self.kind)

    @property
    def absent(self) -> Any:
        """Value standing in for a missing input: None or the zero-equivalent."""
        if self.nullable or not self.is_value_type:
            return None
        return self.zero

    def as_nullable(self) -> TypeSpec:
        if self.nullable:
            return self
        return TypeSpec(self.kind, self.python_type, nullable=True)

    def accepts(self, value: Any) -> bool:
        """Return True when value already is an instance of this exact target."""
        if self.kind is ScalarKind.OBJECT:
            return isinstance(self.python_type, type) and type(value) is self.python_type
        if type(value) is not self.python_type:
            return False
        bounds = INTEGER_RANGES.get(self.kind)
        if bounds is not None:
            return bounds[0] <= value <= bounds[1]
        if self.kind is ScalarKind.SINGLE:
            return math.isnan(value) or as_single(value) == value
        if self.kind is ScalarKind.CHAR:
            return len(value) == 1
        return True

    def __str__(self) -> str:
        name = self.kind.value
        if self.kind is ScalarKind.OBJECT:
            name = getattr(self.python_type, "__name__", repr(self.python_type))
        return f"{name}?" if self.nullable else name


def spec_for(kind: ScalarKind, *, nullable: bool = False) -> TypeSpec:
    """Return the TypeSpec for a scalar kind."""
    return TypeSpec(kind, _PYTHON_TYPES[kind], nullable)


def resolve_type(target: Any) -> TypeSpec:
    """Reduce a target type expression to a TypeSpec.

    Accepts TypeSpec instances, ScalarKind members, plain Python types,
    ``Annotated[T, ScalarKind.X]`` and ``Optional[...]`` wrappers of any of
    these.

    Raises:
        ConfigurationError: If target is None or cannot describe a type.
    """
    if target is None:
        raise ConfigurationError("Target type must not be None")
    if isinstance(target, TypeSpec):
        return target
    if isinstance(target, ScalarKind):
        return spec_for(target)
    try:
        return _resolve_cached(target)
    except TypeError:
        # Unhashable annotation objects bypass the cache.
        return _resolve(target)


@lru_cache(maxsize=512)
def _resolve_cached(target: Any) -> TypeSpec:
    return _resolve(target)


def _resolve(target: Any) -> TypeSpec:
    origin = get_origin(target)

    if origin is Annotated:
        base, *metadata = get_args(target)
        for item in metadata:
            if isinstance(item, ScalarKind):
                spec = spec_for(item)
                inner = _resolve(base)
                return spec.as_nullable() if inner.nullable else spec
        return _resolve(base)

    if origin in _UNION_TYPES:
        members = [arg for arg in get_args(target) if arg is not type(None)]
        if len(members) == len(get_args(target)):
            # Union without None: only the universal converter can handle it.
            return TypeSpec(ScalarKind.OBJECT, target)
        inner_target = members[0] if len(members) == 1 else Union[tuple(members)]  # noqa: UP007
        return _resolve(inner_target).as_nullable()

    if target is type(None):
        raise ConfigurationError("NoneType is not a conversion target")

    if isinstance(target, type):
        for python_type, kind in _DEFAULT_KINDS:
            if target is python_type:
                return spec_for(kind)
        return TypeSpec(ScalarKind.OBJECT, target)

    # Generic aliases (list[int]), Literal[...], Any and friends.
    if origin is not None or getattr(target, "__module__", None) == "typing":
        return TypeSpec(ScalarKind.OBJECT, target)

    raise ConfigurationError(f"Cannot use {target!r} as a conversion target")


# Width-specific annotation aliases.
Int8 = Annotated[int, ScalarKind.INT8]
Int16 = Annotated[int, ScalarKind.INT16]
Int32 = Annotated[int, ScalarKind.INT32]
Int64 = Annotated[int, ScalarKind.INT64]
UInt8 = Annotated[int, ScalarKind.UINT8]
UInt16 = Annotated[int, ScalarKind.UINT16]
UInt32 = Annotated[int, ScalarKind.UINT32]
UInt64 = Annotated[int, ScalarKind.UINT64]
Single = Annotated[float, ScalarKind.SINGLE]
Double = Annotated[float, ScalarKind.DOUBLE]
Char = Annotated[str, ScalarKind.CHAR]
