"""SQL parameter normalization.

Converts `:name` parameter syntax to driver-specific format.
Handles string literal exclusion and PostgreSQL `::typecast` syntax.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from rowmap.core.exceptions import ConfigurationError

# Matches :name but not ::typecast and not inside words
# Negative lookbehind for : (handles ::), \w (handles mid-word colons)
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Matches single-quoted string literals (with escaped quotes handled)
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")


def normalize_params(sql: str, paramstyle: str) -> str:
    """Convert :name parameters to the target param style.

    Args:
        sql: SQL string with :name parameters.
        paramstyle: Target style - 'named' (no conversion) or 'pyformat' (%(name)s).

    Returns:
        SQL with parameters converted to the target style.
    """
    if paramstyle == "named":
        return sql
    return _convert_to_pyformat(sql)


@lru_cache(maxsize=256)
def _convert_to_pyformat(sql: str) -> str:
    """Convert :name params to %(name)s, preserving string literals."""
    parts: list[str] = []
    last_end = 0

    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[last_end:start]))
        parts.append(match.group())
        last_end = end

    if last_end < len(sql):
        parts.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[last_end:]))

    return "".join(parts)


def param_names(sql: str) -> set[str]:
    """Return the :name parameters referenced outside string literals."""
    stripped = _STRING_LITERAL_PATTERN.sub("''", sql)
    return set(_PARAM_PATTERN.findall(stripped))


def bind_params(sql: str, params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return the parameters the statement references, failing on missing ones.

    Raises:
        KeyError: Naming the first parameter that has no value.
    """
    supplied = dict(params or {})
    missing = sorted(param_names(sql) - supplied.keys())
    if missing:
        raise KeyError(missing[0])
    return supplied


def params_from(values: Any) -> dict[str, Any]:
    """Parameter values from a mapping or from a record's public fields.

    Dataclass and Pydantic instances contribute their declared fields,
    other objects their public instance attributes. Field values are
    taken as they are, without recursing into nested records.

    Raises:
        ConfigurationError: If values has no fields to bind.
    """
    if isinstance(values, Mapping):
        return dict(values)
    if dataclasses.is_dataclass(values) and not isinstance(values, type):
        return {f.name: getattr(values, f.name) for f in dataclasses.fields(values)}
    model_fields = getattr(type(values), "model_fields", None)
    if isinstance(model_fields, dict):
        return {name: getattr(values, name) for name in model_fields}
    if hasattr(values, "__dict__") and not isinstance(values, type):
        return {k: v for k, v in vars(values).items() if not k.startswith("_")}
    raise ConfigurationError(f"Cannot bind parameters from {type(values).__name__}")
