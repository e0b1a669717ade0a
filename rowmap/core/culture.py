"""Format context for culture-sensitive conversions.

FormatContext is the explicit stand-in for an ambient locale: it carries
the separators, date-parsing hints and byte-order choices the conversion
engine consults. It is immutable and safe to share between threads.
"""

from __future__ import annotations

import locale
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, field_validator


class FormatContext(BaseModel):
    """Number, date and identifier formatting rules used during conversion."""

    model_config = ConfigDict(frozen=True)

    decimal_separator: str = "."
    group_separator: str = ","
    dayfirst: bool = False
    yearfirst: bool = False
    datetime_format: str | None = None
    uuid_bytes_le: bool = False

    @field_validator("decimal_separator")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("decimal_separator must be a single character")
        return value

    @classmethod
    def invariant(cls) -> FormatContext:
        """Return the culture-neutral context (``.`` decimals, ISO dates)."""
        return _invariant()

    @classmethod
    def from_locale(cls, **overrides: object) -> FormatContext:
        """Build a context from the process locale's numeric conventions.

        Args:
            **overrides: Field values that take precedence over the locale.
        """
        conv = locale.localeconv()
        values: dict[str, object] = {
            "decimal_separator": conv.get("decimal_point") or ".",
            "group_separator": conv.get("thousands_sep") or "",
        }
        values.update(overrides)
        return cls(**values)

    def normalize_number(self, text: str, *, grouping: bool = True) -> str:
        """Rewrite culture-formatted numeric text into Python literal form.

        Args:
            text: Numeric text as produced by the data source.
            grouping: Strip group separators before parsing.
        """
        text = text.strip()
        if grouping and self.group_separator and self.group_separator != self.decimal_separator:
            text = text.replace(self.group_separator, "")
        if self.decimal_separator != ".":
            text = text.replace(self.decimal_separator, ".")
        return text


@lru_cache(maxsize=1)
def _invariant() -> FormatContext:
    return FormatContext()
