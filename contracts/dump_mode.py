"""Database dump mode selector."""

from enum import Enum


class DbDumpMode(str, Enum):
    all = "all"
    schema = "schema"
    data = "data"

    @classmethod
    def from_string(cls, value: str) -> "DbDumpMode":
        """Case-insensitive lookup, e.g. ``DbDumpMode.from_string("SCHEMA")``."""
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ValueError(f"Unknown dump mode: {value!r}") from None
