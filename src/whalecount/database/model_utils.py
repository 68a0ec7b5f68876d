"""Database model utilities and type decorators."""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import CHAR
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator


class GUID(TypeDecorator):
    """SQLite-compatible GUID type using CHAR(36) storage."""

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> Any:  # noqa: ANN401
        """Load CHAR(36) for all database types."""
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:  # noqa: ANN401
        """Convert UUID to string for database storage."""
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            return str(uuid.UUID(value))
        return str(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> Any:  # noqa: ANN401
        """Convert string back to UUID from database."""
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            return uuid.UUID(value)
        return value


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persist enum members by value (``"bad_weather"``) rather than by name."""
    return [member.value for member in enum_cls]


def utc_now() -> datetime:
    """Timezone-aware current time used for audit timestamps."""
    return datetime.now(UTC)
