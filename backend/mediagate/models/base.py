"""
Shared model building blocks.

Provides:
- UTCDateTime: timezone-aware DateTime that always round-trips as UTC
- TimestampMixin: created_at / updated_at columns
- generate_uuid: default factory for string primary keys
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, TypeDecorator


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime column that stores UTC and returns timezone-aware values.

    Backends without native timezone support (SQLite) hand back naive
    datetimes; those are re-tagged as UTC on load so comparisons against
    ``datetime.now(timezone.utc)`` never mix naive and aware values.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class TimestampMixin:
    """Adds created_at / updated_at audit columns."""

    created_at = Column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
        comment="Row creation time (UTC)",
    )
    updated_at = Column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        comment="Last modification time (UTC)",
    )
