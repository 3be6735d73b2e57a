"""
Column mixins shared by the maintainer tables.

Timestamps are stored as naive UTC; values carrying an offset are converted
before they reach a row.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_mixin


def utc_now() -> datetime:
    """Current time as naive UTC, the form every DateTime column holds."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@declarative_mixin
class TimestampMixin:
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


@declarative_mixin
class IdMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"
