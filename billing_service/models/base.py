"""Base Models and Mixins"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime


def utc_now() -> datetime:
    """Naive UTC; bill timestamps are stored as TIMESTAMP WITHOUT TIME ZONE."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """
    Mixin for created/updated timestamps.

    Provides:
    - created_at timestamp (indexed, list ordering key)
    - updated_at timestamp, refreshed on every UPDATE
    """
    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)
