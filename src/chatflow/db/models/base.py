"""SQLAlchemy declarative base for all models."""

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Current UTC time as a naive datetime.

    Timestamps are stored without timezone so that comparisons behave the
    same on PostgreSQL and SQLite.
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all database models.

    Includes:
    - AsyncAttrs for async attribute loading
    - DeclarativeBase for SQLAlchemy 2.0 declarative mapping
    """

    pass
