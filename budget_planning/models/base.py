"""
Base models and mixins for SQLAlchemy ORM.

Provides the declarative base, a timestamp mixin, and common
utilities for all database models.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import declarative_base


# SQLAlchemy declarative base for all ORM models
Base = declarative_base()

# Upper bound of the Integer columns (signed 32-bit on PostgreSQL)
MAX_INTEGER = 2_147_483_647


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamp columns.

    Attributes:
        created_at: Timestamp when record was created (immutable)
        updated_at: Timestamp when record was last updated (auto-updated)
    """

    created_at = Column(
        DateTime,
        nullable=False,
        server_default=func.current_timestamp(),
        doc="UTC timestamp when record was created"
    )

    updated_at = Column(
        DateTime,
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=lambda: utc_now(),
        doc="UTC timestamp when record was last updated"
    )


def utc_now() -> datetime:
    """
    Get current UTC time as a naive datetime.

    Returns:
        Naive datetime in UTC (the form stored in DateTime columns)
    """
    return datetime.utcnow()


class ModelMixin:
    """
    Mixin providing common model utilities.

    Adds helper methods for serialization and representation.
    """

    def to_dict(self) -> dict[str, Any]:
        """
        Convert model instance to dictionary.

        Returns:
            Dictionary with all column values

        Note:
            Only includes columns, not relationships.
        """
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        """
        String representation of model instance.

        Returns:
            String like "ModelName(id=1, email='...')"
        """
        attrs = ", ".join(
            f"{key}={repr(value)}"
            for key, value in self.to_dict().items()
            if key in ["id", "email", "balance", "operation"]  # Key identifying fields
        )
        return f"{self.__class__.__name__}({attrs})"
