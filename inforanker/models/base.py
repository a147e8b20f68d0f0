"""Base model mixins and utilities.

This module provides reusable mixins for common model patterns:
- UUIDMixin: UUID primary key
- TimestampMixin: created_at and updated_at fields
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from inforanker.core.database import Base


class UUIDMixin:
    """Mixin for UUID primary key."""

    @declared_attr
    @classmethod
    def id(cls) -> Mapped[uuid.UUID]:
        """UUID primary key.

        Returns:
            UUID column mapped to primary key
        """
        return mapped_column(
            primary_key=True,
            default=uuid.uuid4,
            index=True,
        )


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    @declared_attr
    @classmethod
    def created_at(cls) -> Mapped[datetime]:
        """Timestamp when record was created."""
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        )

    @declared_attr
    @classmethod
    def updated_at(cls) -> Mapped[datetime]:
        """Timestamp when record was last updated."""
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        )


__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
]
