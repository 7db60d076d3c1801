"""SQLAlchemy declarative base and common mixins.

This module provides the base class for all database models
along with the timestamp mixin shared by locations and properties.
"""

from datetime import datetime
from typing import Any, Iterable

from geoalchemy2 import Geography, Geometry
from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    def __repr__(self) -> str:
        pk_cols = [col.name for col in self.__table__.primary_key.columns]
        pk_values = ", ".join(f"{col}={getattr(self, col, None)}" for col in pk_cols)
        return f"<{self.__class__.__name__}({pk_values})>"

    def to_dict(self, exclude: Iterable[str] = ()) -> dict[str, Any]:
        """Convert model instance to a JSON-friendly dictionary.

        Spatial columns are skipped; callers expose coordinates as
        explicit ``lat``/``lng`` values instead of raw WKB.

        Args:
            exclude: Additional column names to leave out.

        Returns:
            Dictionary of column names to values.
        """
        skipped = set(exclude)
        return {
            col.name: getattr(self, col.name)
            for col in self.__table__.columns
            if col.name not in skipped and not isinstance(col.type, (Geography, Geometry))
        }


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
