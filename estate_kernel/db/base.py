"""
Module: estate_kernel.db.base
Responsibility: Declarative base classes for the SQLAlchemy ORM models.
    Provides the type annotation map for consistent column types and the
    TrackedBase mixin for audit timestamps.
Architecture position: Kernel > DB. Lowest-level import target for models.
    MUST NOT import from domain/, services/ or store/.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - datetime maps to DateTime(timezone=True).
        - int maps to BigInteger (entity ids are clock milliseconds).
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        int: BigInteger,
    }


class TrackedBase(Base):
    """
    Abstract base with audit timestamps.

    Guarantees:
        - created_at is set to server NOW() on INSERT and never changes.
        - updated_at auto-updates on every UPDATE.
    """

    __abstract__ = True

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
