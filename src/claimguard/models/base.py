"""
SQLAlchemy Base Model
Source: https://docs.sqlalchemy.org/en/20/orm/declarative_styles.html
Verified: 2026-10-19
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, MetaData, Numeric, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Constraint names stay stable across PostgreSQL and SQLite
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Monetary columns are stored to the cent
MONEY = Numeric(12, 2)


class Base(DeclarativeBase):
    """
    Base class for all claim engine tables.

    ``Mapped[Decimal]`` columns map to MONEY, ``Mapped[UUID]`` to the
    portable Uuid type and ``Mapped[dict[str, Any]]`` to JSON unless a
    column gives its own type.
    Source: https://docs.sqlalchemy.org/en/20/orm/declarative_tables.html#customizing-the-type-map
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    type_annotation_map = {
        Decimal: MONEY,
        UUID: Uuid(as_uuid=True),
        dict[str, Any]: JSON,
    }


class TimeStampedModel:
    """Mixin for models with created_at and updated_at timestamps."""

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


class UUIDModel:
    """Mixin for tables keyed by a client-generated UUID (claim, item, rule and alert ids)."""

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
