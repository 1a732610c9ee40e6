"""ORM base class and mixins — all models inherit from Base."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import BigInteger, DateTime, Enum, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base — shared MetaData registry for all models."""

    pass


def pg_enum(enum_cls: type[StrEnum], name: str) -> Enum:
    """Column type bound to a PostgreSQL enum the initial migration creates.

    Returns a fresh instance per column: the same type name backs columns on
    several tables (``soil_texture`` on fields and crop_parameters,
    ``growth_stage`` on fields and gdd_records).
    """
    return Enum(enum_cls, name=name, create_constraint=False, native_enum=True)


class TimestampMixin:
    """created_at / updated_at audit columns."""

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


class UUIDPrimaryKeyMixin:
    """UUID primary key generated client-side, with a server default for raw inserts."""

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.uuid_generate_v4(),
    )


class TimeSeriesMixin:
    """BIGSERIAL PK + ingestion timestamp for append-only reading tables.

    The reading's own ``timestamp`` column is the record time; ``ingested_at``
    only tracks when the row reached the database.
    """

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )
    ingested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
