"""Daily growing-degree-day records, one per field per calendar date."""

from __future__ import annotations

import uuid
import datetime as dt

from sqlalchemy import Date, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from fieldsense.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from fieldsense.models.enums import GrowthStage


class GDDRecordRow(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Thermal time for one day; ``cumulative_gdd`` chains from the prior record."""

    __tablename__ = "gdd_records"
    __table_args__ = (
        UniqueConstraint("field_id", "date", name="uq_gdd_records_field_date"),
    )

    field_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("fields.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    avg_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    min_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    max_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    readings_count: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_gdd: Mapped[float] = mapped_column(Float, nullable=False)
    cumulative_gdd: Mapped[float] = mapped_column(Float, nullable=False)
    crop_type: Mapped[str] = mapped_column(String(100), nullable=False)
    base_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    growth_stage: Mapped[GrowthStage] = mapped_column(
        pg_enum(GrowthStage, "growth_stage"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<GDDRecordRow field={self.field_id} date={self.date} "
            f"cumulative={self.cumulative_gdd}>"
        )
