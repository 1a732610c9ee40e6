"""Soil sensor reading time series.

Rows are immutable once written: raw counts are kept alongside the
calibrated values so a corrected calibration curve can be replayed.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from fieldsense.models.base import Base, TimeSeriesMixin


class SoilReading(Base, TimeSeriesMixin):
    """Calibrated soil moisture + temperature sample from one node."""

    __tablename__ = "sensor_readings"
    __table_args__ = (
        Index("ix_sensor_readings_node_ts", "node_id", "timestamp"),
    )

    node_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("fields.node_id", ondelete="CASCADE"),
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    raw_moisture: Mapped[int] = mapped_column(Integer, nullable=False)
    raw_temperature: Mapped[int] = mapped_column(Integer, nullable=False)
    soil_moisture_vwc: Mapped[float | None] = mapped_column(Float, nullable=True)
    soil_temperature_c: Mapped[float | None] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<SoilReading id={self.id} node={self.node_id} "
            f"vwc={self.soil_moisture_vwc} ts={self.timestamp}>"
        )
