"""Field configuration — one monitored plot per buried sensor node."""

from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Date, Float, Integer, String, false, text
from sqlalchemy.orm import Mapped, mapped_column

from fieldsense.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from fieldsense.models.enums import GrowthStage, SoilTexture


class FarmField(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A field and its active crop cycle.

    ``crop_type`` + ``sowing_date`` form the single active crop cycle;
    confirming a new crop resets ``accumulated_gdd`` and ``growth_stage``.
    """

    __tablename__ = "fields"

    node_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    field_name: Mapped[str] = mapped_column(String(255), nullable=False)
    soil_texture: Mapped[SoilTexture] = mapped_column(
        pg_enum(SoilTexture, "soil_texture"),
        nullable=False,
    )
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    # ── Crop cycle ───────────────────────────────────────────────────────
    crop_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    crop_confirmed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    sowing_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    base_temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    growth_stage: Mapped[GrowthStage | None] = mapped_column(
        pg_enum(GrowthStage, "growth_stage"),
        nullable=True,
    )
    accumulated_gdd: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default=text("0")
    )
    last_gdd_update: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<FarmField id={self.id} node={self.node_id} "
            f"crop={self.crop_type!r} stage={self.growth_stage}>"
        )
