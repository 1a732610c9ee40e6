"""Crop parameter catalog — agronomic reference table used by every engine path."""

from __future__ import annotations

from sqlalchemy import Boolean, Float, Integer, String, true
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from fieldsense.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from fieldsense.models.enums import Season, SoilTexture


class CropParameterRow(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One catalog crop: thermal needs, moisture band, FAO-56 coefficients.

    Stage thresholds are cumulative GDD progress expressed as a percentage
    of ``total_gdd``.  ``position`` fixes catalog order for ranking ties.
    """

    __tablename__ = "crop_parameters"

    crop_name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    base_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    total_gdd: Mapped[float] = mapped_column(Float, nullable=False)
    vwc_min: Mapped[float] = mapped_column(Float, nullable=False)
    vwc_optimal: Mapped[float] = mapped_column(Float, nullable=False)
    vwc_max: Mapped[float] = mapped_column(Float, nullable=False)
    root_depth_cm: Mapped[float] = mapped_column(Float, nullable=False)
    mad: Mapped[float] = mapped_column(Float, nullable=False)

    # ── Stage thresholds (% of total GDD) ────────────────────────────────
    initial_stage_end: Mapped[float] = mapped_column(Float, nullable=False)
    development_stage_end: Mapped[float] = mapped_column(Float, nullable=False)
    mid_season_end: Mapped[float] = mapped_column(Float, nullable=False)
    late_season_end: Mapped[float] = mapped_column(Float, nullable=False)

    # ── FAO-56 crop coefficients ─────────────────────────────────────────
    kc_initial: Mapped[float] = mapped_column(Float, nullable=False)
    kc_mid: Mapped[float] = mapped_column(Float, nullable=False)
    kc_end: Mapped[float] = mapped_column(Float, nullable=False)

    preferred_soils: Mapped[list[SoilTexture]] = mapped_column(
        ARRAY(pg_enum(SoilTexture, "soil_texture")),
        nullable=False,
    )
    season: Mapped[Season] = mapped_column(
        pg_enum(Season, "season"),
        nullable=False,
    )
    valid_for_region: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    def __repr__(self) -> str:
        return f"<CropParameterRow name={self.crop_name!r} season={self.season}>"
