"""Domain enum types shared by the engine, the ORM models and the API schemas.

Each StrEnum maps 1:1 to a PostgreSQL CREATE TYPE ... AS ENUM.
"""

from enum import StrEnum

# ── Soil & crop ─────────────────────────────────────────────────────────────


class SoilTexture(StrEnum):
    """USDA-style soil texture classes supported by the calibration curves."""

    SANDY = "SANDY"
    SANDY_LOAM = "SANDY_LOAM"
    LOAM = "LOAM"
    CLAY_LOAM = "CLAY_LOAM"
    CLAY = "CLAY"


class Season(StrEnum):
    """Cropping season tag (Indian agronomic calendar)."""

    KHARIF = "KHARIF"
    RABI = "RABI"
    ZAID = "ZAID"
    PERENNIAL = "PERENNIAL"


class GrowthStage(StrEnum):
    """FAO-56 crop growth stages, declared in development order."""

    INITIAL = "INITIAL"
    DEVELOPMENT = "DEVELOPMENT"
    MID_SEASON = "MID_SEASON"
    LATE_SEASON = "LATE_SEASON"
    HARVEST_READY = "HARVEST_READY"

    @property
    def rank(self) -> int:
        return list(GrowthStage).index(self)


# ── Irrigation ──────────────────────────────────────────────────────────────


class IrrigationUrgency(StrEnum):
    NONE = "NONE"
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class IrrigationAction(StrEnum):
    irrigate_now = "irrigate_now"
    irrigate_soon = "irrigate_soon"
    do_not_irrigate = "do_not_irrigate"


class StressLevel(StrEnum):
    none = "none"
    mild = "mild"
    moderate = "moderate"
    severe = "severe"
