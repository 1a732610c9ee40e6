"""ORM model registry — importing this module registers every table on Base.metadata.

Alembic ``env.py`` imports ``Base`` from here (not from ``base.py``) so that
autogenerate sees all tables.
"""

# ── Base & Mixins ───────────────────────────────────────────────────────────
from fieldsense.models.base import (
    Base,
    TimeSeriesMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)

# ── Crop reference ──────────────────────────────────────────────────────────
from fieldsense.models.crops import CropParameterRow

# ── Enums ───────────────────────────────────────────────────────────────────
from fieldsense.models.enums import (
    GrowthStage,
    IrrigationAction,
    IrrigationUrgency,
    Season,
    SoilTexture,
    StressLevel,
)

# ── Fields & thermal time ───────────────────────────────────────────────────
from fieldsense.models.field import FarmField
from fieldsense.models.gdd import GDDRecordRow

# ── Time-series sensor models ──────────────────────────────────────────────
from fieldsense.models.sensors import SoilReading

__all__ = [
    "Base",
    "CropParameterRow",
    "FarmField",
    "GDDRecordRow",
    "GrowthStage",
    "IrrigationAction",
    "IrrigationUrgency",
    "Season",
    "SoilReading",
    "SoilTexture",
    "StressLevel",
    "TimeSeriesMixin",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
]
