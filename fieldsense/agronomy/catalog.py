"""Default crop catalog (Uttar Pradesh agro-climatic zone).

Thermal and moisture figures follow regional agronomy references; root depth,
MAD and Kc values follow FAO-56 tables 12 and 22. Perennials and jute are
carried for completeness but flagged invalid for the operating region.
"""

from __future__ import annotations

from fieldsense.agronomy.types import CropParameters, StageThresholds
from fieldsense.models.enums import Season, SoilTexture

S, SL, L, CL, C = (
	SoilTexture.SANDY,
	SoilTexture.SANDY_LOAM,
	SoilTexture.LOAM,
	SoilTexture.CLAY_LOAM,
	SoilTexture.CLAY,
)


def _crop(
	name: str,
	base: float,
	total: float,
	vwc: tuple[float, float, float],
	root_cm: float,
	mad: float,
	season: Season,
	soils: tuple[SoilTexture, ...],
	stages: tuple[float, float, float, float],
	kc: tuple[float, float, float],
	valid: bool = True,
) -> CropParameters:
	return CropParameters(
		name=name,
		base_temperature=base,
		total_gdd=total,
		vwc_min=vwc[0],
		vwc_optimal=vwc[1],
		vwc_max=vwc[2],
		root_depth_cm=root_cm,
		mad=mad,
		stages=StageThresholds(*stages),
		preferred_textures=frozenset(soils),
		season=season,
		valid_for_region=valid,
		kc_initial=kc[0],
		kc_mid=kc[1],
		kc_end=kc[2],
	)


_PERENNIAL_STAGES = (15.0, 40.0, 75.0, 95.0)

DEFAULT_CROP_CATALOG: tuple[CropParameters, ...] = (
	# ── Rabi ─────────────────────────────────────────────────────────────
	_crop("chickpea", 10, 1500, (15, 25, 35), 60, 0.5, Season.RABI, (L, CL, SL), (15, 35, 70, 95), (0.4, 1.0, 0.35)),
	_crop("lentil", 5, 1300, (14, 23, 33), 60, 0.5, Season.RABI, (L, SL), (15, 35, 65, 90), (0.4, 1.1, 0.3)),
	# ── Kharif ───────────────────────────────────────────────────────────
	_crop("rice", 10, 2000, (30, 40, 50), 30, 0.2, Season.KHARIF, (CL, C, L), (12, 30, 65, 90), (1.05, 1.2, 0.9)),
	_crop("maize", 10, 1600, (18, 28, 38), 60, 0.55, Season.KHARIF, (L, SL, CL), (10, 30, 65, 90), (0.3, 1.2, 0.6)),
	_crop("cotton", 12, 2300, (16, 26, 36), 90, 0.65, Season.KHARIF, (L, CL, SL), (12, 35, 70, 92), (0.35, 1.15, 0.7)),
	_crop("pigeonpeas", 10, 2200, (14, 24, 34), 90, 0.55, Season.KHARIF, (L, SL, CL), (15, 35, 70, 92), (0.4, 1.15, 0.35)),
	_crop("mothbeans", 10, 1100, (12, 20, 30), 60, 0.55, Season.KHARIF, (S, SL, L), (15, 35, 65, 90), (0.35, 1.0, 0.35)),
	_crop("mungbean", 10, 1000, (15, 24, 34), 50, 0.45, Season.KHARIF, (L, SL), (15, 30, 60, 85), (0.4, 1.05, 0.35)),
	_crop("blackgram", 10, 1050, (16, 25, 35), 50, 0.45, Season.KHARIF, (L, CL), (15, 30, 60, 85), (0.4, 1.05, 0.35)),
	_crop("kidneybeans", 10, 1200, (18, 27, 37), 60, 0.45, Season.KHARIF, (L, SL), (15, 35, 65, 90), (0.4, 1.15, 0.35)),
	# ── Zaid ─────────────────────────────────────────────────────────────
	_crop("watermelon", 12, 1800, (20, 30, 40), 80, 0.4, Season.ZAID, (SL, L, S), (10, 25, 60, 85), (0.4, 1.0, 0.75)),
	_crop("muskmelon", 12, 1600, (18, 28, 38), 80, 0.4, Season.ZAID, (SL, L), (10, 25, 60, 85), (0.5, 0.85, 0.6)),
	# ── Outside the operating region ─────────────────────────────────────
	_crop("jute", 12, 2200, (35, 45, 55), 60, 0.5, Season.KHARIF, (CL, L), (15, 35, 70, 92), (0.4, 1.1, 0.6), valid=False),
	_crop("pomegranate", 12, 2400, (20, 30, 40), 100, 0.5, Season.PERENNIAL, (SL, L), _PERENNIAL_STAGES, (0.4, 0.9, 0.6), valid=False),
	_crop("banana", 14, 2800, (35, 45, 55), 60, 0.35, Season.PERENNIAL, (L, CL), _PERENNIAL_STAGES, (0.5, 1.1, 1.0), valid=False),
	_crop("mango", 15, 3200, (25, 35, 45), 150, 0.5, Season.PERENNIAL, (L, SL), _PERENNIAL_STAGES, (0.5, 0.9, 0.7), valid=False),
	_crop("grapes", 10, 2200, (18, 28, 38), 100, 0.45, Season.PERENNIAL, (SL, L), _PERENNIAL_STAGES, (0.3, 0.85, 0.45), valid=False),
	_crop("apple", 5, 2000, (22, 32, 42), 100, 0.5, Season.PERENNIAL, (L, SL), _PERENNIAL_STAGES, (0.6, 0.95, 0.75), valid=False),
	_crop("orange", 13, 2600, (20, 30, 40), 110, 0.5, Season.PERENNIAL, (SL, L), _PERENNIAL_STAGES, (0.7, 0.65, 0.7), valid=False),
	_crop("papaya", 15, 2600, (30, 40, 50), 70, 0.4, Season.PERENNIAL, (SL, L), _PERENNIAL_STAGES, (0.6, 1.0, 0.8), valid=False),
	_crop("coconut", 15, 3000, (32, 42, 52), 100, 0.5, Season.PERENNIAL, (S, SL), _PERENNIAL_STAGES, (0.95, 1.0, 1.0), valid=False),
)
