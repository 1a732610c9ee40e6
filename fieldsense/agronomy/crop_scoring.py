"""Multi-criteria crop suitability scoring.

Five weighted components sum to a 0-100 score: soil moisture (30), thermal
fit (25), season (20), soil texture (15) and GDD feasibility (10). Ranking is
a stable sort so equal scores keep catalog order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from fieldsense.agronomy.soil import adjacent_textures, get_soil_profile
from fieldsense.agronomy.types import CropParameters
from fieldsense.models.enums import Season, SoilTexture

WEIGHTS: dict[str, float] = {
	"moisture": 30.0,
	"temperature": 25.0,
	"season": 20.0,
	"soil": 15.0,
	"gdd_feasibility": 10.0,
}
SUITABILITY_THRESHOLD = 60.0
GDD_PER_DAY_ESTIMATE = 15.0

# Thermal margin (°C above base temperature) breakpoints.
THERMAL_RAMP_END = 8.0
THERMAL_PLATEAU_END = 18.0
THERMAL_CUTOFF = 30.0

# (first month, last month) inclusive; RABI wraps the year end.
SEASON_MONTHS: dict[Season, tuple[int, int]] = {
	Season.KHARIF: (6, 10),
	Season.RABI: (11, 3),
	Season.ZAID: (4, 5),
}


@dataclass(frozen=True, slots=True)
class FieldConditions:
	vwc: float
	soil_texture: SoilTexture
	avg_temperature: float
	today: date
	accumulated_gdd: float = 0.0


@dataclass(frozen=True, slots=True)
class CropScore:
	crop_name: str
	score: float
	reason: str
	components: dict[str, float]
	suitable: bool


def _in_window(month: int, first: int, last: int) -> bool:
	if first <= last:
		return first <= month <= last
	return month >= first or month <= last


def season_for_date(day: date) -> Season:
	for season, (first, last) in SEASON_MONTHS.items():
		if _in_window(day.month, first, last):
			return season
	raise ValueError(f"no season covers month {day.month}")


def days_left_in_season(season: Season, day: date) -> int:
	if season == Season.PERENNIAL:
		return 365
	_, last_month = SEASON_MONTHS[season]
	end_year = day.year + 1 if last_month < day.month else day.year
	return (date(end_year, last_month + 1, 1) - day).days


# ── Components ──────────────────────────────────────────────────────────────


def score_moisture(vwc: float, crop: CropParameters, texture: SoilTexture) -> float:
	weight = WEIGHTS["moisture"]
	soil = get_soil_profile(texture)
	if vwc > soil.field_capacity:
		return weight * (1 - min((vwc - soil.field_capacity) / 10.0, 1.0)) * 0.2
	if vwc < soil.wilting_point:
		return 0.0
	if abs(vwc - crop.vwc_optimal) < 1.0:
		return weight
	if crop.vwc_min <= vwc <= crop.vwc_max:
		max_distance = max(crop.vwc_optimal - crop.vwc_min, crop.vwc_max - crop.vwc_optimal)
		normalized = abs(vwc - crop.vwc_optimal) / max_distance if max_distance > 0 else 0.0
		return max(weight * (1 - 0.4 * normalized), weight * 0.6)
	outside = crop.vwc_min - vwc if vwc < crop.vwc_min else vwc - crop.vwc_max
	return weight * (1 - min(outside / 10.0, 1.0)) * 0.3


def score_temperature(avg_temperature: float, crop: CropParameters) -> float:
	weight = WEIGHTS["temperature"]
	margin = avg_temperature - crop.base_temperature
	if margin <= 0 or margin >= THERMAL_CUTOFF:
		return 0.0
	if margin < THERMAL_RAMP_END:
		return weight * margin / THERMAL_RAMP_END
	if margin <= THERMAL_PLATEAU_END:
		return weight
	return weight * (THERMAL_CUTOFF - margin) / (THERMAL_CUTOFF - THERMAL_PLATEAU_END)


def score_season(current: Season, crop: CropParameters) -> float:
	if crop.season in (Season.PERENNIAL, current):
		return WEIGHTS["season"]
	return 0.0


def score_soil(texture: SoilTexture, crop: CropParameters) -> float:
	if texture in crop.preferred_textures:
		return WEIGHTS["soil"]
	if adjacent_textures(texture) & crop.preferred_textures:
		return WEIGHTS["soil"] * 0.5
	return 0.0


def score_gdd_feasibility(current: Season, conditions: FieldConditions, crop: CropParameters) -> float:
	weight = WEIGHTS["gdd_feasibility"]
	if crop.season not in (Season.PERENNIAL, current):
		return 0.0
	if conditions.accumulated_gdd > crop.total_gdd * 0.25:
		return weight * 0.2
	duration_days = crop.total_gdd / GDD_PER_DAY_ESTIMATE
	remaining = days_left_in_season(crop.season, conditions.today)
	if remaining < duration_days * 0.8:
		return 0.0
	if remaining < duration_days * 1.1:
		return weight * 0.6
	return weight


# ── Justification ───────────────────────────────────────────────────────────

_STRONG = {
	"moisture": "soil moisture close to the crop optimum",
	"temperature": "favourable soil temperature",
	"season": "in its sowing season",
	"soil": "preferred soil texture",
	"gdd_feasibility": "enough thermal time left in the season",
}
_WEAK = {
	"moisture": "soil moisture far from the crop range",
	"temperature": "soil temperature unsuitable",
	"season": "out of season",
	"soil": "soil texture not preferred",
	"gdd_feasibility": "season too short to reach maturity",
}


def _justify(components: dict[str, float]) -> str:
	ratios = {name: components[name] / WEIGHTS[name] for name in WEIGHTS}
	dominant = max(WEIGHTS, key=lambda name: ratios[name])
	weakest = min(WEIGHTS, key=lambda name: ratios[name])
	clauses = [f"dominant factor: {_STRONG[dominant]}"]
	if ratios[weakest] < 0.5:
		clauses.append(f"limited by {_WEAK[weakest]}")
	return "; ".join(clauses)


def score_crop(crop: CropParameters, conditions: FieldConditions) -> CropScore:
	season = season_for_date(conditions.today)
	components = {
		"moisture": score_moisture(conditions.vwc, crop, conditions.soil_texture),
		"temperature": score_temperature(conditions.avg_temperature, crop),
		"season": score_season(season, crop),
		"soil": score_soil(conditions.soil_texture, crop),
		"gdd_feasibility": score_gdd_feasibility(season, conditions, crop),
	}
	components = {name: round(value, 1) for name, value in components.items()}
	total = round(min(100.0, max(0.0, sum(components.values()))), 1)
	return CropScore(
		crop_name=crop.name,
		score=total,
		reason=_justify(components),
		components=components,
		suitable=total >= SUITABILITY_THRESHOLD,
	)


def rank_crops(catalog: Iterable[CropParameters], conditions: FieldConditions, top_n: int) -> list[CropScore]:
	scored = [score_crop(crop, conditions) for crop in catalog]
	scored.sort(key=lambda item: item.score, reverse=True)
	return scored[:top_n]
