"""FAO-56 root-zone soil water balance."""

from __future__ import annotations

from dataclasses import dataclass

from fieldsense.agronomy.soil import get_soil_profile
from fieldsense.models.enums import SoilTexture, StressLevel


@dataclass(frozen=True, slots=True)
class WaterBalance:
	taw: float
	raw: float
	current_depth: float
	fc_depth: float
	depletion_percent: float
	field_capacity: float
	wilting_point: float
	saturation: float
	mad: float
	stress_level: StressLevel


def _depth_mm(vwc_percent: float, root_depth_cm: float) -> float:
	return vwc_percent / 100.0 * root_depth_cm * 10.0


def stress_level(current_vwc: float, depletion_percent: float, field_capacity: float, mad: float) -> StressLevel:
	threshold = mad * 100.0
	if current_vwc >= field_capacity or depletion_percent <= threshold:
		return StressLevel.none
	if depletion_percent <= threshold * 1.2:
		return StressLevel.mild
	if depletion_percent <= threshold * 1.5:
		return StressLevel.moderate
	return StressLevel.severe


def calculate_water_balance(
	soil_texture: SoilTexture | str,
	current_vwc: float,
	root_depth_cm: float,
	mad: float,
) -> WaterBalance:
	profile = get_soil_profile(soil_texture)

	taw = (profile.field_capacity - profile.wilting_point) / 100.0 * root_depth_cm * 10.0
	raw = taw * (1.0 - mad)
	current_depth = _depth_mm(current_vwc, root_depth_cm)
	fc_depth = _depth_mm(profile.field_capacity, root_depth_cm)
	depletion = max(0.0, (fc_depth - current_depth) / taw * 100.0) if taw > 0 else 0.0

	return WaterBalance(
		taw=round(taw, 1),
		raw=round(raw, 1),
		current_depth=round(current_depth, 1),
		fc_depth=round(fc_depth, 1),
		depletion_percent=round(depletion, 1),
		field_capacity=profile.field_capacity,
		wilting_point=profile.wilting_point,
		saturation=profile.saturation,
		mad=mad,
		stress_level=stress_level(current_vwc, depletion, profile.field_capacity, mad),
	)


def irrigation_depth_mm(
	current_vwc: float,
	target_vwc: float,
	root_depth_cm: float,
	min_depth_mm: float,
	max_depth_mm: float,
) -> float:
	"""Water needed to lift the root zone to ``target_vwc``, clamped to the emitter limits."""
	deficit_mm = _depth_mm(max(0.0, target_vwc - current_vwc), root_depth_cm)
	if deficit_mm <= 0:
		return 0.0
	return round(min(max(deficit_mm, min_depth_mm), max_depth_mm), 1)
