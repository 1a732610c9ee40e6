"""Raw sensor counts → engineering units."""

from __future__ import annotations

from fieldsense.agronomy.soil import RAW_COUNT_MAX, RAW_COUNT_MIN, get_soil_profile
from fieldsense.models.enums import SoilTexture


def to_vwc(raw_count: float, soil_texture: SoilTexture | str) -> float:
	"""Convert a raw capacitive moisture count to volumetric water content (%).

	The count is clamped to the ADC range before the texture's calibration
	curve is interpolated. Raises ``ValidationError`` for an unknown texture.
	"""
	curve = get_soil_profile(soil_texture).curve
	raw = min(max(float(raw_count), RAW_COUNT_MIN), RAW_COUNT_MAX)

	for (x0, y0), (x1, y1) in zip(curve, curve[1:]):
		if raw <= x1:
			vwc = y0 + (raw - x0) * (y1 - y0) / (x1 - x0)
			return round(vwc, 2)
	return round(curve[-1][1], 2)


def to_temperature(raw_temp_times_ten: float) -> float:
	"""Sensor firmware reports tenths of a degree Celsius."""
	return round(raw_temp_times_ten / 10.0, 2)
