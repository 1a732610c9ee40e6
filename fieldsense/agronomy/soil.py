"""Per-texture soil water constants and capacitive-sensor calibration curves.

VWC thresholds are volumetric percentages. Calibration breakpoints pair a raw
10-bit ADC count with the VWC it reads at; the curve rises linearly from dry
soil to the wilting point, field capacity and saturation, then plateaus.
"""

from __future__ import annotations

from dataclasses import dataclass

from fieldsense.errors import ValidationError
from fieldsense.models.enums import SoilTexture

RAW_COUNT_MIN = 0
RAW_COUNT_MAX = 1023


@dataclass(frozen=True, slots=True)
class SoilProfile:
	field_capacity: float
	wilting_point: float
	saturation: float
	curve: tuple[tuple[int, float], ...]

	def __post_init__(self) -> None:
		if not 0 <= self.wilting_point < self.field_capacity < self.saturation <= 100:
			raise ValueError("soil constants must satisfy 0 <= WP < FC < SAT <= 100")
		raws = [raw for raw, _ in self.curve]
		vwcs = [vwc for _, vwc in self.curve]
		if raws != sorted(set(raws)) or vwcs != sorted(vwcs):
			raise ValueError("calibration breakpoints must be strictly increasing in raw count")


def _profile(fc: float, wp: float, sat: float, raw_wp: int, raw_fc: int, raw_sat: int) -> SoilProfile:
	return SoilProfile(
		field_capacity=fc,
		wilting_point=wp,
		saturation=sat,
		curve=(
			(RAW_COUNT_MIN, 0.0),
			(raw_wp, wp),
			(raw_fc, fc),
			(raw_sat, sat),
			(RAW_COUNT_MAX, sat),
		),
	)


SOIL_PROFILES: dict[SoilTexture, SoilProfile] = {
	SoilTexture.SANDY: _profile(30.0, 8.0, 40.0, 200, 600, 850),
	SoilTexture.SANDY_LOAM: _profile(42.0, 12.0, 48.0, 250, 680, 900),
	SoilTexture.LOAM: _profile(46.0, 14.0, 52.0, 280, 720, 920),
	SoilTexture.CLAY_LOAM: _profile(54.0, 20.0, 60.0, 350, 800, 950),
	SoilTexture.CLAY: _profile(58.0, 26.0, 64.0, 400, 850, 980),
}

_missing = set(SoilTexture) - SOIL_PROFILES.keys()
if _missing:
	raise RuntimeError(f"soil profiles missing for: {sorted(_missing)}")

# Ordered coarse → fine; neighbours count as a partial texture match.
TEXTURE_ORDER: tuple[SoilTexture, ...] = tuple(SoilTexture)


def parse_texture(value: object) -> SoilTexture:
	try:
		return SoilTexture(value)
	except ValueError as exc:
		raise ValidationError(f"Invalid soil texture: {value}") from exc


def get_soil_profile(texture: object) -> SoilProfile:
	return SOIL_PROFILES[parse_texture(texture)]


def adjacent_textures(texture: SoilTexture) -> set[SoilTexture]:
	index = TEXTURE_ORDER.index(texture)
	return {TEXTURE_ORDER[i] for i in (index - 1, index + 1) if 0 <= i < len(TEXTURE_ORDER)}
