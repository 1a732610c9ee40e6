"""Value objects passed between the engine, its repositories and the services."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from fieldsense.models.enums import GrowthStage, Season, SoilTexture


@dataclass(frozen=True, slots=True)
class StageThresholds:
	"""Cumulative-GDD progress (% of total GDD) at which each stage ends."""

	initial_end: float
	development_end: float
	mid_season_end: float
	late_season_end: float

	def __post_init__(self) -> None:
		bounds = (self.initial_end, self.development_end, self.mid_season_end, self.late_season_end)
		if any(b <= a for a, b in zip(bounds, bounds[1:])) or not 0 < bounds[0] or bounds[-1] > 100:
			raise ValueError(f"stage thresholds must be strictly increasing within (0, 100]: {bounds}")


@dataclass(frozen=True, slots=True)
class CropParameters:
	name: str
	base_temperature: float
	total_gdd: float
	vwc_min: float
	vwc_optimal: float
	vwc_max: float
	root_depth_cm: float
	mad: float
	stages: StageThresholds
	preferred_textures: frozenset[SoilTexture]
	season: Season
	valid_for_region: bool = True
	kc_initial: float = 0.4
	kc_mid: float = 1.1
	kc_end: float = 0.6

	def stage_gdd(self, percent: float) -> float:
		return self.total_gdd * percent / 100.0


@dataclass(frozen=True, slots=True)
class FieldConfig:
	id: uuid.UUID
	node_id: int
	field_name: str
	soil_texture: SoilTexture
	latitude: float
	longitude: float
	crop_type: str | None = None
	crop_confirmed: bool = False
	sowing_date: date | None = None
	growth_stage: GrowthStage | None = None
	accumulated_gdd: float = 0.0
	last_gdd_update: date | None = None


@dataclass(frozen=True, slots=True)
class SensorReading:
	node_id: int
	raw_moisture: int
	raw_temperature: int
	soil_moisture_vwc: float | None
	soil_temperature_c: float | None
	timestamp: datetime
	id: int | None = None


@dataclass(frozen=True, slots=True)
class DailyTemperature:
	avg: float
	min: float
	max: float
	readings_count: int


@dataclass(frozen=True, slots=True)
class GDDRecord:
	field_id: uuid.UUID
	date: date
	avg_temperature: float
	min_temperature: float
	max_temperature: float
	readings_count: int
	daily_gdd: float
	cumulative_gdd: float
	crop_type: str
	base_temperature: float
	growth_stage: GrowthStage


# ── Weather ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ForecastDay:
	date: date
	temp_max: float
	temp_min: float
	temp_avg: float
	humidity: float
	precipitation_mm: float
	description: str

	def to_dict(self) -> dict[str, Any]:
		return {
			"date": self.date.isoformat(),
			"temp_max": self.temp_max,
			"temp_min": self.temp_min,
			"temp_avg": self.temp_avg,
			"humidity": self.humidity,
			"precipitation_mm": self.precipitation_mm,
			"description": self.description,
		}

	@classmethod
	def from_dict(cls, payload: dict[str, Any]) -> ForecastDay:
		return cls(
			date=date.fromisoformat(payload["date"]),
			temp_max=float(payload["temp_max"]),
			temp_min=float(payload["temp_min"]),
			temp_avg=float(payload["temp_avg"]),
			humidity=float(payload["humidity"]),
			precipitation_mm=float(payload["precipitation_mm"]),
			description=str(payload.get("description", "")),
		)


@dataclass(frozen=True, slots=True)
class WeatherForecast:
	latitude: float
	longitude: float
	fetched_at: datetime
	expires_at: datetime
	days: tuple[ForecastDay, ...] = field(default_factory=tuple)

	def to_dict(self) -> dict[str, Any]:
		return {
			"latitude": self.latitude,
			"longitude": self.longitude,
			"fetched_at": self.fetched_at.isoformat(),
			"expires_at": self.expires_at.isoformat(),
			"days": [day.to_dict() for day in self.days],
		}

	@classmethod
	def from_dict(cls, payload: dict[str, Any]) -> WeatherForecast:
		return cls(
			latitude=float(payload["latitude"]),
			longitude=float(payload["longitude"]),
			fetched_at=datetime.fromisoformat(payload["fetched_at"]),
			expires_at=datetime.fromisoformat(payload["expires_at"]),
			days=tuple(ForecastDay.from_dict(day) for day in payload.get("days", [])),
		)
