"""Collaborator contracts consumed by the engine services."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, Protocol

from fieldsense.agronomy.types import (
	CropParameters,
	DailyTemperature,
	FieldConfig,
	GDDRecord,
	SensorReading,
	WeatherForecast,
)
from fieldsense.models.enums import GrowthStage, SoilTexture


class FieldRepository(Protocol):
	async def get_by_node_id(self, node_id: int) -> FieldConfig | None: ...

	async def list_fields(self) -> list[FieldConfig]: ...

	async def create(
		self,
		node_id: int,
		field_name: str,
		soil_texture: SoilTexture,
		latitude: float,
		longitude: float,
	) -> FieldConfig: ...

	async def update(self, node_id: int, changes: dict[str, Any]) -> FieldConfig: ...

	async def set_crop_cycle(
		self,
		node_id: int,
		crop_type: str,
		sowing_date: date,
		base_temperature: float,
	) -> FieldConfig: ...

	async def update_gdd_state(
		self,
		field_id: uuid.UUID,
		accumulated_gdd: float,
		growth_stage: GrowthStage,
		last_update: date | None,
	) -> None: ...


class SensorReadingRepository(Protocol):
	async def get_latest(self, node_id: int) -> SensorReading | None: ...

	async def create(self, reading: SensorReading) -> SensorReading: ...

	async def list_recent(self, node_id: int, limit: int) -> list[SensorReading]: ...

	async def get_average_temperature(self, node_id: int, since: datetime) -> float | None: ...

	async def get_daily_temperature(self, node_id: int, day: date) -> DailyTemperature | None: ...


class CropCatalogRepository(Protocol):
	async def get(self, name: str) -> CropParameters | None: ...

	async def list_catalog(self, valid_for_region: bool | None = None) -> list[CropParameters]: ...


class GDDRepository(Protocol):
	async def get_for_date(self, field_id: uuid.UUID, day: date) -> GDDRecord | None: ...

	async def get_previous(self, field_id: uuid.UUID, day: date) -> GDDRecord | None: ...

	async def list_after(self, field_id: uuid.UUID, day: date) -> list[GDDRecord]: ...

	async def upsert_many(self, records: Sequence[GDDRecord]) -> None: ...

	async def history(self, field_id: uuid.UUID, start: date | None, end: date | None) -> list[GDDRecord]: ...

	async def delete_range(self, field_id: uuid.UUID, start: date, end: date) -> int: ...


class ForecastCache(Protocol):
	async def get(self, latitude: float, longitude: float) -> WeatherForecast | None: ...

	async def set(self, forecast: WeatherForecast, ttl_seconds: int) -> None: ...


class ForecastProvider(Protocol):
	async def fetch(self, latitude: float, longitude: float) -> list[dict[str, Any]]:
		"""Raw 3-hourly forecast entries for the coordinates."""
		...
