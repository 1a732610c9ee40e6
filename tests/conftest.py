"""Shared pytest fixtures — in-memory repositories, fake forecast sources, async test client."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, date, datetime
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from fieldsense.agronomy.catalog import DEFAULT_CROP_CATALOG
from fieldsense.agronomy.types import (
	CropParameters,
	DailyTemperature,
	FieldConfig,
	GDDRecord,
	SensorReading,
	StageThresholds,
	WeatherForecast,
)
from fieldsense.config import Settings
from fieldsense.context import EngineContext, get_engine_context
from fieldsense.errors import ExternalServiceError, NotFoundError
from fieldsense.main import app
from fieldsense.models.enums import GrowthStage, Season, SoilTexture
from tests.factories import FakeRedis, forecast_entries


# ── In-memory repositories ──────────────────────────────────────────────────


class FakeGDDRepository:
	def __init__(self) -> None:
		self.records: dict[tuple[uuid.UUID, date], GDDRecord] = {}

	def _for_field(self, field_id: uuid.UUID) -> list[GDDRecord]:
		return sorted(
			(record for (owner, _), record in self.records.items() if owner == field_id),
			key=lambda record: record.date,
		)

	async def get_for_date(self, field_id: uuid.UUID, day: date) -> GDDRecord | None:
		return self.records.get((field_id, day))

	async def get_previous(self, field_id: uuid.UUID, day: date) -> GDDRecord | None:
		earlier = [record for record in self._for_field(field_id) if record.date < day]
		return earlier[-1] if earlier else None

	async def list_after(self, field_id: uuid.UUID, day: date) -> list[GDDRecord]:
		return [record for record in self._for_field(field_id) if record.date > day]

	async def upsert_many(self, records: Sequence[GDDRecord]) -> None:
		for record in records:
			self.records[(record.field_id, record.date)] = record

	async def history(self, field_id: uuid.UUID, start: date | None, end: date | None) -> list[GDDRecord]:
		return [
			record
			for record in self._for_field(field_id)
			if (start is None or record.date >= start) and (end is None or record.date <= end)
		]

	async def delete_range(self, field_id: uuid.UUID, start: date, end: date) -> int:
		doomed = [key for key in self.records if key[0] == field_id and start <= key[1] <= end]
		for key in doomed:
			del self.records[key]
		return len(doomed)

	def clear_field(self, field_id: uuid.UUID) -> None:
		for key in [key for key in self.records if key[0] == field_id]:
			del self.records[key]


class FakeFieldRepository:
	def __init__(self, gdd: FakeGDDRepository) -> None:
		self.gdd = gdd
		self.fields: dict[int, FieldConfig] = {}

	async def get_by_node_id(self, node_id: int) -> FieldConfig | None:
		return self.fields.get(node_id)

	async def list_fields(self) -> list[FieldConfig]:
		return [self.fields[node_id] for node_id in sorted(self.fields)]

	async def create(
		self,
		node_id: int,
		field_name: str,
		soil_texture: SoilTexture,
		latitude: float,
		longitude: float,
	) -> FieldConfig:
		created = FieldConfig(
			id=uuid.uuid4(),
			node_id=node_id,
			field_name=field_name,
			soil_texture=soil_texture,
			latitude=latitude,
			longitude=longitude,
		)
		self.fields[node_id] = created
		return created

	def _require(self, node_id: int) -> FieldConfig:
		if node_id not in self.fields:
			raise NotFoundError("Field", f"nodeId={node_id}")
		return self.fields[node_id]

	async def update(self, node_id: int, changes: dict[str, Any]) -> FieldConfig:
		self.fields[node_id] = replace(self._require(node_id), **changes)
		return self.fields[node_id]

	async def set_crop_cycle(
		self,
		node_id: int,
		crop_type: str,
		sowing_date: date,
		base_temperature: float,
	) -> FieldConfig:
		current = self._require(node_id)
		self.gdd.clear_field(current.id)
		self.fields[node_id] = replace(
			current,
			crop_type=crop_type,
			crop_confirmed=True,
			sowing_date=sowing_date,
			growth_stage=GrowthStage.INITIAL,
			accumulated_gdd=0.0,
			last_gdd_update=None,
		)
		return self.fields[node_id]

	async def update_gdd_state(
		self,
		field_id: uuid.UUID,
		accumulated_gdd: float,
		growth_stage: GrowthStage,
		last_update: date | None,
	) -> None:
		for node_id, field_config in self.fields.items():
			if field_config.id == field_id:
				self.fields[node_id] = replace(
					field_config,
					accumulated_gdd=accumulated_gdd,
					growth_stage=growth_stage,
					last_gdd_update=last_update,
				)


class FakeSensorReadingRepository:
	def __init__(self) -> None:
		self.readings: list[SensorReading] = []

	def add(
		self,
		node_id: int,
		vwc: float | None,
		temperature: float | None = 22.0,
		timestamp: datetime | None = None,
	) -> SensorReading:
		reading = SensorReading(
			id=len(self.readings) + 1,
			node_id=node_id,
			raw_moisture=0,
			raw_temperature=int(round((temperature or 0.0) * 10)),
			soil_moisture_vwc=vwc,
			soil_temperature_c=temperature,
			timestamp=timestamp or datetime.now(UTC),
		)
		self.readings.append(reading)
		return reading

	def _for_node(self, node_id: int) -> list[SensorReading]:
		return sorted(
			(reading for reading in self.readings if reading.node_id == node_id),
			key=lambda reading: reading.timestamp,
			reverse=True,
		)

	async def get_latest(self, node_id: int) -> SensorReading | None:
		readings = self._for_node(node_id)
		return readings[0] if readings else None

	async def create(self, reading: SensorReading) -> SensorReading:
		stored = replace(reading, id=len(self.readings) + 1)
		self.readings.append(stored)
		return stored

	async def list_recent(self, node_id: int, limit: int) -> list[SensorReading]:
		return self._for_node(node_id)[:limit]

	async def get_average_temperature(self, node_id: int, since: datetime) -> float | None:
		temps = [
			reading.soil_temperature_c
			for reading in self._for_node(node_id)
			if reading.timestamp >= since and reading.soil_temperature_c is not None
		]
		return sum(temps) / len(temps) if temps else None

	async def get_daily_temperature(self, node_id: int, day: date) -> DailyTemperature | None:
		temps = [
			reading.soil_temperature_c
			for reading in self._for_node(node_id)
			if reading.timestamp.astimezone(UTC).date() == day and reading.soil_temperature_c is not None
		]
		if not temps:
			return None
		return DailyTemperature(
			avg=round(sum(temps) / len(temps), 2),
			min=round(min(temps), 2),
			max=round(max(temps), 2),
			readings_count=len(temps),
		)


class FakeCropCatalogRepository:
	def __init__(self, crops: Sequence[CropParameters]) -> None:
		self.crops = {crop.name: crop for crop in crops}

	def add(self, crop: CropParameters) -> None:
		self.crops[crop.name] = crop

	async def get(self, name: str) -> CropParameters | None:
		return self.crops.get(name)

	async def list_catalog(self, valid_for_region: bool | None = None) -> list[CropParameters]:
		return [
			crop
			for crop in self.crops.values()
			if valid_for_region is None or crop.valid_for_region is valid_for_region
		]


# ── Forecast sources ────────────────────────────────────────────────────────


class FakeForecastCache:
	def __init__(self) -> None:
		self.entries: dict[tuple[float, float], WeatherForecast] = {}
		self.fail = False
		self.writes = 0

	async def get(self, latitude: float, longitude: float) -> WeatherForecast | None:
		if self.fail:
			raise ExternalServiceError("redis", "connection refused")
		return self.entries.get((latitude, longitude))

	async def set(self, forecast: WeatherForecast, ttl_seconds: int) -> None:
		if self.fail:
			raise ExternalServiceError("redis", "connection refused")
		self.writes += 1
		self.entries[(forecast.latitude, forecast.longitude)] = forecast


class FakeForecastProvider:
	def __init__(self) -> None:
		self.entries: list[dict[str, Any]] = forecast_entries(datetime.now(UTC))
		self.error: Exception | None = None
		self.calls = 0

	async def fetch(self, latitude: float, longitude: float) -> list[dict[str, Any]]:
		self.calls += 1
		if self.error is not None:
			raise self.error
		return self.entries


# ── Fixtures ────────────────────────────────────────────────────────────────


@pytest.fixture
def settings() -> Settings:
	return Settings(_env_file=None, openweather_api_key="test-key")


@pytest.fixture
def band_crop() -> CropParameters:
	"""Crop with a 25/30/35 moisture band, 40 cm roots and 50 % MAD."""
	return CropParameters(
		name="testcrop",
		base_temperature=10.0,
		total_gdd=1000.0,
		vwc_min=25.0,
		vwc_optimal=30.0,
		vwc_max=35.0,
		root_depth_cm=40.0,
		mad=0.5,
		stages=StageThresholds(15.0, 35.0, 70.0, 95.0),
		preferred_textures=frozenset({SoilTexture.SANDY_LOAM, SoilTexture.LOAM}),
		season=Season.RABI,
		valid_for_region=False,
		kc_initial=0.4,
		kc_mid=1.1,
		kc_end=0.6,
	)


@pytest.fixture
def fake_redis() -> FakeRedis:
	return FakeRedis()


@pytest.fixture
def context(settings: Settings, band_crop: CropParameters) -> EngineContext:
	gdd = FakeGDDRepository()
	crops = FakeCropCatalogRepository(DEFAULT_CROP_CATALOG)
	crops.add(band_crop)
	return EngineContext(
		settings=settings,
		fields=FakeFieldRepository(gdd),
		readings=FakeSensorReadingRepository(),
		crops=crops,
		gdd=gdd,
		forecast_cache=FakeForecastCache(),
		forecast_provider=FakeForecastProvider(),
	)


@pytest.fixture
async def client(context: EngineContext) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled and the engine context replaced by fakes."""

	app.dependency_overrides[get_engine_context] = lambda: context
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()


@pytest.fixture
def now_utc() -> datetime:
	return datetime.now(UTC)
