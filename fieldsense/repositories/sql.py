"""SQLAlchemy-backed repositories.

Each call opens its own session from the shared ``async_sessionmaker`` and
commits before returning. Driver and ORM failures surface as
``DatabaseError``; nothing is retried here.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fieldsense.agronomy.types import (
	CropParameters,
	DailyTemperature,
	FieldConfig,
	GDDRecord,
	SensorReading,
	StageThresholds,
)
from fieldsense.errors import DatabaseError, NotFoundError
from fieldsense.models.crops import CropParameterRow
from fieldsense.models.enums import GrowthStage, SoilTexture
from fieldsense.models.field import FarmField
from fieldsense.models.gdd import GDDRecordRow
from fieldsense.models.sensors import SoilReading


class _SQLRepository:
	def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
		self.session_factory = session_factory

	@asynccontextmanager
	async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
		try:
			async with self.session_factory() as session:
				yield session
		except SQLAlchemyError as exc:
			raise DatabaseError(operation, str(exc)) from exc


# ── Row mappers ─────────────────────────────────────────────────────────────


def _to_field(row: FarmField) -> FieldConfig:
	return FieldConfig(
		id=row.id,
		node_id=row.node_id,
		field_name=row.field_name,
		soil_texture=row.soil_texture,
		latitude=row.latitude,
		longitude=row.longitude,
		crop_type=row.crop_type,
		crop_confirmed=row.crop_confirmed,
		sowing_date=row.sowing_date,
		growth_stage=row.growth_stage,
		accumulated_gdd=row.accumulated_gdd,
		last_gdd_update=row.last_gdd_update,
	)


def _to_reading(row: SoilReading) -> SensorReading:
	return SensorReading(
		id=row.id,
		node_id=row.node_id,
		raw_moisture=row.raw_moisture,
		raw_temperature=row.raw_temperature,
		soil_moisture_vwc=row.soil_moisture_vwc,
		soil_temperature_c=row.soil_temperature_c,
		timestamp=row.timestamp,
	)


def _to_crop(row: CropParameterRow) -> CropParameters:
	return CropParameters(
		name=row.crop_name,
		base_temperature=row.base_temperature,
		total_gdd=row.total_gdd,
		vwc_min=row.vwc_min,
		vwc_optimal=row.vwc_optimal,
		vwc_max=row.vwc_max,
		root_depth_cm=row.root_depth_cm,
		mad=row.mad,
		stages=StageThresholds(
			initial_end=row.initial_stage_end,
			development_end=row.development_stage_end,
			mid_season_end=row.mid_season_end,
			late_season_end=row.late_season_end,
		),
		preferred_textures=frozenset(SoilTexture(value) for value in row.preferred_soils),
		season=row.season,
		valid_for_region=row.valid_for_region,
		kc_initial=row.kc_initial,
		kc_mid=row.kc_mid,
		kc_end=row.kc_end,
	)


def crop_row_values(crop: CropParameters, position: int) -> dict[str, Any]:
	return {
		"crop_name": crop.name,
		"position": position,
		"base_temperature": crop.base_temperature,
		"total_gdd": crop.total_gdd,
		"vwc_min": crop.vwc_min,
		"vwc_optimal": crop.vwc_optimal,
		"vwc_max": crop.vwc_max,
		"root_depth_cm": crop.root_depth_cm,
		"mad": crop.mad,
		"initial_stage_end": crop.stages.initial_end,
		"development_stage_end": crop.stages.development_end,
		"mid_season_end": crop.stages.mid_season_end,
		"late_season_end": crop.stages.late_season_end,
		"kc_initial": crop.kc_initial,
		"kc_mid": crop.kc_mid,
		"kc_end": crop.kc_end,
		"preferred_soils": sorted(crop.preferred_textures, key=list(SoilTexture).index),
		"season": crop.season,
		"valid_for_region": crop.valid_for_region,
	}


def _to_gdd(row: GDDRecordRow) -> GDDRecord:
	return GDDRecord(
		field_id=row.field_id,
		date=row.date,
		avg_temperature=row.avg_temperature,
		min_temperature=row.min_temperature,
		max_temperature=row.max_temperature,
		readings_count=row.readings_count,
		daily_gdd=row.daily_gdd,
		cumulative_gdd=row.cumulative_gdd,
		crop_type=row.crop_type,
		base_temperature=row.base_temperature,
		growth_stage=row.growth_stage,
	)


# ── Fields ──────────────────────────────────────────────────────────────────


class SQLFieldRepository(_SQLRepository):
	async def _require(self, session: AsyncSession, node_id: int) -> FarmField:
		row = await session.execute(select(FarmField).where(FarmField.node_id == node_id))
		field = row.scalar_one_or_none()
		if field is None:
			raise NotFoundError("Field", f"nodeId={node_id}")
		return field

	async def get_by_node_id(self, node_id: int) -> FieldConfig | None:
		async with self._session("get_field") as session:
			row = await session.execute(select(FarmField).where(FarmField.node_id == node_id))
			field = row.scalar_one_or_none()
			return _to_field(field) if field is not None else None

	async def list_fields(self) -> list[FieldConfig]:
		async with self._session("list_fields") as session:
			rows = await session.execute(select(FarmField).order_by(FarmField.node_id))
			return [_to_field(field) for field in rows.scalars().all()]

	async def create(
		self,
		node_id: int,
		field_name: str,
		soil_texture: SoilTexture,
		latitude: float,
		longitude: float,
	) -> FieldConfig:
		async with self._session("create_field") as session:
			field = FarmField(
				node_id=node_id,
				field_name=field_name,
				soil_texture=soil_texture,
				latitude=latitude,
				longitude=longitude,
			)
			session.add(field)
			await session.commit()
			await session.refresh(field)
			return _to_field(field)

	async def update(self, node_id: int, changes: dict[str, Any]) -> FieldConfig:
		async with self._session("update_field") as session:
			field = await self._require(session, node_id)
			for key, value in changes.items():
				setattr(field, key, value)
			await session.commit()
			await session.refresh(field)
			return _to_field(field)

	async def set_crop_cycle(
		self,
		node_id: int,
		crop_type: str,
		sowing_date: date,
		base_temperature: float,
	) -> FieldConfig:
		async with self._session("set_crop_cycle") as session:
			field = await self._require(session, node_id)
			field.crop_type = crop_type
			field.crop_confirmed = True
			field.sowing_date = sowing_date
			field.base_temperature = base_temperature
			field.growth_stage = GrowthStage.INITIAL
			field.accumulated_gdd = 0.0
			field.last_gdd_update = None
			await session.execute(delete(GDDRecordRow).where(GDDRecordRow.field_id == field.id))
			await session.commit()
			await session.refresh(field)
			return _to_field(field)

	async def update_gdd_state(
		self,
		field_id: uuid.UUID,
		accumulated_gdd: float,
		growth_stage: GrowthStage,
		last_update: date | None,
	) -> None:
		async with self._session("update_gdd_state") as session:
			await session.execute(
				update(FarmField)
				.where(FarmField.id == field_id)
				.values(
					accumulated_gdd=accumulated_gdd,
					growth_stage=growth_stage,
					last_gdd_update=last_update,
				)
			)
			await session.commit()


# ── Sensor readings ─────────────────────────────────────────────────────────


class SQLSensorReadingRepository(_SQLRepository):
	async def get_latest(self, node_id: int) -> SensorReading | None:
		async with self._session("get_latest_reading") as session:
			row = await session.execute(
				select(SoilReading)
				.where(SoilReading.node_id == node_id)
				.order_by(SoilReading.timestamp.desc())
				.limit(1)
			)
			reading = row.scalar_one_or_none()
			return _to_reading(reading) if reading is not None else None

	async def create(self, reading: SensorReading) -> SensorReading:
		async with self._session("create_reading") as session:
			row = SoilReading(
				node_id=reading.node_id,
				timestamp=reading.timestamp,
				raw_moisture=reading.raw_moisture,
				raw_temperature=reading.raw_temperature,
				soil_moisture_vwc=reading.soil_moisture_vwc,
				soil_temperature_c=reading.soil_temperature_c,
			)
			session.add(row)
			await session.commit()
			await session.refresh(row)
			return _to_reading(row)

	async def list_recent(self, node_id: int, limit: int) -> list[SensorReading]:
		async with self._session("list_readings") as session:
			rows = await session.execute(
				select(SoilReading)
				.where(SoilReading.node_id == node_id)
				.order_by(SoilReading.timestamp.desc())
				.limit(limit)
			)
			return [_to_reading(reading) for reading in rows.scalars().all()]

	async def get_average_temperature(self, node_id: int, since: datetime) -> float | None:
		async with self._session("average_temperature") as session:
			row = await session.execute(
				select(func.avg(SoilReading.soil_temperature_c)).where(
					SoilReading.node_id == node_id,
					SoilReading.timestamp >= since,
					SoilReading.soil_temperature_c.is_not(None),
				)
			)
			value = row.scalar_one_or_none()
			return float(value) if value is not None else None

	async def get_daily_temperature(self, node_id: int, day: date) -> DailyTemperature | None:
		start = datetime.combine(day, time.min, tzinfo=UTC)
		async with self._session("daily_temperature") as session:
			row = await session.execute(
				select(
					func.avg(SoilReading.soil_temperature_c),
					func.min(SoilReading.soil_temperature_c),
					func.max(SoilReading.soil_temperature_c),
					func.count(SoilReading.soil_temperature_c),
				).where(
					SoilReading.node_id == node_id,
					SoilReading.timestamp >= start,
					SoilReading.timestamp < start + timedelta(days=1),
					SoilReading.soil_temperature_c.is_not(None),
				)
			)
			avg, low, high, count = row.one()
			if not count:
				return None
			return DailyTemperature(
				avg=round(float(avg), 2),
				min=round(float(low), 2),
				max=round(float(high), 2),
				readings_count=int(count),
			)


# ── Crop catalog ────────────────────────────────────────────────────────────


class SQLCropCatalogRepository(_SQLRepository):
	async def get(self, name: str) -> CropParameters | None:
		async with self._session("get_crop") as session:
			row = await session.execute(select(CropParameterRow).where(CropParameterRow.crop_name == name))
			crop = row.scalar_one_or_none()
			return _to_crop(crop) if crop is not None else None

	async def list_catalog(self, valid_for_region: bool | None = None) -> list[CropParameters]:
		stmt = select(CropParameterRow).order_by(CropParameterRow.position)
		if valid_for_region is not None:
			stmt = stmt.where(CropParameterRow.valid_for_region.is_(valid_for_region))
		async with self._session("list_catalog") as session:
			rows = await session.execute(stmt)
			return [_to_crop(crop) for crop in rows.scalars().all()]

	async def upsert_many(self, crops: Sequence[CropParameters]) -> int:
		values = [crop_row_values(crop, position) for position, crop in enumerate(crops)]
		if not values:
			return 0
		stmt = insert(CropParameterRow).values(values)
		stmt = stmt.on_conflict_do_update(
			index_elements=[CropParameterRow.crop_name],
			set_={key: stmt.excluded[key] for key in values[0] if key != "crop_name"},
		)
		async with self._session("upsert_catalog") as session:
			await session.execute(stmt)
			await session.commit()
		return len(values)


# ── GDD records ─────────────────────────────────────────────────────────────


class SQLGDDRepository(_SQLRepository):
	async def get_for_date(self, field_id: uuid.UUID, day: date) -> GDDRecord | None:
		async with self._session("get_gdd_record") as session:
			row = await session.execute(
				select(GDDRecordRow).where(GDDRecordRow.field_id == field_id, GDDRecordRow.date == day)
			)
			record = row.scalar_one_or_none()
			return _to_gdd(record) if record is not None else None

	async def get_previous(self, field_id: uuid.UUID, day: date) -> GDDRecord | None:
		async with self._session("get_previous_gdd_record") as session:
			row = await session.execute(
				select(GDDRecordRow)
				.where(GDDRecordRow.field_id == field_id, GDDRecordRow.date < day)
				.order_by(GDDRecordRow.date.desc())
				.limit(1)
			)
			record = row.scalar_one_or_none()
			return _to_gdd(record) if record is not None else None

	async def list_after(self, field_id: uuid.UUID, day: date) -> list[GDDRecord]:
		async with self._session("list_gdd_after") as session:
			rows = await session.execute(
				select(GDDRecordRow)
				.where(GDDRecordRow.field_id == field_id, GDDRecordRow.date > day)
				.order_by(GDDRecordRow.date)
			)
			return [_to_gdd(record) for record in rows.scalars().all()]

	async def upsert_many(self, records: Sequence[GDDRecord]) -> None:
		if not records:
			return
		values = [
			{
				"field_id": record.field_id,
				"date": record.date,
				"avg_temperature": record.avg_temperature,
				"min_temperature": record.min_temperature,
				"max_temperature": record.max_temperature,
				"readings_count": record.readings_count,
				"daily_gdd": record.daily_gdd,
				"cumulative_gdd": record.cumulative_gdd,
				"crop_type": record.crop_type,
				"base_temperature": record.base_temperature,
				"growth_stage": record.growth_stage,
			}
			for record in records
		]
		stmt = insert(GDDRecordRow).values(values)
		stmt = stmt.on_conflict_do_update(
			constraint="uq_gdd_records_field_date",
			set_={
				key: stmt.excluded[key]
				for key in values[0]
				if key not in ("field_id", "date")
			}
			| {"updated_at": func.now()},
		)
		async with self._session("upsert_gdd_records") as session:
			await session.execute(stmt)
			await session.commit()

	async def history(self, field_id: uuid.UUID, start: date | None, end: date | None) -> list[GDDRecord]:
		stmt = select(GDDRecordRow).where(GDDRecordRow.field_id == field_id)
		if start is not None:
			stmt = stmt.where(GDDRecordRow.date >= start)
		if end is not None:
			stmt = stmt.where(GDDRecordRow.date <= end)
		async with self._session("gdd_history") as session:
			rows = await session.execute(stmt.order_by(GDDRecordRow.date))
			return [_to_gdd(record) for record in rows.scalars().all()]

	async def delete_range(self, field_id: uuid.UUID, start: date, end: date) -> int:
		async with self._session("delete_gdd_range") as session:
			result = await session.execute(
				delete(GDDRecordRow).where(
					GDDRecordRow.field_id == field_id,
					GDDRecordRow.date >= start,
					GDDRecordRow.date <= end,
				)
			)
			await session.commit()
			return int(result.rowcount or 0)
