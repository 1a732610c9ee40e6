"""GDD accumulation per field: daily upserts, status, range recomputation, backfill."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, timedelta

import structlog

from fieldsense.agronomy.gdd import (
	build_record,
	estimated_days_to_harvest,
	growth_stage_for_progress,
	progress_percent,
	rechain,
)
from fieldsense.agronomy.types import CropParameters, DailyTemperature, FieldConfig, GDDRecord
from fieldsense.context import EngineContext
from fieldsense.errors import FieldSenseError, NotFoundError, ValidationError
from fieldsense.models.enums import GrowthStage

logger = structlog.get_logger("fieldsense.gdd")


@dataclass(frozen=True, slots=True)
class GDDStatus:
	node_id: int
	crop_type: str
	sowing_date: date
	accumulated_gdd: float
	total_gdd_required: float
	progress_percent: float
	growth_stage: GrowthStage
	days_from_sowing: int
	estimated_days_to_harvest: int | None
	last_update: date | None


class GDDService:
	def __init__(self, context: EngineContext):
		self.context = context

	async def _crop_cycle(self, node_id: int) -> tuple[FieldConfig, CropParameters]:
		field_config = await self.context.fields.get_by_node_id(node_id)
		if field_config is None:
			raise NotFoundError("Field", f"nodeId={node_id}")
		if not field_config.crop_confirmed or not field_config.crop_type or field_config.sowing_date is None:
			raise ValidationError("Field must have a confirmed crop and sowing date for GDD tracking")
		crop = await self.context.crops.get(field_config.crop_type)
		if crop is None:
			raise ValidationError(f"Unknown crop type: {field_config.crop_type}")
		return field_config, crop

	async def _rechain_from(self, field_config: FieldConfig, crop: CropParameters, day: date) -> FieldConfig:
		"""Re-chain every record after ``day`` onto the last surviving total and sync the field."""
		anchor = await self.context.gdd.get_previous(field_config.id, day + timedelta(days=1))
		later = rechain(
			await self.context.gdd.list_after(field_config.id, day),
			anchor.cumulative_gdd if anchor is not None else 0.0,
			crop,
		)
		if later:
			await self.context.gdd.upsert_many(later)

		latest = later[-1] if later else anchor
		accumulated = latest.cumulative_gdd if latest is not None else 0.0
		stage = latest.growth_stage if latest is not None else GrowthStage.INITIAL
		last_update = latest.date if latest is not None else None
		if field_config.growth_stage is not None and stage.rank < field_config.growth_stage.rank:
			logger.warning(
				"growth_stage_regressed",
				node_id=field_config.node_id,
				previous=field_config.growth_stage.value,
				current=stage.value,
			)
		await self.context.fields.update_gdd_state(field_config.id, accumulated, stage, last_update)
		return replace(
			field_config,
			accumulated_gdd=accumulated,
			growth_stage=stage,
			last_gdd_update=last_update,
		)

	async def _upsert_day(
		self,
		field_config: FieldConfig,
		crop: CropParameters,
		day: date,
		temperature: DailyTemperature,
	) -> tuple[GDDRecord, FieldConfig]:
		"""Replace ``day`` and re-chain every later record onto its new total."""
		previous = await self.context.gdd.get_previous(field_config.id, day)
		record = build_record(
			field_config.id,
			day,
			temperature,
			crop,
			previous.cumulative_gdd if previous is not None else 0.0,
		)
		await self.context.gdd.upsert_many([record])
		return record, await self._rechain_from(field_config, crop, day)

	async def _calculate(
		self,
		field_config: FieldConfig,
		crop: CropParameters,
		day: date,
	) -> tuple[GDDRecord | None, FieldConfig]:
		assert field_config.sowing_date is not None
		if day < field_config.sowing_date:
			logger.info("gdd_skipped_before_sowing", node_id=field_config.node_id, date=day.isoformat())
			return None, field_config
		temperature = await self.context.readings.get_daily_temperature(field_config.node_id, day)
		if temperature is None:
			logger.warning("gdd_no_temperature_data", node_id=field_config.node_id, date=day.isoformat())
			return None, field_config
		return await self._upsert_day(field_config, crop, day, temperature)

	async def calculate_daily_gdd(self, node_id: int, day: date) -> GDDRecord | None:
		field_config, crop = await self._crop_cycle(node_id)
		record, _ = await self._calculate(field_config, crop, day)
		if record is not None:
			logger.info(
				"gdd_calculated",
				node_id=node_id,
				date=day.isoformat(),
				daily_gdd=record.daily_gdd,
				cumulative_gdd=record.cumulative_gdd,
				stage=record.growth_stage.value,
			)
		return record

	async def get_status(self, node_id: int, today: date | None = None) -> GDDStatus:
		field_config, crop = await self._crop_cycle(node_id)
		assert field_config.sowing_date is not None
		today = today or datetime.now(UTC).date()
		accumulated = field_config.accumulated_gdd
		progress = progress_percent(accumulated, crop.total_gdd)
		days_from_sowing = max(0, (today - field_config.sowing_date).days)
		return GDDStatus(
			node_id=node_id,
			crop_type=crop.name,
			sowing_date=field_config.sowing_date,
			accumulated_gdd=round(accumulated, 2),
			total_gdd_required=crop.total_gdd,
			progress_percent=progress,
			growth_stage=growth_stage_for_progress(progress, crop),
			days_from_sowing=days_from_sowing,
			estimated_days_to_harvest=estimated_days_to_harvest(accumulated, crop.total_gdd, days_from_sowing),
			last_update=field_config.last_gdd_update,
		)

	async def recalculate_range(self, node_id: int, start: date, end: date) -> list[GDDRecord]:
		if start > end:
			raise ValidationError("start date must not be after end date")
		field_config, crop = await self._crop_cycle(node_id)
		assert field_config.sowing_date is not None
		start = max(start, field_config.sowing_date)

		deleted = await self.context.gdd.delete_range(field_config.id, start, end)
		records: list[GDDRecord] = []
		day = start
		while day <= end:
			record, field_config = await self._calculate(field_config, crop, day)
			if record is not None:
				records.append(record)
			day += timedelta(days=1)
		if deleted:
			field_config = await self._rechain_from(field_config, crop, end)

		logger.info("gdd_range_recalculated", node_id=node_id, deleted=deleted, created=len(records))
		return records

	async def calculate_missing(self, node_id: int, today: date | None = None) -> list[GDDRecord]:
		"""Backfill every date from sowing to yesterday that has no record yet."""
		field_config, crop = await self._crop_cycle(node_id)
		assert field_config.sowing_date is not None
		yesterday = (today or datetime.now(UTC).date()) - timedelta(days=1)
		existing = {record.date for record in await self.context.gdd.history(field_config.id, field_config.sowing_date, yesterday)}

		records: list[GDDRecord] = []
		day = field_config.sowing_date
		while day <= yesterday:
			if day not in existing:
				try:
					record, field_config = await self._calculate(field_config, crop, day)
				except FieldSenseError as exc:
					logger.error("gdd_backfill_day_failed", node_id=node_id, date=day.isoformat(), error=str(exc))
					record = None
				if record is not None:
					records.append(record)
			day += timedelta(days=1)

		logger.info("gdd_backfill_completed", node_id=node_id, created=len(records))
		return records

	async def get_history(self, node_id: int, start: date | None = None, end: date | None = None) -> list[GDDRecord]:
		field_config = await self.context.fields.get_by_node_id(node_id)
		if field_config is None:
			raise NotFoundError("Field", f"nodeId={node_id}")
		return await self.context.gdd.history(field_config.id, start, end)
