"""Growing degree days and the GDD-driven growth-stage state machine."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from fieldsense.agronomy.types import CropParameters, DailyTemperature, GDDRecord
from fieldsense.models.enums import GrowthStage


def daily_gdd(avg_temperature: float, base_temperature: float) -> float:
	return round(max(0.0, avg_temperature - base_temperature), 2)


def progress_percent(cumulative_gdd: float, total_gdd: float) -> float:
	if total_gdd <= 0:
		return 100.0
	return round(min(100.0, cumulative_gdd / total_gdd * 100.0), 2)


def growth_stage_for_progress(progress: float, crop: CropParameters) -> GrowthStage:
	ladder = (
		(crop.stages.initial_end, GrowthStage.INITIAL),
		(crop.stages.development_end, GrowthStage.DEVELOPMENT),
		(crop.stages.mid_season_end, GrowthStage.MID_SEASON),
		(crop.stages.late_season_end, GrowthStage.LATE_SEASON),
	)
	for upper, stage in ladder:
		if progress < upper:
			return stage
	return GrowthStage.HARVEST_READY


def growth_stage(cumulative_gdd: float, crop: CropParameters) -> GrowthStage:
	return growth_stage_for_progress(progress_percent(cumulative_gdd, crop.total_gdd), crop)


def build_record(
	field_id: uuid.UUID,
	day: date,
	temperature: DailyTemperature,
	crop: CropParameters,
	previous_cumulative: float,
) -> GDDRecord:
	"""Record for ``day`` chained onto the cumulative total of the prior recorded day."""
	gdd = daily_gdd(temperature.avg, crop.base_temperature)
	cumulative = round(previous_cumulative + gdd, 2)
	return GDDRecord(
		field_id=field_id,
		date=day,
		avg_temperature=temperature.avg,
		min_temperature=temperature.min,
		max_temperature=temperature.max,
		readings_count=temperature.readings_count,
		daily_gdd=gdd,
		cumulative_gdd=cumulative,
		crop_type=crop.name,
		base_temperature=crop.base_temperature,
		growth_stage=growth_stage(cumulative, crop),
	)


def rechain(records: Sequence[GDDRecord], start_cumulative: float, crop: CropParameters) -> list[GDDRecord]:
	"""Recompute cumulative totals and stages of date-ordered ``records``."""
	chained: list[GDDRecord] = []
	running = start_cumulative
	for record in records:
		running = round(running + record.daily_gdd, 2)
		chained.append(replace(record, cumulative_gdd=running, growth_stage=growth_stage(running, crop)))
	return chained


def crop_coefficient(crop: CropParameters, stage: GrowthStage | None, accumulated_gdd: float) -> float:
	"""FAO-56 Kc for the stage, interpolated across the transition stages."""
	if stage is None or stage == GrowthStage.INITIAL:
		return crop.kc_initial
	if stage == GrowthStage.MID_SEASON:
		return crop.kc_mid
	if stage == GrowthStage.DEVELOPMENT:
		start, end = crop.stage_gdd(crop.stages.initial_end), crop.stage_gdd(crop.stages.development_end)
		low, high = crop.kc_initial, crop.kc_mid
	else:
		start, end = crop.stage_gdd(crop.stages.mid_season_end), crop.stage_gdd(crop.stages.late_season_end)
		low, high = crop.kc_mid, crop.kc_end
	fraction = min(1.0, max(0.0, (accumulated_gdd - start) / (end - start)))
	return round(low + (high - low) * fraction, 3)


def estimated_days_to_harvest(accumulated_gdd: float, total_gdd: float, days_elapsed: int) -> int | None:
	"""Remaining GDD over the mean daily accrual so far; ``None`` without history."""
	if accumulated_gdd >= total_gdd:
		return 0
	if days_elapsed <= 0 or accumulated_gdd <= 0:
		return None
	per_day = accumulated_gdd / days_elapsed
	return int(round((total_gdd - accumulated_gdd) / per_day))
