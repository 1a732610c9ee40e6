"""Pydantic schemas for GDD snapshots and history."""

from __future__ import annotations

import uuid
import datetime as dt

from pydantic import BaseModel, ConfigDict

from fieldsense.models.enums import GrowthStage


class GDDRecordRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	field_id: uuid.UUID
	date: dt.date
	avg_temperature: float
	min_temperature: float
	max_temperature: float
	readings_count: int
	daily_gdd: float
	cumulative_gdd: float
	crop_type: str
	base_temperature: float
	growth_stage: GrowthStage


class GDDStatusRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	node_id: int
	crop_type: str
	sowing_date: dt.date
	accumulated_gdd: float
	total_gdd_required: float
	progress_percent: float
	growth_stage: GrowthStage
	days_from_sowing: int
	estimated_days_to_harvest: int | None
	last_update: dt.date | None


class GDDRangeRequest(BaseModel):
	start: dt.date
	end: dt.date
