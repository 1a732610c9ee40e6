"""Pydantic schemas for irrigation decisions."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from fieldsense.models.enums import GrowthStage, IrrigationAction, IrrigationUrgency, StressLevel


class IrrigationDecisionRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	node_id: int
	field_name: str
	crop_type: str
	growth_stage: GrowthStage | None
	decision: IrrigationAction
	urgency: IrrigationUrgency
	urgency_score: int = Field(ge=0, le=100)
	base_urgency: IrrigationUrgency
	base_urgency_score: int = Field(ge=0, le=100)
	reason: str
	score_basis: str
	current_vwc: float
	target_vwc: float
	deficit: float
	depletion_percent: float
	stress_level: StressLevel
	suggested_depth_mm: float
	suggested_duration_min: int
	application_rate_mm_per_hour: float
	weather_adjustment: str | None
	crop_coefficient: float
	reference_et_mm: float
	crop_et_mm: float
	next_check_hours: int
	timestamp: datetime


class BatchRequest(BaseModel):
	node_ids: list[int] = Field(min_length=1, max_length=500)


class NodeFailureRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	node_id: int
	error_type: str
	message: str


class BatchRecommendationRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	decisions: list[IrrigationDecisionRead]
	failures: list[NodeFailureRead]
