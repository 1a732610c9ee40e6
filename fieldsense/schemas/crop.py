"""Pydantic schemas for the crop catalog and recommendations."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from fieldsense.models.enums import Season, SoilTexture


class CropRead(BaseModel):
	name: str
	base_temperature: float
	total_gdd: float
	vwc_min: float
	vwc_optimal: float
	vwc_max: float
	root_depth_cm: float
	mad: float
	stage_thresholds: dict[str, float]
	kc: dict[str, float]
	preferred_textures: list[SoilTexture]
	season: Season
	valid_for_region: bool

	@classmethod
	def from_crop(cls, crop: Any) -> CropRead:
		return cls(
			name=crop.name,
			base_temperature=crop.base_temperature,
			total_gdd=crop.total_gdd,
			vwc_min=crop.vwc_min,
			vwc_optimal=crop.vwc_optimal,
			vwc_max=crop.vwc_max,
			root_depth_cm=crop.root_depth_cm,
			mad=crop.mad,
			stage_thresholds={
				"initial": crop.stages.initial_end,
				"development": crop.stages.development_end,
				"mid_season": crop.stages.mid_season_end,
				"late_season": crop.stages.late_season_end,
			},
			kc={"initial": crop.kc_initial, "mid": crop.kc_mid, "end": crop.kc_end},
			preferred_textures=[texture for texture in SoilTexture if texture in crop.preferred_textures],
			season=crop.season,
			valid_for_region=crop.valid_for_region,
		)


class CropScoreRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	crop_name: str
	score: float
	reason: str
	components: dict[str, float]
	suitable: bool


class FieldConditionsRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	vwc: float
	soil_texture: SoilTexture
	avg_temperature: float
	today: date
	accumulated_gdd: float


class CropRecommendationRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	node_id: int
	season: Season
	conditions: FieldConditionsRead
	recommendations: list[CropScoreRead]
	generated_at: datetime
