"""Pydantic request/response schemas for fields and crop cycles."""

from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from fieldsense.models.enums import GrowthStage, SoilTexture


class FieldCreate(BaseModel):
	node_id: int = Field(ge=1)
	field_name: str = Field(min_length=1, max_length=255)
	soil_texture: SoilTexture
	latitude: float = Field(ge=-90, le=90)
	longitude: float = Field(ge=-180, le=180)


class FieldUpdate(BaseModel):
	field_name: str | None = Field(default=None, min_length=1, max_length=255)
	soil_texture: SoilTexture | None = None
	latitude: float | None = Field(default=None, ge=-90, le=90)
	longitude: float | None = Field(default=None, ge=-180, le=180)


class CropConfirm(BaseModel):
	crop_type: str = Field(min_length=1, max_length=100)
	sowing_date: date


class FieldRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	node_id: int
	field_name: str
	soil_texture: SoilTexture
	latitude: float
	longitude: float
	crop_type: str | None
	crop_confirmed: bool
	sowing_date: date | None
	growth_stage: GrowthStage | None
	accumulated_gdd: float
	last_gdd_update: date | None
