"""Pydantic schemas for raw sensor payloads and calibrated readings."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReadingIn(BaseModel):
	node_id: int = Field(ge=1)
	raw_moisture: int = Field(ge=0, le=4095)
	raw_temperature: int
	timestamp: datetime | None = None


class ReadingRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: int | None
	node_id: int
	raw_moisture: int
	raw_temperature: int
	soil_moisture_vwc: float | None
	soil_temperature_c: float | None
	timestamp: datetime
