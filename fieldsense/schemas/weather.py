"""Pydantic schemas for forecasts and rain checks."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict


class ForecastDayRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	date: dt.date
	temp_max: float
	temp_min: float
	temp_avg: float
	humidity: float
	precipitation_mm: float
	description: str


class ForecastRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	latitude: float
	longitude: float
	fetched_at: dt.datetime
	expires_at: dt.datetime
	days: list[ForecastDayRead]


class RainCheckRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	expected: bool
	total_mm: float
	description: str
	hours_ahead: int
	threshold_mm: float


class EvapotranspirationRead(BaseModel):
	latitude: float
	longitude: float
	et0_mm_per_day: float
