"""Crop recommendations for a field's current soil conditions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

import structlog

from fieldsense.agronomy.crop_scoring import CropScore, FieldConditions, rank_crops, season_for_date
from fieldsense.agronomy.types import CropParameters
from fieldsense.context import EngineContext
from fieldsense.errors import NotFoundError
from fieldsense.models.enums import Season

logger = structlog.get_logger("fieldsense.crops")


@dataclass(frozen=True, slots=True)
class CropRecommendation:
	node_id: int
	season: Season
	conditions: FieldConditions
	recommendations: list[CropScore]
	generated_at: datetime


class CropRecommendationService:
	def __init__(self, context: EngineContext):
		self.context = context
		self.settings = context.settings

	async def list_catalog(self, valid_for_region: bool | None = None) -> list[CropParameters]:
		return await self.context.crops.list_catalog(valid_for_region)

	async def get_crop(self, name: str) -> CropParameters:
		crop = await self.context.crops.get(name)
		if crop is None:
			raise NotFoundError("Crop", name)
		return crop

	async def recommend(self, node_id: int, top_n: int | None = None, today: date | None = None) -> CropRecommendation:
		field_config = await self.context.fields.get_by_node_id(node_id)
		if field_config is None:
			raise NotFoundError("Field", f"nodeId={node_id}")

		reading = await self.context.readings.get_latest(node_id)
		if reading is None or reading.soil_moisture_vwc is None:
			raise NotFoundError("SensorReading", f"nodeId={node_id}")

		now = datetime.now(UTC)
		since = now - timedelta(hours=self.settings.recent_temperature_hours)
		avg_temperature = await self.context.readings.get_average_temperature(node_id, since)
		if avg_temperature is None:
			avg_temperature = reading.soil_temperature_c
		if avg_temperature is None:
			raise NotFoundError("SensorReading", f"nodeId={node_id} with a soil temperature")

		today = today or now.date()
		conditions = FieldConditions(
			vwc=reading.soil_moisture_vwc,
			soil_texture=field_config.soil_texture,
			avg_temperature=round(avg_temperature, 2),
			today=today,
			accumulated_gdd=field_config.accumulated_gdd if field_config.crop_confirmed else 0.0,
		)
		catalog = await self.context.crops.list_catalog(valid_for_region=True)
		ranked = rank_crops(catalog, conditions, top_n or self.settings.recommendation_top_n)

		logger.info(
			"crop_recommendations",
			node_id=node_id,
			candidates=len(catalog),
			top=ranked[0].crop_name if ranked else None,
		)
		return CropRecommendation(
			node_id=node_id,
			season=season_for_date(today),
			conditions=conditions,
			recommendations=ranked,
			generated_at=now,
		)
