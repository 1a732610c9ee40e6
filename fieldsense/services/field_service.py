"""Field configuration and crop-cycle management."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any

import structlog

from fieldsense.agronomy.types import FieldConfig
from fieldsense.context import EngineContext
from fieldsense.errors import NotFoundError, ValidationError
from fieldsense.models.enums import SoilTexture

logger = structlog.get_logger("fieldsense.fields")


class FieldService:
	def __init__(self, context: EngineContext):
		self.context = context

	async def create_field(
		self,
		node_id: int,
		field_name: str,
		soil_texture: SoilTexture,
		latitude: float,
		longitude: float,
	) -> FieldConfig:
		if await self.context.fields.get_by_node_id(node_id) is not None:
			raise ValidationError(f"Field for nodeId={node_id} already exists")
		created = await self.context.fields.create(node_id, field_name, soil_texture, latitude, longitude)
		logger.info("field_created", node_id=node_id, soil_texture=soil_texture.value)
		return created

	async def list_fields(self) -> list[FieldConfig]:
		return await self.context.fields.list_fields()

	async def get_field(self, node_id: int) -> FieldConfig:
		field_config = await self.context.fields.get_by_node_id(node_id)
		if field_config is None:
			raise NotFoundError("Field", f"nodeId={node_id}")
		return field_config

	async def update_field(self, node_id: int, changes: dict[str, Any]) -> FieldConfig:
		await self.get_field(node_id)
		if not changes:
			raise ValidationError("No field attributes supplied")
		return await self.context.fields.update(node_id, changes)

	async def confirm_crop(self, node_id: int, crop_type: str, sowing_date: date) -> FieldConfig:
		"""Start a new crop cycle, replacing any active one and resetting GDD state."""
		await self.get_field(node_id)
		crop = await self.context.crops.get(crop_type)
		if crop is None:
			raise ValidationError(f"Unknown crop type: {crop_type}")
		if sowing_date > datetime.now(UTC).date():
			raise ValidationError("Sowing date cannot be in the future")

		updated = await self.context.fields.set_crop_cycle(node_id, crop.name, sowing_date, crop.base_temperature)
		logger.info("crop_cycle_started", node_id=node_id, crop=crop.name, sowing_date=sowing_date.isoformat())
		return updated
