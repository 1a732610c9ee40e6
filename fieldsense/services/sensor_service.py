"""Sensor ingest — calibrate raw node payloads and persist them."""

from __future__ import annotations

from datetime import UTC, datetime

import structlog

from fieldsense.agronomy.calibration import to_temperature, to_vwc
from fieldsense.agronomy.types import SensorReading
from fieldsense.context import EngineContext
from fieldsense.errors import NotFoundError, SensorDataError

logger = structlog.get_logger("fieldsense.sensors")


class SensorService:
	def __init__(self, context: EngineContext):
		self.context = context
		self.settings = context.settings

	async def ingest(
		self,
		node_id: int,
		raw_moisture: int,
		raw_temperature: int,
		timestamp: datetime | None = None,
	) -> SensorReading:
		field_config = await self.context.fields.get_by_node_id(node_id)
		if field_config is None:
			raise NotFoundError("Field", f"nodeId={node_id}")

		vwc = to_vwc(raw_moisture, field_config.soil_texture)
		temperature = to_temperature(raw_temperature)
		low, high = self.settings.soil_temperature_min_c, self.settings.soil_temperature_max_c
		if not low <= temperature <= high:
			raise SensorDataError(f"Soil temperature {temperature}°C outside valid range [{low:g}, {high:g}]")

		reading = await self.context.readings.create(
			SensorReading(
				node_id=node_id,
				raw_moisture=raw_moisture,
				raw_temperature=raw_temperature,
				soil_moisture_vwc=vwc,
				soil_temperature_c=temperature,
				timestamp=timestamp or datetime.now(UTC),
			)
		)
		logger.info("reading_ingested", node_id=node_id, vwc=vwc, soil_temperature_c=temperature)
		return reading

	async def get_latest(self, node_id: int) -> SensorReading:
		reading = await self.context.readings.get_latest(node_id)
		if reading is None:
			raise NotFoundError("SensorReading", f"nodeId={node_id}")
		return reading

	async def list_recent(self, node_id: int, limit: int = 50) -> list[SensorReading]:
		return await self.context.readings.list_recent(node_id, limit)
