"""Irrigation decision orchestration: water balance → urgency → weather → dose."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from fieldsense.agronomy.gdd import crop_coefficient
from fieldsense.agronomy.types import CropParameters
from fieldsense.agronomy.urgency import (
	ACTION_FOR_URGENCY,
	NEXT_CHECK_HOURS,
	SCORE_BASIS,
	classify_urgency,
	downgrade_for_rain,
)
from fieldsense.agronomy.water_balance import WaterBalance, calculate_water_balance, irrigation_depth_mm
from fieldsense.context import EngineContext
from fieldsense.errors import NotFoundError, ValidationError
from fieldsense.models.enums import GrowthStage, IrrigationAction, IrrigationUrgency, StressLevel
from fieldsense.services.weather_service import WeatherService

logger = structlog.get_logger("fieldsense.irrigation")


@dataclass(frozen=True, slots=True)
class IrrigationDecision:
	node_id: int
	field_name: str
	crop_type: str
	growth_stage: GrowthStage | None
	decision: IrrigationAction
	urgency: IrrigationUrgency
	urgency_score: int
	base_urgency: IrrigationUrgency
	base_urgency_score: int
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


@dataclass(frozen=True, slots=True)
class NodeFailure:
	node_id: int
	error_type: str
	message: str


@dataclass(slots=True)
class BatchRecommendation:
	decisions: list[IrrigationDecision] = field(default_factory=list)
	failures: list[NodeFailure] = field(default_factory=list)


def build_reason(
	action: IrrigationAction,
	current_vwc: float,
	target_vwc: float,
	balance: WaterBalance,
	crop: CropParameters,
	weather_note: str | None,
) -> str:
	clauses: list[str] = []
	if action == IrrigationAction.irrigate_now:
		if current_vwc < crop.vwc_min:
			clauses.append(f"Critical moisture deficit: {crop.vwc_min - current_vwc:.1f}% below crop minimum")
			clauses.append(f"Current VWC {current_vwc:.1f}% vs minimum {crop.vwc_min:g}%")
		elif balance.depletion_percent > balance.mad * 100 * 1.2:
			clauses.append(
				f"Soil depletion {balance.depletion_percent:.0f}% exceeds MAD threshold ({balance.mad * 100:.0f}%)"
			)
			clauses.append(f"Water stress risk for {crop.name}")
		else:
			clauses.append("Immediate irrigation required to prevent crop stress")
	elif action == IrrigationAction.irrigate_soon:
		clauses.append("Soil moisture approaching stress level")
		clauses.append(f"Current {current_vwc:.1f}% vs optimal {target_vwc:.1f}%")
		clauses.append(f"Depletion at {balance.depletion_percent:.0f}% of TAW")
	elif crop.vwc_min <= current_vwc <= crop.vwc_max:
		clauses.append(f"Soil moisture within range for {crop.name}")
		clauses.append(f"Current {current_vwc:.1f}% within range {crop.vwc_min:g}-{crop.vwc_max:g}%")
	elif current_vwc > crop.vwc_max:
		clauses.append("Soil moisture exceeds crop range, risk of waterlogging")
		clauses.append(f"Avoid irrigation until moisture depletes to {crop.vwc_max:g}%")
	else:
		clauses.append(f"Soil moisture adequate at {current_vwc:.1f}% VWC")

	if weather_note:
		clauses.append(weather_note)
	return ". ".join(clauses)


class IrrigationService:
	def __init__(self, context: EngineContext):
		self.context = context
		self.settings = context.settings
		self.weather = WeatherService(context)

	async def make_decision(self, node_id: int) -> IrrigationDecision:
		field_config = await self.context.fields.get_by_node_id(node_id)
		if field_config is None:
			raise NotFoundError("Field", f"nodeId={node_id}")
		if not field_config.crop_type or not field_config.crop_confirmed:
			raise ValidationError("Field must have a confirmed crop for irrigation decisions")

		crop = await self.context.crops.get(field_config.crop_type)
		if crop is None:
			raise ValidationError(f"Unknown crop type: {field_config.crop_type}")

		reading = await self.context.readings.get_latest(node_id)
		if reading is None:
			raise NotFoundError("SensorReading", f"nodeId={node_id}")
		if reading.soil_moisture_vwc is None:
			raise NotFoundError("SensorReading", f"nodeId={node_id} with a valid VWC")
		current_vwc = reading.soil_moisture_vwc

		balance = calculate_water_balance(field_config.soil_texture, current_vwc, crop.root_depth_cm, crop.mad)
		base = classify_urgency(current_vwc, balance, crop)

		rain = await self.weather.is_rain_expected(field_config.latitude, field_config.longitude)
		final = downgrade_for_rain(base) if rain.expected else base
		weather_note = rain.description if rain.expected else None
		if final != base:
			logger.info(
				"urgency_adjusted_for_rain",
				node_id=node_id,
				base=base.level.value,
				final=final.level.value,
				rain_mm=rain.total_mm,
			)

		action = ACTION_FOR_URGENCY[final.level]
		target_vwc = crop.vwc_optimal
		depth = 0.0
		if action != IrrigationAction.do_not_irrigate:
			depth = irrigation_depth_mm(
				current_vwc,
				target_vwc,
				crop.root_depth_cm,
				self.settings.min_irrigation_depth_mm,
				self.settings.max_irrigation_depth_mm,
			)
		rate = self.settings.application_rate_mm_per_hour
		duration = math.ceil(round(depth / rate * 60, 6)) if depth > 0 else 0

		kc = crop_coefficient(crop, field_config.growth_stage, field_config.accumulated_gdd)
		et0 = await self.weather.estimate_daily_et(field_config.latitude, field_config.longitude)

		decision = IrrigationDecision(
			node_id=node_id,
			field_name=field_config.field_name,
			crop_type=crop.name,
			growth_stage=field_config.growth_stage,
			decision=action,
			urgency=final.level,
			urgency_score=final.score,
			base_urgency=base.level,
			base_urgency_score=base.score,
			reason=build_reason(action, current_vwc, target_vwc, balance, crop, weather_note),
			score_basis=SCORE_BASIS[final.level],
			current_vwc=current_vwc,
			target_vwc=target_vwc,
			deficit=round(max(0.0, target_vwc - current_vwc), 2),
			depletion_percent=balance.depletion_percent,
			stress_level=balance.stress_level,
			suggested_depth_mm=depth,
			suggested_duration_min=duration,
			application_rate_mm_per_hour=rate,
			weather_adjustment=weather_note,
			crop_coefficient=kc,
			reference_et_mm=et0,
			crop_et_mm=round(kc * et0, 2),
			next_check_hours=NEXT_CHECK_HOURS[action],
			timestamp=datetime.now(UTC),
		)
		logger.info(
			"irrigation_decision",
			node_id=node_id,
			decision=action.value,
			urgency=final.level.value,
			score=final.score,
			depth_mm=depth,
		)
		return decision

	async def recommend_batch(self, node_ids: Sequence[int]) -> BatchRecommendation:
		"""Decide for every node concurrently; one node's failure never aborts the rest."""
		results = await asyncio.gather(
			*(self.make_decision(node_id) for node_id in node_ids),
			return_exceptions=True,
		)

		batch = BatchRecommendation()
		for node_id, result in zip(node_ids, results):
			if isinstance(result, IrrigationDecision):
				batch.decisions.append(result)
				continue
			if not isinstance(result, Exception):
				raise result
			logger.error("batch_decision_failed", node_id=node_id, error_type=type(result).__name__, error=str(result))
			batch.failures.append(NodeFailure(node_id=node_id, error_type=type(result).__name__, message=str(result)))

		batch.decisions.sort(key=lambda item: item.urgency_score, reverse=True)
		logger.info(
			"batch_recommendations_completed",
			total=len(node_ids),
			decisions=len(batch.decisions),
			failures=len(batch.failures),
		)
		return batch
