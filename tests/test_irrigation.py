from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from fieldsense.context import EngineContext
from fieldsense.errors import ExternalServiceError, NotFoundError, ValidationError
from fieldsense.models.enums import IrrigationAction, IrrigationUrgency, SoilTexture, StressLevel
from fieldsense.services.irrigation_service import IrrigationService
from tests.factories import forecast_entries


async def _planted(context: EngineContext, node_id: int, vwc: float | None) -> None:
	await context.fields.create(node_id, f"Plot {node_id}", SoilTexture.SANDY_LOAM, 26.85, 80.95)
	await context.fields.set_crop_cycle(node_id, "testcrop", date(2026, 1, 10), 10.0)
	if vwc is not None:
		context.readings.add(node_id, vwc)


def _make_rainy(context: EngineContext) -> None:
	context.forecast_provider.entries = forecast_entries(datetime.now(UTC), count=16, rain_mm=1.0)


@pytest.mark.asyncio
async def test_severe_deficit_irrigates_now(context: EngineContext) -> None:
	await _planted(context, 1, vwc=19.0)

	decision = await IrrigationService(context).make_decision(1)

	assert decision.decision == IrrigationAction.irrigate_now
	assert decision.urgency == IrrigationUrgency.CRITICAL
	assert decision.urgency_score == 95
	assert decision.suggested_depth_mm == 44.0
	assert decision.suggested_duration_min == 528
	assert decision.next_check_hours == 6
	assert decision.deficit == 11.0
	assert decision.stress_level == StressLevel.severe
	assert decision.weather_adjustment is None
	assert decision.reason.startswith("Critical moisture deficit: 6.0% below crop minimum")


@pytest.mark.asyncio
async def test_rain_never_softens_a_critical_deficit(context: EngineContext) -> None:
	await _planted(context, 1, vwc=19.0)
	_make_rainy(context)

	decision = await IrrigationService(context).make_decision(1)

	assert decision.urgency == IrrigationUrgency.CRITICAL
	assert decision.decision == IrrigationAction.irrigate_now
	assert decision.weather_adjustment is not None
	assert "rain expected" in decision.reason


@pytest.mark.asyncio
async def test_upper_edge_of_band_is_low_and_not_irrigated(context: EngineContext) -> None:
	await _planted(context, 2, vwc=35.0)

	decision = await IrrigationService(context).make_decision(2)

	assert decision.urgency == IrrigationUrgency.LOW
	assert decision.urgency_score == 30
	assert decision.decision == IrrigationAction.do_not_irrigate
	assert decision.suggested_depth_mm == 0.0
	assert decision.suggested_duration_min == 0
	assert decision.next_check_hours == 24


@pytest.mark.asyncio
async def test_low_urgency_below_optimal_carries_no_dose(context: EngineContext) -> None:
	await _planted(context, 2, vwc=26.0)

	decision = await IrrigationService(context).make_decision(2)

	assert decision.urgency == IrrigationUrgency.LOW
	assert decision.urgency_score == 30
	assert decision.decision == IrrigationAction.do_not_irrigate
	assert decision.deficit == 4.0
	assert decision.suggested_depth_mm == 0.0
	assert decision.suggested_duration_min == 0


@pytest.mark.asyncio
async def test_rain_downgrades_low_to_none(context: EngineContext) -> None:
	await _planted(context, 2, vwc=35.0)
	_make_rainy(context)

	decision = await IrrigationService(context).make_decision(2)

	assert decision.base_urgency == IrrigationUrgency.LOW
	assert decision.urgency == IrrigationUrgency.NONE
	assert decision.urgency_score == 0
	assert decision.decision == IrrigationAction.do_not_irrigate
	assert decision.weather_adjustment == "16.0mm rain expected in next 48h"


@pytest.mark.asyncio
async def test_rain_downgrades_high_to_moderate(context: EngineContext) -> None:
	await _planted(context, 3, vwc=22.0)
	_make_rainy(context)

	decision = await IrrigationService(context).make_decision(3)

	assert decision.base_urgency == IrrigationUrgency.HIGH
	assert decision.urgency == IrrigationUrgency.MODERATE
	assert decision.urgency_score == 50
	assert decision.decision == IrrigationAction.irrigate_soon
	assert decision.suggested_depth_mm == 32.0
	assert decision.suggested_duration_min == 384
	assert decision.next_check_hours == 12


@pytest.mark.asyncio
async def test_weather_outage_does_not_block_decisions(context: EngineContext) -> None:
	context.forecast_provider.error = ExternalServiceError("openweathermap", "timeout")
	await _planted(context, 3, vwc=22.0)

	decision = await IrrigationService(context).make_decision(3)

	assert decision.urgency == IrrigationUrgency.HIGH
	assert decision.reference_et_mm == 4.0
	assert decision.crop_coefficient == 0.4
	assert decision.crop_et_mm == 1.6


@pytest.mark.asyncio
async def test_unconfirmed_crop_is_rejected(context: EngineContext) -> None:
	await context.fields.create(4, "Fallow", SoilTexture.LOAM, 26.8, 80.9)
	context.readings.add(4, 30.0)
	with pytest.raises(ValidationError, match="confirmed crop"):
		await IrrigationService(context).make_decision(4)


@pytest.mark.asyncio
async def test_missing_reading_is_not_found(context: EngineContext) -> None:
	await _planted(context, 5, vwc=None)
	with pytest.raises(NotFoundError, match="SensorReading"):
		await IrrigationService(context).make_decision(5)


@pytest.mark.asyncio
async def test_batch_isolates_failures_and_sorts_by_score(context: EngineContext) -> None:
	await _planted(context, 1, vwc=30.0)
	await _planted(context, 2, vwc=19.0)
	await _planted(context, 3, vwc=24.0)
	await _planted(context, 4, vwc=None)

	batch = await IrrigationService(context).recommend_batch([1, 2, 3, 4, 99])

	assert [decision.node_id for decision in batch.decisions] == [2, 3, 1]
	assert [decision.urgency_score for decision in batch.decisions] == [95, 60, 0]
	assert {failure.node_id for failure in batch.failures} == {4, 99}
	assert all(failure.error_type == "NotFoundError" for failure in batch.failures)
