from __future__ import annotations

from datetime import date

import pytest
from httpx import AsyncClient

from fieldsense.context import EngineContext
from fieldsense.errors import ExternalServiceError
from fieldsense.models.enums import SoilTexture


async def _planted(context: EngineContext, node_id: int, vwc: float) -> None:
	await context.fields.create(node_id, f"Plot {node_id}", SoilTexture.SANDY_LOAM, 26.85, 80.95)
	await context.fields.set_crop_cycle(node_id, "testcrop", date(2026, 1, 10), 10.0)
	context.readings.add(node_id, vwc)


@pytest.mark.asyncio
async def test_create_field_and_confirm_crop(client: AsyncClient) -> None:
	response = await client.post(
		"/api/v1/fields",
		json={"node_id": 3, "field_name": "East", "soil_texture": "LOAM", "latitude": 26.8, "longitude": 80.9},
	)
	assert response.status_code == 201
	assert response.json()["crop_confirmed"] is False

	response = await client.post("/api/v1/fields/3/crop", json={"crop_type": "maize", "sowing_date": "2026-07-01"})
	assert response.status_code == 200
	body = response.json()
	assert body["crop_type"] == "maize"
	assert body["growth_stage"] == "INITIAL"


@pytest.mark.asyncio
async def test_invalid_texture_is_rejected_by_schema(client: AsyncClient) -> None:
	response = await client.post(
		"/api/v1/fields",
		json={"node_id": 3, "field_name": "East", "soil_texture": "PEAT", "latitude": 26.8, "longitude": 80.9},
	)
	assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_field_is_404(client: AsyncClient) -> None:
	response = await client.get("/api/v1/fields/404")
	assert response.status_code == 404
	assert "nodeId=404" in response.json()["detail"]


@pytest.mark.asyncio
async def test_ingest_reading(client: AsyncClient, context: EngineContext) -> None:
	await context.fields.create(5, "Sensor plot", SoilTexture.SANDY_LOAM, 26.8, 80.9)

	response = await client.post("/api/v1/readings", json={"node_id": 5, "raw_moisture": 680, "raw_temperature": 253})
	assert response.status_code == 201
	assert response.json()["soil_moisture_vwc"] == 42.0

	response = await client.post("/api/v1/readings", json={"node_id": 5, "raw_moisture": 680, "raw_temperature": 900})
	assert response.status_code == 422

	response = await client.get("/api/v1/readings/5/latest")
	assert response.status_code == 200
	assert response.json()["soil_temperature_c"] == 25.3


@pytest.mark.asyncio
async def test_irrigation_decision(client: AsyncClient, context: EngineContext) -> None:
	await _planted(context, 1, vwc=19.0)

	response = await client.get("/api/v1/irrigation/1/decision")

	assert response.status_code == 200
	body = response.json()
	assert body["decision"] == "irrigate_now"
	assert body["urgency"] == "CRITICAL"
	assert body["suggested_depth_mm"] == 44.0
	assert body["suggested_duration_min"] == 528


@pytest.mark.asyncio
async def test_irrigation_decision_needs_confirmed_crop(client: AsyncClient, context: EngineContext) -> None:
	await context.fields.create(2, "Fallow", SoilTexture.LOAM, 26.8, 80.9)
	response = await client.get("/api/v1/irrigation/2/decision")
	assert response.status_code == 400


@pytest.mark.asyncio
async def test_batch_recommendations(client: AsyncClient, context: EngineContext) -> None:
	await _planted(context, 1, vwc=30.0)
	await _planted(context, 2, vwc=19.0)

	response = await client.post("/api/v1/irrigation/recommendations", json={"node_ids": [1, 2, 77]})

	assert response.status_code == 200
	body = response.json()
	assert [item["node_id"] for item in body["decisions"]] == [2, 1]
	assert body["failures"] == [
		{"node_id": 77, "error_type": "NotFoundError", "message": "Field with identifier 'nodeId=77' not found"}
	]


@pytest.mark.asyncio
async def test_empty_batch_is_rejected(client: AsyncClient) -> None:
	response = await client.post("/api/v1/irrigation/recommendations", json={"node_ids": []})
	assert response.status_code == 422


@pytest.mark.asyncio
async def test_crop_catalog(client: AsyncClient) -> None:
	response = await client.get("/api/v1/crops", params={"valid_for_region": "true"})
	assert response.status_code == 200
	names = [crop["name"] for crop in response.json()]
	assert names[0] == "chickpea"
	assert "mango" not in names

	response = await client.get("/api/v1/crops/rice")
	assert response.status_code == 200
	assert response.json()["season"] == "KHARIF"

	response = await client.get("/api/v1/crops/quinoa")
	assert response.status_code == 404


@pytest.mark.asyncio
async def test_crop_recommendations(client: AsyncClient, context: EngineContext) -> None:
	await context.fields.create(6, "Open plot", SoilTexture.LOAM, 26.8, 80.9)
	context.readings.add(6, 28.0, temperature=22.0)

	response = await client.get("/api/v1/crops/recommendations/6", params={"top_n": 2})

	assert response.status_code == 200
	body = response.json()
	assert len(body["recommendations"]) == 2
	assert body["conditions"]["soil_texture"] == "LOAM"


@pytest.mark.asyncio
async def test_gdd_status_and_history(client: AsyncClient, context: EngineContext) -> None:
	await _planted(context, 1, vwc=30.0)

	response = await client.get("/api/v1/gdd/1/status")
	assert response.status_code == 200
	assert response.json()["growth_stage"] == "INITIAL"

	response = await client.get("/api/v1/gdd/1/history")
	assert response.status_code == 200
	assert response.json() == []

	response = await client.post("/api/v1/gdd/1/recalculate", json={"start": "2026-01-12", "end": "2026-01-11"})
	assert response.status_code == 400


@pytest.mark.asyncio
async def test_weather_forecast_and_rain(client: AsyncClient) -> None:
	response = await client.get("/api/v1/weather/forecast", params={"lat": 26.85, "lon": 80.95})
	assert response.status_code == 200
	assert response.json()["days"]

	response = await client.get("/api/v1/weather/rain", params={"lat": 26.85, "lon": 80.95})
	assert response.status_code == 200
	body = response.json()
	assert body["expected"] is False
	assert body["hours_ahead"] == 48
	assert body["threshold_mm"] == 5.0


@pytest.mark.asyncio
async def test_weather_provider_failure_is_502(client: AsyncClient, context: EngineContext) -> None:
	context.forecast_provider.error = ExternalServiceError("openweathermap", "timeout")

	response = await client.get("/api/v1/weather/forecast", params={"lat": 26.85, "lon": 80.95})
	assert response.status_code == 502

	response = await client.get("/api/v1/weather/et", params={"lat": 26.85, "lon": 80.95})
	assert response.status_code == 200
	assert response.json()["et0_mm_per_day"] == 4.0
