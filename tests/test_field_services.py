from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from fieldsense.context import EngineContext
from fieldsense.errors import NotFoundError, SensorDataError, ValidationError
from fieldsense.models.enums import GrowthStage, Season, SoilTexture
from fieldsense.services.crop_service import CropRecommendationService
from fieldsense.services.field_service import FieldService
from fieldsense.services.sensor_service import SensorService


# ── Fields ──────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_and_fetch_field(context: EngineContext) -> None:
    service = FieldService(context)
    created = await service.create_field(11, "River plot", SoilTexture.CLAY_LOAM, 26.8, 80.9)

    assert (await service.get_field(11)) == created
    assert created.crop_confirmed is False
    assert [item.node_id for item in await service.list_fields()] == [11]


@pytest.mark.asyncio
async def test_duplicate_node_is_rejected(context: EngineContext) -> None:
    service = FieldService(context)
    await service.create_field(11, "River plot", SoilTexture.CLAY_LOAM, 26.8, 80.9)
    with pytest.raises(ValidationError, match="already exists"):
        await service.create_field(11, "Again", SoilTexture.LOAM, 26.8, 80.9)


@pytest.mark.asyncio
async def test_update_requires_changes(context: EngineContext) -> None:
    service = FieldService(context)
    await service.create_field(11, "River plot", SoilTexture.CLAY_LOAM, 26.8, 80.9)

    updated = await service.update_field(11, {"soil_texture": SoilTexture.CLAY})
    assert updated.soil_texture == SoilTexture.CLAY
    with pytest.raises(ValidationError):
        await service.update_field(11, {})


@pytest.mark.asyncio
async def test_confirm_crop_starts_a_cycle(context: EngineContext) -> None:
    service = FieldService(context)
    await service.create_field(11, "River plot", SoilTexture.LOAM, 26.8, 80.9)

    confirmed = await service.confirm_crop(11, "maize", date(2026, 7, 1))

    assert confirmed.crop_type == "maize"
    assert confirmed.crop_confirmed is True
    assert confirmed.growth_stage == GrowthStage.INITIAL
    assert confirmed.accumulated_gdd == 0.0


@pytest.mark.asyncio
async def test_confirm_crop_validation(context: EngineContext) -> None:
    service = FieldService(context)
    await service.create_field(11, "River plot", SoilTexture.LOAM, 26.8, 80.9)

    with pytest.raises(ValidationError, match="Unknown crop type"):
        await service.confirm_crop(11, "quinoa", date(2026, 7, 1))
    with pytest.raises(ValidationError, match="future"):
        await service.confirm_crop(11, "maize", datetime.now(UTC).date() + timedelta(days=3))
    with pytest.raises(NotFoundError):
        await service.confirm_crop(12, "maize", date(2026, 7, 1))


# ── Sensor ingest ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_ingest_calibrates_raw_counts(context: EngineContext) -> None:
    await context.fields.create(21, "Sensor plot", SoilTexture.SANDY_LOAM, 26.8, 80.9)

    reading = await SensorService(context).ingest(21, raw_moisture=680, raw_temperature=253)

    assert reading.id is not None
    assert reading.soil_moisture_vwc == 42.0
    assert reading.soil_temperature_c == 25.3
    assert (await SensorService(context).get_latest(21)) == reading


@pytest.mark.asyncio
async def test_ingest_rejects_implausible_temperature(context: EngineContext) -> None:
    await context.fields.create(21, "Sensor plot", SoilTexture.SANDY_LOAM, 26.8, 80.9)
    with pytest.raises(SensorDataError, match="outside valid range"):
        await SensorService(context).ingest(21, raw_moisture=500, raw_temperature=700)
    assert context.readings.readings == []


@pytest.mark.asyncio
async def test_ingest_for_unknown_node(context: EngineContext) -> None:
    with pytest.raises(NotFoundError):
        await SensorService(context).ingest(99, raw_moisture=500, raw_temperature=250)


# ── Crop recommendations ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_recommendations_use_recent_temperature(context: EngineContext) -> None:
    await context.fields.create(31, "Open plot", SoilTexture.LOAM, 26.8, 80.9)
    now = datetime.now(UTC)
    context.readings.add(31, 40.0, temperature=10.0, timestamp=now - timedelta(days=3))
    context.readings.add(31, 28.0, temperature=20.0, timestamp=now - timedelta(hours=2))
    context.readings.add(31, 28.0, temperature=24.0, timestamp=now - timedelta(hours=1))

    result = await CropRecommendationService(context).recommend(31, top_n=3, today=date(2026, 8, 1))

    assert result.season == Season.KHARIF
    assert result.conditions.vwc == 28.0
    assert result.conditions.avg_temperature == 22.0
    assert len(result.recommendations) == 3
    assert all(item.crop_name != "testcrop" for item in result.recommendations)
    scores = [item.score for item in result.recommendations]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_recommendations_need_a_reading(context: EngineContext) -> None:
    await context.fields.create(31, "Open plot", SoilTexture.LOAM, 26.8, 80.9)
    with pytest.raises(NotFoundError, match="SensorReading"):
        await CropRecommendationService(context).recommend(31)


@pytest.mark.asyncio
async def test_catalog_filters_by_region(context: EngineContext) -> None:
    service = CropRecommendationService(context)
    regional = await service.list_catalog(valid_for_region=True)

    assert "rice" in {crop.name for crop in regional}
    assert all(crop.valid_for_region for crop in regional)
    with pytest.raises(NotFoundError):
        await service.get_crop("quinoa")
