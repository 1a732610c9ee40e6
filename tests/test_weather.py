from __future__ import annotations

import json
from datetime import UTC, date, datetime, timedelta

import httpx
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from fieldsense.agronomy.types import ForecastDay, WeatherForecast
from fieldsense.agronomy.weather import aggregate_daily, hargreaves_et0, rain_within
from fieldsense.config import Settings
from fieldsense.context import EngineContext
from fieldsense.errors import ExternalServiceError
from fieldsense.repositories.weather import OpenWeatherMapProvider, RedisForecastCache, forecast_cache_key
from fieldsense.services.weather_service import WEATHER_UNAVAILABLE, WeatherService
from tests.factories import FakeRedis, forecast_entries

MIDNIGHT = datetime(2026, 6, 1, tzinfo=UTC)


def _day(offset: int, rain: float) -> ForecastDay:
    return ForecastDay(
        date=date(2026, 6, 1) + timedelta(days=offset),
        temp_max=32.0,
        temp_min=22.0,
        temp_avg=27.0,
        humidity=60.0,
        precipitation_mm=rain,
        description="",
    )


# ── Aggregation ─────────────────────────────────────────────────────────────


def test_aggregate_groups_entries_by_utc_day() -> None:
    entries = forecast_entries(MIDNIGHT, count=16, rain_mm=0.5, temps=(20.0, 24.0, 31.0, 25.0))
    days = aggregate_daily(entries, forecast_days=5)

    assert [day.date for day in days] == [date(2026, 6, 1), date(2026, 6, 2)]
    first = days[0]
    assert first.temp_max == 31.0
    assert first.temp_min == 20.0
    assert first.temp_avg == 25.0
    assert first.humidity == 60.0
    assert first.precipitation_mm == 4.0
    assert first.description == "light rain"


def test_aggregate_truncates_to_forecast_days() -> None:
    days = aggregate_daily(forecast_entries(MIDNIGHT, count=40), forecast_days=2)
    assert len(days) == 2


def test_entries_without_rain_sum_to_zero() -> None:
    days = aggregate_daily(forecast_entries(MIDNIGHT, count=8), forecast_days=5)
    assert days[0].precipitation_mm == 0.0


# ── Rain window ─────────────────────────────────────────────────────────────


def test_rain_window_sums_days_inside_horizon() -> None:
    days = (_day(0, 2.0), _day(1, 2.5), _day(2, 1.0), _day(3, 20.0))
    check = rain_within(days, hours_ahead=48, threshold_mm=5.0, now=MIDNIGHT)
    assert check.total_mm == 5.5
    assert check.expected is True
    assert check.description == "5.5mm rain expected in next 48h"


def test_rain_below_threshold_is_not_expected() -> None:
    check = rain_within((_day(0, 1.0), _day(1, 1.2)), hours_ahead=24, threshold_mm=5.0, now=MIDNIGHT)
    assert check.expected is False
    assert check.description == "No significant rain expected (2.2mm)"


# ── Reference ET ────────────────────────────────────────────────────────────


def test_hargreaves_estimate() -> None:
    day = ForecastDay(date(2026, 6, 1), 35.0, 20.0, 27.5, 50.0, 0.0, "")
    assert hargreaves_et0(day) == 9.17


def test_hargreaves_has_a_floor() -> None:
    day = ForecastDay(date(2026, 1, 1), 5.0, 5.0, 5.0, 90.0, 0.0, "")
    assert hargreaves_et0(day) == 1.0


# ── Weather service ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_forecast_is_cached_after_first_fetch(context: EngineContext) -> None:
    service = WeatherService(context)
    first = await service.get_forecast(26.85, 80.95)
    second = await service.get_forecast(26.85, 80.95)

    assert context.forecast_provider.calls == 1
    assert context.forecast_cache.writes == 1
    assert second == first
    assert first.expires_at - first.fetched_at == timedelta(hours=6)


@pytest.mark.asyncio
async def test_cache_outage_falls_through_to_provider(context: EngineContext) -> None:
    context.forecast_cache.fail = True
    forecast = await WeatherService(context).get_forecast(26.85, 80.95)
    assert forecast.days
    assert context.forecast_provider.calls == 1


@pytest.mark.asyncio
async def test_provider_failure_reads_as_no_rain(context: EngineContext) -> None:
    context.forecast_provider.error = ExternalServiceError("openweathermap", "timeout")
    check = await WeatherService(context).is_rain_expected(26.85, 80.95)
    assert check.expected is False
    assert check.total_mm == 0.0
    assert check.description == WEATHER_UNAVAILABLE


@pytest.mark.asyncio
async def test_rainy_forecast_is_detected(context: EngineContext, now_utc: datetime) -> None:
    context.forecast_provider.entries = forecast_entries(now_utc, count=16, rain_mm=1.0)
    check = await WeatherService(context).is_rain_expected(26.85, 80.95)
    assert check.expected is True
    assert check.total_mm >= 5.0


@pytest.mark.asyncio
async def test_et_estimate_defaults_when_weather_is_down(context: EngineContext) -> None:
    context.forecast_provider.error = ExternalServiceError("openweathermap", "timeout")
    assert await WeatherService(context).estimate_daily_et(26.85, 80.95) == 4.0


@pytest.mark.asyncio
async def test_et_estimate_defaults_on_empty_forecast(context: EngineContext) -> None:
    context.forecast_provider.entries = []
    assert await WeatherService(context).estimate_daily_et(26.85, 80.95) == 4.0


# ── Redis cache ─────────────────────────────────────────────────────────────


def _forecast(expires_in: timedelta) -> WeatherForecast:
    now = datetime.now(UTC)
    return WeatherForecast(26.85, 80.95, now, now + expires_in, (_day(0, 1.0),))


@pytest.mark.asyncio
async def test_redis_cache_round_trips_json(fake_redis: FakeRedis) -> None:
    forecast = _forecast(timedelta(hours=6))
    cache = RedisForecastCache(fake_redis)
    await cache.set(forecast, 21600)

    key, ttl, payload = fake_redis.setex.await_args.args
    assert key == forecast_cache_key(26.85, 80.95) == "weather:forecast:26.85:80.95"
    assert ttl == 21600

    fake_redis.get.return_value = payload
    assert await cache.get(26.85, 80.95) == forecast


@pytest.mark.asyncio
async def test_redis_cache_ignores_expired_entries(fake_redis: FakeRedis) -> None:
    fake_redis.get.return_value = json.dumps(_forecast(timedelta(minutes=-1)).to_dict())
    assert await RedisForecastCache(fake_redis).get(26.85, 80.95) is None


@pytest.mark.asyncio
async def test_redis_errors_surface_as_external_service_errors(fake_redis: FakeRedis) -> None:
    fake_redis.get.side_effect = RedisConnectionError("refused")
    with pytest.raises(ExternalServiceError, match="redis"):
        await RedisForecastCache(fake_redis).get(26.85, 80.95)


# ── OpenWeatherMap provider ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_provider_returns_forecast_list(settings: Settings) -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json={"list": forecast_entries(MIDNIGHT, count=3)})

    provider = OpenWeatherMapProvider(settings, transport=httpx.MockTransport(handler))
    entries = await provider.fetch(26.85, 80.95)

    assert len(entries) == 3
    assert seen["units"] == "metric"
    assert seen["appid"] == "test-key"


@pytest.mark.asyncio
async def test_provider_http_error(settings: Settings) -> None:
    provider = OpenWeatherMapProvider(
        settings,
        transport=httpx.MockTransport(lambda _request: httpx.Response(503, text="unavailable")),
    )
    with pytest.raises(ExternalServiceError, match="openweathermap"):
        await provider.fetch(26.85, 80.95)


@pytest.mark.asyncio
async def test_provider_rejects_payload_without_list(settings: Settings) -> None:
    provider = OpenWeatherMapProvider(
        settings,
        transport=httpx.MockTransport(lambda _request: httpx.Response(200, json={"cod": "200"})),
    )
    with pytest.raises(ExternalServiceError, match="no forecast list"):
        await provider.fetch(26.85, 80.95)


@pytest.mark.asyncio
async def test_provider_rejects_malformed_entries(settings: Settings) -> None:
    entries = forecast_entries(MIDNIGHT, count=3)
    del entries[1]["main"]["temp"]
    provider = OpenWeatherMapProvider(
        settings,
        transport=httpx.MockTransport(lambda _request: httpx.Response(200, json={"list": entries})),
    )
    with pytest.raises(ExternalServiceError, match="malformed forecast entry 1: main.temp"):
        await provider.fetch(26.85, 80.95)


@pytest.mark.asyncio
async def test_provider_requires_api_key() -> None:
    provider = OpenWeatherMapProvider(Settings(_env_file=None, openweather_api_key=""))
    with pytest.raises(ExternalServiceError, match="API key"):
        await provider.fetch(26.85, 80.95)
