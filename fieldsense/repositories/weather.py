"""Redis forecast cache and the OpenWeatherMap forecast client."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import BaseModel, Field
from pydantic import ValidationError as PayloadValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from fieldsense.agronomy.types import WeatherForecast
from fieldsense.config import Settings, get_settings
from fieldsense.errors import ExternalServiceError


class ForecastEntryMain(BaseModel):
	temp: float
	humidity: float = 0.0


class ForecastEntryRain(BaseModel):
	three_hours: float = Field(default=0.0, alias="3h")


class ForecastEntry(BaseModel):
	"""Fields of a 3-hourly entry that forecast aggregation reads."""

	dt: int
	main: ForecastEntryMain
	rain: ForecastEntryRain | None = None


def forecast_cache_key(latitude: float, longitude: float) -> str:
	return f"weather:forecast:{latitude:.2f}:{longitude:.2f}"


class RedisForecastCache:
	"""Whole-entry JSON values written with SETEX; last writer wins."""

	def __init__(self, redis_client: Redis):
		self.redis_client = redis_client

	async def get(self, latitude: float, longitude: float) -> WeatherForecast | None:
		try:
			cached = await self.redis_client.get(forecast_cache_key(latitude, longitude))
		except RedisError as exc:
			raise ExternalServiceError("redis", str(exc)) from exc
		if not cached:
			return None
		forecast = WeatherForecast.from_dict(json.loads(cached))
		if forecast.expires_at <= datetime.now(UTC):
			return None
		return forecast

	async def set(self, forecast: WeatherForecast, ttl_seconds: int) -> None:
		try:
			await self.redis_client.setex(
				forecast_cache_key(forecast.latitude, forecast.longitude),
				ttl_seconds,
				json.dumps(forecast.to_dict()),
			)
		except RedisError as exc:
			raise ExternalServiceError("redis", str(exc)) from exc


class OpenWeatherMapProvider:
	"""5-day / 3-hour forecast endpoint, one time-bounded request per fetch."""

	def __init__(
		self,
		settings: Settings | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self.settings = settings or get_settings()
		self.transport = transport

	async def fetch(self, latitude: float, longitude: float) -> list[dict[str, Any]]:
		if not self.settings.openweather_api_key:
			raise ExternalServiceError("openweathermap", "API key is not configured")

		params = {
			"lat": latitude,
			"lon": longitude,
			"appid": self.settings.openweather_api_key,
			"units": "metric",
			"cnt": 40,
		}
		try:
			async with httpx.AsyncClient(
				timeout=self.settings.weather_timeout_seconds,
				transport=self.transport,
			) as client:
				response = await client.get(self.settings.openweather_base_url, params=params)
				response.raise_for_status()
				payload = response.json()
		except httpx.HTTPError as exc:
			raise ExternalServiceError("openweathermap", str(exc)) from exc
		except ValueError as exc:
			raise ExternalServiceError("openweathermap", f"invalid JSON payload: {exc}") from exc

		entries = payload.get("list") if isinstance(payload, dict) else None
		if not isinstance(entries, list):
			raise ExternalServiceError("openweathermap", "response has no forecast list")
		for index, entry in enumerate(entries):
			try:
				ForecastEntry.model_validate(entry)
			except PayloadValidationError as exc:
				first = exc.errors()[0]
				location = ".".join(str(part) for part in first["loc"])
				raise ExternalServiceError(
					"openweathermap",
					f"malformed forecast entry {index}: {location} {first['msg']}",
				) from exc
		return entries
