"""Weather adjuster — cache-first forecasts, rain checks and reference ET."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import structlog

from fieldsense.agronomy.types import WeatherForecast
from fieldsense.agronomy.weather import RainCheck, aggregate_daily, hargreaves_et0, rain_within
from fieldsense.context import EngineContext
from fieldsense.errors import ExternalServiceError

logger = structlog.get_logger("fieldsense.weather")

WEATHER_UNAVAILABLE = "Weather data unavailable"


class WeatherService:
	def __init__(self, context: EngineContext):
		self.context = context
		self.settings = context.settings

	async def get_forecast(self, latitude: float, longitude: float) -> WeatherForecast:
		cache = self.context.forecast_cache
		if cache is not None:
			try:
				cached = await cache.get(latitude, longitude)
			except ExternalServiceError as exc:
				logger.warning("forecast_cache_read_failed", latitude=latitude, longitude=longitude, error=str(exc))
				cached = None
			if cached is not None:
				return cached

		entries = await self.context.forecast_provider.fetch(latitude, longitude)
		ttl_seconds = self.settings.weather_cache_ttl_hours * 3600
		fetched_at = datetime.now(UTC)
		forecast = WeatherForecast(
			latitude=latitude,
			longitude=longitude,
			fetched_at=fetched_at,
			expires_at=fetched_at + timedelta(seconds=ttl_seconds),
			days=aggregate_daily(entries, self.settings.forecast_days),
		)
		logger.info("forecast_fetched", latitude=latitude, longitude=longitude, days=len(forecast.days))

		if cache is not None:
			try:
				await cache.set(forecast, ttl_seconds)
			except ExternalServiceError as exc:
				logger.warning("forecast_cache_write_failed", latitude=latitude, longitude=longitude, error=str(exc))
		return forecast

	async def is_rain_expected(
		self,
		latitude: float,
		longitude: float,
		hours_ahead: int | None = None,
		threshold_mm: float | None = None,
	) -> RainCheck:
		"""Best-effort: any failure reads as "no rain expected"."""
		hours = hours_ahead if hours_ahead is not None else self.settings.rain_forecast_hours
		threshold = threshold_mm if threshold_mm is not None else self.settings.rain_threshold_mm
		try:
			forecast = await self.get_forecast(latitude, longitude)
		except Exception as exc:
			logger.warning("rain_check_failed", latitude=latitude, longitude=longitude, error=str(exc))
			return RainCheck(expected=False, total_mm=0.0, description=WEATHER_UNAVAILABLE)
		return rain_within(forecast.days, hours, threshold)

	async def estimate_daily_et(self, latitude: float, longitude: float) -> float:
		default = self.settings.default_et0_mm_per_day
		try:
			forecast = await self.get_forecast(latitude, longitude)
		except Exception as exc:
			logger.warning("et_estimate_failed", latitude=latitude, longitude=longitude, error=str(exc))
			return default
		if not forecast.days:
			return default
		return hargreaves_et0(forecast.days[0])
