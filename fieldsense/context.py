"""Engine context: the repositories, cache and provider one process shares."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fieldsense.config import Settings, get_settings
from fieldsense.repositories.protocols import (
	CropCatalogRepository,
	FieldRepository,
	ForecastCache,
	ForecastProvider,
	GDDRepository,
	SensorReadingRepository,
)
from fieldsense.repositories.sql import (
	SQLCropCatalogRepository,
	SQLFieldRepository,
	SQLGDDRepository,
	SQLSensorReadingRepository,
)
from fieldsense.repositories.weather import OpenWeatherMapProvider, RedisForecastCache


@dataclass(slots=True)
class EngineContext:
	settings: Settings
	fields: FieldRepository
	readings: SensorReadingRepository
	crops: CropCatalogRepository
	gdd: GDDRepository
	forecast_cache: ForecastCache | None
	forecast_provider: ForecastProvider


def build_engine_context(
	session_factory: async_sessionmaker[AsyncSession],
	redis_client: Redis | None,
	settings: Settings | None = None,
) -> EngineContext:
	settings = settings or get_settings()
	return EngineContext(
		settings=settings,
		fields=SQLFieldRepository(session_factory),
		readings=SQLSensorReadingRepository(session_factory),
		crops=SQLCropCatalogRepository(session_factory),
		gdd=SQLGDDRepository(session_factory),
		forecast_cache=RedisForecastCache(redis_client) if redis_client is not None else None,
		forecast_provider=OpenWeatherMapProvider(settings),
	)


def get_engine_context(request: Request) -> EngineContext:
	"""FastAPI dependency; the context is built once in the app lifespan."""
	context = getattr(request.app.state, "engine_context", None)
	if context is None:
		raise RuntimeError("engine context is not initialised")
	return context
