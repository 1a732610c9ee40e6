"""Forecast, rain-check and reference-ET routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from fieldsense.context import EngineContext, get_engine_context
from fieldsense.errors import ExternalServiceError
from fieldsense.schemas.weather import EvapotranspirationRead, ForecastRead, RainCheckRead
from fieldsense.services.weather_service import WeatherService

router = APIRouter(prefix="/weather", tags=["weather"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, ExternalServiceError):
		return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="weather service failure")


@router.get("/forecast", response_model=ForecastRead)
async def get_forecast(
	lat: float = Query(ge=-90, le=90),
	lon: float = Query(ge=-180, le=180),
	context: EngineContext = Depends(get_engine_context),
) -> ForecastRead:
	service = WeatherService(context)
	try:
		return ForecastRead.model_validate(await service.get_forecast(lat, lon))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/rain", response_model=RainCheckRead)
async def rain_check(
	lat: float = Query(ge=-90, le=90),
	lon: float = Query(ge=-180, le=180),
	hours: int | None = Query(default=None, ge=1, le=120),
	threshold_mm: float | None = Query(default=None, ge=0),
	context: EngineContext = Depends(get_engine_context),
) -> RainCheckRead:
	service = WeatherService(context)
	hours = hours if hours is not None else context.settings.rain_forecast_hours
	threshold_mm = threshold_mm if threshold_mm is not None else context.settings.rain_threshold_mm
	check = await service.is_rain_expected(lat, lon, hours, threshold_mm)
	return RainCheckRead(
		expected=check.expected,
		total_mm=check.total_mm,
		description=check.description,
		hours_ahead=hours,
		threshold_mm=threshold_mm,
	)


@router.get("/et", response_model=EvapotranspirationRead)
async def estimate_et(
	lat: float = Query(ge=-90, le=90),
	lon: float = Query(ge=-180, le=180),
	context: EngineContext = Depends(get_engine_context),
) -> EvapotranspirationRead:
	service = WeatherService(context)
	return EvapotranspirationRead(latitude=lat, longitude=lon, et0_mm_per_day=await service.estimate_daily_et(lat, lon))
