"""Sensor reading ingest and lookup routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from fieldsense.context import EngineContext, get_engine_context
from fieldsense.errors import SensorDataError
from fieldsense.schemas.reading import ReadingIn, ReadingRead
from fieldsense.services.sensor_service import SensorService

router = APIRouter(prefix="/readings", tags=["readings"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, SensorDataError):
		return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="sensor ingest failure")


@router.post("", response_model=ReadingRead, status_code=status.HTTP_201_CREATED)
async def ingest_reading(
	payload: ReadingIn,
	context: EngineContext = Depends(get_engine_context),
) -> ReadingRead:
	service = SensorService(context)
	try:
		reading = await service.ingest(
			payload.node_id,
			payload.raw_moisture,
			payload.raw_temperature,
			payload.timestamp,
		)
	except Exception as exc:
		raise _map_error(exc) from exc
	return ReadingRead.model_validate(reading)


@router.get("/{node_id}/latest", response_model=ReadingRead)
async def get_latest_reading(node_id: int, context: EngineContext = Depends(get_engine_context)) -> ReadingRead:
	service = SensorService(context)
	try:
		return ReadingRead.model_validate(await service.get_latest(node_id))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/{node_id}", response_model=list[ReadingRead])
async def list_readings(
	node_id: int,
	limit: int = Query(default=50, ge=1, le=1000),
	context: EngineContext = Depends(get_engine_context),
) -> list[ReadingRead]:
	service = SensorService(context)
	try:
		readings = await service.list_recent(node_id, limit)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [ReadingRead.model_validate(reading) for reading in readings]
