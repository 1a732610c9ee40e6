"""Growing-degree-day status, history and recomputation routes."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from fieldsense.context import EngineContext, get_engine_context
from fieldsense.schemas.gdd import GDDRangeRequest, GDDRecordRead, GDDStatusRead
from fieldsense.services.gdd_service import GDDService

router = APIRouter(prefix="/gdd", tags=["gdd"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="gdd service failure")


@router.get("/{node_id}/status", response_model=GDDStatusRead)
async def get_status(node_id: int, context: EngineContext = Depends(get_engine_context)) -> GDDStatusRead:
	service = GDDService(context)
	try:
		return GDDStatusRead.model_validate(await service.get_status(node_id))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/{node_id}/history", response_model=list[GDDRecordRead])
async def get_history(
	node_id: int,
	start: date | None = Query(default=None),
	end: date | None = Query(default=None),
	context: EngineContext = Depends(get_engine_context),
) -> list[GDDRecordRead]:
	service = GDDService(context)
	try:
		records = await service.get_history(node_id, start, end)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [GDDRecordRead.model_validate(record) for record in records]


@router.post("/{node_id}/calculate", response_model=GDDRecordRead | None)
async def calculate_day(
	node_id: int,
	day: date = Query(),
	context: EngineContext = Depends(get_engine_context),
) -> GDDRecordRead | None:
	service = GDDService(context)
	try:
		record = await service.calculate_daily_gdd(node_id, day)
	except Exception as exc:
		raise _map_error(exc) from exc
	return GDDRecordRead.model_validate(record) if record is not None else None


@router.post("/{node_id}/recalculate", response_model=list[GDDRecordRead])
async def recalculate_range(
	node_id: int,
	payload: GDDRangeRequest,
	context: EngineContext = Depends(get_engine_context),
) -> list[GDDRecordRead]:
	service = GDDService(context)
	try:
		records = await service.recalculate_range(node_id, payload.start, payload.end)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [GDDRecordRead.model_validate(record) for record in records]


@router.post("/{node_id}/backfill", response_model=list[GDDRecordRead])
async def backfill(node_id: int, context: EngineContext = Depends(get_engine_context)) -> list[GDDRecordRead]:
	service = GDDService(context)
	try:
		records = await service.calculate_missing(node_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [GDDRecordRead.model_validate(record) for record in records]
