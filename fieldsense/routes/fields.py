"""Field configuration and crop-cycle routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from fieldsense.context import EngineContext, get_engine_context
from fieldsense.schemas.field import CropConfirm, FieldCreate, FieldRead, FieldUpdate
from fieldsense.services.field_service import FieldService

router = APIRouter(prefix="/fields", tags=["fields"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected field service failure",
	)


@router.post("", response_model=FieldRead, status_code=status.HTTP_201_CREATED)
async def create_field(
	payload: FieldCreate,
	context: EngineContext = Depends(get_engine_context),
) -> FieldRead:
	service = FieldService(context)
	try:
		created = await service.create_field(
			payload.node_id,
			payload.field_name,
			payload.soil_texture,
			payload.latitude,
			payload.longitude,
		)
	except Exception as exc:
		raise _map_error(exc) from exc
	return FieldRead.model_validate(created)


@router.get("", response_model=list[FieldRead])
async def list_fields(context: EngineContext = Depends(get_engine_context)) -> list[FieldRead]:
	service = FieldService(context)
	try:
		fields = await service.list_fields()
	except Exception as exc:
		raise _map_error(exc) from exc
	return [FieldRead.model_validate(item) for item in fields]


@router.get("/{node_id}", response_model=FieldRead)
async def get_field(node_id: int, context: EngineContext = Depends(get_engine_context)) -> FieldRead:
	service = FieldService(context)
	try:
		return FieldRead.model_validate(await service.get_field(node_id))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.patch("/{node_id}", response_model=FieldRead)
async def update_field(
	node_id: int,
	payload: FieldUpdate,
	context: EngineContext = Depends(get_engine_context),
) -> FieldRead:
	service = FieldService(context)
	try:
		updated = await service.update_field(node_id, payload.model_dump(exclude_none=True))
	except Exception as exc:
		raise _map_error(exc) from exc
	return FieldRead.model_validate(updated)


@router.post("/{node_id}/crop", response_model=FieldRead)
async def confirm_crop(
	node_id: int,
	payload: CropConfirm,
	context: EngineContext = Depends(get_engine_context),
) -> FieldRead:
	service = FieldService(context)
	try:
		updated = await service.confirm_crop(node_id, payload.crop_type, payload.sowing_date)
	except Exception as exc:
		raise _map_error(exc) from exc
	return FieldRead.model_validate(updated)
