"""Crop catalog and recommendation routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from fieldsense.context import EngineContext, get_engine_context
from fieldsense.schemas.crop import CropRead, CropRecommendationRead
from fieldsense.services.crop_service import CropRecommendationService

router = APIRouter(prefix="/crops", tags=["crops"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="crop service failure")


@router.get("", response_model=list[CropRead])
async def list_crops(
	valid_for_region: bool | None = Query(default=None),
	context: EngineContext = Depends(get_engine_context),
) -> list[CropRead]:
	service = CropRecommendationService(context)
	try:
		catalog = await service.list_catalog(valid_for_region)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [CropRead.from_crop(crop) for crop in catalog]


@router.get("/recommendations/{node_id}", response_model=CropRecommendationRead)
async def recommend_crops(
	node_id: int,
	top_n: int | None = Query(default=None, ge=1, le=50),
	context: EngineContext = Depends(get_engine_context),
) -> CropRecommendationRead:
	service = CropRecommendationService(context)
	try:
		return CropRecommendationRead.model_validate(await service.recommend(node_id, top_n))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/{name}", response_model=CropRead)
async def get_crop(name: str, context: EngineContext = Depends(get_engine_context)) -> CropRead:
	service = CropRecommendationService(context)
	try:
		return CropRead.from_crop(await service.get_crop(name))
	except Exception as exc:
		raise _map_error(exc) from exc
