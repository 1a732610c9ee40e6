"""Irrigation decision routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from fieldsense.context import EngineContext, get_engine_context
from fieldsense.schemas.irrigation import BatchRecommendationRead, BatchRequest, IrrigationDecisionRead
from fieldsense.services.irrigation_service import IrrigationService

router = APIRouter(prefix="/irrigation", tags=["irrigation"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="irrigation decision failure")


@router.get("/{node_id}/decision", response_model=IrrigationDecisionRead)
async def get_decision(node_id: int, context: EngineContext = Depends(get_engine_context)) -> IrrigationDecisionRead:
	service = IrrigationService(context)
	try:
		return IrrigationDecisionRead.model_validate(await service.make_decision(node_id))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.post("/recommendations", response_model=BatchRecommendationRead)
async def batch_recommendations(
	payload: BatchRequest,
	context: EngineContext = Depends(get_engine_context),
) -> BatchRecommendationRead:
	service = IrrigationService(context)
	try:
		return BatchRecommendationRead.model_validate(await service.recommend_batch(payload.node_ids))
	except Exception as exc:
		raise _map_error(exc) from exc
