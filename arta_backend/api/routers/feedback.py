"""Feedback submission routes."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from arta_backend.api.dependencies import feedback_rate_limit, feedback_service, read_rate_limit
from arta_backend.models.feedback import FeedbackRecord
from arta_backend.services.feedback_service import MAX_LIST_LIMIT, FeedbackService
from arta_backend.utils.general import convert_to_json_safe

router = APIRouter(prefix="/feedback", tags=["feedback"])


def _serialize(record: FeedbackRecord) -> dict:
    return {"id": record.id, "data": convert_to_json_safe(record.data)}


@router.post("", dependencies=[Depends(feedback_rate_limit)])
def create_feedback(
    payload: Optional[dict[str, Any]] = Body(default=None),
    service: FeedbackService = Depends(feedback_service),
) -> JSONResponse:
    result = service.submit(payload)
    if not result.success or result.data is None:
        return JSONResponse(status_code=result.status_code, content={"error": result.error})
    return JSONResponse(status_code=201, content=_serialize(result.data))


@router.get("/{feedback_id}", dependencies=[Depends(read_rate_limit)])
def read_feedback(
    feedback_id: str,
    service: FeedbackService = Depends(feedback_service),
) -> JSONResponse:
    result = service.get(feedback_id)
    if not result.success or result.data is None:
        return JSONResponse(status_code=result.status_code, content={"error": result.error})
    return JSONResponse(content=_serialize(result.data))


@router.get("", dependencies=[Depends(read_rate_limit)])
def list_feedback(
    limit: int = Query(default=20, ge=1, le=MAX_LIST_LIMIT),
    service: FeedbackService = Depends(feedback_service),
) -> JSONResponse:
    """Most recent submissions first."""
    result = service.list_recent(limit)
    if not result.success or result.data is None:
        return JSONResponse(status_code=result.status_code, content={"error": result.error})
    items = [_serialize(record) for record in result.data]
    return JSONResponse(content={"count": len(items), "items": items})
