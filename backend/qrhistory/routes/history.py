"""
QR History Backend - History Route Handlers
=============================================

What:  GET/POST/DELETE on {prefix}/history for the process server.
How:   Each route pulls the shared store from the dependency and delegates to
       HistoryService; errors propagate to the handlers registered in main.py.
Who:   Called by the QR generator frontend.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Response

from qrhistory.config import settings
from qrhistory.schemas.history import (
    ErrorResponse,
    HistoryItemResponse,
    HistoryListResponse,
    MessageResponse,
)
from qrhistory.services.history_service import history_service
from qrhistory.services.store_base import HistoryStore
from qrhistory.services.supabase_store import get_history_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.api_prefix, tags=["History"])

_errors = {
    500: {"description": "Store error or server not configured", "model": ErrorResponse},
}


@router.get(
    "/history",
    response_model=HistoryListResponse,
    response_model_exclude_none=True,
    responses=_errors,
    summary="List recent history",
    description="Returns the most recent records (newest first), capped at HISTORY_LIMIT.",
)
async def list_history(
    store: HistoryStore = Depends(get_history_store),
) -> HistoryListResponse:
    return await history_service.list_history(store)


@router.post(
    "/history",
    response_model=HistoryItemResponse,
    response_model_exclude_none=True,
    status_code=201,
    responses={
        200: {"description": "Existing record touched", "model": HistoryItemResponse},
        201: {"description": "New record created", "model": HistoryItemResponse},
        400: {"description": "Blank text", "model": ErrorResponse},
        **_errors,
    },
    summary="Add text to history (or move an existing entry to the front)",
)
async def submit_history(
    response: Response,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    store: HistoryStore = Depends(get_history_store),
) -> HistoryItemResponse:
    """
    Create-or-touch.

    The body is read as a plain JSON object so that a missing or blank
    `text` is reported as the 400 envelope by HistoryService, not as
    FastAPI's 422.
    """
    text = payload.get("text") if payload else None
    result, created = await history_service.submit(store, text)
    if not created:
        response.status_code = 200
    return result


@router.delete(
    "/history/{record_id}",
    response_model=MessageResponse,
    responses=_errors,
    summary="Delete one history record",
)
async def delete_history(
    record_id: str,
    store: HistoryStore = Depends(get_history_store),
) -> MessageResponse:
    return await history_service.delete(store, record_id)


@router.delete(
    "/history",
    response_model=MessageResponse,
    responses=_errors,
    summary="Delete every history record",
)
async def clear_history(
    store: HistoryStore = Depends(get_history_store),
) -> MessageResponse:
    return await history_service.clear(store)
