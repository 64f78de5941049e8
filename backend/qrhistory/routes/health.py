"""
QR History Backend - Health Check Route
=========================================

What:  {prefix}/health for monitoring and the frontend's connectivity badge.
How:   Hands the store provider to HistoryService, which builds the store
       and runs its one-row probe inside one guard.

Status:
    Always HTTP 200 with `status: "healthy"`. `database` is `connected` when
    the probe succeeds and `disconnected` otherwise, including when the
    Supabase client cannot be created. Failures are logged, never raised.
"""

import logging

from fastapi import APIRouter, Depends

from qrhistory.config import settings
from qrhistory.schemas.history import HealthResponse
from qrhistory.services.history_service import history_service
from qrhistory.services.store_base import StoreProvider
from qrhistory.services.supabase_store import get_store_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.api_prefix, tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Reports liveness and whether the Supabase store answered a trivial query.",
)
async def health_check(
    store_provider: StoreProvider = Depends(get_store_provider),
) -> HealthResponse:
    return await history_service.health(store_provider)
