"""
QR History Backend - Serverless Request Dispatcher
====================================================

What:  Flat router for the per-request function: method + path segment →
       one HistoryService operation → envelope + status code + CORS headers.
How:   Framework-free. Takes the already-parsed method, path and JSON body and
       returns a DispatchResult; qrhistory.serverless adapts it to ASGI.
Who:   Called once per request by the serverless entry point.

Routing table (the `/api` prefix is optional):

    OPTIONS  *                 → 200, empty body (CORS preflight)
    GET      /health           → health (always 200, builds the store itself)
    GET      /history          → list
    POST     /history          → create-or-touch (201 new / 200 touched)
    DELETE   /history/{id}     → delete one
    DELETE   /history          → delete all
    anything else              → 404 {success: false, error: "Not Found"}

Errors:
    ConfigurationError → 500 "not configured" (history routes only)
    ValidationError    → 400
    StoreError         → 500 with the store's message
    other Exception    → 500 with str(exc)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from qrhistory.config import settings
from qrhistory.exceptions import NotFoundError, QRHistoryError, ValidationError
from qrhistory.schemas.history import Envelope, ErrorResponse
from qrhistory.services.history_service import history_service
from qrhistory.services.store_base import StoreProvider
from qrhistory.services.supabase_store import get_history_store

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@dataclass
class DispatchResult:
    """Status, body (None = no body) and headers of a serverless response."""

    status_code: int
    payload: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))


def split_path(path: str, prefix: Optional[str] = None) -> List[str]:
    """
    "/api/history/42?x=1" → ["history", "42"]

    The prefix is only stripped on a segment boundary, so "/apiary" keeps
    its first segment.
    """
    prefix = settings.api_prefix if prefix is None else prefix
    path = path.split("?", 1)[0]
    if prefix and (path == prefix or path.startswith(prefix + "/")):
        path = path[len(prefix):]
    return [part for part in path.split("/") if part]


def _respond(status_code: int, envelope: Envelope) -> DispatchResult:
    return DispatchResult(status_code=status_code, payload=envelope.to_payload())


async def _route(
    method: str,
    resource: Optional[str],
    record_id: Optional[str],
    body: Any,
    store_provider: StoreProvider,
) -> DispatchResult:
    if resource == "health" and method == "GET":
        return _respond(200, await history_service.health(store_provider))

    if resource == "history" and method in ("GET", "POST", "DELETE"):
        store = await store_provider()

        if method == "GET":
            return _respond(200, await history_service.list_history(store))

        if method == "POST":
            text = body.get("text") if isinstance(body, dict) else None
            response, created = await history_service.submit(store, text)
            return _respond(201 if created else 200, response)

        if method == "DELETE" and record_id:
            return _respond(200, await history_service.delete(store, record_id))

        if method == "DELETE":
            return _respond(200, await history_service.clear(store))

    raise NotFoundError()


async def dispatch(
    method: str,
    path: str,
    body: Any = None,
    store_provider: StoreProvider = get_history_store,
) -> DispatchResult:
    """
    Handle one serverless request.

    Args:
        method:         HTTP method (any case)
        path:           request path, with or without the API prefix
        body:           decoded JSON body, or None
        store_provider: coroutine returning the (memoized) HistoryStore

    Returns:
        DispatchResult; never raises.
    """
    method = method.upper()

    if method == "OPTIONS":
        return DispatchResult(status_code=200)

    try:
        parts = split_path(path)
        resource = parts[0] if parts else None
        record_id = parts[1] if len(parts) > 1 else None

        return await _route(method, resource, record_id, body, store_provider)

    except ValidationError as e:
        logger.warning("Validation error on %s %s: %s", method, path, e.message)
        return _respond(e.status_code, ErrorResponse(error=e.message))
    except NotFoundError as e:
        return _respond(e.status_code, ErrorResponse(error=e.message))
    except QRHistoryError as e:
        logger.error("API error on %s %s: %s | Context: %s", method, path, e.message, e.context)
        return _respond(e.status_code, ErrorResponse(error=e.message))
    except Exception as e:
        logger.error("Unexpected error on %s %s: %s", method, path, str(e), exc_info=True)
        return _respond(500, ErrorResponse(error=str(e)))
