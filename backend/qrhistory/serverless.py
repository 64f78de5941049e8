"""
QR History Backend - Serverless Function Entry Point
======================================================

What:  ASGI callable for function-per-request hosting (e.g. Vercel's Python
       runtime via api/index.py).
How:   A Starlette app with one catch-all route. The route decodes the JSON
       body and hands method, path and body to qrhistory.dispatch, which does
       all routing, CORS and error shaping.
When:  Module import happens once per cold start; logging is configured then.
       The store client is built on the first request and kept while the
       instance stays warm.

Unlike the process server this entry point never refuses to start: missing
Supabase variables produce a 500 "not configured" envelope per request.
"""

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from qrhistory.dispatch import dispatch
from qrhistory.logging_config import setup_logging
from qrhistory.services.supabase_store import get_history_store

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def handle(request: Request) -> Response:
    body = None
    if request.method in ("POST", "PUT", "PATCH"):
        try:
            body = await request.json()
        except ValueError:
            body = None  # malformed JSON is treated as a missing body → 400

    result = await dispatch(
        request.method,
        request.url.path,
        body,
        store_provider=get_history_store,
    )

    if result.payload is None:
        return Response(status_code=result.status_code, headers=result.headers)
    return JSONResponse(result.payload, status_code=result.status_code, headers=result.headers)


setup_logging()

app = Starlette(
    routes=[Route("/{path:path}", handle, methods=ALL_METHODS)],
)
