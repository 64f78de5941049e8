"""
QR History Backend - FastAPI Application Factory (Process Server)
===================================================================

What:  Creates and configures the long-running FastAPI application.
How:   Factory pattern: create_app() returns a configured FastAPI instance;
       run() validates configuration and serves it with uvicorn.
Who:   `uvicorn qrhistory.main:app` or the `qrhistory-server` console script.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────────────┐              │
    │  │  Access log  │→│ CORS (allow all) │              │
    │  └──────────────┘ └──────────────────┘              │
    │                                                     │
    │  Routes:                                            │
    │  ┌───────────────────────────┐ ┌─────────────────┐  │
    │  │ GET/POST/DELETE /history  │ │ GET /health     │  │
    │  └───────────────────────────┘ └─────────────────┘  │
    │  Static frontend mounted at "/" (when present)      │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ Store→500 │ NotConfigured→500│  │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  setup logging, refuse to start without Supabase credentials,
              log the banner.
    Shutdown: nothing to release (the Supabase client holds no connection).
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from qrhistory import __version__
from qrhistory.config import settings
from qrhistory.exceptions import (
    ConfigurationError,
    QRHistoryError,
    StoreError,
    ValidationError,
)
from qrhistory.logging_config import setup_logging
from qrhistory.middleware.logging import AccessLogMiddleware
from qrhistory.routes import health, history
from qrhistory.schemas.history import ErrorResponse

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Startup Banner
# ══════════════════════════════════════════════════════════════════════════

def log_banner() -> None:
    """Log where the server listens and which store it talks to."""
    logger.info("=" * 60)
    logger.info("QR Code History backend v%s", __version__)
    logger.info("Server running at http://%s:%d", settings.host, settings.port)
    logger.info("API: http://%s:%d%s/history", settings.host, settings.port, settings.api_prefix)
    logger.info("Supabase store: %s (table=%s)", settings.supabase_url, settings.history_table)
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        logger.info("Static files: %s", static_dir.resolve())
    logger.info("=" * 60)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup sequence:
        1. Setup logging
        2. Validate Supabase configuration; a ConfigurationError aborts startup
        3. Log the banner

    The store client itself is created lazily on the first request.
    """
    setup_logging()

    try:
        settings.validate_required()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e.message)
        logger.error("Set them in the environment or in a .env file (see .env.example).")
        raise

    log_banner()

    yield

    logger.info("QR Code History backend shut down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).to_payload(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the `{success: false, error}` envelope.

    Handler hierarchy:
        ValidationError         → 400 (blank text)
        RequestValidationError  → 400 (malformed JSON body)
        StoreError              → 500, store message verbatim
        ConfigurationError      → 500, "not configured"
        QRHistoryError (base)   → exc.status_code
        Exception (fallback)    → 500, str(exc)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s", exc.message)
        return _error_response(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("Malformed request body on %s: %s", request.url.path, exc.errors())
        return _error_response(400, "Request body must be a JSON object with a 'text' field")

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error("Store error: %s | Context: %s", exc.message, exc.context)
        return _error_response(500, exc.message)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("%s", exc.message)
        return _error_response(500, exc.message)

    @app.exception_handler(QRHistoryError)
    async def handle_app_error(request: Request, exc: QRHistoryError):
        logger.error("%s: %s", type(exc).__name__, exc.message)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return _error_response(500, str(exc))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="QR Code History API",
        description="Stores the texts a QR code generator has encoded, newest first.",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # Access log → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware)

    register_exception_handlers(app)

    app.include_router(history.router)
    app.include_router(health.router)

    # Mounted last: "/" would otherwise shadow the API routes
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")

    return app


app = create_app()


def run() -> None:
    """
    Console entry point (`qrhistory-server`).

    Exits with status 1 before binding the port when SUPABASE_URL or
    SUPABASE_ANON_KEY is missing.
    """
    setup_logging()
    try:
        settings.validate_required()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e.message)
        logger.error("Set them in the environment or in a .env file (see .env.example).")
        sys.exit(1)

    uvicorn.run(
        "qrhistory.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
