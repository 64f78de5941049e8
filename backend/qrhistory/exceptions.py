"""
QR History Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the few error scenarios this
       service knows about.
How:   Each exception carries a message, an optional context dict and the HTTP
       status it maps to. Both hosting adapters (FastAPI exception handlers in
       main.py, the flat dispatcher in dispatch.py) translate them into the
       same `{success: false, error}` envelope.

Exception Hierarchy:
    QRHistoryError (base)          → 500
    ├── ConfigurationError         → 500 "not configured" (fatal for the process server)
    ├── ValidationError            → 400 Bad Request (client can fix)
    ├── NotFoundError              → 404 Not Found (serverless route miss)
    └── StoreError                 → 500, store message passed through verbatim

There is deliberately no transient/permanent split for store errors: nothing
is retried.
"""

from typing import Any, Dict, List, Optional


class QRHistoryError(Exception):
    """
    Base exception for all QR history application errors.

    Attributes:
        message:      Error description returned in the envelope's `error` field
        context:      Additional debug info (logged, never returned)
        status_code:  HTTP status the adapters respond with
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(QRHistoryError):
    """
    Raised when the store endpoint or key is not configured.

    Process server: logged and turned into exit status 1 before listening.
    Serverless:     answered with a 500 envelope on every request.
    """

    def __init__(
        self,
        missing: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        missing = missing or ["SUPABASE_URL", "SUPABASE_ANON_KEY"]
        message = (
            "Server is not configured for Supabase. "
            f"Set the following environment variables: {', '.join(missing)}"
        )
        ctx = context or {}
        ctx["missing"] = missing
        super().__init__(message=message, context=ctx)
        self.missing = missing


class ValidationError(QRHistoryError):
    """
    Raised when client input fails validation.

    When:    `text` missing, not a string, or blank after trimming; request body
             that is not a JSON object.
    HTTP:    400 Bad Request. The store is never called.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(QRHistoryError):
    """
    Raised by the serverless dispatcher when no route matches.

    The process server never raises it; unmatched paths fall through to the
    framework's own 404.
    """

    status_code = 404

    def __init__(
        self,
        message: str = "Not Found",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreError(QRHistoryError):
    """
    Raised when a call to the external store fails.

    What:    Wraps errors from the Supabase/PostgREST client (API errors and
             transport errors alike).
    HTTP:    500 Internal Server Error, with the store's message verbatim.
    """

    def __init__(
        self,
        message: str = "Store request failed",
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation
