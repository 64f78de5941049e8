"""
QR History Backend - Supabase History Store
=============================================

What:  HistoryStore implementation over the async Supabase client.
How:   Each method builds one PostgREST query with the client's fluent API
       (select/insert/update/delete + eq/order/limit) and awaits it once.
       Client errors, and rows that do not parse as HistoryRecord, are wrapped
       in StoreError with the underlying message intact.
Who:   Obtained through get_history_store() by both hosting adapters.
When:  The client is built on the first request that needs it and memoized
       for the lifetime of the process (or warm serverless instance).

Client lifecycle:
    The Supabase client talks to PostgREST over plain HTTP requests, so there
    is no connection to tear down. The memoized handle is shared by all
    requests and never closed.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from postgrest.types import ReturnMethod
from pydantic import ValidationError as RowValidationError
from supabase import AsyncClient, acreate_client

from qrhistory.config import Settings, settings
from qrhistory.exceptions import StoreError
from qrhistory.models.history import HistoryRecord
from qrhistory.services.store_base import HistoryStore, RecordId, StoreProvider

logger = logging.getLogger(__name__)


class SupabaseHistoryStore(HistoryStore):
    """
    Thin call-through to the `qr_history` table.

    Attributes:
        client: Async Supabase client (shared, never closed)
        table:  Table name, `qr_history` unless overridden by HISTORY_TABLE
    """

    def __init__(self, client: AsyncClient, table: str = "qr_history"):
        self.client = client
        self.table = table

    def _query(self):
        return self.client.table(self.table)

    async def _execute(self, operation: str, query) -> List[Dict[str, Any]]:
        """Await a built query; return its rows or raise StoreError."""
        try:
            response = await query.execute()
        except APIError as e:
            raise StoreError(
                message=e.message or str(e),
                operation=operation,
                context={"code": e.code, "details": e.details, "hint": e.hint},
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(
                message=str(e) or type(e).__name__,
                operation=operation,
                context={"error_type": type(e).__name__},
            ) from e
        except Exception as e:
            # e.g. a non-JSON body from a proxy in front of PostgREST
            raise StoreError(
                message=str(e) or type(e).__name__,
                operation=operation,
                context={"error_type": type(e).__name__},
            ) from e
        return response.data or []

    def _record(self, operation: str, row: Dict[str, Any]) -> HistoryRecord:
        try:
            return HistoryRecord.model_validate(row)
        except RowValidationError as e:
            raise StoreError(
                message=f"Store returned a malformed row for {operation}",
                operation=operation,
                context={"errors": e.errors(include_url=False)},
            ) from e

    def _single(self, operation: str, rows: List[Dict[str, Any]]) -> HistoryRecord:
        if not rows:
            raise StoreError(
                message=f"Store returned no row for {operation}",
                operation=operation,
            )
        return self._record(operation, rows[0])

    async def probe(self) -> None:
        await self._execute("probe", self._query().select("id").limit(1))

    async def list_recent(self, limit: int) -> List[HistoryRecord]:
        rows = await self._execute(
            "list",
            self._query().select("*").order("created_at", desc=True).limit(limit),
        )
        return [self._record("list", row) for row in rows]

    async def find_by_content(self, content: str) -> Optional[HistoryRecord]:
        rows = await self._execute(
            "find",
            self._query().select("*").eq("content", content).limit(1),
        )
        return self._record("find", rows[0]) if rows else None

    async def touch(self, record_id: RecordId, timestamp: str) -> HistoryRecord:
        rows = await self._execute(
            "touch",
            self._query().update({"created_at": timestamp}).eq("id", record_id),
        )
        return self._single("touch", rows)

    async def insert(self, content: str) -> HistoryRecord:
        rows = await self._execute(
            "insert",
            self._query().insert({"content": content}),
        )
        return self._single("insert", rows)

    async def delete(self, record_id: RecordId) -> None:
        # return=minimal: PostgREST sends no rows back
        await self._execute(
            "delete",
            self._query().delete(returning=ReturnMethod.minimal).eq("id", record_id),
        )

    async def delete_all(self) -> None:
        # PostgREST refuses an unfiltered DELETE; `id IS NOT NULL` matches every row
        await self._execute(
            "delete_all",
            self._query().delete(returning=ReturnMethod.minimal).not_.is_("id", "null"),
        )


# ── Lazily Built Shared Handle ────────────────────────────────────────────
_store: Optional[HistoryStore] = None


async def create_history_store(config: Settings = settings) -> SupabaseHistoryStore:
    """
    Build a SupabaseHistoryStore from settings.

    Raises:
        ConfigurationError: SUPABASE_URL or SUPABASE_ANON_KEY is missing
        StoreError:         the client rejected the URL or key
    """
    config.validate_required()
    try:
        client = await acreate_client(config.supabase_url, config.supabase_anon_key)
    except Exception as e:
        logger.error("Could not create Supabase client: %s", str(e))
        raise StoreError(message=str(e), operation="connect") from e
    logger.info("Supabase client created for %s (table=%s)", config.supabase_url, config.history_table)
    return SupabaseHistoryStore(client, table=config.history_table)


async def get_history_store() -> HistoryStore:
    """
    Return the process-wide store, creating it on first use.

    Used as a FastAPI dependency by the process server and as the store
    provider of the serverless dispatcher.
    """
    global _store
    if _store is None:
        _store = await create_history_store()
    return _store


def get_store_provider() -> StoreProvider:
    """
    FastAPI dependency for routes that must build the store themselves.

    The health route uses it so that a failure to create the client is
    reported as `disconnected` instead of failing the request.
    """
    return get_history_store


def reset_history_store() -> None:
    """Forget the memoized store (next call to get_history_store rebuilds it)."""
    global _store
    _store = None
