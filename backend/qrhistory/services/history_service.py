"""
QR History Backend - History Service (Shared Handler Layer)
=============================================================

What:  The five operations of the API, implemented once for both adapters.
How:   Each method takes a HistoryStore, performs one or more sequential store
       calls and returns a response schema. HTTP status selection stays with
       the adapters, except for create-or-touch which reports whether it
       created (201) or touched (200).
Who:   Called by the FastAPI routes (process server) and by the flat
       dispatcher (serverless function).

Create-or-touch flow (POST /history):

    text ──trim──▶ blank? ──yes──▶ ValidationError (400, no store call)
                     │ no
                     ▼
           find_by_content(text) ──found──▶ touch(id, now) ──▶ 200 isUpdate
                     │ not found
                     ▼
               insert(text) ──────────────────────────────────▶ 201

The lookup and the insert are two separate round trips. Two concurrent
submissions of the same text can both miss the lookup and both insert.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Tuple
from zoneinfo import ZoneInfo

from qrhistory.config import settings
from qrhistory.exceptions import ValidationError
from qrhistory.models.history import HistoryRecord
from qrhistory.schemas.history import (
    HealthResponse,
    HistoryItem,
    HistoryItemResponse,
    HistoryListResponse,
    MessageResponse,
)
from qrhistory.services.store_base import HistoryStore, RecordId, StoreProvider

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Record deleted"
CLEARED_MESSAGE = "All records cleared"
EMPTY_TEXT_MESSAGE = "Content must not be empty"


def utc_now_iso() -> str:
    """UTC now as "2024-01-15T12:34:56.789Z" (millisecond precision, Z suffix)."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_time(record: HistoryRecord, tz_name: Optional[str] = None) -> str:
    """
    Wall-clock "HH:MM:SS" of the record's created_at.

    tz_name: IANA zone; None or "" means the server's local timezone.
    """
    moment = record.created_at_datetime
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(ZoneInfo(tz_name)) if tz_name else moment.astimezone()
    return moment.strftime("%H:%M:%S")


def to_item(record: HistoryRecord) -> HistoryItem:
    return HistoryItem(
        id=record.id,
        text=record.content,
        time=format_time(record, settings.display_timezone),
        created_at=record.created_at,
    )


def normalize_text(text: Any) -> str:
    """
    Trim submitted text.

    Raises:
        ValidationError: text is missing, not a string, or blank after trimming
    """
    if not isinstance(text, str) or not text.strip():
        raise ValidationError(message=EMPTY_TEXT_MESSAGE, field="text")
    return text.strip()


class HistoryService:
    """
    Business logic for QR history records.

    Stateless: the store (or, for health, its provider) is passed to every
    call, so the same instance serves the process server and the serverless
    function.
    """

    async def health(self, store_provider: StoreProvider) -> HealthResponse:
        """
        Build the store, probe it and report connectivity.

        Takes the provider rather than the store: missing configuration or a
        client that cannot be created counts as `disconnected` just like a
        failed probe. Nothing here fails the request.
        """
        database = "connected"
        try:
            store = await store_provider()
            await store.probe()
        except Exception as e:
            database = "disconnected"
            logger.warning("Health check: store unreachable: %s", str(e))
        return HealthResponse(database=database, timestamp=utc_now_iso())

    async def list_history(self, store: HistoryStore) -> HistoryListResponse:
        records = await store.list_recent(settings.history_limit)
        return HistoryListResponse(data=[to_item(r) for r in records])

    async def submit(self, store: HistoryStore, text: Any) -> Tuple[HistoryItemResponse, bool]:
        """
        Create a record for `text`, or touch the existing one.

        Returns:
            (response, created): created is True for a new record (201) and
            False when an existing record was moved to the front (200).

        Raises:
            ValidationError: blank text
            StoreError:      any store failure
        """
        content = normalize_text(text)

        existing = await store.find_by_content(content)
        if existing is not None:
            record = await store.touch(existing.id, utc_now_iso())
            logger.info("History record %s touched", record.id)
            return HistoryItemResponse(data=to_item(record), is_update=True), False

        record = await store.insert(content)
        logger.info("History record %s created (%d chars)", record.id, len(content))
        return HistoryItemResponse(data=to_item(record)), True

    async def delete(self, store: HistoryStore, record_id: RecordId) -> MessageResponse:
        await store.delete(record_id)
        logger.info("History record %s deleted", record_id)
        return MessageResponse(message=DELETED_MESSAGE)

    async def clear(self, store: HistoryStore) -> MessageResponse:
        await store.delete_all()
        logger.info("History cleared")
        return MessageResponse(message=CLEARED_MESSAGE)


# ── Singleton Instance ────────────────────────────────────────────────────
history_service = HistoryService()
