"""
QR History Backend - History Record Model
===========================================

What:  Typed view of one row of the external `qr_history` table.
How:   A Pydantic model validated from the dicts the PostgREST client returns.
Who:   Produced by SupabaseHistoryStore, consumed by HistoryService.

Table (owned by the store, not by this service):

    qr_history
    ├── id          uuid / bigint, assigned by the store
    ├── content     text, trimmed, non-empty
    └── created_at  timestamptz, creation or most recent touch

There is no unique constraint on `content`; "one record per content" is kept
by HistoryService's lookup-before-insert.
"""

from datetime import datetime
from typing import Union

from pydantic import BaseModel, TypeAdapter

_timestamp_adapter = TypeAdapter(datetime)


class HistoryRecord(BaseModel):
    """
    One stored QR history entry.

    `id` is opaque: it is passed back to the store exactly as received, so an
    integer key stays an integer and a UUID stays a string.

    `created_at` is kept as the raw string the store returned; it is echoed
    verbatim as `createdAt` and only parsed for display.
    """

    id: Union[int, str]
    content: str
    created_at: str

    model_config = {"extra": "ignore"}

    @property
    def created_at_datetime(self) -> datetime:
        return _timestamp_adapter.validate_python(self.created_at)
