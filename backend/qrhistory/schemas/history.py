"""
QR History Backend - Pydantic Response Schemas
================================================

What:  Pydantic models defining the JSON envelope every endpoint returns.
How:   FastAPI serializes them as route response models; the serverless
       dispatcher dumps them with `to_payload()`. Both paths use aliases
       (`createdAt`, `isUpdate`) and omit unset optional keys.

Envelope:
    { success: bool, data?: any, error?: str, message?: str, isUpdate?: bool }
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Envelope(BaseModel):
    """Base of every response body."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class HistoryItem(BaseModel):
    """
    What:  API projection of a HistoryRecord.

    Fields:
        id:        store identifier, unchanged
        text:      the trimmed content
        time:      wall-clock time of created_at ("HH:MM:SS", 24-hour)
        createdAt: raw created_at as returned by the store
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str]
    text: str
    time: str
    created_at: str = Field(alias="createdAt")


class HistoryListResponse(Envelope):
    """GET /history → newest first, at most `history_limit` items."""

    data: List[HistoryItem] = Field(default_factory=list)


class HistoryItemResponse(Envelope):
    """
    POST /history.

    201 → new record (`isUpdate` omitted)
    200 → existing record touched (`isUpdate: true`)
    """

    data: HistoryItem
    is_update: Optional[bool] = Field(default=None, alias="isUpdate")


class MessageResponse(Envelope):
    """DELETE /history and DELETE /history/{id}."""

    message: str


class HealthResponse(Envelope):
    """
    GET /health.

    Always `status: "healthy"` with HTTP 200; the store probe only decides
    between `connected` and `disconnected`.
    """

    status: str = Field(default="healthy")
    database: str = Field(description="Store connectivity: connected, disconnected")
    timestamp: str = Field(description="Server time of the check (UTC ISO 8601)")


class ErrorResponse(Envelope):
    """Every failure: `{success: false, error: <message>}`."""

    success: bool = False
    error: str
