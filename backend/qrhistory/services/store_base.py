"""
QR History Backend - Abstract History Store Interface
=======================================================

What:  Abstract base class defining the data access contract for history records.
How:   Concrete implementations inherit from HistoryStore and implement each
       query as one round trip to the store.
Who:   Called by HistoryService; implemented by SupabaseHistoryStore (and by an
       in-memory fake in the test suite).

Every method is exactly one query against the table. There is no
query builder, caching or connection pooling at this layer.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Union

from qrhistory.models.history import HistoryRecord

RecordId = Union[int, str]


class HistoryStore(ABC):
    """
    Abstract interface for the `qr_history` table.

    Contract:
        - Implementations wrap every client/transport failure in StoreError
        - Methods never retry
        - Deleting ids that do not exist is not an error
    """

    @abstractmethod
    async def probe(self) -> None:
        """
        Cheapest possible existence query (select one id).

        Raises:
            StoreError: the store is unreachable or rejected the query.
        """

    @abstractmethod
    async def list_recent(self, limit: int) -> List[HistoryRecord]:
        """Up to `limit` records ordered by created_at descending."""

    @abstractmethod
    async def find_by_content(self, content: str) -> Optional[HistoryRecord]:
        """First record whose content equals `content` exactly, or None."""

    @abstractmethod
    async def touch(self, record_id: RecordId, timestamp: str) -> HistoryRecord:
        """Set created_at of `record_id` to `timestamp`; return the updated row."""

    @abstractmethod
    async def insert(self, content: str) -> HistoryRecord:
        """Insert a new record; the store assigns id and created_at."""

    @abstractmethod
    async def delete(self, record_id: RecordId) -> None:
        """Delete the record with `record_id` (no-op when absent)."""

    @abstractmethod
    async def delete_all(self) -> None:
        """Delete every record in the table."""


# Coroutine returning the shared store; building it may raise
# ConfigurationError or StoreError.
StoreProvider = Callable[[], Awaitable[HistoryStore]]
