"""
QR History Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── memory_store:      In-memory HistoryStore (no Supabase needed)
    ├── memory_provider:   Store provider coroutine returning memory_store
    ├── test_client:       HTTPX AsyncClient bound to the FastAPI process server
    ├── serverless_client: HTTPX AsyncClient bound to the serverless ASGI app
    └── sample_record:     A HistoryRecord as the store would return it
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

# Override settings for testing BEFORE any package imports
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "test-key-not-real"
os.environ["STATIC_DIR"] = "./__no_static_dir_in_tests__"
os.environ["DISPLAY_TIMEZONE"] = "UTC"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from qrhistory.exceptions import StoreError
from qrhistory.models.history import HistoryRecord
from qrhistory.services.store_base import HistoryStore, RecordId
from qrhistory.services.supabase_store import (
    get_history_store,
    get_store_provider,
    reset_history_store,
)


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Store
# ══════════════════════════════════════════════════════════════════════════

class InMemoryHistoryStore(HistoryStore):
    """
    HistoryStore fake backed by a dict.

    - ids are UUID strings, like the real table
    - created_at comes from a fake clock that advances one second per insert,
      so insertion order is also created_at order
    - `fail(operation, exc)` makes the next calls of that operation raise
    - `calls` records every operation name, in order
    """

    def __init__(self):
        self.rows: Dict[str, Dict[str, str]] = {}
        self.calls: List[str] = []
        self.failures: Dict[str, Exception] = {}
        self._clock = datetime(2024, 1, 15, 8, 0, 0, tzinfo=timezone.utc)

    def fail(self, operation: str, exc: Optional[Exception] = None) -> None:
        self.failures[operation] = exc or StoreError(message=f"{operation} failed", operation=operation)

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def _tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    @property
    def mutations(self) -> List[str]:
        return [c for c in self.calls if c in ("touch", "insert", "delete", "delete_all")]

    async def probe(self) -> None:
        self._enter("probe")

    async def list_recent(self, limit: int) -> List[HistoryRecord]:
        self._enter("list")
        rows = sorted(
            self.rows.values(),
            key=lambda r: datetime.fromisoformat(r["created_at"]),
            reverse=True,
        )
        return [HistoryRecord.model_validate(r) for r in rows[:limit]]

    async def find_by_content(self, content: str) -> Optional[HistoryRecord]:
        self._enter("find")
        for row in self.rows.values():
            if row["content"] == content:
                return HistoryRecord.model_validate(row)
        return None

    async def touch(self, record_id: RecordId, timestamp: str) -> HistoryRecord:
        self._enter("touch")
        row = self.rows[str(record_id)]
        row["created_at"] = timestamp
        return HistoryRecord.model_validate(row)

    async def insert(self, content: str) -> HistoryRecord:
        self._enter("insert")
        record_id = str(uuid.uuid4())
        self.rows[record_id] = {"id": record_id, "content": content, "created_at": self._tick()}
        return HistoryRecord.model_validate(self.rows[record_id])

    async def delete(self, record_id: RecordId) -> None:
        self._enter("delete")
        self.rows.pop(str(record_id), None)

    async def delete_all(self) -> None:
        self._enter("delete_all")
        self.rows.clear()


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def _fresh_store_handle():
    """Never let a memoized Supabase handle leak between tests."""
    reset_history_store()
    yield
    reset_history_store()


@pytest.fixture
def memory_store():
    return InMemoryHistoryStore()


@pytest.fixture
def memory_provider(memory_store):
    async def _provider():
        return memory_store
    return _provider


@pytest.fixture
def sample_record():
    return HistoryRecord(
        id="0b7c1d6e-2f0a-4b8e-9a51-3c2d4e5f6a7b",
        content="https://example.com",
        created_at="2024-01-15T12:34:56.789012+00:00",
    )


@pytest_asyncio.fixture
async def test_client(memory_provider):
    """
    HTTPX AsyncClient talking to the FastAPI app, with the store dependencies
    replaced by `memory_store`. The lifespan (config check, banner) is not run.
    """
    from qrhistory.main import app

    app.dependency_overrides[get_history_store] = memory_provider
    app.dependency_overrides[get_store_provider] = lambda: memory_provider
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def serverless_client(memory_provider, monkeypatch):
    """HTTPX AsyncClient talking to the serverless ASGI app backed by `memory_store`."""
    from qrhistory import serverless

    monkeypatch.setattr(serverless, "get_history_store", memory_provider)
    transport = ASGITransport(app=serverless.app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
