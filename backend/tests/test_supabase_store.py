"""
QR History Backend - Supabase Store Unit Tests
================================================

What:  Tests for SupabaseHistoryStore and the memoized store factory.
How:   The async Supabase client is replaced by a MagicMock whose fluent
       query builder returns itself, so each test can assert the exact
       PostgREST calls and feed canned rows back through `execute()`.

What we test:
    ✅ Each operation builds the expected query
    ✅ Rows are validated into HistoryRecord
    ✅ APIError, transport and other client errors become StoreError with the
       message intact; malformed rows become StoreError too
    ✅ Deletes do not ask for the removed rows back
    ✅ The client is created once and reused; missing config raises
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from postgrest.exceptions import APIError
from postgrest.types import ReturnMethod

from qrhistory.config import Settings
from qrhistory.exceptions import ConfigurationError, StoreError
from qrhistory.services import supabase_store
from qrhistory.services.supabase_store import (
    SupabaseHistoryStore,
    create_history_store,
    get_history_store,
)

ROW = {
    "id": "0b7c1d6e-2f0a-4b8e-9a51-3c2d4e5f6a7b",
    "content": "hello",
    "created_at": "2024-01-15T12:34:56.789012+00:00",
}


def make_client(rows=None, error=None):
    """A fake AsyncClient; `client.builder` is the shared fluent query builder."""
    builder = MagicMock()
    for method in ("select", "insert", "update", "delete", "eq", "order", "limit", "is_"):
        getattr(builder, method).return_value = builder
    builder.not_ = builder
    if error is not None:
        builder.execute = AsyncMock(side_effect=error)
    else:
        builder.execute = AsyncMock(return_value=MagicMock(data=rows if rows is not None else []))

    client = MagicMock()
    client.table.return_value = builder
    client.builder = builder
    return client


class TestQueries:
    """Tests for the PostgREST calls each operation makes."""

    @pytest.mark.asyncio
    async def test_probe_selects_one_id(self):
        client = make_client()
        await SupabaseHistoryStore(client).probe()

        client.table.assert_called_with("qr_history")
        client.builder.select.assert_called_once_with("id")
        client.builder.limit.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_list_recent_orders_newest_first(self):
        client = make_client(rows=[ROW])
        records = await SupabaseHistoryStore(client).list_recent(50)

        client.builder.select.assert_called_once_with("*")
        client.builder.order.assert_called_once_with("created_at", desc=True)
        client.builder.limit.assert_called_once_with(50)
        assert len(records) == 1
        assert records[0].content == "hello"
        assert records[0].created_at == ROW["created_at"]

    @pytest.mark.asyncio
    async def test_find_by_content(self):
        client = make_client(rows=[ROW])
        record = await SupabaseHistoryStore(client).find_by_content("hello")

        client.builder.eq.assert_called_once_with("content", "hello")
        client.builder.limit.assert_called_once_with(1)
        assert record.id == ROW["id"]

    @pytest.mark.asyncio
    async def test_find_by_content_miss(self):
        client = make_client(rows=[])
        assert await SupabaseHistoryStore(client).find_by_content("nope") is None

    @pytest.mark.asyncio
    async def test_touch_updates_created_at(self):
        client = make_client(rows=[{**ROW, "created_at": "2024-02-01T00:00:00+00:00"}])
        record = await SupabaseHistoryStore(client).touch(ROW["id"], "2024-02-01T00:00:00+00:00")

        client.builder.update.assert_called_once_with({"created_at": "2024-02-01T00:00:00+00:00"})
        client.builder.eq.assert_called_once_with("id", ROW["id"])
        assert record.created_at == "2024-02-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_insert(self):
        client = make_client(rows=[ROW])
        record = await SupabaseHistoryStore(client).insert("hello")

        client.builder.insert.assert_called_once_with({"content": "hello"})
        assert record.id == ROW["id"]

    @pytest.mark.asyncio
    async def test_insert_without_returned_row_is_store_error(self):
        client = make_client(rows=[])
        with pytest.raises(StoreError, match="no row"):
            await SupabaseHistoryStore(client).insert("hello")

    @pytest.mark.asyncio
    async def test_delete_one(self):
        client = make_client()
        await SupabaseHistoryStore(client).delete(42)

        client.builder.delete.assert_called_once_with(returning=ReturnMethod.minimal)
        client.builder.eq.assert_called_once_with("id", 42)

    @pytest.mark.asyncio
    async def test_delete_all_matches_every_row(self):
        client = make_client()
        await SupabaseHistoryStore(client).delete_all()

        client.builder.delete.assert_called_once_with(returning=ReturnMethod.minimal)
        client.builder.is_.assert_called_once_with("id", "null")
        client.builder.eq.assert_not_called()

    @pytest.mark.asyncio
    async def test_custom_table(self):
        client = make_client()
        await SupabaseHistoryStore(client, table="history_v2").probe()
        client.table.assert_called_with("history_v2")


class TestErrorWrapping:
    """Tests for translating client errors."""

    @pytest.mark.asyncio
    async def test_api_error_message_is_kept(self):
        error = APIError({"message": 'relation "qr_history" does not exist', "code": "42P01"})
        client = make_client(error=error)

        with pytest.raises(StoreError) as info:
            await SupabaseHistoryStore(client).list_recent(50)

        assert info.value.message == 'relation "qr_history" does not exist'
        assert info.value.operation == "list"
        assert info.value.context["code"] == "42P01"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = make_client(error=httpx.ConnectError("Connection refused"))

        with pytest.raises(StoreError, match="Connection refused"):
            await SupabaseHistoryStore(client).probe()

    @pytest.mark.asyncio
    async def test_other_client_error_is_store_error(self):
        client = make_client(error=ValueError("Expecting value: line 1 column 1 (char 0)"))

        with pytest.raises(StoreError, match="Expecting value") as info:
            await SupabaseHistoryStore(client).delete_all()

        assert info.value.operation == "delete_all"
        assert info.value.context["error_type"] == "ValueError"

    @pytest.mark.asyncio
    async def test_malformed_row_is_store_error(self):
        client = make_client(rows=[{"id": ROW["id"], "content": "hello"}])

        with pytest.raises(StoreError, match="malformed row for list"):
            await SupabaseHistoryStore(client).list_recent(50)

    @pytest.mark.asyncio
    async def test_malformed_inserted_row_is_store_error(self):
        client = make_client(rows=[{"content": "hello"}])

        with pytest.raises(StoreError, match="malformed row for insert"):
            await SupabaseHistoryStore(client).insert("hello")


class TestStoreFactory:
    """Tests for lazy construction and memoization."""

    @pytest.mark.asyncio
    async def test_missing_configuration(self):
        config = Settings(supabase_url="", supabase_anon_key="")
        with pytest.raises(ConfigurationError) as info:
            await create_history_store(config)
        assert info.value.missing == ["SUPABASE_URL", "SUPABASE_ANON_KEY"]

    @pytest.mark.asyncio
    async def test_client_creation_failure_is_store_error(self):
        config = Settings(supabase_url="not-a-url", supabase_anon_key="key")
        with patch.object(supabase_store, "acreate_client", AsyncMock(side_effect=Exception("Invalid URL"))):
            with pytest.raises(StoreError, match="Invalid URL"):
                await create_history_store(config)

    @pytest.mark.asyncio
    async def test_store_is_built_once(self):
        fake_create = AsyncMock(return_value=make_client())
        with patch.object(supabase_store, "acreate_client", fake_create):
            first = await get_history_store()
            second = await get_history_store()

        assert first is second
        assert isinstance(first, SupabaseHistoryStore)
        fake_create.assert_awaited_once_with("https://test-project.supabase.co", "test-key-not-real")
