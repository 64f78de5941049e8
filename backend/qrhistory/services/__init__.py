"""
QR History Backend - Services Layer
=====================================

What:  Business logic between the hosting adapters and the store.

Service Inventory:
    - HistoryStore (abstract): data access contract for the `qr_history` table
    - SupabaseHistoryStore: implementation over the async Supabase client,
      plus the lazily built, process-wide handle (get_history_store)
    - HistoryService: the five API operations, shared by the FastAPI routes
      and the serverless dispatcher
"""
