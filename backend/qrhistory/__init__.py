"""
QR History Backend - Package Initializer
==========================================

What: Marks the `qrhistory` directory as a Python package.
Who:  Imported by uvicorn (process server), by `api/index.py` (serverless
      function) and by pytest.

Architecture Note:
    Two hosting adapters share one handler layer:

    ┌──────────────────────────┐   ┌──────────────────────────┐
    │  Process Server (main)   │   │  Serverless (serverless) │
    │  FastAPI routes + CORS   │   │  flat dispatcher + CORS  │
    └────────────┬─────────────┘   └────────────┬─────────────┘
                 └──────────────┬───────────────┘
    ┌───────────────────────────▼─────────────────────────────┐
    │          HistoryService (health/list/submit/delete)     │
    ├─────────────────────────────────────────────────────────┤
    │          HistoryStore → SupabaseHistoryStore            │
    └─────────────────────────────────────────────────────────┘
"""

__version__ = "1.0.0"
