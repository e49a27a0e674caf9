"""
Storefront Edge API — Application Package Initializer
=====================================================

What: Marks the `storefront` directory as a Python package.
Why:  Enables module imports like `from storefront.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    This backend follows the same layered shape as a classic service:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services + Edge Resource Layer    │  ← Orchestration, caching, fallback
    ├─────────────────────────────────────┤
    │            Schemas (Data)           │  ← Pydantic request/response models
    ├─────────────────────────────────────┤
    │    Remote Data Client (Supabase)    │  ← PostgREST + Storage over httpx
    └─────────────────────────────────────┘

    There is no local database. Every record lives in the remote store;
    this package only shapes requests to it and responses from it.
"""

__version__ = "1.0.0"
