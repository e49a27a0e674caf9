# Middleware package init
"""
Storefront Edge API — Middleware Package
=========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first so the access log line carries it
    2. Logging sees the final status and Cache-Control header
    3. GZip compresses large product listings
    4. CORS is FastAPI's CORSMiddleware; /api/orders PATCH additionally sets
       its own wildcard CORS headers
"""
