"""
Storefront Edge API — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, exception
       handling and the remote store lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn storefront.main:app) and by tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │  ┌─────────────┐ ┌──────────────┐ ┌───────────────────┐  │
    │  │ /api/       │ │ /api/orders  │ │ /api/assets       │  │
    │  │  products   │ │ /api/qr-codes│ │ /api/storage/...  │  │
    │  │  *-images   │ │              │ │ /health           │  │
    │  └─────────────┘ └──────────────┘ └───────────────────┘  │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ValidationError→400 │ NotFound→404 │ Remote→500 │ *→500 │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Warn about local-dev credentials
    3. Create the anon and admin remote handles
    4. Probe optional schema columns once
    5. Build the service container on app.state

    Shutdown:
    1. Close both httpx clients
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from storefront import __version__
from storefront.config import settings
from storefront.dependencies import build_container
from storefront.exceptions import StorefrontError
from storefront.middleware.logging import RequestLoggingMiddleware
from storefront.middleware.request_id import RequestIDMiddleware, request_id_var
from storefront.remote_client import create_remote_handles
from storefront.routes import health, images, orders, products, storage
from storefront.services.image_service import probe_capabilities

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2025-01-15T12:00:00 [INFO] storefront.services.edge_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Every remote call would otherwise log at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Storefront Edge API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Reads still work against a local store; only warn
        logger.warning("Configuration warning: %s", str(e))

    handles = create_remote_handles(
        base_url=settings.supabase_url,
        anon_key=settings.supabase_anon_key,
        service_role_key=settings.supabase_service_role_key,
        client_info=settings.client_info,
        timeout=settings.remote_timeout_seconds,
        upload_cache_control=settings.upload_cache_control,
    )
    capabilities = await probe_capabilities(handles.reader)
    app.state.services = build_container(
        handles.reader, handles.admin, settings, capabilities=capabilities
    )

    logger.info("Remote store: %s", settings.supabase_url)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    try:
        yield
    finally:
        logger.info("Storefront Edge API shutting down...")
        await handles.aclose()
        logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(message: str, details=None) -> dict:
    body = {"error": message}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{"error": ..., "details"?: ...}` responses.

    Handler hierarchy:
        StorefrontError subclasses → their own status_code (400/404/500),
                                     plus any headers they carry
        RequestValidationError     → 400 (malformed query, form or body)
        Exception (fallback)       → 500 "Internal server error"

    Stack traces and `context` are logged server-side only.
    """

    @app.exception_handler(StorefrontError)
    async def handle_storefront_error(request: Request, exc: StorefrontError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | details=%s | context=%s",
                rid, type(exc).__name__, exc.message, exc.details, exc.context,
            )
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.details),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        logger.warning("[%s] Invalid request: %s", request_id_var.get(""), problems)
        return JSONResponse(
            status_code=400,
            content=error_body("Invalid request", problems),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(status_code=500, content=error_body("Internal server error"))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Edge API",
        description=(
            "Catalogue, image, order and storage API for the storefront. "
            "Storefront reads are CDN-cacheable and fall back to built-in data "
            "when the remote store is unavailable."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(products.router)
    app.include_router(images.router)
    app.include_router(orders.router)
    app.include_router(storage.router)
    app.include_router(health.router)

    return app


app = create_app()
