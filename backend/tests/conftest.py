"""
Storefront Edge API — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Services and routes talk to the remote store through a small duck-typed
       interface; an in-memory stand-in lets every test run offline.
How:   FakeRemoteStore implements the RemoteReader / RemoteDataClient methods
       over dicts, with switches for failures, slowness and missing columns.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── store:               empty FakeRemoteStore
    ├── seeded_store:        store with products 7 and 8 plus images and heroes
    ├── rng:                 deterministic random.Random
    ├── app:                 FastAPI app wired to `seeded_store`
    ├── test_client:         HTTPX AsyncClient over ASGITransport
    └── sample_image_bytes:  minimal JPEG
"""

import asyncio
import os
import random
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before any storefront import so the settings singleton picks them up
os.environ["SUPABASE_URL"] = "http://store.test"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role-key"
os.environ["LOG_LEVEL"] = "WARNING"

from storefront.exceptions import (  # noqa: E402
    NotFoundError,
    RemoteError,
    SchemaCompatibilityError,
)


# ══════════════════════════════════════════════════════════════════════════
# In-memory remote store
# ══════════════════════════════════════════════════════════════════════════

class FakeRemoteStore:
    """
    Stand-in for both remote handles.

    Switches:
        failing:          tables/buckets whose every call raises RemoteError
        delay:            seconds each call sleeps before answering
        missing_columns:  table -> columns the schema lacks (PGRST204 on use)
        calls:            (operation, table, detail) log in call order
    """

    base_url = "http://store.test"

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.blobs: Dict[str, Dict[str, bytes]] = defaultdict(dict)
        self.failing: Set[str] = set()
        self.delay = 0.0
        self.missing_columns: Dict[str, Set[str]] = defaultdict(set)
        self.calls: List[Tuple[str, str, Any]] = []
        self._next_id: Dict[str, int] = defaultdict(int)

    # ── helpers ───────────────────────────────────────────────────────────

    def seed(self, table: str, rows: List[Dict[str, Any]]) -> None:
        for row in rows:
            self.tables[table].append(dict(row))
            if isinstance(row.get("id"), int):
                self._next_id[table] = max(self._next_id[table], row["id"])

    async def _enter(self, operation: str, table: str, detail: Any = None) -> None:
        self.calls.append((operation, table, detail))
        if self.delay:
            await asyncio.sleep(self.delay)
        if table in self.failing:
            raise RemoteError(message=f"{table} is unavailable", status=503)

    @staticmethod
    def _matches(row: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in filters.items())

    def _missing_column(self, table: str, columns) -> Optional[str]:
        for column in columns:
            if column in self.missing_columns[table]:
                return column
        return None

    def _schema_error(self, table: str, column: str) -> SchemaCompatibilityError:
        return SchemaCompatibilityError(
            table=table,
            column=column,
            message=f"Could not find the '{column}' column of '{table}' in the schema cache",
            status=400,
            code="PGRST204",
        )

    # ── reader ────────────────────────────────────────────────────────────

    async def query(self, table, filters=None, order=None, limit=None, select="*"):
        await self._enter("query", table, dict(filters or {}))
        if select != "*":
            missing = self._missing_column(table, select.split(","))
            if missing:
                raise self._schema_error(table, missing)

        rows = [dict(row) for row in self.tables[table] if self._matches(row, filters or {})]
        if order:
            column, ascending = order
            rows.sort(key=lambda row: (row.get(column) is None, row.get(column)), reverse=not ascending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def query_one(self, table, key):
        rows = await self.query(table, filters=key, limit=1)
        if not rows:
            raise NotFoundError(resource=table)
        return rows[0]

    async def probe_column(self, table, column):
        try:
            await self.query(table, select=column, limit=0)
            return True
        except SchemaCompatibilityError:
            return False
        except RemoteError:
            return None

    def public_url_for(self, bucket, name):
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{name}"

    async def list_blobs(self, bucket, prefix="", limit=100):
        await self._enter("list_blobs", bucket)
        names = sorted(name for name in self.blobs[bucket] if name.startswith(prefix))
        return [{"name": name} for name in names[:limit]]

    # ── admin ─────────────────────────────────────────────────────────────

    async def insert(self, table, record):
        await self._enter("insert", table, dict(record))
        missing = self._missing_column(table, record.keys())
        if missing:
            raise self._schema_error(table, missing)

        row = dict(record)
        if "id" not in row:
            self._next_id[table] += 1
            row["id"] = self._next_id[table]
        self.tables[table].append(row)
        return dict(row)

    async def update(self, table, key, changes):
        await self._enter("update", table, dict(key))
        updated = []
        for row in self.tables[table]:
            if self._matches(row, key):
                row.update(changes)
                updated.append(dict(row))
        if not updated:
            raise NotFoundError(resource=table)
        return updated[0]

    async def delete(self, table, key):
        await self._enter("delete", table, dict(key))
        self.tables[table] = [row for row in self.tables[table] if not self._matches(row, key)]

    async def upload_blob(self, bucket, name, data, content_type):
        await self._enter("upload_blob", bucket, name)
        if name in self.blobs[bucket]:
            raise RemoteError(message="The resource already exists", status=409)
        self.blobs[bucket][name] = data
        return name

    async def remove_blob(self, bucket, name):
        await self._enter("remove_blob", bucket, name)
        self.blobs[bucket].pop(name, None)


# ══════════════════════════════════════════════════════════════════════════
# Sample data
# ══════════════════════════════════════════════════════════════════════════

def make_product(product_id: int, **overrides) -> Dict[str, Any]:
    product = {
        "id": product_id,
        "name": f"Product {product_id}",
        "description": "Test product",
        "price": 10.0 * product_id,
        "original_price": 12.0 * product_id,
        "image_url": f"/products/{product_id}.png",
        "category": "keyboard",
        "rating": 4.0,
        "reviews": 3,
        "features": ["feature"],
        "in_stock": True,
        "discount": 10,
        "hidden_on_home": False,
    }
    product.update(overrides)
    return product


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def store():
    return FakeRemoteStore()


@pytest.fixture
def seeded_store(store):
    store.seed("products", [
        make_product(8, category="mouse"),
        make_product(7),
        make_product(9, hidden_on_home=True),
    ])
    store.seed("product_images", [
        {"id": 2, "product_id": 7, "image_url": "http://img/7b", "display_order": 2},
        {"id": 1, "product_id": 7, "image_url": "http://img/7a", "display_order": 1},
        {"id": 3, "product_id": 8, "image_url": "http://img/8a", "display_order": 0},
    ])
    store.seed("hero_images", [
        {"id": 1, "image_url": "http://hero/1", "display_order": 2, "is_active": True},
        {"id": 2, "image_url": "http://hero/2", "display_order": 1, "is_active": True},
        {"id": 3, "image_url": "http://hero/3", "display_order": 0, "is_active": False},
    ])
    return store


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def app(seeded_store, rng):
    """
    FastAPI app with its service container built on `seeded_store`.

    ASGITransport does not run the lifespan, so the container is installed
    here instead of by main.lifespan.
    """
    from storefront.config import settings
    from storefront.dependencies import build_container
    from storefront.main import create_app
    from storefront.services.image_service import SchemaCapabilities

    application = create_app()
    application.state.services = build_container(
        seeded_store,
        seeded_store,
        settings,
        capabilities=SchemaCapabilities(hero_show_content=True),
        rng=rng,
    )
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly into the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
