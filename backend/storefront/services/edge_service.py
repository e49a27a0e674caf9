"""
Storefront Edge API — Cached Edge Resource Layer
=================================================

What:  Turns a remote read into a cacheable, degradation-safe JSON response.
Why:   Storefront pages (home, product detail, hero carousel) must render even
       when the remote store is slow or down, and should be served from the
       CDN most of the time anyway.
How:   Every read follows the same five steps:

       ┌──────────┐   ┌──────────────┐   ┌───────────┐   ┌──────────┐   ┌─────────┐
       │ Resolve  │──▶│ Bounded read │──▶│ Fallback? │──▶│ Post-    │──▶│ Cached  │
       │ class    │   │ (race timer) │   │ (empty/   │   │ process  │   │ response│
       └──────────┘   └──────────────┘   │  failed)  │   └──────────┘   └─────────┘
                                         └───────────┘

Fallback rules:
    products              → embedded 5-product dataset
    products by category  → dataset filtered by category, on failure only
    single product        → dataset lookup, on failure only (no row is a 404)
    product_images        → []
    hero_images           → []
    Fallback responses carry the same cache headers as live ones, so a failing
    backend is not hammered by every visitor.

Concurrency:
    The only construct is a per-request race between one remote read and a
    timer. The losing read is not cancelled; its outcome is consumed and
    dropped when it eventually settles.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi.responses import JSONResponse

from storefront.cache_policy import ResourceClass, cached_response
from storefront.exceptions import NotFoundError, RemoteError
from storefront.fallback_data import fallback_product, fallback_products
from storefront.remote_client import RemoteReader

logger = logging.getLogger(__name__)

Records = List[Dict[str, Any]]

DEFAULT_DOPE_PICKS = 6
DEFAULT_WEEKLY_PICKS = 4

# Synthetic ids for repeated weekly picks: base_id * ID_SPREAD + position
ID_SPREAD = 1000


# ══════════════════════════════════════════════════════════════════════════
# Bounded race
# ══════════════════════════════════════════════════════════════════════════

def _discard_late_result(task: "asyncio.Future[Any]") -> None:
    """Retrieve a timed-out read's outcome so asyncio never reports it as unhandled."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Late remote read settled after timeout with %s", type(exc).__name__)


async def bounded_read(read: Awaitable[Any], timeout: float) -> Any:
    """
    Wait for `read` at most `timeout` seconds.

    Returns the read's result, re-raises its exception, or raises RemoteError
    if the timer wins. A losing read keeps running in the background.
    """
    task = asyncio.ensure_future(read)
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if task in done:
        return task.result()

    task.add_done_callback(_discard_late_result)
    raise RemoteError(
        message="Remote store request timed out",
        details=f"No answer within {timeout:g}s",
    )


# ══════════════════════════════════════════════════════════════════════════
# Post-processing
# ══════════════════════════════════════════════════════════════════════════

def shuffled(records: Records, rng: random.Random) -> Records:
    """
    Uniformly shuffled copy (Fisher–Yates via random.shuffle).

    Sorting by a random comparator is biased; random.shuffle is not.
    """
    result = list(records)
    rng.shuffle(result)
    return result


def random_sample(records: Records, count: int, rng: random.Random) -> Records:
    """Up to `count` distinct records in random order."""
    return shuffled(records, rng)[: max(0, min(count, len(records)))]


def duplicate_to_fill(records: Records, count: int) -> Records:
    """
    Exactly `count` records, repeating `records` cyclically when it is too short.

    When filling, entry i becomes a copy of records[i % n] with
    id = base_id * 1000 + i so every entry has a distinct id in the list.
    With enough records this is a plain truncation and ids are untouched.
    """
    if not records:
        return []
    if count <= len(records):
        return [dict(record) for record in records[: max(0, count)]]

    result = []
    for i in range(count):
        base = records[i % len(records)]
        result.append({**base, "id": base["id"] * ID_SPREAD + i})
    return result


# ══════════════════════════════════════════════════════════════════════════
# Edge resource layer
# ══════════════════════════════════════════════════════════════════════════

class EdgeResourceLayer:
    """
    Cached, fallback-backed read operations over the anon RemoteReader.

    Operations:
        list_products()              visible products, id ascending
        get_product(id)              one product (fallback lookup on outage)
        list_products_by_category()  visible products in one category
        dope_picks(count)            random sample
        weekly_picks(count)          random sample, filled by duplication
        products_with_images()       visible products with their images
        list_product_images(id)      images of one product by display_order
        list_hero_images()           active hero banners by display_order

    Error contract:
        None of these return a 5xx. get_product is the only one that can
        answer 404, for an id the store does not have.
    """

    def __init__(
        self,
        reader: RemoteReader,
        timeout: float = 10.0,
        rng: Optional[random.Random] = None,
    ):
        self.reader = reader
        self.timeout = timeout
        self.rng = rng or random.Random()

    # ── Products ──────────────────────────────────────────────────────────

    async def list_products(self) -> JSONResponse:
        return await self._cached_read(
            ResourceClass.PRODUCTS,
            self._read_visible_products,
            fallback_products,
            label="products",
        )

    async def list_products_by_category(self, category: str) -> JSONResponse:
        return await self._cached_read(
            ResourceClass.PRODUCTS,
            lambda: self.reader.query(
                "products",
                filters={"category": category, "hidden_on_home": False},
                order=("id", True),
            ),
            lambda: fallback_products(category=category),
            label=f"products in category {category!r}",
            fallback_when_empty=False,
        )

    async def dope_picks(self, count: int = DEFAULT_DOPE_PICKS) -> JSONResponse:
        return await self._cached_read(
            ResourceClass.PRODUCTS,
            self._read_visible_products,
            fallback_products,
            label="dope picks",
            postprocess=lambda records: random_sample(records, count, self.rng),
        )

    async def weekly_picks(self, count: int = DEFAULT_WEEKLY_PICKS) -> JSONResponse:
        return await self._cached_read(
            ResourceClass.PRODUCTS,
            self._read_visible_products,
            fallback_products,
            label="weekly picks",
            postprocess=lambda records: duplicate_to_fill(shuffled(records, self.rng), count),
        )

    async def get_product(self, product_id: int) -> JSONResponse:
        """
        One product by id.

        A store that answers with no row means the product does not exist (404).
        Only an unreachable or slow store falls back to the embedded dataset.
        """
        try:
            record = await bounded_read(
                self.reader.query_one("products", {"id": product_id}), self.timeout
            )
        except NotFoundError as e:
            raise NotFoundError(
                resource="product", resource_id=product_id, message="Product not found"
            ) from e
        except RemoteError as e:
            logger.warning(
                "Edge: product %s not served by remote store (%s); trying fallback",
                product_id, e.message,
            )
            record = fallback_product(product_id)
            if record is None:
                raise NotFoundError(
                    resource="product", resource_id=product_id, message="Product not found"
                ) from e
        return cached_response(record, ResourceClass.PRODUCTS)

    async def products_with_images(self) -> JSONResponse:
        products = await self._resolve(
            self._read_visible_products, fallback_products, label="products with images"
        )
        try:
            enriched = await asyncio.gather(
                *(self._attach_images(product) for product in products)
            )
            return cached_response(list(enriched), ResourceClass.PRODUCTS)
        except Exception:
            logger.exception("Edge: building products with images failed; serving fallback")
            return cached_response(
                [{**product, "images": []} for product in fallback_products()],
                ResourceClass.PRODUCTS,
            )

    # ── Images ────────────────────────────────────────────────────────────

    async def list_product_images(self, product_id: int) -> JSONResponse:
        return await self._cached_read(
            ResourceClass.PRODUCT_IMAGES,
            lambda: self._read_product_images(product_id),
            list,
            label=f"images of product {product_id}",
        )

    async def list_hero_images(self) -> JSONResponse:
        return await self._cached_read(
            ResourceClass.HERO_IMAGES,
            lambda: self.reader.query(
                "hero_images",
                filters={"is_active": True},
                order=("display_order", True),
            ),
            list,
            label="hero images",
        )

    # ── Internals ─────────────────────────────────────────────────────────

    def _read_visible_products(self) -> Awaitable[Records]:
        return self.reader.query(
            "products", filters={"hidden_on_home": False}, order=("id", True)
        )

    def _read_product_images(self, product_id: int) -> Awaitable[Records]:
        # display_order ascending drives the frontend image carousel
        return self.reader.query(
            "product_images",
            filters={"product_id": product_id},
            order=("display_order", True),
        )

    async def _attach_images(self, product: Dict[str, Any]) -> Dict[str, Any]:
        images = await self._resolve(
            lambda: self._read_product_images(product["id"]),
            list,
            label=f"images of product {product.get('id')}",
        )
        return {**product, "images": images}

    async def _resolve(
        self,
        read: Callable[[], Awaitable[Records]],
        fallback: Callable[[], Records],
        label: str,
        fallback_when_empty: bool = True,
    ) -> Records:
        """
        Bounded read; failure and timeout yield `fallback()`.

        An empty result also yields `fallback()` unless `fallback_when_empty`
        is False, in which case the empty list is returned as read.
        """
        try:
            records = await bounded_read(read(), self.timeout)
        except RemoteError as e:
            logger.warning("Edge: %s read failed (%s); using fallback", label, e.message)
            return fallback()
        except Exception as e:
            logger.error("Edge: unexpected error reading %s: %s; using fallback", label, e)
            return fallback()

        if not records and fallback_when_empty:
            logger.info("Edge: no %s in remote store; using fallback", label)
            return fallback()

        logger.debug("Edge: %d %s read from remote store", len(records), label)
        return records

    async def _cached_read(
        self,
        resource_class: ResourceClass,
        read: Callable[[], Awaitable[Records]],
        fallback: Callable[[], Records],
        label: str,
        postprocess: Callable[[Records], Any] = list,
        fallback_when_empty: bool = True,
    ) -> JSONResponse:
        records = await self._resolve(read, fallback, label, fallback_when_empty)
        try:
            return cached_response(postprocess(records), resource_class)
        except Exception:
            logger.exception("Edge: post-processing %s failed; serving fallback", label)
        try:
            return cached_response(postprocess(fallback()), resource_class)
        except Exception:
            logger.exception("Edge: post-processing fallback %s failed", label)
            return cached_response(fallback(), resource_class)
