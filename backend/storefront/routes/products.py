"""
Storefront Edge API — Product Route Handlers
=============================================

What:  /api/products and its storefront sub-resources.
Why:   The storefront reads products on every page; the admin dashboard
       creates, edits and deletes them.
How:   GET handlers delegate to the EdgeResourceLayer (cached, fallback,
       never 5xx). Write handlers and `?all=true` delegate to ProductService
       (admin credential, no cache, failures surface as 500).

Caching Strategy:
    - Storefront GETs: products policy (max-age=300, swr=60), also on fallback
    - GET ?all=true:    not cached (admin view must be current)
    - POST/PUT/DELETE:  never cached

Route order:
    The fixed sub-paths (dope-picks, weekly-picks, with-images, category/...)
    are declared before /api/products/{product_id}.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from storefront.dependencies import get_edge, get_product_service
from storefront.exceptions import ValidationError
from storefront.schemas.common import ErrorResponse
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.services.edge_service import (
    DEFAULT_DOPE_PICKS,
    DEFAULT_WEEKLY_PICKS,
    EdgeResourceLayer,
)
from storefront.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])

MAX_PICKS = 50


def parse_product_id(raw: Optional[str]) -> int:
    """Integer id from a query string value; 400 when absent or not a number."""
    if not raw:
        raise ValidationError(message="Product ID is required", field="id")
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(
            message="Product ID must be an integer", field="id", context={"value": raw}
        )


# ── Storefront reads ──────────────────────────────────────────────────────

@router.get(
    "",
    summary="List products",
    description=(
        "Storefront listing of visible products, cached for 5 minutes. Serves "
        "the built-in fallback catalogue when the store is down or empty. "
        "With `all=true`, returns the full catalogue including hidden products, "
        "uncached."
    ),
    responses={500: {"description": "Admin listing failed", "model": ErrorResponse}},
)
async def list_products(
    include_hidden: bool = Query(default=False, alias="all"),
    edge: EdgeResourceLayer = Depends(get_edge),
    products: ProductService = Depends(get_product_service),
):
    if include_hidden:
        return JSONResponse(content=await products.list_all())
    return await edge.list_products()


@router.get("/dope-picks", summary="Random product sample")
async def dope_picks(
    count: int = Query(default=DEFAULT_DOPE_PICKS, ge=1, le=MAX_PICKS),
    edge: EdgeResourceLayer = Depends(get_edge),
) -> JSONResponse:
    return await edge.dope_picks(count)


@router.get(
    "/weekly-picks",
    summary="Random product sample of exactly `count` entries",
    description=(
        "When fewer products exist than requested, products repeat with "
        "synthetic ids (original id × 1000 + position)."
    ),
)
async def weekly_picks(
    count: int = Query(default=DEFAULT_WEEKLY_PICKS, ge=1, le=MAX_PICKS),
    edge: EdgeResourceLayer = Depends(get_edge),
) -> JSONResponse:
    return await edge.weekly_picks(count)


@router.get("/with-images", summary="Visible products with their image galleries")
async def products_with_images(edge: EdgeResourceLayer = Depends(get_edge)) -> JSONResponse:
    return await edge.products_with_images()


@router.get("/category/{category}", summary="Visible products in one category")
async def products_by_category(
    category: str,
    edge: EdgeResourceLayer = Depends(get_edge),
) -> JSONResponse:
    return await edge.list_products_by_category(category)


@router.get(
    "/{product_id}",
    summary="Get one product",
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
)
async def get_product(
    product_id: int,
    edge: EdgeResourceLayer = Depends(get_edge),
) -> JSONResponse:
    return await edge.get_product(product_id)


# ── Admin writes ──────────────────────────────────────────────────────────

@router.post(
    "",
    summary="Create a product",
    responses={500: {"description": "Store rejected the product", "model": ErrorResponse}},
)
async def create_product(
    body: ProductCreate,
    products: ProductService = Depends(get_product_service),
):
    logger.info("Creating product %r", body.name)
    return await products.create(body)


@router.put(
    "",
    summary="Update a product",
    responses={
        400: {"description": "Product ID missing", "model": ErrorResponse},
        404: {"description": "Product not found", "model": ErrorResponse},
        500: {"description": "Store rejected the update", "model": ErrorResponse},
    },
)
async def update_product(
    body: ProductUpdate,
    products: ProductService = Depends(get_product_service),
):
    if not body.id:
        raise ValidationError(message="Product ID is required", field="id")
    return await products.update(body.id, body)


@router.delete(
    "",
    summary="Delete a product and its images",
    responses={
        400: {"description": "Product ID missing or invalid", "model": ErrorResponse},
        500: {"description": "Store rejected the delete", "model": ErrorResponse},
    },
)
async def delete_product(
    id: Optional[str] = Query(default=None),
    products: ProductService = Depends(get_product_service),
):
    product_id = parse_product_id(id)
    await products.delete(product_id)
    return {"success": True}
