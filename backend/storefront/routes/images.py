"""
Storefront Edge API — Image Route Handlers
===========================================

What:  Product gallery images (/api/product-images) and hero banners
       (/api/hero-images).
Why:   The product page carousel and the home page hero slider read these;
       the admin dashboard uploads them.
How:   GETs go through the EdgeResourceLayer and degrade to `[]`. Uploads are
       multipart forms handed to the image services.

Caching Strategy:
    - GET /api/product-images: max-age=600, swr=120
    - GET /api/hero-images:    max-age=900, swr=300
    - uploads:                 never cached
"""

import re
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse

from storefront.dependencies import (
    get_edge,
    get_hero_image_service,
    get_product_image_service,
)
from storefront.exceptions import ValidationError
from storefront.schemas.common import ErrorResponse
from storefront.schemas.media import HeroImageFields, UploadResult
from storefront.services.edge_service import EdgeResourceLayer
from storefront.services.image_service import HeroImageService, ProductImageService

router = APIRouter(prefix="/api", tags=["Images"])

UPLOAD_ERRORS = {
    400: {"description": "File missing, empty or too large", "model": ErrorResponse},
    500: {"description": "Upload or metadata insert failed", "model": ErrorResponse},
}


def form_flag(value: Optional[str]) -> bool:
    """Multipart booleans arrive as text; only the literal 'true' is true."""
    return value == "true"


LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def form_int(value: Optional[str], default: int = 0) -> int:
    """Leading integer of a form field ("3.5" -> 3, "12px" -> 12); `default` otherwise."""
    match = LEADING_INT.match(value or "")
    return int(match.group(1)) if match else default


# ── Product images ────────────────────────────────────────────────────────

@router.get(
    "/product-images",
    summary="Images of one product, by display order",
    responses={400: {"description": "productId missing or invalid", "model": ErrorResponse}},
)
async def list_product_images(
    product_id: Optional[str] = Query(default=None, alias="productId"),
    edge: EdgeResourceLayer = Depends(get_edge),
) -> JSONResponse:
    if not product_id:
        raise ValidationError(message="Product ID is required", field="productId")
    try:
        parsed_id = int(product_id)
    except ValueError:
        raise ValidationError(
            message="Product ID must be an integer",
            field="productId",
            context={"value": product_id},
        )
    return await edge.list_product_images(parsed_id)


@router.post(
    "/product-images",
    response_model=UploadResult,
    summary="Upload a product image",
    responses=UPLOAD_ERRORS,
)
async def upload_product_image(
    file: Optional[UploadFile] = File(default=None),
    product_id: Optional[str] = Form(default=None, alias="productId"),
    is_primary: Optional[str] = Form(default=None, alias="isPrimary"),
    images: ProductImageService = Depends(get_product_image_service),
) -> UploadResult:
    if file is None or not product_id:
        raise ValidationError(message="File and product ID are required", field="file")
    try:
        parsed_id = int(product_id)
    except ValueError:
        raise ValidationError(
            message="Product ID must be an integer",
            field="productId",
            context={"value": product_id},
        )

    content = await file.read()
    return await images.upload(
        product_id=parsed_id,
        filename=file.filename,
        content=content,
        content_type=file.content_type,
        is_primary=form_flag(is_primary),
    )


# ── Hero images ───────────────────────────────────────────────────────────

@router.get("/hero-images", summary="Active hero banners, by display order")
async def list_hero_images(edge: EdgeResourceLayer = Depends(get_edge)) -> JSONResponse:
    return await edge.list_hero_images()


@router.post(
    "/hero-images/upload",
    response_model=UploadResult,
    summary="Upload a hero banner",
    responses=UPLOAD_ERRORS,
)
async def upload_hero_image(
    file: Optional[UploadFile] = File(default=None),
    title: Optional[str] = Form(default=None),
    subtitle: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    display_order: Optional[str] = Form(default=None),
    show_content: Optional[str] = Form(default=None),
    heroes: HeroImageService = Depends(get_hero_image_service),
) -> UploadResult:
    if file is None:
        raise ValidationError(message="No file provided", field="file")

    fields = HeroImageFields(
        title=title or "",
        subtitle=subtitle or "",
        description=description or "",
        display_order=form_int(display_order),
        show_content=form_flag(show_content),
    )
    content = await file.read()
    return await heroes.upload(
        filename=file.filename,
        content=content,
        content_type=file.content_type,
        fields=fields,
    )
