"""
Storefront Edge API — Blob Storage Route Handlers
==================================================

What:  Generic asset uploads (/api/assets) and raw bucket access for the
       product-images and qr-codes buckets (/api/storage/{bucket}).
Why:   The admin dashboard manages files that are not tied to a product or
       hero row (logos, QR images) through these endpoints.
How:   Multipart uploads and query parameters are passed to StorageService.
"""

import enum
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse

from storefront.cache_policy import ResourceClass, cached_response
from storefront.dependencies import get_storage_service
from storefront.exceptions import ValidationError
from storefront.schemas.common import ErrorResponse
from storefront.services.storage_service import (
    PRODUCT_IMAGES_BUCKET,
    QR_CODES_BUCKET,
    StorageService,
)

router = APIRouter(prefix="/api", tags=["Storage"])


class StorageBucket(str, enum.Enum):
    PRODUCT_IMAGES = PRODUCT_IMAGES_BUCKET
    QR_CODES = QR_CODES_BUCKET


STORAGE_ERRORS = {
    400: {"description": "File or file name missing", "model": ErrorResponse},
    500: {"description": "Blob store operation failed", "model": ErrorResponse},
}


# ── Assets ────────────────────────────────────────────────────────────────

@router.get("/assets", summary="List files in the assets bucket", responses=STORAGE_ERRORS)
async def list_assets(storage: StorageService = Depends(get_storage_service)):
    return await storage.list_assets()


@router.post("/assets", summary="Upload a generic asset", responses=STORAGE_ERRORS)
async def upload_asset(
    file: Optional[UploadFile] = File(default=None),
    storage: StorageService = Depends(get_storage_service),
):
    if file is None:
        raise ValidationError(message="No file provided", field="file")
    return await storage.upload_asset(file.filename, await file.read(), file.content_type)


# ── Raw buckets ───────────────────────────────────────────────────────────

@router.get(
    "/storage/{bucket}",
    summary="Public URL of one file, or the bucket listing",
    description=(
        "With `fileName`, returns `{url}` for that object. Without it, lists the "
        "bucket; listings are cached like product images."
    ),
    responses=STORAGE_ERRORS,
)
async def get_storage(
    bucket: StorageBucket,
    file_name: Optional[str] = Query(default=None, alias="fileName"),
    storage: StorageService = Depends(get_storage_service),
) -> JSONResponse:
    if file_name:
        return JSONResponse(content={"url": storage.public_url(bucket.value, file_name)})

    files = await storage.list_bucket(bucket.value)
    return cached_response(files, ResourceClass.PRODUCT_IMAGES)


@router.post("/storage/{bucket}", summary="Upload a file to the bucket", responses=STORAGE_ERRORS)
async def upload_to_storage(
    bucket: StorageBucket,
    file: Optional[UploadFile] = File(default=None),
    storage: StorageService = Depends(get_storage_service),
):
    if file is None:
        raise ValidationError(message="File is required", field="file")
    return await storage.upload_to_bucket(
        bucket.value, file.filename, await file.read(), file.content_type
    )


@router.delete("/storage/{bucket}", summary="Delete a file from the bucket", responses=STORAGE_ERRORS)
async def delete_from_storage(
    bucket: StorageBucket,
    file_name: Optional[str] = Query(default=None, alias="fileName"),
    storage: StorageService = Depends(get_storage_service),
):
    await storage.remove(bucket.value, file_name)
    return {"success": True}
