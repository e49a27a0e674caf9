"""
Storefront Edge API — Blob Storage Service
===========================================

What:  Upload validation, blob naming and bucket operations on the remote
       blob store.
Why:   Every upload endpoint (product images, hero images, assets, raw
       storage) needs the same size checks, the same timestamped names and
       the same error wrapping.
How:   Validates the bytes in memory, derives a name from the upload's
       original filename and the current epoch milliseconds, then calls the
       admin RemoteDataClient.
Who:   Called by the image services and by the assets/storage routes.

Blob naming:
    ┌──────────────────────┬──────────────────────────────────┐
    │ Upload               │ Name                             │
    ├──────────────────────┼──────────────────────────────────┤
    │ product image        │ product-{productId}-{ms}.{ext}   │
    │ hero image           │ hero-{ms}.{ext}                  │
    │ asset                │ {ms}-{original name}             │
    │ storage product img  │ product-{ms}.{ext}               │
    │ storage QR code      │ qr-{ms}.{ext}                    │
    └──────────────────────┴──────────────────────────────────┘

    The millisecond timestamp keeps names unique for one uploader; uploads are
    stored with `x-upsert: false`, so a collision fails instead of overwriting.
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from storefront.exceptions import RemoteError, ValidationError
from storefront.remote_client import RemoteDataClient, RemoteReader

logger = logging.getLogger(__name__)

PRODUCT_IMAGES_BUCKET = "product-images"
HERO_IMAGES_BUCKET = "hero-images"
QR_CODES_BUCKET = "qr-codes"
ASSETS_BUCKET = "assets"

# Buckets exposed through /api/storage/{bucket}, with their name prefix
STORAGE_BUCKET_PREFIXES = {
    PRODUCT_IMAGES_BUCKET: "product",
    QR_CODES_BUCKET: "qr",
}


def epoch_ms(clock: Callable[[], float] = time.time) -> int:
    return int(clock() * 1000)


def extension_of(filename: str) -> str:
    """Lowercased extension without the dot; `bin` when the name has none."""
    return Path(filename).suffix.lstrip(".").lower() or "bin"


def product_image_name(product_id: int, filename: str, now_ms: int) -> str:
    return f"product-{product_id}-{now_ms}.{extension_of(filename)}"


def hero_image_name(filename: str, now_ms: int) -> str:
    return f"hero-{now_ms}.{extension_of(filename)}"


def asset_name(filename: str, now_ms: int) -> str:
    # Path(...).name drops any directory part a client put in the filename
    return f"{now_ms}-{Path(filename).name}"


def prefixed_name(prefix: str, filename: str, now_ms: int) -> str:
    return f"{prefix}-{now_ms}.{extension_of(filename)}"


class StorageService:
    """
    Validated uploads and bucket maintenance.

    Reads that the storefront itself performs (listing a public bucket,
    deriving a public URL) go through the anon reader; every write and the
    private assets listing go through the admin client.
    """

    def __init__(
        self,
        admin: RemoteDataClient,
        reader: Optional[RemoteReader] = None,
        max_upload_size: int = 10_485_760,
        asset_list_limit: int = 100,
        clock: Callable[[], float] = time.time,
    ):
        self.admin = admin
        self.reader = reader or admin
        self.max_upload_size = max_upload_size
        self.asset_list_limit = asset_list_limit
        self.clock = clock

    # ── Validation ────────────────────────────────────────────────────────

    def validate_upload(self, filename: Optional[str], content: bytes) -> None:
        """
        Reject missing, empty and oversized uploads.

        Raises:
            ValidationError (400) with `field="file"`
        """
        if not filename:
            raise ValidationError(message="No file provided", field="file")
        if not content:
            raise ValidationError(
                message="Uploaded file is empty",
                field="file",
                context={"filename": filename},
            )
        if len(content) > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size ({len(content) / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size": self.max_upload_size, "actual_size": len(content)},
            )

    def now_ms(self) -> int:
        return epoch_ms(self.clock)

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload(
        self,
        bucket: str,
        name: str,
        content: bytes,
        content_type: Optional[str],
        error_message: str = "Failed to upload file",
    ) -> Tuple[str, str]:
        """
        Store `content` as `bucket/name`.

        Returns:
            (stored path inside the bucket, public URL)

        Raises:
            RemoteError(error_message) with the blob store's message in details
        """
        try:
            path = await self.admin.upload_blob(bucket, name, content, content_type)
        except RemoteError as e:
            logger.error("Upload of %s/%s failed: %s", bucket, name, e.message)
            raise RemoteError(message=error_message, details=e.message) from e

        logger.info("Uploaded %s/%s (%d bytes)", bucket, path, len(content))
        return path, self.admin.public_url_for(bucket, path)

    async def upload_asset(
        self, filename: Optional[str], content: bytes, content_type: Optional[str]
    ) -> Dict[str, Any]:
        self.validate_upload(filename, content)
        name = asset_name(filename, self.now_ms())
        path, _ = await self.upload(
            ASSETS_BUCKET, name, content, content_type, error_message="Failed to upload asset"
        )
        return {"success": True, "fileName": name, "path": path}

    async def upload_to_bucket(
        self,
        bucket: str,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str],
    ) -> Dict[str, Any]:
        """Raw storage upload for /api/storage/{bucket}."""
        self.validate_upload(filename, content)
        name = prefixed_name(STORAGE_BUCKET_PREFIXES[bucket], filename, self.now_ms())
        path, url = await self.upload(bucket, name, content, content_type)
        return {"success": True, "fileName": path, "url": url}

    # ── Listing and removal ───────────────────────────────────────────────

    async def list_assets(self) -> List[Dict[str, Any]]:
        try:
            files = await self.admin.list_blobs(ASSETS_BUCKET, limit=self.asset_list_limit)
        except RemoteError as e:
            logger.error("Listing assets failed: %s", e.message)
            raise RemoteError(message="Failed to get assets", details=e.message) from e
        logger.info("Retrieved %d assets", len(files))
        return files

    async def list_bucket(self, bucket: str) -> List[Dict[str, Any]]:
        try:
            return await self.reader.list_blobs(bucket)
        except RemoteError as e:
            logger.error("Listing %s failed: %s", bucket, e.message)
            raise RemoteError(message="Failed to list files", details=e.message) from e

    def public_url(self, bucket: str, name: str) -> str:
        return self.reader.public_url_for(bucket, name)

    async def remove(self, bucket: str, name: Optional[str]) -> None:
        if not name:
            raise ValidationError(message="File name is required", field="fileName")
        try:
            await self.admin.remove_blob(bucket, name)
        except RemoteError as e:
            logger.error("Deleting %s/%s failed: %s", bucket, name, e.message)
            raise RemoteError(message="Failed to delete file", details=e.message) from e
        logger.info("Deleted %s/%s", bucket, name)
