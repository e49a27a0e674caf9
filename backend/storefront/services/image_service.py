"""
Storefront Edge API — Image Upload Services
============================================

What:  Upload-then-record workflows for product images and hero banners.
Why:   An image is only visible once both the blob and its metadata row
       exist; both steps and their failure messages live here.
How:   StorageService validates and stores the bytes; the admin client
       inserts the row pointing at the blob's public URL.

Workflow:
    ┌───────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate  │───▶│ Upload blob  │───▶│ Insert row   │───▶│ {success,│
    │ (400)     │    │ (500 "Failed │    │ (500 "Failed │    │  image,  │
    │           │    │  to upload") │    │  to save")   │    │  message}│
    └───────────┘    └──────────────┘    └──────────────┘    └──────────┘

    A failed insert leaves the blob behind; it is not referenced by any row
    and is not served by the storefront.

Hero images and `show_content`:
    Older deployments of the hero_images table lack the `show_content`
    column. The app probes for it once at startup (SchemaCapabilities):
    - known absent → insert without it
    - present or unknown → insert with it, and on a missing-column answer
      retry exactly once without it
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from storefront.exceptions import RemoteError, SchemaCompatibilityError
from storefront.remote_client import RemoteDataClient, RemoteReader
from storefront.schemas.media import HeroImageFields, UploadResult
from storefront.services.storage_service import (
    HERO_IMAGES_BUCKET,
    PRODUCT_IMAGES_BUCKET,
    StorageService,
    hero_image_name,
    product_image_name,
)

logger = logging.getLogger(__name__)

SHOW_CONTENT_COLUMN = "show_content"


@dataclass(frozen=True)
class SchemaCapabilities:
    """
    Optional columns found in the remote schema at startup.

    None means the probe could not tell (store unreachable at boot).
    """

    hero_show_content: Optional[bool] = None


async def probe_capabilities(reader: RemoteReader) -> SchemaCapabilities:
    show_content = await reader.probe_column("hero_images", SHOW_CONTENT_COLUMN)
    logger.info("Schema capabilities: hero_images.show_content=%s", show_content)
    return SchemaCapabilities(hero_show_content=show_content)


class ProductImageService:
    """Product gallery uploads into the `product-images` bucket."""

    def __init__(self, admin: RemoteDataClient, storage: StorageService):
        self.admin = admin
        self.storage = storage

    async def upload(
        self,
        product_id: int,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str],
        is_primary: bool = False,
    ) -> UploadResult:
        self.storage.validate_upload(filename, content)
        name = product_image_name(product_id, filename, self.storage.now_ms())
        logger.info("Uploading image for product %s as %s", product_id, name)

        _, public_url = await self.storage.upload(
            PRODUCT_IMAGES_BUCKET, name, content, content_type
        )

        try:
            image = await self.admin.insert(
                "product_images",
                {
                    "product_id": product_id,
                    "image_url": public_url,
                    "file_name": name,
                    "is_primary": is_primary,
                    "display_order": 0,
                },
            )
        except RemoteError as e:
            logger.error("Saving image metadata for product %s failed: %s", product_id, e.message)
            raise RemoteError(message="Failed to save metadata", details=e.message) from e

        logger.info("Image uploaded for product %s", product_id)
        return UploadResult(image=image, message="Product image uploaded successfully")


class HeroImageService:
    """Hero banner uploads into the `hero-images` bucket."""

    def __init__(
        self,
        admin: RemoteDataClient,
        storage: StorageService,
        capabilities: SchemaCapabilities = SchemaCapabilities(),
    ):
        self.admin = admin
        self.storage = storage
        self.capabilities = capabilities

    async def upload(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str],
        fields: HeroImageFields,
    ) -> UploadResult:
        self.storage.validate_upload(filename, content)
        name = hero_image_name(filename, self.storage.now_ms())

        _, public_url = await self.storage.upload(
            HERO_IMAGES_BUCKET, name, content, content_type
        )

        try:
            image = await self.insert_record(fields.to_record(name, public_url))
        except RemoteError as e:
            logger.error("Saving hero image metadata failed: %s", e.message)
            raise RemoteError(message="Failed to save metadata", details=e.message) from e

        logger.info("Hero image %s uploaded", name)
        return UploadResult(image=image, message="Hero image uploaded successfully")

    async def insert_record(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a hero_images row, dropping `show_content` when the schema lacks it."""
        if self.capabilities.hero_show_content is False:
            return await self.admin.insert("hero_images", _without_show_content(record))

        try:
            return await self.admin.insert("hero_images", record)
        except SchemaCompatibilityError as e:
            if e.column != SHOW_CONTENT_COLUMN and SHOW_CONTENT_COLUMN not in e.message:
                raise
            # The rejected insert stored nothing, so one retry cannot duplicate
            logger.warning("hero_images has no show_content column; retrying without it")
            return await self.admin.insert("hero_images", _without_show_content(record))


def _without_show_content(record: Dict[str, Any]) -> Dict[str, Any]:
    return {column: value for column, value in record.items() if column != SHOW_CONTENT_COLUMN}
