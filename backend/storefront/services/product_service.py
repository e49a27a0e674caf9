"""
Storefront Edge API — Product Service (admin writes)
=====================================================

What:  Create, update, delete and full-catalogue listing of products.
Why:   These paths need the service role credential and must report failures
       instead of falling back: an admin who saves a product has to know
       whether it was stored.
How:   Thin orchestration over the admin RemoteDataClient. Remote failures
       are wrapped with an operation message and the store's own message in
       `details`.
Who:   Called by the /api/products write handlers. Storefront reads go
       through the EdgeResourceLayer instead.

Cascade delete (DELETE /api/products?id=N):
    ┌──────────────────────────┐    ┌──────────────────────┐
    │ delete product_images    │───▶│ delete products      │
    │ WHERE product_id = N     │    │ WHERE id = N         │
    │ (failure: logged only)   │    │ (failure: 500)       │
    └──────────────────────────┘    └──────────────────────┘
"""

import logging
from typing import Any, Dict, List

from storefront.exceptions import NotFoundError, RemoteError
from storefront.remote_client import RemoteDataClient
from storefront.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """Admin operations on the `products` table."""

    def __init__(self, admin: RemoteDataClient):
        self.admin = admin

    async def list_all(self) -> List[Dict[str, Any]]:
        """Every product, hidden ones included, id ascending. Never cached."""
        try:
            products = await self.admin.query("products", order=("id", True))
        except RemoteError as e:
            logger.error("Listing all products failed: %s", e.message)
            raise RemoteError(message="Failed to get products", details=e.message) from e
        logger.info("Retrieved %d products (admin)", len(products))
        return products

    async def create(self, product: ProductCreate) -> Dict[str, Any]:
        try:
            created = await self.admin.insert("products", product.to_record())
        except RemoteError as e:
            logger.error("Creating product %r failed: %s", product.name, e.message)
            raise RemoteError(message="Failed to create product", details=e.message) from e
        logger.info("Product created with ID %s", created.get("id"))
        return created

    async def update(self, product_id: int, changes: ProductUpdate) -> Dict[str, Any]:
        """
        Apply the fields the client sent to product `product_id`.

        Raises:
            NotFoundError: no product has that id
            RemoteError:   the store rejected the update
        """
        try:
            updated = await self.admin.update(
                "products", {"id": product_id}, changes.to_changes()
            )
        except NotFoundError:
            logger.info("Update of unknown product %s", product_id)
            raise NotFoundError(
                resource="product", resource_id=product_id, message="Product not found"
            )
        except RemoteError as e:
            logger.error("Updating product %s failed: %s", product_id, e.message)
            raise RemoteError(message="Failed to update product", details=e.message) from e
        logger.info("Product %s updated", product_id)
        return updated

    async def delete(self, product_id: int) -> None:
        # Images first: product_images.product_id references products.id
        try:
            await self.admin.delete("product_images", {"product_id": product_id})
        except RemoteError as e:
            # A product may simply have no images; the product delete decides
            logger.warning(
                "Deleting images of product %s failed (continuing): %s",
                product_id, e.message,
            )

        try:
            await self.admin.delete("products", {"id": product_id})
        except RemoteError as e:
            logger.error("Deleting product %s failed: %s", product_id, e.message)
            raise RemoteError(message="Failed to delete product", details=e.message) from e
        logger.info("Product %s deleted", product_id)
