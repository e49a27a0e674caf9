"""
Storefront Edge API — Order and QR Code Services
=================================================

What:  Checkout orders (create, look up, list, status changes) and the
       payment QR code catalogue.
Why:   Both tables are written by the admin dashboard or checkout and are
       read with the service role credential; neither has a fallback.
How:   Direct calls on the admin RemoteDataClient with failures wrapped in
       the messages the dashboard displays.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Union

from storefront.exceptions import NotFoundError, RemoteError
from storefront.remote_client import RemoteDataClient
from storefront.schemas.media import QRCodeCreate

logger = logging.getLogger(__name__)

OrderKey = Union[int, str]


class OrderService:
    """
    Operations on the `orders` table.

    Two identifiers exist: `order_id` is the customer-facing reference used
    for lookups, `id` is the row key used by status updates.
    """

    def __init__(self, admin: RemoteDataClient):
        self.admin = admin

    async def get(self, order_id: str) -> Dict[str, Any]:
        try:
            return await self.admin.query_one("orders", {"order_id": order_id})
        except NotFoundError:
            raise NotFoundError(resource="order", resource_id=order_id, message="Order not found")
        except RemoteError as e:
            logger.error("Order %s lookup failed: %s", order_id, e.message)
            raise RemoteError(message="Failed to get order", details=e.message) from e

    async def list_recent(self) -> List[Dict[str, Any]]:
        """All orders, newest first."""
        try:
            orders = await self.admin.query("orders", order=("created_at", False))
        except RemoteError as e:
            logger.error("Listing orders failed: %s", e.message)
            raise RemoteError(message="Failed to get orders", details=e.message) from e
        logger.info("Retrieved %d orders", len(orders))
        return orders

    async def create(self, order: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            created = await self.admin.insert("orders", order)
        except RemoteError as e:
            logger.error("Creating order failed: %s", e.message)
            raise RemoteError(message="Failed to create order", details=e.message) from e
        logger.info("Order created: %s", created.get("order_id", created.get("id")))
        return created

    async def update_status(self, order_key: OrderKey, status: str) -> Dict[str, Any]:
        """
        Set `order_status` on the order whose row id is `order_key`.

        `updated_at` is stamped with the current UTC time in ISO 8601.

        Raises:
            NotFoundError: no order has that id
            RemoteError:   "Failed to update order status: <store message>"
        """
        changes = {
            "order_status": status,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            order = await self.admin.update("orders", {"id": order_key}, changes)
        except NotFoundError:
            raise NotFoundError(resource="order", resource_id=order_key, message="Order not found")
        except RemoteError as e:
            logger.error("Updating status of order %s failed: %s", order_key, e.message)
            raise RemoteError(message=f"Failed to update order status: {e.message}") from e
        logger.info("Order %s status set to %s", order_key, status)
        return order


class QRCodeService:
    """Payment QR codes shown at checkout, newest first."""

    def __init__(self, admin: RemoteDataClient):
        self.admin = admin

    async def list_all(self) -> List[Dict[str, Any]]:
        try:
            return await self.admin.query("qr_codes", order=("created_at", False))
        except RemoteError as e:
            logger.error("Listing QR codes failed: %s", e.message)
            raise RemoteError(message="Failed to get QR codes", details=e.message) from e

    async def create(self, qr_code: QRCodeCreate) -> Dict[str, Any]:
        try:
            created = await self.admin.insert("qr_codes", qr_code.to_record())
        except RemoteError as e:
            logger.error("Creating QR code %r failed: %s", qr_code.name, e.message)
            raise RemoteError(message="Failed to create QR code", details=e.message) from e
        logger.info("QR code %s created", created.get("id"))
        return created
