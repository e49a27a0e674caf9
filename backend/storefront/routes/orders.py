"""
Storefront Edge API — Order and QR Code Route Handlers
=======================================================

What:  /api/orders (checkout and admin status changes) and /api/qr-codes.
Why:   Checkout posts orders from the browser; the admin dashboard, which may
       be served from another origin, lists them and changes their status.
How:   Thin handlers over OrderService / QRCodeService.

CORS on PATCH:
    Status updates carry explicit CORS headers on every response, including
    400/404/500 errors, independent of CORSMiddleware's origin list:
        Access-Control-Allow-Origin:  *
        Access-Control-Allow-Methods: GET, POST, PUT, DELETE, OPTIONS, PATCH
        Access-Control-Allow-Headers: Content-Type, Authorization
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from storefront.cache_policy import ORDERS_LIST_CACHE_CONTROL
from storefront.dependencies import get_order_service, get_qr_code_service
from storefront.exceptions import RemoteError, StorefrontError, ValidationError
from storefront.schemas.common import ErrorResponse
from storefront.schemas.media import QRCodeCreate
from storefront.schemas.order import OrderStatusUpdate
from storefront.services.order_service import OrderService, QRCodeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Orders"])

ORDER_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS, PATCH",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


# ── Orders ────────────────────────────────────────────────────────────────

@router.options("/orders", include_in_schema=False)
async def orders_preflight() -> Response:
    return Response(status_code=200, headers=ORDER_CORS_HEADERS)


@router.get(
    "/orders",
    summary="Get one order by reference, or list all orders",
    responses={
        404: {"description": "Order not found", "model": ErrorResponse},
        500: {"description": "Store unavailable", "model": ErrorResponse},
    },
)
async def get_orders(
    order_id: Optional[str] = Query(default=None, alias="orderId"),
    orders: OrderService = Depends(get_order_service),
):
    if order_id:
        return {"order": await orders.get(order_id)}

    return JSONResponse(
        content=await orders.list_recent(),
        headers={"Cache-Control": ORDERS_LIST_CACHE_CONTROL},
    )


@router.post(
    "/orders",
    summary="Create an order",
    responses={500: {"description": "Store rejected the order", "model": ErrorResponse}},
)
async def create_order(
    order: Dict[str, Any] = Body(...),
    orders: OrderService = Depends(get_order_service),
):
    return {"order": await orders.create(order)}


@router.patch(
    "/orders",
    summary="Change an order's status",
    responses={
        400: {"description": "orderId or order_status missing", "model": ErrorResponse},
        404: {"description": "Order not found", "model": ErrorResponse},
        500: {"description": "Update failed", "model": ErrorResponse},
    },
)
async def update_order_status(
    request: Request,
    orders: OrderService = Depends(get_order_service),
) -> JSONResponse:
    """
    Body: `{"orderId": <row id>, "order_status": "<status>"}`.

    The body is parsed here rather than by FastAPI so malformed input is
    answered with the CORS headers too.
    """
    missing = ValidationError(message="Missing required fields: orderId and order_status")
    try:
        payload = OrderStatusUpdate.model_validate(await request.json())
    except ValueError as e:
        raise missing.with_headers(ORDER_CORS_HEADERS) from e

    if not payload.orderId or not payload.order_status:
        raise missing.with_headers(ORDER_CORS_HEADERS)

    try:
        order = await orders.update_status(payload.orderId, payload.order_status)
    except StorefrontError as e:
        raise e.with_headers(ORDER_CORS_HEADERS)
    except Exception as e:
        logger.error("Unexpected error updating order %s: %s", payload.orderId, e, exc_info=True)
        raise RemoteError(
            message=f"Internal server error: {e}", headers=ORDER_CORS_HEADERS
        ) from e

    return JSONResponse(
        content={
            "success": True,
            "message": "Order status updated successfully",
            "order": order,
        },
        headers=ORDER_CORS_HEADERS,
    )


# ── QR codes ──────────────────────────────────────────────────────────────

@router.get("/qr-codes", summary="Payment QR codes, newest first", tags=["QR Codes"])
async def list_qr_codes(qr_codes: QRCodeService = Depends(get_qr_code_service)):
    return await qr_codes.list_all()


@router.post(
    "/qr-codes",
    summary="Register a payment QR code",
    tags=["QR Codes"],
    responses={500: {"description": "Store rejected the QR code", "model": ErrorResponse}},
)
async def create_qr_code(
    body: QRCodeCreate,
    qr_codes: QRCodeService = Depends(get_qr_code_service),
):
    return await qr_codes.create(body)
