"""
Storefront Edge API — Order Schemas
====================================

Orders are free-form: checkout writes whatever fields the frontend collected,
so only the status update body has a fixed shape.
"""

from typing import Optional, Union

from pydantic import BaseModel


class OrderStatusUpdate(BaseModel):
    """
    Body of PATCH /api/orders.

    Both fields are optional at the schema level; the route answers 400 with
    CORS headers when either is missing.
    """

    orderId: Optional[Union[int, str]] = None
    order_status: Optional[str] = None
