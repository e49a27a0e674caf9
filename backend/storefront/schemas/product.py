"""
Storefront Edge API — Product Schemas
======================================

What:  Pydantic models for products and product images.
Why:   Request bodies are validated before anything is sent to the remote store,
       and the embedded fallback dataset is typed instead of being loose dicts.
How:   Write models produce the exact column dict the store receives
       (`to_record()`); read responses are passed through as the store returned
       them so columns added later (created_at, updated_at) are not dropped.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    """
    A storefront product as stored in the `products` table.

    Frozen so instances in the fallback dataset cannot be mutated in place.
    """

    id: int
    name: str
    description: str = ""
    price: float = Field(ge=0)
    original_price: float = Field(ge=0)
    image_url: str = ""
    category: str = ""
    rating: float = 0
    reviews: int = 0
    features: List[str] = Field(default_factory=list)
    color: Optional[str] = None
    in_stock: bool = True
    discount: int = 0
    hidden_on_home: bool = False

    model_config = {"frozen": True}

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict; optional columns that are unset are left out."""
        return self.model_dump(exclude_none=True)


class ProductCreate(BaseModel):
    """
    Body of POST /api/products.

    rating and reviews start at zero; the admin write path may set them
    explicitly (e.g. when importing a catalogue). original_price defaults
    to price when omitted.
    """

    name: str
    description: str = ""
    price: float = Field(ge=0)
    original_price: Optional[float] = Field(default=None, ge=0)
    image_url: str = ""
    category: str = ""
    rating: float = 0
    reviews: int = Field(default=0, ge=0)
    features: List[str] = Field(default_factory=list)
    color: Optional[str] = None
    in_stock: bool = True
    discount: int = 0
    hidden_on_home: bool = False

    def to_record(self) -> Dict[str, Any]:
        record = self.model_dump()
        if not record["original_price"]:
            record["original_price"] = self.price
        # An empty string from a form is stored as NULL, not ""
        record["color"] = self.color or None
        return record


class ProductUpdate(BaseModel):
    """
    Body of PUT /api/products: `id` plus any subset of product fields.

    id is optional at the schema level so a missing id is reported as the
    route's own 400 ("Product ID is required") rather than a 422.
    """

    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    original_price: Optional[float] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    category: Optional[str] = None
    features: Optional[List[str]] = None
    color: Optional[str] = None
    in_stock: Optional[bool] = None
    discount: Optional[int] = None
    hidden_on_home: Optional[bool] = None

    def to_changes(self) -> Dict[str, Any]:
        """Only the fields the client actually sent, without the id."""
        changes = self.model_dump(exclude_unset=True)
        changes.pop("id", None)
        return changes


class ProductImage(BaseModel):
    """A row of `product_images`; many per product, shown by display_order."""

    id: int
    product_id: int
    image_url: str
    file_name: Optional[str] = None
    display_order: int = 0
    is_primary: bool = False
