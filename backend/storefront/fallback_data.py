"""
Storefront Edge API — Fallback Product Dataset
===============================================

What:  Five hand-authored products served when the remote store is unreachable,
       times out, or has no visible products.
Why:   The storefront home page must render something even during an outage.
How:   An immutable tuple of frozen Product models. Callers always receive
       fresh dicts from `fallback_products()`, so post-processing (which
       rewrites ids) can never leak back into the shared dataset.

These records are never written to the remote store.
"""

from typing import Any, Dict, List, Optional, Tuple

from storefront.schemas.product import Product

FALLBACK_PRODUCTS: Tuple[Product, ...] = (
    Product(
        id=1,
        name="Gaming Keyboard Pro",
        price=129.99,
        original_price=159.99,
        image_url="/products/keyboard.png",
        category="keyboard",
        rating=4.8,
        reviews=245,
        description="Premium mechanical gaming keyboard with RGB lighting and programmable keys",
        features=["Mechanical switches", "RGB lighting", "Programmable keys", "Wrist rest"],
        in_stock=True,
        discount=19,
        hidden_on_home=False,
    ),
    Product(
        id=2,
        name="Wireless Gaming Mouse",
        price=89.99,
        original_price=119.99,
        image_url="/products/key.png",
        category="mouse",
        rating=4.7,
        reviews=189,
        description="High-precision wireless gaming mouse with customizable DPI",
        features=["Wireless", "Customizable DPI", "RGB lighting", "Ergonomic design"],
        in_stock=True,
        discount=25,
        hidden_on_home=False,
    ),
    Product(
        id=3,
        name="Premium Headphones",
        price=199.99,
        original_price=249.99,
        image_url="/products/Screenshot 2025-08-02 215007.png",
        category="audio",
        rating=4.9,
        reviews=312,
        description="Studio-quality headphones with noise cancellation",
        features=["Noise cancellation", "Bluetooth", "40-hour battery", "Premium audio"],
        in_stock=True,
        discount=20,
        hidden_on_home=False,
    ),
    Product(
        id=4,
        name="Gaming Monitor",
        price=299.99,
        original_price=399.99,
        image_url="/products/Screenshot 2025-08-02 215024.png",
        category="monitor",
        rating=4.6,
        reviews=156,
        description="27-inch 144Hz gaming monitor with 1ms response time",
        features=["144Hz refresh rate", "1ms response", "FreeSync", "HDR support"],
        in_stock=True,
        discount=25,
        hidden_on_home=False,
    ),
    Product(
        id=5,
        name="Gaming Speaker System",
        price=149.99,
        original_price=199.99,
        image_url="/products/Screenshot 2025-08-02 215110.png",
        category="speaker",
        rating=4.5,
        reviews=98,
        description="Immersive gaming speaker system with subwoofer",
        features=["2.1 Channel", "Subwoofer", "RGB lighting", "Gaming optimized"],
        in_stock=True,
        discount=25,
        hidden_on_home=False,
    ),
)


def fallback_products(category: Optional[str] = None) -> List[Dict[str, Any]]:
    """Fresh copies of the fallback records, optionally limited to one category."""
    return [
        product.to_payload()
        for product in FALLBACK_PRODUCTS
        if category is None or product.category == category
    ]


def fallback_product(product_id: int) -> Optional[Dict[str, Any]]:
    for product in FALLBACK_PRODUCTS:
        if product.id == product_id:
            return product.to_payload()
    return None
