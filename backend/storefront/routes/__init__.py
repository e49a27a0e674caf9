# Routes package init
"""
Storefront Edge API — API Routes Package
=========================================

Route Inventory:
    - products.py:  /api/products (+ /{id}, /category/{c}, /dope-picks,
                    /weekly-picks, /with-images)
    - images.py:    /api/product-images, /api/hero-images, /api/hero-images/upload
    - orders.py:    /api/orders, /api/qr-codes
    - storage.py:   /api/assets, /api/storage/{product-images|qr-codes}
    - health.py:    /health

Routes stay thin: they read query params, forms and bodies, call a service,
and shape the response. Cache headers come from the EdgeResourceLayer.
"""
