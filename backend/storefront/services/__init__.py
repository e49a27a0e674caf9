# Services package init
"""
Storefront Edge API — Services Layer
=====================================

Service Inventory:
    - EdgeResourceLayer (edge_service):   cached, fallback-backed storefront reads
    - ProductService (product_service):   admin product writes and full listing
    - ProductImageService, HeroImageService (image_service):
                                          upload-then-record image workflows
    - OrderService, QRCodeService (order_service)
    - StorageService (storage_service):   upload validation, blob naming, buckets

Services receive their remote handles in the constructor and keep no
per-request state; one instance of each lives on app.state for the process.
"""
