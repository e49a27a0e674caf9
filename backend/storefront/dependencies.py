"""
Storefront Edge API — Service Container and FastAPI Dependencies
=================================================================

What:  Builds every service once per process and hands them to routes.
Why:   The two remote handles (anon reader, admin client) own connection
       pools and must be shared, not recreated per request.
How:   The lifespan in main.py calls `build_container()` and stores the result
       on `app.state.services`; route handlers declare `Depends(get_*)`
       functions that read it back from the request.
Who:   Routes (via Depends) and tests (which install a container built on a
       fake remote store).

Wiring:
    RemoteHandles.reader ──▶ EdgeResourceLayer, StorageService (listing)
    RemoteHandles.admin  ──▶ ProductService, OrderService, QRCodeService,
                             StorageService, ProductImageService,
                             HeroImageService (+ SchemaCapabilities)
"""

import random
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from storefront.config import Settings
from storefront.remote_client import RemoteDataClient, RemoteReader
from storefront.services.edge_service import EdgeResourceLayer
from storefront.services.image_service import (
    HeroImageService,
    ProductImageService,
    SchemaCapabilities,
)
from storefront.services.order_service import OrderService, QRCodeService
from storefront.services.product_service import ProductService
from storefront.services.storage_service import StorageService


@dataclass(frozen=True)
class ServiceContainer:
    reader: RemoteReader
    edge: EdgeResourceLayer
    products: ProductService
    product_images: ProductImageService
    hero_images: HeroImageService
    orders: OrderService
    qr_codes: QRCodeService
    storage: StorageService


def build_container(
    reader: RemoteReader,
    admin: RemoteDataClient,
    config: Settings,
    capabilities: SchemaCapabilities = SchemaCapabilities(),
    rng: Optional[random.Random] = None,
) -> ServiceContainer:
    storage = StorageService(
        admin,
        reader=reader,
        max_upload_size=config.max_upload_size,
        asset_list_limit=config.asset_list_limit,
    )
    return ServiceContainer(
        reader=reader,
        edge=EdgeResourceLayer(reader, timeout=config.edge_timeout_seconds, rng=rng),
        products=ProductService(admin),
        product_images=ProductImageService(admin, storage),
        hero_images=HeroImageService(admin, storage, capabilities),
        orders=OrderService(admin),
        qr_codes=QRCodeService(admin),
        storage=storage,
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_edge(request: Request) -> EdgeResourceLayer:
    return get_services(request).edge


def get_product_service(request: Request) -> ProductService:
    return get_services(request).products


def get_product_image_service(request: Request) -> ProductImageService:
    return get_services(request).product_images


def get_hero_image_service(request: Request) -> HeroImageService:
    return get_services(request).hero_images


def get_order_service(request: Request) -> OrderService:
    return get_services(request).orders


def get_qr_code_service(request: Request) -> QRCodeService:
    return get_services(request).qr_codes


def get_storage_service(request: Request) -> StorageService:
    return get_services(request).storage
