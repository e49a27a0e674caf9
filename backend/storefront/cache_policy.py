"""
Storefront Edge API — Cache Policy Table
=========================================

What:  Per-resource-class cache lifetimes and the headers derived from them.
Why:   Edge reads are served with CDN-friendly headers so repeated storefront
       page loads do not reach the remote store at all.
How:   An immutable table maps each ResourceClass to a CachePolicy; every
       cached response is built through `cached_response()`.

Policy table:
    ┌────────────────┬───────────┬────────────────────────┐
    │ Resource class │ max-age   │ stale-while-revalidate │
    ├────────────────┼───────────┼────────────────────────┤
    │ products       │ 300s      │ 60s                    │
    │ product_images │ 600s      │ 120s                   │
    │ hero_images    │ 900s      │ 300s                   │
    └────────────────┴───────────┴────────────────────────┘

Fallback responses get exactly the same headers as live ones.
Write responses never go through this module.
"""

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping

from fastapi.responses import JSONResponse


class ResourceClass(str, enum.Enum):
    """Which cache policy (and fallback applicability) a read resolves to."""

    PRODUCTS = "products"
    PRODUCT_IMAGES = "product_images"
    HERO_IMAGES = "hero_images"


@dataclass(frozen=True)
class CachePolicy:
    """Seconds a response stays fresh, plus the extra stale-serving window."""

    fresh_for: int
    stale_revalidate_for: int

    def __post_init__(self) -> None:
        if self.fresh_for <= 0:
            raise ValueError(f"fresh_for must be positive, got {self.fresh_for}")
        if self.stale_revalidate_for < 0:
            raise ValueError(
                f"stale_revalidate_for must be non-negative, got {self.stale_revalidate_for}"
            )


CACHE_POLICIES: Mapping[ResourceClass, CachePolicy] = MappingProxyType({
    ResourceClass.PRODUCTS: CachePolicy(fresh_for=300, stale_revalidate_for=60),
    ResourceClass.PRODUCT_IMAGES: CachePolicy(fresh_for=600, stale_revalidate_for=120),
    ResourceClass.HERO_IMAGES: CachePolicy(fresh_for=900, stale_revalidate_for=300),
})

# Orders are not an edge resource class; the list endpoint carries this one header
ORDERS_LIST_CACHE_CONTROL = "public, max-age=120, stale-while-revalidate=30"


def policy_for(resource_class: ResourceClass) -> CachePolicy:
    return CACHE_POLICIES[ResourceClass(resource_class)]


def cache_headers(resource_class: ResourceClass) -> Dict[str, str]:
    """
    The three directives attached to every edge response.

    Cache-Control carries the full policy; the two CDN headers mirror only
    max-age so the CDN tier does not serve past the freshness window.
    """
    policy = policy_for(resource_class)
    return {
        "Cache-Control": (
            f"public, max-age={policy.fresh_for}, "
            f"stale-while-revalidate={policy.stale_revalidate_for}"
        ),
        "CDN-Cache-Control": f"public, max-age={policy.fresh_for}",
        "Vercel-CDN-Cache-Control": f"public, max-age={policy.fresh_for}",
    }


def cached_response(data: Any, resource_class: ResourceClass) -> JSONResponse:
    """Serialize `data` and stamp it with the resource class's cache headers."""
    return JSONResponse(content=data, headers=cache_headers(resource_class))
