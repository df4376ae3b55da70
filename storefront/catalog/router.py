"""
Route definitions for the catalogue API.

Endpoints under /api/catalog:
- GET  /products                                : one page of products (+ categories)
- GET  /products/{product_id}                   : one product
- GET  /product-ids                             : every product id (pre-building)
- GET  /categories                              : category vocabulary
- GET  /session/{session_id}/products           : products seen in a session
- GET  /session/{session_id}/products/{id}      : one product seen in a session

The ``page`` and ``category`` query parameters are the only source of
pagination and filter state.  Passing ``session_id`` to the listing or
detail endpoints records the returned products in that session.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from ..config import settings
from .cache import DetailCache, SessionProductStore
from .contentful_service import ContentfulClient
from .schemas import Listing, Product, ProductLookup
from .store import discover_categories, get_product, list_product_ids, list_products, parse_page


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


# ---------------------------------------------------------------------------
# Dependencies
#
# The client and both stores are process-wide objects handed to the
# routes through FastAPI dependencies, so tests (or another deployment)
# can substitute their own via ``app.dependency_overrides``.

@lru_cache(maxsize=1)
def get_client() -> ContentfulClient:
    return ContentfulClient(settings)


@lru_cache(maxsize=1)
def get_detail_cache() -> DetailCache:
    return DetailCache(revalidate_seconds=settings.REVALIDATE_SECONDS)


@lru_cache(maxsize=1)
def get_session_store() -> SessionProductStore:
    return SessionProductStore()


def revalidate_product(client: ContentfulClient, cache: DetailCache, product_id: str) -> None:
    """Fetch ``product_id`` again and store the outcome in ``cache``."""
    cache.apply_refresh(product_id, get_product(client, product_id))


def lookup_product(
    client: ContentfulClient,
    cache: DetailCache,
    product_id: str,
    background_tasks: Optional[BackgroundTasks] = None,
) -> ProductLookup:
    """Serve ``product_id`` from the cache, falling back to the backend.

    A stale hit is returned as-is and a revalidation is queued on
    ``background_tasks``.  Only successful lookups are cached.
    """
    cached, is_stale = cache.get(product_id)
    if cached is not None:
        if is_stale and background_tasks is not None and cache.begin_refresh(product_id):
            logger.info("Serving stale product %s; revalidating", product_id)
            background_tasks.add_task(revalidate_product, client, cache, product_id)
        return ProductLookup(status="ok", product=cached)
    lookup = get_product(client, product_id)
    if lookup.status == "ok" and lookup.product is not None:
        cache.put(lookup.product)
    return lookup


@router.get("/products", response_model=Listing)
def list_products_route(
    page: Optional[str] = Query(default=None, description="Current page (1-indexed); invalid values read as 1"),
    category: Optional[str] = Query(default=None, description="Category filter; 'all' disables it"),
    session_id: Optional[str] = Query(default=None, description="Record products in this session"),
    client: ContentfulClient = Depends(get_client),
    sessions: SessionProductStore = Depends(get_session_store),
) -> Listing:
    """
    Returns a paginated list of products.

    Failures are reported in the ``error`` field of an otherwise empty
    listing rather than as an HTTP error.
    """
    listing = list_products(client, page=parse_page(page), category=category)
    if session_id and listing.products:
        sessions.upsert_many(session_id, listing.products)
    return listing


@router.get("/products/{product_id}", response_model=Product)
def get_product_route(
    product_id: str,
    background_tasks: BackgroundTasks,
    session_id: Optional[str] = Query(default=None, description="Record the product in this session"),
    client: ContentfulClient = Depends(get_client),
    cache: DetailCache = Depends(get_detail_cache),
    sessions: SessionProductStore = Depends(get_session_store),
) -> Product:
    lookup = lookup_product(client, cache, product_id, background_tasks)
    if lookup.status == "not_found":
        raise HTTPException(status_code=404, detail="Product not found")
    if lookup.status == "error" or lookup.product is None:
        raise HTTPException(status_code=502, detail=lookup.error or "Failed to fetch product")
    if session_id:
        sessions.upsert(session_id, lookup.product)
    return lookup.product


@router.get("/product-ids", response_model=List[str])
def list_product_ids_route(client: ContentfulClient = Depends(get_client)) -> List[str]:
    return list_product_ids(client)


@router.get("/categories", response_model=List[str])
def list_categories_route(client: ContentfulClient = Depends(get_client)) -> List[str]:
    return discover_categories(client)


@router.get("/session/{session_id}/products", response_model=List[Product])
def list_session_products(
    session_id: str,
    sessions: SessionProductStore = Depends(get_session_store),
) -> List[Product]:
    """Return the products already seen in a session, in first-seen order."""
    return sessions.products(session_id)


@router.get("/session/{session_id}/products/{product_id}", response_model=Product)
def get_session_product(
    session_id: str,
    product_id: str,
    sessions: SessionProductStore = Depends(get_session_store),
) -> Product:
    product = sessions.get(session_id, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not seen in this session")
    return product
