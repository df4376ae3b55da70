"""
Catalogue operations built on top of the Contentful client.

``list_products()``, ``get_product()`` and ``list_product_ids()`` are
what the router (or any other consumer) calls.  Each one catches backend
failures at its own boundary and returns a plain value: a ``Listing``
with ``error`` set, a ``ProductLookup`` with a ``not_found`` or
``error`` status, or an empty id list.  Nothing raised by the HTTP layer
reaches the caller.

Backend calls are issued sequentially; there is no retry and no
caching here (see ``cache.py`` for the detail cache).
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Optional

from ..config import settings
from .assets import resolve_images, resolve_images_remote
from .contentful_service import ContentfulClient
from .errors import CatalogError, NotFoundError
from .normalizer import normalize_entry
from .schemas import EntryCollection, Listing, PageQuery, ProductLookup


logger = logging.getLogger(__name__)

# Category value meaning "no filter".
ALL_CATEGORIES = "all"


def _category_filter(category: Optional[str]) -> Optional[str]:
    """Return the backend filter value, or ``None`` for no filter.

    Only ``None``, the empty string and the ``"all"`` sentinel disable
    filtering; any other value is passed through untouched.
    """
    if not category or category == ALL_CATEGORIES:
        return None
    return category


def parse_page(value: Any) -> int:
    """Read a page number from a query value.

    Missing, non-numeric and out-of-range values all map to page 1.
    """
    try:
        page = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return max(1, page)


def page_query(page: int, category: Optional[str] = None) -> PageQuery:
    """Build the query parameters addressing ``page`` of a listing.

    The category is left out when it is absent or the ``"all"`` sentinel,
    so the same location is produced however "all" was selected.
    """
    return PageQuery(page=max(1, int(page)), category=_category_filter(category))


def _collect_categories(collection: EntryCollection) -> List[str]:
    found = set()
    for entry in collection.items:
        value = entry.entry_fields.category
        if isinstance(value, str) and value:
            found.add(value)
    return sorted(found)


def discover_categories(client: ContentfulClient) -> List[str]:
    """Return the sorted distinct categories of the whole collection.

    Failure is not fatal: it is logged and an empty list is returned.
    """
    try:
        collection = client.get_entries(limit=settings.CATEGORY_DISCOVERY_LIMIT)
    except CatalogError as exc:
        logger.warning("Category discovery failed: %s", exc)
        return []
    return _collect_categories(collection)


def list_products(
    client: ContentfulClient,
    page: int = 1,
    category: Optional[str] = None,
) -> Listing:
    """Return one page of products and the category vocabulary.

    Two queries are issued in order: the requested page (filtered by
    ``category`` unless it is ``"all"``) and an unfiltered query used
    only to enumerate categories.  If the page query fails the result is
    an empty listing on page 1 with ``error`` set; a failed category
    query only empties ``categories``.
    """
    page_size = settings.PAGE_SIZE
    page = parse_page(page)
    skip = (page - 1) * page_size
    backend_category = _category_filter(category)

    try:
        collection = client.get_entries(limit=page_size, skip=skip, category=backend_category)
    except CatalogError as exc:
        logger.error("Error fetching products page %s: %s", page, exc)
        return Listing(
            page=1,
            page_size=page_size,
            category=backend_category,
            error=f"Failed to fetch products: {exc}",
        )

    categories = discover_categories(client)

    if not collection.items:
        logger.warning("No products found for page %s (category=%s)", page, backend_category)
        return Listing(
            page=page,
            page_size=page_size,
            total_products=0,
            total_pages=1,
            categories=categories,
            category=backend_category,
            previous_page=page_query(page - 1, backend_category) if page > 1 else None,
        )

    assets = collection.includes.assets
    products = [
        normalize_entry(entry, resolve_images(entry.entry_fields.image, assets))
        for entry in collection.items
    ]

    total = collection.total
    total_pages = math.ceil(total / page_size)
    return Listing(
        products=products,
        page=page,
        page_size=page_size,
        total_products=total,
        total_pages=total_pages,
        categories=categories,
        category=backend_category,
        previous_page=page_query(page - 1, backend_category) if page > 1 else None,
        next_page=page_query(page + 1, backend_category) if page < total_pages else None,
    )


def get_product(client: ContentfulClient, product_id: str) -> ProductLookup:
    """Look up a single product by identifier.

    Images are resolved by fetching each referenced asset, since the
    single-entry response does not inline them.
    """
    try:
        entry = client.get_entry(product_id)
    except NotFoundError:
        logger.info("Product %s not found", product_id)
        return ProductLookup(status="not_found")
    except CatalogError as exc:
        logger.error("Error fetching product %s: %s", product_id, exc)
        return ProductLookup(status="error", error=f"Failed to fetch product: {exc}")

    images = resolve_images_remote(entry.entry_fields.image, client.get_asset)
    return ProductLookup(status="ok", product=normalize_entry(entry, images))


def list_product_ids(client: ContentfulClient) -> List[str]:
    """Return the identifiers of all product entries.

    Used to pre-build detail pages.  On failure an empty list is
    returned so missing ids fall back to on-demand lookups.
    """
    try:
        collection = client.get_entries()
    except CatalogError as exc:
        logger.error("Error fetching product ids: %s", exc)
        return []
    return [entry.sys.id for entry in collection.items]
