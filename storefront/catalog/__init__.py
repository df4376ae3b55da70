"""
Catalog package for the storefront API.

This package fetches product entries from a headless CMS (Contentful),
normalizes them into ``Product`` records and exposes a small REST API
for browsing them: a paginated, category-filtered listing, a detail
lookup by identifier, the list of every product id (for pre-building
detail pages) and the category vocabulary.  Products a visitor has
already seen can be kept per session so a detail view does not need to
refetch them.
"""

from .router import router as catalog_router  # noqa: F401
