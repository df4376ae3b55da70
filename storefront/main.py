# storefront/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from .config import settings
from .catalog import catalog_router
from .catalog.cache import DetailCache
from .catalog.contentful_service import ContentfulClient
from .catalog.router import get_client, get_detail_cache, lookup_product
from .catalog.store import list_product_ids


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def prewarm_details(client: ContentfulClient, cache: DetailCache) -> int:
    """Fill the detail cache with every product the backend lists.

    Ids that fail to load are left to on-demand lookups.  Returns the
    number of products cached.
    """
    ids = list_product_ids(client)
    for product_id in ids:
        lookup_product(client, cache, product_id)
    logger.info("Pre-built %d of %d product pages", len(cache), len(ids))
    return len(cache)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.PREWARM_DETAILS:
        # Blocking HTTP calls; keep them off the event loop.
        await run_in_threadpool(
            prewarm_details,
            app.dependency_overrides.get(get_client, get_client)(),
            app.dependency_overrides.get(get_detail_cache, get_detail_cache)(),
        )
    yield


app = FastAPI(
    title="Storefront catalogue",
    description=(
        "Product listing and detail API backed by a headless CMS: "
        "pagination, category filtering and image resolution."
    ),
    version="1.0.0",
    lifespan=lifespan,
)
app.include_router(catalog_router)


# Liveness check
@app.get("/")
def health_check():
    return {"status": "ok", "message": "Storefront catalogue live"}
