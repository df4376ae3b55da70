"""
In-memory stores used by the catalogue routes.

``DetailCache`` keeps successful product lookups and reports when a
cached copy is older than the revalidation interval.  Stale copies are
still served; the caller schedules a refresh for later requests
(stale-while-revalidate).  Nothing is ever expired on a timer.

``SessionProductStore`` remembers, per browsing session, the products a
visitor has already seen, so a detail view can be served from what a
listing already loaded.  Inserts are upserts by product id and are
synchronised with a lock, so two concurrent writers cannot create
duplicates.  Entries are never evicted.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .schemas import Product, ProductLookup


logger = logging.getLogger(__name__)


class DetailCache:
    def __init__(self, revalidate_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.revalidate_seconds = revalidate_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[Product, float]] = {}
        self._refreshing: set = set()
        self._lock = threading.Lock()

    def get(self, product_id: str) -> Tuple[Optional[Product], bool]:
        """Return ``(product, is_stale)``; ``(None, False)`` on a miss."""
        with self._lock:
            cached = self._entries.get(product_id)
        if cached is None:
            return None, False
        product, stored_at = cached
        return product, self._clock() - stored_at >= self.revalidate_seconds

    def put(self, product: Product) -> None:
        with self._lock:
            self._entries[product.id] = (product, self._clock())

    def discard(self, product_id: str) -> None:
        with self._lock:
            self._entries.pop(product_id, None)

    def __contains__(self, product_id: str) -> bool:
        with self._lock:
            return product_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def begin_refresh(self, product_id: str) -> bool:
        """Mark ``product_id`` as refreshing; ``False`` if already in progress."""
        with self._lock:
            if product_id in self._refreshing:
                return False
            self._refreshing.add(product_id)
            return True

    def apply_refresh(self, product_id: str, lookup: ProductLookup) -> None:
        """Store the outcome of a background revalidation.

        A fresh product replaces the cached one and a not-found result
        drops it.  An error keeps serving the stale copy.
        """
        try:
            if lookup.status == "ok" and lookup.product is not None:
                self.put(lookup.product)
            elif lookup.status == "not_found":
                logger.info("Product %s disappeared; dropping cached copy", product_id)
                self.discard(product_id)
            else:
                logger.warning("Revalidation of %s failed: %s", product_id, lookup.error)
        finally:
            with self._lock:
                self._refreshing.discard(product_id)


class SessionProductStore:
    def __init__(self):
        self._sessions: Dict[str, Dict[str, Product]] = {}
        self._lock = threading.Lock()

    def upsert(self, session_id: str, product: Product) -> bool:
        """Insert or replace ``product`` in a session.

        Returns ``True`` when the product was not known to the session.
        Insertion order is preserved; a replaced product keeps its slot.
        """
        with self._lock:
            products = self._sessions.setdefault(str(session_id), {})
            is_new = product.id not in products
            products[product.id] = product
            return is_new

    def upsert_many(self, session_id: str, products: Iterable[Product]) -> int:
        return sum(1 for product in products if self.upsert(session_id, product))

    def get(self, session_id: str, product_id: str) -> Optional[Product]:
        with self._lock:
            return self._sessions.get(str(session_id), {}).get(product_id)

    def products(self, session_id: str) -> List[Product]:
        with self._lock:
            return list(self._sessions.get(str(session_id), {}).values())
