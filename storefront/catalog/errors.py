"""
Errors raised while talking to the content backend.

Only two outcomes are distinguished: the requested record does not exist
(``NotFoundError``) and everything else (``FetchError``), which covers
network failures, non-success statuses and payloads that cannot be
parsed.  Both carry the upstream message.  Callers in ``store.py`` catch
them at the operation boundary and turn them into result values.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for backend failures."""


class NotFoundError(CatalogError):
    """The backend answered 404 for a single-record lookup."""


class FetchError(CatalogError):
    """Any other failure: network error, non-success status, bad payload."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
