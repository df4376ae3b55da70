"""
Contentful integration for the catalogue.  This module talks to the
Content Delivery API of a single space/environment and exposes three
read-only calls on ``ContentfulClient``:

* ``get_entries()``: one page of product entries, optionally filtered
  by category, with the referenced assets inlined under
  ``includes.Asset``.

* ``get_entry()``: a single entry by its identifier.  Assets are not
  inlined in this response.

* ``get_asset()``: a single asset record by its identifier.

Every request carries the space, environment and access token.  Failed
requests raise ``NotFoundError`` (404) or ``FetchError`` (anything
else); there are no retries and no caching at this level.  Only the
Python standard library is used for HTTP requests.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..config import Settings, settings as default_settings
from .errors import FetchError, NotFoundError
from .schemas import AssetRecord, EntryCollection, RawEntry


logger = logging.getLogger(__name__)


def _http_get_json(url: str, timeout: float = 10.0) -> Any:
    """Perform an HTTP GET and return the decoded JSON body.

    A 404 raises ``NotFoundError``; any other non-200 status, network
    error or undecodable body raises ``FetchError``.
    """
    request = urllib.request.Request(url, headers={'Accept': 'application/json'})
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            if response.status != 200:
                raise FetchError(f"HTTP {response.status}", status=response.status)
            data = response.read().decode('utf-8', errors='ignore')
    except urllib.error.HTTPError as exc:
        if exc.code == 404:
            raise NotFoundError(f"HTTP 404 {exc.reason}") from exc
        raise FetchError(f"HTTP {exc.code} {exc.reason}", status=exc.code) from exc
    except urllib.error.URLError as exc:
        raise FetchError(str(exc.reason)) from exc
    except OSError as exc:
        raise FetchError(str(exc)) from exc
    except http.client.HTTPException as exc:
        # Truncated bodies and malformed status lines.
        raise FetchError(f"{type(exc).__name__}: {exc}") from exc
    try:
        return json.loads(data)
    except ValueError as exc:
        raise FetchError(f"Invalid JSON in response: {exc}") from exc


def _redact(url: str) -> str:
    """Hide the access token when a URL is written to the log."""
    parts = urllib.parse.urlsplit(url)
    query = [
        (key, '***' if key == 'access_token' else value)
        for key, value in urllib.parse.parse_qsl(parts.query)
    ]
    return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))


class ContentfulClient:
    def __init__(self, config: Optional[Settings] = None):
        config = config or default_settings
        self.space_id = config.CONTENTFUL_SPACE_ID
        self.access_token = config.CONTENTFUL_ACCESS_TOKEN
        self.environment = config.CONTENTFUL_ENV or 'master'
        self.base_url = config.CONTENTFUL_CDN_URL.rstrip('/')
        self.content_type = config.CONTENTFUL_CONTENT_TYPE
        self.timeout = config.HTTP_TIMEOUT

    def _url(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        query: Dict[str, Any] = {'access_token': self.access_token}
        query.update(params or {})
        space = urllib.parse.quote(self.space_id, safe='')
        env = urllib.parse.quote(self.environment, safe='')
        return (
            f"{self.base_url}/spaces/{space}/environments/{env}/{path}"
            f"?{urllib.parse.urlencode(query)}"
        )

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = self._url(path, params)
        logger.info("Fetching %s", _redact(url))
        return _http_get_json(url, timeout=self.timeout)

    def get_entries(
        self,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
        category: Optional[str] = None,
    ) -> EntryCollection:
        """Return a page of product entries.

        ``limit`` and ``skip`` are left out of the query when ``None`` so
        the backend default applies.  ``category`` is matched exactly
        against ``fields.category``.
        """
        params: Dict[str, Any] = {'content_type': self.content_type}
        if limit is not None:
            params['limit'] = int(limit)
        if skip is not None:
            params['skip'] = int(skip)
        if category is not None:
            params['fields.category'] = category
        data = self._get('entries', params)
        try:
            return EntryCollection.model_validate(data)
        except ValidationError as exc:
            raise FetchError(f"Malformed entries response: {exc.error_count()} error(s)") from exc

    def get_entry(self, entry_id: str) -> RawEntry:
        data = self._get(f"entries/{urllib.parse.quote(entry_id, safe='')}")
        try:
            return RawEntry.model_validate(data)
        except ValidationError as exc:
            raise FetchError(f"Malformed entry {entry_id}: {exc.error_count()} error(s)") from exc

    def get_asset(self, asset_id: str) -> AssetRecord:
        data = self._get(f"assets/{urllib.parse.quote(asset_id, safe='')}")
        try:
            return AssetRecord.model_validate(data)
        except ValidationError as exc:
            raise FetchError(f"Malformed asset {asset_id}: {exc.error_count()} error(s)") from exc
