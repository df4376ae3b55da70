"""Shared test fixtures and utilities for the catalogue test suite."""

from typing import Any, Dict, Iterable, List, Optional

import pytest

from storefront.catalog.errors import FetchError, NotFoundError
from storefront.catalog.schemas import AssetRecord, EntryCollection, RawEntry
from storefront.config import settings


def make_asset(asset_id: str, url: Optional[str] = None) -> Dict[str, Any]:
    """Build an asset payload as the backend returns it."""
    fields: Dict[str, Any] = {"title": asset_id}
    if url is not None:
        fields["file"] = {"url": url, "contentType": "image/jpeg"}
    return {"sys": {"id": asset_id, "type": "Asset"}, "fields": fields}


def make_entry(entry_id: str, image: Any = None, **fields: Any) -> Dict[str, Any]:
    """Build an entry payload.

    ``image`` may be an asset id (single link), a list of asset ids, or
    a pre-built value that is used verbatim.
    """
    if isinstance(image, str):
        fields["image"] = {"sys": {"type": "Link", "linkType": "Asset", "id": image}}
    elif isinstance(image, list) and all(isinstance(i, str) for i in image):
        fields["image"] = [
            {"sys": {"type": "Link", "linkType": "Asset", "id": i}} for i in image
        ]
    elif image is not None:
        fields["image"] = image
    return {"sys": {"id": entry_id, "type": "Entry"}, "fields": fields}


def _linked_ids(entry: Dict[str, Any]) -> List[str]:
    image = entry.get("fields", {}).get("image")
    links = image if isinstance(image, list) else [image] if image else []
    return [link["sys"]["id"] for link in links if isinstance(link, dict)]


class FakeContentful:
    """In-memory stand-in for ``ContentfulClient``.

    Entry listings are filtered and paginated like the real backend.
    Calls are classified by their ``limit``: the category discovery
    query uses the discovery limit, the id enumeration passes no limit,
    anything else is a page query.  Each kind can be made to fail.
    """

    def __init__(
        self,
        entries: Iterable[Dict[str, Any]] = (),
        assets: Iterable[Dict[str, Any]] = (),
        inline_assets: bool = True,
    ):
        self.entries = list(entries)
        self.assets = {a["sys"]["id"]: a for a in assets}
        self.inline_assets = inline_assets
        self.calls: List[tuple] = []
        self.fail_page: Optional[Exception] = None
        self.fail_discovery: Optional[Exception] = None
        self.fail_all: Optional[Exception] = None
        self.fail_entry: Dict[str, Exception] = {}
        self.fail_asset: Dict[str, Exception] = {}

    def get_entries(self, limit=None, skip=None, category=None) -> EntryCollection:
        self.calls.append(("entries", limit, skip, category))
        if limit is None:
            failure = self.fail_all
        elif limit == settings.CATEGORY_DISCOVERY_LIMIT:
            failure = self.fail_discovery
        else:
            failure = self.fail_page
        if failure is not None:
            raise failure

        matched = [
            e for e in self.entries
            if category is None or e.get("fields", {}).get("category") == category
        ]
        start = skip or 0
        end = start + limit if limit is not None else None
        items = matched[start:end]
        included = []
        if self.inline_assets:
            for entry in items:
                for asset_id in _linked_ids(entry):
                    if asset_id in self.assets:
                        included.append(self.assets[asset_id])
        return EntryCollection.model_validate(
            {"items": items, "includes": {"Asset": included}, "total": len(matched)}
        )

    def get_entry(self, entry_id: str) -> RawEntry:
        self.calls.append(("entry", entry_id))
        if entry_id in self.fail_entry:
            raise self.fail_entry[entry_id]
        for entry in self.entries:
            if entry["sys"]["id"] == entry_id:
                return RawEntry.model_validate(entry)
        raise NotFoundError(f"HTTP 404 entry {entry_id}")

    def get_asset(self, asset_id: str) -> AssetRecord:
        self.calls.append(("asset", asset_id))
        if asset_id in self.fail_asset:
            raise self.fail_asset[asset_id]
        if asset_id not in self.assets:
            raise NotFoundError(f"HTTP 404 asset {asset_id}")
        return AssetRecord.model_validate(self.assets[asset_id])


@pytest.fixture
def sample_assets():
    return [
        make_asset("img-1", "//images.example.com/1.jpg"),
        make_asset("img-2", "//images.example.com/2.jpg"),
        make_asset("img-3", "//images.example.com/3.jpg"),
        make_asset("img-nourl"),
    ]


@pytest.fixture
def sample_entries():
    return [
        make_entry("p1", image=["img-1", "img-2"], title="Runner", brandName="Swift",
                   price=89.5, category="shoes", description="Light trainer"),
        make_entry("p2", image="img-3", title="Cap", author="Hatter", price=12,
                   category="hats"),
        make_entry("p3", title="Loafer", category="shoes"),
        make_entry("p4", image=["img-missing", "img-1"], title="Belt", category="Accessories"),
        make_entry("p5", category=""),
    ]


@pytest.fixture
def fake_client(sample_entries, sample_assets):
    return FakeContentful(sample_entries, sample_assets)


@pytest.fixture
def unexpected_failure():
    return FetchError("HTTP 500 Internal Server Error", status=500)
