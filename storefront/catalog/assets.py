"""
Resolution of entry image references to URLs.

An entry's ``image`` field holds either one asset link or an ordered
list of them.  Listing responses carry the referenced assets inline, so
``resolve_images()`` looks them up locally.  Single-entry responses do
not, and ``resolve_images_remote()`` fetches each asset in turn instead.
In both modes the output keeps the order of the references and silently
leaves out any reference that cannot be resolved to a URL.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Union

from .errors import CatalogError
from .schemas import AssetLink, AssetRecord


logger = logging.getLogger(__name__)

ImageField = Union[List[AssetLink], AssetLink, None]


def _reference_ids(image_field: ImageField) -> List[str]:
    if image_field is None:
        return []
    if isinstance(image_field, AssetLink):
        return [image_field.sys.id]
    return [link.sys.id for link in image_field]


def resolve_images(image_field: ImageField, assets: Iterable[AssetRecord]) -> List[str]:
    """Map image references to URLs using the given asset records."""
    by_id: Dict[str, AssetRecord] = {}
    for asset in assets:
        # The first record wins if the backend repeats an asset.
        by_id.setdefault(asset.id, asset)
    urls: List[str] = []
    for asset_id in _reference_ids(image_field):
        asset = by_id.get(asset_id)
        if asset is not None and asset.url:
            urls.append(asset.url)
    return urls


def resolve_images_remote(
    image_field: ImageField,
    fetch_asset: Callable[[str], AssetRecord],
) -> List[str]:
    """Map image references to URLs by fetching every asset.

    Assets are fetched one after another.  A reference whose fetch fails
    is logged and skipped; it never aborts the remaining references.
    """
    urls: List[str] = []
    for asset_id in _reference_ids(image_field):
        try:
            asset: Optional[AssetRecord] = fetch_asset(asset_id)
        except CatalogError as exc:
            logger.warning("Skipping asset %s: %s", asset_id, exc)
            continue
        if asset is not None and asset.url:
            urls.append(asset.url)
    return urls
