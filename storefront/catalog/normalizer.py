"""Mapping of raw backend entries to canonical ``Product`` records."""

from typing import Any, List

from .schemas import Product, RawEntry


def _text(value: Any, default: str = "") -> str:
    # Empty values fall back to the default; non-string values are kept
    # in their string form rather than rejected.
    if value is None or value == "":
        return default
    return value if isinstance(value, str) else str(value)


def normalize_entry(entry: RawEntry, images: List[str]) -> Product:
    fields = entry.entry_fields
    brand = fields.brandName if fields.brandName not in (None, "") else fields.author
    return Product(
        id=entry.sys.id,
        title=_text(fields.title, "Untitled Product"),
        description=_text(fields.description),
        brand_name=_text(brand),
        price=fields.price,
        category=_text(fields.category),
        images=list(images),
    )
