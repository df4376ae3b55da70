"""
Pydantic schema definitions for the catalog module.

Two groups of models live here.  The first mirrors the payloads of the
content backend (``RawEntry``, ``AssetRecord``, ``EntryCollection``) and
is validated as soon as a response is decoded, so the rest of the
package never pokes at loosely-typed dictionaries.  Field *values* are
not checked beyond presence; only the structural parts the catalogue
depends on (identifiers, image links) are.

The second group is what the catalogue hands out: ``Product`` is the
canonical record rendered by the front-end, ``Listing`` bundles one page
of products with pagination metadata and the category vocabulary, and
``ProductLookup`` is the outcome of a single-product lookup.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Literal


class SysRef(BaseModel):
    id: str


class AssetLink(BaseModel):
    """A reference from an entry to an asset, ``{"sys": {"id": ...}}``."""

    sys: SysRef


def _is_link(value: Any) -> bool:
    if isinstance(value, AssetLink):
        return True
    if not isinstance(value, dict):
        return False
    sys = value.get("sys")
    return isinstance(sys, dict) and isinstance(sys.get("id"), str) and bool(sys["id"])


class EntryFields(BaseModel):
    """The field map of a product entry.

    Every field is optional.  ``image`` is either a single asset link or
    an ordered list of them; anything in that position which is not a
    link is discarded here rather than failing the whole entry.
    """

    model_config = ConfigDict(extra="allow")

    title: Optional[Any] = None
    description: Optional[Any] = None
    brandName: Optional[Any] = None
    author: Optional[Any] = None
    price: Optional[Any] = None
    category: Optional[Any] = None
    image: Union[List[AssetLink], AssetLink, None] = None

    @field_validator("image", mode="before")
    @classmethod
    def _keep_links_only(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [v for v in value if _is_link(v)]
        if _is_link(value):
            return value
        return None


class RawEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sys: SysRef
    entry_fields: EntryFields = Field(default_factory=EntryFields, alias="fields")

    @field_validator("entry_fields", mode="before")
    @classmethod
    def _fields_default(cls, value: Any) -> Any:
        return value if value is not None else {}


class AssetFile(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: Optional[str] = None

    @field_validator("url", mode="before")
    @classmethod
    def _string_url(cls, value: Any) -> Any:
        return value if isinstance(value, str) and value else None


class AssetFields(BaseModel):
    model_config = ConfigDict(extra="allow")

    file: Optional[AssetFile] = None


class AssetRecord(BaseModel):
    """A binary asset; only the identifier and file URL are used."""

    model_config = ConfigDict(populate_by_name=True)

    sys: SysRef
    asset_fields: AssetFields = Field(default_factory=AssetFields, alias="fields")

    @field_validator("asset_fields", mode="before")
    @classmethod
    def _fields_default(cls, value: Any) -> Any:
        return value if value is not None else {}

    @property
    def id(self) -> str:
        return self.sys.id

    @property
    def url(self) -> Optional[str]:
        file = self.asset_fields.file
        return file.url if file is not None else None


class Includes(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    assets: List[AssetRecord] = Field(default_factory=list, alias="Asset")

    @field_validator("assets", mode="before")
    @classmethod
    def _assets_default(cls, value: Any) -> Any:
        return value if value is not None else []


class EntryCollection(BaseModel):
    """Response of the entries listing endpoint."""

    items: List[RawEntry] = Field(default_factory=list)
    includes: Includes = Field(default_factory=Includes)
    total: int = 0

    @field_validator("items", mode="before")
    @classmethod
    def _items_default(cls, value: Any) -> Any:
        return value if value is not None else []

    @field_validator("includes", mode="before")
    @classmethod
    def _includes_default(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator("total", mode="before")
    @classmethod
    def _total_default(cls, value: Any) -> Any:
        return value if value is not None else 0


class Product(BaseModel):
    """A canonical product record.

    ``image`` always equals the first element of ``images`` (or is
    ``None`` when there are no images); it is kept for consumers that
    only show a single picture.  ``price`` is passed through exactly as
    the backend stored it and stays ``None`` when the entry has none.
    """

    id: str
    title: str = "Untitled Product"
    description: str = ""
    brand_name: str = ""
    price: Optional[Any] = None
    category: str = ""
    images: List[str] = Field(default_factory=list)
    image: Optional[str] = None

    @model_validator(mode="after")
    def _primary_image(self) -> "Product":
        self.image = self.images[0] if self.images else None
        return self


class PageQuery(BaseModel):
    """Query parameters that address one listing page."""

    page: int
    category: Optional[str] = None


class Listing(BaseModel):
    """One page of products plus pagination metadata.

    ``categories`` is collected from the whole collection, not just the
    current page.  ``error`` is set when the page could not be fetched;
    the listing is then empty and reset to page 1.
    """

    products: List[Product] = Field(default_factory=list)
    page: int = 1
    page_size: int = 10
    total_products: int = 0
    total_pages: int = 1
    categories: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    error: Optional[str] = None
    previous_page: Optional[PageQuery] = None
    next_page: Optional[PageQuery] = None


LookupStatus = Literal["ok", "not_found", "error"]


class ProductLookup(BaseModel):
    status: LookupStatus
    product: Optional[Product] = None
    error: Optional[str] = None
