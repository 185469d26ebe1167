"""Domain models for staged image uploads."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class AssetCategory(StrEnum):
    """Logical category of an uploaded image."""

    PRODUCTS = "products"
    ADVERTISEMENTS = "advertisements"
    CATEGORIES = "categories"


FINAL_PREFIXES: dict[AssetCategory, str] = {
    AssetCategory.PRODUCTS: "products/",
    AssetCategory.ADVERTISEMENTS: "hero/",
    AssetCategory.CATEGORIES: "categories/",
}


@dataclass(frozen=True)
class TempAsset:
    """An uploaded object waiting in the staging area."""

    key: str
    category: AssetCategory
    uploaded_at: datetime
    url: str


@dataclass
class UploadSession:
    """One admin form interaction and the uploads it staged."""

    id: str
    last_activity: datetime
    assets: list[TempAsset] = field(default_factory=list)


@dataclass(frozen=True)
class ObjectInfo:
    """Metadata returned by a head call on a stored object."""

    key: str
    size: int
    content_type: str | None
    last_modified: datetime | None
    metadata: dict[str, str]
