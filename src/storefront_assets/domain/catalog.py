"""Domain models for catalog entities that reference images."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ColorImage:
    """Image shown for one product color."""

    color: str
    image_url: str


@dataclass(frozen=True)
class ProductDraft:
    """Product fields submitted by the admin form."""

    title: str
    description: str
    price: float
    image_url: str
    sizes: list[str] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)
    color_images: list[ColorImage] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    hero_image: str | None = None
    hero_tagline: str | None = None
    stock: int = 0


@dataclass(frozen=True)
class ProductRecord:
    """Represents a persisted product."""

    id: str
    title: str
    description: str
    price: float
    image_url: str
    sizes: list[str]
    colors: list[str]
    color_images: list[ColorImage]
    categories: list[str]
    hero_image: str | None
    hero_tagline: str | None
    stock: int


@dataclass(frozen=True)
class AdvertisementDraft:
    """Hero advertisement fields submitted by the admin form."""

    title: str
    image_url: str
    description: str | None = None
    button_text: str = "Shop Now"
    button_link: str = "/products"
    is_active: bool = True
    priority: int = 1


@dataclass(frozen=True)
class AdvertisementRecord:
    """Represents a persisted hero advertisement."""

    id: str
    title: str
    image_url: str
    description: str | None
    button_text: str
    button_link: str
    is_active: bool
    priority: int


@dataclass(frozen=True)
class CategoryDraft:
    """Category fields submitted by the admin form."""

    name: str
    description: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class CategoryRecord:
    """Represents a persisted category."""

    id: str
    name: str
    description: str | None
    image_url: str | None
