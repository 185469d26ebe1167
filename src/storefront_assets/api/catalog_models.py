"""Pydantic models for admin catalog payloads."""

from pydantic import BaseModel, Field

from storefront_assets.domain.catalog import (
    AdvertisementDraft,
    CategoryDraft,
    ColorImage,
    ProductDraft,
)


class ColorImagePayload(BaseModel):
    """Image shown for one product color."""

    color: str
    image_url: str


class ProductPayload(BaseModel):
    """Product create/update payload."""

    title: str
    description: str
    price: float
    image_url: str
    sizes: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    color_images: list[ColorImagePayload] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    hero_image: str | None = None
    hero_tagline: str | None = None
    stock: int = 0

    def to_draft(self) -> ProductDraft:
        return ProductDraft(
            title=self.title,
            description=self.description,
            price=self.price,
            image_url=self.image_url,
            sizes=list(self.sizes),
            colors=list(self.colors),
            color_images=[
                ColorImage(color=item.color, image_url=item.image_url)
                for item in self.color_images
            ],
            categories=list(self.categories),
            hero_image=self.hero_image,
            hero_tagline=self.hero_tagline,
            stock=self.stock,
        )


class AdvertisementPayload(BaseModel):
    """Advertisement create/update payload."""

    title: str
    image_url: str
    description: str | None = None
    button_text: str = "Shop Now"
    button_link: str = "/products"
    is_active: bool = True
    priority: int = 1

    def to_draft(self) -> AdvertisementDraft:
        return AdvertisementDraft(**self.model_dump())


class CategoryPayload(BaseModel):
    """Category create payload."""

    name: str
    description: str | None = None
    image_url: str | None = None

    def to_draft(self) -> CategoryDraft:
        return CategoryDraft(**self.model_dump())


class DiscardUploadPayload(BaseModel):
    """Staged upload the admin removed from a form."""

    url: str


class CleanupPayload(BaseModel):
    """Manual session cleanup request."""

    session_id: str | None = None
