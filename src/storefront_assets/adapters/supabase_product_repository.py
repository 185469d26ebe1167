"""Supabase-backed product repository."""

from dataclasses import dataclass

from supabase import Client

from storefront_assets.domain.catalog import ColorImage, ProductDraft, ProductRecord
from storefront_assets.services.catalog import ProductRepository

_COLUMNS = (
    "id, title, description, price, image_url, sizes, colors, color_images, "
    "categories, hero_image, hero_tagline, stock"
)


@dataclass
class SupabaseProductRepository(ProductRepository):
    """Supabase implementation for product persistence."""

    client: Client

    def create_product(self, draft: ProductDraft) -> ProductRecord:
        """Insert a product row and return it."""
        response = self.client.table("products").insert(_to_row(draft)).execute()
        if not response.data:
            raise RuntimeError("Failed to create product")
        return _to_record(response.data[0])

    def update_product(
        self, product_id: str, draft: ProductDraft
    ) -> ProductRecord | None:
        """Update a product row, returning None when it does not exist."""
        response = (
            self.client.table("products")
            .update(_to_row(draft))
            .eq("id", product_id)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def delete_product(self, product_id: str) -> bool:
        """Delete a product row; return true when a row was removed."""
        response = self.client.table("products").delete().eq("id", product_id).execute()
        return bool(response.data)

    def get_product(self, product_id: str) -> ProductRecord | None:
        """Return a product by id."""
        response = (
            self.client.table("products")
            .select(_COLUMNS)
            .eq("id", product_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])


def _to_row(draft: ProductDraft) -> dict[str, object]:
    return {
        "title": draft.title,
        "description": draft.description,
        "price": draft.price,
        "image_url": draft.image_url,
        "sizes": draft.sizes,
        "colors": draft.colors,
        "color_images": [
            {"color": item.color, "image_url": item.image_url}
            for item in draft.color_images
        ],
        "categories": draft.categories,
        "hero_image": draft.hero_image,
        "hero_tagline": draft.hero_tagline,
        "stock": draft.stock,
        "in_stock": draft.stock > 0,
    }


def _to_record(row: dict[str, object]) -> ProductRecord:
    color_images = row.get("color_images") or []
    return ProductRecord(
        id=str(row["id"]),
        title=str(row["title"]),
        description=str(row.get("description") or ""),
        price=float(row.get("price") or 0),
        image_url=str(row["image_url"]),
        sizes=list(row.get("sizes") or []),
        colors=list(row.get("colors") or []),
        color_images=[
            ColorImage(color=str(item["color"]), image_url=str(item["image_url"]))
            for item in color_images
            if isinstance(item, dict)
        ],
        categories=[str(value) for value in row.get("categories") or []],
        hero_image=row.get("hero_image"),
        hero_tagline=row.get("hero_tagline"),
        stock=int(row.get("stock") or 0),
    )
