"""Supabase-backed category repository."""

from dataclasses import dataclass

from supabase import Client

from storefront_assets.domain.catalog import CategoryDraft, CategoryRecord
from storefront_assets.services.catalog import CategoryRepository


@dataclass
class SupabaseCategoryRepository(CategoryRepository):
    """Supabase implementation for categories."""

    client: Client

    def create_category(self, draft: CategoryDraft) -> CategoryRecord:
        """Insert a category row and return it."""
        response = self.client.table("categories").insert(_to_row(draft)).execute()
        if not response.data:
            raise RuntimeError("Failed to create category")
        return _to_record(response.data[0])

    def update_category(
        self, category_id: str, draft: CategoryDraft
    ) -> CategoryRecord | None:
        """Update a category row, returning None when it does not exist."""
        response = (
            self.client.table("categories")
            .update(_to_row(draft))
            .eq("id", category_id)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def delete_category(self, category_id: str) -> bool:
        """Delete a category row; return true when a row was removed."""
        response = (
            self.client.table("categories").delete().eq("id", category_id).execute()
        )
        return bool(response.data)

    def get_category(self, category_id: str) -> CategoryRecord | None:
        """Return a category by id."""
        response = (
            self.client.table("categories")
            .select("id, name, description, image_url")
            .eq("id", category_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])


def _to_row(draft: CategoryDraft) -> dict[str, object]:
    return {
        "name": draft.name,
        "description": draft.description,
        "image_url": draft.image_url,
    }


def _to_record(row: dict[str, object]) -> CategoryRecord:
    return CategoryRecord(
        id=str(row["id"]),
        name=str(row["name"]),
        description=row.get("description"),
        image_url=row.get("image_url"),
    )
