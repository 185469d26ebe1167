"""Supabase-backed advertisement repository."""

from dataclasses import asdict, dataclass

from supabase import Client

from storefront_assets.domain.catalog import AdvertisementDraft, AdvertisementRecord
from storefront_assets.services.catalog import AdvertisementRepository


@dataclass
class SupabaseAdvertisementRepository(AdvertisementRepository):
    """Supabase implementation for hero advertisements."""

    client: Client

    def create_advertisement(self, draft: AdvertisementDraft) -> AdvertisementRecord:
        """Insert an advertisement row and return it."""
        response = self.client.table("advertisements").insert(asdict(draft)).execute()
        if not response.data:
            raise RuntimeError("Failed to create advertisement")
        return _to_record(response.data[0])

    def update_advertisement(
        self, advertisement_id: str, draft: AdvertisementDraft
    ) -> AdvertisementRecord | None:
        """Update an advertisement row, returning None when it does not exist."""
        response = (
            self.client.table("advertisements")
            .update(asdict(draft))
            .eq("id", advertisement_id)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def delete_advertisement(self, advertisement_id: str) -> bool:
        """Delete an advertisement row; return true when a row was removed."""
        response = (
            self.client.table("advertisements")
            .delete()
            .eq("id", advertisement_id)
            .execute()
        )
        return bool(response.data)

    def get_advertisement(self, advertisement_id: str) -> AdvertisementRecord | None:
        """Return an advertisement by id."""
        response = (
            self.client.table("advertisements")
            .select("*")
            .eq("id", advertisement_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])


def _to_record(row: dict[str, object]) -> AdvertisementRecord:
    return AdvertisementRecord(
        id=str(row["id"]),
        title=str(row["title"]),
        image_url=str(row["image_url"]),
        description=row.get("description"),
        button_text=str(row.get("button_text") or "Shop Now"),
        button_link=str(row.get("button_link") or "/products"),
        is_active=bool(row.get("is_active", True)),
        priority=int(row.get("priority") or 1),
    )
