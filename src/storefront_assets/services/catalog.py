"""Catalog entity changes with staged image promotion and image cleanup."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol, TypeVar

from storefront_assets.domain.assets import AssetCategory
from storefront_assets.domain.catalog import (
    AdvertisementDraft,
    AdvertisementRecord,
    CategoryDraft,
    CategoryRecord,
    ColorImage,
    ProductDraft,
    ProductRecord,
)
from storefront_assets.services.assets import TempAssetManager

logger = logging.getLogger(__name__)

ImageDraftT = TypeVar("ImageDraftT", AdvertisementDraft, CategoryDraft)


class ProductRepository(Protocol):
    """Persistence interface for products."""

    def create_product(self, draft: ProductDraft) -> ProductRecord:
        """Create a product and return it."""

    def update_product(
        self, product_id: str, draft: ProductDraft
    ) -> ProductRecord | None:
        """Replace a product's fields; return None when it does not exist."""

    def delete_product(self, product_id: str) -> bool:
        """Delete a product; return true when it existed."""

    def get_product(self, product_id: str) -> ProductRecord | None:
        """Return a product by id, if present."""


class AdvertisementRepository(Protocol):
    """Persistence interface for hero advertisements."""

    def create_advertisement(self, draft: AdvertisementDraft) -> AdvertisementRecord:
        """Create an advertisement and return it."""

    def update_advertisement(
        self, advertisement_id: str, draft: AdvertisementDraft
    ) -> AdvertisementRecord | None:
        """Replace an advertisement's fields; return None when missing."""

    def delete_advertisement(self, advertisement_id: str) -> bool:
        """Delete an advertisement; return true when it existed."""

    def get_advertisement(self, advertisement_id: str) -> AdvertisementRecord | None:
        """Return an advertisement by id, if present."""


class CategoryRepository(Protocol):
    """Persistence interface for categories."""

    def create_category(self, draft: CategoryDraft) -> CategoryRecord:
        """Create a category and return it."""

    def update_category(
        self, category_id: str, draft: CategoryDraft
    ) -> CategoryRecord | None:
        """Replace a category's fields; return None when it does not exist."""

    def delete_category(self, category_id: str) -> bool:
        """Delete a category; return true when it existed."""

    def get_category(self, category_id: str) -> CategoryRecord | None:
        """Return a category by id, if present."""


@dataclass
class CatalogService:
    """Saves catalog entities and keeps their stored images in step.

    Staged images referenced by a save are promoted first. Stored images an
    update replaces, or a delete leaves unreferenced, are removed afterwards.
    """

    asset_manager: TempAssetManager
    product_repository: ProductRepository
    advertisement_repository: AdvertisementRepository
    category_repository: CategoryRepository

    async def create_product(
        self, session_id: str | None, draft: ProductDraft
    ) -> ProductRecord:
        """Promote a product's staged images and create it."""
        async with self.asset_manager.active_session(session_id):
            promoted = await self._promote_product(draft)
            product = self.product_repository.create_product(promoted)
        logger.info("Created product", extra={"product_id": product.id})
        return product

    async def update_product(
        self, session_id: str | None, product_id: str, draft: ProductDraft
    ) -> ProductRecord | None:
        """Promote a product's staged images and update it.

        Unknown products are reported as None before any image is touched.
        """
        existing = self.product_repository.get_product(product_id)
        if existing is None:
            return None
        async with self.asset_manager.active_session(session_id):
            promoted = await self._promote_product(draft)
            product = self.product_repository.update_product(product_id, promoted)
        if product is not None:
            await self.asset_manager.delete_images(
                _replaced(_product_images(existing), _product_images(product))
            )
        return product

    async def delete_product(self, product_id: str) -> bool:
        """Delete a product and the images it referenced."""
        product = self.product_repository.get_product(product_id)
        if product is None or not self.product_repository.delete_product(product_id):
            return False
        await self.asset_manager.delete_images(_product_images(product))
        logger.info("Deleted product", extra={"product_id": product_id})
        return True

    async def create_advertisement(
        self, session_id: str | None, draft: AdvertisementDraft
    ) -> AdvertisementRecord:
        """Promote an advertisement's staged image and create it."""
        async with self.asset_manager.active_session(session_id):
            promoted = await self._promote_image(draft, AssetCategory.ADVERTISEMENTS)
            advertisement = self.advertisement_repository.create_advertisement(
                promoted
            )
        logger.info(
            "Created advertisement", extra={"advertisement_id": advertisement.id}
        )
        return advertisement

    async def update_advertisement(
        self, session_id: str | None, advertisement_id: str, draft: AdvertisementDraft
    ) -> AdvertisementRecord | None:
        """Promote an advertisement's staged image and update it."""
        existing = self.advertisement_repository.get_advertisement(advertisement_id)
        if existing is None:
            return None
        async with self.asset_manager.active_session(session_id):
            promoted = await self._promote_image(draft, AssetCategory.ADVERTISEMENTS)
            advertisement = self.advertisement_repository.update_advertisement(
                advertisement_id, promoted
            )
        if advertisement is not None:
            await self.asset_manager.delete_images(
                _replaced([existing.image_url], [advertisement.image_url])
            )
        return advertisement

    async def delete_advertisement(self, advertisement_id: str) -> bool:
        """Delete an advertisement and its image."""
        advertisement = self.advertisement_repository.get_advertisement(
            advertisement_id
        )
        if advertisement is None:
            return False
        if not self.advertisement_repository.delete_advertisement(advertisement_id):
            return False
        await self.asset_manager.delete_images([advertisement.image_url])
        logger.info(
            "Deleted advertisement", extra={"advertisement_id": advertisement_id}
        )
        return True

    async def create_category(
        self, session_id: str | None, draft: CategoryDraft
    ) -> CategoryRecord:
        """Promote a category's staged image and create it."""
        async with self.asset_manager.active_session(session_id):
            promoted = await self._promote_image(draft, AssetCategory.CATEGORIES)
            category = self.category_repository.create_category(promoted)
        logger.info("Created category", extra={"category_id": category.id})
        return category

    async def update_category(
        self, session_id: str | None, category_id: str, draft: CategoryDraft
    ) -> CategoryRecord | None:
        """Promote a category's staged image and update it."""
        existing = self.category_repository.get_category(category_id)
        if existing is None:
            return None
        async with self.asset_manager.active_session(session_id):
            promoted = await self._promote_image(draft, AssetCategory.CATEGORIES)
            category = self.category_repository.update_category(category_id, promoted)
        if category is not None:
            await self.asset_manager.delete_images(
                _replaced([existing.image_url], [category.image_url])
            )
        return category

    async def delete_category(self, category_id: str) -> bool:
        """Delete a category and its image."""
        category = self.category_repository.get_category(category_id)
        if category is None or not self.category_repository.delete_category(
            category_id
        ):
            return False
        await self.asset_manager.delete_images([category.image_url])
        logger.info("Deleted category", extra={"category_id": category_id})
        return True

    def get_product(self, product_id: str) -> ProductRecord | None:
        return self.product_repository.get_product(product_id)

    def get_advertisement(self, advertisement_id: str) -> AdvertisementRecord | None:
        return self.advertisement_repository.get_advertisement(advertisement_id)

    def get_category(self, category_id: str) -> CategoryRecord | None:
        return self.category_repository.get_category(category_id)

    async def _promote_product(self, draft: ProductDraft) -> ProductDraft:
        promote = self.asset_manager.promote_url
        image_url = await promote(draft.image_url, AssetCategory.PRODUCTS)
        color_images = [
            ColorImage(
                color=item.color,
                image_url=await promote(item.image_url, AssetCategory.PRODUCTS),
            )
            for item in draft.color_images
        ]
        hero_image = await promote(draft.hero_image, AssetCategory.ADVERTISEMENTS)
        return replace(
            draft,
            image_url=image_url,
            color_images=color_images,
            hero_image=hero_image,
        )

    async def _promote_image(
        self, draft: ImageDraftT, category: AssetCategory
    ) -> ImageDraftT:
        image_url = await self.asset_manager.promote_url(draft.image_url, category)
        return replace(draft, image_url=image_url)


def _product_images(product: ProductDraft | ProductRecord) -> list[str | None]:
    return [
        product.image_url,
        *(item.image_url for item in product.color_images),
        product.hero_image,
    ]


def _replaced(old: list[str | None], new: list[str | None]) -> list[str | None]:
    """Return previously referenced images that the new version dropped."""
    kept = set(new)
    return [url for url in old if url and url not in kept]
