"""Admin catalog endpoints that promote staged images and clean up old ones."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from storefront_assets.api.admin import request_session_id, require_admin
from storefront_assets.api.catalog_models import (
    AdvertisementPayload,
    CategoryPayload,
    ProductPayload,
)

if TYPE_CHECKING:
    from storefront_assets.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["catalog"],
    dependencies=[Depends(require_admin)],
)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _not_found(entity: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"message": f"{entity} not found"},
    )


def _save_failed(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": f"Failed to {action}"},
    )


@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductPayload,
    request: Request,
    session_id: str = Depends(request_session_id),
) -> dict[str, object]:
    """Create a product, promoting any staged images it references."""
    service = _container(request).catalog_service
    try:
        product = await service.create_product(session_id, payload.to_draft())
    except Exception as exc:
        logger.exception("Failed to create product", extra={"session_id": session_id})
        raise _save_failed("create product") from exc
    return {"message": "Product created successfully", "product": asdict(product)}


@router.put("/products/{product_id}")
async def update_product(
    product_id: str,
    payload: ProductPayload,
    request: Request,
    session_id: str = Depends(request_session_id),
) -> dict[str, object]:
    """Update a product, promoting any newly staged images."""
    service = _container(request).catalog_service
    try:
        product = await service.update_product(
            session_id, product_id, payload.to_draft()
        )
    except Exception as exc:
        logger.exception("Failed to update product", extra={"product_id": product_id})
        raise _save_failed("update product") from exc
    if product is None:
        raise _not_found("Product")
    return {"message": "Product updated successfully", "product": asdict(product)}


@router.get("/products/{product_id}")
async def get_product(product_id: str, request: Request) -> dict[str, object]:
    """Return a product."""
    product = _container(request).catalog_service.get_product(product_id)
    if product is None:
        raise _not_found("Product")
    return asdict(product)


@router.delete("/products/{product_id}")
async def delete_product(product_id: str, request: Request) -> dict[str, str]:
    """Delete a product and its stored images."""
    service = _container(request).catalog_service
    try:
        deleted = await service.delete_product(product_id)
    except Exception as exc:
        logger.exception("Failed to delete product", extra={"product_id": product_id})
        raise _save_failed("delete product") from exc
    if not deleted:
        raise _not_found("Product")
    return {"message": "Product deleted successfully"}


@router.post("/advertisements", status_code=status.HTTP_201_CREATED)
async def create_advertisement(
    payload: AdvertisementPayload,
    request: Request,
    session_id: str = Depends(request_session_id),
) -> dict[str, object]:
    """Create a hero advertisement, promoting its staged image."""
    service = _container(request).catalog_service
    try:
        advertisement = await service.create_advertisement(
            session_id, payload.to_draft()
        )
    except Exception as exc:
        logger.exception(
            "Failed to create advertisement", extra={"session_id": session_id}
        )
        raise _save_failed("create advertisement") from exc
    return {
        "message": "Advertisement created successfully",
        "advertisement": asdict(advertisement),
    }


@router.put("/advertisements/{advertisement_id}")
async def update_advertisement(
    advertisement_id: str,
    payload: AdvertisementPayload,
    request: Request,
    session_id: str = Depends(request_session_id),
) -> dict[str, object]:
    """Update a hero advertisement, promoting a newly staged image."""
    service = _container(request).catalog_service
    try:
        advertisement = await service.update_advertisement(
            session_id, advertisement_id, payload.to_draft()
        )
    except Exception as exc:
        logger.exception(
            "Failed to update advertisement",
            extra={"advertisement_id": advertisement_id},
        )
        raise _save_failed("update advertisement") from exc
    if advertisement is None:
        raise _not_found("Advertisement")
    return {
        "message": "Advertisement updated successfully",
        "advertisement": asdict(advertisement),
    }


@router.get("/advertisements/{advertisement_id}")
async def get_advertisement(
    advertisement_id: str, request: Request
) -> dict[str, object]:
    """Return a hero advertisement."""
    advertisement = _container(request).catalog_service.get_advertisement(
        advertisement_id
    )
    if advertisement is None:
        raise _not_found("Advertisement")
    return asdict(advertisement)


@router.delete("/advertisements/{advertisement_id}")
async def delete_advertisement(
    advertisement_id: str, request: Request
) -> dict[str, str]:
    """Delete a hero advertisement and its stored image."""
    service = _container(request).catalog_service
    try:
        deleted = await service.delete_advertisement(advertisement_id)
    except Exception as exc:
        logger.exception(
            "Failed to delete advertisement",
            extra={"advertisement_id": advertisement_id},
        )
        raise _save_failed("delete advertisement") from exc
    if not deleted:
        raise _not_found("Advertisement")
    return {"message": "Advertisement deleted successfully"}


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryPayload,
    request: Request,
    session_id: str = Depends(request_session_id),
) -> dict[str, object]:
    """Create a category, promoting its staged image."""
    service = _container(request).catalog_service
    try:
        category = await service.create_category(session_id, payload.to_draft())
    except Exception as exc:
        logger.exception("Failed to create category", extra={"session_id": session_id})
        raise _save_failed("create category") from exc
    return {"message": "Category created successfully", "category": asdict(category)}


@router.get("/categories/{category_id}")
async def get_category(category_id: str, request: Request) -> dict[str, object]:
    """Return a category."""
    category = _container(request).catalog_service.get_category(category_id)
    if category is None:
        raise _not_found("Category")
    return asdict(category)


@router.put("/categories/{category_id}")
async def update_category(
    category_id: str,
    payload: CategoryPayload,
    request: Request,
    session_id: str = Depends(request_session_id),
) -> dict[str, object]:
    """Update a category, promoting a newly staged image."""
    service = _container(request).catalog_service
    try:
        category = await service.update_category(
            session_id, category_id, payload.to_draft()
        )
    except Exception as exc:
        logger.exception(
            "Failed to update category", extra={"category_id": category_id}
        )
        raise _save_failed("update category") from exc
    if category is None:
        raise _not_found("Category")
    return {"message": "Category updated successfully", "category": asdict(category)}


@router.delete("/categories/{category_id}")
async def delete_category(category_id: str, request: Request) -> dict[str, str]:
    """Delete a category and its stored image."""
    service = _container(request).catalog_service
    try:
        deleted = await service.delete_category(category_id)
    except Exception as exc:
        logger.exception(
            "Failed to delete category", extra={"category_id": category_id}
        )
        raise _save_failed("delete category") from exc
    if not deleted:
        raise _not_found("Category")
    return {"message": "Category deleted successfully"}
