"""Admin image upload endpoints backed by the staging area."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, status

from storefront_assets.api.admin import request_session_id, require_admin
from storefront_assets.api.catalog_models import CleanupPayload, DiscardUploadPayload
from storefront_assets.domain.assets import AssetCategory
from storefront_assets.exceptions import ObjectStoreError

if TYPE_CHECKING:
    from storefront_assets.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/uploads",
    tags=["uploads"],
    dependencies=[Depends(require_admin)],
)


@router.post("/cleanup")
async def cleanup_session(
    payload: CleanupPayload, request: Request
) -> dict[str, object]:
    """Delete every staged upload of a session."""
    if not payload.session_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "message": "Session ID is required"},
        )
    container: AppContainer = request.app.state.container
    try:
        await container.asset_manager.cleanup_session(payload.session_id)
    except Exception as exc:
        logger.exception(
            "Manual cleanup failed", extra={"session_id": payload.session_id}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "message": "Failed to cleanup session assets"},
        ) from exc
    return {"success": True, "message": "Session assets cleaned up successfully"}


@router.post("/discard")
async def discard_upload(
    payload: DiscardUploadPayload, request: Request
) -> dict[str, object]:
    """Delete a staged upload that was removed from the form."""
    container: AppContainer = request.app.state.container
    manager = container.asset_manager
    if not manager.is_temp_url(payload.url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Only staged uploads can be discarded"},
        )
    deleted = await manager.discard_upload(payload.url)
    return {"success": deleted}


@router.get("/info")
async def upload_info(url: str, request: Request) -> dict[str, object]:
    """Return stored metadata for an uploaded image."""
    container: AppContainer = request.app.state.container
    manager = container.asset_manager
    key = manager.staging_key_from_url(url) if manager.is_temp_url(url) else None
    if key is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Invalid staged upload URL"},
        )
    info = await manager.file_info(key)
    if info is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {
        "key": info.key,
        "size": info.size,
        "content_type": info.content_type,
        "last_modified": info.last_modified.isoformat() if info.last_modified else None,
        "metadata": info.metadata,
    }


@router.post("/{category}")
async def upload_image(
    category: AssetCategory,
    image: UploadFile,
    request: Request,
    session_id: str = Depends(request_session_id),
) -> dict[str, object]:
    """Stage an uploaded image for the current form session."""
    container: AppContainer = request.app.state.container
    max_bytes = container.settings.max_upload_bytes
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Only image files are allowed!",
                "error": "INVALID_FILE_TYPE",
            },
        )
    body = await image.read(max_bytes + 1)
    if len(body) > max_bytes:
        max_mb = max_bytes // (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": f"File too large. Maximum size is {max_mb}MB.",
                "error": "FILE_TOO_LARGE",
            },
        )
    try:
        asset = await container.asset_manager.stage_upload(
            session_id=session_id,
            category=category,
            filename=image.filename or "upload",
            body=body,
            content_type=content_type,
        )
    except ObjectStoreError as exc:
        logger.exception(
            "Failed to stage upload",
            extra={"session_id": session_id, "category": category.value},
        )
        raise _storage_error(container, exc) from exc
    return {
        "success": True,
        "message": "Image uploaded successfully",
        "url": asset.url,
        "key": asset.key,
        "session_id": session_id,
    }


def _storage_error(container: AppContainer, exc: ObjectStoreError) -> HTTPException:
    """Map an object store failure to an HTTP error."""
    if exc.code == "AccessDenied":
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": "Access denied to S3 bucket. Please check permissions.",
                "error": "S3_ACCESS_DENIED",
            },
        )
    if exc.code == "NoSuchBucket":
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "message": "S3 bucket not found. Please check configuration.",
                "error": "S3_BUCKET_NOT_FOUND",
            },
        )
    detail: dict[str, object] = {
        "message": "Failed to upload file to S3",
        "error": "S3_UPLOAD_FAILED",
    }
    if container.settings.environment == "local":
        detail["details"] = str(exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
    )
