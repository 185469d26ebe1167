"""Staging, promotion and cleanup of uploaded images.

Uploads made while an admin form is being filled land under a staging
prefix and are tracked per form session. Submitting the form promotes the
referenced uploads to their permanent folder; abandoned sessions are swept.
"""

import asyncio
import logging
import re
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import PurePosixPath
from typing import Protocol
from urllib.parse import quote, unquote, urlsplit
from uuid import uuid4

from storefront_assets.domain.assets import (
    FINAL_PREFIXES,
    AssetCategory,
    ObjectInfo,
    TempAsset,
)
from storefront_assets.exceptions import AssetFinalizeError, ObjectStoreError
from storefront_assets.services.registry import SessionRegistry

logger = logging.getLogger(__name__)

DEFAULT_TEMP_PREFIX = "temp-uploads/"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ObjectStore(Protocol):
    """Interface for the binary object store."""

    async def put_object(
        self,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Store an object with public-read access."""

    async def object_exists(self, key: str) -> bool:
        """Return true when an object exists at the key."""

    async def head_object(self, key: str) -> ObjectInfo | None:
        """Return object metadata, or None when the key is missing."""

    async def copy_object(self, source_key: str, dest_key: str) -> None:
        """Copy an object, granting public-read access on the copy."""

    async def delete_object(self, key: str) -> None:
        """Delete an object."""

    def public_url(self, key: str) -> str:
        """Return the public URL for a key."""


@dataclass
class TempAssetManager:
    """Tracks staged uploads per session and moves them to final storage."""

    store: ObjectStore
    registry: SessionRegistry
    temp_prefix: str = DEFAULT_TEMP_PREFIX

    @staticmethod
    def generate_session_id() -> str:
        """Return a new opaque form session id."""
        return f"session_{uuid4().hex[:13]}"

    def touch_session(self, session_id: str) -> None:
        """Record activity for a session."""
        self.registry.touch(session_id)

    def staging_key(self, category: AssetCategory, filename: str) -> str:
        """Build a unique staging key for an uploaded file."""
        unique = unique_filename(filename, self.registry.now())
        return f"{self.temp_prefix}{FINAL_PREFIXES[category]}{unique}"

    def final_key(
        self, key: str, category: AssetCategory, new_name: str | None = None
    ) -> str:
        """Return the permanent key a staged key is promoted to."""
        filename = PurePosixPath(new_name).name if new_name else key.rsplit("/")[-1]
        return f"{FINAL_PREFIXES[category]}{filename}"

    async def stage_upload(
        self,
        session_id: str,
        category: AssetCategory,
        filename: str,
        body: bytes,
        content_type: str,
    ) -> TempAsset:
        """Store an uploaded file under the staging prefix and track it."""
        key = self.staging_key(category, filename)
        logger.info(
            "Staging upload",
            extra={"session_id": session_id, "key": key, "size": len(body)},
        )
        await self.store.put_object(
            key,
            body,
            content_type,
            metadata={
                "original-name": quote(filename),
                "upload-date": self.registry.now().isoformat(),
            },
        )
        return self.register_temp_asset(session_id, key, category)

    def register_temp_asset(
        self, session_id: str, key: str, category: AssetCategory
    ) -> TempAsset:
        """Record a staged object under a session."""
        asset = TempAsset(
            key=key,
            category=category,
            uploaded_at=self.registry.now(),
            url=self.store.public_url(key),
        )
        self.registry.add_asset(session_id, asset)
        logger.info(
            "Registered staged asset", extra={"session_id": session_id, "key": key}
        )
        return asset

    def get_temp_assets(self, session_id: str) -> list[TempAsset]:
        """Return the staged assets tracked for a session."""
        return self.registry.get_assets(session_id)

    async def move_to_final(
        self, key: str, category: AssetCategory, new_name: str | None = None
    ) -> str:
        """Promote a staged object and return its permanent URL.

        A staged object that no longer exists (for example because a sweep
        already removed it) is not an error: the URL of the intended final
        key is returned so the caller can keep going.

        Raises:
            AssetFinalizeError: If checking or copying the staged object fails.
        """
        final_key = self.final_key(key, category, new_name)
        try:
            exists = await self.store.object_exists(key)
        except ObjectStoreError as exc:
            logger.exception("Failed to check staged asset", extra={"key": key})
            raise AssetFinalizeError(key, exc) from exc

        if not exists:
            logger.warning(
                "Staged asset not found, it may have been cleaned up",
                extra={"key": key, "final_key": final_key},
            )
            self.registry.discard_asset(key)
            return self.store.public_url(final_key)

        try:
            await self.store.copy_object(key, final_key)
        except ObjectStoreError as exc:
            logger.exception(
                "Failed to copy staged asset",
                extra={"key": key, "final_key": final_key},
            )
            raise AssetFinalizeError(key, exc) from exc

        await self.delete_temp(key)
        self.registry.discard_asset(key)
        logger.info("Promoted staged asset", extra={"key": key, "final_key": final_key})
        return self.store.public_url(final_key)

    async def promote_url(
        self, url: str | None, category: AssetCategory
    ) -> str | None:
        """Promote a staged URL; anything else is returned unchanged.

        Promotion failures are logged and the staged URL is kept so that the
        entity referencing it can still be saved.
        """
        if not url or not self.is_temp_url(url):
            return url
        key = self.staging_key_from_url(url)
        if key is None:
            return url
        try:
            return await self.move_to_final(key, category)
        except AssetFinalizeError:
            logger.warning(
                "Keeping staged URL after failed promotion", extra={"url": url}
            )
            return url

    async def delete_temp(self, key: str) -> bool:
        """Delete a staged object; failures are logged and reported as False."""
        try:
            await self.store.delete_object(key)
        except ObjectStoreError:
            logger.exception("Failed to delete staged asset", extra={"key": key})
            return False
        logger.info("Deleted staged asset", extra={"key": key})
        return True

    async def discard_upload(self, url: str) -> bool:
        """Delete one staged upload the admin removed from the form."""
        key = self.staging_key_from_url(url) if self.is_temp_url(url) else None
        if key is None:
            return False
        self.registry.discard_asset(key)
        return await self.delete_temp(key)

    async def delete_image(self, url: str | None) -> bool:
        """Delete a stored image that an entity no longer references.

        Only URLs this store produced are deleted. Failures are logged and
        reported as False so the entity change that dropped the image stands.
        """
        key = extract_key_from_url(url) if url else None
        if key is None or self.store.public_url(key) != url:
            return False
        if self.is_temp_url(url):
            self.registry.discard_asset(key)
        try:
            await self.store.delete_object(key)
        except ObjectStoreError:
            logger.exception("Failed to delete stored image", extra={"key": key})
            return False
        logger.info("Deleted stored image", extra={"key": key})
        return True

    async def delete_images(self, urls: list[str | None]) -> None:
        """Delete several unreferenced images, each on a best-effort basis."""
        unique = [url for url in dict.fromkeys(urls) if url]
        if unique:
            await asyncio.gather(*(self.delete_image(url) for url in unique))

    async def file_info(self, key: str) -> ObjectInfo | None:
        """Return stored metadata for a key, or None when unavailable."""
        try:
            return await self.store.head_object(key)
        except ObjectStoreError:
            logger.exception("Failed to read object metadata", extra={"key": key})
            return None

    async def cleanup_session(self, session_id: str) -> None:
        """Delete every staged object of a session and forget the session.

        Deletions are independent of each other; failures leave the object
        orphaned in the store and are only logged. Calling this for an
        unknown or already cleaned session does nothing.
        """
        assets = self.registry.pop_session(session_id)
        if not assets:
            return
        keys = list(dict.fromkeys(asset.key for asset in assets))
        logger.info(
            "Cleaning up staged assets",
            extra={"session_id": session_id, "count": len(keys)},
        )
        results = await asyncio.gather(
            *(self.delete_temp(key) for key in keys), return_exceptions=True
        )
        failed = 0
        for key, result in zip(keys, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Unexpected error deleting staged asset",
                    extra={"session_id": session_id, "key": key},
                    exc_info=result,
                )
                failed += 1
            elif not result:
                failed += 1
        if failed:
            logger.warning(
                "Session cleanup left orphaned objects",
                extra={"session_id": session_id, "failed": failed},
            )
        else:
            logger.info("Session cleanup completed", extra={"session_id": session_id})

    async def cleanup_idle_sessions(self, max_idle: timedelta) -> list[str]:
        """Clean up sessions with no activity within max_idle."""
        cutoff = self.registry.now() - max_idle
        return await self._cleanup_many(
            self.registry.idle_sessions(cutoff),
            lambda session_id: self.registry.is_idle(session_id, cutoff),
        )

    async def cleanup_expired_assets(self, max_age: timedelta) -> list[str]:
        """Clean up sessions holding uploads older than max_age."""
        cutoff = self.registry.now() - max_age
        return await self._cleanup_many(
            self.registry.expired_sessions(cutoff),
            lambda session_id: self.registry.is_expired(session_id, cutoff),
        )

    async def cleanup_all(self) -> None:
        """Clean up every tracked session."""
        session_ids = self.registry.session_ids()
        if not session_ids:
            return
        logger.info("Cleaning up all sessions", extra={"count": len(session_ids)})
        await asyncio.gather(
            *(self.cleanup_session(session_id) for session_id in session_ids)
        )

    async def _cleanup_many(
        self, session_ids: list[str], still_eligible: Callable[[str], bool]
    ) -> list[str]:
        cleaned: list[str] = []
        for session_id in session_ids:
            # Earlier deletes await the store; the session may have been
            # used, flagged active or removed since it was selected.
            if not still_eligible(session_id):
                logger.info(
                    "Skipping session that is no longer eligible",
                    extra={"session_id": session_id},
                )
                continue
            await self.cleanup_session(session_id)
            cleaned.append(session_id)
        return cleaned

    def mark_session_active(self, session_id: str) -> None:
        """Shield a session from sweeps while its uploads are promoted."""
        self.registry.mark_active(session_id)
        logger.debug("Marked session active", extra={"session_id": session_id})

    def mark_session_inactive(self, session_id: str) -> None:
        """Make a session eligible for sweeps again."""
        self.registry.mark_inactive(session_id)
        logger.debug("Marked session inactive", extra={"session_id": session_id})

    def is_session_active(self, session_id: str) -> bool:
        """Return true while a session is shielded from sweeps."""
        return self.registry.is_active(session_id)

    @asynccontextmanager
    async def active_session(self, session_id: str | None) -> AsyncIterator[None]:
        """Hold the active flag of a session for the duration of the block."""
        if session_id is None:
            yield
            return
        self.mark_session_active(session_id)
        try:
            yield
        finally:
            self.mark_session_inactive(session_id)

    def is_temp_url(self, url: str) -> bool:
        """Return true when a URL points into the staging area."""
        return self.temp_prefix in url

    def staging_key_from_url(self, url: str) -> str | None:
        """Return the staging key referenced by a staged URL."""
        key = extract_key_from_url(url)
        if key is None:
            return None
        index = key.find(self.temp_prefix)
        return key[index:] if index >= 0 else None


def extract_key_from_url(url: str) -> str | None:
    """Return the object key from a public object URL."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        logger.warning("Invalid object URL", extra={"url": url})
        return None
    key = unquote(parts.path).lstrip("/")
    return key or None


def unique_filename(original: str, now: datetime) -> str:
    """Return a collision-resistant filename that keeps the extension."""
    name = PurePosixPath(original.replace("\\", "/")).name or "upload"
    path = PurePosixPath(name)
    stem = _UNSAFE_FILENAME_CHARS.sub("-", path.stem).strip("-") or "upload"
    suffix = _UNSAFE_FILENAME_CHARS.sub("", path.suffix).lower()
    timestamp = int(now.timestamp() * 1000)
    return f"{stem}-{timestamp}-{uuid4().hex[:6]}{suffix}"
