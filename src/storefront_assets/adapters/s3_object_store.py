"""Amazon S3 object store adapter."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from storefront_assets.domain.assets import ObjectInfo
from storefront_assets.exceptions import ObjectStoreError
from storefront_assets.services.assets import ObjectStore

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

T = TypeVar("T")


@dataclass
class Boto3ObjectStore(ObjectStore):
    """S3 bucket accessed through a boto3 client.

    boto3 is blocking, so every call runs in a worker thread.
    """

    client: Any
    bucket: str
    region: str

    @classmethod
    def create(
        cls,
        bucket: str,
        region: str,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        endpoint_url: str | None = None,
    ) -> "Boto3ObjectStore":
        """Create a store with its own S3 client."""
        client = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            endpoint_url=endpoint_url,
        )
        return cls(client=client, bucket=bucket, region=region)

    async def put_object(
        self,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Upload an object with public-read access."""
        await self._call(
            key,
            self.client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            Metadata=metadata or {},
            ACL="public-read",
        )
        logger.info("Uploaded object", extra={"bucket": self.bucket, "key": key})

    async def object_exists(self, key: str) -> bool:
        """Return true when the key exists in the bucket."""
        return await self.head_object(key) is not None

    async def head_object(self, key: str) -> ObjectInfo | None:
        """Return object metadata, or None on a 404."""
        try:
            response = await asyncio.to_thread(
                self.client.head_object, Bucket=self.bucket, Key=key
            )
        except ClientError as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                return None
            raise ObjectStoreError(_error_code(exc), key, exc) from exc
        except BotoCoreError as exc:
            raise ObjectStoreError(type(exc).__name__, key, exc) from exc
        return ObjectInfo(
            key=key,
            size=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
            metadata=dict(response.get("Metadata") or {}),
        )

    async def copy_object(self, source_key: str, dest_key: str) -> None:
        """Copy an object within the bucket, granting public-read on the copy."""
        await self._call(
            source_key,
            self.client.copy_object,
            Bucket=self.bucket,
            CopySource={"Bucket": self.bucket, "Key": source_key},
            Key=dest_key,
            ACL="public-read",
        )

    async def delete_object(self, key: str) -> None:
        """Delete an object; S3 treats missing keys as deleted."""
        await self._call(
            key, self.client.delete_object, Bucket=self.bucket, Key=key
        )

    def public_url(self, key: str) -> str:
        """Return the virtual-hosted URL for a key."""
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def check_bucket(self) -> bool:
        """Return true when the bucket is reachable with current credentials."""
        try:
            await self._call(None, self.client.head_bucket, Bucket=self.bucket)
        except ObjectStoreError as exc:
            logger.warning(
                "S3 bucket check failed",
                extra={"bucket": self.bucket, "code": exc.code},
            )
            return False
        logger.info("S3 bucket reachable", extra={"bucket": self.bucket})
        return True

    async def close(self) -> None:
        """Close the underlying HTTP connections."""
        await asyncio.to_thread(self.client.close)

    async def _call(
        self, key: str | None, method: Callable[..., T], **kwargs: Any
    ) -> T:
        try:
            return await asyncio.to_thread(method, **kwargs)
        except ClientError as exc:
            raise ObjectStoreError(_error_code(exc), key, exc) from exc
        except BotoCoreError as exc:
            raise ObjectStoreError(type(exc).__name__, key, exc) from exc


def _error_code(exc: ClientError) -> str:
    error = exc.response.get("Error", {})
    return str(error.get("Code", "Unknown"))
