"""S3-compatible object storage (AWS S3, Wasabi, MinIO) with checksums and presigned URLs."""

from __future__ import annotations

import asyncio
import hashlib
from collections.abc import AsyncIterator
from datetime import timedelta
from io import BytesIO
from typing import Any, BinaryIO

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.infrastructure.exceptions import (
    StorageChecksumMismatchError,
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StorageUploadError,
)
from app.shared.utils.datetime import utc_now

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES


class S3StorageService:
    """S3-compatible storage with presigned URLs.

    Uses boto3 (sync) via asyncio.to_thread for async API. One client is
    created per instance and reused; boto3 clients are thread-safe.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        server_side_encryption: str | None = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            bucket: Bucket name.
            region: Bucket region.
            endpoint_url: Custom endpoint (Wasabi/MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            server_side_encryption: e.g. "AES256"; omitted from requests when None.
        """
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.server_side_encryption = server_side_encryption
        extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
        self._client = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(signature_version="s3v4", retries={"max_attempts": 3, "mode": "standard"}),
            **extra,
        )

    async def upload(
        self,
        file_data: BinaryIO,
        storage_ref: str,
        expected_checksum: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Upload with checksum validation. The sha256 is kept in object metadata."""

        def _put() -> dict[str, Any]:
            body = file_data.read()
            computed = hashlib.sha256(body).hexdigest()
            if computed != expected_checksum:
                raise StorageChecksumMismatchError(storage_ref, expected_checksum, computed)
            meta = {"sha256": computed}
            for k, v in (metadata or {}).items():
                meta[k.lower().replace("_", "-")] = v
            params: dict[str, Any] = {
                "Bucket": self.bucket,
                "Key": storage_ref,
                "Body": body,
                "ContentType": content_type,
                "Metadata": meta,
            }
            if self.server_side_encryption:
                params["ServerSideEncryption"] = self.server_side_encryption
            self._client.put_object(**params)
            return {
                "storage_ref": storage_ref,
                "checksum": computed,
                "size": len(body),
                "uploaded_at": utc_now().isoformat(),
            }

        try:
            return await asyncio.to_thread(_put)
        except StorageChecksumMismatchError:
            raise
        except (ClientError, BotoCoreError) as e:
            raise StorageUploadError(storage_ref, str(e)) from e

    async def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        """Stream object content."""

        def _get() -> bytes:
            resp = self._client.get_object(Bucket=self.bucket, Key=storage_ref)
            return resp["Body"].read()

        try:
            body = await asyncio.to_thread(_get)
        except ClientError as e:
            if _is_not_found(e):
                raise StorageNotFoundError(storage_ref) from e
            raise StorageDownloadError(storage_ref, str(e)) from e
        except BotoCoreError as e:
            raise StorageDownloadError(storage_ref, str(e)) from e
        buf = BytesIO(body)
        while chunk := buf.read(self.CHUNK_SIZE):
            yield chunk

    async def delete(self, storage_ref: str) -> bool:
        """Delete object. Returns True if deleted, False if it did not exist."""

        def _delete() -> bool:
            try:
                self._client.head_object(Bucket=self.bucket, Key=storage_ref)
            except ClientError as e:
                if _is_not_found(e):
                    return False
                raise
            self._client.delete_object(Bucket=self.bucket, Key=storage_ref)
            return True

        try:
            return await asyncio.to_thread(_delete)
        except (ClientError, BotoCoreError) as e:
            raise StorageDeleteError(storage_ref, str(e)) from e

    async def exists(self, storage_ref: str) -> bool:
        def _exists() -> bool:
            try:
                self._client.head_object(Bucket=self.bucket, Key=storage_ref)
                return True
            except ClientError as e:
                if _is_not_found(e):
                    return False
                raise

        try:
            return await asyncio.to_thread(_exists)
        except (ClientError, BotoCoreError) as e:
            raise StorageDownloadError(storage_ref, str(e)) from e

    async def get_metadata(self, storage_ref: str) -> dict[str, Any]:
        """Return size, content_type, checksum, last_modified, custom."""

        def _head() -> dict[str, Any]:
            head = self._client.head_object(Bucket=self.bucket, Key=storage_ref)
            meta = head.get("Metadata") or {}
            return {
                "size": head["ContentLength"],
                "content_type": head.get("ContentType", "application/octet-stream"),
                "checksum": meta.get("sha256"),
                "last_modified": head["LastModified"].isoformat(),
                "custom": meta,
            }

        try:
            return await asyncio.to_thread(_head)
        except ClientError as e:
            if _is_not_found(e):
                raise StorageNotFoundError(storage_ref) from e
            raise StorageDownloadError(storage_ref, str(e)) from e
        except BotoCoreError as e:
            raise StorageDownloadError(storage_ref, str(e)) from e

    async def generate_download_url(
        self,
        storage_ref: str,
        expiration: timedelta = timedelta(hours=1),
    ) -> str:
        """Return presigned GET URL. Signing is local; the object is not checked."""
        try:
            return await asyncio.to_thread(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": storage_ref},
                ExpiresIn=int(expiration.total_seconds()),
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageDownloadError(storage_ref, str(e)) from e
