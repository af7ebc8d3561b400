"""Local filesystem storage with path validation, atomic writes and signed download tokens."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import tempfile
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, BinaryIO, cast

import aiofiles
import aiofiles.os

from app.infrastructure.exceptions import (
    StorageAlreadyExistsError,
    StorageChecksumMismatchError,
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageUploadError,
)
from app.shared.utils.datetime import utc_now

DOWNLOAD_PATH = "/api/v1/storage/download"


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


class LocalStorageService:
    """Local filesystem storage with atomic writes and path traversal protection.

    Paths are validated against storage_root. Writes use temp file + rename.
    Metadata is kept in a .meta.json sidecar. Download URLs carry an
    HMAC-signed token ``<payload>.<signature>`` where payload encodes the
    storage key and expiry, so any worker sharing signing_key can serve them.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(
        self,
        storage_root: str,
        signing_key: str,
        base_url: str | None = None,
    ) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory for all files.
            signing_key: Secret used to sign download tokens.
            base_url: Base URL for download endpoints (e.g. https://api.example.com).
        """
        if not signing_key:
            raise ValueError("signing_key is required for local storage download URLs")
        self.storage_root = Path(storage_root).resolve()
        self.base_url = base_url.rstrip("/") if base_url else None
        self._signing_key = signing_key.encode("utf-8")
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, storage_ref: str) -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = (self.storage_root / storage_ref).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(storage_ref, "path_validation") from e
        if full_path == self.storage_root:
            raise StoragePermissionError(storage_ref, "path_validation")
        return full_path

    @staticmethod
    def _meta_path(file_path: Path) -> Path:
        return file_path.with_suffix(file_path.suffix + ".meta.json")

    async def _compute_checksum(self, file_path: Path) -> str:
        sha256 = hashlib.sha256()
        async with aiofiles.open(file_path, "rb") as f:
            while chunk := await f.read(self.CHUNK_SIZE):
                sha256.update(chunk)
        return sha256.hexdigest()

    async def _write_metadata(self, file_path: Path, metadata: dict[str, Any]) -> None:
        meta_path = self._meta_path(file_path)
        async with aiofiles.open(meta_path, "w") as f:
            await f.write(json.dumps(metadata, indent=2))
        os.chmod(meta_path, 0o640)

    async def _read_metadata(self, file_path: Path) -> dict[str, Any]:
        meta_path = self._meta_path(file_path)
        if not meta_path.exists():
            return {}
        async with aiofiles.open(meta_path, "r") as f:
            result = json.loads(await f.read())
        return cast(dict[str, Any], result) if isinstance(result, dict) else {}

    async def upload(
        self,
        file_data: BinaryIO,
        storage_ref: str,
        expected_checksum: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Upload with atomic write and checksum validation. Idempotent if same checksum."""
        try:
            target_path = self._get_full_path(storage_ref)
            if target_path.exists():
                existing_checksum = await self._compute_checksum(target_path)
                if existing_checksum != expected_checksum:
                    raise StorageAlreadyExistsError(storage_ref)
                existing_meta = await self._read_metadata(target_path)
                return {
                    "storage_ref": storage_ref,
                    "checksum": existing_checksum,
                    "size": target_path.stat().st_size,
                    "uploaded_at": existing_meta.get("uploaded_at", utc_now().isoformat()),
                }

            target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
            body = file_data.read()
            temp_fd, temp_name = tempfile.mkstemp(
                dir=target_path.parent, prefix=".tmp_", suffix=target_path.suffix
            )
            os.close(temp_fd)
            temp_path = Path(temp_name)
            try:
                async with aiofiles.open(temp_path, "wb") as f:
                    await f.write(body)
                os.chmod(temp_path, 0o640)
                computed = await self._compute_checksum(temp_path)
                if computed != expected_checksum:
                    raise StorageChecksumMismatchError(storage_ref, expected_checksum, computed)
                os.replace(temp_path, target_path)
            finally:
                if temp_path.exists():
                    temp_path.unlink()

            uploaded_at = utc_now().isoformat()
            await self._write_metadata(
                target_path,
                {
                    "storage_ref": storage_ref,
                    "checksum": computed,
                    "size": len(body),
                    "content_type": content_type,
                    "uploaded_at": uploaded_at,
                    "custom": metadata or {},
                },
            )
            return {
                "storage_ref": storage_ref,
                "checksum": computed,
                "size": len(body),
                "uploaded_at": uploaded_at,
            }
        except (
            StorageChecksumMismatchError,
            StorageAlreadyExistsError,
            StoragePermissionError,
        ):
            raise
        except Exception as e:
            raise StorageUploadError(storage_ref, str(e)) from e

    async def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        """Stream file content."""
        file_path = self._get_full_path(storage_ref)
        if not file_path.is_file():
            raise StorageNotFoundError(storage_ref)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while chunk := await f.read(self.CHUNK_SIZE):
                    yield chunk
        except Exception as e:
            raise StorageDownloadError(storage_ref, str(e)) from e

    async def delete(self, storage_ref: str) -> bool:
        """Delete file and its sidecar, pruning empty directories. Returns True if deleted."""
        file_path = self._get_full_path(storage_ref)
        try:
            if not file_path.exists():
                return False
            await aiofiles.os.remove(file_path)
            meta_path = self._meta_path(file_path)
            if meta_path.exists():
                await aiofiles.os.remove(meta_path)
        except Exception as e:
            raise StorageDeleteError(storage_ref, str(e)) from e
        parent = file_path.parent
        while parent != self.storage_root:
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent
        return True

    async def exists(self, storage_ref: str) -> bool:
        try:
            return self._get_full_path(storage_ref).is_file()
        except StoragePermissionError:
            return False

    async def get_metadata(self, storage_ref: str) -> dict[str, Any]:
        """Return size, content_type, checksum, last_modified, custom."""
        file_path = self._get_full_path(storage_ref)
        if not file_path.is_file():
            raise StorageNotFoundError(storage_ref)
        stat = file_path.stat()
        stored = await self._read_metadata(file_path)
        return {
            "size": stat.st_size,
            "content_type": stored.get("content_type", "application/octet-stream"),
            "checksum": stored.get("checksum"),
            "last_modified": datetime.fromtimestamp(stat.st_mtime, UTC).isoformat(),
            "custom": stored.get("custom", {}),
        }

    def _sign(self, payload: str) -> str:
        digest = hmac.new(self._signing_key, payload.encode("utf-8"), hashlib.sha256).digest()
        return _b64encode(digest)

    def create_download_token(self, storage_ref: str, expires_at: datetime) -> str:
        payload = _b64encode(f"{int(expires_at.timestamp())}:{storage_ref}".encode())
        return f"{payload}.{self._sign(payload)}"

    def validate_download_token(self, token: str) -> str | None:
        """Return storage_ref if token is authentic and not expired."""
        payload, _, signature = token.partition(".")
        if not payload or not signature:
            return None
        if not hmac.compare_digest(signature, self._sign(payload)):
            return None
        try:
            expires_ts, _, storage_ref = _b64decode(payload).decode("utf-8").partition(":")
            expires_at = datetime.fromtimestamp(int(expires_ts), UTC)
        except (ValueError, UnicodeDecodeError):
            return None
        if not storage_ref or utc_now() > expires_at:
            return None
        return storage_ref

    async def generate_download_url(
        self,
        storage_ref: str,
        expiration: timedelta = timedelta(hours=1),
    ) -> str:
        """Return temporary download URL (signed token for local)."""
        if not await self.exists(storage_ref):
            raise StorageNotFoundError(storage_ref)
        token = self.create_download_token(storage_ref, utc_now() + expiration)
        path = f"{DOWNLOAD_PATH}/{token}"
        return f"{self.base_url}{path}" if self.base_url else path
