"""Attachment mapper: raw uploads -> stored Attachment records -> URL-bearing views."""

from __future__ import annotations

import asyncio
import hashlib
import os
import threading
import time
from collections.abc import Callable, Sequence
from datetime import timedelta
from io import BytesIO

from app.application.dtos.attachment import AttachmentView, RawFile
from app.application.dtos.laporan import LaporanFiles
from app.application.interfaces.storage import IStorageService
from app.domain.enums import AttachmentCategory
from app.domain.exceptions import ValidationException
from app.domain.value_objects.attachment import Attachment
from app.infrastructure.exceptions import StorageNotFoundError
from app.shared.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

# Multipart field each category is uploaded under.
FIELD_NAMES: dict[AttachmentCategory, str] = {
    AttachmentCategory.NEED_APPROVE: "needApproveFiles",
    AttachmentCategory.NO_NEED_APPROVE: "noNeedApproveFiles",
}

_RESERVED_NAMES = frozenset(
    {"con", "prn", "aux", "nul"}
    | {f"com{i}" for i in range(1, 10)}
    | {f"lpt{i}" for i in range(1, 10)}
)


def _sanitize_filename(filename: str) -> str:
    """Strip path separators and dangerous characters from filename."""
    name = os.path.basename(filename.replace("\\", "/"))
    name = name.replace("\x00", "").strip(". ")
    if not name:
        raise ValueError("Filename is empty or invalid after sanitization")
    if name.split(".")[0].lower() in _RESERVED_NAMES:
        raise ValueError(f"Reserved filename: {name}")
    return name


def _sha256_hex(content: bytes) -> str:
    """Blocking: hash upload content (run in executor)."""
    return hashlib.sha256(content).hexdigest()


class StorageKeyClock:
    """Strictly increasing millisecond timestamps for storage keys.

    Two keys taken in the same millisecond get consecutive values, so keys
    issued in insertion order never collide within the process.
    """

    def __init__(self, time_source: Callable[[], float] = time.time) -> None:
        self._time_source = time_source
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            now_ms = int(self._time_source() * 1000)
            self._last = max(now_ms, self._last + 1)
            return self._last


_process_clock = StorageKeyClock()


class AttachmentMapper:
    """Persists raw uploads through the storage port and renders stored attachments.

    Batches are all-or-nothing: when one upload fails, the files of that
    batch that did reach storage are deleted before the error is re-raised.
    """

    def __init__(
        self,
        storage_service: IStorageService,
        *,
        url_ttl: timedelta = timedelta(hours=1),
        max_concurrency: int = 4,
        max_files_per_category: int = 10,
        clock: StorageKeyClock | None = None,
    ) -> None:
        self.storage = storage_service
        self.url_ttl = url_ttl
        self.max_concurrency = max_concurrency
        self.max_files_per_category = max_files_per_category
        self.clock = clock or _process_clock

    def build_storage_key(self, category: AttachmentCategory, filename: str) -> str:
        """Return ``{category}/{timestamp}-{name}``; raises ValidationException on bad names."""
        try:
            safe = _sanitize_filename(filename)
        except ValueError as e:
            raise ValidationException(str(e), field=FIELD_NAMES[category]) from e
        return f"{category.value}/{self.clock.next()}-{safe}"

    async def store(
        self,
        raw_files: Sequence[RawFile],
        category: AttachmentCategory,
        *,
        semaphore: asyncio.Semaphore | None = None,
    ) -> list[Attachment]:
        """Upload a batch for one category; output order matches input order.

        Pass ``semaphore`` to share the upload limit with other batches.
        """
        if not raw_files:
            return []
        if len(raw_files) > self.max_files_per_category:
            raise ValidationException(
                f"At most {self.max_files_per_category} files allowed for {FIELD_NAMES[category]}",
                field=FIELD_NAMES[category],
            )
        # Keys are taken before any upload starts so they follow input order.
        planned = [(raw, self.build_storage_key(category, raw.filename)) for raw in raw_files]
        limit = semaphore or asyncio.Semaphore(self.max_concurrency)

        async def _bounded(raw: RawFile, key: str) -> Attachment:
            async with limit:
                return await self._upload_one(raw, key, category)

        results = await asyncio.gather(
            *(_bounded(raw, key) for raw, key in planned),
            return_exceptions=True,
        )
        stored = [r for r in results if isinstance(r, Attachment)]
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            logger.warning(
                "Upload batch for %s failed (%d of %d files); removing %d uploaded file(s)",
                category.value,
                len(errors),
                len(planned),
                len(stored),
            )
            await self.discard(stored)
            raise errors[0]
        return stored

    async def store_files(
        self, files: LaporanFiles
    ) -> dict[AttachmentCategory, list[Attachment]]:
        """Upload both categories under one concurrency limit; all-or-nothing across categories."""
        batches = files.by_category()
        categories = [c for c, raws in batches.items() if raws]
        semaphore = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(
            *(self.store(batches[c], c, semaphore=semaphore) for c in categories),
            return_exceptions=True,
        )
        stored: dict[AttachmentCategory, list[Attachment]] = {c: [] for c in batches}
        errors: list[BaseException] = []
        for category, result in zip(categories, results):
            if isinstance(result, BaseException):
                errors.append(result)
            else:
                stored[category] = result
        if errors:
            await self.discard([a for batch in stored.values() for a in batch])
            raise errors[0]
        return stored

    async def _upload_one(
        self, raw: RawFile, key: str, category: AttachmentCategory
    ) -> Attachment:
        checksum = await asyncio.to_thread(_sha256_hex, raw.content)
        result = await self.storage.upload(
            file_data=BytesIO(raw.content),
            storage_ref=key,
            expected_checksum=checksum,
            content_type=raw.mime_type,
            metadata={"category": category.value},
        )
        return Attachment(
            name=raw.filename,
            storage_key=result.get("storage_ref", key),
            size=raw.size,
            mime_type=raw.mime_type,
            category=category,
            checksum=checksum,
            original_name=raw.filename,
            field_name=raw.field_name or FIELD_NAMES[category],
            encoding=raw.encoding,
            uploaded_at=utc_now(),
        )

    async def to_view(self, attachment: Attachment) -> AttachmentView:
        """Attach a freshly signed URL. A blob missing from storage yields url=None."""
        try:
            url: str | None = await self.storage.generate_download_url(
                attachment.storage_key, expiration=self.url_ttl
            )
        except StorageNotFoundError:
            logger.warning("Attachment blob missing from storage: %s", attachment.storage_key)
            url = None
        return AttachmentView(
            name=attachment.name,
            storage_key=attachment.storage_key,
            size=attachment.size,
            mime_type=attachment.mime_type,
            category=attachment.category,
            url=url,
            expires_in_seconds=int(self.url_ttl.total_seconds()),
            checksum=attachment.checksum,
            original_name=attachment.original_name,
            field_name=attachment.field_name,
            encoding=attachment.encoding,
            uploaded_at=attachment.uploaded_at,
        )

    async def to_views(self, attachments: Sequence[Attachment]) -> list[AttachmentView]:
        """Render a sequence of attachments, preserving order."""
        return list(await asyncio.gather(*(self.to_view(a) for a in attachments)))

    async def discard(self, attachments: Sequence[Attachment]) -> list[str]:
        """Best-effort delete of stored attachments.

        Failures are logged, never raised. Returns the storage keys that
        could not be deleted.
        """
        if not attachments:
            return []
        results = await asyncio.gather(
            *(self.storage.delete(a.storage_key) for a in attachments),
            return_exceptions=True,
        )
        failed: list[str] = []
        for attachment, result in zip(attachments, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    "Could not delete %s from storage: %s", attachment.storage_key, result
                )
                failed.append(attachment.storage_key)
        return failed
