"""In-memory stand-ins for the repository, user directory and file store ports."""

import copy
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any, BinaryIO

from app.domain.entities.laporan import LaporanEntity
from app.domain.enums import LaporanStatus
from app.domain.exceptions import LaporanVersionConflictException, ResourceNotFoundException
from app.infrastructure.exceptions import (
    StorageDeleteError,
    StorageNotFoundError,
    StorageUploadError,
)


class InMemoryLaporanRepository:
    """ILaporanRepository over a dict. Entities are copied in and out like DB rows."""

    def __init__(self) -> None:
        self.rows: dict[str, LaporanEntity] = {}
        self.fail_next_update: Exception | None = None
        self.update_calls = 0
        self.fail_next_commit: Exception | None = None
        self.commits = 0
        self._committed: dict[str, LaporanEntity] = {}
        self._now = datetime(2024, 1, 1, tzinfo=UTC)

    def _tick(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now

    def seed(self, laporan: LaporanEntity) -> LaporanEntity:
        """Store a laporan as-is (created_at kept when set)."""
        stored = copy.deepcopy(laporan)
        stored.created_at = stored.created_at or self._tick()
        stored.updated_at = stored.updated_at or stored.created_at
        self.rows[stored.id] = stored
        self._committed[stored.id] = copy.deepcopy(stored)
        return copy.deepcopy(stored)

    async def get_by_id(self, laporan_id: str) -> LaporanEntity | None:
        row = self.rows.get(laporan_id)
        return copy.deepcopy(row) if row else None

    async def get_for_update(self, laporan_id: str) -> LaporanEntity | None:
        return await self.get_by_id(laporan_id)

    def _newest_first(self, rows: list[LaporanEntity]) -> list[LaporanEntity]:
        ordered = sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)
        return [copy.deepcopy(r) for r in ordered]

    async def list_all(self) -> list[LaporanEntity]:
        return self._newest_first(list(self.rows.values()))

    async def list_by_assignee(self, user_id: str) -> list[LaporanEntity]:
        return self._newest_first([r for r in self.rows.values() if r.assign_to == user_id])

    async def list_filtered(
        self,
        status: LaporanStatus | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> list[LaporanEntity]:
        rows = [
            r
            for r in self.rows.values()
            if (status is None or r.status is status)
            and (created_from is None or r.created_at >= created_from)
            and (created_to is None or r.created_at <= created_to)
        ]
        return self._newest_first(rows)

    async def create(self, laporan: LaporanEntity) -> LaporanEntity:
        stored = copy.deepcopy(laporan)
        stored.version = 1
        stored.created_at = stored.updated_at = self._tick()
        self.rows[stored.id] = stored
        return copy.deepcopy(stored)

    async def update(self, laporan: LaporanEntity) -> LaporanEntity:
        self.update_calls += 1
        if self.fail_next_update is not None:
            error, self.fail_next_update = self.fail_next_update, None
            raise error
        current = self.rows.get(laporan.id)
        if current is None:
            raise ResourceNotFoundException("laporan", laporan.id)
        if current.version != laporan.version:
            raise LaporanVersionConflictException(laporan.id, laporan.version)
        stored = copy.deepcopy(laporan)
        stored.version = current.version + 1
        stored.updated_at = self._tick()
        self.rows[stored.id] = stored
        return copy.deepcopy(stored)

    async def delete(self, laporan_id: str) -> None:
        if self.rows.pop(laporan_id, None) is None:
            raise ResourceNotFoundException("laporan", laporan_id)

    async def commit(self) -> None:
        """A failed commit puts the rows back as they were at the last successful one."""
        if self.fail_next_commit is not None:
            error, self.fail_next_commit = self.fail_next_commit, None
            self.rows = copy.deepcopy(self._committed)
            raise error
        self.commits += 1
        self._committed = copy.deepcopy(self.rows)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        snapshot = copy.deepcopy(self.rows)
        try:
            yield None
        except BaseException:
            self.rows = snapshot
            raise


class InMemoryUserDirectory:
    def __init__(self, user_ids: set[str] | None = None) -> None:
        self.user_ids = set(user_ids or ())

    async def exists(self, user_id: str) -> bool:
        return user_id in self.user_ids


class FakeStorage:
    """IStorageService keeping blobs in memory.

    fail_on_upload=n makes the n-th upload call (1-based) raise
    StorageUploadError; keys in fail_delete raise StorageDeleteError.
    """

    def __init__(self, fail_on_upload: int | None = None) -> None:
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.upload_calls: list[str] = []
        self.deleted: list[str] = []
        self.fail_on_upload = fail_on_upload
        self.fail_delete: set[str] = set()

    async def upload(
        self,
        file_data: BinaryIO,
        storage_ref: str,
        expected_checksum: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        self.upload_calls.append(storage_ref)
        if self.fail_on_upload is not None and len(self.upload_calls) == self.fail_on_upload:
            raise StorageUploadError(storage_ref, "simulated outage")
        body = file_data.read()
        self.objects[storage_ref] = body
        self.content_types[storage_ref] = content_type
        return {
            "storage_ref": storage_ref,
            "checksum": expected_checksum,
            "size": len(body),
            "uploaded_at": datetime.now(UTC).isoformat(),
        }

    async def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        if storage_ref not in self.objects:
            raise StorageNotFoundError(storage_ref)
        yield self.objects[storage_ref]

    async def delete(self, storage_ref: str) -> bool:
        if storage_ref in self.fail_delete:
            raise StorageDeleteError(storage_ref, "simulated outage")
        self.deleted.append(storage_ref)
        return self.objects.pop(storage_ref, None) is not None

    async def exists(self, storage_ref: str) -> bool:
        return storage_ref in self.objects

    async def generate_download_url(
        self, storage_ref: str, expiration: timedelta = timedelta(hours=1)
    ) -> str:
        if storage_ref not in self.objects:
            raise StorageNotFoundError(storage_ref)
        return f"https://files.test/{storage_ref}?expires_in={int(expiration.total_seconds())}"
