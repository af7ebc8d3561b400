"""Laporan workflow: create, edit and move a laporan through its approval states."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import fields as dataclass_fields
from datetime import datetime
from typing import Any

from app.application.dtos.laporan import (
    LaporanCreate,
    LaporanFiles,
    LaporanUpdate,
    LaporanView,
)
from app.application.interfaces.repositories import ILaporanRepository, IUserDirectory
from app.application.services.attachment_mapper import AttachmentMapper
from app.application.use_cases.laporan.presenter import present_laporan
from app.domain.entities.laporan import DEFAULT_APPROVAL_FIELDS, LaporanEntity
from app.domain.enums import ApprovalRole
from app.domain.exceptions import (
    LaporanServiceException,
    ResourceNotFoundException,
    UnknownApprovalRoleException,
)
from app.domain.value_objects.attachment import Attachment
from app.shared.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


def parse_approval_role(role: ApprovalRole | str) -> ApprovalRole:
    """Return role as ApprovalRole; unknown names raise UnknownApprovalRoleException."""
    if isinstance(role, ApprovalRole):
        return role
    try:
        return ApprovalRole(role)
    except ValueError as e:
        raise UnknownApprovalRoleException(str(role)) from e


class LaporanWorkflowService:
    """Write side of the laporan lifecycle.

    Transition rules live on LaporanEntity; this service loads, stores files,
    persists and cleans up. Files are uploaded before the row is written, so
    every write path that uploads deletes those files when a later step
    fails. Those paths commit themselves, so a failed commit is covered too.
    """

    def __init__(
        self,
        laporan_repo: ILaporanRepository,
        user_directory: IUserDirectory,
        attachment_mapper: AttachmentMapper,
        approval_fields: Mapping[ApprovalRole, str] = DEFAULT_APPROVAL_FIELDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.laporan_repo = laporan_repo
        self.user_directory = user_directory
        self.attachment_mapper = attachment_mapper
        self.approval_fields = approval_fields
        self.clock = clock

    async def _get(self, laporan_id: str) -> LaporanEntity:
        laporan = await self.laporan_repo.get_by_id(laporan_id)
        if laporan is None:
            raise ResourceNotFoundException("laporan", laporan_id)
        return laporan

    async def _ensure_assignee(self, user_id: str | None) -> None:
        if user_id is not None and not await self.user_directory.exists(user_id):
            raise ResourceNotFoundException("user", user_id)

    async def _store_files(
        self, laporan: LaporanEntity, files: LaporanFiles | None
    ) -> list[Attachment]:
        """Upload files and append them to laporan. Returns what was stored."""
        if files is None or files.is_empty():
            return []
        stored = await self.attachment_mapper.store_files(files)
        for category, attachments in stored.items():
            laporan.append_attachments(category, attachments)
        return [a for attachments in stored.values() for a in attachments]

    async def _save(self, laporan: LaporanEntity, previous_status: str) -> LaporanView:
        return await self._present_saved(await self.laporan_repo.update(laporan), previous_status)

    async def _present_saved(self, updated: LaporanEntity, previous_status: str) -> LaporanView:
        if updated.status.value != previous_status:
            logger.info(
                "Laporan %s status %s -> %s", updated.id, previous_status, updated.status.value
            )
        return await present_laporan(updated, self.attachment_mapper)

    async def create(
        self,
        data: LaporanCreate,
        files: LaporanFiles | None = None,
        submit_now: bool = False,
    ) -> LaporanView:
        """Create a laporan in ``entry`` (or ``submitted`` when submit_now)."""
        values = {f.name: getattr(data, f.name) for f in dataclass_fields(data)}
        laporan = LaporanEntity(id=generate_cuid(), **values)
        await self._ensure_assignee(laporan.assign_to)

        stored = await self._store_files(laporan, files)
        try:
            if submit_now:
                laporan.submit()
            created = await self.laporan_repo.create(laporan)
            await self.laporan_repo.commit()
        except Exception:
            await self.attachment_mapper.discard(stored)
            raise
        logger.info(
            "Created laporan %s (%s, %d attachment(s))",
            created.id,
            created.status.value,
            len(stored),
        )
        return await present_laporan(created, self.attachment_mapper)

    async def update(
        self,
        laporan_id: str,
        changes: LaporanUpdate,
        files: LaporanFiles | None = None,
    ) -> LaporanView:
        """Apply field changes and append files.

        The only status change honoured is rejected -> resubmitted.
        """
        laporan = await self._get(laporan_id)
        previous = laporan.status.value
        laporan.apply_changes(changes.fields)
        if "assign_to" in changes.fields:
            await self._ensure_assignee(laporan.assign_to)
        if changes.status is not None:
            laporan.request_status(changes.status)

        stored = await self._store_files(laporan, files)
        try:
            updated = await self.laporan_repo.update(laporan)
            await self.laporan_repo.commit()
        except Exception:
            await self.attachment_mapper.discard(stored)
            raise
        return await self._present_saved(updated, previous)

    async def submit(self, laporan_id: str) -> LaporanView:
        laporan = await self._get(laporan_id)
        previous = laporan.status.value
        laporan.submit()
        return await self._save(laporan, previous)

    async def approve(self, laporan_id: str, role: ApprovalRole | str) -> LaporanView:
        """Set the approval flag of role; EM + USER together approve the laporan."""
        approval_role = parse_approval_role(role)
        laporan = await self._get(laporan_id)
        previous = laporan.status.value
        laporan.approve(approval_role, self.approval_fields)
        logger.info("Laporan %s approved by %s", laporan_id, approval_role.value)
        return await self._save(laporan, previous)

    async def reject(self, laporan_id: str, reason: str, actor_id: str) -> LaporanView:
        laporan = await self._get(laporan_id)
        previous = laporan.status.value
        laporan.reject(reason, actor_id, self.clock())
        return await self._save(laporan, previous)

    async def resubmit(
        self,
        laporan_id: str,
        changes: Mapping[str, Any] | None = None,
        files: LaporanFiles | None = None,
    ) -> LaporanView:
        """Edit, append files and move to ``resubmitted`` as one unit of work.

        The row is locked for the duration; any failure rolls the row back and
        deletes the files uploaded by this call.
        """
        stored: list[Attachment] = []
        try:
            async with self.laporan_repo.transaction():
                laporan = await self.laporan_repo.get_for_update(laporan_id)
                if laporan is None:
                    raise ResourceNotFoundException("laporan", laporan_id)
                previous = laporan.status.value
                if changes:
                    laporan.apply_changes(changes)
                    if "assign_to" in changes:
                        await self._ensure_assignee(laporan.assign_to)
                stored = await self._store_files(laporan, files)
                counted = laporan.resubmit()
                updated = await self.laporan_repo.update(laporan)
            await self.laporan_repo.commit()
        except Exception as e:
            if not isinstance(e, LaporanServiceException):
                logger.exception("Resubmit of laporan %s failed; rolled back", laporan_id)
            await self.attachment_mapper.discard(stored)
            raise
        logger.info(
            "Laporan %s status %s -> %s (resubmission_count=%d%s)",
            laporan_id,
            previous,
            updated.status.value,
            updated.resubmission_count,
            ", counted" if counted else "",
        )
        return await present_laporan(updated, self.attachment_mapper)

    async def remove(self, laporan_id: str) -> None:
        """Delete every attachment, then the laporan.

        Storage cleanup is best effort: keys that cannot be deleted are logged
        and the record is deleted anyway.
        """
        laporan = await self._get(laporan_id)
        failed = await self.attachment_mapper.discard(laporan.all_attachments())
        if failed:
            logger.warning(
                "Laporan %s deleted with %d attachment(s) left in storage: %s",
                laporan_id,
                len(failed),
                ", ".join(failed),
            )
        await self.laporan_repo.delete(laporan_id)
        logger.info("Deleted laporan %s", laporan_id)
