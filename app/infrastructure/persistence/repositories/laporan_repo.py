"""Laporan repository. Returns domain LaporanEntity objects."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.laporan import EDITABLE_FIELDS, LaporanEntity
from app.domain.enums import AttachmentCategory, LaporanStatus
from app.domain.exceptions import (
    LaporanVersionConflictException,
    ResourceNotFoundException,
)
from app.domain.value_objects.attachment import Attachment
from app.infrastructure.persistence.models.laporan import Laporan
from app.infrastructure.persistence.repositories.base import (
    BaseRepository,
    persistence_errors,
)
from app.shared.utils.datetime import ensure_utc

# Workflow columns written on every update alongside EDITABLE_FIELDS.
_STATE_FIELDS = (
    "status",
    "em_approved",
    "user_approved",
    "vendor_approved",
    "reject_reason",
    "rejected_at",
    "rejected_by",
    "resubmission_count",
)


def _attachments_from_json(
    rows: list[dict[str, Any]] | None, category: AttachmentCategory
) -> list[Attachment]:
    return [Attachment.from_dict(row, default_category=category) for row in rows or []]


def _entity_to_values(e: LaporanEntity) -> dict[str, Any]:
    """Column values for INSERT/UPDATE (id, version and timestamps excluded)."""
    values: dict[str, Any] = {name: getattr(e, name) for name in EDITABLE_FIELDS}
    for name in ("po_type", "asset_type"):
        if values[name] is not None:
            values[name] = values[name].value
    for name in _STATE_FIELDS:
        values[name] = getattr(e, name)
    values["status"] = e.status.value
    values["need_approve_files"] = [a.to_dict() for a in e.need_approve_files]
    values["no_need_approve_files"] = [a.to_dict() for a in e.no_need_approve_files]
    return values


def _laporan_to_entity(row: Laporan) -> LaporanEntity:
    """Map ORM Laporan to domain LaporanEntity."""
    return LaporanEntity(
        id=row.id,
        title=row.title,
        request_id=row.request_id,
        request_name=row.request_name,
        company_code=row.company_code,
        request_objective=row.request_objective,
        request_background=row.request_background,
        remarks=row.remarks,
        department=row.department,
        buyer=row.buyer,
        currency=row.currency,
        po_type=row.po_type,
        asset_type=row.asset_type,
        total_amount_idr=row.total_amount_idr,
        total_amount_original_currency=row.total_amount_original_currency,
        request_date=row.request_date,
        delivery_date=row.delivery_date,
        assign_to=row.assign_to,
        need_approve_files=_attachments_from_json(
            row.need_approve_files, AttachmentCategory.NEED_APPROVE
        ),
        no_need_approve_files=_attachments_from_json(
            row.no_need_approve_files, AttachmentCategory.NO_NEED_APPROVE
        ),
        status=LaporanStatus(row.status),
        em_approved=row.em_approved,
        user_approved=row.user_approved,
        vendor_approved=row.vendor_approved,
        reject_reason=row.reject_reason,
        rejected_at=ensure_utc(row.rejected_at),
        rejected_by=row.rejected_by,
        resubmission_count=row.resubmission_count,
        version=row.version,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


class LaporanRepository(BaseRepository[Laporan]):
    """Laporan repository. Lists are ordered newest first; update is version-checked."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Laporan)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Savepoint when a transaction is already open (request scope), else a new one."""
        if self.db.in_transaction():
            async with self.db.begin_nested():
                yield self.db
        else:
            async with self.db.begin():
                yield self.db

    async def commit(self) -> None:
        """Commit the session now; the request-scoped transaction then has nothing left to do."""
        with persistence_errors("laporan.commit"):
            await self.db.commit()

    async def get_by_id(self, laporan_id: str) -> LaporanEntity | None:
        with persistence_errors("laporan.get"):
            row = await self._get_orm(laporan_id)
        return _laporan_to_entity(row) if row else None

    async def get_for_update(self, laporan_id: str) -> LaporanEntity | None:
        """SELECT ... FOR UPDATE; the lock is held until the enclosing transaction ends."""
        with persistence_errors("laporan.get_for_update"):
            row = await self._get_orm(laporan_id, for_update=True)
        return _laporan_to_entity(row) if row else None

    async def _list(self, *conditions: Any) -> list[LaporanEntity]:
        stmt = (
            select(Laporan)
            .where(*conditions)
            .order_by(Laporan.created_at.desc(), Laporan.id.desc())
        )
        with persistence_errors("laporan.list"):
            result = await self.db.execute(stmt)
            rows = result.scalars().all()
        return [_laporan_to_entity(r) for r in rows]

    async def list_all(self) -> list[LaporanEntity]:
        return await self._list()

    async def list_by_assignee(self, user_id: str) -> list[LaporanEntity]:
        return await self._list(Laporan.assign_to == user_id)

    async def list_filtered(
        self,
        status: LaporanStatus | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> list[LaporanEntity]:
        """AND of the given predicates; None means unconstrained."""
        conditions: list[Any] = []
        if status is not None:
            conditions.append(Laporan.status == status.value)
        if created_from is not None:
            conditions.append(Laporan.created_at >= created_from)
        if created_to is not None:
            conditions.append(Laporan.created_at <= created_to)
        return await self._list(*conditions)

    async def create(self, laporan: LaporanEntity) -> LaporanEntity:
        orm = Laporan(id=laporan.id, version=1, **_entity_to_values(laporan))
        with persistence_errors("laporan.create"):
            created = await self._create_orm(orm)
        return _laporan_to_entity(created)

    async def update(self, laporan: LaporanEntity) -> LaporanEntity:
        """Write all columns if the row still has laporan.version (optimistic lock).

        Bumps version. Raises LaporanVersionConflictException when another
        request won the race, ResourceNotFoundException when the row is gone.
        """
        stmt = (
            update(Laporan)
            .where(Laporan.id == laporan.id, Laporan.version == laporan.version)
            .values(**_entity_to_values(laporan), version=Laporan.version + 1)
            .execution_options(synchronize_session=False)
        )
        with persistence_errors("laporan.update"):
            result = await self.db.execute(stmt)
            if result.rowcount != 1:
                current = await self.db.scalar(
                    select(Laporan.version).where(Laporan.id == laporan.id)
                )
                if current is None:
                    raise ResourceNotFoundException("laporan", laporan.id)
                raise LaporanVersionConflictException(laporan.id, laporan.version)
            row = await self._get_orm(laporan.id)
        if row is None:
            raise ResourceNotFoundException("laporan", laporan.id)
        return _laporan_to_entity(row)

    async def delete(self, laporan_id: str) -> None:
        with persistence_errors("laporan.delete"):
            result = await self.db.execute(
                delete(Laporan)
                .where(Laporan.id == laporan_id)
                .execution_options(synchronize_session=False)
            )
        if result.rowcount == 0:
            raise ResourceNotFoundException("laporan", laporan_id)
