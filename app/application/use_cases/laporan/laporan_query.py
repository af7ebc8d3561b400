"""Laporan queries: listing, lookup and filtering (read side)."""

from __future__ import annotations

from datetime import date, datetime

from app.application.dtos.laporan import LaporanView
from app.application.interfaces.repositories import ILaporanRepository
from app.application.services.attachment_mapper import AttachmentMapper
from app.application.use_cases.laporan.presenter import present_laporan, present_many
from app.domain.entities.laporan import LaporanEntity
from app.domain.enums import LaporanStatus
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.shared.utils.datetime import end_of_day_utc, start_of_day_utc


def _parse_status(status: LaporanStatus | str | None) -> LaporanStatus | None:
    if isinstance(status, str) and not status.strip():
        return None
    if status is None or isinstance(status, LaporanStatus):
        return status
    try:
        return LaporanStatus(status.strip().lower())
    except ValueError as e:
        raise ValidationException(
            f"Invalid status: {status!r}. Allowed: {', '.join(LaporanStatus.values())}",
            field="status",
        ) from e


def _parse_day(value: date | str | None, name: str) -> date | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise ValidationException(f"{name} must be an ISO date (YYYY-MM-DD)", field=name) from e


class LaporanQueryService:
    """Read-only laporan queries; every result carries signed attachment URLs."""

    def __init__(
        self, laporan_repo: ILaporanRepository, attachment_mapper: AttachmentMapper
    ) -> None:
        self.laporan_repo = laporan_repo
        self.attachment_mapper = attachment_mapper

    async def present(self, laporan: LaporanEntity) -> LaporanView:
        return await present_laporan(laporan, self.attachment_mapper)

    async def find_all(self) -> list[LaporanView]:
        """Every laporan, newest first."""
        return await present_many(await self.laporan_repo.list_all(), self.attachment_mapper)

    async def find_one(self, laporan_id: str) -> LaporanView:
        """Raises ResourceNotFoundException if the laporan does not exist."""
        laporan = await self.laporan_repo.get_by_id(laporan_id)
        if laporan is None:
            raise ResourceNotFoundException("laporan", laporan_id)
        return await self.present(laporan)

    async def find_assigned_to_user(self, user_id: str) -> list[LaporanView]:
        rows = await self.laporan_repo.list_by_assignee(user_id)
        return await present_many(rows, self.attachment_mapper)

    async def filter(
        self,
        status: LaporanStatus | str | None = None,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
    ) -> list[LaporanView]:
        """AND of the given predicates; omitted ones do not constrain.

        start_date/end_date are whole UTC days: created_at from 00:00:00.000 of
        start_date through 23:59:59.999 of end_date.
        """
        wanted_status = _parse_status(status)
        start = _parse_day(start_date, "start_date")
        end = _parse_day(end_date, "end_date")
        if start and end and start > end:
            raise ValidationException("start_date must not be after end_date", field="start_date")

        rows = await self.laporan_repo.list_filtered(
            status=wanted_status,
            created_from=start_of_day_utc(start) if start else None,
            created_to=end_of_day_utc(end) if end else None,
        )
        return await present_many(rows, self.attachment_mapper)
