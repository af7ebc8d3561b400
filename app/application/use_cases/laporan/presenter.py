"""Render LaporanEntity as LaporanView (attachments with signed URLs)."""

import asyncio

from app.application.dtos.laporan import LaporanView
from app.application.services.attachment_mapper import AttachmentMapper
from app.domain.entities.laporan import LaporanEntity


async def present_laporan(laporan: LaporanEntity, mapper: AttachmentMapper) -> LaporanView:
    need_approve, no_need_approve = await asyncio.gather(
        mapper.to_views(laporan.need_approve_files),
        mapper.to_views(laporan.no_need_approve_files),
    )
    return LaporanView(
        id=laporan.id,
        title=laporan.title,
        request_id=laporan.request_id,
        request_name=laporan.request_name,
        company_code=laporan.company_code,
        request_objective=laporan.request_objective,
        request_background=laporan.request_background,
        remarks=laporan.remarks,
        department=laporan.department,
        buyer=laporan.buyer,
        currency=laporan.currency,
        po_type=laporan.po_type,
        asset_type=laporan.asset_type,
        total_amount_idr=laporan.total_amount_idr,
        total_amount_original_currency=laporan.total_amount_original_currency,
        request_date=laporan.request_date,
        delivery_date=laporan.delivery_date,
        assign_to=laporan.assign_to,
        need_approve_files=need_approve,
        no_need_approve_files=no_need_approve,
        status=laporan.status,
        em_approved=laporan.em_approved,
        user_approved=laporan.user_approved,
        vendor_approved=laporan.vendor_approved,
        reject_reason=laporan.reject_reason,
        rejected_at=laporan.rejected_at,
        rejected_by=laporan.rejected_by,
        resubmission_count=laporan.resubmission_count,
        version=laporan.version,
        created_at=laporan.created_at,
        updated_at=laporan.updated_at,
    )


async def present_many(
    laporan_list: list[LaporanEntity], mapper: AttachmentMapper
) -> list[LaporanView]:
    """Render a list, preserving order."""
    return list(await asyncio.gather(*(present_laporan(lap, mapper) for lap in laporan_list)))
