"""Laporan use-case dependencies (composition root)."""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Request

from app.application.services.attachment_mapper import AttachmentMapper
from app.application.use_cases.laporan import (
    LaporanQueryService,
    LaporanWorkflowService,
)
from app.core.config import get_settings
from app.infrastructure.external.storage.factory import StorageFactory
from app.infrastructure.external.storage.protocol import StorageProtocol
from app.infrastructure.persistence.repositories import (
    LaporanRepository,
    UserRepository,
)

from . import db as db_deps


def get_storage(request: Request) -> StorageProtocol:
    """Process-wide storage client (created in lifespan; lazily if lifespan did not run)."""
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        storage = StorageFactory.create_storage_service()
        request.app.state.storage = storage
    return storage


def get_attachment_mapper(
    storage: Annotated[StorageProtocol, Depends(get_storage)],
) -> AttachmentMapper:
    settings = get_settings()
    return AttachmentMapper(
        storage,
        url_ttl=timedelta(seconds=settings.signed_url_ttl_seconds),
        max_concurrency=settings.upload_max_concurrency,
        max_files_per_category=settings.max_files_per_category,
    )


async def get_laporan_workflow_service(
    laporan_repo: Annotated[LaporanRepository, Depends(db_deps.get_laporan_repo_for_write)],
    user_directory: Annotated[UserRepository, Depends(db_deps.get_user_directory_for_write)],
    mapper: Annotated[AttachmentMapper, Depends(get_attachment_mapper)],
) -> LaporanWorkflowService:
    """Build LaporanWorkflowService on the request's write transaction."""
    return LaporanWorkflowService(
        laporan_repo=laporan_repo,
        user_directory=user_directory,
        attachment_mapper=mapper,
    )


async def get_laporan_query_service(
    laporan_repo: Annotated[LaporanRepository, Depends(db_deps.get_laporan_repo)],
    mapper: Annotated[AttachmentMapper, Depends(get_attachment_mapper)],
) -> LaporanQueryService:
    """Build LaporanQueryService for listing, lookup and filtering."""
    return LaporanQueryService(laporan_repo=laporan_repo, attachment_mapper=mapper)
