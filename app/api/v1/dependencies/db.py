"""DB session and repository dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    LaporanRepository,
    UserRepository,
)


async def get_laporan_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> LaporanRepository:
    """Laporan repository for read operations."""
    return LaporanRepository(db)


async def get_laporan_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> LaporanRepository:
    """Laporan repository for writes (request-scoped transaction)."""
    return LaporanRepository(db)


async def get_user_directory_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> UserRepository:
    """User directory sharing the write transaction (same session as the laporan repo)."""
    return UserRepository(db)
