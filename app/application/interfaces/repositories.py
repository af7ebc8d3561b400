"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.domain.entities.laporan import LaporanEntity
    from app.domain.enums import LaporanStatus


class ILaporanRepository(Protocol):
    """Protocol for laporan repository (DIP). List methods return newest first."""

    async def get_by_id(self, laporan_id: str) -> LaporanEntity | None:
        """Return laporan by ID."""

    async def get_for_update(self, laporan_id: str) -> LaporanEntity | None:
        """Return laporan by ID, locking its row until the current transaction ends."""

    async def list_all(self) -> list[LaporanEntity]:
        """Return every laporan ordered by created_at descending."""

    async def list_by_assignee(self, user_id: str) -> list[LaporanEntity]:
        """Return laporan assigned to user, newest first."""

    async def list_filtered(
        self,
        status: LaporanStatus | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> list[LaporanEntity]:
        """Return laporan matching every given predicate (AND), newest first."""

    async def create(self, laporan: LaporanEntity) -> LaporanEntity:
        """Insert a new laporan; return it with timestamps and version set."""

    async def update(self, laporan: LaporanEntity) -> LaporanEntity:
        """Write all fields if the stored version still equals laporan.version.

        Raises LaporanVersionConflictException when another write won, or
        ResourceNotFoundException when the row is gone.
        """

    async def delete(self, laporan_id: str) -> None:
        """Delete the laporan row."""

    def transaction(self) -> AbstractAsyncContextManager[Any]:
        """Scope a unit of work: commit on success, roll back on exception."""

    async def commit(self) -> None:
        """Make the current unit of work durable now instead of at the end of the request."""


class IUserDirectory(Protocol):
    """Protocol for the user directory used to validate assign_to."""

    async def exists(self, user_id: str) -> bool:
        """Return True if a user with this ID exists."""
