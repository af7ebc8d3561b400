"""User repository: directory lookups for laporan assignment."""

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.base import (
    BaseRepository,
    persistence_errors,
)


class UserRepository(BaseRepository[User]):
    """User directory (IUserDirectory). Users are provisioned outside this service."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def exists(self, user_id: str) -> bool:
        with persistence_errors("user.exists"):
            result = await self.db.scalar(select(exists().where(User.id == user_id)))
        return bool(result)

    async def get_by_username(self, username: str) -> User | None:
        with persistence_errors("user.get_by_username"):
            result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create_user(
        self, username: str, role: str, full_name: str | None = None
    ) -> User:
        with persistence_errors("user.create"):
            return await self._create_orm(User(username=username, role=role, full_name=full_name))
