"""Base repository: ORM lookup, insert, delete and SQLAlchemy error translation."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import PersistenceException
from app.infrastructure.persistence.database import Base

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


@contextmanager
def persistence_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemyError as PersistenceException (details logged, not exposed)."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, e, exc_info=True)
        raise PersistenceException(operation, type(e).__name__) from e


class BaseRepository(Generic[ModelType]):
    """Base repository with ORM get, create and delete.

    Subclasses map ORM rows to domain entities at their public surface.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_orm(
        self, entity_id: str, *, for_update: bool = False
    ) -> ModelType | None:
        """Return a single row by primary key, or None. Always re-reads column values."""
        model: Any = self.model
        stmt = (
            select(self.model)
            .where(model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _create_orm(self, obj: ModelType) -> ModelType:
        """Persist a new row; server defaults are loaded back."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj
