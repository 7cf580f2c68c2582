from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


class BaseRepository:
    """Thin base class that holds the database session.

    Every concrete repository receives an ``AsyncSession`` at
    construction time so that the trigger, rule, lead and settings
    repositories of one request (or one sweep cycle) share a single
    unit of work.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def add(self, instance: ModelT) -> ModelT:
        """Stage a new row and flush it so server defaults are populated."""
        self._db.add(instance)
        await self._db.flush()
        await self._db.refresh(instance)
        return instance

    async def refresh(self, instance: ModelT) -> ModelT:
        """Reload *instance* from the database after a flush or commit."""
        await self._db.refresh(instance)
        return instance

    async def flush(self) -> None:
        """Flush pending changes without committing."""
        await self._db.flush()

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._db.commit()

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        await self._db.rollback()
