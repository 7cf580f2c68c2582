from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select, update

from app.models.interest_trigger import InterestTrigger
from app.repositories.base import BaseRepository


class InterestTriggerRepository(BaseRepository):
    """Encapsulates queries against the ``interest_triggers`` table."""

    async def list_for_org(
        self, organization_id: UUID, include_inactive: bool = False
    ) -> List[InterestTrigger]:
        """Return the organization's triggers in evaluation order."""
        query = select(InterestTrigger).where(
            InterestTrigger.organization_id == organization_id
        )
        if not include_inactive:
            query = query.where(InterestTrigger.active.is_(True))
        query = query.order_by(
            InterestTrigger.priority.asc(), InterestTrigger.created_at.asc()
        )
        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def get(
        self, organization_id: UUID, trigger_id: UUID
    ) -> Optional[InterestTrigger]:
        """Return a single trigger scoped to the organization, or ``None``."""
        result = await self._db.execute(
            select(InterestTrigger).where(
                InterestTrigger.organization_id == organization_id,
                InterestTrigger.id == trigger_id,
            )
        )
        return result.scalar_one_or_none()

    async def next_priority(self, organization_id: UUID) -> int:
        """Priority placing a new trigger after every active one."""
        result = await self._db.execute(
            select(func.max(InterestTrigger.priority)).where(
                InterestTrigger.organization_id == organization_id,
                InterestTrigger.active.is_(True),
            )
        )
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def create(self, **kwargs: Any) -> InterestTrigger:
        """Insert a new trigger and return the model instance."""
        return await self.add(InterestTrigger(**kwargs))

    async def deactivate(self, trigger: InterestTrigger) -> None:
        """Soft delete: the row stays, it just stops matching."""
        trigger.active = False

    async def set_priorities(
        self, organization_id: UUID, priorities: Dict[UUID, int]
    ) -> None:
        """Rewrite ``priority`` for each trigger id in *priorities*."""
        for trigger_id, priority in priorities.items():
            await self._db.execute(
                update(InterestTrigger)
                .where(
                    InterestTrigger.organization_id == organization_id,
                    InterestTrigger.id == trigger_id,
                )
                .values(priority=priority)
            )
