import logging
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update

from app.models.temperature_rule import TemperatureTransitionRule
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class TemperatureRuleRepository(BaseRepository):
    """Encapsulates queries against the ``temperature_transition_rules`` table."""

    async def list_for_org(
        self, organization_id: UUID, active_only: bool = False
    ) -> List[TemperatureTransitionRule]:
        """Return the organization's rules in processing order."""
        query = select(TemperatureTransitionRule).where(
            TemperatureTransitionRule.organization_id == organization_id
        )
        if active_only:
            query = query.where(TemperatureTransitionRule.active.is_(True))
        query = query.order_by(
            TemperatureTransitionRule.priority.asc(),
            TemperatureTransitionRule.created_at.asc(),
        )
        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def get(
        self, organization_id: UUID, rule_id: UUID
    ) -> Optional[TemperatureTransitionRule]:
        """Return a single rule scoped to the organization, or ``None``."""
        result = await self._db.execute(
            select(TemperatureTransitionRule).where(
                TemperatureTransitionRule.organization_id == organization_id,
                TemperatureTransitionRule.id == rule_id,
            )
        )
        return result.scalar_one_or_none()

    async def next_priority(self, organization_id: UUID) -> int:
        """Priority placing a new rule after every existing one."""
        result = await self._db.execute(
            select(func.max(TemperatureTransitionRule.priority)).where(
                TemperatureTransitionRule.organization_id == organization_id
            )
        )
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def count(self, organization_id: UUID) -> int:
        result = await self._db.execute(
            select(func.count()).select_from(TemperatureTransitionRule).where(
                TemperatureTransitionRule.organization_id == organization_id
            )
        )
        return result.scalar_one()

    async def create(self, **kwargs: Any) -> TemperatureTransitionRule:
        """Insert a new rule and return the model instance."""
        return await self.add(TemperatureTransitionRule(**kwargs))

    async def delete(self, rule: TemperatureTransitionRule) -> None:
        """Hard delete. Unlike triggers, rules are not kept around."""
        await self._db.delete(rule)

    async def reorder(self, organization_id: UUID, ordered_ids: Sequence[UUID]) -> None:
        """Set each rule's priority to its position in *ordered_ids*."""
        for position, rule_id in enumerate(ordered_ids):
            await self._db.execute(
                update(TemperatureTransitionRule)
                .where(
                    TemperatureTransitionRule.organization_id == organization_id,
                    TemperatureTransitionRule.id == rule_id,
                )
                .values(priority=position)
            )

    async def organizations_with_active_rules(self) -> List[UUID]:
        """Distinct organizations that have at least one active rule."""
        result = await self._db.execute(
            select(TemperatureTransitionRule.organization_id)
            .where(TemperatureTransitionRule.active.is_(True))
            .distinct()
        )
        return list(result.scalars().all())

    async def seed_if_empty(
        self, organization_id: UUID, rules: List[Dict[str, Any]]
    ) -> int:
        """Insert *rules* for an organization that has none.

        Idempotent: an organization with at least one rule is left
        untouched.  Returns the number of rules inserted.
        """
        if await self.count(organization_id):
            return 0

        logger.info(
            "No transition rules for organization %s, seeding defaults",
            organization_id,
        )
        for rule_data in rules:
            self._db.add(
                TemperatureTransitionRule(organization_id=organization_id, **rule_data)
            )
        await self._db.flush()
        logger.info("Seeded %d default transition rules", len(rules))
        return len(rules)
