import logging
from collections import Counter
from typing import List, Optional
from uuid import UUID

from app.core.cache import CacheService, trigger_list_key
from app.core.config import settings
from app.core.exceptions import (
    InterestTriggerNotFoundError,
    InvalidDefinitionError,
    InvalidReorderError,
    LeadNotFoundError,
)
from app.models.interest_trigger import InterestTrigger
from app.repositories.interest_trigger_repository import InterestTriggerRepository
from app.repositories.lead_repository import LeadRepository
from app.schemas.common import column_values
from app.schemas.interest_trigger import (
    ClassifyLeadResponse,
    InterestTriggerCreate,
    InterestTriggerOut,
    InterestTriggerUpdate,
    MessageContext,
    TriggerMatchResponse,
    TriggerPriority,
    TriggerTestResponse,
    check_regex,
)
from app.schemas.lead import LeadOut
from app.services.interest_matcher import match_trigger, test_trigger_condition
from app.services.lead_temperature_service import apply_trigger_action

logger = logging.getLogger(__name__)

# Columns that are NOT NULL; an explicit null in a PATCH leaves them as is
_REQUIRED_FIELDS = frozenset(
    {
        "name",
        "priority",
        "active",
        "condition_field",
        "condition_operator",
        "condition_value",
        "case_sensitive",
    }
)


class InterestTriggerService:
    """CRUD and evaluation of an organization's interest triggers.

    The active trigger list sits on the inbound-message path, so it is
    cached per organization in Redis and invalidated on every mutation.
    """

    def __init__(
        self,
        trigger_repo: InterestTriggerRepository,
        lead_repo: Optional[LeadRepository] = None,
        cache: Optional[CacheService] = None,
    ) -> None:
        self._trigger_repo = trigger_repo
        self._lead_repo = lead_repo
        self._cache: CacheService = cache or CacheService()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_triggers(
        self, organization_id: UUID, include_inactive: bool = False
    ) -> List[InterestTriggerOut]:
        if include_inactive:
            rows = await self._trigger_repo.list_for_org(
                organization_id, include_inactive=True
            )
            return [InterestTriggerOut.model_validate(row) for row in rows]
        return await self.active_triggers(organization_id)

    async def active_triggers(self, organization_id: UUID) -> List[InterestTriggerOut]:
        """Active triggers in priority order, served from cache when possible."""
        key = trigger_list_key(organization_id)
        cached = await self._cache.get_json(key)
        if cached is not None:
            return [InterestTriggerOut.model_validate(item) for item in cached]

        rows = await self._trigger_repo.list_for_org(organization_id)
        triggers = [InterestTriggerOut.model_validate(row) for row in rows]
        await self._cache.set_json(
            key,
            [trigger.model_dump(mode="json") for trigger in triggers],
            ttl=settings.REDIS_CACHE_TTL,
        )
        return triggers

    async def _get_or_raise(
        self, organization_id: UUID, trigger_id: UUID
    ) -> InterestTrigger:
        trigger = await self._trigger_repo.get(organization_id, trigger_id)
        if not trigger:
            raise InterestTriggerNotFoundError(
                f"Interest trigger {trigger_id} not found"
            )
        return trigger

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_trigger(
        self, organization_id: UUID, data: InterestTriggerCreate
    ) -> InterestTrigger:
        values = column_values(data)
        if values.get("priority") is None:
            values["priority"] = await self._trigger_repo.next_priority(
                organization_id
            )

        trigger = await self._trigger_repo.create(
            organization_id=organization_id, **values
        )
        await self._trigger_repo.commit()
        await self._invalidate(organization_id)
        logger.info(
            "Created interest trigger %s (priority %d)", trigger.id, trigger.priority
        )
        return trigger

    async def update_trigger(
        self, organization_id: UUID, trigger_id: UUID, data: InterestTriggerUpdate
    ) -> InterestTrigger:
        trigger = await self._get_or_raise(organization_id, trigger_id)
        changes = {
            field: value
            for field, value in column_values(data, exclude_unset=True).items()
            if value is not None or field not in _REQUIRED_FIELDS
        }

        operator = changes.get("condition_operator", trigger.condition_operator)
        pattern = changes.get("condition_value", trigger.condition_value)
        try:
            check_regex(operator, pattern)
        except ValueError as exc:
            raise InvalidDefinitionError(str(exc)) from exc

        for field, value in changes.items():
            setattr(trigger, field, value)

        await self._trigger_repo.commit()
        await self._trigger_repo.refresh(trigger)
        await self._invalidate(organization_id)
        return trigger

    async def delete_trigger(self, organization_id: UUID, trigger_id: UUID) -> None:
        """Soft delete: the trigger is deactivated, not removed."""
        trigger = await self._get_or_raise(organization_id, trigger_id)
        await self._trigger_repo.deactivate(trigger)
        await self._trigger_repo.commit()
        await self._invalidate(organization_id)
        logger.info("Deactivated interest trigger %s", trigger_id)

    async def reorder_triggers(
        self, organization_id: UUID, priorities: List[TriggerPriority]
    ) -> List[InterestTriggerOut]:
        """Rewrite priorities after a drag-and-drop reorder.

        Every id must belong to the organization and appear only once;
        otherwise nothing is written.
        """
        duplicates = [
            str(trigger_id)
            for trigger_id, count in Counter(p.id for p in priorities).items()
            if count > 1
        ]
        if duplicates:
            raise InvalidReorderError(
                f"Duplicate trigger ids in reorder: {', '.join(duplicates)}"
            )

        known = {
            row.id
            for row in await self._trigger_repo.list_for_org(
                organization_id, include_inactive=True
            )
        }
        unknown = [str(p.id) for p in priorities if p.id not in known]
        if unknown:
            raise InvalidReorderError(
                f"Unknown trigger ids in reorder: {', '.join(unknown)}"
            )

        await self._trigger_repo.set_priorities(
            organization_id, {p.id: p.priority for p in priorities}
        )
        await self._trigger_repo.commit()
        await self._invalidate(organization_id)
        return await self.active_triggers(organization_id)

    async def _invalidate(self, organization_id: UUID) -> None:
        await self._cache.delete(trigger_list_key(organization_id))

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    async def test_trigger(
        self, organization_id: UUID, trigger_id: UUID, value: str
    ) -> TriggerTestResponse:
        trigger = await self._get_or_raise(organization_id, trigger_id)
        return TriggerTestResponse(
            trigger_id=trigger.id,
            value=value,
            matches=test_trigger_condition(trigger, value),
        )

    async def match(
        self, organization_id: UUID, context: MessageContext
    ) -> TriggerMatchResponse:
        """Dry run: which trigger would classify *context*.  Nothing is written."""
        winner = match_trigger(await self.active_triggers(organization_id), context)
        return TriggerMatchResponse(matched=winner is not None, trigger=winner)

    async def classify_lead(
        self, organization_id: UUID, lead_id: UUID, context: MessageContext
    ) -> ClassifyLeadResponse:
        """Run the triggers on a lead's inbound message and apply the winner.

        Only the first matching trigger's action bundle is applied.  A
        lead that matches nothing is returned unchanged.
        """
        if self._lead_repo is None:
            raise RuntimeError("classify_lead requires a LeadRepository")

        lead = await self._lead_repo.get(organization_id, lead_id)
        if not lead:
            raise LeadNotFoundError(f"Lead {lead_id} not found")

        winner = match_trigger(await self.active_triggers(organization_id), context)
        if winner is None:
            return ClassifyLeadResponse(
                lead_id=lead.id, matched=False, lead=LeadOut.model_validate(lead)
            )

        changes = apply_trigger_action(lead, winner)
        if changes:
            await self._lead_repo.commit()
            await self._lead_repo.refresh(lead)
        logger.info(
            "Lead %s classified by trigger %s (%s)",
            lead_id,
            winner.id,
            ", ".join(sorted(changes)) or "no changes",
        )
        return ClassifyLeadResponse(
            lead_id=lead.id,
            matched=True,
            trigger_id=winner.id,
            trigger_name=winner.name,
            changes={key: str(value) for key, value in changes.items()},
            lead=LeadOut.model_validate(lead),
        )
