import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from app.core.constants import HOT_TEMPERATURE, LOST_TEMPERATURE
from app.core.exceptions import InvalidSubstatusError, LeadNotFoundError
from app.models.lead import Lead
from app.repositories.lead_repository import LeadRepository
from app.schemas.lead import SubstatusUpdate, TemperatureUpdate
from app.schemas.temperature_rule import RuleAction

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    return getattr(value, "value", value)


def set_lead_temperature(lead: Lead, temperature: str) -> bool:
    """Move *lead* to *temperature*, keeping its side fields consistent.

    A substatus only exists under ``quente`` and a lost reason only under
    ``perdido``; each is cleared when the lead moves elsewhere.  Returns
    whether the temperature actually changed.
    """
    temperature = _plain(temperature)
    changed = lead.temperature != temperature
    lead.temperature = temperature
    if temperature != HOT_TEMPERATURE:
        lead.hot_substatus = None
    if temperature != LOST_TEMPERATURE:
        lead.lost_reason = None
    return changed


def apply_rule_action(lead: Lead, action: RuleAction) -> Tuple[bool, bool]:
    """Apply a matching transition rule's action bundle to *lead*.

    Order: set temperature, then clear substatus, then set substatus.
    A substatus is never written onto a lead that is not ``quente``.

    Returns ``(temperature_changed, substatus_cleared)``.
    """
    had_substatus = lead.hot_substatus is not None
    temperature_changed = False

    if action.set_temperature:
        temperature_changed = set_lead_temperature(lead, action.set_temperature)
    if action.clear_substatus:
        lead.hot_substatus = None
    if action.set_substatus:
        if lead.temperature == HOT_TEMPERATURE:
            lead.hot_substatus = action.set_substatus
        else:
            logger.debug(
                "Skipping substatus %s on lead %s (temperature %s)",
                action.set_substatus,
                lead.id,
                lead.temperature,
            )

    substatus_cleared = had_substatus and lead.hot_substatus is None
    return temperature_changed, substatus_cleared


def apply_trigger_action(lead: Lead, trigger: Any) -> Dict[str, Any]:
    """Apply an interest trigger's action bundle to *lead*.

    Only the ``action_set_*`` fields that are set are written.  Returns
    the fields that changed, mapped to their new values.
    """
    changes: Dict[str, Any] = {}

    if trigger.action_set_interest_id and lead.interest_id != trigger.action_set_interest_id:
        lead.interest_id = trigger.action_set_interest_id
        changes["interest_id"] = trigger.action_set_interest_id
    if trigger.action_set_source_id and lead.source_id != trigger.action_set_source_id:
        lead.source_id = trigger.action_set_source_id
        changes["source_id"] = trigger.action_set_source_id
    if trigger.action_set_temperature:
        temperature = _plain(trigger.action_set_temperature)
        if set_lead_temperature(lead, temperature):
            changes["temperature"] = temperature
    if trigger.action_set_status and lead.status != trigger.action_set_status:
        lead.status = trigger.action_set_status
        changes["status"] = trigger.action_set_status

    return changes


class LeadTemperatureService:
    """Manual temperature and substatus changes made from the lead screen."""

    def __init__(self, lead_repo: LeadRepository) -> None:
        self._lead_repo = lead_repo

    async def get_lead(self, organization_id: UUID, lead_id: UUID) -> Lead:
        lead = await self._lead_repo.get(organization_id, lead_id)
        if not lead:
            raise LeadNotFoundError(f"Lead {lead_id} not found")
        return lead

    async def update_temperature(
        self, organization_id: UUID, lead_id: UUID, data: TemperatureUpdate
    ) -> Lead:
        """Change a lead's temperature by hand.

        - moving to ``quente`` refreshes ``last_interaction_at``; a
          substatus is only written when one is sent
        - any other temperature clears the substatus
        - ``perdido`` stores ``lost_reason`` when one is sent; every other
          temperature clears it
        """
        lead = await self.get_lead(organization_id, lead_id)
        temperature = _plain(data.temperature)

        set_lead_temperature(lead, temperature)
        if temperature == HOT_TEMPERATURE:
            if data.hot_substatus is not None:
                lead.hot_substatus = _plain(data.hot_substatus)
            lead.last_interaction_at = datetime.now(timezone.utc)
        elif temperature == LOST_TEMPERATURE and data.lost_reason:
            lead.lost_reason = data.lost_reason

        await self._lead_repo.commit()
        await self._lead_repo.refresh(lead)
        logger.info("Lead %s temperature set to %s", lead_id, temperature)
        return lead

    async def update_substatus(
        self, organization_id: UUID, lead_id: UUID, data: SubstatusUpdate
    ) -> Lead:
        lead = await self.get_lead(organization_id, lead_id)
        substatus: Optional[str] = _plain(data.hot_substatus)

        if substatus is not None and lead.temperature != HOT_TEMPERATURE:
            raise InvalidSubstatusError(
                f"Lead {lead_id} is '{lead.temperature}'; "
                f"substatus requires '{HOT_TEMPERATURE}'"
            )

        lead.hot_substatus = substatus
        await self._lead_repo.commit()
        await self._lead_repo.refresh(lead)
        return lead
