import logging
from typing import List
from uuid import UUID

from app.core.default_transition_rules import (
    DEFAULT_CRM_SETTINGS,
    build_default_rules,
)
from app.core.exceptions import (
    InvalidDefinitionError,
    InvalidReorderError,
    TransitionRuleNotFoundError,
)
from app.models.temperature_rule import TemperatureTransitionRule
from app.repositories.crm_settings_repository import CRMSettingsRepository
from app.repositories.temperature_rule_repository import TemperatureRuleRepository
from app.schemas.common import column_values
from app.schemas.crm_settings import CRMSettingsOut, CRMSettingsUpdate
from app.schemas.temperature_rule import (
    RuleTestResponse,
    TemperatureRuleCreate,
    TemperatureRuleUpdate,
    TestLeadConditions,
    check_rule_actions,
)
from app.services.reason_trace import format_reasons
from app.services.rule_tester import test_transition_rule

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = frozenset(
    {
        "name",
        "priority",
        "active",
        "trigger_event",
        "timer_minutes",
        "action_clear_substatus",
    }
)

# Argument order of check_rule_actions
_ACTION_FIELDS = (
    "action_set_temperature",
    "action_clear_substatus",
    "action_set_substatus",
)


async def load_crm_settings(
    settings_repo: CRMSettingsRepository, organization_id: UUID
) -> CRMSettingsOut:
    """The organization's settings, or the defaults if it never saved any."""
    row = await settings_repo.get(organization_id)
    if row is None:
        return CRMSettingsOut(organization_id=organization_id, **DEFAULT_CRM_SETTINGS)
    return CRMSettingsOut.model_validate(row)


class TemperatureRuleService:
    """CRUD, ordering and dry-run testing of temperature transition rules."""

    def __init__(
        self,
        rule_repo: TemperatureRuleRepository,
        settings_repo: CRMSettingsRepository,
    ) -> None:
        self._rule_repo = rule_repo
        self._settings_repo = settings_repo

    async def list_rules(self, organization_id: UUID) -> List[TemperatureTransitionRule]:
        return await self._rule_repo.list_for_org(organization_id)

    async def get_rule(
        self, organization_id: UUID, rule_id: UUID
    ) -> TemperatureTransitionRule:
        rule = await self._rule_repo.get(organization_id, rule_id)
        if not rule:
            raise TransitionRuleNotFoundError(f"Transition rule {rule_id} not found")
        return rule

    async def create_rule(
        self, organization_id: UUID, data: TemperatureRuleCreate
    ) -> TemperatureTransitionRule:
        values = column_values(data)
        if values.get("priority") is None:
            values["priority"] = await self._rule_repo.next_priority(organization_id)

        rule = await self._rule_repo.create(organization_id=organization_id, **values)
        await self._rule_repo.commit()
        logger.info("Created transition rule %s (priority %d)", rule.id, rule.priority)
        return rule

    async def update_rule(
        self, organization_id: UUID, rule_id: UUID, data: TemperatureRuleUpdate
    ) -> TemperatureTransitionRule:
        rule = await self.get_rule(organization_id, rule_id)
        changes = {
            field: value
            for field, value in column_values(data, exclude_unset=True).items()
            if value is not None or field not in _REQUIRED_FIELDS
        }

        # Validate the row as it will be stored, not just the PATCH body
        merged = [changes.get(field, getattr(rule, field)) for field in _ACTION_FIELDS]
        try:
            check_rule_actions(*merged)
        except ValueError as exc:
            raise InvalidDefinitionError(str(exc)) from exc

        for field, value in changes.items():
            setattr(rule, field, value)

        await self._rule_repo.commit()
        await self._rule_repo.refresh(rule)
        return rule

    async def delete_rule(self, organization_id: UUID, rule_id: UUID) -> None:
        rule = await self.get_rule(organization_id, rule_id)
        await self._rule_repo.delete(rule)
        await self._rule_repo.commit()
        logger.info("Deleted transition rule %s", rule_id)

    async def reorder_rules(
        self, organization_id: UUID, ordered_ids: List[UUID]
    ) -> List[TemperatureTransitionRule]:
        """Set each rule's priority to its index in *ordered_ids*.

        The list must name every rule of the organization exactly once.
        """
        if len(set(ordered_ids)) != len(ordered_ids):
            raise InvalidReorderError("Duplicate rule ids in reorder")

        existing = {rule.id for rule in await self._rule_repo.list_for_org(organization_id)}
        if set(ordered_ids) != existing:
            missing = existing - set(ordered_ids)
            unknown = set(ordered_ids) - existing
            raise InvalidReorderError(
                f"Reorder must list every rule once "
                f"(missing: {len(missing)}, unknown: {len(unknown)})"
            )

        await self._rule_repo.reorder(organization_id, ordered_ids)
        await self._rule_repo.commit()
        return await self._rule_repo.list_for_org(organization_id)

    async def test_rule(
        self, organization_id: UUID, rule_id: UUID, lead: TestLeadConditions
    ) -> RuleTestResponse:
        """Run the rule tester for a hypothetical lead.  Nothing is written."""
        rule = await self.get_rule(organization_id, rule_id)
        result = test_transition_rule(rule, lead)
        return RuleTestResponse(
            rule_id=rule.id,
            lines=format_reasons(result.reasons),
            **result.model_dump(),
        )

    async def seed_defaults(self, organization_id: UUID) -> int:
        """Create the starter rule set for an organization without rules.

        Timers come from the organization's CRM settings.  Returns the
        number of rules created (0 when rules already exist).
        """
        crm_settings = await load_crm_settings(self._settings_repo, organization_id)
        created = await self._rule_repo.seed_if_empty(
            organization_id, build_default_rules(crm_settings)
        )
        if created:
            await self._rule_repo.commit()
        return created


class CRMSettingsService:
    """Read and upsert an organization's automation settings."""

    def __init__(self, settings_repo: CRMSettingsRepository) -> None:
        self._settings_repo = settings_repo

    async def get_settings(self, organization_id: UUID) -> CRMSettingsOut:
        return await load_crm_settings(self._settings_repo, organization_id)

    async def update_settings(
        self, organization_id: UUID, data: CRMSettingsUpdate
    ) -> CRMSettingsOut:
        values = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        row = await self._settings_repo.upsert(organization_id, values)
        await self._settings_repo.commit()
        logger.info("CRM settings updated for organization %s", organization_id)
        return CRMSettingsOut.model_validate(row)
