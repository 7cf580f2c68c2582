import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import CacheService, transition_cooldown_key
from app.core.config import settings
from app.core.exceptions import TransitionRunCooldownError
from app.models.lead import Lead
from app.models.temperature_rule import TemperatureTransitionRule
from app.repositories.crm_settings_repository import CRMSettingsRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.temperature_rule_repository import TemperatureRuleRepository
from app.schemas.automation import TransitionRunResponse
from app.schemas.crm_settings import CRMSettingsOut
from app.schemas.temperature_rule import RuleAction, TestLeadConditions
from app.services.lead_temperature_service import apply_rule_action
from app.services.rule_tester import test_transition_rule
from app.services.temperature_rule_service import load_crm_settings

logger = logging.getLogger(__name__)

_SUBSTATUS_TIMEOUT = "substatus_timeout"


def minutes_since_interaction(lead: Lead, now: datetime) -> int:
    """Whole minutes since the lead's last interaction (or creation)."""
    reference = lead.last_interaction_at or lead.created_at
    if reference is None:
        return 0
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    return max(0, int((now - reference).total_seconds() // 60))


def applicable_rules(
    rules: Sequence[TemperatureTransitionRule], crm_settings: CRMSettingsOut
) -> List[TemperatureTransitionRule]:
    """Active rules in priority order, honouring the substatus-timeout switch."""
    selected = sorted((r for r in rules if r.active), key=lambda r: r.priority)
    if not crm_settings.enable_substatus_timeout:
        selected = [r for r in selected if r.trigger_event != _SUBSTATUS_TIMEOUT]
    return selected


def first_matching_rule(
    lead: Lead, rules: Sequence[TemperatureTransitionRule], now: datetime
) -> Optional[Tuple[TemperatureTransitionRule, RuleAction]]:
    """Return the first rule matching *lead* together with its action.

    Rules after the first match are not evaluated.  Nothing is mutated.
    """
    conditions = TestLeadConditions(
        temperature=lead.temperature,
        substatus=lead.hot_substatus,
        minutes_since_interaction=minutes_since_interaction(lead, now),
    )
    for rule in rules:
        result = test_transition_rule(rule, conditions)
        if result.matches:
            return rule, result.action
    return None


async def run_for_organization(
    session: AsyncSession,
    organization_id: UUID,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """Run one sweep for a single organization and commit the result.

    Returns the counts ``leads_evaluated``, ``transitions_made`` and
    ``substatuses_cleared``.  An organization whose settings switch the
    automation off is skipped with all counts at zero.
    """
    now = now or datetime.now(timezone.utc)
    counts = {"leads_evaluated": 0, "transitions_made": 0, "substatuses_cleared": 0}

    crm_settings = await load_crm_settings(
        CRMSettingsRepository(session), organization_id
    )
    if not crm_settings.enable_auto_temperature:
        logger.debug("Auto temperature disabled for organization %s", organization_id)
        return counts

    rule_repo = TemperatureRuleRepository(session)
    rules = applicable_rules(
        await rule_repo.list_for_org(organization_id, active_only=True), crm_settings
    )
    if not rules:
        return counts

    lead_repo = LeadRepository(session)
    leads = await lead_repo.list_for_sweep(organization_id)

    for lead in leads:
        counts["leads_evaluated"] += 1
        try:
            match = first_matching_rule(lead, rules, now)
            if match is None:
                continue
            rule, action = match
            temperature_changed, substatus_cleared = apply_rule_action(lead, action)
        except Exception:
            logger.warning(
                "Failed to evaluate transitions for lead %s", lead.id, exc_info=True
            )
            continue

        if temperature_changed:
            counts["transitions_made"] += 1
        if substatus_cleared:
            counts["substatuses_cleared"] += 1
        logger.debug("Lead %s transitioned by rule %s", lead.id, rule.name)

    await lead_repo.commit()
    if counts["transitions_made"] or counts["substatuses_cleared"]:
        logger.info(
            "Organization %s: %d transition(s), %d substatus(es) cleared",
            organization_id,
            counts["transitions_made"],
            counts["substatuses_cleared"],
        )
    return counts


async def _organizations_to_sweep(session: AsyncSession) -> List[UUID]:
    with_rules = await TemperatureRuleRepository(session).organizations_with_active_rules()
    disabled = set(
        await CRMSettingsRepository(session).organizations_with_auto_disabled()
    )
    return [org for org in with_rules if org not in disabled]


async def run_auto_transitions(
    session_factory: Callable[..., AsyncSession],
    now: Optional[datetime] = None,
) -> TransitionRunResponse:
    """One-shot: sweep every organization that has active rules.

    Parameters:
        session_factory: An async context-manager callable that yields
            an ``AsyncSession`` (e.g. ``AsyncSessionLocal``).

    Each organization runs in its own session, so a failure in one is
    logged and does not roll back the others.
    """
    now = now or datetime.now(timezone.utc)
    totals = {"leads_evaluated": 0, "transitions_made": 0, "substatuses_cleared": 0}
    processed = 0

    async with session_factory() as session:
        organizations = await _organizations_to_sweep(session)

    for organization_id in organizations:
        try:
            async with session_factory() as session:
                counts = await run_for_organization(session, organization_id, now)
        except Exception:
            logger.error(
                "Transition sweep failed for organization %s",
                organization_id,
                exc_info=True,
            )
            continue
        processed += 1
        for key, value in counts.items():
            totals[key] += value

    return TransitionRunResponse(
        organizations_processed=processed, timestamp=now, **totals
    )


async def start_auto_transition_loop(
    session_factory: Callable[..., AsyncSession],
) -> None:
    """Infinite loop that runs the transition sweep on a fixed interval.

    Parameters:
        session_factory: An async context-manager callable that yields
            an ``AsyncSession``.
    """
    interval = settings.AUTO_TRANSITION_INTERVAL_SECONDS
    logger.info("Auto-transition background task started (interval=%ds)", interval)
    while True:
        try:
            result = await run_auto_transitions(session_factory)
            if result.transitions_made or result.substatuses_cleared:
                logger.info(
                    "Auto-transition cycle complete: %d org(s), %d transition(s), "
                    "%d substatus(es) cleared",
                    result.organizations_processed,
                    result.transitions_made,
                    result.substatuses_cleared,
                )
        except Exception:
            logger.error("Auto-transition cycle failed", exc_info=True)
        await asyncio.sleep(interval)


async def run_manual_transitions(
    session: AsyncSession, organization_id: UUID, cache: CacheService
) -> TransitionRunResponse:
    """On-demand sweep for one organization, at most once per cooldown.

    Raises ``TransitionRunCooldownError`` while a previous manual run's
    cooldown is still held in Redis.
    """
    acquired = await cache.acquire_cooldown(
        transition_cooldown_key(organization_id),
        settings.TRANSITION_RUN_COOLDOWN_SECONDS,
    )
    if not acquired:
        raise TransitionRunCooldownError(
            f"Transitions already run in the last "
            f"{settings.TRANSITION_RUN_COOLDOWN_SECONDS}s; try again shortly"
        )

    now = datetime.now(timezone.utc)
    counts = await run_for_organization(session, organization_id, now)
    logger.info("Manual transition run for organization %s: %s", organization_id, counts)
    return TransitionRunResponse(organizations_processed=1, timestamp=now, **counts)
