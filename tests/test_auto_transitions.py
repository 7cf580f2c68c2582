from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from app.core.default_transition_rules import DEFAULT_CRM_SETTINGS
from app.core.exceptions import TransitionRunCooldownError
from app.schemas.crm_settings import CRMSettingsOut
from app.services.auto_transitions import (
    applicable_rules,
    first_matching_rule,
    minutes_since_interaction,
    run_auto_transitions,
    run_for_organization,
    run_manual_transitions,
)
from factories import ORG_ID, make_lead, make_rule

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _settings(**overrides) -> CRMSettingsOut:
    return CRMSettingsOut(
        organization_id=ORG_ID, **{**DEFAULT_CRM_SETTINGS, **overrides}
    )


def _hot_rules():
    """The default chain: em_conversa → aguardando → frio, then hot → frio."""
    return [
        make_rule(
            name="em conversa timeout",
            priority=0,
            trigger_event="substatus_timeout",
            from_temperature="quente",
            from_substatus="em_conversa",
            timer_minutes=60,
            action_set_substatus="aguardando_resposta",
        ),
        make_rule(
            name="aguardando sem resposta",
            priority=1,
            trigger_event="no_response",
            from_temperature="quente",
            from_substatus="aguardando_resposta",
            timer_minutes=48 * 60,
            action_set_temperature="frio",
            action_clear_substatus=True,
        ),
        make_rule(
            name="quente parado",
            priority=2,
            from_temperature="quente",
            timer_minutes=3 * 1440,
            action_set_temperature="frio",
            action_clear_substatus=True,
        ),
        make_rule(
            name="novo parado",
            priority=3,
            from_temperature="novo",
            timer_minutes=1440,
            action_set_temperature="frio",
        ),
    ]


class TestMinutesSinceInteraction:
    def test_uses_last_interaction(self):
        lead = make_lead(last_interaction_at=NOW - timedelta(minutes=59, seconds=59))
        assert minutes_since_interaction(lead, NOW) == 59

    def test_falls_back_to_created_at(self):
        lead = make_lead(last_interaction_at=None, created_at=NOW - timedelta(hours=2))
        assert minutes_since_interaction(lead, NOW) == 120

    def test_naive_timestamps_are_utc(self):
        lead = make_lead(last_interaction_at=datetime(2026, 3, 10, 11, 0))
        assert minutes_since_interaction(lead, NOW) == 60

    def test_future_timestamp_is_zero(self):
        lead = make_lead(last_interaction_at=NOW + timedelta(minutes=5))
        assert minutes_since_interaction(lead, NOW) == 0


class TestRuleSelection:
    def test_substatus_timeout_rules_can_be_switched_off(self):
        rules = applicable_rules(_hot_rules(), _settings(enable_substatus_timeout=False))
        assert "substatus_timeout" not in [r.trigger_event for r in rules]
        assert len(rules) == 3

    def test_inactive_rules_are_skipped_and_order_is_priority(self):
        rules = _hot_rules()
        rules[0].active = False
        selected = applicable_rules(list(reversed(rules)), _settings())
        assert [r.priority for r in selected] == [1, 2, 3]

    def test_first_match_wins(self):
        lead = make_lead(
            temperature="quente",
            hot_substatus="aguardando_resposta",
            last_interaction_at=NOW - timedelta(days=4),
        )
        rule, action = first_matching_rule(lead, _hot_rules(), NOW)
        # both the no-response rule and the general hot rule match
        assert rule.name == "aguardando sem resposta"
        assert action.set_temperature == "frio"

    def test_no_match(self):
        lead = make_lead(temperature="novo", last_interaction_at=NOW - timedelta(hours=1))
        assert first_matching_rule(lead, _hot_rules(), NOW) is None


def _patched_repos(rules, leads, crm_settings=None):
    rule_repo = MagicMock()
    rule_repo.list_for_org = AsyncMock(return_value=rules)
    lead_repo = MagicMock()
    lead_repo.list_for_sweep = AsyncMock(return_value=leads)
    lead_repo.commit = AsyncMock()
    return (
        patch(
            "app.services.auto_transitions.load_crm_settings",
            new_callable=AsyncMock,
            return_value=crm_settings or _settings(),
        ),
        patch(
            "app.services.auto_transitions.TemperatureRuleRepository",
            return_value=rule_repo,
        ),
        patch("app.services.auto_transitions.LeadRepository", return_value=lead_repo),
        lead_repo,
    )


class TestRunForOrganization:
    @pytest.mark.asyncio
    async def test_sweep_counts_and_mutations(self):
        cold_candidate = make_lead(
            temperature="quente",
            hot_substatus="aguardando_resposta",
            last_interaction_at=NOW - timedelta(hours=49),
        )
        chatting = make_lead(
            temperature="quente",
            hot_substatus="em_conversa",
            last_interaction_at=NOW - timedelta(minutes=61),
        )
        stale_new = make_lead(temperature="novo", created_at=NOW - timedelta(days=2))
        fresh_new = make_lead(temperature="novo", created_at=NOW - timedelta(hours=1))
        settings_patch, rules_patch, leads_patch, lead_repo = _patched_repos(
            _hot_rules(), [cold_candidate, chatting, stale_new, fresh_new]
        )

        with settings_patch, rules_patch, leads_patch:
            counts = await run_for_organization(MagicMock(), ORG_ID, NOW)

        assert counts == {
            "leads_evaluated": 4,
            "transitions_made": 2,
            "substatuses_cleared": 1,
        }
        assert cold_candidate.temperature == "frio"
        assert cold_candidate.hot_substatus is None
        assert chatting.temperature == "quente"
        assert chatting.hot_substatus == "aguardando_resposta"
        assert stale_new.temperature == "frio"
        assert fresh_new.temperature == "novo"
        lead_repo.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_disabled_organization_is_skipped(self):
        settings_patch, rules_patch, leads_patch, lead_repo = _patched_repos(
            _hot_rules(),
            [make_lead(created_at=NOW - timedelta(days=5))],
            _settings(enable_auto_temperature=False),
        )

        with settings_patch, rules_patch, leads_patch:
            counts = await run_for_organization(MagicMock(), ORG_ID, NOW)

        assert counts["leads_evaluated"] == 0
        lead_repo.list_for_sweep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_one_bad_lead_does_not_stop_the_sweep(self):
        broken = make_lead(temperature="not-a-temperature")
        good = make_lead(temperature="novo", created_at=NOW - timedelta(days=2))
        settings_patch, rules_patch, leads_patch, lead_repo = _patched_repos(
            _hot_rules(), [broken, good]
        )

        with settings_patch, rules_patch, leads_patch:
            counts = await run_for_organization(MagicMock(), ORG_ID, NOW)

        assert counts["leads_evaluated"] == 2
        assert counts["transitions_made"] == 1
        assert good.temperature == "frio"
        lead_repo.commit.assert_awaited_once()


class TestRunAutoTransitions:
    @staticmethod
    def _session_factory():
        session = AsyncMock()
        session.__aenter__ = AsyncMock(return_value=session)
        session.__aexit__ = AsyncMock(return_value=False)
        return MagicMock(return_value=session)

    @pytest.mark.asyncio
    async def test_totals_across_organizations(self):
        orgs = [uuid4(), uuid4()]
        counts = {"leads_evaluated": 3, "transitions_made": 1, "substatuses_cleared": 1}

        with (
            patch(
                "app.services.auto_transitions._organizations_to_sweep",
                new_callable=AsyncMock,
                return_value=orgs,
            ),
            patch(
                "app.services.auto_transitions.run_for_organization",
                new_callable=AsyncMock,
                return_value=counts,
            ),
        ):
            result = await run_auto_transitions(self._session_factory(), NOW)

        assert result.organizations_processed == 2
        assert result.leads_evaluated == 6
        assert result.transitions_made == 2
        assert result.substatuses_cleared == 2
        assert result.timestamp == NOW

    @pytest.mark.asyncio
    async def test_failed_organization_is_skipped(self):
        orgs = [uuid4(), uuid4()]
        counts = {"leads_evaluated": 1, "transitions_made": 1, "substatuses_cleared": 0}

        with (
            patch(
                "app.services.auto_transitions._organizations_to_sweep",
                new_callable=AsyncMock,
                return_value=orgs,
            ),
            patch(
                "app.services.auto_transitions.run_for_organization",
                new_callable=AsyncMock,
                side_effect=[RuntimeError("db down"), counts],
            ),
        ):
            result = await run_auto_transitions(self._session_factory(), NOW)

        assert result.organizations_processed == 1
        assert result.transitions_made == 1


class TestManualRun:
    @pytest.mark.asyncio
    async def test_cooldown_blocks_second_run(self, mock_cache, mock_redis):
        mock_redis.set = AsyncMock(return_value=None)

        with pytest.raises(TransitionRunCooldownError):
            await run_manual_transitions(MagicMock(), ORG_ID, mock_cache)

    @pytest.mark.asyncio
    async def test_runs_when_cooldown_acquired(self, mock_cache):
        counts = {"leads_evaluated": 2, "transitions_made": 1, "substatuses_cleared": 0}

        with patch(
            "app.services.auto_transitions.run_for_organization",
            new_callable=AsyncMock,
            return_value=counts,
        ):
            result = await run_manual_transitions(MagicMock(), ORG_ID, mock_cache)

        assert result.success is True
        assert result.organizations_processed == 1
        assert result.transitions_made == 1
