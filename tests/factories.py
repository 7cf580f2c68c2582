"""Row doubles shared by the unit tests."""

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

ORG_ID = uuid4()


def make_trigger(**overrides) -> MagicMock:
    """A trigger row double carrying every attribute the matcher reads."""
    trigger = MagicMock()
    trigger.id = overrides.pop("id", uuid4())
    trigger.organization_id = ORG_ID
    trigger.name = "Trigger"
    trigger.priority = 0
    trigger.active = True
    trigger.condition_field = "first_message"
    trigger.condition_operator = "contains"
    trigger.condition_value = ""
    trigger.case_sensitive = False
    trigger.action_set_interest_id = None
    trigger.action_set_source_id = None
    trigger.action_set_temperature = None
    trigger.action_set_status = None
    trigger.created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    for key, value in overrides.items():
        setattr(trigger, key, value)
    return trigger


def make_rule(**overrides) -> MagicMock:
    """A transition rule row double."""
    rule = MagicMock()
    rule.id = overrides.pop("id", uuid4())
    rule.organization_id = ORG_ID
    rule.name = "Rule"
    rule.priority = 0
    rule.active = True
    rule.trigger_event = "inactivity_timer"
    rule.from_temperature = None
    rule.from_substatus = None
    rule.timer_minutes = 60
    rule.action_set_temperature = None
    rule.action_clear_substatus = False
    rule.action_set_substatus = None
    rule.created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    rule.updated_at = None
    for key, value in overrides.items():
        setattr(rule, key, value)
    return rule


def make_lead(**overrides) -> MagicMock:
    """A lead row double with ``LeadOut``-compatible attributes."""
    lead = MagicMock()
    lead.id = overrides.pop("id", uuid4())
    lead.organization_id = ORG_ID
    lead.name = "Maria"
    lead.phone = "+5511999990000"
    lead.temperature = "novo"
    lead.hot_substatus = None
    lead.lost_reason = None
    lead.interest_id = None
    lead.source_id = None
    lead.status = None
    lead.last_interaction_at = None
    lead.created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    lead.updated_at = None
    for key, value in overrides.items():
        setattr(lead, key, value)
    return lead
