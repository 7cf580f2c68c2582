from typing import Any, Optional

from app.core.constants import SUBSTATUS_LABELS, WILDCARD_VALUES
from app.schemas.temperature_rule import (
    RuleAction,
    TestLeadConditions,
    TestReason,
    TestResult,
)

ANY_LABEL = "Qualquer"
NO_SUBSTATUS_LABEL = "Nenhum"


def _plain(value: Any) -> Optional[str]:
    """Unwrap str-based enum members to their value."""
    return getattr(value, "value", value)


def _is_wildcard(value: Optional[str]) -> bool:
    return value is None or value.strip().lower() in WILDCARD_VALUES


def _temperature_label(value: Optional[str]) -> str:
    return value.upper() if value else NO_SUBSTATUS_LABEL


def _substatus_label(value: Optional[str]) -> str:
    if not value:
        return NO_SUBSTATUS_LABEL
    return SUBSTATUS_LABELS.get(value, value)


def _check_filter(
    label: str,
    expected: Optional[str],
    actual: Optional[str],
    display,
) -> TestReason:
    if _is_wildcard(expected):
        return TestReason(
            condition=label, passed=True, actual=display(actual), expected=ANY_LABEL
        )
    return TestReason(
        condition=label,
        passed=actual == expected,
        actual=display(actual),
        expected=display(expected),
    )


def rule_action(rule: Any) -> RuleAction:
    """The action bundle a rule applies when it matches."""
    return RuleAction(
        set_temperature=_plain(rule.action_set_temperature),
        clear_substatus=bool(rule.action_clear_substatus),
        set_substatus=_plain(rule.action_set_substatus),
    )


def test_transition_rule(rule: Any, lead: TestLeadConditions) -> TestResult:
    """Check whether *rule* would fire for the hypothetical *lead*.

    Every filter is evaluated and recorded, even after one fails, so the
    caller can show the full list of reasons:

    1. temperature: ``rule.from_temperature`` unset/"any" or equal
    2. substatus: ``rule.from_substatus`` unset/"any" or equal
    3. timer: ``minutes_since_interaction >= rule.timer_minutes``

    ``matches`` is the AND of all three.  When it holds, ``action``
    describes what the rule *would* do; nothing is mutated here.
    """
    temperature = _plain(lead.temperature)
    substatus = _plain(lead.substatus)
    minutes = lead.minutes_since_interaction
    timer = rule.timer_minutes or 0

    reasons = [
        _check_filter(
            "Temperatura",
            _plain(rule.from_temperature),
            temperature,
            _temperature_label,
        ),
        _check_filter(
            "Substatus",
            _plain(rule.from_substatus),
            substatus,
            _substatus_label,
        ),
        TestReason(
            condition="Timer",
            passed=minutes >= timer,
            actual=f"{minutes} min",
            expected=f">= {timer} min",
        ),
    ]

    matches = all(reason.passed for reason in reasons)
    return TestResult(
        matches=matches,
        reasons=reasons,
        action=rule_action(rule) if matches else None,
    )
