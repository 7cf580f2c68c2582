from typing import Dict, FrozenSet

from app.schemas.common import (
    ConditionField,
    ConditionOperator,
    HotSubstatus,
    RuleTemperature,
    Temperature,
    TriggerEvent,
)

TEMPERATURES: FrozenSet[str] = frozenset(t.value for t in Temperature)

# "perdido" is only ever set by hand, never by a trigger or rule
RULE_TEMPERATURES: FrozenSet[str] = frozenset(t.value for t in RuleTemperature)

# Only this temperature carries a lost_reason
LOST_TEMPERATURE: str = "perdido"

# The automatic sweep never touches leads in these temperatures
TERMINAL_TEMPERATURES: FrozenSet[str] = frozenset({LOST_TEMPERATURE})

# Substatus is a sub-state of this temperature only
HOT_TEMPERATURE: str = "quente"

HOT_SUBSTATUSES: FrozenSet[str] = frozenset(s.value for s in HotSubstatus)
CONDITION_FIELDS: FrozenSet[str] = frozenset(f.value for f in ConditionField)
CONDITION_OPERATORS: FrozenSet[str] = frozenset(o.value for o in ConditionOperator)
TRIGGER_EVENTS: FrozenSet[str] = frozenset(e.value for e in TriggerEvent)

# A rule filter holding any of these matches every lead
WILDCARD_VALUES: FrozenSet[str] = frozenset({"", "any"})

SUBSTATUS_LABELS: Dict[str, str] = {
    "em_conversa": "Em Conversa",
    "aguardando_resposta": "Aguardando Resposta",
}


def _check_clause(column: str, values: FrozenSet[str]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in sorted(values))})"


LEAD_TEMPERATURE_CHECK_CLAUSE: str = _check_clause("temperature", TEMPERATURES)
HOT_SUBSTATUS_CHECK_CLAUSE: str = (
    "hot_substatus IS NULL OR ("
    + _check_clause("hot_substatus", HOT_SUBSTATUSES)
    + f" AND temperature = '{HOT_TEMPERATURE}')"
)
CONDITION_FIELD_CHECK_CLAUSE: str = _check_clause("condition_field", CONDITION_FIELDS)
CONDITION_OPERATOR_CHECK_CLAUSE: str = _check_clause(
    "condition_operator", CONDITION_OPERATORS
)
TRIGGER_EVENT_CHECK_CLAUSE: str = _check_clause("trigger_event", TRIGGER_EVENTS)


def nullable_check_clause(column: str, values: FrozenSet[str]) -> str:
    """CHECK text for an optional enum column."""
    return f"{column} IS NULL OR {_check_clause(column, values)}"
