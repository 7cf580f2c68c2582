from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel


class Temperature(str, Enum):
    novo = "novo"
    quente = "quente"
    frio = "frio"
    perdido = "perdido"


class RuleTemperature(str, Enum):
    """Temperatures a trigger or transition rule may filter on or assign."""

    novo = "novo"
    quente = "quente"
    frio = "frio"


class HotSubstatus(str, Enum):
    em_conversa = "em_conversa"
    aguardando_resposta = "aguardando_resposta"


class ConditionField(str, Enum):
    first_message = "first_message"
    any_message = "any_message"
    push_name = "push_name"
    source_name = "source_name"


class ConditionOperator(str, Enum):
    contains = "contains"
    not_contains = "not_contains"
    equals = "equals"
    not_equals = "not_equals"
    starts_with = "starts_with"
    ends_with = "ends_with"
    regex = "regex"
    is_empty = "is_empty"
    is_not_empty = "is_not_empty"


class TriggerEvent(str, Enum):
    inactivity_timer = "inactivity_timer"
    substatus_timeout = "substatus_timeout"
    no_response = "no_response"


class SuccessResponse(BaseModel):
    """Generic success response base."""

    success: bool = True


def column_values(model: BaseModel, exclude_unset: bool = False) -> Dict[str, Any]:
    """Dump *model* with enum members unwrapped, ready for ORM columns."""
    return {
        key: getattr(value, "value", value)
        for key, value in model.model_dump(exclude_unset=exclude_unset).items()
    }
