from typing import Any, Dict, List

from app.schemas.crm_settings import CRMSettingsOut


DEFAULT_CRM_SETTINGS: Dict[str, Any] = {
    "new_to_cold_minutes": 1440,
    "hot_to_cold_days": 3,
    "hot_to_cold_hours": 0,
    "enable_auto_temperature": True,
    "em_conversa_timeout_minutes": 60,
    "enable_substatus_timeout": True,
    "aguardando_to_cold_hours": 48,
}


def build_default_rules(settings: CRMSettingsOut) -> List[Dict[str, Any]]:
    """Return the starter rule set derived from an organization's settings.

    Substatus-specific rules come before the general hot-lead rule so
    that a lead awaiting a reply is handled by the narrower rule first.
    Priorities are the list positions.
    """
    rules: List[Dict[str, Any]] = [
        {
            "name": "Em conversa sem retorno → Aguardando resposta",
            "trigger_event": "substatus_timeout",
            "from_temperature": "quente",
            "from_substatus": "em_conversa",
            "timer_minutes": settings.em_conversa_timeout_minutes,
            "action_set_temperature": None,
            "action_clear_substatus": False,
            "action_set_substatus": "aguardando_resposta",
        },
        {
            "name": "Aguardando resposta → Frio",
            "trigger_event": "no_response",
            "from_temperature": "quente",
            "from_substatus": "aguardando_resposta",
            "timer_minutes": settings.aguardando_to_cold_hours * 60,
            "action_set_temperature": "frio",
            "action_clear_substatus": True,
            "action_set_substatus": None,
        },
        {
            "name": "Quente sem interação → Frio",
            "trigger_event": "inactivity_timer",
            "from_temperature": "quente",
            "from_substatus": None,
            "timer_minutes": max(1, settings.hot_to_cold_minutes),
            "action_set_temperature": "frio",
            "action_clear_substatus": True,
            "action_set_substatus": None,
        },
        {
            "name": "Novo sem interação → Frio",
            "trigger_event": "inactivity_timer",
            "from_temperature": "novo",
            "from_substatus": None,
            "timer_minutes": settings.new_to_cold_minutes,
            "action_set_temperature": "frio",
            "action_clear_substatus": False,
            "action_set_substatus": None,
        },
    ]
    for position, rule in enumerate(rules):
        rule["priority"] = position
    return rules
