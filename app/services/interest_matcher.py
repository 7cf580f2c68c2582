import logging
from typing import Any, Iterable, List, Mapping, Optional

from app.services.conditions import evaluate_condition

logger = logging.getLogger(__name__)


def _context_value(context: Any, field: str) -> Optional[str]:
    field = getattr(field, "value", field)
    if isinstance(context, Mapping):
        return context.get(field)
    return getattr(context, field, None)


def active_in_priority_order(triggers: Iterable[Any]) -> List[Any]:
    """Active triggers sorted by ascending ``priority`` (stable for ties)."""
    return sorted(
        (t for t in triggers if t.active),
        key=lambda t: t.priority if t.priority is not None else 0,
    )


def test_trigger_condition(trigger: Any, test_value: Optional[str]) -> bool:
    """Evaluate a single trigger's condition against one candidate string.

    Backs the interactive "try a message" check, so ``active`` is not
    consulted here.
    """
    return evaluate_condition(
        test_value,
        trigger.condition_operator,
        trigger.condition_value,
        bool(trigger.case_sensitive),
    )


def match_trigger(triggers: Iterable[Any], context: Any) -> Optional[Any]:
    """Return the first active trigger whose condition matches *context*.

    *triggers* may be ORM rows or ``InterestTriggerOut`` instances; any
    object exposing the trigger attributes works.  *context* is a
    ``MessageContext`` (or a mapping with the same keys) holding the
    candidate strings ``first_message``, ``any_message``, ``push_name``
    and ``source_name``.

    Evaluation is short-circuited: triggers after the first match are
    never evaluated, and only that trigger's action bundle applies.
    """
    for trigger in active_in_priority_order(triggers):
        candidate = _context_value(context, trigger.condition_field)
        if test_trigger_condition(trigger, candidate):
            logger.debug("Interest trigger %s matched", trigger.id)
            return trigger
    return None
