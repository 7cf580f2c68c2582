from typing import Iterable, List

from app.schemas.temperature_rule import TestReason


def format_reason(reason: TestReason) -> str:
    return f"{reason.condition}: {reason.actual} (esperado: {reason.expected})"


def format_reasons(reasons: Iterable[TestReason]) -> List[str]:
    """One display line per rule-tester reason, in evaluation order."""
    return [format_reason(reason) for reason in reasons]
