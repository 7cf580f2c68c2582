import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)


def evaluate_condition(
    value: Optional[str],
    operator: str,
    compare_value: Optional[str],
    case_sensitive: bool = False,
) -> bool:
    """Return whether *value* satisfies ``operator`` against *compare_value*.

    Supported operators:
        - ``contains`` / ``not_contains``   substring test / negation
        - ``equals`` / ``not_equals``       exact equality / negation
        - ``starts_with`` / ``ends_with``   prefix / suffix test
        - ``regex``                         ``re.search`` of the pattern
        - ``is_empty`` / ``is_not_empty``   stripped length == 0 / > 0

    ``None`` values are treated as the empty string.  Unless
    *case_sensitive* is set, both sides are lower-cased before comparing
    (``regex`` uses ``re.IGNORECASE`` on the original text instead).

    The emptiness operators deliberately ignore *compare_value* and the
    case flag: they only look at the length of *value*.

    Never raises on bad input.  A pattern that does not compile, or an
    unknown operator, is a non-match.
    """
    # Accept str-based enum members as well as plain strings
    operator = getattr(operator, "value", operator)
    raw = value or ""
    pattern = compare_value or ""

    if operator == "is_empty":
        return raw.strip() == ""
    if operator == "is_not_empty":
        return raw.strip() != ""

    if operator == "regex":
        flags = 0 if case_sensitive else re.IGNORECASE
        try:
            return re.search(pattern, raw, flags) is not None
        except re.error:
            logger.debug("Ignoring invalid trigger pattern %r", pattern)
            return False

    text = raw if case_sensitive else raw.lower()
    target = pattern if case_sensitive else pattern.lower()

    if operator == "contains":
        return target in text
    if operator == "not_contains":
        return target not in text
    if operator == "equals":
        return text == target
    if operator == "not_equals":
        return text != target
    if operator == "starts_with":
        return text.startswith(target)
    if operator == "ends_with":
        return text.endswith(target)

    logger.debug("Unknown condition operator %r", operator)
    return False
