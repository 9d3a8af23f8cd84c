"""
Trigger condition evaluation.

Conditions are ANDed and evaluated in order; the first failing one stops
evaluation. `==`, `!=` and `contains` compare the stringified field value.
`>` and `<` compare numerically: null and blank count as 0, while an absent
field or an unparseable operand never rejects the document (NaN comparisons
are false).
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .render import MISSING, stringify

if TYPE_CHECKING:
    from .models import TriggerCondition


def _as_text(value: Any) -> str:
    # Absent and null both read as "", not as the literals "undefined"/"null"
    if value is MISSING or value is None:
        return ""
    return stringify(value)


def _as_number(value: Any) -> float:
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def check(document: Mapping[str, Any], condition: "TriggerCondition") -> bool:
    """Evaluate a single condition against the document's fields."""
    actual = document.get(condition.field, MISSING)
    expected = condition.value
    op = condition.operator

    if op == "==":
        return _as_text(actual) == expected
    if op == "!=":
        return _as_text(actual) != expected
    if op == ">":
        return not (_as_number(actual) <= _as_number(expected))
    if op == "<":
        return not (_as_number(actual) >= _as_number(expected))
    if op == "contains":
        return expected in _as_text(actual)
    if op == "exists":
        present = actual is not MISSING and bool(actual)
        if expected == "true":
            return present
        if expected == "false":
            return not present
        return True
    raise ValueError(f"Unknown condition operator: {op}")


def matches(
    document: Mapping[str, Any],
    conditions: "list[TriggerCondition] | None",
) -> bool:
    """True if the document satisfies every condition (vacuously for none)."""
    for condition in conditions or []:
        if not check(document, condition):
            return False
    return True
