"""Condition evaluation for price rules.

Every predicate degrades to ``False`` when it cannot be decided (unknown
condition type or operator, missing stock or expiry data) so that a single
malformed condition never breaks pricing for the whole catalog.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

from services.pricing.models import Condition


@dataclass(frozen=True)
class ConditionContext:
    """The subset of a pricing context that conditions can observe."""

    current_date: datetime
    stock_quantity: Optional[float] = None
    max_stock: Optional[float] = None
    days_to_expiry: Optional[float] = None

    @property
    def day_of_week(self) -> int:
        """Weekday with 0 = Sunday ... 6 = Saturday."""
        return (self.current_date.weekday() + 1) % 7

    @property
    def is_weekend(self) -> bool:
        return self.day_of_week in (0, 6)


def _as_number(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def compare_values(actual: float, operator: str, expected, expected2=None) -> bool:
    """
    Compare a measured value against a condition threshold.

    Args:
        actual: Measured value from the context
        operator: One of eq, ne, gt, gte, lt, lte, between
        expected: Threshold (lower bound for between)
        expected2: Upper bound for between

    Returns:
        True if the comparison holds; False for unknown operators or non-numeric thresholds
    """
    expected = _as_number(expected)
    if expected is None:
        return False

    if operator == "eq":
        return actual == expected
    if operator == "ne":
        return actual != expected
    if operator == "gt":
        return actual > expected
    if operator == "gte":
        return actual >= expected
    if operator == "lt":
        return actual < expected
    if operator == "lte":
        return actual <= expected
    if operator == "between":
        upper = _as_number(expected2)
        return upper is not None and expected <= actual <= upper
    return False


def _day_of_week(condition: Condition, context: ConditionContext) -> bool:
    days = condition.value if isinstance(condition.value, list) else [condition.value]
    return context.day_of_week in [_as_number(day) for day in days]


def _is_weekend(condition: Condition, context: ConditionContext) -> bool:
    return context.is_weekend == bool(condition.value)


def _stock_quantity(condition: Condition, context: ConditionContext) -> bool:
    if context.stock_quantity is None:
        return False
    return compare_values(context.stock_quantity, condition.operator, condition.value, condition.value2)


def _stock_percentage(condition: Condition, context: ConditionContext) -> bool:
    if context.stock_quantity is None or not context.max_stock:
        return False
    percentage = (context.stock_quantity / context.max_stock) * 100
    return compare_values(percentage, condition.operator, condition.value, condition.value2)


def _days_to_expiry(condition: Condition, context: ConditionContext) -> bool:
    if context.days_to_expiry is None:
        return False
    return compare_values(context.days_to_expiry, condition.operator, condition.value, condition.value2)


def _time_range(condition: Condition, context: ConditionContext) -> bool:
    bounds = condition.value
    if not isinstance(bounds, list) or len(bounds) != 2:
        return False
    start_hour, end_hour = (_as_number(bound) for bound in bounds)
    if start_hour is None or end_hour is None:
        return False
    return start_hour <= context.current_date.hour < end_hour


_EVALUATORS: Dict[str, Callable[[Condition, ConditionContext], bool]] = {
    "day_of_week": _day_of_week,
    "is_weekend": _is_weekend,
    "stock_quantity": _stock_quantity,
    "stock_percentage": _stock_percentage,
    "days_to_expiry": _days_to_expiry,
    "time_range": _time_range,
}


def evaluate_condition(condition: Condition, context: ConditionContext) -> bool:
    """Decide whether one condition holds. Unknown condition types never hold."""
    evaluator = _EVALUATORS.get(condition.type)
    if evaluator is None:
        return False
    return evaluator(condition, context)


def conditions_met(conditions: Iterable[Condition], context: ConditionContext) -> bool:
    """AND of all conditions, short-circuiting; an empty list is vacuously true."""
    return all(evaluate_condition(condition, context) for condition in conditions)
