"""Rule engine: evaluate a price rule catalog for one item."""

from datetime import datetime
from typing import List, Sequence

from services.pricing.actions import apply_action
from services.pricing.catalog import filter_candidate_rules
from services.pricing.conditions import ConditionContext, conditions_met
from services.pricing.models import EvaluationResult, PriceRule, PricingContext
from shared.exceptions import InvalidPricingContextError
from shared.logging_setup import get_logger

logger = get_logger(__name__)


def calculate_discount_percent(base_price: float, final_price: float) -> float:
    """Effective discount relative to base price; 0 when base price is not positive."""
    if base_price <= 0:
        return 0.0
    return ((base_price - final_price) / base_price) * 100


def evaluate_price(rules: Sequence[PriceRule], context: PricingContext) -> EvaluationResult:
    """
    Compute the sale price of an item from a rule catalog.

    Candidate rules are evaluated in priority order. Each rule whose
    conditions all hold applies its action to the running price; a rule
    rejected by its margin floor leaves the running price untouched and
    evaluation continues with the next candidate.

    Args:
        rules: Rule catalog snapshot (not modified)
        context: Pricing context; current_date defaults to now

    Returns:
        EvaluationResult with final price, fired rules and discount percent

    Raises:
        InvalidPricingContextError: If base_price or purchase_price is negative
    """
    if context.base_price < 0 or context.purchase_price < 0:
        raise InvalidPricingContextError(
            f"Prices must be non-negative for item {context.item_id}"
        )

    current_date = context.current_date or datetime.now()
    condition_context = ConditionContext(
        current_date=current_date,
        stock_quantity=context.stock_quantity,
        max_stock=context.max_stock,
        days_to_expiry=context.days_to_expiry,
    )

    candidates = filter_candidate_rules(
        rules,
        on_date=current_date.date(),
        item_id=context.item_id,
        category_id=context.category_id,
        location_id=context.location_id,
    )

    running_price = context.base_price
    applied_rules: List[PriceRule] = []

    for rule in candidates:
        if not conditions_met(rule.conditions, condition_context):
            continue

        new_price = apply_action(rule.action, running_price, context.purchase_price)
        if new_price is None:
            logger.debug(
                "Price rule skipped",
                rule_code=rule.code,
                action_type=rule.action.type,
                item_id=context.item_id,
            )
            continue

        running_price = new_price
        applied_rules.append(rule)

    discount_percent = calculate_discount_percent(context.base_price, running_price)

    logger.debug(
        "Price evaluated",
        item_id=context.item_id,
        candidates=len(candidates),
        applied=[rule.code for rule in applied_rules],
        base_price=context.base_price,
        final_price=running_price,
    )

    return EvaluationResult(
        final_price=running_price,
        applied_rules=applied_rules,
        discount_percent=discount_percent,
    )
