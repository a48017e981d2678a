"""Narrow a rule catalog to the candidates for one pricing context."""

from datetime import date
from typing import List, Optional, Sequence

from services.pricing.models import PriceRule


def is_valid_on(rule: PriceRule, on_date: date) -> bool:
    """Validity window check; both bounds inclusive, absent bound is unbounded."""
    if rule.valid_from is not None and rule.valid_from > on_date:
        return False
    if rule.valid_to is not None and rule.valid_to < on_date:
        return False
    return True


def _allows(allowed_ids: Optional[List[str]], context_id: Optional[str]) -> bool:
    # An empty allow-list applies to everything. A context without this
    # dimension is not excluded.
    if not allowed_ids or context_id is None:
        return True
    return context_id in allowed_ids


def is_in_scope(
    rule: PriceRule,
    item_id: str,
    category_id: Optional[str] = None,
    location_id: Optional[str] = None
) -> bool:
    """Check the rule's item/category/location allow-lists against a context."""
    return (
        _allows(rule.item_ids, item_id)
        and _allows(rule.category_ids, category_id)
        and _allows(rule.location_ids, location_id)
    )


def filter_candidate_rules(
    rules: Sequence[PriceRule],
    on_date: date,
    item_id: str,
    category_id: Optional[str] = None,
    location_id: Optional[str] = None
) -> List[PriceRule]:
    """
    Select the rules eligible for a context and order them for evaluation.

    Args:
        rules: Full rule catalog (not modified)
        on_date: Evaluation date for the validity window
        item_id: Item being priced
        category_id: Item category, if known
        location_id: Selling location, if known

    Returns:
        Active, valid, in-scope rules sorted by ascending priority (stable on ties)
    """
    candidates = [
        rule for rule in rules
        if rule.active
        and is_valid_on(rule, on_date)
        and is_in_scope(rule, item_id, category_id, location_id)
    ]
    return sorted(candidates, key=lambda rule: rule.priority)
