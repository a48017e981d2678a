"""Price actions and the minimum-margin guard."""

from typing import Optional

from services.pricing.models import Action


def calculate_margin(price: float, purchase_price: float) -> float:
    """Margin in percent of purchase price: (price - purchase) / purchase * 100."""
    return ((price - purchase_price) / purchase_price) * 100


def candidate_price(action: Action, running_price: float, purchase_price: float) -> Optional[float]:
    """
    Compute the price an action would produce.

    Args:
        action: Rule action to apply
        running_price: Price produced by the rules applied so far
        purchase_price: Item purchase price (used by markup_percent)

    Returns:
        Candidate price floored at 0, or None for an unknown action type
    """
    if action.type == "discount_percent":
        discount = action.value
        if action.max_discount_percent is not None:
            discount = min(discount, action.max_discount_percent)
        price = running_price * (1 - discount / 100)
    elif action.type == "discount_amount":
        price = running_price - action.value
    elif action.type == "set_price":
        price = action.value
    elif action.type == "markup_percent":
        price = purchase_price * (1 + action.value / 100)
    else:
        return None

    return max(0.0, price)


def apply_action(action: Action, running_price: float, purchase_price: float) -> Optional[float]:
    """
    Apply an action to the running price, enforcing the minimum margin floor.

    Args:
        action: Rule action to apply
        running_price: Price produced by the rules applied so far
        purchase_price: Item purchase price

    Returns:
        The new running price if the action is accepted, or None when the
        action is unknown or its result would fall below min_margin_percent.
    """
    new_price = candidate_price(action, running_price, purchase_price)
    if new_price is None:
        return None

    if action.min_margin_percent is not None and purchase_price > 0:
        if calculate_margin(new_price, purchase_price) < action.min_margin_percent:
            return None

    return new_price
