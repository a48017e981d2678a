"""Validate stored price rule records before they reach the engine.

Rules are stored as loosely typed JSON (conditions and action are free-form
objects). Records are parsed into ``PriceRule`` models here; a record that
does not parse is quarantined so the rest of the catalog stays usable.
"""

from typing import Any, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from services.pricing.models import PriceRule
from shared.exceptions import RuleValidationError
from shared.logging_setup import get_logger

logger = get_logger(__name__)


def parse_price_rule(record: Mapping[str, Any]) -> PriceRule:
    """
    Parse a single stored rule record.

    Raises:
        RuleValidationError: If the record is not a valid price rule
    """
    rule_id = _record_id(record)
    try:
        return PriceRule.model_validate(record)
    except ValidationError as e:
        raise RuleValidationError(
            f"Invalid price rule {rule_id}: {e.error_count()} error(s)",
            rule_id=rule_id,
            errors=e.errors(include_url=False),
        ) from e


def load_price_rules_with_rejects(
    records: Iterable[Mapping[str, Any]]
) -> Tuple[List[PriceRule], List[RuleValidationError]]:
    """
    Parse a batch of stored records, separating valid rules from rejects.

    Returns:
        Tuple of (valid rules in catalog order, validation errors for rejected records)
    """
    rules: List[PriceRule] = []
    rejected: List[RuleValidationError] = []

    for record in records:
        try:
            rules.append(parse_price_rule(record))
        except RuleValidationError as e:
            logger.warning(
                "Price rule quarantined",
                rule_id=e.rule_id,
                errors=[
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
                    for err in e.errors
                ],
            )
            rejected.append(e)

    return rules, rejected


def load_price_rules(records: Iterable[Mapping[str, Any]]) -> List[PriceRule]:
    """Parse a batch of stored records, dropping (and logging) malformed ones."""
    rules, _ = load_price_rules_with_rejects(records)
    return rules


def _record_id(record: Mapping[str, Any]) -> Optional[str]:
    if not isinstance(record, Mapping):
        return None
    rule_id = record.get("id") or record.get("code")
    return str(rule_id) if rule_id is not None else None
