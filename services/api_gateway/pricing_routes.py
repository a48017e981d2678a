"""
Pricing preview routes - evaluate price rules and suggest expiry markdowns.

The endpoints are stateless: callers send the rule catalog or stock lots
they already hold and receive the computed result.
"""

from datetime import date
from typing import List

from fastapi import APIRouter, Request

from services.api_gateway.limiter import limiter
from services.api_gateway.schemas import (
    AppliedRule,
    EvaluatePriceRequest,
    EvaluatePriceResponse,
    ExpiryWarningItem,
    ExpiryWarningRequest,
    ExpiryWarningResponse,
    MarkdownRequest,
    MarkdownResponse,
    MarkdownSuggestionItem,
)
from services.inventory.expiry import ExpiringLot, group_expiry_warnings
from services.inventory.markdown import MarkdownPolicy
from services.pricing.engine import evaluate_price
from services.pricing.loader import load_price_rules_with_rejects
from shared.config import get_config
from shared.logging_setup import get_logger

logger = get_logger(__name__)
config = get_config()

router = APIRouter(prefix="/api/v1/pricing", tags=["pricing"])


@router.post("/evaluate", response_model=EvaluatePriceResponse)
@limiter.limit(config.api.evaluate_rate_limit)
async def evaluate(request: Request, evaluate_request: EvaluatePriceRequest):
    """
    Preview the price of one item under a rule catalog.

    Malformed rule records are skipped and reported in skipped_rule_ids.
    """
    rules, rejected = load_price_rules_with_rejects(evaluate_request.rules)
    context = evaluate_request.context

    result = evaluate_price(rules, context)

    logger.info(
        "Price preview",
        item_id=context.item_id,
        rules=len(rules),
        rejected=len(rejected),
        applied=result.applied_rule_codes,
        final_price=result.final_price,
    )

    return EvaluatePriceResponse(
        item_id=context.item_id,
        base_price=context.base_price,
        final_price=result.final_price,
        discount_percent=result.discount_percent,
        applied_rules=[
            AppliedRule(id=rule.id, code=rule.code, name=rule.name, priority=rule.priority)
            for rule in result.applied_rules
        ],
        skipped_rule_ids=[error.rule_id for error in rejected],
    )


@router.post("/markdowns", response_model=MarkdownResponse)
@limiter.limit(config.api.markdown_rate_limit)
async def markdown_suggestions(request: Request, markdown_request: MarkdownRequest):
    """Suggest expiry-driven markdowns for a batch of stock lots."""
    today = markdown_request.today or date.today()
    policy = MarkdownPolicy()

    suggestions = policy.suggest(
        markdown_request.lots,
        today=today,
        location_id=markdown_request.location_id,
    )

    return MarkdownResponse(
        today=today,
        suggestions=[
            MarkdownSuggestionItem(
                lot_id=s.lot.lot_id,
                item_id=s.lot.item_id,
                lot_number=s.lot.lot_number,
                item_code=s.lot.item_code,
                item_name=s.lot.item_name,
                location_id=s.lot.location_id,
                quantity=s.lot.quantity,
                expiry_date=s.lot.expiry_date,
                days_to_expiry=s.days_to_expiry,
                suggested_discount_percent=s.suggested_discount_percent,
                current_price=s.current_price,
                suggested_price=s.suggested_price,
                below_cost=s.below_cost,
            )
            for s in suggestions
        ],
    )


def _warning_items(entries: List[ExpiringLot]) -> List[ExpiryWarningItem]:
    return [
        ExpiryWarningItem(
            lot_id=entry.lot.lot_id,
            item_id=entry.lot.item_id,
            lot_number=entry.lot.lot_number,
            location_id=entry.lot.location_id,
            quantity=entry.lot.quantity,
            expiry_date=entry.lot.expiry_date,
            days_to_expiry=entry.days_to_expiry,
        )
        for entry in entries
    ]


@router.post("/expiry-warnings", response_model=ExpiryWarningResponse)
@limiter.limit(config.api.markdown_rate_limit)
async def expiry_warnings(request: Request, warning_request: ExpiryWarningRequest):
    """Group stock lots into expired / critical / warning / notice bands."""
    today = warning_request.today or date.today()
    bands = config.pricing.expiry_warnings

    report = group_expiry_warnings(
        warning_request.lots,
        today=today,
        critical_days=bands.critical_days,
        warning_days=bands.warning_days,
        notice_days=bands.notice_days,
    )

    return ExpiryWarningResponse(
        today=today,
        expired=_warning_items(report.expired),
        critical=_warning_items(report.critical),
        warning=_warning_items(report.warning),
        notice=_warning_items(report.notice),
    )
