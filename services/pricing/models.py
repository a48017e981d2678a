"""Data models for the dynamic pricing rule engine."""

from datetime import date, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, model_validator


ConditionType = Literal[
    "day_of_week",
    "is_weekend",
    "stock_quantity",
    "stock_percentage",
    "days_to_expiry",
    "time_range",
]

ConditionOperator = Literal["eq", "ne", "gt", "gte", "lt", "lte", "between", "in"]

ActionType = Literal["discount_percent", "discount_amount", "set_price", "markup_percent"]


class Condition(BaseModel):
    """A single predicate over a pricing context.

    Numeric conditions without an operator never match; calendar conditions
    ignore the operator.
    """

    model_config = ConfigDict(frozen=True)

    type: ConditionType
    operator: Optional[ConditionOperator] = None
    value: Union[StrictBool, float, List[float]]
    value2: Optional[float] = None


class Action(BaseModel):
    """The price transformation applied when a rule fires."""

    model_config = ConfigDict(frozen=True)

    type: ActionType
    value: float
    max_discount_percent: Optional[float] = Field(None, ge=0, le=100)
    min_margin_percent: Optional[float] = None

    @model_validator(mode="after")
    def validate_value_range(self) -> "Action":
        """Reject values that would drive a price below zero."""
        if self.type == "discount_percent" and not 0 <= self.value <= 100:
            raise ValueError("discount_percent value must be between 0 and 100")
        if self.type in ("discount_amount", "set_price") and self.value < 0:
            raise ValueError(f"{self.type} value must not be negative")
        if self.type == "markup_percent" and self.value < -100:
            raise ValueError("markup_percent value must not be below -100")
        return self


class PriceRule(BaseModel):
    """A named, prioritized, conditionally gated price transformation."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    id: str
    code: str
    name: str
    description: Optional[str] = None
    rule_type: str = "combined"
    conditions: List[Condition] = Field(default_factory=list)
    action: Action
    priority: int = 0
    active: bool = True
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    item_ids: Optional[List[str]] = None
    category_ids: Optional[List[str]] = None
    location_ids: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PricingContext(BaseModel):
    """Point-in-time facts about the item being priced."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    item_id: str
    category_id: Optional[str] = None
    location_id: Optional[str] = None
    base_price: float = Field(..., ge=0)
    purchase_price: float = Field(0.0, ge=0)
    stock_quantity: Optional[float] = None
    max_stock: Optional[float] = None
    days_to_expiry: Optional[float] = None
    current_date: Optional[datetime] = None


class EvaluationResult(BaseModel):
    """Outcome of evaluating a rule catalog against a context."""

    model_config = ConfigDict(frozen=True)

    final_price: float
    applied_rules: List[PriceRule] = Field(default_factory=list)
    discount_percent: float = 0.0

    @property
    def applied_rule_codes(self) -> List[str]:
        return [rule.code for rule in self.applied_rules]
