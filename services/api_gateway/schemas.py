"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field

from services.inventory.expiry import StockLotExpirySource
from services.pricing.models import PricingContext


# Pricing Schemas
class EvaluatePriceRequest(BaseModel):
    """Request schema for price evaluation preview."""
    rules: List[Any] = Field(default_factory=list, description="Stored price rule records")
    context: PricingContext


class AppliedRule(BaseModel):
    """Rule that fired during evaluation."""
    id: str
    code: str
    name: str
    priority: int


class EvaluatePriceResponse(BaseModel):
    """Response schema for price evaluation preview."""
    item_id: str
    base_price: float
    final_price: float
    discount_percent: float
    applied_rules: List[AppliedRule]
    skipped_rule_ids: List[Optional[str]] = Field(
        default_factory=list,
        description="Records rejected as malformed before evaluation"
    )


# Markdown Schemas
class MarkdownRequest(BaseModel):
    """Request schema for markdown suggestions."""
    lots: List[StockLotExpirySource]
    today: Optional[date] = None
    location_id: Optional[str] = None


class MarkdownSuggestionItem(BaseModel):
    """Single markdown suggestion."""
    lot_id: str
    item_id: str
    lot_number: Optional[str] = None
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    location_id: Optional[str] = None
    quantity: float
    expiry_date: date
    days_to_expiry: int
    suggested_discount_percent: float
    current_price: float
    suggested_price: float
    below_cost: bool


class MarkdownResponse(BaseModel):
    """Response schema for markdown suggestions."""
    today: date
    suggestions: List[MarkdownSuggestionItem]


class ExpiryWarningRequest(BaseModel):
    """Request schema for expiry warnings."""
    lots: List[StockLotExpirySource]
    today: Optional[date] = None


class ExpiryWarningItem(BaseModel):
    """Single expiring lot."""
    lot_id: str
    item_id: str
    lot_number: Optional[str] = None
    location_id: Optional[str] = None
    quantity: float
    expiry_date: date
    days_to_expiry: int


class ExpiryWarningResponse(BaseModel):
    """Response schema for expiry warnings."""
    today: date
    expired: List[ExpiryWarningItem]
    critical: List[ExpiryWarningItem]
    warning: List[ExpiryWarningItem]
    notice: List[ExpiryWarningItem]


# Health Schemas
class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
