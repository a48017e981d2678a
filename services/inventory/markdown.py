"""Markdown suggestions for near-expiry stock lots."""

from datetime import date
from typing import Dict, Iterable, List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict

from services.inventory.expiry import StockLotExpirySource, days_until_expiry
from shared.config import DEFAULT_MARKDOWN_TIERS, get_config
from shared.exceptions import MarkdownPolicyError
from shared.logging_setup import get_logger

logger = get_logger(__name__)


class MarkdownSuggestion(BaseModel):
    """Suggested discount for one stock lot."""

    model_config = ConfigDict(frozen=True)

    lot: StockLotExpirySource
    days_to_expiry: int
    suggested_discount_percent: float
    current_price: float
    suggested_price: float
    is_expired: bool
    below_cost: bool = False


class MarkdownPolicy:
    """Markdown policy mapping days to expiry onto fixed discount tiers."""

    def __init__(self, tiers: Optional[List[Dict[str, float]]] = None):
        """
        Initialize markdown policy.

        Args:
            tiers: Optional list of {'max_days_to_expiry', 'discount_percent'} dicts.
                If None, loads from AppConfig.

        Raises:
            MarkdownPolicyError: If the tier table is invalid
        """
        if tiers is None:
            app_config = get_config()
            tiers = [
                {
                    'max_days_to_expiry': tier.max_days_to_expiry,
                    'discount_percent': tier.discount_percent
                }
                for tier in app_config.pricing.markdown.tiers
            ]

        self.tiers = self._validate_tiers(tiers)

    @staticmethod
    def _validate_tiers(tiers: List[Dict[str, float]]) -> List[Dict[str, float]]:
        bounds = set()
        for tier in tiers:
            try:
                bound = tier['max_days_to_expiry']
                discount = tier['discount_percent']
            except KeyError as e:
                raise MarkdownPolicyError(f"Markdown tier missing key: {e}") from e
            if not 0 <= discount <= 100:
                raise MarkdownPolicyError(
                    f"Markdown tier discount must be within 0-100, got {discount}"
                )
            if bound < 1:
                raise MarkdownPolicyError(
                    f"Markdown tier bound must be at least 1 day, got {bound}"
                )
            if bound in bounds:
                raise MarkdownPolicyError(f"Duplicate markdown tier bound: {bound}")
            bounds.add(bound)

        # Ascending bounds so the tightest matching tier is found first
        return sorted(tiers, key=lambda x: x['max_days_to_expiry'])

    def get_discount_for_expiry(self, days_to_expiry: int) -> float:
        """
        Get the suggested discount percentage for a number of days to expiry.

        Args:
            days_to_expiry: Days until the lot expires

        Returns:
            Discount percentage (0-100); 0 for expired lots and lots beyond every tier
        """
        if days_to_expiry <= 0:
            return 0.0

        for tier in self.tiers:
            if days_to_expiry <= tier['max_days_to_expiry']:
                return float(tier['discount_percent'])

        return 0.0

    def suggest_for_lot(self, lot: StockLotExpirySource, today: date) -> Optional[MarkdownSuggestion]:
        """Build a suggestion for one lot, or None if the lot has no expiry date."""
        if lot.expiry_date is None:
            return None

        days = days_until_expiry(lot.expiry_date, today)
        discount = self.get_discount_for_expiry(days)
        suggested_price = lot.selling_price * (1 - discount / 100)

        return MarkdownSuggestion(
            lot=lot,
            days_to_expiry=days,
            suggested_discount_percent=discount,
            current_price=lot.selling_price,
            suggested_price=suggested_price,
            is_expired=days <= 0,
            below_cost=lot.purchase_price > 0 and suggested_price < lot.purchase_price,
        )

    def suggest(
        self,
        lots: Iterable[StockLotExpirySource],
        today: Optional[date] = None,
        location_id: Optional[str] = None
    ) -> List[MarkdownSuggestion]:
        """
        Suggest markdowns for a batch of stock lots.

        Lots without stock, without an expiry date, outside location_id (when
        given), already expired, or too far from expiry to earn a discount are
        left out.

        Args:
            lots: Stock lots with item prices
            today: Reference date (defaults to today)
            location_id: Restrict the batch to one location (optional)

        Returns:
            Actionable suggestions ordered by expiry date
        """
        today = today or date.today()

        eligible = [
            lot for lot in lots
            if lot.quantity > 0
            and lot.expiry_date is not None
            and (location_id is None or lot.location_id == location_id)
        ]
        eligible.sort(key=lambda lot: lot.expiry_date)

        suggestions = []
        for lot in eligible:
            suggestion = self.suggest_for_lot(lot, today)
            if suggestion.is_expired or suggestion.suggested_discount_percent <= 0:
                continue
            suggestions.append(suggestion)

        logger.info(
            "Markdown suggestions computed",
            lots=len(eligible),
            suggestions=len(suggestions),
            below_cost=sum(1 for s in suggestions if s.below_cost),
        )
        return suggestions

    def calculate_markdown_recommendations(
        self,
        df: pd.DataFrame,
        today: Optional[date] = None,
        expiry_date_col: str = 'expiry_date',
        price_col: str = 'selling_price'
    ) -> pd.DataFrame:
        """
        Annotate a DataFrame of stock lots with markdown suggestions.

        Rows are kept as-is (nothing is filtered out); rows without an expiry
        date get a NaN days_to_expiry and no discount.

        Args:
            df: DataFrame with stock lot information
            today: Reference date (defaults to today)
            expiry_date_col: Column name for expiry dates
            price_col: Column name for current selling prices

        Returns:
            DataFrame with added 'days_to_expiry', 'suggested_discount_percent',
            'suggested_price' and 'markdown_recommended' columns
        """
        today = pd.Timestamp(today or date.today()).normalize()
        df = df.copy()

        expiry = pd.to_datetime(df[expiry_date_col]).dt.normalize()
        df['days_to_expiry'] = (expiry - today).dt.days

        df['suggested_discount_percent'] = [
            0.0 if pd.isna(days) else self.get_discount_for_expiry(int(days))
            for days in df['days_to_expiry']
        ]
        df['suggested_price'] = df[price_col] * (1 - df['suggested_discount_percent'] / 100)
        df['markdown_recommended'] = df['suggested_discount_percent'] > 0

        return df


_default_policy = MarkdownPolicy(DEFAULT_MARKDOWN_TIERS)


def suggest_markdowns(
    lots: Iterable[StockLotExpirySource],
    today: Optional[date] = None,
    location_id: Optional[str] = None
) -> List[MarkdownSuggestion]:
    """Suggest markdowns using the fixed default tier table."""
    return _default_policy.suggest(lots, today=today, location_id=location_id)
