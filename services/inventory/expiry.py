"""Expiry date arithmetic and expiry warnings for stock lots."""

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from shared.logging_setup import get_logger

logger = get_logger(__name__)


class StockLotExpirySource(BaseModel):
    """A stock lot joined with the selling and purchase price of its item."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    lot_id: str
    item_id: str
    lot_number: Optional[str] = None
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    category_id: Optional[str] = None
    location_id: Optional[str] = None
    quantity: float = 0.0
    expiry_date: Optional[date] = None
    selling_price: float = Field(0.0, ge=0)
    purchase_price: float = Field(0.0, ge=0)


class ExpiringLot(BaseModel):
    """A stock lot annotated with its days until expiry."""

    lot: StockLotExpirySource
    days_to_expiry: int


class ExpiryWarningReport(BaseModel):
    """Expiring lots grouped by urgency."""

    expired: List[ExpiringLot] = Field(default_factory=list)
    critical: List[ExpiringLot] = Field(default_factory=list)
    warning: List[ExpiringLot] = Field(default_factory=list)
    notice: List[ExpiringLot] = Field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {
            "expired": len(self.expired),
            "critical": len(self.critical),
            "warning": len(self.warning),
            "notice": len(self.notice),
        }


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def days_until_expiry(expiry_date: Union[date, datetime], today: Union[date, datetime]) -> int:
    """
    Whole days from today until expiry.

    Args:
        expiry_date: Expiry date of the lot
        today: Reference date

    Returns:
        Signed number of days; 0 means the lot expires today, negative means already expired
    """
    return (_as_date(expiry_date) - _as_date(today)).days


def group_expiry_warnings(
    lots: Iterable[StockLotExpirySource],
    today: Optional[date] = None,
    critical_days: int = 30,
    warning_days: int = 60,
    notice_days: int = 90
) -> ExpiryWarningReport:
    """
    Group stock lots by how soon they expire.

    Lots without an expiry date or without stock are ignored, and lots
    expiring after notice_days are left out of the report.

    Args:
        lots: Stock lots to classify
        today: Reference date (defaults to today)
        critical_days: Upper bound (inclusive) of the critical band
        warning_days: Upper bound (inclusive) of the warning band
        notice_days: Upper bound (inclusive) of the notice band

    Returns:
        ExpiryWarningReport with each group ordered by expiry date
    """
    today = _as_date(today or date.today())

    candidates = sorted(
        (lot for lot in lots if lot.expiry_date is not None and lot.quantity > 0),
        key=lambda lot: lot.expiry_date,
    )

    report = ExpiryWarningReport()
    for lot in candidates:
        days = days_until_expiry(lot.expiry_date, today)
        entry = ExpiringLot(lot=lot, days_to_expiry=days)
        if days < 0:
            report.expired.append(entry)
        elif days <= critical_days:
            report.critical.append(entry)
        elif days <= warning_days:
            report.warning.append(entry)
        elif days <= notice_days:
            report.notice.append(entry)

    logger.info("Expiry warnings grouped", today=today.isoformat(), **report.counts())
    return report
