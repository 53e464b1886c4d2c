# app/core/commission_rates.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from app.core.commission_types import CommissionType, DiscountType
from app.schemas.commission import CommissionConfig, SaleLineInput

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Skipped:
    """Product has no commission configured (or it is disabled). Persist nothing."""

    amount: Decimal = ZERO
    rate: Decimal = ZERO
    commission_type: CommissionType = CommissionType.FIXED


@dataclass(frozen=True)
class Disqualified:
    """Discount above the product's limit: a valid zero-amount commission."""

    rate: Decimal
    commission_type: CommissionType
    amount: Decimal = ZERO


@dataclass(frozen=True)
class Eligible:
    amount: Decimal
    rate: Decimal
    commission_type: CommissionType


RateOutcome = Union[Skipped, Disqualified, Eligible]


def round_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def period_reference_for(sale_date: date | datetime | None = None) -> str:
    """Year-month bucket of the sale (defaults to now)."""
    d = sale_date or datetime.now(timezone.utc)
    return f"{d.year:04d}-{d.month:02d}"


def normalize_discount(line: SaleLineInput) -> tuple[Decimal, Decimal]:
    """
    Express the applied discount both ways: (percent of gross, absolute amount).
    """
    gross = line.unit_price * line.quantity
    if line.discount_type == DiscountType.PERCENT:
        pct = line.discount_value
        return pct, pct / HUNDRED * gross

    absolute = line.discount_value
    pct = absolute / gross * HUNDRED if gross > 0 else Decimal("0")
    return pct, absolute


def exceeds_discount_limit(config: CommissionConfig, line: SaleLineInput) -> bool:
    # a limit of 0 means "no limit"
    if config.discount_limit_value <= 0:
        return False

    pct, absolute = normalize_discount(line)
    if config.discount_limit_type == CommissionType.PERCENTAGE:
        return pct > config.discount_limit_value
    return absolute > config.discount_limit_value


def resolve(config: Optional[CommissionConfig], line: SaleLineInput) -> RateOutcome:
    """
    Central commission policy for one sold line.

    - disabled / missing config -> Skipped
    - discount above the configured limit -> Disqualified (keeps rate/type)
    - fixed: value per unit sold
    - percentage: value% of the caller-supplied net total (post-discount)

    Negative net totals are not clamped; the resulting negative amount is
    visible downstream as a voided commission.
    """
    if config is None or not config.enabled:
        return Skipped()

    if exceeds_discount_limit(config, line):
        return Disqualified(rate=config.value, commission_type=config.type)

    if config.type == CommissionType.FIXED:
        amount = config.value * line.quantity
    else:
        amount = config.value / HUNDRED * line.net_total

    return Eligible(amount=round_money(amount), rate=config.value, commission_type=config.type)
