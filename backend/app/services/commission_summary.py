"""Per-seller / per-period commission totals for dashboards."""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.commission_rates import ZERO, round_money
from app.core.commission_status import TOTAL_STATUSES, CommissionStatus
from app.crud.commission import CommissionRepository
from app.schemas.commission import CommissionSummaryOut


def build_summary(sums_by_status: Mapping[str, Decimal]) -> CommissionSummaryOut:
    """
    Bucket per-status sums into a summary.

    `total` is money owed or paid for final, valid sales: pending + closed +
    paid. on_hold (not certain yet) and cancelled (voided) stay out of it.
    """
    buckets = {status: ZERO for status in CommissionStatus}
    for status, amount in sums_by_status.items():
        key = CommissionStatus(status)
        buckets[key] = round_money(buckets[key] + Decimal(amount))

    total = round_money(sum((buckets[s] for s in TOTAL_STATUSES), ZERO))

    return CommissionSummaryOut(
        on_hold=buckets[CommissionStatus.ON_HOLD],
        pending=buckets[CommissionStatus.PENDING],
        closed=buckets[CommissionStatus.CLOSED],
        paid=buckets[CommissionStatus.PAID],
        cancelled=buckets[CommissionStatus.CANCELLED],
        total=total,
    )


async def summarize(
    db: AsyncSession,
    seller_id: Optional[str] = None,
    period_reference: Optional[str] = None,
) -> CommissionSummaryOut:
    sums = await CommissionRepository(db).sum_by_status(
        seller_id=seller_id,
        period_reference=period_reference,
    )
    return build_summary(sums)
