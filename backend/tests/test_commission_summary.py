from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest

from app.models.commission import Commission
from app.services.commission_summary import build_summary, summarize


def test_build_summary_total_excludes_on_hold_and_cancelled():
    summary = build_summary(
        {
            "pending": Decimal("10.00"),
            "closed": Decimal("20.00"),
            "paid": Decimal("30.00"),
            "on_hold": Decimal("40.00"),
            "cancelled": Decimal("0.00"),
        }
    )

    assert summary.pending == Decimal("10.00")
    assert summary.closed == Decimal("20.00")
    assert summary.paid == Decimal("30.00")
    assert summary.on_hold == Decimal("40.00")
    assert summary.cancelled == Decimal("0.00")
    assert summary.total == Decimal("60.00")


def test_build_summary_empty():
    summary = build_summary({})

    assert summary.total == Decimal("0.00")
    assert summary.pending == Decimal("0.00")


def test_build_summary_rounds_float_sums():
    # SQLite returns SUM(numeric) as float
    summary = build_summary({"pending": Decimal(str(0.1 + 0.2))})

    assert summary.pending == Decimal("0.30")
    assert summary.total == Decimal("0.30")


def test_build_summary_rejects_unknown_status():
    with pytest.raises(ValueError):
        build_summary({"refunded": Decimal("1.00")})


def _commission(seller_id: str, period: str, status: str, amount: str, line_index: int = 0) -> Commission:
    return Commission(
        sale_id=f"sale-{uuid.uuid4().hex[:8]}",
        line_index=line_index,
        seller_id=seller_id,
        product_id=uuid.uuid4(),
        product_name="Product",
        unit_price=Decimal("100"),
        quantity=1,
        discount_value=Decimal("0"),
        discount_type="percent",
        net_total=Decimal("100"),
        commission_type="percentage",
        commission_rate=Decimal("5"),
        commission_amount=Decimal(amount),
        status=status,
        period_reference=period,
        payment_date=date(2026, 4, 5) if status == "paid" else None,
    )


@pytest.mark.asyncio
async def test_summarize_filters_by_seller_and_period(db):
    db.add_all(
        [
            _commission("ana", "2026-03", "pending", "5.00"),
            _commission("ana", "2026-03", "pending", "2.50"),
            _commission("ana", "2026-03", "closed", "10.00"),
            _commission("ana", "2026-03", "paid", "7.25"),
            _commission("ana", "2026-03", "on_hold", "3.00"),
            _commission("ana", "2026-03", "cancelled", "0.00"),
            _commission("ana", "2026-04", "pending", "100.00"),
            _commission("bruno", "2026-03", "pending", "50.00"),
        ]
    )
    await db.flush()

    summary = await summarize(db, seller_id="ana", period_reference="2026-03")

    assert summary.pending == Decimal("7.50")
    assert summary.closed == Decimal("10.00")
    assert summary.paid == Decimal("7.25")
    assert summary.on_hold == Decimal("3.00")
    assert summary.cancelled == Decimal("0.00")
    assert summary.total == Decimal("24.75")

    everything = await summarize(db)
    assert everything.pending == Decimal("157.50")
    assert everything.total == Decimal("174.75")
