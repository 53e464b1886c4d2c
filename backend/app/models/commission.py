# app/models/commission.py
from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Commission(Base):
    """
    One commission per eligible sale line.

    Stores:
      - identity of the line (sale_id + line_index, seller, product)
      - a snapshot of the line as priced when the commission was computed
      - the computed amount and the configured rate/type it came from
      - lifecycle: on_hold | pending | closed | paid | cancelled

    NOTE:
      - commission_amount never changes once closed/paid.
      - period_reference is set from the sale date at creation and never recomputed.
    """

    __tablename__ = "commissions"
    __table_args__ = (
        Index("ix_commissions_sale_line", "sale_id", "line_index"),
        Index("ix_commissions_seller_period", "seller_id", "period_reference"),
        Index("ix_commissions_period_status", "period_reference", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # sale ids / seller ids belong to the sale workflow; stored as opaque strings
    sale_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    line_index: Mapped[int] = mapped_column(Integer, nullable=False)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)

    # line snapshot
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    discount_type: Mapped[str] = mapped_column(String(16), nullable=False)  # percent | absolute
    net_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    commission_type: Mapped[str] = mapped_column(String(16), nullable=False)  # fixed | percentage
    # configured value (percent or per-unit amount), not a computed percentage
    commission_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    period_reference: Mapped[str] = mapped_column(String(7), nullable=False, index=True)  # YYYY-MM

    payment_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
