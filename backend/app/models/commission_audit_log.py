# app/models/commission_audit_log.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommissionAuditLog(Base):
    """
    Append-only trail of every value/status change of a commission.

    commission_id is not a foreign key: recalculation deletes
    superseded commissions and their history must outlive them.
    """

    __tablename__ = "commission_audit_logs"
    __table_args__ = (
        Index("ix_commission_audit_logs_commission_created", "commission_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    commission_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)

    # created | recalculated | cancelled | closed | paid | status_change
    action_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    old_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    new_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    old_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    new_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    reason: Mapped[str] = mapped_column(Text, nullable=False)

    actor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    actor_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
