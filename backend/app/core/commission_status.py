# app/core/commission_status.py

from __future__ import annotations

import enum
from decimal import Decimal


class CommissionStatus(str, enum.Enum):
    ON_HOLD = "on_hold"      # sale itself not final yet
    PENDING = "pending"      # owed, period still open
    CLOSED = "closed"        # period closed, amount frozen
    PAID = "paid"
    CANCELLED = "cancelled"  # voided, kept for audit continuity


class CommissionEvent(str, enum.Enum):
    SALE_CANCELLED = "sale_cancelled"
    PERIOD_CLOSED = "period_closed"
    PAYMENT_MARKED = "payment_marked"


class InvalidCommissionTransition(ValueError):
    def __init__(self, status: CommissionStatus, event: CommissionEvent):
        self.status = status
        self.event = event
        super().__init__(f"Commission in status {status.value!r} cannot handle {event.value!r}")


# (from, event) -> to
TRANSITIONS: dict[tuple[CommissionStatus, CommissionEvent], CommissionStatus] = {
    (CommissionStatus.PENDING, CommissionEvent.SALE_CANCELLED): CommissionStatus.CANCELLED,
    (CommissionStatus.ON_HOLD, CommissionEvent.SALE_CANCELLED): CommissionStatus.CANCELLED,
    (CommissionStatus.PENDING, CommissionEvent.PERIOD_CLOSED): CommissionStatus.CLOSED,
    (CommissionStatus.CLOSED, CommissionEvent.PAYMENT_MARKED): CommissionStatus.PAID,
}

# Amount can no longer change.
FROZEN_STATUSES = frozenset({CommissionStatus.CLOSED, CommissionStatus.PAID})

# Statuses counted in the summary total.
TOTAL_STATUSES = frozenset({CommissionStatus.PENDING, CommissionStatus.CLOSED, CommissionStatus.PAID})


def transition(status: CommissionStatus | str, event: CommissionEvent) -> CommissionStatus:
    """Return the status reached from `status` on `event`, or raise InvalidCommissionTransition."""
    current = CommissionStatus(status)
    target = TRANSITIONS.get((current, event))
    if target is None:
        raise InvalidCommissionTransition(current, event)
    return target


def can_transition(status: CommissionStatus | str, event: CommissionEvent) -> bool:
    return (CommissionStatus(status), event) in TRANSITIONS


def sources_for(event: CommissionEvent) -> frozenset[CommissionStatus]:
    return frozenset(src for (src, ev) in TRANSITIONS if ev == event)


def initial_status(amount: Decimal, *, sale_is_final: bool) -> CommissionStatus:
    """
    Status of a freshly generated commission.
    A non-positive amount is voided immediately, whatever the sale state.
    """
    if amount <= 0:
        return CommissionStatus.CANCELLED
    if not sale_is_final:
        return CommissionStatus.ON_HOLD
    return CommissionStatus.PENDING
