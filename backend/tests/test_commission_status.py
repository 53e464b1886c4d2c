from __future__ import annotations

from decimal import Decimal

import pytest

from app.core.commission_status import (
    CommissionEvent,
    CommissionStatus,
    InvalidCommissionTransition,
    can_transition,
    initial_status,
    sources_for,
    transition,
)


@pytest.mark.parametrize(
    "current,event,expected",
    [
        (CommissionStatus.PENDING, CommissionEvent.SALE_CANCELLED, CommissionStatus.CANCELLED),
        (CommissionStatus.ON_HOLD, CommissionEvent.SALE_CANCELLED, CommissionStatus.CANCELLED),
        (CommissionStatus.PENDING, CommissionEvent.PERIOD_CLOSED, CommissionStatus.CLOSED),
        (CommissionStatus.CLOSED, CommissionEvent.PAYMENT_MARKED, CommissionStatus.PAID),
    ],
)
def test_allowed_transitions(current, event, expected):
    assert transition(current, event) == expected


@pytest.mark.parametrize(
    "current,event",
    [
        (CommissionStatus.CANCELLED, CommissionEvent.PAYMENT_MARKED),
        (CommissionStatus.PENDING, CommissionEvent.PAYMENT_MARKED),
        (CommissionStatus.ON_HOLD, CommissionEvent.PERIOD_CLOSED),
        (CommissionStatus.CLOSED, CommissionEvent.SALE_CANCELLED),
        (CommissionStatus.PAID, CommissionEvent.SALE_CANCELLED),
        (CommissionStatus.PAID, CommissionEvent.PAYMENT_MARKED),
    ],
)
def test_illegal_transitions_raise(current, event):
    assert not can_transition(current, event)
    with pytest.raises(InvalidCommissionTransition):
        transition(current, event)


def test_transition_accepts_stored_string_status():
    assert transition("closed", CommissionEvent.PAYMENT_MARKED) == CommissionStatus.PAID


def test_sources_for_event():
    assert sources_for(CommissionEvent.PERIOD_CLOSED) == {CommissionStatus.PENDING}
    assert sources_for(CommissionEvent.SALE_CANCELLED) == {CommissionStatus.PENDING, CommissionStatus.ON_HOLD}


def test_initial_status():
    assert initial_status(Decimal("5.00"), sale_is_final=True) == CommissionStatus.PENDING
    assert initial_status(Decimal("5.00"), sale_is_final=False) == CommissionStatus.ON_HOLD
    assert initial_status(Decimal("0.00"), sale_is_final=True) == CommissionStatus.CANCELLED
    assert initial_status(Decimal("-1.00"), sale_is_final=False) == CommissionStatus.CANCELLED
