"""Display status for payments.

"Overdue" depends on the wall clock, so the display status is derived every
time a payment is serialized and never written back to the store.
"""

from __future__ import annotations

import enum
from datetime import date, datetime, timezone
from typing import Optional, Union

from renewalpro.domain.mixins import utc_today


class PaymentDisplayStatus(str, enum.Enum):
    PAID = "Paid"
    SCHEDULED = "Scheduled"
    OVERDUE = "Overdue"
    PENDING = "Pending"


def utc_date(value: Union[date, datetime]) -> date:
    """Calendar date in UTC; aware datetimes are converted first."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def is_past_due(
    due_date: Union[date, datetime],
    now: Optional[Union[date, datetime]] = None,
) -> bool:
    """True once the UTC calendar day is after ``due_date``; due today is not late."""
    today = utc_date(now) if now is not None else utc_today()
    return utc_date(due_date) < today


def classify_payment(
    status: str,
    due_date: Union[date, datetime],
    now: Optional[Union[date, datetime]] = None,
) -> PaymentDisplayStatus:
    """Paid, then Scheduled, then Overdue (due date already passed), else Pending."""
    if status == "paid":
        return PaymentDisplayStatus.PAID
    if status == "scheduled":
        return PaymentDisplayStatus.SCHEDULED
    if is_past_due(due_date, now):
        return PaymentDisplayStatus.OVERDUE
    return PaymentDisplayStatus.PENDING
