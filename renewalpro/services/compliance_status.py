"""Display status and tracker metrics for compliance checks.

A pending check becomes "Overdue" under the same date rule as payments:
once the UTC calendar day is past its due date.  Checks without a due date
are never late.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Protocol, Union

from renewalpro.domain.mixins import utc_today
from renewalpro.services.payment_status import is_past_due, utc_date

UPCOMING_WINDOW_DAYS = 30


class CheckDisplayStatus(str, enum.Enum):
    COMPLETED = "Completed"
    FAILED = "Failed"
    OVERDUE = "Overdue"
    PENDING = "Pending"


class CheckLike(Protocol):
    status: str
    due_date: Optional[date]


def classify_check(
    status: str,
    due_date: Optional[date],
    now: Optional[Union[date, datetime]] = None,
) -> CheckDisplayStatus:
    if status == "completed":
        return CheckDisplayStatus.COMPLETED
    if status == "failed":
        return CheckDisplayStatus.FAILED
    if status == "overdue":
        return CheckDisplayStatus.OVERDUE
    if due_date is not None and is_past_due(due_date, now):
        return CheckDisplayStatus.OVERDUE
    return CheckDisplayStatus.PENDING


@dataclass
class ComplianceSummary:
    total: int
    completed: int
    overdue: int
    failed: int
    upcoming: int
    compliance_rate: int


def summarize_checks(
    checks: Iterable[CheckLike], now: Optional[Union[date, datetime]] = None
) -> ComplianceSummary:
    """Counts for the tracker header; ``upcoming`` is pending work due in the next 30 days."""
    today = utc_date(now) if now is not None else utc_today()
    horizon = today + timedelta(days=UPCOMING_WINDOW_DAYS)

    counts = {status: 0 for status in CheckDisplayStatus}
    upcoming = 0
    checks = list(checks)
    for check in checks:
        display = classify_check(check.status, check.due_date, today)
        counts[display] += 1
        if (
            display is CheckDisplayStatus.PENDING
            and check.due_date is not None
            and utc_date(check.due_date) <= horizon
        ):
            upcoming += 1

    total = len(checks)
    completed = counts[CheckDisplayStatus.COMPLETED]
    return ComplianceSummary(
        total=total,
        completed=completed,
        overdue=counts[CheckDisplayStatus.OVERDUE],
        failed=counts[CheckDisplayStatus.FAILED],
        upcoming=upcoming,
        compliance_rate=round(completed / total * 100) if total else 0,
    )
