"""
RenewalPro API - Compliance Status Tests
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from renewalpro.services.compliance_status import (
    CheckDisplayStatus,
    classify_check,
    summarize_checks,
)

DUE = date(2026, 3, 1)


@dataclass
class Check:
    status: str
    due_date: Optional[date] = None


class TestClassifyCheck:
    def test_pending_past_due_is_overdue(self):
        assert classify_check("pending", DUE, now=date(2026, 3, 2)) is CheckDisplayStatus.OVERDUE

    def test_due_today_is_still_pending(self):
        assert classify_check("pending", DUE, now=DUE) is CheckDisplayStatus.PENDING

    def test_undated_check_is_never_late(self):
        assert classify_check("pending", None, now=date(2099, 1, 1)) is CheckDisplayStatus.PENDING

    @pytest.mark.parametrize(
        "status,expected",
        [
            ("completed", CheckDisplayStatus.COMPLETED),
            ("failed", CheckDisplayStatus.FAILED),
            ("overdue", CheckDisplayStatus.OVERDUE),
        ],
    )
    def test_stored_status_wins_over_due_date(self, status, expected):
        assert classify_check(status, DUE, now=date(2026, 1, 1)) is expected

    def test_aware_clock_is_read_in_utc(self):
        # 08:00 on March 2 in UTC+14 is still March 1 in UTC
        kiribati = timezone(timedelta(hours=14))
        now = datetime(2026, 3, 2, 8, 0, tzinfo=kiribati)
        assert classify_check("pending", DUE, now=now) is CheckDisplayStatus.PENDING


class TestSummarizeChecks:
    def test_counts_and_rate(self):
        today = date(2026, 3, 1)
        checks = [
            Check("completed", date(2026, 1, 1)),
            Check("completed", None),
            Check("pending", date(2026, 2, 1)),
            Check("pending", date(2026, 3, 20)),
            Check("pending", date(2026, 6, 1)),
            Check("failed", date(2026, 2, 15)),
            Check("pending", None),
        ]

        summary = summarize_checks(checks, now=today)

        assert summary.total == 7
        assert summary.completed == 2
        assert summary.overdue == 1
        assert summary.failed == 1
        assert summary.upcoming == 1
        assert summary.compliance_rate == 29

    def test_upcoming_window_includes_its_last_day(self):
        today = date(2026, 3, 1)
        checks = [Check("pending", today + timedelta(days=30)), Check("pending", today + timedelta(days=31))]
        assert summarize_checks(checks, now=today).upcoming == 1

    def test_empty_tracker(self):
        summary = summarize_checks([], now=DUE)
        assert (summary.total, summary.compliance_rate) == (0, 0)
