"""Derived metrics over already-fetched rows.

Pure and synchronous: every function works on whatever collection it is
handed, and empty input resolves to neutral values (0, empty dict, ``None``)
instead of raising.  Rows may be ORM objects, API schemas or plain dicts.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional, Sequence, TypeVar

from renewalpro.domain.mixins import as_utc

T = TypeVar("T")

# Panel sizes on the admin dashboard
TOP_DISTRIBUTION = 4
TOP_COVERAGE = 12

INVITATION_STATUSES = ("pending", "accepted", "declined", "expired", "unsent")
ASSIGNMENT_STATUSES = ("accepted", "terminated")


def _get(row: Any, name: str, default: Any = None) -> Any:
    if isinstance(row, dict):
        return row.get(name, default)
    return getattr(row, name, default)


def first_row(rows: Optional[Sequence[T]]) -> Optional[T]:
    """Element 0 of an RPC-style result, or ``None`` for an empty/missing result."""
    return rows[0] if rows else None


# ---------------------------------------------------------------------------
# Search / ordering
# ---------------------------------------------------------------------------

def search(rows: Iterable[T], query: Optional[str], fields: Sequence[str]) -> list[T]:
    """Case-insensitive substring match of ``query`` across ``fields``."""
    rows = list(rows)
    needle = (query or "").strip().lower()
    if not needle:
        return rows
    matched = []
    for row in rows:
        for name in fields:
            value = _get(row, name)
            if value is not None and needle in str(value).lower():
                matched.append(row)
                break
    return matched


def distribution(rows: Iterable[Any], key: str, default: str | None = None) -> dict[str, int]:
    """Count rows by attribute, in first-seen order."""
    counts: dict[str, int] = {}
    for row in rows:
        value = _get(row, key) or default
        if value is None:
            continue
        counts[value] = counts.get(value, 0) + 1
    return counts


def top_n(counts: dict[str, int], n: int) -> list[tuple[str, int]]:
    """Highest counts first, at most ``n`` entries; ties keep their original order."""
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:n]


# ---------------------------------------------------------------------------
# Agent analytics
# ---------------------------------------------------------------------------

@dataclass
class AgentAnalytics:
    total_agents: int = 0
    available_agents: int = 0
    unavailable_agents: int = 0
    avg_price: float = 0.0
    avg_experience: float = 0.0
    state_coverage: dict[str, int] = field(default_factory=dict)
    invitations: dict[str, int] = field(default_factory=dict)
    assignments: dict[str, int] = field(default_factory=dict)
    # accepted / total invitations; None when no invitation was ever sent
    acceptance_rate: Optional[float] = None


def _status_counts(rows: Sequence[Any], known: Sequence[str]) -> dict[str, int]:
    counts = {"total": len(rows), **{status: 0 for status in known}}
    for row in rows:
        status = _get(row, "status")
        counts[status] = counts.get(status, 0) + 1
    return counts


def agent_analytics(
    agents: Sequence[Any],
    invitations: Sequence[Any] = (),
    assignments: Sequence[Any] = (),
) -> AgentAnalytics:
    total = len(agents)
    available = sum(1 for a in agents if _get(a, "is_available"))

    avg_price = (
        sum(float(_get(a, "price_per_entity") or 0) for a in agents) / total if total else 0.0
    )
    experienced = [_get(a, "years_experience") for a in agents]
    experienced = [years for years in experienced if years is not None]
    avg_experience = sum(experienced) / len(experienced) if experienced else 0.0

    coverage: Counter[str] = Counter()
    for agent in agents:
        for state in _get(agent, "states") or []:
            coverage[state] += 1

    invitation_counts = _status_counts(invitations, INVITATION_STATUSES)
    acceptance_rate = None
    if invitation_counts["total"] > 0:
        acceptance_rate = round(invitation_counts["accepted"] / invitation_counts["total"], 4)

    return AgentAnalytics(
        total_agents=total,
        available_agents=available,
        unavailable_agents=total - available,
        avg_price=round(avg_price, 2),
        avg_experience=round(avg_experience, 1),
        state_coverage=dict(coverage),
        invitations=invitation_counts,
        assignments=_status_counts(assignments, ASSIGNMENT_STATUSES),
        acceptance_rate=acceptance_rate,
    )


# ---------------------------------------------------------------------------
# Financial
# ---------------------------------------------------------------------------

def to_major_units(minor: int | float | None) -> Decimal:
    return (Decimal(int(minor or 0)) / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def total_revenue(invoices: Iterable[Any]) -> Decimal:
    """Sum of ``amount_paid`` (minor units) over invoices, in major units."""
    return to_major_units(sum(int(_get(inv, "amount_paid") or 0) for inv in invoices))


# ---------------------------------------------------------------------------
# Compliance report
# ---------------------------------------------------------------------------

DATE_RANGES = {"30d": timedelta(days=30), "90d": timedelta(days=90), "1y": timedelta(days=365)}
REPORT_TYPES = ("summary", "detailed", "audit")

_RULE = "=" * 80


@dataclass
class ComplianceReport:
    generated_at: datetime
    report_type: str
    date_range: str
    total_entities: int
    total_users: int
    total_agents: int
    available_agents: int
    avg_agent_price: float
    entities_by_state: dict[str, int]
    entities_by_type: dict[str, int]
    entities_by_status: dict[str, int]
    users_by_type: dict[str, int]

    @property
    def period_label(self) -> str:
        return "All Time" if self.date_range == "all" else f"Last {self.date_range}"

    def _section(self, title: str, body: Iterable[str]) -> str:
        return "\n".join([_RULE, title, _RULE, *body, ""])

    def _summary(self) -> str:
        ranked = top_n(self.entities_by_state, len(self.entities_by_state))
        by_state = [f"{state}: {count}" for state, count in ranked]
        parts = [
            self._section("OVERVIEW", [
                f"Total Entities: {self.total_entities}",
                f"Total Users: {self.total_users}",
                f"Total Agents: {self.total_agents}",
                f"Available Agents: {self.available_agents}",
            ]),
            self._section("ENTITIES BY STATE", by_state),
            self._section("ENTITIES BY TYPE", [f"{k}: {v}" for k, v in self.entities_by_type.items()]),
            self._section("ENTITIES BY STATUS", [f"{k}: {v}" for k, v in self.entities_by_status.items()]),
            self._section("USERS BY TYPE", [f"{k}: {v}" for k, v in self.users_by_type.items()]),
            self._section("AGENT STATISTICS", [
                f"Total Agents: {self.total_agents}",
                f"Available: {self.available_agents}",
                f"Average Price per Entity: ${self.avg_agent_price:.2f}",
            ]),
        ]
        return "\n".join(parts)

    def render(self) -> str:
        header = [
            f"COMPLIANCE {self.report_type.upper()} REPORT",
            f"Generated: {self.generated_at:%Y-%m-%d %H:%M UTC}",
            f"Period: {self.period_label}",
            "",
        ]
        body = self._summary()
        if self.report_type in ("detailed", "audit"):
            body += "\n" + self._section("KEY FINDINGS", [
                f"- {self.total_entities} entities registered",
                f"- {self.total_users} active user accounts",
                f"- {self.available_agents} of {self.total_agents} agents available for assignments",
            ])
        if self.report_type == "audit":
            reviewed = self.total_entities + self.total_users + self.total_agents
            body += "\n" + self._section("AUDIT CERTIFICATION", [
                f"Total Records Reviewed: {reviewed}",
            ])
        return "\n".join(header) + body + "\n--- End of Report ---\n"


def _within(row: Any, cutoff: Optional[datetime]) -> bool:
    if cutoff is None:
        return True
    created = as_utc(_get(row, "created_at"))
    return created is not None and created >= cutoff


def compliance_report(
    entities: Sequence[Any],
    users: Sequence[Any],
    agents: Sequence[Any],
    *,
    report_type: str = "summary",
    date_range: str = "30d",
    now: Optional[datetime] = None,
) -> ComplianceReport:
    now = now or datetime.now(timezone.utc)
    span = DATE_RANGES.get(date_range)
    cutoff = now - span if span else None

    entities = [e for e in entities if _within(e, cutoff)]
    users = [u for u in users if _within(u, cutoff)]
    stats = agent_analytics(agents)

    return ComplianceReport(
        generated_at=now,
        report_type=report_type,
        date_range=date_range if span else "all",
        total_entities=len(entities),
        total_users=len(users),
        total_agents=stats.total_agents,
        available_agents=stats.available_agents,
        avg_agent_price=stats.avg_price,
        entities_by_state=distribution(entities, "state"),
        entities_by_type=distribution(entities, "type"),
        entities_by_status=distribution(entities, "status", default="active"),
        users_by_type=distribution(users, "user_type", default="owner"),
    )
