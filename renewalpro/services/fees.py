"""State fee reference table and the entity fee rules built on it.

Everything here is pure and synchronous.  Functions accept any object that
exposes the attributes they read (ORM rows or API schemas alike), and none
of them raise on missing reference data: an unknown (state, type) pair costs
0 so aggregate sums never fail.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Protocol

from renewalpro.core.config import settings
from renewalpro.domain.mixins import utc_today

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

DIRECTOR_STATE = "DE"
DIRECTOR_TYPES = frozenset({"c_corp", "s_corp"})


@dataclass(frozen=True)
class StateRequirement:
    name: str
    fees: dict[str, float]


STATE_REQUIREMENTS: dict[str, StateRequirement] = {
    "CA": StateRequirement("California", {
        "sole_proprietorship": 0, "partnership": 0, "llc": 20, "c_corp": 25, "s_corp": 25,
    }),
    "TX": StateRequirement("Texas", {
        "sole_proprietorship": 0, "partnership": 0, "llc": 0, "c_corp": 0, "s_corp": 0,
    }),
    "FL": StateRequirement("Florida", {
        "sole_proprietorship": 0, "partnership": 0, "llc": 138.75, "c_corp": 150, "s_corp": 150,
    }),
    "NY": StateRequirement("New York", {
        "sole_proprietorship": 0, "partnership": 0, "llc": 9, "c_corp": 9, "s_corp": 9,
    }),
    "DE": StateRequirement("Delaware", {
        "sole_proprietorship": 0, "partnership": 0, "llc": 300, "c_corp": 175, "s_corp": 175,
    }),
}


class FeeSubject(Protocol):
    id: str
    name: str
    type: str
    state: str
    formation_date: date
    registered_agent_fee: float
    registered_agent_fee_due_date: Optional[date]
    independent_director_fee: float
    independent_director_fee_due_date: Optional[date]


def _norm_state(state: Optional[str]) -> str:
    return (state or "").strip().upper()


def lookup_fee(state: Optional[str], entity_type: Optional[str]) -> float:
    """Statutory annual fee for ``(state, type)``; 0 when the pair is unknown."""
    req = STATE_REQUIREMENTS.get(_norm_state(state))
    if req is None:
        return 0
    return req.fees.get(entity_type or "", 0)


def state_name(state: Optional[str]) -> Optional[str]:
    req = STATE_REQUIREMENTS.get(_norm_state(state))
    return req.name if req else None


def is_director_required(state: Optional[str], entity_type: Optional[str]) -> bool:
    """True iff the entity is a Delaware C- or S-corp.

    Advisory: it marks the director fields as required in forms, nothing
    rejects an entity without one.
    """
    return _norm_state(state) == DIRECTOR_STATE and entity_type in DIRECTOR_TYPES


# ---------------------------------------------------------------------------
# Fee schedule projection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FeePlacement:
    """Which calendar month (1-12) each kind of fee is shown in.

    With ``use_due_dates`` a line item is placed in the month of its concrete
    due date when the entity has one (formation month for the renewal), and
    falls back to the fixed month otherwise.
    """

    renewal_month: int = 3
    agent_month: int = 1
    director_month: int = 1
    use_due_dates: bool = False

    def __post_init__(self) -> None:
        for month in (self.renewal_month, self.agent_month, self.director_month):
            if not 1 <= month <= 12:
                raise ValueError(f"month must be within 1-12, got {month}")

    @classmethod
    def from_settings(cls, **overrides) -> "FeePlacement":
        values = {
            "renewal_month": settings.schedule_renewal_month,
            "agent_month": settings.schedule_agent_month,
            "director_month": settings.schedule_director_month,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class FeeLineItem:
    entity_id: str
    entity_name: str
    state: str
    # renewal | registered_agent | independent_director
    kind: str
    months: list[float] = field(default_factory=lambda: [0.0] * 12)

    @property
    def total(self) -> float:
        return sum(self.months)


@dataclass
class FeeSchedule:
    year: int
    line_items: list[FeeLineItem]
    month_totals: list[float]

    @property
    def grand_total(self) -> float:
        return sum(self.month_totals)


def _month_index(fixed: int, due: Optional[date], use_due_dates: bool) -> int:
    if use_due_dates and due is not None:
        return due.month - 1
    return fixed - 1


def _line(entity: FeeSubject, kind: str, amount: float, month_idx: int) -> FeeLineItem:
    item = FeeLineItem(entity_id=entity.id, entity_name=entity.name, state=entity.state, kind=kind)
    item.months[month_idx] = float(amount)
    return item


def project_fee_schedule(
    entities: Iterable[FeeSubject],
    placement: FeePlacement | None = None,
    year: int | None = None,
) -> FeeSchedule:
    """Lay every entity's annual fees out over a 12-month table.

    Each entity contributes a renewal row (always), a registered-agent row when
    the agent fee is positive, and an independent-director row when the entity
    is in Delaware and the director fee is positive.
    """
    placement = placement or FeePlacement.from_settings()
    items: list[FeeLineItem] = []
    for entity in entities:
        items.append(_line(
            entity, "renewal", lookup_fee(entity.state, entity.type),
            _month_index(placement.renewal_month, entity.formation_date, placement.use_due_dates),
        ))
        agent_fee = entity.registered_agent_fee or 0
        if agent_fee > 0:
            items.append(_line(
                entity, "registered_agent", agent_fee,
                _month_index(
                    placement.agent_month,
                    entity.registered_agent_fee_due_date,
                    placement.use_due_dates,
                ),
            ))
        director_fee = entity.independent_director_fee or 0
        if _norm_state(entity.state) == DIRECTOR_STATE and director_fee > 0:
            items.append(_line(
                entity, "independent_director", director_fee,
                _month_index(
                    placement.director_month,
                    entity.independent_director_fee_due_date,
                    placement.use_due_dates,
                ),
            ))

    month_totals = [0.0] * 12
    for item in items:
        for idx, amount in enumerate(item.months):
            month_totals[idx] += amount

    return FeeSchedule(
        year=year or utc_today().year,
        line_items=items,
        month_totals=month_totals,
    )


# ---------------------------------------------------------------------------
# Owner dashboard metrics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FeeMetrics:
    total_entities: int
    delaware_entities: int
    annual_entity_fees: float
    annual_service_fees: float
    pending_payments: float

    @property
    def avg_entity_fee(self) -> int:
        if not self.total_entities:
            return 0
        return round(self.annual_entity_fees / self.total_entities)


def dashboard_fee_metrics(entities: Iterable[FeeSubject], payments: Iterable) -> FeeMetrics:
    entities = list(entities)
    return FeeMetrics(
        total_entities=len(entities),
        delaware_entities=sum(1 for e in entities if _norm_state(e.state) == DIRECTOR_STATE),
        annual_entity_fees=sum(lookup_fee(e.state, e.type) for e in entities),
        annual_service_fees=sum(
            (e.registered_agent_fee or 0) + (e.independent_director_fee or 0) for e in entities
        ),
        pending_payments=sum(
            p.amount for p in payments if p.status in ("pending", "scheduled")
        ),
    )
