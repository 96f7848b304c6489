"""
RenewalPro API - Fee Rule Tests

Unit tests for the state fee table, the director rule, the fee schedule
projection and the owner dashboard metrics.
"""

from datetime import date
from types import SimpleNamespace

import pytest

from renewalpro.services.fees import (
    FeePlacement,
    dashboard_fee_metrics,
    is_director_required,
    lookup_fee,
    project_fee_schedule,
    state_name,
)


def make_entity(**overrides):
    values = dict(
        id="e-1",
        name="Acme Holdings",
        type="llc",
        state="DE",
        formation_date=date(2020, 5, 1),
        registered_agent_fee=0,
        registered_agent_fee_due_date=None,
        independent_director_fee=0,
        independent_director_fee_due_date=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestLookupFee:
    """Reference fee table lookups."""

    @pytest.mark.parametrize(
        "state,entity_type,expected",
        [
            ("DE", "llc", 300),
            ("DE", "c_corp", 175),
            ("CA", "llc", 20),
            ("CA", "s_corp", 25),
            ("FL", "llc", 138.75),
            ("NY", "c_corp", 9),
            ("TX", "llc", 0),
        ],
    )
    def test_known_pairs(self, state, entity_type, expected):
        assert lookup_fee(state, entity_type) == expected

    @pytest.mark.parametrize(
        "state,entity_type",
        [("WY", "llc"), ("DE", "nonprofit"), ("", "llc"), (None, None)],
    )
    def test_unknown_pair_costs_nothing(self, state, entity_type):
        assert lookup_fee(state, entity_type) == 0

    def test_state_code_is_case_insensitive(self):
        assert lookup_fee("de", "llc") == 300
        assert state_name(" fl ") == "Florida"
        assert state_name("ZZ") is None


class TestDirectorRule:
    """Independent director requirement."""

    @pytest.mark.parametrize("entity_type", ["c_corp", "s_corp"])
    def test_delaware_corporations_need_a_director(self, entity_type):
        assert is_director_required("DE", entity_type) is True

    @pytest.mark.parametrize(
        "state,entity_type",
        [("DE", "llc"), ("DE", "partnership"), ("CA", "c_corp"), ("", "s_corp"), (None, "c_corp")],
    )
    def test_everything_else_does_not(self, state, entity_type):
        assert is_director_required(state, entity_type) is False


class TestFeeSchedule:
    """Month-indexed fee schedule projection."""

    def test_delaware_corp_gets_director_line(self):
        entity = make_entity(type="c_corp", independent_director_fee=2500)
        schedule = project_fee_schedule([entity], FeePlacement(), year=2026)

        kinds = [item.kind for item in schedule.line_items]
        assert kinds == ["renewal", "independent_director"]

        director = schedule.line_items[1]
        assert director.total == 2500
        assert director.months[0] == 2500
        assert schedule.month_totals[0] == 2500
        # renewal in March
        assert schedule.month_totals[2] == 175
        assert schedule.grand_total == 2675
        assert schedule.year == 2026

    def test_director_line_only_in_delaware(self):
        entity = make_entity(state="CA", type="c_corp", independent_director_fee=2500)
        schedule = project_fee_schedule([entity], FeePlacement())
        assert [item.kind for item in schedule.line_items] == ["renewal"]

    def test_agent_line_when_fee_is_positive(self):
        entity = make_entity(registered_agent_fee=150)
        schedule = project_fee_schedule([entity], FeePlacement(agent_month=6))

        agent = next(i for i in schedule.line_items if i.kind == "registered_agent")
        assert agent.months[5] == 150
        assert schedule.grand_total == 450

    def test_use_due_dates_places_by_month(self):
        entity = make_entity(
            registered_agent_fee=100,
            registered_agent_fee_due_date=date(2026, 9, 15),
        )
        schedule = project_fee_schedule([entity], FeePlacement(use_due_dates=True))

        renewal, agent = schedule.line_items
        # renewal follows the formation month
        assert renewal.months[4] == 300
        assert agent.months[8] == 100

    def test_use_due_dates_falls_back_to_fixed_month(self):
        entity = make_entity(registered_agent_fee=100)
        schedule = project_fee_schedule([entity], FeePlacement(agent_month=2, use_due_dates=True))
        agent = schedule.line_items[1]
        assert agent.months[1] == 100

    def test_empty_schedule(self):
        schedule = project_fee_schedule([], FeePlacement())
        assert schedule.line_items == []
        assert schedule.month_totals == [0.0] * 12
        assert schedule.grand_total == 0

    @pytest.mark.parametrize("month", [0, 13])
    def test_placement_rejects_bad_month(self, month):
        with pytest.raises(ValueError):
            FeePlacement(renewal_month=month)


class TestDashboardMetrics:
    """Owner dashboard fee totals."""

    def test_annual_entity_fees_is_sum_of_lookups(self):
        entities = [
            make_entity(id="a", state="DE", type="llc"),
            make_entity(id="b", state="CA", type="c_corp"),
            make_entity(id="c", state="WY", type="llc"),
        ]
        metrics = dashboard_fee_metrics(entities, [])

        assert metrics.annual_entity_fees == sum(lookup_fee(e.state, e.type) for e in entities)
        assert metrics.annual_entity_fees == 325
        assert metrics.delaware_entities == 1
        assert metrics.avg_entity_fee == 108

    def test_service_and_pending_totals(self):
        entities = [make_entity(registered_agent_fee=100, independent_director_fee=50)]
        payments = [
            SimpleNamespace(amount=300, status="pending"),
            SimpleNamespace(amount=200, status="scheduled"),
            SimpleNamespace(amount=999, status="paid"),
        ]
        metrics = dashboard_fee_metrics(entities, payments)

        assert metrics.annual_service_fees == 150
        assert metrics.pending_payments == 500

    def test_no_entities(self):
        metrics = dashboard_fee_metrics([], [])
        assert metrics.total_entities == 0
        assert metrics.avg_entity_fee == 0
