"""Pre-aggregated analytics procedures.

Each method runs aggregate SQL and returns a list holding a single row dict,
the same contract as the platform's analytics RPCs: callers take element 0 and
treat an empty list as "no data".
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.domain.entity import Entity
from renewalpro.domain.payment import Invoice, Payment
from renewalpro.domain.profile import Profile, Subscription
from renewalpro.domain.tiers import get_tier

Row = dict[str, Any]


def _pct(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


class AnalyticsRepository:
    """Unscoped, read-only aggregate queries for the admin dashboard."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _scalar(self, stmt) -> Any:
        return (await self._session.execute(stmt)).scalar_one()

    async def user_analytics(self, now: datetime | None = None) -> list[Row]:
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(days=30)
        live = Profile.deleted_at.is_(None)

        total = await self._scalar(select(func.count(Profile.id)).where(live))
        new_30d = await self._scalar(
            select(func.count(Profile.id)).where(live).where(Profile.created_at >= since)
        )
        active = await self._scalar(
            select(func.count(Profile.id)).where(live).where(Profile.account_status == "active")
        )
        paid, trials = (await self._session.execute(
            select(
                func.coalesce(func.sum(case(
                    (Subscription.subscribed.is_(True) & Subscription.is_trial.is_(False), 1),
                    else_=0,
                )), 0),
                func.coalesce(func.sum(case((Subscription.is_trial.is_(True), 1), else_=0)), 0),
            )
        )).one()

        return [{
            "total_users": total,
            "new_users_30d": new_30d,
            "user_growth_rate_30d": _pct(new_30d, total - new_30d),
            "retention_rate": _pct(active, total),
            "trial_conversion_rate": _pct(paid, paid + trials),
        }]

    async def entity_analytics(self, now: datetime | None = None) -> list[Row]:
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(days=30)
        live = Entity.deleted_at.is_(None)

        total = await self._scalar(select(func.count(Entity.id)).where(live))
        created_30d = await self._scalar(
            select(func.count(Entity.id)).where(live).where(Entity.created_at >= since)
        )
        owners = await self._scalar(select(func.count(func.distinct(Entity.user_id))).where(live))

        by_state_rows = (await self._session.execute(
            select(Entity.state, func.count(Entity.id))
            .where(live)
            .group_by(Entity.state)
            .order_by(func.count(Entity.id).desc(), Entity.state)
        )).all()
        by_type_rows = (await self._session.execute(
            select(Entity.type, func.count(Entity.id))
            .where(live)
            .group_by(Entity.type)
            .order_by(func.count(Entity.id).desc(), Entity.type)
        )).all()

        return [{
            "total_entities": total,
            "entity_creation_rate_30d": created_30d,
            "avg_entities_per_customer": round(total / owners, 2) if owners else 0.0,
            "most_popular_entity_type": by_type_rows[0][0] if by_type_rows else None,
            "most_popular_state": by_state_rows[0][0] if by_state_rows else None,
            "entities_by_state": {state: count for state, count in by_state_rows},
            "entities_by_type": {etype: count for etype, count in by_type_rows},
        }]

    async def financial_analytics(self, now: datetime | None = None) -> list[Row]:
        now = now or datetime.now(timezone.utc)
        last_30 = now - timedelta(days=30)
        prev_30 = now - timedelta(days=60)

        total_revenue = await self._scalar(select(func.coalesce(func.sum(Invoice.amount_paid), 0)))
        recent = await self._scalar(
            select(func.coalesce(func.sum(Invoice.amount_paid), 0))
            .where(Invoice.paid_at >= last_30)
        )
        previous = await self._scalar(
            select(func.coalesce(func.sum(Invoice.amount_paid), 0))
            .where(Invoice.paid_at >= prev_30)
            .where(Invoice.paid_at < last_30)
        )

        tier_rows = (await self._session.execute(
            select(Subscription.subscription_tier, func.count(Subscription.id))
            .where(Subscription.subscribed.is_(True))
            .where(Subscription.is_trial.is_(False))
            .group_by(Subscription.subscription_tier)
        )).all()
        subscribers = sum(count for _, count in tier_rows)
        # Minor units, like invoice amounts
        mrr = sum(get_tier(tier).monthly_price * 100 * count for tier, count in tier_rows)

        return [{
            "total_revenue": total_revenue,
            "mrr": mrr,
            "arpu": round(mrr / subscribers) if subscribers else 0,
            "revenue_growth_rate": _pct(recent - previous, previous),
            "active_subscriptions": subscribers,
        }]

    async def system_stats(self) -> list[Row]:
        return [{
            "total_users": await self._scalar(
                select(func.count(Profile.id)).where(Profile.deleted_at.is_(None))
            ),
            "total_entities": await self._scalar(
                select(func.count(Entity.id)).where(Entity.deleted_at.is_(None))
            ),
            "total_payments": await self._scalar(
                select(func.count(Payment.id)).where(Payment.deleted_at.is_(None))
            ),
            "total_revenue": await self._scalar(
                select(func.coalesce(func.sum(Invoice.amount_paid), 0))
            ),
        }]
