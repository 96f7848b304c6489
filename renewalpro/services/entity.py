"""Entity service: the owner's entity portfolio, limits, dashboard metrics and fee schedule."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.exceptions import EntityLimitError, ForbiddenError, NotFoundError
from renewalpro.dependencies import RequestContext
from renewalpro.domain.entity import Entity
from renewalpro.domain.tiers import get_tier, next_tier
from renewalpro.repositories.entity import EntityRepository
from renewalpro.repositories.payment import PaymentRepository
from renewalpro.repositories.profile import SubscriptionRepository
from renewalpro.repositories.team import TeamMembershipRepository
from renewalpro.schemas.entity import EntityCreate, EntityLimitsOut, EntityUpdate
from renewalpro.services.fees import (
    FeeMetrics,
    FeePlacement,
    FeeSchedule,
    dashboard_fee_metrics,
    project_fee_schedule,
)
from renewalpro.services.metrics import search

logger = logging.getLogger(__name__)

ENTITY_SEARCH_FIELDS = ("name", "state", "type")
NEAR_LIMIT_PCT = 80


class EntityService:
    def __init__(self, session: AsyncSession, ctx: RequestContext):
        self._ctx = ctx
        self._repo = EntityRepository(session, ctx.user_id)
        self._payments = PaymentRepository(session, ctx.user_id)
        self._subscriptions = SubscriptionRepository(session)
        self._memberships = TeamMembershipRepository(session)

    async def _team_scope(self) -> str | None:
        """The selected team, after checking the caller actually belongs to it."""
        team_id = self._ctx.team_id
        if team_id is None:
            return None
        if await self._memberships.find(team_id, self._ctx.user_id) is None:
            raise ForbiddenError("You are not a member of the selected team")
        return team_id

    async def list_entities(self, query: str | None = None) -> list[Entity]:
        entities = await self._repo.list_visible(await self._team_scope())
        return search(entities, query, ENTITY_SEARCH_FIELDS)

    async def get_entity(self, entity_id: str) -> Entity:
        entity = await self._repo.get_by_id(entity_id)
        if not entity:
            raise NotFoundError("Entity", entity_id)
        return entity

    # ------------------------------------------------------------------
    # Limits
    # ------------------------------------------------------------------

    async def limits(self) -> EntityLimitsOut:
        subscription = await self._subscriptions.get_by_user(self._ctx.user_id)
        tier_id = subscription.subscription_tier if subscription else None
        tier = get_tier(tier_id)
        maximum = tier.entities
        if subscription is not None and subscription.subscribed and subscription.entities_limit:
            maximum = subscription.entities_limit
        current = await self._repo.count()
        upgrade = next_tier(tier.id)

        if maximum is None:
            pct, at_limit = 0.0, False
        else:
            pct = round(current / maximum * 100, 1) if maximum else 100.0
            at_limit = current >= maximum
        return EntityLimitsOut(
            current_entities=current,
            max_entities=maximum,
            percentage_used=pct,
            is_near_limit=pct >= NEAR_LIMIT_PCT,
            is_at_limit=at_limit,
            can_add_more=not at_limit,
            next_tier=upgrade.id if upgrade else None,
            next_tier_price=upgrade.monthly_price if upgrade else None,
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create_entity(self, data: EntityCreate) -> Entity:
        limits = await self.limits()
        if limits.is_at_limit:
            logger.info(
                "User %s hit entity limit (%s/%s)",
                self._ctx.user_id, limits.current_entities, limits.max_entities,
            )
            raise EntityLimitError(limits.current_entities, limits.max_entities or 0)
        if data.team_id is not None and await self._memberships.find(
            data.team_id, self._ctx.user_id
        ) is None:
            raise ForbiddenError("You are not a member of that team")

        entity = await self._repo.create(**data.model_dump(exclude_none=True))
        logger.info("Entity %s created for user %s", entity.id, self._ctx.user_id)
        return entity

    async def update_entity(self, entity_id: str, data: EntityUpdate) -> Entity:
        _ = await self.get_entity(entity_id)  # raises 404 if missing
        updated = await self._repo.update(
            entity_id, **data.model_dump(exclude_none=True, exclude_unset=True)
        )
        return updated  # type: ignore[return-value]

    async def delete_entity(self, entity_id: str) -> None:
        deleted = await self._repo.soft_delete(entity_id)
        if not deleted:
            raise NotFoundError("Entity", entity_id)
        logger.info("Entity %s deleted by user %s", entity_id, self._ctx.user_id)

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    async def dashboard_metrics(self) -> FeeMetrics:
        entities = await self._repo.list_visible(await self._team_scope())
        payments = await self._payments.list_all()
        return dashboard_fee_metrics(entities, payments)

    async def fee_schedule(self, placement: FeePlacement, year: int | None = None) -> FeeSchedule:
        entities = await self._repo.list_visible(await self._team_scope())
        return project_fee_schedule(entities, placement, year)
