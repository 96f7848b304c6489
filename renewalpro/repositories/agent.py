"""Agent marketplace repositories."""

from __future__ import annotations

from sqlalchemy import func, select

from renewalpro.domain.agent import Agent, AgentInvitation, EntityAgentAssignment
from renewalpro.domain.entity import Entity
from renewalpro.repositories.base import BaseRepository


class AgentRepository(BaseRepository[Agent]):
    model = Agent

    async def get_by_user(self, user_id: str) -> Agent | None:
        result = await self._session.execute(
            self._base_query().where(Agent.user_id == user_id)
        )
        return result.scalars().first()

    async def get_by_email(self, email: str) -> Agent | None:
        result = await self._session.execute(
            self._base_query().where(func.lower(Agent.contact_email) == email.strip().lower())
        )
        return result.scalars().first()

    async def search(
        self,
        *,
        max_price: float | None = None,
        min_experience: int | None = None,
        available_only: bool = False,
    ) -> list[Agent]:
        q = self._base_query()
        if max_price is not None:
            q = q.where(Agent.price_per_entity <= max_price)
        if min_experience is not None:
            q = q.where(Agent.years_experience >= min_experience)
        if available_only:
            q = q.where(Agent.is_available.is_(True))
        q = q.order_by(Agent.created_at.desc())
        return list((await self._session.execute(q)).scalars().all())


class AgentInvitationRepository(BaseRepository[AgentInvitation]):
    model = AgentInvitation
    owner_column = "entity_owner_id"

    async def get_by_token(self, token: str) -> AgentInvitation | None:
        result = await self._session.execute(
            self._base_query().where(AgentInvitation.token == token)
        )
        return result.scalars().first()

    async def for_agent(self, agent_id: str, email: str | None) -> list[AgentInvitation]:
        """Invitations addressed to an agent either by profile id or by email."""
        cond = AgentInvitation.agent_id == agent_id
        if email:
            cond = cond | (func.lower(AgentInvitation.agent_email) == email.strip().lower())
        result = await self._session.execute(
            self._base_query().where(cond).order_by(AgentInvitation.created_at.desc())
        )
        return list(result.scalars().all())


class AssignmentRepository(BaseRepository[EntityAgentAssignment]):
    model = EntityAgentAssignment
    owner_column = "agent_id"

    async def for_owner(self, owner_id: str) -> list[EntityAgentAssignment]:
        """Assignments on entities owned by ``owner_id``."""
        result = await self._session.execute(
            select(EntityAgentAssignment)
            .join(Entity, Entity.id == EntityAgentAssignment.entity_id)
            .where(Entity.user_id == owner_id)
            .where(EntityAgentAssignment.deleted_at.is_(None))
            .order_by(EntityAgentAssignment.created_at.desc())
        )
        return list(result.scalars().unique().all())

    async def active_for_entity(self, entity_id: str) -> EntityAgentAssignment | None:
        result = await self._session.execute(
            self._base_query()
            .where(EntityAgentAssignment.entity_id == entity_id)
            .where(EntityAgentAssignment.status == "accepted")
        )
        return result.scalars().first()
