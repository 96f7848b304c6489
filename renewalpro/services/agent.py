"""Registered-agent service: public directory and the agent's own profile."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.config import settings
from renewalpro.core.exceptions import ConflictError, NotFoundError
from renewalpro.dependencies import RequestContext
from renewalpro.domain.agent import Agent
from renewalpro.repositories.agent import AgentRepository
from renewalpro.repositories.profile import ProfileRepository
from renewalpro.schemas.agent import AgentProfileCreate, AgentProfileUpdate
from renewalpro.services.cache import CacheRegistry

logger = logging.getLogger(__name__)


class AgentService:
    def __init__(
        self, session: AsyncSession, ctx: RequestContext, cache: CacheRegistry | None = None
    ):
        self._session = session
        self._ctx = ctx
        self._cache = cache
        self._repo = AgentRepository(session)
        self._profiles = ProfileRepository(session)

    async def directory(
        self,
        *,
        state: str | None = None,
        max_price: float | None = None,
        min_experience: int | None = None,
        available_only: bool = True,
    ) -> list[Agent]:
        agents = await self._repo.search(
            max_price=max_price, min_experience=min_experience, available_only=available_only
        )
        if state:
            # JSON array column; matched here so every backend behaves the same
            wanted = state.strip().upper()
            agents = [a for a in agents if wanted in (a.states or [])]
        return agents

    async def _changed(self) -> None:
        """Commit, then drop the admin listing so it reloads with this change."""
        if self._cache is None:
            return
        await self._session.commit()
        await self._cache.invalidate("admin", "agents")

    async def get_agent(self, agent_id: str) -> Agent:
        agent = await self._repo.get_by_id(agent_id)
        if not agent:
            raise NotFoundError("Agent", agent_id)
        return agent

    async def my_profile(self) -> Agent:
        agent = await self._repo.get_by_user(self._ctx.user_id)
        if agent is None:
            raise NotFoundError("Agent profile")
        return agent

    async def create_profile(self, data: AgentProfileCreate) -> Agent:
        if await self._repo.get_by_user(self._ctx.user_id) is not None:
            raise ConflictError("You already have an agent profile")

        values = data.model_dump(exclude_none=True)
        values.setdefault("price_per_entity", settings.default_agent_price)
        agent = await self._repo.create(user_id=self._ctx.user_id, **values)

        profile = await self._profiles.get_by_user(self._ctx.user_id)
        if profile is not None:
            await self._profiles.update(profile.id, user_type="registered_agent")
        else:
            await self._profiles.create(
                user_id=self._ctx.user_id,
                email=data.contact_email,
                user_type="registered_agent",
            )
        await self._changed()
        logger.info("Agent profile %s created for user %s", agent.id, self._ctx.user_id)
        return agent

    async def update_profile(self, data: AgentProfileUpdate) -> Agent:
        agent = await self.my_profile()
        updated = await self._repo.update(
            agent.id, **data.model_dump(exclude_none=True, exclude_unset=True)
        )
        await self._changed()
        return updated  # type: ignore[return-value]

    async def set_availability(self, is_available: bool) -> Agent:
        agent = await self.my_profile()
        updated = await self._repo.update(agent.id, is_available=is_available)
        await self._changed()
        logger.info("Agent %s availability set to %s", agent.id, is_available)
        return updated  # type: ignore[return-value]
