"""Agent invitation lifecycle.

An entity owner invites a registered agent (by email) to serve one entity.
The agent accepts or declines; acceptance opens an ``accepted`` assignment at
the agent's current price.  Pending invitations past ``expires_at`` are moved
to ``expired`` the next time they are read or answered.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.config import settings
from renewalpro.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from renewalpro.dependencies import RequestContext
from renewalpro.domain.agent import Agent, AgentInvitation, EntityAgentAssignment
from renewalpro.domain.mixins import as_utc
from renewalpro.repositories.agent import (
    AgentInvitationRepository,
    AgentRepository,
    AssignmentRepository,
)
from renewalpro.repositories.entity import EntityRepository
from renewalpro.schemas.agent import (
    AgentInvitationCreate,
    AgentInvitationMetricsOut,
    AgentInvitationResponse,
)

logger = logging.getLogger(__name__)


def is_expired(invitation: AgentInvitation, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return invitation.status == "pending" and as_utc(invitation.expires_at) < now


class AgentInvitationService:
    def __init__(self, session: AsyncSession, ctx: RequestContext):
        self._session = session
        self._ctx = ctx
        # Owner view: invitations sent by the caller
        self._sent = AgentInvitationRepository(session, ctx.user_id)
        # Agent view: invitations addressed to the caller, from any owner
        self._received = AgentInvitationRepository(session)
        self._agents = AgentRepository(session)
        self._entities = EntityRepository(session, ctx.user_id)

    async def _expire_stale(self, invitations: list[AgentInvitation]) -> list[AgentInvitation]:
        now = datetime.now(timezone.utc)
        for invitation in invitations:
            if is_expired(invitation, now):
                await self._received.update(invitation.id, status="expired")
        return invitations

    async def _my_agent(self) -> Agent:
        agent = await self._agents.get_by_user(self._ctx.user_id)
        if agent is None:
            raise ForbiddenError("Only registered agents can respond to invitations")
        return agent

    # ------------------------------------------------------------------
    # Owner side
    # ------------------------------------------------------------------

    async def sent(self) -> list[AgentInvitation]:
        return await self._expire_stale(await self._sent.list_all())

    async def send(self, data: AgentInvitationCreate) -> AgentInvitation:
        entity = await self._entities.get_by_id(data.entity_id)
        if entity is None:
            raise NotFoundError("Entity", data.entity_id)

        email = data.agent_email.strip().lower()
        agent = await self._agents.get_by_email(email)
        invitation = await self._sent.create(
            entity_id=entity.id,
            agent_email=email,
            agent_id=agent.id if agent else None,
            token=secrets.token_urlsafe(32),
            status="pending",
            expires_at=datetime.now(timezone.utc) + timedelta(days=settings.invitation_ttl_days),
            message=data.message,
        )
        logger.info(
            "User %s invited agent %s for entity %s", self._ctx.user_id, email, entity.id
        )
        return invitation

    async def unsend(self, invitation_id: str) -> AgentInvitation:
        invitation = await self._sent.get_by_id(invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation", invitation_id)
        if invitation.status != "pending":
            raise ValidationError("Only pending invitations can be unsent")
        updated = await self._sent.update(invitation_id, status="unsent")
        return updated  # type: ignore[return-value]

    async def metrics(self) -> AgentInvitationMetricsOut:
        invitations = await self.sent()
        by_status: dict[str, int] = {}
        for invitation in invitations:
            by_status[invitation.status] = by_status.get(invitation.status, 0) + 1
        assignments = await AssignmentRepository(self._session).for_owner(self._ctx.user_id)
        return AgentInvitationMetricsOut(
            total_sent=len(invitations),
            pending_count=by_status.get("pending", 0),
            accepted_count=by_status.get("accepted", 0),
            declined_count=by_status.get("declined", 0),
            unsent_count=by_status.get("unsent", 0),
            entities_with_agents=len({a.entity_id for a in assignments if a.status == "accepted"}),
        )

    async def owner_assignments(self) -> list[EntityAgentAssignment]:
        return await AssignmentRepository(self._session).for_owner(self._ctx.user_id)

    async def terminate(self, assignment_id: str) -> EntityAgentAssignment:
        assignments = await self.owner_assignments()
        assignment = next((a for a in assignments if a.id == assignment_id), None)
        if assignment is None:
            raise NotFoundError("Assignment", assignment_id)
        if assignment.status == "terminated":
            raise ValidationError("Assignment is already terminated")
        updated = await AssignmentRepository(self._session).update(
            assignment_id, status="terminated", terminated_at=datetime.now(timezone.utc)
        )
        logger.info("Assignment %s terminated by user %s", assignment_id, self._ctx.user_id)
        return updated  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Agent side
    # ------------------------------------------------------------------

    async def received(self) -> list[AgentInvitation]:
        agent = await self._my_agent()
        return await self._expire_stale(
            await self._received.for_agent(agent.id, agent.contact_email)
        )

    async def get_by_token(self, token: str) -> AgentInvitation:
        invitation = await self._received.get_by_token(token)
        if invitation is None:
            raise NotFoundError("Invitation")
        await self._expire_stale([invitation])
        return invitation

    async def respond(self, data: AgentInvitationResponse) -> AgentInvitation:
        agent = await self._my_agent()
        invitation = await self.get_by_token(data.token)

        addressed = invitation.agent_id == agent.id or (
            agent.contact_email is not None
            and invitation.agent_email == agent.contact_email.lower()
        )
        if not addressed:
            raise ForbiddenError("This invitation was sent to a different agent")
        if invitation.status == "expired":
            # keep the expiry even though the request fails
            await self._session.commit()
            raise ValidationError("This invitation has expired")
        if invitation.status != "pending":
            raise ConflictError(f"Invitation is already {invitation.status}")

        if data.response == "accepted":
            assignments = AssignmentRepository(self._session)
            if await assignments.active_for_entity(invitation.entity_id) is not None:
                raise ConflictError("This entity already has an active registered agent")
            await assignments.create(
                entity_id=invitation.entity_id,
                agent_id=agent.id,
                status="accepted",
                agreed_fee=agent.price_per_entity,
                assigned_at=datetime.now(timezone.utc),
            )

        updated = await self._received.update(
            invitation.id, status=data.response, agent_id=agent.id
        )
        logger.info("Agent %s %s invitation %s", agent.id, data.response, invitation.id)
        return updated  # type: ignore[return-value]

    async def my_assignments(self) -> list[EntityAgentAssignment]:
        agent = await self._my_agent()
        return await AssignmentRepository(self._session, agent.id).list_all()
