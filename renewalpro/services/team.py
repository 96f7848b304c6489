"""Team service: teams, memberships and email invitations.

Only owners and admins of a team manage its members.  The owner membership is
created with the team and can be neither demoted nor removed.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.config import settings
from renewalpro.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from renewalpro.dependencies import RequestContext
from renewalpro.domain.mixins import as_utc
from renewalpro.domain.team import MANAGER_ROLES, Team, TeamInvitation, TeamMembership
from renewalpro.repositories.profile import ProfileRepository
from renewalpro.repositories.team import (
    TeamInvitationRepository,
    TeamMembershipRepository,
    TeamRepository,
)
from renewalpro.schemas.team import InvitationAccept, MemberRoleUpdate, TeamCreate, TeamInviteCreate

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(self, session: AsyncSession, ctx: RequestContext):
        self._session = session
        self._ctx = ctx
        self._teams = TeamRepository(session)
        self._members = TeamMembershipRepository(session)
        self._invitations = TeamInvitationRepository(session)
        self._profiles = ProfileRepository(session)

    async def _membership(self, team_id: str) -> TeamMembership:
        membership = await self._members.find(team_id, self._ctx.user_id)
        if membership is None:
            raise NotFoundError("Team", team_id)
        return membership

    async def _require_manager(self, team_id: str) -> TeamMembership:
        membership = await self._membership(team_id)
        if membership.role not in MANAGER_ROLES:
            raise ForbiddenError("Only team owners and admins can manage members")
        return membership

    async def _member(self, team_id: str, member_id: str) -> TeamMembership:
        member = await self._members.get_by_id(member_id)
        if member is None or member.team_id != team_id:
            raise NotFoundError("Team member", member_id)
        return member

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    async def my_memberships(self) -> list[TeamMembership]:
        return await self._members.for_user(self._ctx.user_id)

    async def get_team(self, team_id: str) -> Team:
        membership = await self._membership(team_id)
        return membership.team

    async def create_team(self, data: TeamCreate) -> Team:
        team = await self._teams.create(
            name=data.name, description=data.description, created_by=self._ctx.user_id
        )
        await self._members.create(team_id=team.id, user_id=self._ctx.user_id, role="owner")
        logger.info("Team %s created by user %s", team.id, self._ctx.user_id)
        return team

    async def list_members(self, team_id: str) -> list[TeamMembership]:
        await self._membership(team_id)
        return await self._members.for_team(team_id)

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------

    async def invite(self, team_id: str, data: TeamInviteCreate) -> TeamInvitation:
        await self._require_manager(team_id)
        email = data.email.strip().lower()
        for pending in await self._invitations.pending_for_email(email):
            if pending.team_id == team_id:
                raise ConflictError(f"{email} already has a pending invitation to this team")

        invitation = await self._invitations.create(
            team_id=team_id,
            email=email,
            role=data.role,
            token=secrets.token_urlsafe(32),
            invited_by=self._ctx.user_id,
            expires_at=datetime.now(timezone.utc) + timedelta(days=settings.invitation_ttl_days),
        )
        logger.info("User %s invited %s to team %s", self._ctx.user_id, email, team_id)
        return invitation

    async def list_invitations(self, team_id: str) -> list[TeamInvitation]:
        await self._require_manager(team_id)
        return await self._invitations.list_all(filters={"team_id": team_id})

    async def revoke_invitation(self, team_id: str, invitation_id: str) -> None:
        await self._require_manager(team_id)
        invitation = await self._invitations.get_by_id(invitation_id)
        if invitation is None or invitation.team_id != team_id:
            raise NotFoundError("Invitation", invitation_id)
        await self._invitations.soft_delete(invitation_id)

    async def my_invitations(self) -> list[TeamInvitation]:
        profile = await self._profiles.get_by_user(self._ctx.user_id)
        if profile is None or not profile.email:
            return []
        return await self._invitations.pending_for_email(profile.email.lower())

    async def accept_invitation(self, data: InvitationAccept) -> TeamMembership:
        invitation = await self._invitations.get_by_token(data.token)
        if invitation is None or invitation.accepted_at is not None:
            raise NotFoundError("Invitation")
        now = datetime.now(timezone.utc)
        if as_utc(invitation.expires_at) < now:
            raise ValidationError("This invitation has expired")

        profile = await self._profiles.get_by_user(self._ctx.user_id)
        if profile is not None and profile.email and profile.email.lower() != invitation.email:
            raise ForbiddenError("This invitation was sent to a different email address")
        if await self._members.find(invitation.team_id, self._ctx.user_id) is not None:
            raise ConflictError("You are already a member of this team")

        await self._invitations.update(invitation.id, accepted_at=now)
        membership = await self._members.create(
            team_id=invitation.team_id, user_id=self._ctx.user_id, role=invitation.role
        )
        await self._session.refresh(membership, ["team"])
        logger.info("User %s joined team %s", self._ctx.user_id, invitation.team_id)
        return membership

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    async def update_role(
        self, team_id: str, member_id: str, data: MemberRoleUpdate
    ) -> TeamMembership:
        await self._require_manager(team_id)
        member = await self._member(team_id, member_id)
        if member.role == "owner":
            raise ForbiddenError("The team owner's role cannot be changed")
        updated = await self._members.update(member_id, role=data.role)
        return updated  # type: ignore[return-value]

    async def remove_member(self, team_id: str, member_id: str) -> None:
        member = await self._member(team_id, member_id)
        if member.user_id != self._ctx.user_id:
            await self._require_manager(team_id)
        if member.role == "owner":
            raise ForbiddenError("The team owner cannot be removed")
        await self._members.hard_delete(member_id)
        logger.info("Member %s removed from team %s by %s", member.user_id, team_id, self._ctx.user_id)
