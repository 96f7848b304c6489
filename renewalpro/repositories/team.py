"""Team, membership and team-invitation repositories.

Teams are not owned by a single user, so these repositories run unscoped and
expose explicit membership queries instead.
"""

from __future__ import annotations

from sqlalchemy import select

from renewalpro.domain.team import Team, TeamInvitation, TeamMembership
from renewalpro.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    model = Team


class TeamMembershipRepository(BaseRepository[TeamMembership]):
    model = TeamMembership

    async def for_user(self, user_id: str) -> list[TeamMembership]:
        return await self.list_all(filters={"user_id": user_id}, order="asc")

    async def for_team(self, team_id: str) -> list[TeamMembership]:
        return await self.list_all(filters={"team_id": team_id}, order="asc")

    async def find(self, team_id: str, user_id: str) -> TeamMembership | None:
        result = await self._session.execute(
            self._base_query()
            .where(TeamMembership.team_id == team_id)
            .where(TeamMembership.user_id == user_id)
        )
        return result.scalars().first()


class TeamInvitationRepository(BaseRepository[TeamInvitation]):
    model = TeamInvitation

    async def get_by_token(self, token: str) -> TeamInvitation | None:
        result = await self._session.execute(
            select(TeamInvitation)
            .where(TeamInvitation.token == token)
            .where(TeamInvitation.deleted_at.is_(None))
        )
        return result.scalars().first()

    async def pending_for_email(self, email: str) -> list[TeamInvitation]:
        result = await self._session.execute(
            self._base_query()
            .where(TeamInvitation.email == email)
            .where(TeamInvitation.accepted_at.is_(None))
            .order_by(TeamInvitation.created_at.desc())
        )
        return list(result.scalars().all())
