"""Profile, subscription and role-assignment repositories (keyed by auth user id)."""

from __future__ import annotations

from sqlalchemy import delete, select

from renewalpro.domain.profile import Profile, RoleAssignment, Subscription
from renewalpro.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    model = Profile

    async def get_by_user(self, user_id: str) -> Profile | None:
        result = await self._session.execute(
            select(Profile).where(Profile.user_id == user_id).where(Profile.deleted_at.is_(None))
        )
        return result.scalars().first()


class SubscriptionRepository(BaseRepository[Subscription]):
    model = Subscription

    async def get_by_user(self, user_id: str) -> Subscription | None:
        result = await self._session.execute(
            select(Subscription).where(Subscription.user_id == user_id)
        )
        return result.scalars().first()


class RoleAssignmentRepository(BaseRepository[RoleAssignment]):
    model = RoleAssignment

    async def roles_for(self, user_id: str) -> list[str]:
        result = await self._session.execute(
            select(RoleAssignment.role)
            .where(RoleAssignment.user_id == user_id)
            .where(RoleAssignment.deleted_at.is_(None))
        )
        return list(result.scalars().all())

    async def remove(self, user_id: str, role: str) -> bool:
        result = await self._session.execute(
            delete(RoleAssignment)
            .where(RoleAssignment.user_id == user_id)
            .where(RoleAssignment.role == role)
        )
        await self._session.flush()
        return result.rowcount > 0
