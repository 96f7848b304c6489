"""Shared FastAPI dependencies: request context and the admin guard.

Authentication itself is handled by the auth gateway in front of this
service; it forwards the verified user id in ``X-User-Id``.  The selected team
travels in ``X-Team-Id`` and is passed explicitly to every service call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.exceptions import ForbiddenError, UnauthorizedError
from renewalpro.db.base import get_db
from renewalpro.repositories.profile import ProfileRepository, RoleAssignmentRepository
from renewalpro.services.access import Principal, has_admin_access


@dataclass(frozen=True)
class RequestContext:
    user_id: str
    team_id: Optional[str] = None


async def get_context(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    x_team_id: Optional[str] = Header(default=None, alias="X-Team-Id"),
) -> RequestContext:
    if not x_user_id:
        raise UnauthorizedError()
    return RequestContext(user_id=x_user_id, team_id=x_team_id or None)


async def load_principal(session: AsyncSession, user_id: str) -> Optional[Principal]:
    """Build the policy principal from the stored profile and role grants."""
    profile = await ProfileRepository(session).get_by_user(user_id)
    if profile is None:
        return None
    roles = await RoleAssignmentRepository(session).roles_for(user_id)
    return Principal(
        user_id=user_id,
        user_type=profile.user_type,
        is_admin=has_admin_access(profile.is_admin, roles),
        suspended=profile.account_status == "suspended",
    )


async def require_admin(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
) -> RequestContext:
    """Reject the request unless the caller holds admin access right now."""
    principal = await load_principal(session, ctx.user_id)
    if principal is None or principal.suspended or not principal.is_admin:
        raise ForbiddenError("Admin access required")
    return ctx
