"""Team, membership and invitation schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from renewalpro.schemas.common import CamelModel

AssignableRole = Literal["admin", "manager", "member"]


class TeamCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class TeamOut(CamelModel):
    id: str
    name: str
    description: str | None = None
    created_by: str
    created_at: datetime


class MembershipOut(CamelModel):
    id: str
    team_id: str
    user_id: str
    role: str
    team: TeamOut | None = None
    created_at: datetime


class TeamInviteCreate(CamelModel):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: AssignableRole = "member"


class TeamInvitationOut(CamelModel):
    id: str
    team_id: str
    email: str
    role: str
    token: str
    expires_at: datetime
    accepted_at: datetime | None = None


class InvitationAccept(CamelModel):
    token: str = Field(min_length=1)


class MemberRoleUpdate(CamelModel):
    role: AssignableRole
